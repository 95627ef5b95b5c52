# This project was developed with assistance from AI tools.
"""Result shaper: store records and aggregates -> response schemas.

Every public field set is built explicitly here so store-internal columns
(surrogate ids, write-side bookkeeping) never reach a response. Missing
counts become 0, missing product lists become [], rates are clamped to
[0, 100] and currency values are rounded half-up to cents.
"""

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

from ..schemas.analytics import (
    BatchDetailResponse,
    BatchRow,
    BatchSummary,
    CarrierFailureGroup,
    FailureRow,
    FailureSummary,
    HealthRecord,
    LobFailureGroup,
    PolicyRow,
    ProductRow,
    TrendPoint,
    UserRow,
)
from .aggregation import FailureGroup, WeeklyTrend, null_safe
from .filters import field_value

# Enough digits to quantize any finite float (up to ~1.8e308) to cents
_WIDE = Context(prec=400)


def round_half_up(value: Any, places: int = 2) -> float:
    """Round half-up (not banker's rounding) to ``places`` decimals; None/NaN -> 0.0."""
    amount = Decimal(repr(null_safe(value)))
    return float(amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP, context=_WIDE))


def round_currency(value: Any) -> float:
    return round_half_up(value, 2)


def as_count(value: Any) -> int:
    return int(null_safe(value))


def as_rate(value: Any) -> float:
    """Percentage in [0, 100]; absent -> 0."""
    return min(max(null_safe(value), 0.0), 100.0)


def as_seconds(value: Any) -> float:
    return null_safe(value)


def as_list(value: Any) -> list:
    if value is None:
        return []
    return list(value)


def as_text(value: Any) -> str | None:
    """Identifiers read from JSON documents may have been written as numbers."""
    if value is None:
        return None
    return str(value)


def as_text_list(value: Any) -> list[str]:
    return [as_text(item) for item in as_list(value) if item is not None]


def paginate(total_count: int, limit: int, skip: int) -> tuple[int, int]:
    """Return ``(page, pages)`` for an offset/limit window.

    ``page = skip // limit + 1`` and ``pages = ceil(total_count / limit)``,
    so ``pages`` is 0 for an empty result.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    page = skip // limit + 1
    pages = math.ceil(total_count / limit) if total_count > 0 else 0
    return page, pages


# ---------------------------------------------------------------------------
# System health
# ---------------------------------------------------------------------------


def zero_health_record(day: str) -> HealthRecord:
    """Placeholder returned when no health record exists for ``day``."""
    return HealthRecord(date=day)


def shape_health_record(record: Any | None, day: str) -> HealthRecord:
    if record is None:
        return zero_health_record(day)
    return HealthRecord(
        date=field_value(record, "date") or day,
        total_batches=as_count(field_value(record, "total_batches")),
        total_policies=as_count(field_value(record, "total_policies")),
        total_claims=as_count(field_value(record, "total_claims")),
        matched_claims=as_count(field_value(record, "matched_claims")),
        unmatched_claims=as_count(field_value(record, "unmatched_claims")),
        match_rate=as_rate(field_value(record, "match_rate")),
        avg_processing_time=as_seconds(field_value(record, "avg_processing_time")),
        success_rate=as_rate(field_value(record, "success_rate")),
    )


def shape_trend_point(record: Any) -> TrendPoint:
    return TrendPoint(
        date=field_value(record, "date"),
        total_batches=as_count(field_value(record, "total_batches")),
        total_policies=as_count(field_value(record, "total_policies")),
        avg_processing_time=as_seconds(field_value(record, "avg_processing_time")),
        match_rate=as_rate(field_value(record, "match_rate")),
        success_rate=as_rate(field_value(record, "success_rate")),
    )


def shape_weekly_point(week: WeeklyTrend) -> TrendPoint:
    return TrendPoint(
        date=week.week_start,
        total_batches=as_count(week.total_batches),
        total_policies=as_count(week.total_policies),
        avg_processing_time=round_half_up(week.avg_processing_time),
        match_rate=as_rate(round_half_up(week.match_rate)),
        success_rate=as_rate(round_half_up(week.success_rate)),
    )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def shape_user(record: Any) -> UserRow:
    return UserRow(
        username=record.username,
        organization=record.organization,
        total_batches=as_count(record.total_batches),
        total_policies=as_count(record.total_policies),
        total_claims_raw=as_count(record.total_claims_raw),
        matched_claims=as_count(record.matched_claims),
        match_rate=as_rate(record.match_rate),
        avg_processing_time=as_seconds(record.avg_processing_time_seconds),
        first_request=record.first_activity,
        last_request=record.last_activity,
    )


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


def shape_batch_row(batch: Any) -> BatchRow:
    return BatchRow(
        batch_id=batch.batch_id,
        username=batch.username,
        organization=batch.organization,
        timestamp=batch.timestamp,
        date=batch.date,
        policy_count=as_count(batch.policy_count),
        pdf_count=as_count(batch.pdf_count),
        total_claims=as_count(batch.total_claims),
        matched_claims=as_count(batch.matched_claims),
        unmatched_claims=as_count(batch.unmatched_claims),
        match_rate=as_rate(batch.match_rate),
        avg_processing_time=as_seconds(batch.avg_processing_time),
        status=batch.status,
        products=as_text_list(batch.products),
    )


def _as_optional_seconds(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if math.isfinite(seconds) else None


def shape_policy(policy: dict[str, Any]) -> PolicyRow:
    """Flatten an embedded policy document.

    Products live under ``stats.products``; processing time under
    ``timing.duration_seconds``. A missing or non-numeric timing value
    leaves ``processing_time`` unset rather than 0. ``appnum``, ``status``
    and product names are passed through as text whatever JSON type they
    were written with.
    """
    stats = policy.get("stats")
    if not isinstance(stats, dict):
        stats = {}
    timing = policy.get("timing")
    processing_time = None
    if isinstance(timing, dict):
        processing_time = _as_optional_seconds(timing.get("duration_seconds"))
    return PolicyRow(
        appnum=as_text(policy.get("appnum")),
        status=as_text(policy.get("status")),
        stats=stats,
        products=as_text_list(stats.get("products")),
        processing_time=processing_time,
    )


def shape_batch_detail(batch: Any) -> BatchDetailResponse:
    return BatchDetailResponse(
        batch_id=batch.batch_id,
        username=batch.username,
        organization=batch.organization,
        timestamp=batch.timestamp,
        date=batch.date,
        status=batch.status,
        summary=BatchSummary(
            policy_count=as_count(batch.policy_count),
            pdf_count=as_count(batch.pdf_count),
            total_claims=as_count(batch.total_claims),
            matched_claims=as_count(batch.matched_claims),
            unmatched_claims=as_count(batch.unmatched_claims),
            match_rate=as_rate(batch.match_rate),
            avg_processing_time=as_seconds(batch.avg_processing_time),
        ),
        products=as_text_list(batch.products),
        policies=[shape_policy(p) for p in as_list(batch.policies) if isinstance(p, dict)],
    )


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def shape_failure_summary(total: int, value: Any, unique_lobs: int) -> FailureSummary:
    return FailureSummary(
        total_unmatched=total,
        total_unmapped_value=round_currency(value),
        unique_lob_codes=unique_lobs,
    )


def shape_lob_group(group: FailureGroup) -> LobFailureGroup:
    return LobFailureGroup(
        lob_code=group.key,
        failure_count=group.failure_count,
        total_incurred=round_currency(group.total_incurred),
        affected_carriers=list(group.members),
        common_reason=group.common_reason,
    )


def shape_carrier_group(group: FailureGroup) -> CarrierFailureGroup:
    return CarrierFailureGroup(
        carrier=group.key,
        failure_count=group.failure_count,
        total_incurred=round_currency(group.total_incurred),
        unique_lob_codes=len(group.members),
        lob_codes=list(group.members),
    )


def shape_failure_row(failure: Any) -> FailureRow:
    return FailureRow(
        loss_number=failure.loss_number,
        batch_id=failure.batch_id,
        appnum=failure.appnum,
        date=failure.date,
        raw_lob=failure.raw_lob,
        description=failure.description,
        incurred=round_currency(failure.incurred),
        carrier=failure.carrier,
        unmatched_reason=failure.unmatched_reason,
        date_of_loss=failure.date_of_loss,
    )


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def shape_product(record: Any) -> ProductRow:
    return ProductRow(
        product=record.product,
        policies_count=as_count(record.policies_count),
        batches_count=as_count(record.batches_count),
    )
