# This project was developed with assistance from AI tools.
"""Aggregation engine for the analytics read models.

Pure functions over iterables of records (ORM rows, SQLAlchemy ``Row``
objects or mappings). Nothing here touches the store or mutates the input;
given the same rows in the same order the output is identical.

"Natural order" below means the order in which the store returned the
rows, which the repository pins to ascending primary key.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from .filters import field_value
from .params import GroupBy

logger = logging.getLogger(__name__)

FAILURE_GROUP_LIMIT = 20

# group_by mode -> (grouping field, field whose distinct values are collected)
FAILURE_GROUPINGS: dict[GroupBy, tuple[str, str]] = {
    GroupBy.LOB: ("raw_lob", "carrier"),
    GroupBy.CARRIER: ("carrier", "raw_lob"),
}


def null_safe(value: Any) -> float:
    """Numeric value of ``value`` for summation; None, NaN, infinities and non-numbers count as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


@dataclass
class FailureGroup:
    """Rollup of mapping failures sharing one grouping value.

    ``total_incurred`` is the raw sum; rounding happens when the group is
    shaped into a response.
    """

    key: str | None
    failure_count: int = 0
    total_incurred: float = 0.0
    members: list[str] = field(default_factory=list)
    common_reason: str | None = None
    _incurred: list[float] = field(default_factory=list, repr=False)
    _seen: set[str] = field(default_factory=set, repr=False)

    def add(self, row: Any, member_field: str) -> None:
        self.failure_count += 1
        self._incurred.append(null_safe(field_value(row, "incurred")))
        member = field_value(row, member_field)
        if member is not None and member not in self._seen:
            self._seen.add(member)
            self.members.append(member)

    def close(self) -> "FailureGroup":
        self.total_incurred = math.fsum(self._incurred)
        return self


def group_failures(
    rows: Iterable[Any],
    group_by: GroupBy,
    limit: int = FAILURE_GROUP_LIMIT,
) -> list[FailureGroup]:
    """Group mapping failures by LOB code or carrier.

    Per group: row count, null-safe incurred total, distinct member values
    (carriers when grouping by LOB, LOB codes when grouping by carrier) in
    first-seen order, and ``common_reason`` -- the unmatched_reason of the
    first row of the group in natural order, not the most frequent one.

    Groups are ordered by failure_count descending; equal counts keep the
    order in which each group first appeared. At most ``limit`` groups are
    returned.
    """
    if group_by not in FAILURE_GROUPINGS:
        raise ValueError(f"Cannot group failures by '{group_by.value}'")
    key_field, member_field = FAILURE_GROUPINGS[group_by]

    groups: dict[Any, FailureGroup] = {}
    for row in rows:
        key = field_value(row, key_field)
        group = groups.get(key)
        if group is None:
            group = FailureGroup(key=key, common_reason=field_value(row, "unmatched_reason"))
            groups[key] = group
        group.add(row, member_field)

    # sorted() is stable, so ties stay in first-appearance order
    ordered = sorted(groups.values(), key=lambda g: g.failure_count, reverse=True)
    return [group.close() for group in ordered[:limit]]


@dataclass
class WeeklyTrend:
    """Daily health records rolled up into one ISO week (Monday start)."""

    week_start: str
    total_batches: float = 0.0
    total_policies: float = 0.0
    _weighted: dict[str, float] = field(
        default_factory=lambda: {"avg_processing_time": 0.0, "match_rate": 0.0, "success_rate": 0.0},
        repr=False,
    )

    def add(self, record: Any) -> None:
        weight = null_safe(field_value(record, "total_batches"))
        self.total_batches += weight
        self.total_policies += null_safe(field_value(record, "total_policies"))
        for name in self._weighted:
            self._weighted[name] += null_safe(field_value(record, name)) * weight

    def weighted_average(self, name: str) -> float:
        if self.total_batches <= 0:
            return 0.0
        return self._weighted[name] / self.total_batches

    @property
    def avg_processing_time(self) -> float:
        return self.weighted_average("avg_processing_time")

    @property
    def match_rate(self) -> float:
        return self.weighted_average("match_rate")

    @property
    def success_rate(self) -> float:
        return self.weighted_average("success_rate")


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def rollup_trend_by_week(records: Iterable[Any]) -> list[WeeklyTrend]:
    """Roll daily health records up into ISO weeks, ascending by week.

    Batch and policy counts are summed; processing time and rates are
    averaged weighted by each day's total_batches. Records whose date is not
    an ISO date are skipped.
    """
    weeks: dict[date, WeeklyTrend] = {}
    for record in records:
        raw_date = field_value(record, "date")
        try:
            day = date.fromisoformat(raw_date)
        except (TypeError, ValueError):
            logger.warning("Skipping health record with invalid date %r", raw_date)
            continue
        start = week_start(day)
        bucket = weeks.get(start)
        if bucket is None:
            bucket = weeks[start] = WeeklyTrend(week_start=start.isoformat())
        bucket.add(record)
    return [weeks[start] for start in sorted(weeks)]
