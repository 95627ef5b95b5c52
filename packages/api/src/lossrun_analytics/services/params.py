# This project was developed with assistance from AI tools.
"""Query parameter resolution.

Turns the raw, string-typed query parameters of an analytics request into a
canonical ``QueryDescriptor``. Malformed or missing optional parameters are
never an error: they are replaced by documented defaults. The only failure
is an unknown application id.

Numeric parsing is prefix-based (``"25abc"`` -> 25, ``"3.9"`` -> 3 for
integers) so that dashboard links built by hand keep working.
"""

import enum
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta

from ..core.config import AppEntry, settings
from ..core.registry import AppRegistry

DEFAULT_DAYS = 7
DEFAULT_LIMIT = 50
DEFAULT_SKIP = 0

SORT_FIELDS: dict[str, str] = {
    "batches": "total_batches",
    "policies": "total_policies",
    "last_active": "last_activity",
}
DEFAULT_SORT_FIELD = "total_batches"

# Parameters that become equality filters when present and non-empty.
FILTER_PARAMS = ("user", "date", "status", "organization")

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class GroupBy(str, enum.Enum):
    LOB = "lob"
    CARRIER = "carrier"
    NONE = "none"


class TrendBucket(str, enum.Enum):
    DAY = "day"
    WEEK = "week"


@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO date bounds; ``end=None`` means unbounded above."""

    start: str
    end: str | None = None


@dataclass(frozen=True)
class QueryDescriptor:
    app: AppEntry
    reference_date: date
    date_range: DateRange
    sort_key: str = DEFAULT_SORT_FIELD
    limit: int = DEFAULT_LIMIT
    skip: int = DEFAULT_SKIP
    filters: dict[str, str] = field(default_factory=dict)
    group_by: GroupBy = GroupBy.LOB
    min_incurred: float = 0.0
    bucket: TrendBucket = TrendBucket.DAY


def parse_int(raw: str | None, default: int, *, minimum: int | None = None) -> int:
    """Parse a leading integer; fall back to ``default`` if absent, malformed or below ``minimum``."""
    if raw is None:
        return default
    match = _INT_PREFIX.match(raw)
    if match is None:
        return default
    value = int(match.group(1))
    if minimum is not None and value < minimum:
        return default
    return value


def parse_float(raw: str | None, default: float) -> float:
    """Parse a leading float; fall back to ``default`` if absent or malformed."""
    if raw is None:
        return default
    match = _FLOAT_PREFIX.match(raw)
    if match is None:
        return default
    return float(match.group(1))


def parse_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        return None


def resolve_sort(raw: str | None) -> str:
    if raw is None:
        return DEFAULT_SORT_FIELD
    return SORT_FIELDS.get(raw, DEFAULT_SORT_FIELD)


def resolve_group_by(raw: str | None) -> GroupBy:
    if raw is None or raw == "":
        return GroupBy.LOB
    if raw == GroupBy.LOB.value:
        return GroupBy.LOB
    if raw == GroupBy.CARRIER.value:
        return GroupBy.CARRIER
    return GroupBy.NONE


def resolve_bucket(raw: str | None) -> TrendBucket:
    if raw == TrendBucket.WEEK.value:
        return TrendBucket.WEEK
    return TrendBucket.DAY


def resolve_query(
    registry: AppRegistry,
    app_id: str,
    params: Mapping[str, str | None],
    today: date,
    max_limit: int | None = None,
) -> QueryDescriptor:
    """Validate ``app_id`` and normalize ``params`` into a QueryDescriptor.

    Args:
        registry: Known applications.
        app_id: Application id from the request path.
        params: Raw query parameters (values are strings or None).
        today: Reference "today"; used when ``params['date']`` is missing or invalid.
        max_limit: Upper bound for ``limit``. Defaults to settings.MAX_QUERY_LIMIT.

    Raises:
        AppNotFoundError: if ``app_id`` is not registered.
    """
    app = registry.get(app_id)
    max_limit = settings.MAX_QUERY_LIMIT if max_limit is None else max_limit

    days = parse_int(params.get("days"), DEFAULT_DAYS, minimum=0)
    limit = min(parse_int(params.get("limit"), DEFAULT_LIMIT, minimum=1), max_limit)
    skip = parse_int(params.get("skip"), DEFAULT_SKIP, minimum=0)

    reference = parse_date(params.get("date")) or today
    start = reference - timedelta(days=days)

    filters: dict[str, str] = {}
    for name in FILTER_PARAMS:
        value = params.get(name)
        if value is not None and value.strip() != "":
            filters[name] = value

    return QueryDescriptor(
        app=app,
        reference_date=reference,
        date_range=DateRange(start=start.isoformat()),
        sort_key=resolve_sort(params.get("sort")),
        limit=limit,
        skip=skip,
        filters=filters,
        group_by=resolve_group_by(params.get("group_by")),
        min_incurred=parse_float(params.get("min_incurred"), 0.0),
        bucket=resolve_bucket(params.get("bucket")),
    )
