# This project was developed with assistance from AI tools.
"""Display formatting for dashboard values.

The API returns raw numbers; these are the shared rendering rules that
clients (the dashboard and the live smoke script) apply to them, so the
same metric reads the same everywhere. Every function accepts ``None``
and NaN without raising.
"""

import math
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Context, Decimal

_TENTH = Decimal("0.1")
_WIDE = Context(prec=400)


def _is_blank(value) -> bool:
    """True for None, 0, NaN, and anything that is not a number."""
    if value is None or isinstance(value, bool):
        return True
    if not isinstance(value, (int, float)):
        return True
    return value == 0 or math.isnan(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_time(seconds) -> str:
    """Seconds as ``"Xm Ys"``, or ``"Ys"`` when under a minute.

    >>> format_time(125)
    '2m 5s'
    >>> format_time(45)
    '45s'
    """
    if _is_blank(seconds) or math.isinf(seconds):
        return "0s"
    minutes = math.floor(seconds / 60)
    secs = _round_half_up(seconds % 60)
    if minutes == 0:
        return f"{secs}s"
    return f"{minutes}m {secs}s"


def format_percent(value) -> str:
    """A 0-100 rate with exactly one fractional digit.

    Exact halves of the stored binary value round away from zero, so
    45.25 renders as ``"45.3%"``.
    """
    if _is_blank(value) or math.isinf(value):
        return "0%"
    tenths = Decimal(value).quantize(_TENTH, rounding=ROUND_HALF_UP, context=_WIDE)
    return f"{tenths}%"


def format_number(num) -> str:
    """Thousands-separated, with at most three fractional digits."""
    if _is_blank(num) or math.isinf(num):
        return "0"
    if isinstance(num, int) or float(num).is_integer():
        return f"{int(num):,}"
    text = f"{num:,.3f}".rstrip("0").rstrip(".")
    return text


_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _parse(date_str: str) -> datetime:
    parsed = datetime.fromisoformat(date_str.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_date(date_str: str) -> str:
    """``"2026-10-17"`` -> ``"Oct 17, 2026"``."""
    parsed = _parse(date_str)
    return f"{_MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def format_relative_time(date_str: str, now: datetime | None = None) -> str:
    """Hours or days ago for the past week, otherwise the calendar date."""
    now = now or datetime.now(UTC)
    elapsed = now - _parse(date_str)
    hours = math.floor(elapsed.total_seconds() / 3600)
    days = math.floor(hours / 24)

    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    return format_date(date_str)
