# This project was developed with assistance from AI tools.
"""Wall-clock dependencies.

Routes take "today" and "now" through these so the aggregation layer never
reads the clock itself; tests override them for reproducible results.
"""

from datetime import UTC, date, datetime


def get_now() -> datetime:
    return datetime.now(UTC)


def get_today() -> date:
    """Current UTC calendar date."""
    return get_now().date()
