# This project was developed with assistance from AI tools.
"""Domain errors raised by the analytics layer.

Route handlers never build error responses themselves; they raise one of
these and the exception handlers in ``main.py`` render the envelope.
"""

from collections.abc import Iterator
from contextlib import contextmanager


class AnalyticsError(Exception):
    """Base class for errors the dispatcher knows how to render."""

    status_code = 500

    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error


class NotFoundError(AnalyticsError):
    """An identifier in the request path does not resolve to anything."""

    status_code = 404


class AppNotFoundError(NotFoundError):
    def __init__(self, app_id: str) -> None:
        super().__init__("App not found")
        self.app_id = app_id


class BatchNotFoundError(NotFoundError):
    def __init__(self, batch_id: str) -> None:
        super().__init__("Batch not found")
        self.batch_id = batch_id


class QueryFailedError(AnalyticsError):
    """Unexpected failure while executing a query (store error, bad data).

    ``error`` is the public label (e.g. "Failed to fetch batches"); the
    original exception is kept as ``__cause__`` and only surfaced in
    development mode.
    """

    status_code = 500


@contextmanager
def query_failure(label: str) -> Iterator[None]:
    """Re-raise anything unexpected inside the block as QueryFailedError(label).

    Errors the dispatcher already renders (not-found and friends) pass
    through unchanged.
    """
    try:
        yield
    except AnalyticsError:
        raise
    except Exception as exc:
        raise QueryFailedError(label) from exc
