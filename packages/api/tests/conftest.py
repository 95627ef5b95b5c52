# This project was developed with assistance from AI tools.
"""Shared fixtures for the analytics API tests.

``InMemoryStore`` stands in for ``AnalyticsRepository``: it keeps read-model
instances in lists and answers the same find/count/aggregate calls with the
same ordering rules (NULLs lowest, ascending id as the final tie-break).
The real app from ``lossrun_analytics.main`` is a module singleton, so
``_clean_overrides`` clears dependency overrides after every test.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from lossrun_analytics.core.clock import get_today
from lossrun_analytics.main import app as real_app
from lossrun_analytics.services.aggregation import FAILURE_GROUP_LIMIT, group_failures, null_safe
from lossrun_analytics.services.filters import MATCH_ALL, field_value
from lossrun_analytics.services.repository import get_repository
from lossrun_db import MappingFailure

TODAY = date(2026, 10, 17)


def _ordering_key(value):
    # None sorts below every value
    return (value is not None, value)


class InMemoryStore:
    """List-backed implementation of the repository interface."""

    def __init__(self):
        self._tables: dict[type, list] = {}
        self._next_id = 1

    def add(self, model, **fields):
        """Create and store a transient ``model`` instance; returns it."""
        fields.setdefault("id", self._next_id)
        self._next_id = max(self._next_id, fields["id"]) + 1
        record = model(**fields)
        self._tables.setdefault(model, []).append(record)
        return record

    def _rows(self, model, predicate):
        rows = sorted(self._tables.get(model, []), key=lambda r: r.id)
        return [r for r in rows if predicate.matches(r)]

    async def find(self, model, predicate=MATCH_ALL, *, sort=(), skip=0, limit=None):
        rows = self._rows(model, predicate)
        # Stable sorts applied from the least significant key
        for name, descending in reversed(list(sort)):
            rows.sort(key=lambda r: _ordering_key(field_value(r, name)), reverse=descending)
        rows = rows[skip:]
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def find_one(self, model, predicate):
        rows = await self.find(model, predicate, limit=1)
        return rows[0] if rows else None

    async def group_failures(self, group_by, limit=FAILURE_GROUP_LIMIT):
        return group_failures(self._rows(MappingFailure, MATCH_ALL), group_by, limit)

    async def count(self, model, predicate=MATCH_ALL):
        return len(self._rows(model, predicate))

    async def total(self, model, field, predicate=MATCH_ALL):
        return sum(null_safe(field_value(r, field)) for r in self._rows(model, predicate))

    async def count_distinct(self, model, field):
        values = {field_value(r, field) for r in self._rows(model, MATCH_ALL)}
        values.discard(None)
        return len(values)

    async def sum_array_lengths(self, model, field):
        return sum(len(field_value(r, field) or []) for r in self._rows(model, MATCH_ALL))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture(autouse=True)
def _clean_overrides():
    """Clear app dependency overrides after each test."""
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def app():
    """Return the real FastAPI app with all routers mounted."""
    return real_app


@pytest.fixture
def client(app, store):
    """TestClient over the in-memory store with ``today`` pinned.

    The lifespan is not entered, so no store connection is attempted.
    """
    app.dependency_overrides[get_repository] = lambda: store
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)
