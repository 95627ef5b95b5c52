# This project was developed with assistance from AI tools.
"""Tests for the error envelope, exception handlers and the liveness probe."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from lossrun_analytics.core.config import settings
from lossrun_analytics.core.registry import get_app_registry
from lossrun_analytics.errors import AppNotFoundError, QueryFailedError, query_failure
from lossrun_analytics.services.repository import get_repository

PREFIX = "/api/analytics"
APP = f"{PREFIX}/apps/loss-run-intelligence"


@pytest.fixture
def broken_store():
    """Repository whose every call fails like a dropped connection."""
    repo = MagicMock()
    failure = ConnectionError("connection reset by peer")
    for name in (
        "find",
        "find_one",
        "group_failures",
        "count",
        "total",
        "count_distinct",
        "sum_array_lengths",
    ):
        setattr(repo, name, AsyncMock(side_effect=failure))
    return repo


@pytest.fixture
def broken_client(app, client, broken_store):
    app.dependency_overrides[get_repository] = lambda: broken_store
    return client


class TestQueryFailure:
    def test_wraps_unexpected_errors(self):
        with pytest.raises(QueryFailedError) as exc_info:
            with query_failure("Failed to fetch users"):
                raise KeyError("x")
        assert exc_info.value.error == "Failed to fetch users"
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_passes_domain_errors_through(self):
        with pytest.raises(AppNotFoundError):
            with query_failure("Failed to fetch users"):
                raise AppNotFoundError("x")


class TestStoreFailures:
    @pytest.mark.parametrize(
        "path,label",
        [
            ("/system-health", "Failed to fetch system health"),
            ("/users", "Failed to fetch users"),
            ("/batches", "Failed to fetch batches"),
            ("/batches/b-1", "Failed to fetch batch detail"),
            ("/failures", "Failed to fetch failures"),
            ("/products", "Failed to fetch products"),
        ],
    )
    def test_500_with_label(self, broken_client, path, label):
        resp = broken_client.get(f"{APP}{path}")
        assert resp.status_code == 500
        assert resp.json() == {"error": label}

    def test_apps_failure(self, broken_client):
        resp = broken_client.get(f"{PREFIX}/apps")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch apps"}

    def test_development_mode_exposes_message(self, broken_client, monkeypatch):
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")
        resp = broken_client.get(f"{APP}/users")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch users", "message": "connection reset by peer"}

    def test_unknown_app_still_404_when_store_is_down(self, broken_client):
        resp = broken_client.get(f"{PREFIX}/apps/nope/users")
        assert resp.status_code == 404


class TestRouting:
    def test_unknown_path(self, client):
        resp = client.get("/api/analytics/nothing-here")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Endpoint not found"}

    def test_wrong_method_is_endpoint_not_found(self, client):
        resp = client.post(f"{APP}/users")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Endpoint not found"}


def test_unhandled_exception_is_generic_500(app, client):
    # Bypasses query_failure by failing inside a dependency
    def broken_registry():
        raise RuntimeError("registry unavailable")

    app.dependency_overrides[get_app_registry] = broken_registry
    resp = TestClient(app, raise_server_exceptions=False).get(f"{APP}/users")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


class TestHealth:
    def test_connected(self, app, client):
        db_service = MagicMock()
        db_service.ping = AsyncMock(return_value=True)
        app.state.db_service = db_service
        try:
            resp = client.get("/health")
        finally:
            del app.state.db_service
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["database"] == "connected"
        assert "timestamp" in body

    def test_disconnected_without_store(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["database"] == "disconnected"

    def test_ping_failure_reports_disconnected(self, app, client):
        db_service = MagicMock()
        db_service.ping = AsyncMock(return_value=False)
        app.state.db_service = db_service
        try:
            resp = client.get("/health")
        finally:
            del app.state.db_service
        assert resp.json()["database"] == "disconnected"

