# This project was developed with assistance from AI tools.
"""Tests for the analytics service layer (in-memory store)."""

from datetime import UTC, date, datetime

import pytest
from lossrun_analytics.core.config import AppEntry
from lossrun_analytics.core.registry import AppRegistry
from lossrun_analytics.errors import BatchNotFoundError
from lossrun_analytics.services import analytics
from lossrun_analytics.services.params import resolve_query
from lossrun_db import (
    BatchDetail,
    DailySystemHealth,
    MappingFailure,
    ProductBreakdown,
    UserActivity,
    UserDashboard,
)

TODAY = date(2026, 10, 17)
APP_ID = "loss-run-intelligence"


@pytest.fixture
def registry():
    return AppRegistry(
        [
            AppEntry(app_id=APP_ID, app_name="Loss Run Intelligence", database="TM-LOSSRUN"),
            AppEntry(app_id="claims-intake", app_name="Claims Intake", status="coming_soon"),
        ]
    )


def _query(registry, **params):
    return resolve_query(registry, APP_ID, params, TODAY, max_limit=1000)


# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------


class TestListApps:
    async def test_active_app_has_stats(self, store, registry):
        store.add(UserActivity, username="alice", batch_ids=["b1", "b2"])
        store.add(UserActivity, username="bob", batch_ids=["b3"])
        store.add(UserActivity, username="carol", batch_ids=None)
        store.add(DailySystemHealth, date="2026-10-17", total_batches=5)

        result = await analytics.list_apps(store, registry, TODAY)

        active, coming = result.apps
        assert active.stats.model_dump() == {"total_users": 3, "active_today": 5, "total_batches": 3}
        assert coming.stats is None
        assert coming.status == "coming_soon"

    async def test_no_record_today_means_zero_active(self, store, registry):
        store.add(DailySystemHealth, date="2026-10-16", total_batches=5)
        result = await analytics.list_apps(store, registry, TODAY)
        assert result.apps[0].stats.active_today == 0


# ---------------------------------------------------------------------------
# System health
# ---------------------------------------------------------------------------


class TestSystemHealth:
    async def test_missing_current_record_is_zero_valued(self, store, registry):
        store.add(DailySystemHealth, date="2026-10-14", total_batches=2, match_rate=80)

        result = await analytics.get_system_health(store, _query(registry))

        assert result.app_id == APP_ID
        assert result.current.date == "2026-10-17"
        assert result.current.total_batches == 0
        assert result.current.match_rate == 0.0
        assert [p.date for p in result.trend] == ["2026-10-14"]

    async def test_trend_is_ascending_and_bounded(self, store, registry):
        for day in ("2026-10-17", "2026-10-09", "2026-10-10", "2026-10-12"):
            store.add(DailySystemHealth, date=day, total_batches=1)

        result = await analytics.get_system_health(store, _query(registry))

        assert [p.date for p in result.trend] == ["2026-10-10", "2026-10-12", "2026-10-17"]
        assert result.current.total_batches == 1

    async def test_days_zero_includes_only_reference_date_onwards(self, store, registry):
        store.add(DailySystemHealth, date="2026-10-16", total_batches=1)
        store.add(DailySystemHealth, date="2026-10-17", total_batches=2)
        result = await analytics.get_system_health(store, _query(registry, days="0"))
        assert [p.date for p in result.trend] == ["2026-10-17"]

    async def test_weekly_bucket(self, store, registry):
        store.add(DailySystemHealth, date="2026-10-09", total_batches=2, match_rate=50)
        store.add(DailySystemHealth, date="2026-10-12", total_batches=1, match_rate=60)
        store.add(DailySystemHealth, date="2026-10-13", total_batches=3, match_rate=100)

        result = await analytics.get_system_health(store, _query(registry, days="14", bucket="week"))

        assert [p.date for p in result.trend] == ["2026-10-05", "2026-10-12"]
        assert result.trend[1].total_batches == 4
        assert result.trend[1].match_rate == 90.0


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class TestUsers:
    async def test_sorted_descending_with_nulls_last(self, store, registry):
        store.add(UserDashboard, username="a", total_policies=5)
        store.add(UserDashboard, username="b", total_policies=None)
        store.add(UserDashboard, username="c", total_policies=9)
        store.add(UserDashboard, username="d", total_policies=5)

        result = await analytics.get_users(store, _query(registry, sort="policies"))

        assert [u.username for u in result.users] == ["c", "a", "d", "b"]
        assert result.total_count == 4

    async def test_limit_does_not_change_total(self, store, registry):
        for i in range(5):
            store.add(UserDashboard, username=f"u{i}", total_batches=i)
        result = await analytics.get_users(store, _query(registry, limit="2"))
        assert [u.username for u in result.users] == ["u4", "u3"]
        assert result.total_count == 5

    async def test_organization_filter(self, store, registry):
        store.add(UserDashboard, username="a", organization="acme")
        store.add(UserDashboard, username="b", organization="globex")
        result = await analytics.get_users(store, _query(registry, organization="globex"))
        assert [u.username for u in result.users] == ["b"]
        assert result.total_count == 1


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


def _add_batches(store, n):
    for i in range(n):
        store.add(
            BatchDetail,
            batch_id=f"b{i:02d}",
            username="alice" if i % 2 == 0 else "bob",
            status="completed",
            date="2026-10-17",
            timestamp=datetime(2026, 10, 1, tzinfo=UTC).replace(hour=0, minute=i),
        )


class TestBatches:
    async def test_pagination_metadata(self, store, registry):
        _add_batches(store, 23)

        result = await analytics.get_batches(store, _query(registry, limit="5", skip="10"))

        assert result.total_count == 23
        assert result.page == 3
        assert result.pages == 5
        # Newest first
        assert [b.batch_id for b in result.batches] == ["b12", "b11", "b10", "b09", "b08"]

    async def test_filters_apply_to_total(self, store, registry):
        _add_batches(store, 5)
        result = await analytics.get_batches(store, _query(registry, user="bob"))
        assert {b.username for b in result.batches} == {"bob"}
        assert result.total_count == 2
        assert result.pages == 1

    async def test_empty_result(self, store, registry):
        result = await analytics.get_batches(store, _query(registry))
        assert result.batches == []
        assert (result.total_count, result.page, result.pages) == (0, 1, 0)

    async def test_missing_timestamp_sorts_last(self, store, registry):
        store.add(BatchDetail, batch_id="undated", timestamp=None)
        _add_batches(store, 2)
        result = await analytics.get_batches(store, _query(registry))
        assert [b.batch_id for b in result.batches] == ["b01", "b00", "undated"]

    async def test_detail(self, store):
        store.add(BatchDetail, batch_id="b-1", policies=[{"appnum": "A", "stats": {"products": ["GL"]}}])
        detail = await analytics.get_batch_detail(store, "b-1")
        assert detail.batch_id == "b-1"
        assert detail.policies[0].products == ["GL"]

    async def test_detail_not_found(self, store):
        with pytest.raises(BatchNotFoundError):
            await analytics.get_batch_detail(store, "missing")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


def _add_failure(store, raw_lob, carrier, incurred, reason=None, date_="2026-10-17"):
    return store.add(
        MappingFailure,
        raw_lob=raw_lob,
        carrier=carrier,
        incurred=incurred,
        unmatched_reason=reason,
        date=date_,
    )


class TestFailures:
    async def test_lob_mode(self, store, registry):
        _add_failure(store, "A", "Acme", 100, "r1")
        _add_failure(store, "B", "Beta", 50, "r2")
        _add_failure(store, "B", "Acme", 25, "r3")

        result = await analytics.get_failures(store, _query(registry))

        assert result.group_by == "lob"
        assert result.summary.model_dump() == {
            "total_unmatched": 3,
            "total_unmapped_value": 175.0,
            "unique_lob_codes": 2,
        }
        assert [(g.lob_code, g.failure_count, g.common_reason) for g in result.by_lob] == [
            ("B", 2, "r2"),
            ("A", 1, "r1"),
        ]

    async def test_summary_covers_groups_beyond_the_top_twenty(self, store, registry):
        for i in range(25):
            _add_failure(store, f"L{i:02d}", "Acme", 1)

        result = await analytics.get_failures(store, _query(registry, group_by="lob"))

        assert len(result.by_lob) == 20
        assert result.summary.total_unmatched == 25
        assert result.summary.unique_lob_codes == 25
        assert result.summary.total_unmapped_value == 25.0

    async def test_carrier_mode(self, store, registry):
        _add_failure(store, "GL", "Acme", 10)
        _add_failure(store, "AU", "Acme", 20)
        _add_failure(store, "GL", "Beta", 5)

        result = await analytics.get_failures(store, _query(registry, group_by="carrier"))

        assert result.group_by == "carrier"
        acme, beta = result.by_carrier
        assert (acme.carrier, acme.failure_count, acme.total_incurred) == ("Acme", 2, 30.0)
        assert acme.lob_codes == ["GL", "AU"]
        assert acme.unique_lob_codes == 2
        assert beta.lob_codes == ["GL"]

    async def test_individual_mode_threshold_and_order(self, store, registry):
        _add_failure(store, "GL", "Acme", 500, date_="2026-10-16")
        _add_failure(store, "GL", "Acme", 2000, date_="2026-10-16")
        _add_failure(store, "GL", "Acme", 1000, date_="2026-10-17")
        _add_failure(store, "GL", "Acme", None, date_="2026-10-17")

        result = await analytics.get_failures(
            store, _query(registry, group_by="none", min_incurred="1000")
        )

        assert result.group_by == "none"
        assert [(f.date, f.incurred) for f in result.failures] == [
            ("2026-10-17", 1000.0),
            ("2026-10-16", 2000.0),
        ]
        assert result.total_count == 2

    async def test_unknown_group_by_lists_rows(self, store, registry):
        _add_failure(store, "GL", "Acme", 1)
        result = await analytics.get_failures(store, _query(registry, group_by="product", limit="10"))
        assert result.group_by == "none"
        assert result.total_count == 1

    async def test_idempotent(self, store, registry):
        _add_failure(store, "A", "Acme", 1.005, "r")
        _add_failure(store, "B", "Beta", 2, "s")
        query = _query(registry)
        first = await analytics.get_failures(store, query)
        second = await analytics.get_failures(store, query)
        assert first.model_dump() == second.model_dump()


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


async def test_products_sorted_by_policies(store):
    store.add(ProductBreakdown, product="GL", policies_count=10, batches_count=2)
    store.add(ProductBreakdown, product="AU", policies_count=30, batches_count=None)
    store.add(ProductBreakdown, product="WC", policies_count=10, batches_count=1)

    result = await analytics.get_products(store)

    assert [(p.product, p.policies_count, p.batches_count) for p in result.products] == [
        ("AU", 30, 0),
        ("GL", 10, 2),
        ("WC", 10, 1),
    ]
