# This project was developed with assistance from AI tools.
"""Analytics service for the loss run dashboard.

One coroutine per endpoint: build the predicate, run the store lookups
(concurrently where they are independent), aggregate, and shape the
response. All functions are read-only and deterministic for a given
QueryDescriptor and store state.
"""

import asyncio
from datetime import date

from lossrun_db import (
    BatchDetail,
    DailySystemHealth,
    MappingFailure,
    ProductBreakdown,
    UserActivity,
    UserDashboard,
)

from ..core.registry import AppRegistry
from ..errors import BatchNotFoundError
from ..schemas.analytics import (
    AppListResponse,
    AppStats,
    AppSummary,
    BatchDetailResponse,
    BatchListResponse,
    CarrierFailuresResponse,
    FailureListResponse,
    LobFailuresResponse,
    ProductListResponse,
    SystemHealthResponse,
    UserListResponse,
)
from .aggregation import rollup_trend_by_week
from .filters import Predicate, build_filter, date_range_filter, threshold_filter
from .params import GroupBy, QueryDescriptor, TrendBucket
from .repository import AnalyticsRepository
from .shaping import (
    as_count,
    paginate,
    shape_batch_detail,
    shape_batch_row,
    shape_carrier_group,
    shape_failure_row,
    shape_failure_summary,
    shape_health_record,
    shape_lob_group,
    shape_product,
    shape_trend_point,
    shape_user,
    shape_weekly_point,
)

USER_FILTER_PARAMS = ("organization",)
BATCH_FILTER_PARAMS = ("user", "date", "status", "organization")


async def list_apps(
    repo: AnalyticsRepository,
    registry: AppRegistry,
    today: date,
) -> AppListResponse:
    """All registered apps; active ones carry quick stats.

    Args:
        repo: Store access.
        registry: Known applications.
        today: Reference date for ``active_today``.
    """
    apps: list[AppSummary] = []
    for entry in registry:
        stats = None
        if entry.status == "active":
            total_users, total_batches, today_record = await asyncio.gather(
                repo.count(UserActivity),
                repo.sum_array_lengths(UserActivity, "batch_ids"),
                repo.find_one(DailySystemHealth, Predicate.eq("date", today.isoformat())),
            )
            stats = AppStats(
                total_users=total_users,
                active_today=as_count(today_record.total_batches) if today_record else 0,
                total_batches=total_batches,
            )
        apps.append(AppSummary(**entry.model_dump(), stats=stats))
    return AppListResponse(apps=apps)


async def get_system_health(
    repo: AnalyticsRepository,
    query: QueryDescriptor,
) -> SystemHealthResponse:
    """Health record for the reference date plus the trend since ``reference - days``.

    A missing record for the reference date yields a zero-valued record
    dated that day; the trend is unaffected.
    """
    day = query.reference_date.isoformat()
    current, history = await asyncio.gather(
        repo.find_one(DailySystemHealth, Predicate.eq("date", day)),
        repo.find(
            DailySystemHealth,
            date_range_filter(query.date_range),
            sort=[("date", False)],
        ),
    )

    if query.bucket is TrendBucket.WEEK:
        trend = [shape_weekly_point(week) for week in rollup_trend_by_week(history)]
    else:
        trend = [shape_trend_point(record) for record in history]

    return SystemHealthResponse(
        app_id=query.app.app_id,
        current=shape_health_record(current, day),
        trend=trend,
    )


async def get_users(
    repo: AnalyticsRepository,
    query: QueryDescriptor,
) -> UserListResponse:
    """User rollups sorted descending by the resolved sort key."""
    predicate = build_filter(query, USER_FILTER_PARAMS)
    users, total = await asyncio.gather(
        repo.find(UserDashboard, predicate, sort=[(query.sort_key, True)], limit=query.limit),
        repo.count(UserDashboard, predicate),
    )
    return UserListResponse(users=[shape_user(u) for u in users], total_count=total)


async def get_batches(
    repo: AnalyticsRepository,
    query: QueryDescriptor,
) -> BatchListResponse:
    """Newest-first page of batches with pagination metadata.

    ``total_count`` and ``pages`` are computed over the filter alone, not
    the page window.
    """
    predicate = build_filter(query, BATCH_FILTER_PARAMS)
    batches, total = await asyncio.gather(
        repo.find(
            BatchDetail,
            predicate,
            sort=[("timestamp", True)],
            skip=query.skip,
            limit=query.limit,
        ),
        repo.count(BatchDetail, predicate),
    )
    page, pages = paginate(total, query.limit, query.skip)
    return BatchListResponse(
        batches=[shape_batch_row(b) for b in batches],
        total_count=total,
        page=page,
        pages=pages,
    )


async def get_batch_detail(
    repo: AnalyticsRepository,
    batch_id: str,
) -> BatchDetailResponse:
    """Single batch with summary and flattened policies.

    Raises:
        BatchNotFoundError: if no batch has ``batch_id``.
    """
    batch = await repo.find_one(BatchDetail, Predicate.eq("batch_id", batch_id))
    if batch is None:
        raise BatchNotFoundError(batch_id)
    return shape_batch_detail(batch)


async def get_failures(
    repo: AnalyticsRepository,
    query: QueryDescriptor,
) -> LobFailuresResponse | CarrierFailuresResponse | FailureListResponse:
    """Mapping failure analysis in the mode selected by ``group_by``.

    - lob: top groups by raw LOB code plus a summary over the whole
      collection.
    - carrier: top groups by carrier.
    - none: individual failures above ``min_incurred``, newest and largest
      first, with the total count for the same threshold.
    """
    if query.group_by is GroupBy.LOB:
        groups, total, value, unique_lobs = await asyncio.gather(
            repo.group_failures(GroupBy.LOB),
            repo.count(MappingFailure),
            repo.total(MappingFailure, "incurred"),
            repo.count_distinct(MappingFailure, "raw_lob"),
        )
        return LobFailuresResponse(
            summary=shape_failure_summary(total, value, unique_lobs),
            by_lob=[shape_lob_group(g) for g in groups],
        )

    if query.group_by is GroupBy.CARRIER:
        groups = await repo.group_failures(GroupBy.CARRIER)
        return CarrierFailuresResponse(by_carrier=[shape_carrier_group(g) for g in groups])

    predicate = threshold_filter("incurred", query.min_incurred)
    failures, total = await asyncio.gather(
        repo.find(
            MappingFailure,
            predicate,
            sort=[("date", True), ("incurred", True)],
            limit=query.limit,
        ),
        repo.count(MappingFailure, predicate),
    )
    return FailureListResponse(
        failures=[shape_failure_row(f) for f in failures],
        total_count=total,
    )


async def get_products(repo: AnalyticsRepository) -> ProductListResponse:
    """Every product rollup, most policies first."""
    products = await repo.find(ProductBreakdown, sort=[("policies_count", True)])
    return ProductListResponse(products=[shape_product(p) for p in products])
