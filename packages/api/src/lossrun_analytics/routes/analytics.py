# This project was developed with assistance from AI tools.
"""Analytics endpoints for the loss run dashboard.

Query parameters are declared as plain strings on purpose: a malformed
``?limit=abc`` falls back to the default in the resolver instead of failing
request validation.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from ..core.clock import get_today
from ..core.registry import AppRegistry, get_app_registry
from ..errors import query_failure
from ..middleware.auth import get_request_context
from ..schemas.analytics import (
    AppListResponse,
    BatchDetailResponse,
    BatchListResponse,
    FailuresResponse,
    ProductListResponse,
    SystemHealthResponse,
    UserListResponse,
)
from ..services import analytics
from ..services.params import resolve_query
from ..services.repository import AnalyticsRepository, get_repository

router = APIRouter(dependencies=[Depends(get_request_context)])


@router.get("/apps", response_model=AppListResponse, response_model_exclude_none=True)
async def list_apps(
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> AppListResponse:
    """Registered apps with quick stats for the active ones."""
    with query_failure("Failed to fetch apps"):
        return await analytics.list_apps(repo, registry, today)


@router.get("/apps/{app_id}/system-health", response_model=SystemHealthResponse)
async def system_health(
    app_id: str,
    days: str | None = Query(default=None, description="Lookback window in days (default 7)"),
    date_: str | None = Query(default=None, alias="date", description="Reference date, YYYY-MM-DD"),
    bucket: str | None = Query(default=None, description="Trend granularity: day (default) or week"),
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> SystemHealthResponse:
    """Current-day health metrics and the daily trend."""
    query = resolve_query(registry, app_id, {"days": days, "date": date_, "bucket": bucket}, today)
    with query_failure("Failed to fetch system health"):
        return await analytics.get_system_health(repo, query)


@router.get("/apps/{app_id}/users", response_model=UserListResponse)
async def list_users(
    app_id: str,
    sort: str | None = Query(default=None, description="batches | policies | last_active"),
    limit: str | None = Query(default=None, description="Maximum rows (default 50)"),
    organization: str | None = Query(default=None),
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> UserListResponse:
    """Per-user activity rollups."""
    query = resolve_query(
        registry, app_id, {"sort": sort, "limit": limit, "organization": organization}, today
    )
    with query_failure("Failed to fetch users"):
        return await analytics.get_users(repo, query)


@router.get("/apps/{app_id}/batches", response_model=BatchListResponse)
async def list_batches(
    app_id: str,
    user: str | None = Query(default=None, description="Exact username"),
    date_: str | None = Query(default=None, alias="date", description="Exact batch date, YYYY-MM-DD"),
    status: str | None = Query(default=None),
    organization: str | None = Query(default=None),
    limit: str | None = Query(default=None, description="Page size (default 50)"),
    skip: str | None = Query(default=None, description="Rows to skip (default 0)"),
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> BatchListResponse:
    """Newest-first batch list with pagination metadata."""
    params = {
        "user": user,
        "date": date_,
        "status": status,
        "organization": organization,
        "limit": limit,
        "skip": skip,
    }
    query = resolve_query(registry, app_id, params, today)
    with query_failure("Failed to fetch batches"):
        return await analytics.get_batches(repo, query)


@router.get("/apps/{app_id}/batches/{batch_id}", response_model=BatchDetailResponse)
async def batch_detail(
    app_id: str,
    batch_id: str,
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
) -> BatchDetailResponse:
    """Single batch with its per-policy results."""
    registry.get(app_id)
    with query_failure("Failed to fetch batch detail"):
        return await analytics.get_batch_detail(repo, batch_id)


@router.get("/apps/{app_id}/failures", response_model=FailuresResponse)
async def failures(
    app_id: str,
    group_by: str | None = Query(default=None, description="lob (default) | carrier | none"),
    min_incurred: str | None = Query(default=None, description="Minimum incurred, individual mode only"),
    limit: str | None = Query(default=None, description="Maximum rows, individual mode only"),
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
    today: date = Depends(get_today),
):
    """Mapping failure analysis grouped by LOB code, by carrier, or as rows."""
    params = {"group_by": group_by, "min_incurred": min_incurred, "limit": limit}
    query = resolve_query(registry, app_id, params, today)
    with query_failure("Failed to fetch failures"):
        return await analytics.get_failures(repo, query)


@router.get("/apps/{app_id}/products", response_model=ProductListResponse)
async def products(
    app_id: str,
    registry: AppRegistry = Depends(get_app_registry),
    repo: AnalyticsRepository = Depends(get_repository),
) -> ProductListResponse:
    """Product breakdown, most policies first."""
    registry.get(app_id)
    with query_failure("Failed to fetch products"):
        return await analytics.get_products(repo)
