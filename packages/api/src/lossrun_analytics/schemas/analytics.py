# This project was developed with assistance from AI tools.
"""Analytics response schemas for the loss run dashboard."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, model_serializer

# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------


class AppStats(BaseModel):
    """Quick stats shown on an active app's card."""

    total_users: int
    active_today: int = Field(..., description="Batches processed on the reference date")
    total_batches: int


class AppSummary(BaseModel):
    app_id: str
    app_name: str
    description: str
    color: str
    status: str
    database: str
    stats: AppStats | None = Field(None, description="Present only for active apps")


class AppListResponse(BaseModel):
    apps: list[AppSummary]


# ---------------------------------------------------------------------------
# System health
# ---------------------------------------------------------------------------


class HealthRecord(BaseModel):
    """Daily system health metrics for one date."""

    date: str
    total_batches: int = 0
    total_policies: int = 0
    total_claims: int = 0
    matched_claims: int = 0
    unmatched_claims: int = 0
    match_rate: float = Field(0.0, description="Percentage of claims matched, 0-100")
    avg_processing_time: float = Field(0.0, description="Seconds")
    success_rate: float = Field(0.0, description="Percentage of successful batches, 0-100")


class TrendPoint(BaseModel):
    """Charting subset of a HealthRecord (a day, or a week keyed by its Monday)."""

    date: str
    total_batches: int
    total_policies: int
    avg_processing_time: float
    match_rate: float
    success_rate: float


class SystemHealthResponse(BaseModel):
    app_id: str
    current: HealthRecord
    trend: list[TrendPoint]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserRow(BaseModel):
    username: str
    organization: str | None = None
    total_batches: int
    total_policies: int
    total_claims_raw: int
    matched_claims: int
    match_rate: float
    avg_processing_time: float = Field(..., description="Seconds")
    first_request: datetime | None = None
    last_request: datetime | None = None


class UserListResponse(BaseModel):
    users: list[UserRow]
    total_count: int


# ---------------------------------------------------------------------------
# Batches
# ---------------------------------------------------------------------------


class BatchRow(BaseModel):
    batch_id: str
    username: str | None = None
    organization: str | None = None
    timestamp: datetime | None = None
    date: str | None = None
    policy_count: int
    pdf_count: int
    total_claims: int
    matched_claims: int
    unmatched_claims: int
    match_rate: float
    avg_processing_time: float
    status: str | None = None
    products: list[str]


class BatchListResponse(BaseModel):
    batches: list[BatchRow]
    total_count: int
    page: int
    pages: int


class BatchSummary(BaseModel):
    policy_count: int
    pdf_count: int
    total_claims: int
    matched_claims: int
    unmatched_claims: int
    match_rate: float
    avg_processing_time: float


class PolicyRow(BaseModel):
    """One policy of a batch, flattened from the embedded document.

    ``processing_time`` is omitted from the JSON when the policy has no
    timing block, so "not recorded" stays distinguishable from 0 seconds.
    """

    appnum: str | None = None
    status: str | None = None
    stats: dict[str, Any] = Field(default_factory=dict)
    products: list[str] = Field(default_factory=list)
    processing_time: float | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_timing(self, handler):
        data = handler(self)
        if self.processing_time is None:
            data.pop("processing_time", None)
        return data


class BatchDetailResponse(BaseModel):
    batch_id: str
    username: str | None = None
    organization: str | None = None
    timestamp: datetime | None = None
    date: str | None = None
    status: str | None = None
    summary: BatchSummary
    products: list[str]
    policies: list[PolicyRow]


# ---------------------------------------------------------------------------
# Failures -- three response shapes tagged by group_by
# ---------------------------------------------------------------------------


class FailureSummary(BaseModel):
    """Totals over the whole failure collection (never truncated or filtered)."""

    total_unmatched: int
    total_unmapped_value: float
    unique_lob_codes: int


class LobFailureGroup(BaseModel):
    lob_code: str | None
    failure_count: int
    total_incurred: float
    affected_carriers: list[str]
    common_reason: str | None = Field(
        None, description="Reason of the first failure recorded for this code"
    )


class CarrierFailureGroup(BaseModel):
    carrier: str | None
    failure_count: int
    total_incurred: float
    unique_lob_codes: int
    lob_codes: list[str]


class FailureRow(BaseModel):
    loss_number: str | None = None
    batch_id: str | None = None
    appnum: str | None = None
    date: str | None = None
    raw_lob: str | None = None
    description: str | None = None
    incurred: float
    carrier: str | None = None
    unmatched_reason: str | None = None
    date_of_loss: str | None = None


class LobFailuresResponse(BaseModel):
    group_by: Literal["lob"] = "lob"
    summary: FailureSummary
    by_lob: list[LobFailureGroup]


class CarrierFailuresResponse(BaseModel):
    group_by: Literal["carrier"] = "carrier"
    by_carrier: list[CarrierFailureGroup]


class FailureListResponse(BaseModel):
    group_by: Literal["none"] = "none"
    failures: list[FailureRow]
    total_count: int


# Tagged by the group_by literal
FailuresResponse = LobFailuresResponse | CarrierFailuresResponse | FailureListResponse


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductRow(BaseModel):
    product: str
    policies_count: int
    batches_count: int


class ProductListResponse(BaseModel):
    products: list[ProductRow]
