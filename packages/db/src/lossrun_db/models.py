# This project was developed with assistance from AI tools.
"""
Loss run pipeline -- read models

Materialized views written by the processing pipeline: daily system health,
per-user rollups, batch details, mapping failures and product breakdown.
The analytics API only reads these tables.
"""

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String, Text

from .database import Base


class DailySystemHealth(Base):
    """One row per calendar date."""

    __tablename__ = "daily_system_health"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(String(10), unique=True, nullable=False, index=True)
    total_batches = Column(Integer, nullable=True)
    total_policies = Column(Integer, nullable=True)
    total_pdfs = Column(Integer, nullable=True)
    total_claims = Column(Integer, nullable=True)
    matched_claims = Column(Integer, nullable=True)
    unmatched_claims = Column(Integer, nullable=True)
    match_rate = Column(Float, nullable=True)
    avg_processing_time = Column(Float, nullable=True)
    min_processing_time = Column(Float, nullable=True)
    max_processing_time = Column(Float, nullable=True)
    success_rate = Column(Float, nullable=True)
    avg_policies_per_batch = Column(Float, nullable=True)

    def __repr__(self):
        return f"<DailySystemHealth(date='{self.date}', batches={self.total_batches})>"


class UserActivity(Base):
    """Raw per-user activity: the batches each user has submitted."""

    __tablename__ = "user_activity"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    organization = Column(String(255), nullable=True)
    batch_ids = Column(JSON(none_as_null=True), nullable=True)

    def __repr__(self):
        return f"<UserActivity(username='{self.username}')>"


class UserDashboard(Base):
    """Per-user rollup."""

    __tablename__ = "user_dashboard"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    organization = Column(String(255), nullable=True, index=True)
    total_batches = Column(Integer, nullable=True)
    total_policies = Column(Integer, nullable=True)
    total_claims_raw = Column(Integer, nullable=True)
    matched_claims = Column(Integer, nullable=True)
    match_rate = Column(Float, nullable=True)
    avg_processing_time_seconds = Column(Float, nullable=True)
    first_activity = Column(DateTime(timezone=True), nullable=True)
    last_activity = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<UserDashboard(username='{self.username}', batches={self.total_batches})>"


class BatchDetail(Base):
    """One processing run with its embedded per-policy results."""

    __tablename__ = "batch_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(String(64), unique=True, nullable=False, index=True)
    username = Column(String(255), nullable=True, index=True)
    organization = Column(String(255), nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=True, index=True)
    date = Column(String(10), nullable=True, index=True)
    policy_count = Column(Integer, nullable=True)
    pdf_count = Column(Integer, nullable=True)
    total_claims = Column(Integer, nullable=True)
    matched_claims = Column(Integer, nullable=True)
    unmatched_claims = Column(Integer, nullable=True)
    match_rate = Column(Float, nullable=True)
    avg_processing_time = Column(Float, nullable=True)
    status = Column(String(50), nullable=True, index=True)
    products = Column(JSON(none_as_null=True), nullable=True)
    # [{appnum, status, stats: {raw_claims, matched, unmatched, products, ...},
    #   timing: {duration_seconds}}]
    policies = Column(JSON(none_as_null=True), nullable=True)

    def __repr__(self):
        return f"<BatchDetail(batch_id='{self.batch_id}', status='{self.status}')>"


class MappingFailure(Base):
    """One unmatched claim line."""

    __tablename__ = "mapping_failures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loss_number = Column(String(100), nullable=True)
    batch_id = Column(String(64), nullable=True, index=True)
    appnum = Column(String(100), nullable=True)
    date = Column(String(10), nullable=True, index=True)
    raw_lob = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    incurred = Column(Float, nullable=True)
    carrier = Column(String(255), nullable=True, index=True)
    unmatched_reason = Column(Text, nullable=True)
    date_of_loss = Column(String(10), nullable=True)

    def __repr__(self):
        return f"<MappingFailure(loss_number='{self.loss_number}', raw_lob='{self.raw_lob}')>"


class ProductBreakdown(Base):
    """Per-product rollup."""

    __tablename__ = "product_breakdown_view"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product = Column(String(100), unique=True, nullable=False)
    policies_count = Column(Integer, nullable=True)
    batches_count = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<ProductBreakdown(product='{self.product}', policies={self.policies_count})>"
