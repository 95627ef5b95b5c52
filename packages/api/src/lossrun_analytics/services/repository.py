# This project was developed with assistance from AI tools.
"""Read-only query primitives over the analytics store.

Each call opens its own short-lived session from the shared
``DatabaseService`` so independent lookups for one request can run
concurrently under ``asyncio.gather``.

Ordering follows document-store semantics: NULLs sort lowest (last when
descending) and ascending primary key breaks every tie, which makes the
primary key the store's natural iteration order.
"""

from collections.abc import Sequence
from typing import Any

from fastapi import Request
from lossrun_db import DatabaseService, MappingFailure
from sqlalchemy import and_, func, select
from sqlalchemy.dialects.postgresql import aggregate_order_by, array_agg

from .aggregation import FAILURE_GROUP_LIMIT, FAILURE_GROUPINGS, FailureGroup
from .filters import MATCH_ALL, Predicate
from .params import GroupBy

# (field, descending)
SortSpec = Sequence[tuple[str, bool]]


class AnalyticsRepository:
    """Find/count/aggregate primitives for the read models."""

    def __init__(self, db: DatabaseService) -> None:
        self._db = db

    @staticmethod
    def _order_by(model: type, sort: SortSpec) -> list:
        order = []
        for name, descending in sort:
            column = getattr(model, name)
            order.append(column.desc().nulls_last() if descending else column.asc().nulls_first())
        order.append(model.id.asc())
        return order

    async def find(
        self,
        model: type,
        predicate: Predicate = MATCH_ALL,
        *,
        sort: SortSpec = (),
        skip: int = 0,
        limit: int | None = None,
    ) -> list[Any]:
        stmt = select(model).where(*predicate.clauses(model)).order_by(*self._order_by(model, sort))
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_one(self, model: type, predicate: Predicate) -> Any | None:
        rows = await self.find(model, predicate, limit=1)
        return rows[0] if rows else None

    async def group_failures(
        self,
        group_by: GroupBy,
        limit: int = FAILURE_GROUP_LIMIT,
    ) -> list[FailureGroup]:
        """Mapping failure groups computed by the store.

        Same result as ``aggregation.group_failures`` over every row in
        natural order: members in first-seen order, the reason of each
        group's lowest-id row, count descending with ties by first
        appearance.
        """
        if group_by not in FAILURE_GROUPINGS:
            raise ValueError(f"Cannot group failures by '{group_by.value}'")
        key_field, member_field = FAILURE_GROUPINGS[group_by]
        key_column = getattr(MappingFailure, key_field)
        member_column = getattr(MappingFailure, member_field)

        # member_rank == 1 marks the first row carrying each member of a group
        ranked = select(
            key_column.label("group_key"),
            member_column.label("member"),
            MappingFailure.id,
            MappingFailure.incurred,
            MappingFailure.unmatched_reason,
            func.row_number()
            .over(partition_by=(key_column, member_column), order_by=MappingFailure.id)
            .label("member_rank"),
        ).subquery()

        count = func.count()
        stmt = (
            select(
                ranked.c.group_key,
                count.label("failure_count"),
                func.coalesce(func.sum(func.coalesce(ranked.c.incurred, 0)), 0).label("total_incurred"),
                array_agg(aggregate_order_by(ranked.c.member, ranked.c.id))
                .filter(and_(ranked.c.member_rank == 1, ranked.c.member.is_not(None)))
                .label("members"),
                array_agg(aggregate_order_by(ranked.c.unmatched_reason, ranked.c.id))[1].label("common_reason"),
            )
            .group_by(ranked.c.group_key)
            .order_by(count.desc(), func.min(ranked.c.id))
            .limit(limit)
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return [
                FailureGroup(
                    key=row.group_key,
                    failure_count=row.failure_count,
                    total_incurred=float(row.total_incurred or 0),
                    members=list(row.members or []),
                    common_reason=row.common_reason,
                )
                for row in result.all()
            ]

    async def count(self, model: type, predicate: Predicate = MATCH_ALL) -> int:
        stmt = select(func.count()).select_from(model).where(*predicate.clauses(model))
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def total(self, model: type, field: str, predicate: Predicate = MATCH_ALL) -> float:
        """Null-safe SUM(field); 0 for an empty collection."""
        column = getattr(model, field)
        stmt = select(func.coalesce(func.sum(func.coalesce(column, 0)), 0)).where(
            *predicate.clauses(model)
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return float(result.scalar() or 0)

    async def count_distinct(self, model: type, field: str) -> int:
        """Number of distinct non-NULL values of ``field``."""
        column = getattr(model, field)
        stmt = select(func.count(func.distinct(column)))
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def sum_array_lengths(self, model: type, field: str) -> int:
        """Sum of the lengths of a JSON array column; NULL arrays count as 0."""
        column = getattr(model, field)
        stmt = select(func.coalesce(func.sum(func.json_array_length(column)), 0))
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return int(result.scalar() or 0)


def get_repository(request: Request) -> AnalyticsRepository:
    """FastAPI dependency -- repository over the store opened in the lifespan."""
    return AnalyticsRepository(request.app.state.db_service)
