# This project was developed with assistance from AI tools.
"""Integration test fixtures -- real PostgreSQL, no mocks.

A session-scoped container (started once per test run) provides PostgreSQL.
Each test gets freshly created read-model tables, dropped again afterwards.
"""

import pytest
from lossrun_db import Base, DatabaseService
from testcontainers.postgres import PostgresContainer

# ---------------------------------------------------------------------------
# Mark all tests in this directory as integration
# ---------------------------------------------------------------------------
pytestmark = pytest.mark.integration


@pytest.fixture(scope="session")
def pg_container():
    """Start postgres:16 via testcontainers."""
    with PostgresContainer(
        image="postgres:16",
        username="test",
        password="test",
        dbname="test",
    ) as pg:
        yield pg


@pytest.fixture(scope="session")
def db_url(pg_container):
    """Async DB URL for asyncpg."""
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    return f"postgresql+asyncpg://test:test@{host}:{port}/test"


@pytest.fixture
async def db_service(db_url):
    """Connected DatabaseService over empty read-model tables."""
    service = DatabaseService(db_url)
    await service.connect()
    async with service.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield service
    async with service.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await service.dispose()


@pytest.fixture
async def seed(db_service):
    """Insert read-model rows and commit."""

    async def _seed(*rows):
        async with db_service.session() as session:
            session.add_all(rows)
            await session.commit()

    return _seed
