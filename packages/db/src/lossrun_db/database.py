# This project was developed with assistance from AI tools.
"""Store handle for the analytics read models.

``DatabaseService`` owns the single async engine shared by every request.
It is constructed once at process start, connected in the app lifespan and
disposed on shutdown. Nothing in this layer writes: sessions are opened
per query and closed without committing.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import db_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the read-model tables."""


class StoreConnectionError(RuntimeError):
    """The store could not be reached at startup."""


class DatabaseService:
    """Owns the async engine and session factory for the read models."""

    def __init__(self, url: str | None = None, *, echo: bool | None = None) -> None:
        self.url = url or db_settings.DATABASE_URL
        self._echo = db_settings.SQL_ECHO if echo is None else echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StoreConnectionError("DatabaseService.connect() has not been called")
        return self._engine

    async def connect(self) -> None:
        """Create the engine and verify the store answers a trivial query.

        Raises:
            StoreConnectionError: if the store cannot be reached.
        """
        if self._engine is not None:
            return
        engine = create_async_engine(self.url, echo=self._echo, pool_pre_ping=True)
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            await engine.dispose()
            raise StoreConnectionError(f"Cannot connect to store: {exc}") from exc

        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("Connected to analytics store")

    async def ping(self) -> bool:
        """Return True when the store answers ``SELECT 1``."""
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            logger.warning("Store ping failed", exc_info=True)
            return False
        return True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a short-lived read session."""
        if self._session_factory is None:
            raise StoreConnectionError("DatabaseService.connect() has not been called")
        async with self._session_factory() as session:
            yield session

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Analytics store connection closed")
