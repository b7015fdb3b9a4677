"""Entity store access: one async engine per process, one session per operation."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from taskflow.config import Settings
from taskflow.errors import DependencyError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class Store:
    """Shared handle on the entity store.

    Built once at startup and passed to whatever needs it. Requests never
    hold a lock on it; each operation opens its own session from the pool.
    Every session is bounded by ``timeout`` seconds, and an unreachable or
    slow store surfaces as ``DependencyError``.
    """

    def __init__(self, engine: AsyncEngine, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.engine = engine
        self.timeout = timeout

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session; the whole block runs under the store timeout."""
        try:
            async with asyncio.timeout(self.timeout):
                async with AsyncSession(self.engine, expire_on_commit=False) as session:
                    yield session
        except TimeoutError as exc:
            logger.error("Store operation timed out", extra={"timeout": self.timeout})
            raise DependencyError("Database did not respond in time") from exc
        except (OperationalError, InterfaceError) as exc:
            logger.error("Store unavailable: %s", exc.__class__.__name__)
            raise DependencyError("Database unavailable") from exc

    async def ping(self) -> None:
        """Round-trip a trivial query. Raises DependencyError on failure."""
        try:
            async with asyncio.timeout(self.timeout):
                async with self.engine.connect() as connection:
                    await connection.execute(text("SELECT 1"))
        except TimeoutError as exc:
            raise DependencyError("Database did not respond in time") from exc
        except (OperationalError, InterfaceError, OSError) as exc:
            raise DependencyError("Database unavailable") from exc

    async def create_all(self) -> None:
        """Create missing tables (development convenience; Alembic owns production)."""
        # Import models to register them with SQLModel
        from taskflow.models import Task, TaskTag, User  # noqa: F401

        async with self.engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_store(settings: Settings) -> Store:
    """Build the process-wide store from settings."""
    database_url = settings.async_database_url
    connect_args = {}
    if settings.DATABASE_SSLMODE and database_url.startswith("postgresql"):
        connect_args["sslmode"] = settings.DATABASE_SSLMODE

    engine = create_async_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        connect_args=connect_args,
    )
    return Store(engine, timeout=settings.STORE_TIMEOUT_SECONDS)
