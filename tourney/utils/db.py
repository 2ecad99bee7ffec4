"""Async engine, session factory and transaction helpers.

A unit of work is one session and one transaction. It commits when the
body finishes and rolls back on any exception. Driver errors surface as
``StorageError`` so SQL text never reaches a client.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tourney.config import get_settings
from tourney.logging_config import get_logger
from tourney.utils.errors import StorageError

logger = get_logger(__name__)

T = TypeVar("T")

_settings = get_settings()

_engine_options: dict[str, Any] = {"echo": False, "future": True}
if not _settings.is_sqlite:
    # Pool sizing only applies to server databases
    _engine_options.update(
        pool_size=_settings.db_pool_size,
        max_overflow=_settings.db_max_overflow,
        pool_timeout=_settings.db_pool_timeout,
        pool_recycle=_settings.db_pool_recycle,
        pool_pre_ping=True,
    )

engine = create_async_engine(_settings.database_url, **_engine_options)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    factory = session_factory or async_session_factory
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("transaction_failed", error=str(e), error_type=type(e).__name__)
            raise StorageError() from e
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one unit of work per request."""
    async with unit_of_work() as session:
        yield session


async def run_in_transaction(
    callback: Callable[[AsyncSession], Awaitable[T]],
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> T:
    """Await ``callback(session)`` inside a unit of work and return its result.

    Raises:
        StorageError: When the driver fails; nothing is committed
    """
    async with unit_of_work(session_factory) as session:
        return await callback(session)


async def check_db() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return False
    return True


async def init_db() -> None:
    """Fail startup early when the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def close_db() -> None:
    await engine.dispose()
