"""Shared test fixtures.

Settings are read once at import time, so the environment defaults below
must be in place before any ``tourney`` module is imported.
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

_TEST_DIR = tempfile.mkdtemp(prefix="tourney-tests-")

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("APP_DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'app.db')}",
)
os.environ.setdefault("JWT_SECRET_KEY", "tourney-test-signing-key-a8f3c1d9e7b6")
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "whsec-test-7c2e91ab44f0")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from tourney.models import Base, Event, EventStatus, Ticket, TicketStatus  # noqa: E402
from tourney.utils.permissions import Identity, Role  # noqa: E402


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a test database engine with fresh tables for each test.

    A file database (not ``:memory:``) so several connections can share it.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
        future=True,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Mimics ``get_db()``: commit after the test body, rollback on exception.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# =============================================================================
# Identity Fixtures
# =============================================================================


@pytest.fixture
def organizer() -> Identity:
    return Identity(user_id="org-1", role=Role.ORGANIZER)


@pytest.fixture
def other_organizer() -> Identity:
    return Identity(user_id="org-2", role=Role.ORGANIZER)


@pytest.fixture
def admin() -> Identity:
    return Identity(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def player() -> Identity:
    return Identity(user_id="player-1", role=Role.PLAYER)


# =============================================================================
# Data Helpers
# =============================================================================


def future_window(days: int = 7, hours: int = 4) -> tuple[datetime, datetime]:
    """A start/end pair starting ``days`` from now."""
    start = datetime.now(timezone.utc) + timedelta(days=days)
    return start, start + timedelta(hours=hours)


def make_event_data(**overrides: Any) -> dict[str, Any]:
    """Valid event creation payload with JSON-friendly values."""
    start, end = future_window()
    data = {
        "title": "Friday Night Finals",
        "description": "Weekly community cup",
        "game": "Rocket League",
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
        "bracket_type": "single_elimination",
        "max_teams": 8,
    }
    data.update(overrides)
    return data


@pytest.fixture
def create_event(test_db: AsyncSession):
    """Factory that inserts an event row directly, bypassing validation."""

    async def _create(
        organizer_id: str = "org-1",
        status: str = EventStatus.PUBLISHED.value,
        max_teams: int | None = 8,
        current_teams: int = 0,
        organizer_checkout_url: str | None = None,
        **overrides: Any,
    ) -> Event:
        start, end = future_window()
        event = Event(
            organizer_id=organizer_id,
            title=overrides.pop("title", "Test Event"),
            game=overrides.pop("game", "Chess"),
            start_time=overrides.pop("start_time", start),
            end_time=overrides.pop("end_time", end),
            max_teams=max_teams,
            current_teams=current_teams,
            status=status,
            organizer_checkout_url=organizer_checkout_url,
            **overrides,
        )
        test_db.add(event)
        await test_db.commit()
        return event

    return _create


@pytest.fixture
def create_ticket(test_db: AsyncSession):
    """Factory that inserts a ticket row directly."""

    async def _create(
        event: Event,
        participant_id: str,
        status: str = TicketStatus.PENDING.value,
        amount=None,
        external_payment_ref: str | None = None,
        purchased_at: datetime | None = None,
    ) -> Ticket:
        ticket = Ticket(
            event_id=event.id,
            participant_id=participant_id,
            status=status,
            amount=amount,
            external_payment_ref=external_payment_ref or f"ref_{participant_id}_{event.id[:8]}",
        )
        if purchased_at is not None:
            ticket.purchased_at = purchased_at
        test_db.add(ticket)
        await test_db.commit()
        return ticket

    return _create
