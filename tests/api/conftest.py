"""Test fixtures for API integration tests."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tourney.utils.db import get_db
from tourney.utils.errors import StorageError
from tourney.utils.permissions import Identity, Role
from tourney.utils.security import create_access_token


# =============================================================================
# FastAPI App & Client Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_app(session_factory: async_sessionmaker[AsyncSession]):
    """The real application with its database pointed at the test engine."""
    from tourney.main import app

    # One session per request, committed when the handler returns
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise StorageError() from e
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# =============================================================================
# Auth Fixtures
# =============================================================================


def bearer(identity: Identity) -> dict[str, str]:
    """Authorization header carrying an access token for ``identity``."""
    token = create_access_token(identity.user_id, identity.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def organizer_headers(organizer: Identity) -> dict[str, str]:
    return bearer(organizer)


@pytest.fixture
def other_organizer_headers(other_organizer: Identity) -> dict[str, str]:
    return bearer(other_organizer)


@pytest.fixture
def admin_headers(admin: Identity) -> dict[str, str]:
    return bearer(admin)


@pytest.fixture
def player_headers(player: Identity) -> dict[str, str]:
    return bearer(player)


@pytest.fixture
def player2_headers() -> dict[str, str]:
    return bearer(Identity(user_id="player-2", role=Role.PLAYER))


@pytest.fixture
def invalid_auth_headers() -> dict[str, str]:
    """Create authorization headers with an invalid token."""
    return {"Authorization": "Bearer invalid-token-12345"}
