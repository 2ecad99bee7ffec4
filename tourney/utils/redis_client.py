"""Shared Redis client for the payment notification side-channel.

Redis is optional. Without ``REDIS_URL`` the client stays ``None`` and
``PaymentNotifier`` silently skips publishing.
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from tourney.config import get_settings
from tourney.logging_config import get_logger

logger = get_logger(__name__)

_client: Redis | None = None


async def init_redis() -> Redis | None:
    """Connect and ping Redis.

    Returns:
        The client, or None when ``REDIS_URL`` is not configured

    Raises:
        RedisError, OSError: If Redis is configured but unreachable
    """
    global _client

    settings = get_settings()
    if not settings.redis_url:
        logger.info("redis_disabled", reason="REDIS_URL not configured")
        return None

    client = Redis.from_url(
        settings.redis_url,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_connect_timeout,
        decode_responses=True,
    )
    try:
        await client.ping()
    except (RedisError, OSError):
        await client.aclose()
        raise

    _client = client
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> Redis | None:
    """The connected client, or None when Redis is disabled or down."""
    return _client
