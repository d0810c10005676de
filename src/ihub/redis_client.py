"""Optional Redis client.

Redis backs rate limiting and the leaderboard cache only. An empty
``IHUB_REDIS_URL`` runs the API without it.
"""

import logging

import redis.asyncio as redis

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


async def init_redis(url: str) -> redis.Redis | None:
    """Create the shared client, or leave Redis disabled for an empty URL."""
    global _client  # noqa: PLW0603
    if not url:
        logger.info("Redis disabled: no URL configured")
        _client = None
        return None

    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=50,
    )
    return _client


async def close_redis() -> None:
    """Close the shared client if one was created."""
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis_or_none() -> redis.Redis | None:
    """The shared client, or None when running without Redis."""
    return _client
