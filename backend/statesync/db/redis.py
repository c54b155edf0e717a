"""Process-wide Redis client that holds the temp collection documents.

Redis stands in for the cloud document database: every persisted store
value lives in one hash per principal and collection (see
``statesync.db.temp_collections``).
"""

import redis.asyncio as redis

from statesync.core.config import get_settings

_redis: redis.Redis | None = None


async def init_redis(url: str | None = None) -> None:
    """Open the shared client and ping it. No-op when already open."""
    global _redis

    if _redis is not None:
        return

    client = redis.from_url(
        url or get_settings().redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    _redis = client


def bind_redis(client: redis.Redis | None) -> None:
    """Install an already-built client (fakeredis in tests), or unbind with None."""
    global _redis
    _redis = client


async def close_redis() -> None:
    global _redis

    if _redis is not None:
        await _redis.aclose()
        _redis = None


def get_redis() -> redis.Redis:
    """Return the shared client.

    Raises RuntimeError if neither init_redis() nor bind_redis() ran.
    """
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
