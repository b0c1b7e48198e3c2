"""Redis client lifecycle management.

Redis backs guest chat history and the session blacklist. Both degrade
when it is down, so a failed connection at startup leaves the client unset
instead of aborting the application.
"""

import redis.asyncio as redis
import structlog

from blogdesk.core.config import settings

logger = structlog.get_logger()

redis_client: redis.Redis | None = None  # type: ignore[type-arg]


async def init_redis() -> redis.Redis | None:  # type: ignore[type-arg]
    """Connect and ping; on failure log and leave the client unset."""
    global redis_client  # noqa: PLW0603
    client = redis.from_url(settings.redis.url, decode_responses=True)
    try:
        await client.ping()
    except (redis.RedisError, OSError):
        logger.warning("Redis unavailable, guest history and logout revocation disabled")
        await client.aclose()
        return None
    redis_client = client
    return redis_client


async def close_redis() -> None:
    """Close the Redis connection."""
    global redis_client  # noqa: PLW0603
    if redis_client:
        await redis_client.aclose()
        redis_client = None


def current_redis() -> redis.Redis | None:  # type: ignore[type-arg]
    """The active Redis client, or None when not connected."""
    return redis_client
