"""
Redis connection for the access-token blacklist.

Callers go through get_redis() on every use so the client can be swapped
(tests replace the module attribute with an in-memory double).
"""

import logging

import redis.asyncio as redis
from swiftdrop.app.core.config import settings

logger = logging.getLogger("swiftdrop.redis")

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    return redis_client


async def redis_available() -> bool:
    """Report whether the blacklist store answers a PING."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return False
