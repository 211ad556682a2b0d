"""
Async Redis connection shared by the registration store and the admission lock.
Separated from business logic for clean architecture.
"""

from typing import Optional

import redis.asyncio as redis
from registration_api.core.config import get_settings
from registration_api.core.logging import get_logger

logger = get_logger(__name__)

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """
    Get or create the Redis connection.

    The client is created lazily and pinged once. A failed ping is logged
    but the client is kept: redis-py reconnects on the next command, and
    callers already treat individual command failures as StorageError.
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        try:
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except redis.RedisError as e:
            logger.error("redis_connection_failed", url=settings.REDIS_URL, error=str(e))

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
