"""
Redis client initialization and connection management.

The client is created during application startup and closed on shutdown;
handlers reach it through the `get_redis` dependency.
"""

import redis.asyncio as redis
from fastapi import Request

from zapshift.app.core.config import Settings


def create_redis_client(settings: Settings) -> redis.Redis:
    """Create the async Redis client from settings."""
    return redis.from_url(
        settings.redis_url,
        decode_responses=settings.redis_decode_responses,
    )


async def get_redis(request: Request) -> redis.Redis:
    """
    Get Redis client instance.

    This is used as a FastAPI dependency.
    """
    return request.app.state.redis


async def ping_redis(client: redis.Redis) -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        return await client.ping()
    except redis.RedisError:
        return False
