from typing import AsyncGenerator
from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool

from seat_hold.core.config import settings


def build_redis(url: str = settings.REDIS_URL) -> Redis:
    """Client for the sweeper lease and finalize idempotency keys."""
    pool = ConnectionPool.from_url(url, decode_responses=True)
    return Redis(connection_pool=pool)


redis_client = build_redis()


async def get_redis() -> AsyncGenerator[Redis, None]:
    """
    FastAPI dependency that provides the shared Redis client.
    Connections come from the client's pool and are opened on first use.
    """
    yield redis_client


async def close_redis():
    """Close the client and its pool on app shutdown."""
    await redis_client.aclose(close_connection_pool=True)
