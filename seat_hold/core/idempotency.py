import json
from typing import Optional, Tuple
from redis.asyncio import Redis

from seat_hold.core.config import settings


def idempotency_redis_key(scope: str, idem_key: str) -> str:
    return f"idempotency:{scope}:{idem_key}"


async def check_idempotency(redis: Redis, scope: str, idem_key: Optional[str]) -> Tuple[Optional[dict], bool]:
    """Return (cached response, is_repeat) for a request key."""
    if not idem_key:
        return None, False
    cached = await redis.get(idempotency_redis_key(scope, idem_key))
    if cached:
        return json.loads(cached), True
    return None, False


async def save_idempotency(redis: Redis, scope: str, idem_key: Optional[str], response: dict) -> None:
    if not idem_key:
        return
    await redis.set(idempotency_redis_key(scope, idem_key), json.dumps(response), ex=settings.IDEMPOTENCY_TTL_SECONDS)
