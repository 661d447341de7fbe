import asyncio
import logging
from datetime import datetime
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seat_hold.core.config import settings
from seat_hold.core.timeutils import utcnow
from seat_hold.models.seat import ShowSeat, ShowSeatStatus

logger = logging.getLogger(__name__)


async def sweep_expired_holds(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """
    Reset every lapsed hold to available. Readers already treat these seats
    as available, this only brings the stored rows in line.
    """
    now = now or utcnow()
    async with db.begin():
        result = await db.execute(
            update(ShowSeat)
            .where(ShowSeat.status == ShowSeatStatus.HELD)
            .where(ShowSeat.hold_expires_at <= now)
            .values(
                status=ShowSeatStatus.AVAILABLE,
                held_by=None,
                held_at=None,
                hold_expires_at=None,
                version=ShowSeat.version + 1,
                updated_at=now,
            )
            .returning(ShowSeat.id)
            .execution_options(synchronize_session=False))
        released = len(result.scalars().all())
    return released


class HoldExpirySweeper:
    # one instance sweeps per interval when several servers run the sweeper
    LEASE_KEY = "sweeper:hold-expiry:lease"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], redis: Optional[Redis] = None,
                 interval_seconds: int = settings.SWEEP_INTERVAL_SECONDS):
        self.session_factory = session_factory
        self.redis = redis
        self.interval_seconds = interval_seconds

    async def _acquire_lease(self) -> bool:
        if self.redis is None:
            return True
        try:
            acquired = await self.redis.set(self.LEASE_KEY, "1", ex=max(1, self.interval_seconds - 1), nx=True)
            return bool(acquired)
        except RedisError:
            logger.warning("Sweeper lease unavailable, sweeping without it", exc_info=True)
            return True

    async def run_once(self, now: Optional[datetime] = None) -> int:
        if not await self._acquire_lease():
            logger.debug("Another instance holds the sweeper lease")
            return 0
        async with self.session_factory() as db:
            released = await sweep_expired_holds(db, now)
        if released:
            logger.info("Released %d expired seat holds", released)
        return released

    async def run(self):
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error during hold expiry sweep")
            await asyncio.sleep(self.interval_seconds)
