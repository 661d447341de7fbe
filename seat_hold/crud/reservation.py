import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import DateTime, and_, case, literal, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from seat_hold.core.timeutils import hold_deadline, utcnow
from seat_hold.crud.showtime import crud_showtime
from seat_hold.exceptions import (
    PairingViolationException,
    SeatAlreadySoldException,
    SeatConflictException,
    SeatNotFoundException,
    UnauthorizedException,
)
from seat_hold.models.seat import ShowSeat, ShowSeatStatus
from seat_hold.schemas.reservation import FinalizeResponse, HoldResponse, ReleaseResponse
from seat_hold.schemas.showtime import ShowtimeInstanceKey
from seat_hold.services.pairing import Layout, expand_couple_pairs, find_split_pairs

logger = logging.getLogger(__name__)


# Every write below is a single conditional UPDATE ... RETURNING inside one
# transaction. The WHERE clause is the availability check, so two racing
# requests for one seat cannot both match it; the loser sees fewer returned
# rows than it asked for and rolls its whole batch back.


class CRUDReservation:
    def _check_known(self, layout: Layout, seat_ids: Iterable[str]) -> None:
        missing = set(seat_ids) - layout.keys()
        if missing:
            raise SeatNotFoundException(missing)

    def _check_pairs(self, layout: Layout, written: Iterable[str]) -> None:
        split = find_split_pairs(layout, written)
        if split:
            raise PairingViolationException(split)

    async def _lock_rows(self, db: AsyncSession, slot_id: int, seat_codes: List[str]) -> None:
        # row locks in seat_code order keep overlapping batches from deadlocking on postgres
        await db.execute(
            select(ShowSeat.id)
            .where(ShowSeat.slot_id == slot_id)
            .where(ShowSeat.seat_code.in_(seat_codes))
            .order_by(ShowSeat.seat_code)
            .with_for_update())

    async def hold(self, db: AsyncSession, key: ShowtimeInstanceKey, user_id: str,
                   seat_ids: List[str], now: Optional[datetime] = None) -> HoldResponse:
        """
        Hold seats for user_id until now + hold duration, all or nothing.

        Couple seats are extended to their partner. Seats the user already
        holds are accepted again and their timer restarts. Sold, maintenance
        and seats under another user's live hold are rejected with
        SeatConflictException listing exactly those seats.
        """
        if not user_id:
            raise UnauthorizedException()
        now = now or utcnow()
        expires_at = hold_deadline(now)

        async with db.begin():
            slot = await crud_showtime.resolve_slot(db, key)
            layout = await crud_showtime.load_layout(db, slot.id)
            self._check_known(layout, seat_ids)
            seat_codes = expand_couple_pairs(layout, seat_ids)
            await self._lock_rows(db, slot.id, seat_codes)

            own_live_hold = and_(ShowSeat.status == ShowSeatStatus.HELD,
                                 ShowSeat.held_by == user_id,
                                 ShowSeat.hold_expires_at > now)
            stmt = (
                update(ShowSeat)
                .where(ShowSeat.slot_id == slot.id)
                .where(ShowSeat.seat_code.in_(seat_codes))
                .where(or_(
                    ShowSeat.status == ShowSeatStatus.AVAILABLE,
                    and_(ShowSeat.status == ShowSeatStatus.HELD,
                         or_(ShowSeat.held_by == user_id, ShowSeat.hold_expires_at <= now)),
                ))
                .values(
                    status=ShowSeatStatus.HELD,
                    held_by=user_id,
                    held_at=case((own_live_hold, ShowSeat.held_at),
                                 else_=literal(now, DateTime(timezone=True))),
                    hold_expires_at=expires_at,
                    version=ShowSeat.version + 1,
                    updated_at=now,
                )
                .returning(ShowSeat.seat_code)
                .execution_options(synchronize_session=False)
            )
            held = set((await db.execute(stmt)).scalars().all())

            rejected = set(seat_codes) - held
            if rejected:
                logger.warning("Hold by %s on slot %s rejected for seats %s",
                               user_id, slot.id, sorted(rejected))
                raise SeatConflictException(rejected)
            self._check_pairs(layout, held)
            slot_id = slot.id

        logger.info("User %s holds %s on slot %s until %s",
                    user_id, seat_codes, slot_id, expires_at.isoformat())
        return HoldResponse(seat_ids=seat_codes, held_by=user_id, hold_expires_at=expires_at)

    async def release(self, db: AsyncSession, key: ShowtimeInstanceKey, user_id: str,
                      seat_ids: Optional[List[str]] = None,
                      now: Optional[datetime] = None) -> ReleaseResponse:
        """
        Give back seats held by user_id. Seats that are not held by this user
        are skipped silently. seat_ids=None releases all of the user's holds
        in the screening.
        """
        if not user_id:
            raise UnauthorizedException()
        now = now or utcnow()

        async with db.begin():
            slot = await crud_showtime.resolve_slot(db, key)
            layout = await crud_showtime.load_layout(db, slot.id)
            if seat_ids is None:
                seat_ids = (await db.scalars(
                    select(ShowSeat.seat_code)
                    .where(ShowSeat.slot_id == slot.id)
                    .where(ShowSeat.status == ShowSeatStatus.HELD)
                    .where(ShowSeat.held_by == user_id))).all()
            self._check_known(layout, seat_ids)
            seat_codes = expand_couple_pairs(layout, seat_ids)
            if not seat_codes:
                return ReleaseResponse(released_seat_ids=[])
            await self._lock_rows(db, slot.id, seat_codes)

            stmt = (
                update(ShowSeat)
                .where(ShowSeat.slot_id == slot.id)
                .where(ShowSeat.seat_code.in_(seat_codes))
                .where(ShowSeat.status == ShowSeatStatus.HELD)
                .where(ShowSeat.held_by == user_id)
                .values(
                    status=ShowSeatStatus.AVAILABLE,
                    held_by=None,
                    held_at=None,
                    hold_expires_at=None,
                    version=ShowSeat.version + 1,
                    updated_at=now,
                )
                .returning(ShowSeat.seat_code)
                .execution_options(synchronize_session=False)
            )
            released = set((await db.execute(stmt)).scalars().all())
            self._check_pairs(layout, released)
            slot_id = slot.id

        released_codes = [code for code in seat_codes if code in released]
        if released_codes:
            logger.info("User %s released %s on slot %s", user_id, released_codes, slot_id)
        return ReleaseResponse(released_seat_ids=released_codes)

    async def finalize(self, db: AsyncSession, key: ShowtimeInstanceKey, seat_ids: List[str],
                       order_id: str, now: Optional[datetime] = None) -> FinalizeResponse:
        """
        Mark seats sold for a paid order, whoever held them and whether or
        not the hold has lapsed. Finalizing again with the same order is
        accepted; seats sold under another order fail the whole batch.
        """
        if not order_id:
            raise UnauthorizedException("Order context required")
        now = now or utcnow()

        async with db.begin():
            slot = await crud_showtime.resolve_slot(db, key)
            layout = await crud_showtime.load_layout(db, slot.id)
            self._check_known(layout, seat_ids)
            seat_codes = expand_couple_pairs(layout, seat_ids)
            await self._lock_rows(db, slot.id, seat_codes)

            stmt = (
                update(ShowSeat)
                .where(ShowSeat.slot_id == slot.id)
                .where(ShowSeat.seat_code.in_(seat_codes))
                .where(or_(
                    ShowSeat.status.in_([ShowSeatStatus.AVAILABLE, ShowSeatStatus.HELD]),
                    and_(ShowSeat.status == ShowSeatStatus.SOLD, ShowSeat.order_id == order_id),
                ))
                .values(
                    status=ShowSeatStatus.SOLD,
                    order_id=order_id,
                    held_by=None,
                    held_at=None,
                    hold_expires_at=None,
                    version=ShowSeat.version + 1,
                    updated_at=now,
                )
                .returning(ShowSeat.seat_code)
                .execution_options(synchronize_session=False)
            )
            sold = set((await db.execute(stmt)).scalars().all())

            rejected = set(seat_codes) - sold
            if rejected:
                statuses = (await db.execute(
                    select(ShowSeat.seat_code, ShowSeat.status)
                    .where(ShowSeat.slot_id == slot.id)
                    .where(ShowSeat.seat_code.in_(rejected)))).all()
                sold_elsewhere = [row.seat_code for row in statuses if row.status == ShowSeatStatus.SOLD]
                logger.warning("Finalize of order %s on slot %s rejected for seats %s",
                               order_id, slot.id, sorted(rejected))
                if sold_elsewhere:
                    raise SeatAlreadySoldException(sold_elsewhere)
                raise SeatConflictException(rejected)
            self._check_pairs(layout, sold)
            slot_id = slot.id

        logger.info("Order %s finalized %s on slot %s", order_id, seat_codes, slot_id)
        return FinalizeResponse(order_id=order_id, seat_ids=seat_codes)


crud_reservation = CRUDReservation()
