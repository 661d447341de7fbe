from typing import Optional
from fastapi import APIRouter, Depends, Header
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from seat_hold.core.auth import get_current_user_id, require_order_service
from seat_hold.core.idempotency import check_idempotency, save_idempotency
from seat_hold.crud.reservation import crud_reservation
from seat_hold.crud.seat_ledger import crud_seat_ledger
from seat_hold.crud.showtime import crud_showtime
from seat_hold.db.session import getDB_session
from seat_hold.redis import get_redis
from seat_hold.schemas.reservation import (
    FinalizeRequest,
    FinalizeResponse,
    HoldRequest,
    HoldResponse,
    ReleaseRequest,
    ReleaseResponse,
)
from seat_hold.schemas.showtime import ShowtimeInstanceKey
from seat_hold.services.pairing import expand_couple_pairs
from seat_hold.services.selection import validate_selection

router = APIRouter(
    prefix="/showtimes"
)


def _instance_key(showtime_id: int, data) -> ShowtimeInstanceKey:
    return ShowtimeInstanceKey(showtime_id=showtime_id, date=data.date, start_time=data.start_time, room=data.room)


@router.post("/{showtime_id}/reserve", response_model=HoldResponse)
async def reserve_seats(
        showtime_id: int,
        data: HoldRequest,
        user_id: str = Depends(get_current_user_id),
        db: AsyncSession = Depends(getDB_session)):
    key = _instance_key(showtime_id, data)
    layout = await crud_showtime.get_layout(db, key)
    # seats already held by this user belong to the same checkout
    seat_map = await crud_seat_ledger.get_seat_map_for_viewer(db, key, user_id)
    already_held = [record.seat_id for record in seat_map.seats if record.is_held_by_viewer]
    validate_selection(layout, [*already_held, *data.seat_ids])
    seat_ids = expand_couple_pairs(layout, data.seat_ids)
    return await crud_reservation.hold(db, key, user_id, seat_ids)


@router.post("/{showtime_id}/release", response_model=ReleaseResponse)
async def release_seats(
        showtime_id: int,
        data: ReleaseRequest,
        user_id: str = Depends(get_current_user_id),
        db: AsyncSession = Depends(getDB_session)):
    key = _instance_key(showtime_id, data)
    return await crud_reservation.release(db, key, user_id, data.seat_ids)


@router.post("/{showtime_id}/finalize", response_model=FinalizeResponse,
             dependencies=[Depends(require_order_service)])
async def finalize_seats(
        showtime_id: int,
        data: FinalizeRequest,
        idem_key: Optional[str] = Header(default=None, alias="X-Idempotency-Key"),
        db: AsyncSession = Depends(getDB_session),
        redis: Redis = Depends(get_redis)):
    cached, is_repeat = await check_idempotency(redis, "finalize", idem_key)
    if is_repeat:
        return cached
    key = _instance_key(showtime_id, data)
    result = await crud_reservation.finalize(db, key, data.seat_ids, data.order_id)
    await save_idempotency(redis, "finalize", idem_key, result.model_dump(mode="json"))
    return result
