from datetime import date, time
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from seat_hold.core.auth import get_viewer_context, require_internal_service
from seat_hold.crud.seat_ledger import crud_seat_ledger
from seat_hold.crud.showtime import crud_showtime
from seat_hold.db.session import getDB_session
from seat_hold.schemas.reservation import SlotRequest, SweepResponse
from seat_hold.schemas.seat_map import SeatMapResponse
from seat_hold.schemas.showtime import InitializeSeatsResponse, ShowtimeInstanceKey
from seat_hold.services.seat_view import ViewerContext
from seat_hold.workers.hold_expiry_sweeper import sweep_expired_holds

router = APIRouter(
    prefix="/showtimes"
)


@router.get("/seats", response_model=SeatMapResponse)
async def get_seat_map_by_movie(
        movie_id: int,
        theater_id: int,
        date: date,
        start_time: time,
        room: str = Query(min_length=1),
        viewer: ViewerContext = Depends(get_viewer_context),
        db: AsyncSession = Depends(getDB_session)):
    key = ShowtimeInstanceKey(movie_id=movie_id, theater_id=theater_id,
                              date=date, start_time=start_time, room=room)
    return await crud_seat_ledger.get_seat_map_for_viewer(db, key, viewer.user_id)


@router.post("/release-expired", response_model=SweepResponse,
             dependencies=[Depends(require_internal_service)])
async def release_expired(db: AsyncSession = Depends(getDB_session)):
    released = await sweep_expired_holds(db)
    return SweepResponse(released=released)


@router.get("/{showtime_id}/seats", response_model=SeatMapResponse)
async def get_seat_map(
        showtime_id: int,
        date: date,
        start_time: time,
        room: str = Query(min_length=1),
        viewer: ViewerContext = Depends(get_viewer_context),
        db: AsyncSession = Depends(getDB_session)):
    key = ShowtimeInstanceKey(showtime_id=showtime_id, date=date, start_time=start_time, room=room)
    return await crud_seat_ledger.get_seat_map_for_viewer(db, key, viewer.user_id)


@router.post("/{showtime_id}/initialize-seats", response_model=InitializeSeatsResponse,
             dependencies=[Depends(require_internal_service)])
async def initialize_seats(
        showtime_id: int,
        data: SlotRequest,
        db: AsyncSession = Depends(getDB_session)):
    key = ShowtimeInstanceKey(showtime_id=showtime_id, **data.model_dump())
    slot_id, created = await crud_showtime.initialize_seats(db, key)
    return InitializeSeatsResponse(slot_id=slot_id, created=created)
