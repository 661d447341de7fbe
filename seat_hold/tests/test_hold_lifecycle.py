from datetime import timedelta

import pytest

from seat_hold.core.timeutils import utcnow
from seat_hold.crud.reservation import crud_reservation
from seat_hold.crud.seat_ledger import crud_seat_ledger
from seat_hold.exceptions import SeatConflictException, SeatNotFoundException, ShowtimeNotFoundException
from seat_hold.models.seat import ShowSeatStatus
from seat_hold.schemas.showtime import ShowtimeInstanceKey


@pytest.mark.asyncio
async def test_hold_then_release(db_session_factory, seat_key):
    """Held seats show up held by the user with an 8 minute deadline, release frees them."""
    now = utcnow()
    async with db_session_factory() as session:
        result = await crud_reservation.hold(session, seat_key, "user-1", ["D4", "D5"], now=now)
    assert result.seat_ids == ["D4", "D5"]
    assert result.hold_expires_at == now + timedelta(minutes=8)

    async with db_session_factory() as session:
        seat_map = await crud_seat_ledger.get_seat_map(session, seat_key, now=now)
    for seat_id in ("D4", "D5"):
        record = seat_map.seat(seat_id)
        assert record.status == ShowSeatStatus.HELD
        assert record.held_by == "user-1"
        assert record.hold_expires_at == now + timedelta(minutes=8)
    assert seat_map.seat("D6").status == ShowSeatStatus.AVAILABLE

    async with db_session_factory() as session:
        released = await crud_reservation.release(session, seat_key, "user-1", ["D4", "D5"], now=now)
    assert released.released_seat_ids == ["D4", "D5"]

    async with db_session_factory() as session:
        seat_map = await crud_seat_ledger.get_seat_map(session, seat_key, now=now)
    for seat_id in ("D4", "D5"):
        record = seat_map.seat(seat_id)
        assert record.status == ShowSeatStatus.AVAILABLE
        assert record.held_by is None
        assert record.hold_expires_at is None


@pytest.mark.asyncio
async def test_rehold_resets_expiry_and_keeps_held_at(db_session_factory, seat_key):
    start = utcnow()
    later = start + timedelta(minutes=5)
    async with db_session_factory() as session:
        await crud_reservation.hold(session, seat_key, "user-1", ["B2"], now=start)
    async with db_session_factory() as session:
        result = await crud_reservation.hold(session, seat_key, "user-1", ["B2"], now=later)
    assert result.hold_expires_at == later + timedelta(minutes=8)

    async with db_session_factory() as session:
        record = (await crud_seat_ledger.get_seat_map(session, seat_key, now=later)).seat("B2")
    assert record.held_at == start
    assert record.hold_expires_at == later + timedelta(minutes=8)


@pytest.mark.asyncio
async def test_hold_is_all_or_nothing(db_session_factory, seat_key):
    now = utcnow()
    async with db_session_factory() as session:
        await crud_reservation.hold(session, seat_key, "user-1", ["C5"], now=now)

    async with db_session_factory() as session:
        with pytest.raises(SeatConflictException) as exc_info:
            await crud_reservation.hold(session, seat_key, "user-2", ["C4", "C5", "C6"], now=now)
    assert exc_info.value.rejected_seat_ids == ["C5"]

    async with db_session_factory() as session:
        seat_map = await crud_seat_ledger.get_seat_map(session, seat_key, now=now)
    assert seat_map.seat("C4").status == ShowSeatStatus.AVAILABLE
    assert seat_map.seat("C6").status == ShowSeatStatus.AVAILABLE
    assert seat_map.seat("C5").held_by == "user-1"


@pytest.mark.asyncio
async def test_maintenance_seat_cannot_be_held(db_session_factory, seat_key):
    async with db_session_factory() as session:
        with pytest.raises(SeatConflictException) as exc_info:
            await crud_reservation.hold(session, seat_key, "user-1", ["A9", "A10"])
    assert exc_info.value.rejected_seat_ids == ["A10"]


@pytest.mark.asyncio
async def test_release_skips_seats_held_by_someone_else(db_session_factory, seat_key):
    now = utcnow()
    async with db_session_factory() as session:
        await crud_reservation.hold(session, seat_key, "user-1", ["B7"], now=now)
    async with db_session_factory() as session:
        released = await crud_reservation.release(session, seat_key, "user-2", ["B7", "B8"], now=now)
    assert released.released_seat_ids == []

    async with db_session_factory() as session:
        record = (await crud_seat_ledger.get_seat_map(session, seat_key, now=now)).seat("B7")
    assert record.held_by == "user-1"


@pytest.mark.asyncio
async def test_release_without_seat_ids_releases_all_of_the_users_holds(db_session_factory, seat_key):
    now = utcnow()
    async with db_session_factory() as session:
        await crud_reservation.hold(session, seat_key, "user-1", ["B1", "B2"], now=now)
    async with db_session_factory() as session:
        await crud_reservation.hold(session, seat_key, "user-2", ["B3"], now=now)

    async with db_session_factory() as session:
        released = await crud_reservation.release(session, seat_key, "user-1", now=now)
    assert released.released_seat_ids == ["B1", "B2"]

    async with db_session_factory() as session:
        seat_map = await crud_seat_ledger.get_seat_map(session, seat_key, now=now)
    assert seat_map.seat("B1").status == ShowSeatStatus.AVAILABLE
    assert seat_map.seat("B3").held_by == "user-2"


@pytest.mark.asyncio
async def test_unknown_seat_is_rejected(db_session_factory, seat_key):
    async with db_session_factory() as session:
        with pytest.raises(SeatNotFoundException) as exc_info:
            await crud_reservation.hold(session, seat_key, "user-1", ["B1", "Z99"])
    assert exc_info.value.seat_ids == ["Z99"]


@pytest.mark.asyncio
async def test_unknown_screening_is_not_found(db_session_factory, seat_key):
    other_room = ShowtimeInstanceKey(showtime_id=seat_key.showtime_id, date=seat_key.date,
                                     start_time=seat_key.start_time, room="R9")
    async with db_session_factory() as session:
        with pytest.raises(ShowtimeNotFoundException):
            await crud_seat_ledger.get_seat_map(session, other_room)
    async with db_session_factory() as session:
        with pytest.raises(ShowtimeNotFoundException):
            await crud_reservation.hold(session, other_room, "user-1", ["B1"])
