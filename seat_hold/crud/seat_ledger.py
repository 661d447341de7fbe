from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from seat_hold.core.timeutils import as_utc, utcnow
from seat_hold.crud.showtime import crud_showtime
from seat_hold.models.seat import ShowSeat, ShowSeatStatus
from seat_hold.schemas.seat_map import SeatLayoutResponse, SeatMapResponse, SeatRecordResponse
from seat_hold.schemas.showtime import ShowtimeInstanceKey
from seat_hold.services.seat_view import derive_display_status


def hold_is_live(record: ShowSeat, now: datetime) -> bool:
    return (record.status == ShowSeatStatus.HELD
            and record.hold_expires_at is not None
            and as_utc(record.hold_expires_at) > now)


def to_record(record: ShowSeat, now: datetime, viewer_id: Optional[str] = None,
              mask_other_holders: bool = False) -> SeatRecordResponse:
    """
    Seat record as readers see it. An expired hold reads as available even
    when the sweeper has not reset the row yet.
    """
    status = record.status
    held_by, held_at, expires_at = record.held_by, as_utc(record.held_at), as_utc(record.hold_expires_at)
    if status == ShowSeatStatus.HELD and not hold_is_live(record, now):
        status = ShowSeatStatus.AVAILABLE
        held_by = held_at = expires_at = None
    if status != ShowSeatStatus.HELD:
        held_by = held_at = expires_at = None

    is_mine = status == ShowSeatStatus.HELD and viewer_id is not None and held_by == viewer_id
    if mask_other_holders and not is_mine:
        held_by = None
    return SeatRecordResponse(
        seat_id=record.seat_code,
        row=record.row_label,
        number=record.seat_number,
        type=record.seat_type,
        status=status,
        held_by=held_by,
        held_at=held_at,
        hold_expires_at=expires_at,
        is_held_by_viewer=is_mine,
    )


class CRUDSeatLedger:
    async def _read(self, db: AsyncSession, key: ShowtimeInstanceKey, now: datetime,
                    viewer_id: Optional[str], mask_other_holders: bool) -> SeatMapResponse:
        async with db.begin():
            slot = await crud_showtime.resolve_slot(db, key)
            room = await crud_showtime.get_room(db, slot)
            records = (await db.scalars(
                select(ShowSeat)
                .where(ShowSeat.slot_id == slot.id)
                .order_by(ShowSeat.row_label, ShowSeat.seat_number))).all()
            seat_map = SeatMapResponse(
                showtime_id=slot.showtime_id,
                slot_id=slot.id,
                date=slot.show_date,
                start_time=slot.start_time,
                layout=SeatLayoutResponse(room=room.name, rows=room.rows, cols=room.cols),
                seats=[to_record(r, now, viewer_id, mask_other_holders) for r in records],
            )
        if mask_other_holders:
            for record in seat_map.seats:
                record.display_status = derive_display_status(record)
        return seat_map

    async def get_seat_map(self, db: AsyncSession, key: ShowtimeInstanceKey,
                           now: Optional[datetime] = None) -> SeatMapResponse:
        return await self._read(db, key, now or utcnow(), None, False)

    async def get_seat_map_for_viewer(self, db: AsyncSession, key: ShowtimeInstanceKey,
                                      viewer_id: Optional[str], now: Optional[datetime] = None) -> SeatMapResponse:
        """
        Seat map for one customer. Seats they hold come back with
        is_held_by_viewer so a checkout can be resumed; other holders stay anonymous.
        """
        return await self._read(db, key, now or utcnow(), viewer_id, True)


crud_seat_ledger = CRUDSeatLedger()
