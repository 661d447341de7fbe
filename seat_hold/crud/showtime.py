import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from seat_hold.exceptions import ShowtimeNotFoundException
from seat_hold.models.seat import Seat, ShowSeat, ShowSeatStatus
from seat_hold.models.showtime import Showtime, ShowtimeSlot
from seat_hold.models.theater import Room
from seat_hold.schemas.showtime import ShowtimeInstanceKey
from seat_hold.services.pairing import Layout, LayoutSeat

logger = logging.getLogger(__name__)


class CRUDShowtime:
    async def resolve_slot(self, db: AsyncSession, key: ShowtimeInstanceKey) -> ShowtimeSlot:
        """
        Find the screening a key points at. Must run inside the caller's transaction.
        """
        stmt = (select(ShowtimeSlot)
                .join(Showtime, ShowtimeSlot.showtime_id == Showtime.id)
                .join(Room, ShowtimeSlot.room_id == Room.id)
                .where(ShowtimeSlot.show_date == key.date)
                .where(ShowtimeSlot.start_time == key.start_time)
                .where(Room.name == key.room)
                .where(Room.theater_id == Showtime.theater_id))
        if key.showtime_id is not None:
            stmt = stmt.where(Showtime.id == key.showtime_id)
        else:
            stmt = stmt.where(Showtime.movie_id == key.movie_id,
                              Showtime.theater_id == key.theater_id)
        result = await db.execute(stmt)
        slot = result.scalar_one_or_none()
        if slot is None:
            raise ShowtimeNotFoundException(f"No screening for {key.describe()}")
        return slot

    async def get_room(self, db: AsyncSession, slot: ShowtimeSlot) -> Room:
        room = await db.get(Room, slot.room_id)
        if room is None:
            raise ShowtimeNotFoundException(f"Room {slot.room_id} not found")
        return room

    async def load_layout(self, db: AsyncSession, slot_id: int) -> Layout:
        result = await db.execute(
            select(ShowSeat.seat_code, ShowSeat.row_label, ShowSeat.seat_number, ShowSeat.seat_type)
            .where(ShowSeat.slot_id == slot_id))
        return {row.seat_code: LayoutSeat(row.seat_code, row.row_label, row.seat_number, row.seat_type)
                for row in result.all()}

    async def get_layout(self, db: AsyncSession, key: ShowtimeInstanceKey) -> Layout:
        async with db.begin():
            slot = await self.resolve_slot(db, key)
            return await self.load_layout(db, slot.id)

    async def initialize_seats(self, db: AsyncSession, key: ShowtimeInstanceKey) -> tuple[int, int]:
        """
        Create the seat records of a screening from its room template.
        Seats that already have a record are left alone, so this can be re-run
        after seats are added to the room. Returns (slot_id, created).
        """
        async with db.begin():
            slot = await self.resolve_slot(db, key)
            template = (await db.scalars(
                select(Seat).where(Seat.room_id == slot.room_id))).all()
            existing = set((await db.scalars(
                select(ShowSeat.seat_code).where(ShowSeat.slot_id == slot.id))).all())
            created = 0
            for seat in template:
                if seat.seat_code in existing:
                    continue
                db.add(ShowSeat(
                    slot_id=slot.id,
                    seat_code=seat.seat_code,
                    row_label=seat.row_label,
                    seat_number=seat.seat_number,
                    seat_type=seat.seat_type,
                    status=ShowSeatStatus.MAINTENANCE if seat.is_maintenance else ShowSeatStatus.AVAILABLE,
                ))
                created += 1
            slot_id = slot.id
        logger.info("Initialized %d seat records for slot %s", created, slot_id)
        return slot_id, created


crud_showtime = CRUDShowtime()
