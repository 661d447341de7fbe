import asyncio
import logging
from datetime import date, time, timedelta

from seat_hold.core.logging import configure_logging
from seat_hold.crud.showtime import crud_showtime
from seat_hold.db.session import async_session as AsyncSessionLocal, engine, init_db
from seat_hold.models import Movie, Room, Seat, SeatType, Showtime, ShowtimeSlot, Theater
from seat_hold.schemas.showtime import ShowtimeInstanceKey

logger = logging.getLogger(__name__)

ROWS = ["A", "B", "C", "D", "E", "F"]
COLS = 8


def seat_type_for_row(row: str) -> SeatType:
    if row == "E":
        return SeatType.VIP
    if row == "F":
        return SeatType.COUPLE
    return SeatType.NORMAL


async def seed() -> ShowtimeInstanceKey:
    async with AsyncSessionLocal() as session:
        async with session.begin():
            theater = Theater(name="CineJoy Downtown", city="Ho Chi Minh City")
            session.add(theater)
            await session.flush()

            room = Room(theater_id=theater.id, name="R1", rows=len(ROWS), cols=COLS)
            session.add(room)
            await session.flush()

            for row in ROWS:
                for num in range(1, COLS + 1):
                    session.add(Seat(
                        room_id=room.id,
                        seat_code=f"{row}{num}",
                        row_label=row,
                        seat_number=num,
                        seat_type=seat_type_for_row(row),
                    ))

            movie = Movie(title="The Long Night", duration_mins=125)
            session.add(movie)
            await session.flush()

            showtime = Showtime(movie_id=movie.id, theater_id=theater.id)
            session.add(showtime)
            await session.flush()

            show_date = date.today() + timedelta(days=1)
            session.add(ShowtimeSlot(showtime_id=showtime.id, room_id=room.id,
                                     show_date=show_date, start_time=time(19, 0)))
            key = ShowtimeInstanceKey(showtime_id=showtime.id, date=show_date,
                                      start_time=time(19, 0), room=room.name)

        slot_id, created = await crud_showtime.initialize_seats(session, key)
    logger.info("Seeded showtime %s slot %s with %d seats", key.showtime_id, slot_id, created)
    return key


async def main():
    configure_logging()
    await init_db()
    try:
        await seed()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
