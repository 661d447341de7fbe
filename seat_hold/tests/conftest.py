import pytest
from datetime import date, time
from httpx import ASGITransport, AsyncClient
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from seat_hold.app import create_app
from seat_hold.core.config import settings
from seat_hold.db.base import Base
from seat_hold.db.session import build_engine, build_session_factory, getDB_session
from seat_hold.crud.showtime import crud_showtime
from seat_hold.models import Movie, Room, Seat, SeatType, Showtime, ShowtimeSlot, Theater
from seat_hold.schemas.showtime import ShowtimeInstanceKey

SHOW_DATE = date(2024, 6, 1)
START_TIME = time(19, 0)
ROOM_NAME = "R1"


@pytest.fixture
async def db_engine(tmp_path):
    """Create a database engine for the tests.

    Function-scoped so every test starts from empty tables in its own event loop.
    """
    test_db_url = settings.TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'seat_hold_test.db'}"
    engine = build_engine(test_db_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a database session for the tests."""
    async_session = build_session_factory(db_engine)

    async with async_session() as session:
        yield session


@pytest.fixture
def db_session_factory(db_engine):
    """Factory to create multiple sessions for concurrent tests."""
    return build_session_factory(db_engine)


@pytest.fixture
async def redis_client():
    """Redis client for tests that need the lease or idempotency keys. Skips without a server."""
    redis = Redis.from_url(
        settings.REDIS_URL,
        decode_responses=False,
        socket_connect_timeout=2
    )
    try:
        await redis.ping()
    except (RedisError, OSError):
        await redis.aclose()
        pytest.skip("Redis is not reachable")
    keys = await redis.keys("idempotency:finalize:test-*") + await redis.keys("sweeper:*")
    if keys:
        await redis.delete(*keys)
    try:
        yield redis
    finally:
        keys = await redis.keys("idempotency:finalize:test-*") + await redis.keys("sweeper:*")
        if keys:
            await redis.delete(*keys)
        await redis.aclose()


def seat_type_for(row: str, num: int) -> SeatType:
    if row == "A" and num <= 2:
        return SeatType.FOUR_DX
    if row == "E":
        return SeatType.VIP
    if row == "F" and 2 <= num <= 9:
        return SeatType.COUPLE
    return SeatType.NORMAL


@pytest.fixture
async def seeded_showtime(db_engine):
    """
    One screening in room R1 on 2024-06-01 at 19:00.

    Rows A-F x 10 seats. A1-A2 are 4dx, row E is vip, F2-F9 are couple seats
    (pairs F2-F3, F4-F5, F6-F7, F8-F9), A10 is under maintenance.
    """
    async_session = async_sessionmaker[AsyncSession](bind=db_engine, expire_on_commit=False)

    async with async_session() as session:
        async with session.begin():
            theater = Theater(name="Test Theater", city="Test City")
            session.add(theater)
            await session.flush()

            room = Room(theater_id=theater.id, name=ROOM_NAME, rows=6, cols=10)
            session.add(room)
            await session.flush()

            for row in ["A", "B", "C", "D", "E", "F"]:
                for num in range(1, 11):
                    session.add(Seat(
                        room_id=room.id,
                        seat_code=f"{row}{num}",
                        row_label=row,
                        seat_number=num,
                        seat_type=seat_type_for(row, num),
                        is_maintenance=(row == "A" and num == 10),
                    ))

            movie = Movie(title="Test Movie", duration_mins=120)
            session.add(movie)
            await session.flush()

            showtime = Showtime(movie_id=movie.id, theater_id=theater.id)
            session.add(showtime)
            await session.flush()

            session.add(ShowtimeSlot(showtime_id=showtime.id, room_id=room.id,
                                     show_date=SHOW_DATE, start_time=START_TIME))
            showtime_id, movie_id, theater_id = showtime.id, movie.id, theater.id

        key = ShowtimeInstanceKey(showtime_id=showtime_id, date=SHOW_DATE, start_time=START_TIME, room=ROOM_NAME)
        slot_id, _ = await crud_showtime.initialize_seats(session, key)

    yield {
        "key": key,
        "slot_id": slot_id,
        "showtime_id": showtime_id,
        "movie_id": movie_id,
        "theater_id": theater_id,
    }


@pytest.fixture
def seat_key(seeded_showtime) -> ShowtimeInstanceKey:
    return seeded_showtime["key"]


@pytest.fixture
def seat_hold_app():
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def app_client(seat_hold_app, db_session_factory):
    """HTTP client against the app with the test database wired in. Lifespan does not run."""
    async def override_db_session():
        async with db_session_factory() as session:
            yield session

    seat_hold_app.dependency_overrides[getDB_session] = override_db_session
    async with AsyncClient(transport=ASGITransport(app=seat_hold_app), base_url="http://test") as client:
        yield client
