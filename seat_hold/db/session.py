import logging
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from seat_hold.core.config import get_settings
from seat_hold.db.base import Base

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(url: str, echo: bool = False, **kwargs) -> AsyncEngine:
    """
    Create an async engine for the given url.
    For sqlite every transaction is opened with BEGIN IMMEDIATE so concurrent
    writers queue on the database lock instead of failing on lock upgrade.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"timeout": 30})
    engine = create_async_engine(url, echo=echo, future=True, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

async_session = build_session_factory(engine)


async def getDB_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async DB session
    and ensures it's closed after the request.
    """
    async with async_session() as session:
        yield session


async def init_db(bind: AsyncEngine = engine) -> None:
    """
    Create all tables based on models.
    """
    # register every mapped class on Base.metadata
    import seat_hold.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Created all tables")
