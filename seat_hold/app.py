import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from seat_hold.api.v1 import routes_health, routes_reservation, routes_showtime
from seat_hold.core.config import settings
from seat_hold.core.logging import configure_logging
from seat_hold.db import session
from seat_hold.exceptions import SeatHoldError
from seat_hold.redis import close_redis, redis_client
from seat_hold.workers.hold_expiry_sweeper import HoldExpirySweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if settings.ENV == "development":
        await session.init_db()

    sweeper_task = None
    if settings.SWEEPER_ENABLED:
        sweeper = HoldExpirySweeper(session.async_session, redis_client)
        sweeper_task = asyncio.create_task(sweeper.run())
        logger.info("Hold expiry sweeper started, interval %ss", sweeper.interval_seconds)
    yield
    if sweeper_task is not None:
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            pass
    await close_redis()
    logger.info("Shut down")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.PROJECT_DESCRIPTION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        routes_health.router,
        prefix=settings.API_V1_PREFIX
    )
    app.include_router(
        routes_showtime.router,
        prefix=settings.API_V1_PREFIX
    )
    app.include_router(
        routes_reservation.router,
        prefix=settings.API_V1_PREFIX
    )

    @app.exception_handler(SeatHoldError)
    async def seat_hold_error_handler(request, ex: SeatHoldError):
        return JSONResponse(status_code=ex.status_code, content=ex.to_content())

    @app.get("/")
    async def root():
        return {"message": "Seat hold backend is running"}
    return app


app = create_app()
