import logging

from seat_hold.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # sqlalchemy echo goes through its own logger, keep it out of INFO noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
