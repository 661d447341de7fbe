from datetime import datetime, timedelta, timezone
from typing import Optional

from seat_hold.core.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes read back from the store.
    sqlite drops the offset on DateTime(timezone=True) columns, postgres keeps it.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hold_deadline(now: datetime) -> datetime:
    return now + timedelta(minutes=settings.HOLD_DURATION_MINUTES)
