from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

from seat_hold.models.seat import SeatType, ShowSeatStatus


class SeatDisplayStatus(str, Enum):
    AVAILABLE = "available"
    VIP = "vip"
    COUPLE = "couple"
    FOUR_DX = "4dx"
    HELD_BY_ME = "held-by-me"
    HELD_BY_OTHER = "held-by-other"
    SOLD = "sold"
    MAINTENANCE = "maintenance"
    PENDING = "pending"


class SeatLayoutResponse(BaseModel):
    room: str
    rows: int
    cols: int


class SeatRecordResponse(BaseModel):
    seat_id: str
    row: str
    number: int
    type: SeatType
    status: ShowSeatStatus
    held_by: Optional[str] = None
    held_at: Optional[datetime] = None
    hold_expires_at: Optional[datetime] = None
    is_held_by_viewer: bool = False
    display_status: Optional[SeatDisplayStatus] = None


class SeatMapResponse(BaseModel):
    showtime_id: int
    slot_id: int
    date: date
    start_time: time
    layout: SeatLayoutResponse
    seats: List[SeatRecordResponse]

    def seat(self, seat_id: str) -> SeatRecordResponse:
        for record in self.seats:
            if record.seat_id == seat_id:
                return record
        raise KeyError(seat_id)
