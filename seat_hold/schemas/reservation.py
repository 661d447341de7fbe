from datetime import date, datetime, time
from typing import List, Optional
from pydantic import BaseModel, Field


class SlotRequest(BaseModel):
    date: date
    start_time: time
    room: str = Field(min_length=1, max_length=50)


class HoldRequest(SlotRequest):
    seat_ids: List[str] = Field(min_length=1)


class ReleaseRequest(SlotRequest):
    # None releases every seat the caller holds in this screening
    seat_ids: Optional[List[str]] = None


class FinalizeRequest(SlotRequest):
    seat_ids: List[str] = Field(min_length=1)
    order_id: str = Field(min_length=1, max_length=64)


class HoldResponse(BaseModel):
    seat_ids: List[str]
    held_by: str
    hold_expires_at: datetime


class ReleaseResponse(BaseModel):
    released_seat_ids: List[str]


class FinalizeResponse(BaseModel):
    order_id: str
    seat_ids: List[str]


class SweepResponse(BaseModel):
    released: int
