from datetime import date, time
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class ShowtimeInstanceKey(BaseModel):
    """
    One screening: a showtime (or its movie + theater) on a date, at a start
    time, in a room.
    """
    showtime_id: Optional[int] = None
    movie_id: Optional[int] = None
    theater_id: Optional[int] = None
    date: date
    start_time: time
    room: str = Field(min_length=1, max_length=50)

    @model_validator(mode="after")
    def check_showtime_reference(self):
        if self.showtime_id is None and (self.movie_id is None or self.theater_id is None):
            raise ValueError("showtime_id or both movie_id and theater_id are required")
        return self

    def describe(self) -> str:
        ref = f"showtime {self.showtime_id}" if self.showtime_id is not None \
            else f"movie {self.movie_id} at theater {self.theater_id}"
        return f"{ref} on {self.date.isoformat()} {self.start_time.strftime('%H:%M')} room {self.room}"


class InitializeSeatsResponse(BaseModel):
    slot_id: int
    created: int
