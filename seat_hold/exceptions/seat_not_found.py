from typing import Iterable
from .seat_hold_error import SeatHoldError


class SeatNotFoundException(SeatHoldError):
    def __init__(self, seat_ids: Iterable[str]):
        self.seat_ids = sorted(seat_ids)
        super().__init__(
            f"Seats not found in layout: {', '.join(self.seat_ids)}", status_code=404)

    def to_content(self) -> dict:
        return {"detail": self.message, "missing_seat_ids": self.seat_ids}
