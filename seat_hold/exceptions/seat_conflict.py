from typing import Iterable
from .seat_hold_error import SeatHoldError


class SeatConflictException(SeatHoldError):
    """One or more seats are sold, under maintenance or held by someone else."""

    def __init__(self, rejected_seat_ids: Iterable[str], message: str = "One or more seats are not available"):
        self.rejected_seat_ids = sorted(rejected_seat_ids)
        super().__init__(message, status_code=409)

    def to_content(self) -> dict:
        return {"detail": self.message, "rejected_seat_ids": self.rejected_seat_ids}


class SeatAlreadySoldException(SeatConflictException):
    def __init__(self, rejected_seat_ids: Iterable[str]):
        super().__init__(rejected_seat_ids, "One or more seats are already sold under another order")
