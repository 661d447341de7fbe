from typing import Iterable
from .seat_hold_error import SeatHoldError


class PairingViolationException(SeatHoldError):
    def __init__(self, seat_ids: Iterable[str], message: str = "Couple seats must be held, released and sold as a pair"):
        self.seat_ids = sorted(seat_ids)
        super().__init__(f"{message}: {', '.join(self.seat_ids)}", status_code=409)
