from .seat_hold_error import SeatHoldError
from .showtime_not_found import ShowtimeNotFoundException
from .seat_not_found import SeatNotFoundException
from .seat_conflict import SeatConflictException, SeatAlreadySoldException
from .pairing_violation import PairingViolationException
from .selection_rule import SelectionRuleException
from .unauthorized import UnauthorizedException

__all__ = [
    "SeatHoldError",
    "ShowtimeNotFoundException",
    "SeatNotFoundException",
    "SeatConflictException",
    "SeatAlreadySoldException",
    "PairingViolationException",
    "SelectionRuleException",
    "UnauthorizedException",
]
