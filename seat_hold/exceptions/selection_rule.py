from .seat_hold_error import SeatHoldError


class SelectionRuleException(SeatHoldError):
    def __init__(self, message: str):
        super().__init__(message, status_code=422)
