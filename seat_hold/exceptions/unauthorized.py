from .seat_hold_error import SeatHoldError


class UnauthorizedException(SeatHoldError):
    message = "Authentication required"

    def __init__(self, message: str = message):
        super().__init__(message, status_code=401)
