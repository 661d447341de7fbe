from .seat_hold_error import SeatHoldError


class ShowtimeNotFoundException(SeatHoldError):
    message = "Showtime not found"

    def __init__(self, message: str = message):
        super().__init__(message, status_code=404)
