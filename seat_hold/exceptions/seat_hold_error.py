class SeatHoldError(Exception):
    message = "Seat hold error"

    def __init__(self, message: str = message, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self):
        return self.message

    def to_content(self) -> dict:
        return {"detail": self.message}
