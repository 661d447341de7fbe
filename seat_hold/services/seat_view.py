from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Set

from seat_hold.models.seat import SeatType, ShowSeatStatus
from seat_hold.schemas.seat_map import SeatDisplayStatus, SeatMapResponse, SeatRecordResponse


@dataclass(frozen=True)
class ViewerContext:
    """Who is looking at the seat map. Passed to views instead of living in a global store."""
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


_FREE_SEAT_DISPLAY = {
    SeatType.NORMAL: SeatDisplayStatus.AVAILABLE,
    SeatType.VIP: SeatDisplayStatus.VIP,
    SeatType.COUPLE: SeatDisplayStatus.COUPLE,
    SeatType.FOUR_DX: SeatDisplayStatus.FOUR_DX,
}


def derive_display_status(record: SeatRecordResponse) -> SeatDisplayStatus:
    if record.status == ShowSeatStatus.SOLD:
        return SeatDisplayStatus.SOLD
    if record.status == ShowSeatStatus.MAINTENANCE:
        return SeatDisplayStatus.MAINTENANCE
    if record.status == ShowSeatStatus.HELD:
        return SeatDisplayStatus.HELD_BY_ME if record.is_held_by_viewer else SeatDisplayStatus.HELD_BY_OTHER
    return _FREE_SEAT_DISPLAY[record.type]


def build_display_map(seat_map: SeatMapResponse) -> Dict[str, SeatDisplayStatus]:
    return {record.seat_id: derive_display_status(record) for record in seat_map.seats}


class PendingOverlay:
    """
    Optimistic seat states shown between a hold request and the next
    authoritative seat map. Only for rendering: hold and finalize decisions
    always go through the server.
    """

    def __init__(self, context: ViewerContext):
        self.context = context
        self._pending: Set[str] = set()
        self._answered: Set[str] = set()

    @property
    def pending(self) -> Set[str]:
        return set(self._pending)

    def mark_pending(self, seat_ids: Iterable[str]) -> None:
        seat_ids = set(seat_ids)
        self._pending.update(seat_ids)
        self._answered.difference_update(seat_ids)

    def mark_answered(self, seat_ids: Iterable[str]) -> None:
        """The hold request for these seats came back, successful or not."""
        self._answered.update(set(seat_ids) & self._pending)

    def discard(self, seat_ids: Iterable[str]) -> None:
        seat_ids = set(seat_ids)
        self._pending.difference_update(seat_ids)
        self._answered.difference_update(seat_ids)

    def apply(self, seat_map: SeatMapResponse) -> Dict[str, SeatDisplayStatus]:
        display = build_display_map(seat_map)
        for seat_id in self._pending:
            if display.get(seat_id) not in (SeatDisplayStatus.SOLD, SeatDisplayStatus.MAINTENANCE,
                                            SeatDisplayStatus.HELD_BY_OTHER, None):
                display[seat_id] = SeatDisplayStatus.PENDING
        return display

    def reconcile(self, seat_map: SeatMapResponse) -> Dict[str, SeatDisplayStatus]:
        """
        Settle pending seats against a fresh map: confirmed holds, seats
        taken by someone else and seats whose hold request has been answered
        leave the overlay, the rest stay pending.
        Returns the server view with remaining pending seats laid over it.
        """
        display = build_display_map(seat_map)
        settled = {seat_id for seat_id in self._pending
                   if display.get(seat_id) in (SeatDisplayStatus.HELD_BY_ME, SeatDisplayStatus.HELD_BY_OTHER,
                                               SeatDisplayStatus.SOLD, SeatDisplayStatus.MAINTENANCE, None)}
        settled |= self._answered
        self._pending -= settled
        self._answered -= settled
        return self.apply(seat_map)
