from typing import Iterable, List, Optional

from seat_hold.core.config import settings
from seat_hold.exceptions import SeatNotFoundException, SelectionRuleException
from seat_hold.models.seat import SeatType
from seat_hold.services.pairing import Layout, expand_couple_pairs, pair_seat_code


def validate_selection(layout: Layout, seat_codes: Iterable[str], max_seats: Optional[int] = None) -> List[str]:
    """
    Checkout business rules, applied before a hold reaches the coordinator:
    at most max_seats seats and a single seat type per checkout.
    Returns the selection with couple partners added.
    """
    max_seats = max_seats or settings.MAX_SEATS_PER_CHECKOUT
    seat_codes = list(seat_codes)
    missing = set(seat_codes) - layout.keys()
    if missing:
        raise SeatNotFoundException(missing)
    expanded = expand_couple_pairs(layout, seat_codes)
    if not expanded:
        raise SelectionRuleException("Select at least one seat")
    if len(expanded) > max_seats:
        raise SelectionRuleException(f"You can select at most {max_seats} seats per checkout")
    seat_types = {layout[code].seat_type for code in expanded}
    if len(seat_types) > 1:
        names = ", ".join(sorted(t.value for t in seat_types))
        raise SelectionRuleException(f"Seats of different types cannot be combined in one checkout ({names})")
    return expanded


def check_no_single_gap(layout: Layout, selected: Iterable[str], unavailable: Iterable[str] = ()) -> None:
    """
    A selection may not strand one free seat between a selected seat and an
    occupied seat or the end of the row. unavailable holds sold, maintenance
    and other customers' held seats. Couple seats are exempt.
    """
    chosen = set(selected)
    taken = set(unavailable)
    positions = {(s.row_label, s.seat_number): s.seat_code for s in layout.values()}
    row_bounds = {}
    for seat in layout.values():
        low, high = row_bounds.get(seat.row_label, (seat.seat_number, seat.seat_number))
        row_bounds[seat.row_label] = (min(low, seat.seat_number), max(high, seat.seat_number))

    def is_free(number: int, row: str) -> bool:
        code = positions.get((row, number))
        return code is not None and code not in chosen and code not in taken

    def is_blocked(number: int, row: str) -> bool:
        low, high = row_bounds[row]
        if number < low or number > high:
            return True
        code = positions.get((row, number))
        return code is not None and (code in chosen or code in taken)

    for code in sorted(chosen):
        seat = layout[code]
        if seat.seat_type == SeatType.COUPLE:
            continue
        for step in (-1, 1):
            if is_free(seat.seat_number + step, seat.row_label) \
                    and is_blocked(seat.seat_number + 2 * step, seat.row_label):
                gap = positions[(seat.row_label, seat.seat_number + step)]
                raise SelectionRuleException(f"Seat {gap} would be left empty on its own")


class SeatSelection:
    """
    Seats a customer has picked for one showtime before pressing continue.

    The first seat locks the seat type of the checkout; couple seats toggle
    together with their partner.
    validate() runs the checks that only apply when the customer continues.
    """

    def __init__(self, layout: Layout, max_seats: Optional[int] = None):
        self.layout = layout
        self.max_seats = max_seats or settings.MAX_SEATS_PER_CHECKOUT
        self._selected: List[str] = []

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    @property
    def locked_type(self) -> Optional[SeatType]:
        if not self._selected:
            return None
        return self.layout[self._selected[0]].seat_type

    def toggle(self, seat_code: str, unavailable: Iterable[str] = ()) -> List[str]:
        if seat_code not in self.layout:
            raise SelectionRuleException(f"Seat {seat_code} does not exist")
        partner = pair_seat_code(self.layout, seat_code)
        group = [seat_code] if partner is None else [seat_code, partner]

        if seat_code in self._selected:
            self._selected = [s for s in self._selected if s not in group]
            return self.selected

        blocked = set(unavailable)
        taken = [s for s in group if s in blocked]
        if taken:
            raise SelectionRuleException(f"Seat {', '.join(taken)} is not available")
        seat_type = self.layout[seat_code].seat_type
        if self.locked_type is not None and self.locked_type != seat_type:
            raise SelectionRuleException(
                f"Only {self.locked_type.value} seats can be selected, deselect them before choosing {seat_type.value} seats")
        if len(self._selected) + len(group) > self.max_seats:
            raise SelectionRuleException(f"You can select at most {self.max_seats} seats per checkout")
        self._selected.extend(group)
        return self.selected

    def validate(self, unavailable: Iterable[str] = ()) -> List[str]:
        if not self._selected:
            raise SelectionRuleException("Select at least one seat")
        check_no_single_gap(self.layout, self._selected, unavailable)
        return self.selected

    def clear(self) -> None:
        self._selected = []
