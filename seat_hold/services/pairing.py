from typing import Dict, Iterable, List, NamedTuple, Optional

from seat_hold.exceptions import PairingViolationException
from seat_hold.models.seat import SeatType


class LayoutSeat(NamedTuple):
    seat_code: str
    row_label: str
    seat_number: int
    seat_type: SeatType


Layout = Dict[str, LayoutSeat]


def seat_sort_key(seat: LayoutSeat):
    return (seat.row_label, seat.seat_number)


def _by_position(layout: Layout) -> Dict[tuple, LayoutSeat]:
    return {(s.row_label, s.seat_number): s for s in layout.values()}


def pair_seat_code(layout: Layout, seat_code: str) -> Optional[str]:
    """
    Partner of a couple seat, or None for other seat types.

    Couple seats pair up inside each contiguous run of couple seats in a row,
    counted from the first seat of the run: 1-2, 3-4 for a run starting at
    column 1; 6-7 for a run starting at column 2 or 6.
    Raises PairingViolationException when the partner is missing.
    """
    seat = layout[seat_code]
    if seat.seat_type != SeatType.COUPLE:
        return None
    positions = _by_position(layout)

    def is_couple(number: int) -> bool:
        other = positions.get((seat.row_label, number))
        return other is not None and other.seat_type == SeatType.COUPLE

    start = seat.seat_number
    while is_couple(start - 1):
        start -= 1
    offset = seat.seat_number - start
    partner_number = seat.seat_number + 1 if offset % 2 == 0 else seat.seat_number - 1
    if not is_couple(partner_number):
        raise PairingViolationException([seat_code], "Couple seat has no partner in the layout")
    return positions[(seat.row_label, partner_number)].seat_code


def expand_couple_pairs(layout: Layout, seat_codes: Iterable[str]) -> List[str]:
    """Add the partner of every couple seat; result is unique and in layout order."""
    expanded = set()
    for code in seat_codes:
        expanded.add(code)
        partner = pair_seat_code(layout, code)
        if partner is not None:
            expanded.add(partner)
    return [s.seat_code for s in sorted((layout[c] for c in expanded), key=seat_sort_key)]


def find_split_pairs(layout: Layout, seat_codes: Iterable[str]) -> List[str]:
    """Couple seats in seat_codes whose partner is not in seat_codes."""
    codes = set(seat_codes)
    split = []
    for code in codes:
        partner = pair_seat_code(layout, code)
        if partner is not None and partner not in codes:
            split.append(code)
    return sorted(split)
