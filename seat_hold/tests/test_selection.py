import pytest

from seat_hold.exceptions import SelectionRuleException
from seat_hold.models.seat import SeatType
from seat_hold.services.pairing import LayoutSeat
from seat_hold.services.selection import SeatSelection, check_no_single_gap, validate_selection


@pytest.fixture
def layout():
    seats = {}
    for row, seat_type in (("A", SeatType.NORMAL), ("B", SeatType.NORMAL), ("E", SeatType.VIP)):
        for num in range(1, 11):
            seats[f"{row}{num}"] = LayoutSeat(f"{row}{num}", row, num, seat_type)
    for num in range(1, 11):
        seat_type = SeatType.COUPLE if 2 <= num <= 9 else SeatType.NORMAL
        seats[f"F{num}"] = LayoutSeat(f"F{num}", "F", num, seat_type)
    return seats


def test_validate_selection_expands_couple_seats(layout):
    assert validate_selection(layout, ["F6"]) == ["F6", "F7"]


def test_validate_selection_rejects_more_than_max(layout):
    with pytest.raises(SelectionRuleException):
        validate_selection(layout, [f"A{n}" for n in range(1, 10)])
    assert len(validate_selection(layout, [f"A{n}" for n in range(1, 9)])) == 8


def test_validate_selection_counts_couple_partners(layout):
    with pytest.raises(SelectionRuleException):
        validate_selection(layout, ["F2", "F4", "F6", "F8", "F1"], max_seats=8)


def test_validate_selection_rejects_mixed_types(layout):
    with pytest.raises(SelectionRuleException) as exc_info:
        validate_selection(layout, ["A1", "E1"])
    assert exc_info.value.status_code == 422


def test_validate_selection_rejects_empty(layout):
    with pytest.raises(SelectionRuleException):
        validate_selection(layout, [])


def test_first_seat_locks_the_type(layout):
    selection = SeatSelection(layout)
    selection.toggle("E3")
    assert selection.locked_type == SeatType.VIP
    with pytest.raises(SelectionRuleException):
        selection.toggle("A3")
    selection.toggle("E3")
    assert selection.locked_type is None
    assert selection.toggle("A3") == ["A3"]


def test_couple_seats_toggle_together(layout):
    selection = SeatSelection(layout)
    assert selection.toggle("F7") == ["F7", "F6"]
    assert selection.toggle("F6") == []


def test_toggle_respects_max_seats(layout):
    selection = SeatSelection(layout, max_seats=3)
    selection.toggle("F2")
    with pytest.raises(SelectionRuleException):
        selection.toggle("F4")
    assert selection.selected == ["F2", "F3"]


def test_toggle_rejects_unavailable_seats(layout):
    selection = SeatSelection(layout)
    with pytest.raises(SelectionRuleException):
        selection.toggle("F6", unavailable={"F7"})
    assert selection.selected == []


def test_clear(layout):
    selection = SeatSelection(layout)
    selection.toggle("B1")
    selection.clear()
    assert selection.selected == []


def test_single_gap_at_left_end_of_row(layout):
    with pytest.raises(SelectionRuleException) as exc_info:
        check_no_single_gap(layout, ["A2", "A3"])
    assert "A1" in exc_info.value.message


def test_single_gap_at_right_end_of_row(layout):
    with pytest.raises(SelectionRuleException) as exc_info:
        check_no_single_gap(layout, ["B8", "B9"])
    assert "B10" in exc_info.value.message


def test_single_gap_next_to_sold_seat(layout):
    with pytest.raises(SelectionRuleException) as exc_info:
        check_no_single_gap(layout, ["B7"], unavailable={"B5"})
    assert "B6" in exc_info.value.message


def test_selection_without_single_gap_passes(layout):
    check_no_single_gap(layout, ["A1", "A2"])
    check_no_single_gap(layout, ["B4", "B5"])
    check_no_single_gap(layout, ["B7"], unavailable={"B5", "B6"})


def test_couple_seats_are_exempt_from_gap_rule(layout):
    check_no_single_gap(layout, ["F2", "F3"])


def test_validate_before_continue(layout):
    selection = SeatSelection(layout)
    with pytest.raises(SelectionRuleException):
        selection.validate()
    selection.toggle("A2")
    with pytest.raises(SelectionRuleException):
        selection.validate()
    selection.toggle("A1")
    assert selection.validate() == ["A2", "A1"]
