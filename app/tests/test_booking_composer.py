from __future__ import annotations

from datetime import date

import pytest

from app.services.availability import snapshot_from_rows
from app.services.booking_composer import (
    auto_assign_rooms,
    decompose_cells,
    expand_intent,
    find_related,
    group_reservations,
    validate_room_slots,
)
from app.services.errors import BookingValidationError


def _rooms() -> list[dict]:
    return [
        {"id": "r110", "room_number": "110", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r102", "room_number": "102", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r101", "room_number": "101", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r201", "room_number": "201", "room_type_id": "suite", "status": "Available"},
    ]


def test_decompose_cells_splits_runs_on_gaps():
    cells = [
        ("r101", "2026-03-01"),
        ("r101", "2026-03-02"),
        ("r101", "2026-03-04"),
        ("r102", "2026-03-01"),
    ]

    intents = decompose_cells(cells)

    assert intents == [
        {
            "room_id": "r101",
            "check_in_date": date(2026, 3, 1),
            "check_out_date": date(2026, 3, 3),
            "nights": 2,
        },
        {
            "room_id": "r101",
            "check_in_date": date(2026, 3, 4),
            "check_out_date": date(2026, 3, 5),
            "nights": 1,
        },
        {
            "room_id": "r102",
            "check_in_date": date(2026, 3, 1),
            "check_out_date": date(2026, 3, 2),
            "nights": 1,
        },
    ]


def test_decompose_cells_ignores_selection_order_and_duplicates():
    cells = [("r101", "2026-03-03"), ("r101", "2026-03-01"), ("r101", "2026-03-02"), ("r101", "2026-03-02")]

    intents = decompose_cells(cells)

    assert len(intents) == 1
    assert intents[0]["check_in_date"] == date(2026, 3, 1)
    assert intents[0]["check_out_date"] == date(2026, 3, 4)


def test_expand_intent_returns_the_selected_nights():
    cells = [("r101", "2026-03-01"), ("r101", "2026-03-02"), ("r101", "2026-03-05")]

    nights = [day for intent in decompose_cells(cells) for day in expand_intent(intent)]

    assert nights == [date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 5)]


def test_auto_assign_picks_lowest_free_room_number_first():
    snapshot = snapshot_from_rows(
        _rooms(),
        [
            {
                "id": "a",
                "room_id": "r101",
                "check_in_date": "2026-03-01",
                "check_out_date": "2026-03-05",
                "status": "Confirmed",
            }
        ],
    )
    slots = [{"room_type_id": "deluxe"}, {"room_type_id": "deluxe"}]

    assigned = auto_assign_rooms(slots, snapshot, "2026-03-02", "2026-03-04")

    assert [slot["room_id"] for slot in assigned] == ["r102", "r110"]
    assert "room_id" not in slots[0]


def test_auto_assign_orders_room_numbers_numerically():
    rooms = [
        {"id": "r1001", "room_number": "1001", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r201", "room_number": "201", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r99", "room_number": "99", "room_type_id": "deluxe", "status": "Available"},
    ]
    slots = [{"room_type_id": "deluxe"}] * 3

    assigned = auto_assign_rooms(slots, snapshot_from_rows(rooms, []))

    assert [slot["room_id"] for slot in assigned] == ["r99", "r201", "r1001"]


def test_auto_assign_keeps_manual_choices_and_skips_claimed_rooms():
    snapshot = snapshot_from_rows(_rooms(), [])
    slots = [{"room_type_id": "deluxe"}, {"room_type_id": "deluxe", "room_id": "r101"}]

    assigned = auto_assign_rooms(slots, snapshot)

    assert [slot["room_id"] for slot in assigned] == ["r102", "r101"]


def test_auto_assign_leaves_slot_empty_when_type_is_sold_out():
    snapshot = snapshot_from_rows(_rooms(), [])
    slots = [{"room_type_id": "suite"}, {"room_type_id": "suite"}]

    assigned = auto_assign_rooms(slots, snapshot)

    assert assigned[0]["room_id"] == "r201"
    assert assigned[1].get("room_id") is None
    with pytest.raises(BookingValidationError) as exc_info:
        validate_room_slots(assigned)
    assert exc_info.value.errors == ["Assign room numbers for all 2 room(s)"]


def test_validate_room_slots_reports_every_problem():
    slots = [
        {"room_type_id": None, "room_id": "r101"},
        {"room_type_id": "deluxe", "room_id": "r101"},
        {"room_type_id": "deluxe"},
    ]

    with pytest.raises(BookingValidationError) as exc_info:
        validate_room_slots(slots)

    assert exc_info.value.errors == [
        "Select a room type for all 3 room(s)",
        "Assign room numbers for all 3 room(s)",
        "Cannot assign the same room multiple times",
    ]


def test_validate_room_slots_requires_at_least_one_room():
    with pytest.raises(BookingValidationError, match="at least one room"):
        validate_room_slots([])


def _legacy_row(reservation_id: str, created_at: str, **overrides) -> dict:
    row = {
        "id": reservation_id,
        "guest_id": "g1",
        "check_in_date": "2026-03-01",
        "check_out_date": "2026-03-03",
        "booking_source": "direct",
        "agent_id": None,
        "meal_plan": "BO",
        "created_at": created_at,
    }
    row.update(overrides)
    return row


def test_find_related_uses_booking_group_id_when_present():
    rows = [
        {"id": "a", "booking_group_id": "grp-1", "guest_id": "g1"},
        {"id": "b", "booking_group_id": "grp-1", "guest_id": "g1"},
        {"id": "c", "booking_group_id": "grp-2", "guest_id": "g1"},
    ]

    related = find_related(rows[0], rows)

    assert [row["id"] for row in related] == ["a", "b"]


def test_find_related_falls_back_to_creation_window_for_legacy_rows():
    rows = [
        _legacy_row("a", "2026-03-01T10:00:00+00:00"),
        _legacy_row("b", "2026-03-01T10:00:20+00:00"),
        _legacy_row("c", "2026-03-01T10:00:45+00:00"),
        _legacy_row("d", "2026-03-01T10:00:05+00:00", meal_plan="FB"),
    ]

    related = find_related(rows[0], rows, window_seconds=30)

    assert [row["id"] for row in related] == ["a", "b"]


def test_find_related_returns_only_itself_when_alone():
    row = _legacy_row("a", "2026-03-01T10:00:00Z")

    assert find_related(row, [row]) == [row]


def test_group_reservations_places_each_row_once():
    rows = [
        {"id": "a", "booking_group_id": "grp-1"},
        {"id": "b", "booking_group_id": "grp-2"},
        {"id": "c", "booking_group_id": "grp-1"},
    ]

    groups = group_reservations(rows)

    assert [[row["id"] for row in group] for group in groups] == [["a", "c"], ["b"]]
