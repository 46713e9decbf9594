from __future__ import annotations

from datetime import date

from app.services.availability import snapshot_from_rows
from app.services.calendar import calendar_bars, calendar_overview, reservations_on, window_dates


def _snapshot():
    rooms = [
        {"id": "r101", "room_number": "101", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r102", "room_number": "102", "room_type_id": "deluxe", "status": "Available"},
        {"id": "r103", "room_number": "103", "room_type_id": "deluxe", "status": "Blocked"},
    ]
    reservations = [
        {
            "id": "early",
            "room_id": "r101",
            "check_in_date": "2026-02-27",
            "check_out_date": "2026-03-02",
            "status": "Checked-in",
            "guests": {"name": "Asha Rao"},
        },
        {
            "id": "late",
            "room_id": "r102",
            "check_in_date": "2026-03-03",
            "check_out_date": "2026-03-10",
            "status": "Confirmed",
            "guests": {"name": "Vikram Shah"},
        },
        {
            "id": "gone",
            "room_id": "r101",
            "check_in_date": "2026-03-02",
            "check_out_date": "2026-03-04",
            "status": "Cancelled",
        },
    ]
    return snapshot_from_rows(rooms, reservations)


def test_window_dates():
    assert window_dates("2026-03-01", 3) == [date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 3)]


def test_reservations_on_excludes_checkout_day():
    snapshot = _snapshot()

    assert [row["id"] for row in reservations_on(snapshot, "2026-03-01")] == ["early"]
    assert reservations_on(snapshot, "2026-03-02") == []


def test_calendar_overview_counts_bookings_and_free_rooms():
    overview = calendar_overview(_snapshot(), "2026-03-01", 3)

    assert overview == [
        {"date": date(2026, 3, 1), "bookings": 1, "free_rooms": 1},
        {"date": date(2026, 3, 2), "bookings": 0, "free_rooms": 2},
        {"date": date(2026, 3, 3), "bookings": 1, "free_rooms": 1},
    ]


def test_calendar_bars_clip_to_the_window_and_skip_cancelled():
    bars = calendar_bars(_snapshot(), "2026-03-01", 5)

    assert [bar["reservation_id"] for bar in bars] == ["early", "late"]
    early, late = bars
    assert (early["row"], early["offset"], early["span"]) == (0, 0, 1)
    assert early["starts_before"] is True
    assert early["ends_after"] is False
    assert early["guest_name"] == "Asha Rao"
    assert (late["row"], late["offset"], late["span"]) == (1, 2, 3)
    assert late["starts_before"] is False
    assert late["ends_after"] is True
