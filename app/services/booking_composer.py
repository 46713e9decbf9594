"""Turn raw calendar selections and room-detail slots into booking intents."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any

from app.services.availability import (
    AvailabilitySnapshot,
    as_date,
    free_rooms_of_type,
    is_room_free_for_range,
)
from app.services.errors import BookingValidationError

DEFAULT_GROUP_WINDOW_SECONDS = 30


def decompose_cells(cells: Iterable[tuple[str, date | str]]) -> list[dict[str, Any]]:
    """Split selected (room_id, date) cells into contiguous per-room stays.

    Each intent covers one run of consecutive nights; ``check_out_date`` is the
    day after the last selected night. Rooms keep the order in which they
    first appear in ``cells``.
    """
    dates_by_room: dict[str, set[date]] = {}
    for room_id, day in cells:
        dates_by_room.setdefault(room_id, set()).add(as_date(day))

    intents: list[dict[str, Any]] = []
    for room_id, days in dates_by_room.items():
        ordered = sorted(days)
        run = [ordered[0]]
        for day in ordered[1:]:
            if (day - run[-1]).days == 1:
                run.append(day)
                continue
            intents.append(_intent(room_id, run))
            run = [day]
        intents.append(_intent(room_id, run))
    return intents


def _intent(room_id: str, run: list[date]) -> dict[str, Any]:
    return {
        "room_id": room_id,
        "check_in_date": run[0],
        "check_out_date": run[-1] + timedelta(days=1),
        "nights": len(run),
    }


def expand_intent(intent: dict[str, Any]) -> list[date]:
    """Every night covered by an intent; the inverse of ``decompose_cells``."""
    start = as_date(intent["check_in_date"])
    end = as_date(intent["check_out_date"])
    return [start + timedelta(days=offset) for offset in range((end - start).days)]


_DIGITS = re.compile(r"(\d+)")


def _room_sort_key(room: dict[str, Any]) -> tuple:
    """Natural order for room numbers: 99 before 101, A2 before A10."""
    parts = _DIGITS.split(str(room.get("room_number") or ""))
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part.lower()) for part in parts)


def auto_assign_rooms(
    slots: list[dict[str, Any]],
    snapshot: AvailabilitySnapshot,
    check_in: date | str | None = None,
    check_out: date | str | None = None,
) -> list[dict[str, Any]]:
    """Fill in ``room_id`` for slots that only name a room type.

    First fit in room-number order, skipping rooms already claimed by another
    slot. Slots with no free candidate stay unassigned and are caught by
    ``validate_room_slots``.
    """
    updated = [dict(slot) for slot in slots]
    claimed = {slot["room_id"] for slot in updated if slot.get("room_id")}

    for slot in updated:
        if slot.get("room_id") or not slot.get("room_type_id"):
            continue
        candidates = sorted(free_rooms_of_type(snapshot, slot["room_type_id"]), key=_room_sort_key)
        for room in candidates:
            if room["id"] in claimed:
                continue
            if check_in and check_out and not is_room_free_for_range(
                snapshot, room["id"], check_in, check_out
            ):
                continue
            slot["room_id"] = room["id"]
            claimed.add(room["id"])
            break
    return updated


def validate_room_slots(slots: list[dict[str, Any]]) -> None:
    count = len(slots)
    errors: list[str] = []
    if not slots:
        errors.append("Add at least one room to the booking")
    if any(not slot.get("room_type_id") for slot in slots):
        errors.append(f"Select a room type for all {count} room(s)")
    if any(not slot.get("room_id") for slot in slots):
        errors.append(f"Assign room numbers for all {count} room(s)")

    assigned = [slot["room_id"] for slot in slots if slot.get("room_id")]
    if len(assigned) != len(set(assigned)):
        errors.append("Cannot assign the same room multiple times")

    if errors:
        raise BookingValidationError(errors)


def _created_at(row: dict[str, Any]) -> datetime | None:
    value = row.get("created_at")
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _same_booking(
    row: dict[str, Any], other: dict[str, Any], window_seconds: int
) -> bool:
    group_id = row.get("booking_group_id")
    other_group_id = other.get("booking_group_id")
    if group_id or other_group_id:
        return group_id == other_group_id

    same_attributes = (
        row.get("guest_id") == other.get("guest_id")
        and str(row.get("check_in_date")) == str(other.get("check_in_date"))
        and str(row.get("check_out_date")) == str(other.get("check_out_date"))
        and row.get("booking_source") == other.get("booking_source")
        and row.get("agent_id") == other.get("agent_id")
        and row.get("meal_plan") == other.get("meal_plan")
    )
    if not same_attributes:
        return False

    created, other_created = _created_at(row), _created_at(other)
    if created is None or other_created is None:
        return False
    return abs((created - other_created).total_seconds()) < window_seconds


def find_related(
    reservation: dict[str, Any],
    reservations: Iterable[dict[str, Any]],
    window_seconds: int = DEFAULT_GROUP_WINDOW_SECONDS,
) -> list[dict[str, Any]]:
    """All reservations booked together with ``reservation``, itself included.

    Rows written by this service share a ``booking_group_id``. Older rows
    without one are matched on guest, dates, source, meal plan and creation
    time within ``window_seconds``.
    """
    related = [
        row
        for row in reservations
        if row.get("id") != reservation.get("id")
        and _same_booking(reservation, row, window_seconds)
    ]
    return [reservation, *related]


def group_reservations(
    reservations: list[dict[str, Any]],
    window_seconds: int = DEFAULT_GROUP_WINDOW_SECONDS,
) -> list[list[dict[str, Any]]]:
    groups: list[list[dict[str, Any]]] = []
    processed: set[str] = set()
    for reservation in reservations:
        if reservation["id"] in processed:
            continue
        group = [
            row
            for row in find_related(reservation, reservations, window_seconds)
            if row["id"] not in processed
        ]
        processed.update(row["id"] for row in group)
        groups.append(group)
    return groups
