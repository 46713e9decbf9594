"""Room availability over a fetched snapshot of rooms and reservations.

Every function here is a pure query. The snapshot is whatever the caller last
fetched from Supabase; nothing in this module refreshes or mutates it, so a
check is only as fresh as that fetch. The authoritative re-check happens in
``app.crud.reservation.create_reservation`` right before insert.

Date ranges are half-open: a stay of ``[check_in, check_out)`` does not occupy
its checkout day, which allows same-day turnover.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.services.reservation_status import ReservationStatus, RoomStatus, is_occupying


class AvailabilitySnapshot(BaseModel):
    """Read-only view of rooms and reservations as of ``fetched_at``."""

    model_config = ConfigDict(frozen=True)

    rooms: tuple[dict[str, Any], ...] = ()
    reservations: tuple[dict[str, Any], ...] = ()
    fetched_at: datetime | None = None

    def room(self, room_id: str) -> dict[str, Any] | None:
        for room in self.rooms:
            if room.get("id") == room_id:
                return room
        return None

    def reservations_for_room(self, room_id: str) -> list[dict[str, Any]]:
        return [row for row in self.reservations if row.get("room_id") == room_id]


def as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def overlaps(
    check_in: date | str,
    check_out: date | str,
    other_check_in: date | str,
    other_check_out: date | str,
) -> bool:
    return as_date(check_in) < as_date(other_check_out) and as_date(check_out) > as_date(
        other_check_in
    )


def _room_is_open(room: dict[str, Any] | None) -> bool:
    return room is not None and room.get("status") == RoomStatus.AVAILABLE.value


def _occupying(rows: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [row for row in rows if is_occupying(row.get("status"))]


def find_conflicts(
    snapshot: AvailabilitySnapshot,
    room_id: str,
    check_in: date | str,
    check_out: date | str,
    exclude_ids: Iterable[str] = (),
) -> list[dict[str, Any]]:
    """Occupying reservations on ``room_id`` that overlap ``[check_in, check_out)``."""
    excluded = set(exclude_ids)
    return [
        row
        for row in _occupying(snapshot.reservations_for_room(room_id))
        if row.get("id") not in excluded
        and overlaps(check_in, check_out, row["check_in_date"], row["check_out_date"])
    ]


def is_room_available(snapshot: AvailabilitySnapshot, room_id: str, day: date | str) -> bool:
    if not _room_is_open(snapshot.room(room_id)):
        return False
    day = as_date(day)
    for row in _occupying(snapshot.reservations_for_room(room_id)):
        if as_date(row["check_in_date"]) <= day < as_date(row["check_out_date"]):
            return False
    return True


def is_room_free_for_range(
    snapshot: AvailabilitySnapshot,
    room_id: str,
    check_in: date | str,
    check_out: date | str,
    exclude_ids: Iterable[str] = (),
) -> bool:
    if not _room_is_open(snapshot.room(room_id)):
        return False
    return not find_conflicts(snapshot, room_id, check_in, check_out, exclude_ids)


def free_rooms_of_type(snapshot: AvailabilitySnapshot, room_type_id: str) -> list[dict[str, Any]]:
    """Rooms of the type whose administrative status is Available. No date check."""
    return [
        room
        for room in snapshot.rooms
        if room.get("room_type_id") == room_type_id and _room_is_open(room)
    ]


def available_rooms_of_type(
    snapshot: AvailabilitySnapshot, room_type_id: str, day: date | str
) -> dict[str, int]:
    rooms = [room for room in snapshot.rooms if room.get("room_type_id") == room_type_id]
    available = sum(1 for room in rooms if is_room_available(snapshot, room["id"], day))
    return {"available": available, "total": len(rooms)}


def rooms_free_for_range(
    snapshot: AvailabilitySnapshot,
    check_in: date | str,
    check_out: date | str,
    room_type_id: str | None = None,
) -> list[dict[str, Any]]:
    candidates = (
        free_rooms_of_type(snapshot, room_type_id)
        if room_type_id
        else [room for room in snapshot.rooms if _room_is_open(room)]
    )
    return [
        room
        for room in candidates
        if not find_conflicts(snapshot, room["id"], check_in, check_out)
    ]


def derive_room_statuses(
    snapshot: AvailabilitySnapshot, today: date | str
) -> dict[str, str]:
    """Status each room should display today, keyed by room id.

    Maintenance and Blocked rooms are operational holds and are left out.
    Only a checked-in stay covering today marks a room Occupied; booked but
    not yet arrived stays keep the room Available, since the administrative
    status is what gates new bookings.
    """
    today = as_date(today)
    derived: dict[str, str] = {}
    for room in snapshot.rooms:
        if room.get("status") in (RoomStatus.MAINTENANCE.value, RoomStatus.BLOCKED.value):
            continue
        status = RoomStatus.AVAILABLE.value
        for row in snapshot.reservations_for_room(room["id"]):
            if row.get("status") != ReservationStatus.CHECKED_IN.value:
                continue
            if as_date(row["check_in_date"]) <= today < as_date(row["check_out_date"]):
                status = RoomStatus.OCCUPIED.value
                break
        derived[room["id"]] = status
    return derived


def snapshot_from_rows(
    rooms: Iterable[dict[str, Any]],
    reservations: Iterable[dict[str, Any]],
    fetched_at: datetime | None = None,
) -> AvailabilitySnapshot:
    return AvailabilitySnapshot(
        rooms=tuple(rooms),
        reservations=tuple(reservations),
        fetched_at=fetched_at,
    )
