from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from app.services.availability import AvailabilitySnapshot, as_date, is_room_available
from app.services.reservation_status import ReservationStatus, is_occupying

# Cancelled stays are left off the grid.
VISIBLE_STATUSES = {
    ReservationStatus.INQUIRY.value,
    ReservationStatus.TENTATIVE.value,
    ReservationStatus.HOLD.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.CHECKED_IN.value,
    ReservationStatus.CHECKED_OUT.value,
}


def window_dates(start: date | str, days: int) -> list[date]:
    first = as_date(start)
    return [first + timedelta(days=offset) for offset in range(days)]


def reservations_on(snapshot: AvailabilitySnapshot, day: date | str) -> list[dict[str, Any]]:
    """Occupying reservations in house on ``day`` (checkout day excluded)."""
    day = as_date(day)
    return [
        row
        for row in snapshot.reservations
        if is_occupying(row.get("status"))
        and as_date(row["check_in_date"]) <= day < as_date(row["check_out_date"])
    ]


def calendar_overview(
    snapshot: AvailabilitySnapshot, start: date | str, days: int
) -> list[dict[str, Any]]:
    return [
        {
            "date": day,
            "bookings": len(reservations_on(snapshot, day)),
            "free_rooms": sum(
                1 for room in snapshot.rooms if is_room_available(snapshot, room["id"], day)
            ),
        }
        for day in window_dates(start, days)
    ]


def calendar_bars(
    snapshot: AvailabilitySnapshot, start: date | str, days: int
) -> list[dict[str, Any]]:
    """Grid placement for every visible reservation inside the window.

    ``offset`` is the column of the first night shown and ``span`` the number
    of nights drawn. Stays running past either edge are clipped and flagged
    so the bar can be drawn open-ended.
    """
    first = as_date(start)
    last = first + timedelta(days=days)
    room_order = {room["id"]: index for index, room in enumerate(snapshot.rooms)}

    bars: list[dict[str, Any]] = []
    for row in snapshot.reservations:
        if row.get("status") not in VISIBLE_STATUSES or row.get("room_id") not in room_order:
            continue
        check_in = as_date(row["check_in_date"])
        check_out = as_date(row["check_out_date"])
        if check_in >= last or check_out <= first:
            continue
        offset = max((check_in - first).days, 0)
        end = min((check_out - first).days, days)
        bars.append(
            {
                "reservation_id": row["id"],
                "room_id": row["room_id"],
                "row": room_order[row["room_id"]],
                "offset": offset,
                "span": end - offset,
                "starts_before": check_in < first,
                "ends_after": check_out > last,
                "status": row.get("status"),
                "guest_name": (row.get("guests") or {}).get("name"),
            }
        )
    return sorted(bars, key=lambda bar: (bar["row"], bar["offset"]))
