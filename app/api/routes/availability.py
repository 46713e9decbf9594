from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api import deps
from app.core.config import get_settings
from app.schemas.availability import (
    CalendarResponse,
    FreeRoomsResponse,
    RoomAvailabilityResponse,
    TypeAvailabilityResponse,
)
from app.services.availability import (
    AvailabilitySnapshot,
    available_rooms_of_type,
    find_conflicts,
    is_room_free_for_range,
    rooms_free_for_range,
)
from app.services.calendar import calendar_bars, calendar_overview

router = APIRouter(prefix="/v1.0/availability", tags=["availability"])


def _check_range(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Check-out must be after check-in",
        )


@router.get("/rooms/{room_id}", response_model=RoomAvailabilityResponse)
async def room_availability(
    room_id: str,
    check_in: date = Query(...),
    check_out: date = Query(...),
    current_user: dict = Depends(deps.get_current_user),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
):
    """Whether a room can take ``[check_in, check_out)``, with the blocking bookings."""
    _check_range(check_in, check_out)
    room = snapshot.room(room_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    conflicts = [row["id"] for row in find_conflicts(snapshot, room_id, check_in, check_out)]
    return RoomAvailabilityResponse(
        room_id=room_id,
        check_in_date=check_in,
        check_out_date=check_out,
        available=is_room_free_for_range(snapshot, room_id, check_in, check_out),
        conflicts=conflicts,
    )


@router.get("/room-types/{room_type_id}", response_model=TypeAvailabilityResponse)
async def room_type_availability(
    room_type_id: str,
    day: date = Query(..., alias="date"),
    current_user: dict = Depends(deps.get_current_user),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
):
    counts = available_rooms_of_type(snapshot, room_type_id, day)
    return TypeAvailabilityResponse(room_type_id=room_type_id, date=day, **counts)


@router.get("/free-rooms", response_model=FreeRoomsResponse)
async def free_rooms(
    check_in: date = Query(...),
    check_out: date = Query(...),
    room_type_id: str | None = Query(None),
    current_user: dict = Depends(deps.get_current_user),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
):
    """Rooms that can be booked for the whole stay, optionally of one type."""
    _check_range(check_in, check_out)
    return FreeRoomsResponse(
        items=rooms_free_for_range(snapshot, check_in, check_out, room_type_id)
    )


@router.get("/calendar", response_model=CalendarResponse)
async def calendar(
    start: date | None = Query(None),
    days: int | None = Query(None, ge=1, le=62),
    current_user: dict = Depends(deps.get_current_user),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
):
    first = start or date.today()
    window = days or get_settings().calendar_days
    return CalendarResponse(
        start=first,
        days=window,
        overview=calendar_overview(snapshot, first, window),
        bars=calendar_bars(snapshot, first, window),
    )
