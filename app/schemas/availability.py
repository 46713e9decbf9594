from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from app.schemas.room import RoomResponse


class RoomAvailabilityResponse(BaseModel):
    room_id: str
    check_in_date: date
    check_out_date: date
    available: bool
    conflicts: list[str] = []


class TypeAvailabilityResponse(BaseModel):
    room_type_id: str
    date: date
    available: int
    total: int


class FreeRoomsResponse(BaseModel):
    items: list[RoomResponse]


class CalendarDay(BaseModel):
    date: date
    bookings: int
    free_rooms: int


class CalendarBar(BaseModel):
    reservation_id: str
    room_id: str
    row: int
    offset: int
    span: int
    starts_before: bool
    ends_after: bool
    status: str
    guest_name: str | None = None


class CalendarResponse(BaseModel):
    start: date
    days: int
    overview: list[CalendarDay]
    bars: list[CalendarBar]
