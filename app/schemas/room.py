from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.services.reservation_status import RoomStatus

RoomCategory = Literal["main building", "cottage"]


class RoomTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    base_price: float = Field(..., ge=0)
    capacity: int = Field(2, ge=1)
    amenities: str = ""
    description: str = ""


class RoomTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    base_price: float | None = Field(None, ge=0)
    capacity: int | None = Field(None, ge=1)
    amenities: str | None = None
    description: str | None = None


class RoomTypeResponse(BaseModel):
    id: str
    name: str
    base_price: float
    capacity: int
    amenities: str | None = ""
    description: str | None = ""
    created_at: datetime | None = None


class RoomTypeListResponse(BaseModel):
    items: list[RoomTypeResponse]


class RateTypeCreate(BaseModel):
    rate_name: str = Field(..., min_length=1, max_length=200)
    rate_code: str = Field(..., min_length=1, max_length=20)
    base_price: float = Field(..., ge=0)
    description: str = ""
    inclusions: str = ""
    min_nights: int = Field(1, ge=1)
    max_nights: int | None = Field(None, ge=1)
    cancellation_policy: str = ""
    advance_booking_days: int = Field(0, ge=0)
    is_active: bool = True
    is_default: bool = False
    valid_from: date | None = None
    valid_to: date | None = None

    @field_validator("rate_code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def check_ranges(self):
        if self.max_nights is not None and self.max_nights < self.min_nights:
            raise ValueError("max_nights must not be less than min_nights")
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")
        return self


class RateTypeUpdate(BaseModel):
    rate_name: str | None = Field(None, min_length=1, max_length=200)
    rate_code: str | None = Field(None, min_length=1, max_length=20)
    base_price: float | None = Field(None, ge=0)
    description: str | None = None
    inclusions: str | None = None
    min_nights: int | None = Field(None, ge=1)
    max_nights: int | None = Field(None, ge=1)
    cancellation_policy: str | None = None
    advance_booking_days: int | None = Field(None, ge=0)
    is_active: bool | None = None
    is_default: bool | None = None
    valid_from: date | None = None
    valid_to: date | None = None


class RateTypeResponse(BaseModel):
    id: str
    room_type_id: str
    rate_name: str
    rate_code: str
    base_price: float
    description: str | None = None
    inclusions: str | None = None
    min_nights: int = 1
    max_nights: int | None = None
    cancellation_policy: str | None = None
    advance_booking_days: int | None = 0
    is_active: bool = True
    is_default: bool = False
    valid_from: date | None = None
    valid_to: date | None = None


class RateTypeListResponse(BaseModel):
    items: list[RateTypeResponse]


class RoomCreate(BaseModel):
    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int | None = None
    room_type_id: str
    category: RoomCategory = "main building"
    status: RoomStatus = RoomStatus.AVAILABLE

    @field_validator("room_number")
    @classmethod
    def normalize_room_number(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("room_number must not be blank")
        return normalized


class RoomUpdate(BaseModel):
    room_number: str | None = Field(None, min_length=1, max_length=20)
    floor: int | None = None
    room_type_id: str | None = None
    category: RoomCategory | None = None
    status: RoomStatus | None = None


class RoomStatusUpdate(BaseModel):
    status: RoomStatus


class RoomResponse(BaseModel):
    id: str
    room_number: str
    floor: int | None = None
    room_type_id: str
    category: str
    status: RoomStatus
    room_types: RoomTypeResponse | None = None


class RoomListResponse(BaseModel):
    items: list[RoomResponse]


class RoomStatusSyncResponse(BaseModel):
    updated: int
    statuses: dict[str, RoomStatus]
