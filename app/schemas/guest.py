from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

GuestType = Literal["Regular", "VIP", "Corporate"]


class GuestCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=3, max_length=64)
    email: str | None = Field(None, max_length=320)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = "India"
    id_proof_type: str | None = "AADHAR"
    id_proof_number: str | None = None
    guest_type: GuestType = "Regular"

    @field_validator("name", "phone")
    @classmethod
    def normalize_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("must not be blank")
        return normalized

    @field_validator("email")
    @classmethod
    def normalize_optional_contact(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class GuestUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=64)
    email: str | None = Field(None, max_length=320)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    id_proof_type: str | None = None
    id_proof_number: str | None = None
    guest_type: GuestType | None = None

    @field_validator("name", "phone")
    @classmethod
    def normalize_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError("must not be blank")
        return normalized

    @field_validator("email")
    @classmethod
    def normalize_optional_contact(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None


class GuestResponse(BaseModel):
    id: str
    name: str
    phone: str
    email: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    id_proof_type: str | None = None
    id_proof_number: str | None = None
    guest_type: str = "Regular"
    total_bookings: int = 0
    total_spent: float = 0.0
    loyalty_points: int = 0
    last_visit: date | None = None
    created_at: datetime | None = None


class GuestListResponse(BaseModel):
    items: list[GuestResponse]
