from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from app.services.reservation_status import ReservationStatus

MealPlan = Literal["NM", "BO", "HB", "FB"]
BookingSource = Literal["direct", "agent"]
PaymentStatus = Literal["Pending", "Partial", "Paid"]


class RoomSlot(BaseModel):
    room_type_id: str | None = None
    room_id: str | None = None
    rate_type_id: str | None = None
    number_of_adults: int = Field(1, ge=1)
    number_of_children: int = Field(0, ge=0)
    number_of_infants: int = Field(0, ge=0)


class _BookingHeader(BaseModel):
    guest_id: str | None = None
    booking_source: BookingSource = "direct"
    agent_id: str | None = None
    direct_source: str | None = None
    meal_plan: MealPlan = "NM"
    status: ReservationStatus = ReservationStatus.CONFIRMED
    special_requests: str | None = None
    discount_ids: list[str] = Field(default_factory=list)
    promo_code: str | None = None


class ReservationGroupCreate(_BookingHeader):
    check_in_date: date | None = None
    check_out_date: date | None = None
    advance_payment: float = Field(0, ge=0)
    auto_assign: bool = False
    rooms: list[RoomSlot] = Field(default_factory=list)


class CalendarCell(BaseModel):
    room_id: str
    date: date


class CalendarBookingCreate(_BookingHeader):
    cells: list[CalendarCell] = Field(default_factory=list)
    rate_type_id: str | None = None
    number_of_adults: int = Field(1, ge=1)
    number_of_children: int = Field(0, ge=0)
    number_of_infants: int = Field(0, ge=0)


class QuoteRequest(BaseModel):
    check_in_date: date
    check_out_date: date
    advance_payment: float = Field(0, ge=0)
    meal_plan: MealPlan = "NM"
    discount_ids: list[str] = Field(default_factory=list)
    promo_code: str | None = None
    rooms: list[RoomSlot] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class AppliedDiscount(BaseModel):
    id: str | None = None
    name: str | None = None
    discount_type: str | None = None
    value: float = 0
    amount: float


class QuoteSlot(RoomSlot):
    nightly_rate: float
    nights: int
    room_amount: float = 0
    meal_plan_amount: float = 0
    discount_amount: float = 0
    applied_discounts: list[AppliedDiscount] = Field(default_factory=list)
    total_amount: float


class QuoteResponse(BaseModel):
    nights: int
    slots: list[QuoteSlot]
    grand_total: float
    discount_total: float = 0
    advance_per_room: float


class ReservationUpdate(BaseModel):
    room_id: str | None = None
    rate_type_id: str | None = None
    check_in_date: date | None = None
    check_out_date: date | None = None
    number_of_adults: int | None = Field(None, ge=1)
    number_of_children: int | None = Field(None, ge=0)
    number_of_infants: int | None = Field(None, ge=0)
    meal_plan: MealPlan | None = None
    total_amount: float | None = Field(None, ge=0)
    advance_payment: float | None = Field(None, ge=0)
    payment_status: PaymentStatus | None = None
    status: ReservationStatus | None = None
    special_requests: str | None = None
    direct_source: str | None = None


class ReservationResponse(BaseModel):
    id: str
    guest_id: str
    room_id: str
    agent_id: str | None = None
    rate_type_id: str | None = None
    booking_group_id: str | None = None
    check_in_date: date
    check_out_date: date
    number_of_adults: int = 1
    number_of_children: int = 0
    number_of_infants: int = 0
    meal_plan: str = "NM"
    total_amount: float = 0
    advance_payment: float = 0
    payment_status: str = "Pending"
    status: ReservationStatus
    booking_source: str = "direct"
    direct_source: str | None = None
    special_requests: str | None = None
    created_at: datetime | None = None
    guests: dict[str, Any] | None = None
    rooms: dict[str, Any] | None = None
    agents: dict[str, Any] | None = None


class ReservationListResponse(BaseModel):
    items: list[ReservationResponse]


class FailedBooking(BaseModel):
    room_id: str
    error: str


class BookingSubmissionResponse(BaseModel):
    requested: int
    created: list[ReservationResponse]
    failed: list[FailedBooking]
    message: str
    grand_total: float
    discount_total: float = 0
    booking_group_id: str | None = None
    advance_per_room: float | None = None


class FailedGroupAction(BaseModel):
    reservation_id: str
    error: str


class GroupActionResponse(BaseModel):
    succeeded: list[str]
    failed: list[FailedGroupAction]
    message: str


class ReservationGroupListResponse(BaseModel):
    groups: list[list[ReservationResponse]]
