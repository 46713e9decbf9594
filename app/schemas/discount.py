from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

DiscountType = Literal["percentage", "fixed_amount", "promo_code", "seasonal", "long_stay"]
AppliesTo = Literal["room_rates", "addons", "total_bill"]


class _DiscountRules(BaseModel):
    @model_validator(mode="after")
    def check_rules(self):
        if self.discount_type == "percentage" and self.value is not None and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100%")
        if self.discount_type == "promo_code" and not (self.promo_code or "").strip():
            raise ValueError("Promo code is required for promo code discounts")
        if self.valid_from and self.valid_to and self.valid_to < self.valid_from:
            raise ValueError("valid_to must not be before valid_from")
        return self


class DiscountCreate(_DiscountRules):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    discount_type: DiscountType = "percentage"
    value: float = Field(..., gt=0)
    applies_to: AppliesTo = "room_rates"
    enabled: bool = True
    valid_from: date | None = None
    valid_to: date | None = None
    applicable_room_types: list[str] = Field(default_factory=list)
    promo_code: str | None = Field(None, max_length=50)
    minimum_nights: int | None = Field(None, ge=1)
    maximum_uses: int | None = Field(None, ge=1)
    priority: int = 0
    can_combine: bool = False


class DiscountUpdate(_DiscountRules):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    discount_type: DiscountType | None = None
    value: float | None = Field(None, gt=0)
    applies_to: AppliesTo | None = None
    enabled: bool | None = None
    valid_from: date | None = None
    valid_to: date | None = None
    applicable_room_types: list[str] | None = None
    promo_code: str | None = Field(None, max_length=50)
    minimum_nights: int | None = Field(None, ge=1)
    maximum_uses: int | None = Field(None, ge=1)
    priority: int | None = None
    can_combine: bool | None = None


class DiscountResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    discount_type: str
    value: float
    applies_to: str = "room_rates"
    enabled: bool = True
    valid_from: date | None = None
    valid_to: date | None = None
    applicable_room_types: list[str] | None = None
    promo_code: str | None = None
    minimum_nights: int | None = None
    maximum_uses: int | None = None
    current_uses: int = 0
    priority: int = 0
    can_combine: bool = False
    created_at: datetime | None = None


class DiscountListResponse(BaseModel):
    items: list[DiscountResponse]
