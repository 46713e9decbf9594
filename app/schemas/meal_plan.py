from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.reservation import MealPlan


class MealPlanCreate(BaseModel):
    code: MealPlan
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    price_per_person: float = Field(0, ge=0)
    is_active: bool = True
    sort_order: int = Field(0, ge=0)


class MealPlanUpdate(BaseModel):
    code: MealPlan | None = None
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    price_per_person: float | None = Field(None, ge=0)
    is_active: bool | None = None
    sort_order: int | None = Field(None, ge=0)


class MealPlanReorder(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class MealPlanResponse(BaseModel):
    id: str
    code: str
    name: str
    description: str | None = None
    price_per_person: float = 0
    is_active: bool = True
    sort_order: int = 0
    created_at: datetime | None = None


class MealPlanListResponse(BaseModel):
    items: list[MealPlanResponse]
