from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class BillItemCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(1, gt=0)
    rate: float = Field(..., ge=0)


class BillCreate(BaseModel):
    reservation_id: str
    bill_type: str = "Room"
    items: list[BillItemCreate] = Field(..., min_length=1)
    discount: float = Field(0, ge=0)
    paid_amount: float = Field(0, ge=0)
    notes: str = ""


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)


class BillItemResponse(BaseModel):
    description: str
    quantity: float
    rate: float
    amount: float


class BillResponse(BaseModel):
    id: str
    reservation_id: str
    bill_type: str
    subtotal: float
    tax: float
    discount: float
    total: float
    paid_amount: float
    balance: float
    payment_status: str
    notes: str | None = ""
    created_at: datetime | None = None
    bill_items: list[BillItemResponse] = []


class BillListResponse(BaseModel):
    items: list[BillResponse]


class MasterBillResponse(BaseModel):
    reservation_id: str
    bills: list[BillResponse]
    subtotal: float
    tax: float
    discount: float
    grand_total: float
    total_paid: float
    balance: float
    payment_status: str
