from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from app.api import deps
from app.crud.bill import delete_bill, get_bill_by_id, list_bills
from app.db.base import get_supabase
from app.schemas.bill import (
    BillCreate,
    BillListResponse,
    BillResponse,
    MasterBillResponse,
    PaymentCreate,
)
from app.services.billing import raise_bill, record_payment, reservation_master_bill
from app.services.errors import BookingError

router = APIRouter(prefix="/v1.0/bills", tags=["bills"])


@router.get("", response_model=BillListResponse)
async def list_all_bills(
    reservation_id: str | None = Query(None),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    return BillListResponse(items=await list_bills(client, reservation_id))


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_new_bill(
    payload: BillCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Raise a bill; tax is applied on the line-item subtotal before the discount."""
    deps.validate_uuid(payload.reservation_id, "reservation ID")
    try:
        return await raise_bill(
            client,
            payload.reservation_id,
            [item.model_dump() for item in payload.items],
            bill_type=payload.bill_type,
            discount=payload.discount,
            paid=payload.paid_amount,
            notes=payload.notes,
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/master/{reservation_id}", response_model=MasterBillResponse)
async def get_master_bill(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        return await reservation_master_bill(client, reservation_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(
    bill_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(bill_id, "bill ID")
    bill = await get_bill_by_id(client, bill_id)
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
    return bill


@router.post("/{bill_id}/payments", response_model=BillResponse)
async def add_payment(
    bill_id: str,
    payload: PaymentCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(bill_id, "bill ID")
    try:
        return await record_payment(client, bill_id, payload.amount)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_bill(
    bill_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(bill_id, "bill ID")
    try:
        deleted = await delete_bill(client, bill_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bill not found")
