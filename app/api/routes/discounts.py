from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from app.api import deps
from app.crud.discount import (
    create_discount,
    delete_discount,
    get_discount_by_id,
    list_discounts,
    update_discount,
)
from app.db.base import get_supabase
from app.schemas.discount import (
    DiscountCreate,
    DiscountListResponse,
    DiscountResponse,
    DiscountUpdate,
)
from app.services.errors import BookingError
from app.services.pricing import applicable_discounts

router = APIRouter(prefix="/v1.0/discounts", tags=["discounts"])


@router.get("", response_model=DiscountListResponse)
async def list_all_discounts(
    enabled_only: bool = Query(False),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        rows = await list_discounts(client, enabled_only=enabled_only)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return DiscountListResponse(items=rows)


@router.get("/applicable", response_model=DiscountListResponse)
async def list_applicable_discounts(
    check_in: date = Query(...),
    check_out: date = Query(...),
    room_type_id: str | None = Query(None),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Discounts the front desk can offer for a stay. Promo codes are never listed."""
    if check_out <= check_in:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="check_out must be after check_in",
        )
    try:
        rows = await list_discounts(client, enabled_only=True)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return DiscountListResponse(
        items=applicable_discounts(rows, check_in, check_out, room_type_id)
    )


@router.post("", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
async def create_new_discount(
    payload: DiscountCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        return await create_discount(client, payload.model_dump(mode="json"))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/{discount_id}", response_model=DiscountResponse)
async def get_discount(
    discount_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(discount_id, "discount ID")
    discount = await get_discount_by_id(client, discount_id)
    if not discount:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Discount not found")
    return discount


@router.patch("/{discount_id}", response_model=DiscountResponse)
async def patch_discount(
    discount_id: str,
    payload: DiscountUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(discount_id, "discount ID")
    if not await get_discount_by_id(client, discount_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Discount not found")
    try:
        return await update_discount(
            client, discount_id, payload.model_dump(mode="json", exclude_unset=True)
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_discount(
    discount_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(discount_id, "discount ID")
    try:
        deleted = await delete_discount(client, discount_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Discount not found")
