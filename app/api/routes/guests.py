from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from app.api import deps
from app.crud.guest import (
    create_guest,
    delete_guest,
    get_guest_by_id,
    get_guest_by_phone,
    get_or_create_guest,
    list_guests,
    update_guest,
)
from app.crud.reservation import list_reservations
from app.db.base import get_supabase
from app.schemas.guest import GuestCreate, GuestListResponse, GuestResponse, GuestUpdate
from app.schemas.reservation import ReservationListResponse
from app.services.errors import BookingError

router = APIRouter(prefix="/v1.0/guests", tags=["guests"])


@router.get("", response_model=GuestListResponse)
async def list_all_guests(
    search: str | None = Query(None, min_length=1, max_length=200),
    guest_type: Literal["Regular", "VIP", "Corporate"] | None = Query(None),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    guests = await list_guests(client, search=search, guest_type=guest_type)
    return GuestListResponse(items=guests)


@router.post("", response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
async def create_new_guest(
    payload: GuestCreate,
    reuse_existing: bool = Query(False),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Create a guest, or return the one already on file for the phone number."""
    data = payload.model_dump()
    try:
        if reuse_existing:
            return await get_or_create_guest(client, data)
        return await create_guest(client, data)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/by-phone/{phone}", response_model=GuestResponse)
async def get_guest_for_phone(
    phone: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    guest = await get_guest_by_phone(client, phone.strip())
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest


@router.get("/{guest_id}", response_model=GuestResponse)
async def get_guest(
    guest_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(guest_id, "guest ID")
    guest = await get_guest_by_id(client, guest_id)
    if not guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
    return guest


@router.get("/{guest_id}/reservations", response_model=ReservationListResponse)
async def list_guest_reservations(
    guest_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(guest_id, "guest ID")
    return ReservationListResponse(items=await list_reservations(client, guest_id=guest_id))


@router.patch("/{guest_id}", response_model=GuestResponse)
async def patch_guest(
    guest_id: str,
    payload: GuestUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(guest_id, "guest ID")
    existing_guest = await get_guest_by_id(client, guest_id)
    if not existing_guest:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")

    try:
        return await update_guest(client, guest_id, payload.model_dump(exclude_unset=True))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_guest(
    guest_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(guest_id, "guest ID")
    try:
        deleted = await delete_guest(client, guest_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guest not found")
