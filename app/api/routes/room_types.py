from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from app.api import deps
from app.crud.room import (
    create_rate_type,
    create_room_type,
    delete_rate_type,
    delete_room_type,
    get_rate_type_by_id,
    get_room_type_by_id,
    list_rate_types,
    list_room_types,
    set_default_rate_type,
    update_rate_type,
    update_room_type,
)
from app.db.base import get_supabase
from app.schemas.room import (
    RateTypeCreate,
    RateTypeListResponse,
    RateTypeResponse,
    RateTypeUpdate,
    RoomTypeCreate,
    RoomTypeListResponse,
    RoomTypeResponse,
    RoomTypeUpdate,
)
from app.services.errors import BookingError

router = APIRouter(prefix="/v1.0/room-types", tags=["room-types"])


async def _require_room_type(client: Client, room_type_id: str) -> dict:
    deps.validate_uuid(room_type_id, "room type ID")
    room_type = await get_room_type_by_id(client, room_type_id)
    if not room_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room type not found")
    return room_type


async def _require_rate_type(client: Client, room_type_id: str, rate_type_id: str) -> dict:
    deps.validate_uuid(rate_type_id, "rate ID")
    rate_type = await get_rate_type_by_id(client, rate_type_id)
    if not rate_type or rate_type.get("room_type_id") != room_type_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Rate not found")
    return rate_type


@router.get("", response_model=RoomTypeListResponse)
async def list_all_room_types(
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    return RoomTypeListResponse(items=await list_room_types(client))


@router.post("", response_model=RoomTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_new_room_type(
    payload: RoomTypeCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        return await create_room_type(client, payload.model_dump())
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/{room_type_id}", response_model=RoomTypeResponse)
async def get_single_room_type(
    room_type_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    return await _require_room_type(client, room_type_id)


@router.patch("/{room_type_id}", response_model=RoomTypeResponse)
async def update_existing_room_type(
    room_type_id: str,
    payload: RoomTypeUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    await _require_room_type(client, room_type_id)
    try:
        return await update_room_type(client, room_type_id, payload.model_dump(exclude_unset=True))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{room_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_room_type(
    room_type_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Delete a room type. Refused while rooms still use it."""
    deps.validate_uuid(room_type_id, "room type ID")
    try:
        deleted = await delete_room_type(client, room_type_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room type not found")


# -- Rate types --


@router.get("/{room_type_id}/rates", response_model=RateTypeListResponse)
async def list_room_type_rates(
    room_type_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    await _require_room_type(client, room_type_id)
    return RateTypeListResponse(items=await list_rate_types(client, room_type_id))


@router.post(
    "/{room_type_id}/rates",
    response_model=RateTypeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_room_type_rate(
    room_type_id: str,
    payload: RateTypeCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    await _require_room_type(client, room_type_id)
    try:
        return await create_rate_type(client, {**payload.model_dump(), "room_type_id": room_type_id})
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.patch("/{room_type_id}/rates/{rate_type_id}", response_model=RateTypeResponse)
async def update_room_type_rate(
    room_type_id: str,
    rate_type_id: str,
    payload: RateTypeUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    await _require_rate_type(client, room_type_id, rate_type_id)
    try:
        return await update_rate_type(client, rate_type_id, payload.model_dump(exclude_unset=True))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.put("/{room_type_id}/rates/{rate_type_id}/default", response_model=RateTypeResponse)
async def make_default_rate(
    room_type_id: str,
    rate_type_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Make this the room type's default rate, demoting the previous one."""
    await _require_rate_type(client, room_type_id, rate_type_id)
    try:
        return await set_default_rate_type(client, room_type_id, rate_type_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{room_type_id}/rates/{rate_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room_type_rate(
    room_type_id: str,
    rate_type_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    await _require_rate_type(client, room_type_id, rate_type_id)
    try:
        await delete_rate_type(client, rate_type_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
