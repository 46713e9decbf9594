from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from app.api import deps
from app.crud.room import (
    create_room,
    delete_room,
    get_room_by_id,
    list_rooms,
    set_room_status,
    update_room,
)
from app.db.base import get_supabase
from app.schemas.room import (
    RoomCreate,
    RoomListResponse,
    RoomResponse,
    RoomStatusSyncResponse,
    RoomStatusUpdate,
    RoomUpdate,
)
from app.services.availability import AvailabilitySnapshot
from app.services.booking import sync_room_statuses
from app.services.errors import BookingError

router = APIRouter(prefix="/v1.0/rooms", tags=["rooms"])


@router.get("", response_model=RoomListResponse)
async def list_all_rooms(
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """List every room with its room type."""
    try:
        rooms = await list_rooms(client)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return RoomListResponse(items=rooms)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_new_room(
    payload: RoomCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(payload.room_type_id, "room type ID")
    try:
        return await create_room(client, payload.model_dump())
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post("/sync-status", response_model=RoomStatusSyncResponse)
async def sync_statuses(
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
):
    """Bring stored room statuses in line with who is in house today."""
    try:
        return await sync_room_statuses(client, snapshot)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/{room_id}", response_model=RoomResponse)
async def get_single_room(
    room_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(room_id, "room ID")
    room = await get_room_by_id(client, room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


@router.patch("/{room_id}", response_model=RoomResponse)
async def update_existing_room(
    room_id: str,
    payload: RoomUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(room_id, "room ID")
    if not await get_room_by_id(client, room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    try:
        return await update_room(client, room_id, payload.model_dump(exclude_unset=True))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.put("/{room_id}/status", response_model=RoomResponse)
async def change_room_status(
    room_id: str,
    payload: RoomStatusUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Set the administrative status (maintenance, blocked, available, ...)."""
    deps.validate_uuid(room_id, "room ID")
    if not await get_room_by_id(client, room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    try:
        await set_room_status(client, room_id, payload.status.value)
        return await get_room_by_id(client, room_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_room(
    room_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(room_id, "room ID")
    try:
        deleted = await delete_room(client, room_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
