from __future__ import annotations

from supabase import Client

from app.crud.common import clean_payload, execute, first_row
from app.services.errors import BookingValidationError

ROOM_SELECT = "*, room_types(*)"


# -- Room types --


async def list_room_types(client: Client) -> list[dict]:
    response = execute(client.table("room_types").select("*").order("name"))
    return response.data or []


async def get_room_type_by_id(client: Client, room_type_id: str) -> dict | None:
    response = execute(client.table("room_types").select("*").eq("id", room_type_id).limit(1))
    return first_row(response)


async def create_room_type(client: Client, data: dict) -> dict:
    response = execute(client.table("room_types").insert(clean_payload(data)))
    return first_row(response) or {}


async def update_room_type(client: Client, room_type_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(client.table("room_types").update(filtered).eq("id", room_type_id))
    return await get_room_type_by_id(client, room_type_id)


async def delete_room_type(client: Client, room_type_id: str) -> bool:
    response = execute(
        client.table("room_types").delete().eq("id", room_type_id),
        in_use_message="Cannot delete room type. It is being used by existing rooms.",
    )
    return bool(response.data)


# -- Rate types --


async def list_rate_types(client: Client, room_type_id: str | None = None) -> list[dict]:
    query = (
        client.table("room_rate_types")
        .select("*")
        .order("is_default", desc=True)
        .order("rate_name")
    )
    if room_type_id:
        query = query.eq("room_type_id", room_type_id)
    return execute(query).data or []


async def get_rate_type_by_id(client: Client, rate_type_id: str) -> dict | None:
    response = execute(
        client.table("room_rate_types").select("*").eq("id", rate_type_id).limit(1)
    )
    return first_row(response)


async def _clear_default_rate(client: Client, room_type_id: str) -> None:
    execute(
        client.table("room_rate_types")
        .update({"is_default": False})
        .eq("room_type_id", room_type_id)
    )


async def create_rate_type(client: Client, data: dict) -> dict:
    row = clean_payload(data)
    if row.get("rate_code"):
        row["rate_code"] = str(row["rate_code"]).upper()
    if row.get("is_default"):
        await _clear_default_rate(client, row["room_type_id"])
    response = execute(
        client.table("room_rate_types").insert(row),
        duplicate_message="A rate with this code already exists for the room type.",
    )
    return first_row(response) or {}


async def update_rate_type(client: Client, rate_type_id: str, data: dict) -> dict | None:
    existing = await get_rate_type_by_id(client, rate_type_id)
    if not existing:
        return None
    filtered = clean_payload(data)
    if filtered.get("rate_code"):
        filtered["rate_code"] = str(filtered["rate_code"]).upper()
    if existing.get("is_default") and filtered.get("is_default") is False:
        raise BookingValidationError(
            "Choose another default rate before unsetting this one."
        )
    if filtered.get("is_default") and not existing.get("is_default"):
        await _clear_default_rate(client, existing["room_type_id"])
    if filtered:
        execute(client.table("room_rate_types").update(filtered).eq("id", rate_type_id))
    return await get_rate_type_by_id(client, rate_type_id)


async def set_default_rate_type(client: Client, room_type_id: str, rate_type_id: str) -> dict | None:
    await _clear_default_rate(client, room_type_id)
    execute(
        client.table("room_rate_types")
        .update({"is_default": True})
        .eq("id", rate_type_id)
        .eq("room_type_id", room_type_id)
    )
    return await get_rate_type_by_id(client, rate_type_id)


async def delete_rate_type(client: Client, rate_type_id: str) -> bool:
    existing = await get_rate_type_by_id(client, rate_type_id)
    if not existing:
        return False
    if existing.get("is_default"):
        raise BookingValidationError("The default rate cannot be deleted.")
    response = execute(
        client.table("room_rate_types").delete().eq("id", rate_type_id),
        in_use_message="Cannot delete rate. It is used by existing reservations.",
    )
    return bool(response.data)


# -- Rooms --


async def list_rooms(client: Client) -> list[dict]:
    response = execute(client.table("rooms").select(ROOM_SELECT).order("room_number"))
    return response.data or []


async def get_room_by_id(client: Client, room_id: str) -> dict | None:
    response = execute(client.table("rooms").select(ROOM_SELECT).eq("id", room_id).limit(1))
    return first_row(response)


async def create_room(client: Client, data: dict) -> dict:
    row = {
        **clean_payload(data),
        "category": data.get("category") or "main building",
        "status": data.get("status") or "Available",
    }
    response = execute(
        client.table("rooms").insert(clean_payload(row)),
        duplicate_message="Room number already exists. Please use a different number.",
    )
    room = first_row(response)
    if not room:
        return {}
    return await get_room_by_id(client, room["id"]) or room


async def update_room(client: Client, room_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(
            client.table("rooms").update(filtered).eq("id", room_id),
            duplicate_message="Room number already exists. Please use a different number.",
        )
    return await get_room_by_id(client, room_id)


async def set_room_status(client: Client, room_id: str, status: str) -> bool:
    response = execute(client.table("rooms").update({"status": status}).eq("id", room_id))
    return bool(response.data)


async def delete_room(client: Client, room_id: str) -> bool:
    response = execute(
        client.table("rooms").delete().eq("id", room_id),
        in_use_message="Cannot delete room. It has existing reservations.",
    )
    return bool(response.data)
