from __future__ import annotations

from supabase import Client

from app.crud.common import clean_payload, execute, first_row


def _as_float(value: object) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _build_guest_search_filter(search: str) -> str:
    search_term = search.replace(",", "\\,")
    return (
        f"name.ilike.%{search_term}%,"
        f"email.ilike.%{search_term}%,"
        f"phone.ilike.%{search_term}%"
    )


async def list_guests(
    client: Client,
    search: str | None = None,
    guest_type: str | None = None,
) -> list[dict]:
    query = client.table("guests").select("*")
    if guest_type:
        query = query.eq("guest_type", guest_type)
    if search and search.strip():
        query = query.or_(_build_guest_search_filter(search.strip()))
    response = execute(query.order("created_at", desc=True))
    return response.data or []


async def get_guest_by_id(client: Client, guest_id: str) -> dict | None:
    response = execute(client.table("guests").select("*").eq("id", guest_id).limit(1))
    return first_row(response)


async def get_guest_by_phone(client: Client, phone: str) -> dict | None:
    response = execute(client.table("guests").select("*").eq("phone", phone).limit(1))
    return first_row(response)


async def create_guest(client: Client, data: dict) -> dict:
    response = execute(
        client.table("guests").insert(clean_payload(data)),
        duplicate_message="A guest with this phone number already exists.",
    )
    return first_row(response) or {}


async def get_or_create_guest(client: Client, data: dict) -> dict:
    """Phone is the natural key: reuse the existing guest when it matches."""
    existing = await get_guest_by_phone(client, data["phone"])
    if existing:
        return existing
    return await create_guest(client, data)


async def update_guest(client: Client, guest_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(
            client.table("guests").update(filtered).eq("id", guest_id),
            duplicate_message="A guest with this phone number already exists.",
        )
    return await get_guest_by_id(client, guest_id)


async def delete_guest(client: Client, guest_id: str) -> bool:
    response = execute(
        client.table("guests").delete().eq("id", guest_id),
        in_use_message="Cannot delete guest. They have existing reservations.",
    )
    return bool(response.data)


async def record_completed_stay(
    client: Client,
    guest_id: str,
    amount: float,
    loyalty_points: int,
    visit_date: str,
) -> dict | None:
    """Credit a finished stay to the guest's running totals."""
    guest = await get_guest_by_id(client, guest_id)
    if not guest:
        return None
    update_data = {
        "total_bookings": int(guest.get("total_bookings") or 0) + 1,
        "total_spent": round(_as_float(guest.get("total_spent")) + _as_float(amount), 2),
        "loyalty_points": int(guest.get("loyalty_points") or 0) + loyalty_points,
        "last_visit": visit_date,
    }
    execute(client.table("guests").update(update_data).eq("id", guest_id))
    return {**guest, **update_data}
