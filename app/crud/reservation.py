from __future__ import annotations

import logging

from supabase import Client

from app.crud.common import ROOM_UNAVAILABLE_MESSAGE, clean_payload, execute, first_row
from app.services.errors import ConflictError
from app.services.reservation_status import OCCUPYING_STATUSES

logger = logging.getLogger(__name__)

RESERVATION_SELECT = "*, guests(*), rooms(*, room_types(*)), agents(*), room_rate_types(*)"

OCCUPYING_VALUES = sorted(status.value for status in OCCUPYING_STATUSES)


async def list_reservations(
    client: Client,
    status: str | None = None,
    guest_id: str | None = None,
    room_id: str | None = None,
) -> list[dict]:
    query = client.table("reservations").select(RESERVATION_SELECT)
    if status:
        query = query.eq("status", status)
    if guest_id:
        query = query.eq("guest_id", guest_id)
    if room_id:
        query = query.eq("room_id", room_id)
    response = execute(query.order("created_at", desc=True))
    return response.data or []


async def get_reservation_by_id(client: Client, reservation_id: str) -> dict | None:
    response = execute(
        client.table("reservations").select(RESERVATION_SELECT).eq("id", reservation_id).limit(1)
    )
    return first_row(response)


async def find_overlapping(
    client: Client,
    room_id: str,
    check_in: str,
    check_out: str,
    exclude_id: str | None = None,
) -> list[dict]:
    """Occupying reservations on the room that overlap ``[check_in, check_out)``."""
    query = (
        client.table("reservations")
        .select("id, room_id, check_in_date, check_out_date, status")
        .eq("room_id", room_id)
        .in_("status", OCCUPYING_VALUES)
        .lt("check_in_date", check_out)
        .gt("check_out_date", check_in)
    )
    if exclude_id:
        query = query.neq("id", exclude_id)
    return execute(query).data or []


async def create_reservation(client: Client, data: dict) -> dict:
    """Insert one reservation after a last overlap check against the live table.

    The check narrows, but does not close, the window for a double booking;
    an exclusion constraint on the table closes it and surfaces as
    ``ConflictError`` too.
    """
    row = clean_payload(data)
    if row.get("status") in OCCUPYING_VALUES:
        conflicts = await find_overlapping(
            client, row["room_id"], row["check_in_date"], row["check_out_date"]
        )
        if conflicts:
            logger.warning(
                f"Rejected booking for room {row['room_id']}: "
                f"overlaps {[conflict['id'] for conflict in conflicts]}"
            )
            raise ConflictError(ROOM_UNAVAILABLE_MESSAGE)
    response = execute(client.table("reservations").insert(row))
    return first_row(response) or {}


async def update_reservation(client: Client, reservation_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(client.table("reservations").update(filtered).eq("id", reservation_id))
    return await get_reservation_by_id(client, reservation_id)


async def delete_reservation(client: Client, reservation_id: str) -> bool:
    response = execute(
        client.table("reservations").delete().eq("id", reservation_id),
        in_use_message="Cannot delete reservation. It has bills attached.",
    )
    return bool(response.data)
