from __future__ import annotations

from datetime import datetime, timezone

from supabase import Client

from app.crud.common import clean_payload, execute, first_row

DUPLICATE_PROMO_MESSAGE = "A discount with this promo code already exists."


async def list_discounts(client: Client, enabled_only: bool = False) -> list[dict]:
    query = client.table("discounts").select("*")
    if enabled_only:
        query = query.eq("enabled", True)
    response = execute(query.order("priority", desc=True))
    return response.data or []


async def get_discount_by_id(client: Client, discount_id: str) -> dict | None:
    response = execute(client.table("discounts").select("*").eq("id", discount_id).limit(1))
    return first_row(response)


async def create_discount(client: Client, data: dict) -> dict:
    response = execute(
        client.table("discounts").insert(clean_payload({"current_uses": 0, **data})),
        duplicate_message=DUPLICATE_PROMO_MESSAGE,
    )
    return first_row(response) or {}


async def update_discount(client: Client, discount_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(
            client.table("discounts").update(filtered).eq("id", discount_id),
            duplicate_message=DUPLICATE_PROMO_MESSAGE,
        )
    return await get_discount_by_id(client, discount_id)


async def delete_discount(client: Client, discount_id: str) -> bool:
    response = execute(
        client.table("discounts").delete().eq("id", discount_id),
        in_use_message="Cannot delete discount: it has been applied to reservations. Disable it instead.",
    )
    return bool(response.data)


async def list_discount_applications(client: Client, reservation_id: str) -> list[dict]:
    response = execute(
        client.table("discount_applications")
        .select("*, discounts(*)")
        .eq("reservation_id", reservation_id)
    )
    return response.data or []


async def record_discount_application(
    client: Client, discount: dict, reservation_id: str, amount: float
) -> dict:
    """Log the amount a discount took off one reservation."""
    response = execute(
        client.table("discount_applications").insert(
            {
                "discount_id": discount["id"],
                "reservation_id": reservation_id,
                "discount_amount": amount,
                "applied_at": datetime.now(timezone.utc).isoformat(),
            }
        )
    )
    return first_row(response) or {}


async def increment_discount_use(client: Client, discount: dict) -> None:
    execute(
        client.table("discounts")
        .update({"current_uses": int(discount.get("current_uses") or 0) + 1})
        .eq("id", discount["id"])
    )
