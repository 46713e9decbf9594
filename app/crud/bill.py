from __future__ import annotations

from supabase import Client

from app.crud.common import clean_payload, execute, first_row


async def list_bills(client: Client, reservation_id: str | None = None) -> list[dict]:
    query = client.table("bills").select("*, bill_items(*)")
    if reservation_id:
        query = query.eq("reservation_id", reservation_id)
    response = execute(query.order("created_at"))
    return response.data or []


async def get_bill_by_id(client: Client, bill_id: str) -> dict | None:
    response = execute(client.table("bills").select("*, bill_items(*)").eq("id", bill_id).limit(1))
    return first_row(response)


async def create_bill(client: Client, bill: dict, items: list[dict]) -> dict:
    response = execute(client.table("bills").insert(clean_payload(bill)))
    created = first_row(response)
    if not created:
        return {}
    if items:
        rows = [
            {
                "bill_id": created["id"],
                "description": item.get("description") or "",
                "quantity": item["quantity"],
                "rate": item["rate"],
                "amount": item["amount"],
            }
            for item in items
        ]
        execute(client.table("bill_items").insert(rows))
    return await get_bill_by_id(client, created["id"]) or created


async def update_bill(client: Client, bill_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(client.table("bills").update(filtered).eq("id", bill_id))
    return await get_bill_by_id(client, bill_id)


async def delete_bill(client: Client, bill_id: str) -> bool:
    execute(client.table("bill_items").delete().eq("bill_id", bill_id))
    response = execute(client.table("bills").delete().eq("id", bill_id))
    return bool(response.data)
