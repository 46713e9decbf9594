from __future__ import annotations

from supabase import Client

from app.crud.common import clean_payload, execute, first_row


async def list_agents(client: Client) -> list[dict]:
    response = execute(client.table("agents").select("*").order("created_at", desc=True))
    return response.data or []


async def get_agent_by_id(client: Client, agent_id: str) -> dict | None:
    response = execute(client.table("agents").select("*").eq("id", agent_id).limit(1))
    return first_row(response)


async def create_agent(client: Client, data: dict) -> dict:
    response = execute(client.table("agents").insert(clean_payload(data)))
    return first_row(response) or {}


async def update_agent(client: Client, agent_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(client.table("agents").update(filtered).eq("id", agent_id))
    return await get_agent_by_id(client, agent_id)


async def delete_agent(client: Client, agent_id: str) -> bool:
    response = execute(
        client.table("agents").delete().eq("id", agent_id),
        in_use_message="Cannot delete agent. They are linked to existing reservations.",
    )
    return bool(response.data)
