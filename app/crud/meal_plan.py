from __future__ import annotations

from supabase import Client

from app.crud.common import clean_payload, execute, first_row

DUPLICATE_CODE_MESSAGE = "A meal plan with this code already exists. Please use a different code."


async def list_meal_plans(client: Client, active_only: bool = False) -> list[dict]:
    query = client.table("meal_plans").select("*")
    if active_only:
        query = query.eq("is_active", True)
    response = execute(query.order("sort_order"))
    return response.data or []


async def get_meal_plan_by_id(client: Client, meal_plan_id: str) -> dict | None:
    response = execute(client.table("meal_plans").select("*").eq("id", meal_plan_id).limit(1))
    return first_row(response)


async def create_meal_plan(client: Client, data: dict) -> dict:
    response = execute(
        client.table("meal_plans").insert(clean_payload(data)),
        duplicate_message=DUPLICATE_CODE_MESSAGE,
    )
    return first_row(response) or {}


async def update_meal_plan(client: Client, meal_plan_id: str, data: dict) -> dict | None:
    filtered = clean_payload(data)
    if filtered:
        execute(
            client.table("meal_plans").update(filtered).eq("id", meal_plan_id),
            duplicate_message=DUPLICATE_CODE_MESSAGE,
        )
    return await get_meal_plan_by_id(client, meal_plan_id)


async def delete_meal_plan(client: Client, meal_plan_id: str) -> bool:
    response = execute(
        client.table("meal_plans").delete().eq("id", meal_plan_id),
        in_use_message=(
            "Cannot delete meal plan: it is used by existing reservations. "
            "Deactivate it instead."
        ),
    )
    return bool(response.data)
