from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from app.api import deps
from app.crud.meal_plan import (
    create_meal_plan,
    delete_meal_plan,
    get_meal_plan_by_id,
    list_meal_plans,
    update_meal_plan,
)
from app.db.base import get_supabase
from app.schemas.meal_plan import (
    MealPlanCreate,
    MealPlanListResponse,
    MealPlanReorder,
    MealPlanResponse,
    MealPlanUpdate,
)
from app.services.errors import BookingError

router = APIRouter(prefix="/v1.0/meal-plans", tags=["meal-plans"])


@router.get("", response_model=MealPlanListResponse)
async def list_all_meal_plans(
    active_only: bool = Query(False),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        rows = await list_meal_plans(client, active_only=active_only)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return MealPlanListResponse(items=rows)


@router.post("", response_model=MealPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_new_meal_plan(
    payload: MealPlanCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        return await create_meal_plan(client, payload.model_dump())
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post("/reorder", response_model=MealPlanListResponse)
async def reorder_meal_plans(
    payload: MealPlanReorder,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Store the given order as each plan's ``sort_order``."""
    try:
        for index, meal_plan_id in enumerate(payload.ids):
            await update_meal_plan(client, meal_plan_id, {"sort_order": index})
        rows = await list_meal_plans(client)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return MealPlanListResponse(items=rows)


@router.get("/{meal_plan_id}", response_model=MealPlanResponse)
async def get_meal_plan(
    meal_plan_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(meal_plan_id, "meal plan ID")
    meal_plan = await get_meal_plan_by_id(client, meal_plan_id)
    if not meal_plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal plan not found")
    return meal_plan


@router.patch("/{meal_plan_id}", response_model=MealPlanResponse)
async def patch_meal_plan(
    meal_plan_id: str,
    payload: MealPlanUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(meal_plan_id, "meal plan ID")
    if not await get_meal_plan_by_id(client, meal_plan_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal plan not found")
    try:
        return await update_meal_plan(client, meal_plan_id, payload.model_dump(exclude_unset=True))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{meal_plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_meal_plan(
    meal_plan_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(meal_plan_id, "meal plan ID")
    try:
        deleted = await delete_meal_plan(client, meal_plan_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal plan not found")
