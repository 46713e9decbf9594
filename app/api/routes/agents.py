from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from app.api import deps
from app.crud.agent import create_agent, delete_agent, get_agent_by_id, list_agents, update_agent
from app.db.base import get_supabase
from app.schemas.agent import AgentCreate, AgentListResponse, AgentResponse, AgentUpdate
from app.services.errors import BookingError

router = APIRouter(prefix="/v1.0/agents", tags=["agents"])


@router.get("", response_model=AgentListResponse)
async def list_all_agents(
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    return AgentListResponse(items=await list_agents(client))


@router.post("", response_model=AgentResponse, status_code=status.HTTP_201_CREATED)
async def create_new_agent(
    payload: AgentCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        return await create_agent(client, payload.model_dump())
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(agent_id, "agent ID")
    agent = await get_agent_by_id(client, agent_id)
    if not agent:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agent not found")
    return agent


@router.patch("/{agent_id}", response_model=AgentResponse)
async def patch_agent(
    agent_id: str,
    payload: AgentUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(agent_id, "agent ID")
    if not await get_agent_by_id(client, agent_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agent not found")
    try:
        return await update_agent(client, agent_id, payload.model_dump(exclude_unset=True))
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{agent_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_agent(
    agent_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(agent_id, "agent ID")
    try:
        deleted = await delete_agent(client, agent_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agent not found")
