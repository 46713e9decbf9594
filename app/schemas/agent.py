from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AgentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str | None = Field(None, max_length=320)
    phone: str | None = Field(None, max_length=64)
    commission: float | None = Field(None, ge=0, le=100)
    address: str | None = None


class AgentUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    email: str | None = Field(None, max_length=320)
    phone: str | None = Field(None, max_length=64)
    commission: float | None = Field(None, ge=0, le=100)
    address: str | None = None


class AgentResponse(BaseModel):
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    commission: float | None = None
    address: str | None = None
    created_at: datetime | None = None


class AgentListResponse(BaseModel):
    items: list[AgentResponse]
