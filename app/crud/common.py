from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

import httpx
from postgrest.exceptions import APIError

from app.services.errors import ConflictError, TransportError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
EXCLUSION_VIOLATION = "23P01"

ROOM_UNAVAILABLE_MESSAGE = (
    "Room is no longer available for the selected dates. Refresh and try again."
)


def execute(query: Any, *, in_use_message: str | None = None, duplicate_message: str | None = None):
    """Run a PostgREST query, translating provider failures into booking errors."""
    try:
        return query.execute()
    except APIError as exc:
        code = getattr(exc, "code", None)
        if code == FOREIGN_KEY_VIOLATION and in_use_message:
            raise ConflictError(in_use_message) from exc
        if code == UNIQUE_VIOLATION and duplicate_message:
            raise ConflictError(duplicate_message) from exc
        if code == EXCLUSION_VIOLATION:
            raise ConflictError(ROOM_UNAVAILABLE_MESSAGE) from exc
        logger.error(f"Supabase request failed ({code}): {exc.message}")
        raise TransportError(exc.message or "Supabase request failed") from exc
    except httpx.HTTPError as exc:
        logger.error(f"Supabase transport error: {exc}")
        raise TransportError(f"Could not reach the database: {exc}") from exc


def first_row(response: Any) -> dict | None:
    rows = response.data or []
    return rows[0] if rows else None


def serialize(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def clean_payload(data: dict) -> dict:
    """Drop ``None`` values and make dates and enums JSON friendly."""
    return {k: serialize(v) for k, v in data.items() if v is not None}
