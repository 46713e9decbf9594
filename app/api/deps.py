import uuid as _uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from supabase import Client

from app.core.security import decode_access_token
from app.db.base import get_supabase
from app.services.availability import AvailabilitySnapshot
from app.services.booking import load_price_adjustments, load_pricing_catalog, load_snapshot
from app.services.errors import (
    BookingError,
    BookingValidationError,
    ConflictError,
    NotFoundError,
    TransportError,
)


def validate_uuid(value: str, label: str = "ID") -> str:
    """Validate that an identifier is a well-formed UUID.

    Raises HTTP 400 if not, preventing Postgres 22P02 errors.
    """
    try:
        _uuid.UUID(value)
    except (ValueError, AttributeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} format. Must be a valid UUID.",
        )
    return value


def http_error(exc: BookingError) -> HTTPException:
    """Map a booking failure onto the HTTP status the front desk expects."""
    if isinstance(exc, BookingValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors
        )
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
    if isinstance(exc, TransportError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


async def get_current_user(token: str = Depends(oauth2_scheme)) -> dict:
    """Get the front-desk operator from the bearer token claims."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        subject: str | None = payload.get("sub")
        if subject is None:
            raise credentials_exception
    except (JWTError, ValueError):
        raise credentials_exception

    return {**payload, "id": subject}


async def get_snapshot(client: Client = Depends(get_supabase)) -> AvailabilitySnapshot:
    """Fresh rooms and reservations for one request. Never cached across requests."""
    try:
        return await load_snapshot(client)
    except BookingError as exc:
        raise http_error(exc) from exc


async def get_pricing_catalog(
    client: Client = Depends(get_supabase),
) -> tuple[dict[str, dict], list[dict]]:
    try:
        return await load_pricing_catalog(client)
    except BookingError as exc:
        raise http_error(exc) from exc


async def get_price_adjustments(
    client: Client = Depends(get_supabase),
) -> tuple[dict[str, dict], list[dict]]:
    """Active meal plans keyed by code, and the enabled discounts."""
    try:
        return await load_price_adjustments(client)
    except BookingError as exc:
        raise http_error(exc) from exc
