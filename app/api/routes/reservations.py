from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import Client

from app.api import deps
from app.core.config import get_settings
from app.crud.reservation import delete_reservation, get_reservation_by_id, list_reservations
from app.db.base import get_supabase
from app.schemas.reservation import (
    BookingSubmissionResponse,
    CalendarBookingCreate,
    GroupActionResponse,
    QuoteRequest,
    QuoteResponse,
    ReservationGroupCreate,
    ReservationGroupListResponse,
    ReservationListResponse,
    ReservationResponse,
    ReservationUpdate,
)
from app.services.availability import AvailabilitySnapshot
from app.services.booking import (
    apply_to_group,
    book_calendar_selection,
    cancel,
    check_in,
    check_out,
    create_booking_group,
    related_reservations,
    update_reservation_details,
)
from app.services.booking_composer import group_reservations
from app.services.errors import BookingError
from app.services.pricing import price_room_slots, resolve_discounts, split_advance
from app.services.reservation_status import ReservationStatus

router = APIRouter(prefix="/v1.0/reservations", tags=["reservations"])

PricingCatalog = tuple[dict[str, dict], list[dict]]
PriceAdjustments = tuple[dict[str, dict], list[dict]]


@router.get("", response_model=ReservationListResponse)
async def list_all_reservations(
    status_filter: ReservationStatus | None = Query(None, alias="status"),
    guest_id: str | None = Query(None),
    room_id: str | None = Query(None),
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    try:
        rows = await list_reservations(
            client,
            status=status_filter.value if status_filter else None,
            guest_id=guest_id,
            room_id=room_id,
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return ReservationListResponse(items=rows)


@router.get("/groups", response_model=ReservationGroupListResponse)
async def list_reservation_groups(
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """All reservations, bundled into the multi-room bookings they came from."""
    try:
        rows = await list_reservations(client)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return ReservationGroupListResponse(
        groups=group_reservations(rows, get_settings().group_window_seconds)
    )


@router.post(
    "",
    response_model=BookingSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservations(
    payload: ReservationGroupCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
    catalog: PricingCatalog = Depends(deps.get_pricing_catalog),
    adjustments: PriceAdjustments = Depends(deps.get_price_adjustments),
):
    """Book one or more rooms for a guest.

    Rejected as a whole when validation or availability fails. Once writes
    start, rooms that fail are listed under ``failed`` and the rest stay booked.
    """
    room_types, rate_types = catalog
    meal_plans, discounts = adjustments
    try:
        return await create_booking_group(
            client,
            payload.model_dump(mode="json"),
            snapshot,
            room_types,
            rate_types,
            meal_plans=meal_plans,
            discounts=discounts,
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post(
    "/calendar",
    response_model=BookingSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reservations_from_calendar(
    payload: CalendarBookingCreate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
    catalog: PricingCatalog = Depends(deps.get_pricing_catalog),
    adjustments: PriceAdjustments = Depends(deps.get_price_adjustments),
):
    """Book the room/date cells selected on the calendar grid."""
    room_types, rate_types = catalog
    meal_plans, discounts = adjustments
    try:
        return await book_calendar_selection(
            client,
            payload.model_dump(mode="json"),
            snapshot,
            room_types,
            rate_types,
            meal_plans=meal_plans,
            discounts=discounts,
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post("/quote", response_model=QuoteResponse)
async def quote_reservations(
    payload: QuoteRequest,
    current_user: dict = Depends(deps.get_current_user),
    catalog: PricingCatalog = Depends(deps.get_pricing_catalog),
    adjustments: PriceAdjustments = Depends(deps.get_price_adjustments),
):
    """Price a booking form without submitting it."""
    room_types, rate_types = catalog
    meal_plans, discounts = adjustments
    slots = [slot.model_dump() for slot in payload.rooms]
    try:
        chosen = resolve_discounts(
            discounts,
            payload.check_in_date,
            payload.check_out_date,
            payload.discount_ids,
            payload.promo_code,
        )
        priced = price_room_slots(
            slots,
            room_types,
            payload.check_in_date,
            payload.check_out_date,
            rate_types,
            meal_plans=meal_plans,
            meal_plan=payload.meal_plan,
            discounts=chosen,
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return {
        **priced,
        "advance_per_room": split_advance(payload.advance_payment, len(slots)),
    }


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    reservation = await get_reservation_by_id(client, reservation_id)
    if not reservation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return reservation


@router.patch("/{reservation_id}", response_model=ReservationResponse)
async def patch_reservation(
    reservation_id: str,
    payload: ReservationUpdate,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
    snapshot: AvailabilitySnapshot = Depends(deps.get_snapshot),
    catalog: PricingCatalog = Depends(deps.get_pricing_catalog),
    adjustments: PriceAdjustments = Depends(deps.get_price_adjustments),
):
    """Edit a reservation. Check-in, check-out and cancel have their own actions."""
    deps.validate_uuid(reservation_id, "reservation ID")
    room_types, rate_types = catalog
    meal_plans, _ = adjustments
    try:
        return await update_reservation_details(
            client,
            reservation_id,
            payload.model_dump(mode="json", exclude_unset=True),
            snapshot,
            room_types,
            rate_types,
            meal_plans=meal_plans,
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_single_reservation(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        deleted = await delete_reservation(client, reservation_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")


@router.get("/{reservation_id}/related", response_model=ReservationListResponse)
async def get_related_reservations(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    """Reservations booked together with this one, itself first."""
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        rows = await related_reservations(
            client, reservation_id, get_settings().group_window_seconds
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc
    return ReservationListResponse(items=rows)


@router.post("/{reservation_id}/group/{action}", response_model=GroupActionResponse)
async def act_on_group(
    reservation_id: str,
    action: Literal["cancel", "delete"],
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        return await apply_to_group(
            client, reservation_id, action, get_settings().group_window_seconds
        )
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post("/{reservation_id}/check-in", response_model=ReservationResponse)
async def check_in_reservation(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        return await check_in(client, reservation_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post("/{reservation_id}/check-out", response_model=ReservationResponse)
async def check_out_reservation(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        return await check_out(client, reservation_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    current_user: dict = Depends(deps.get_current_user),
    client: Client = Depends(get_supabase),
):
    deps.validate_uuid(reservation_id, "reservation ID")
    try:
        return await cancel(client, reservation_id)
    except BookingError as exc:
        raise deps.http_error(exc) from exc
