"""Booking workflows: validate, check against the snapshot, price, submit.

Everything that can be rejected locally is rejected before the first write.
Once writes start, each reservation is its own call; a failure part way
through a multi-room booking is reported, and the rows already written stay.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any

from supabase import Client

from app.crud.discount import (
    increment_discount_use,
    list_discount_applications,
    list_discounts,
    record_discount_application,
)
from app.crud.guest import record_completed_stay
from app.crud.meal_plan import list_meal_plans
from app.crud.reservation import (
    create_reservation,
    delete_reservation,
    get_reservation_by_id,
    list_reservations,
    update_reservation,
)
from app.crud.room import list_rate_types, list_room_types, list_rooms, set_room_status
from app.services.availability import (
    AvailabilitySnapshot,
    as_date,
    derive_room_statuses,
    is_room_free_for_range,
    snapshot_from_rows,
)
from app.services.booking_composer import (
    DEFAULT_GROUP_WINDOW_SECONDS,
    auto_assign_rooms,
    decompose_cells,
    find_related,
    validate_room_slots,
)
from app.services.errors import BookingError, BookingValidationError, ConflictError, NotFoundError
from app.services.pricing import (
    loyalty_points_for,
    payment_status,
    price_room_slots,
    resolve_discounts,
    split_advance,
)
from app.services.reservation_status import (
    ReservationStatus,
    RoomStatus,
    is_occupying,
    parse_status,
    transition,
)

logger = logging.getLogger(__name__)

SLOT_FIELDS = (
    "room_id",
    "rate_type_id",
    "number_of_adults",
    "number_of_children",
    "number_of_infants",
)
SHARED_FIELDS = (
    "guest_id",
    "booking_source",
    "agent_id",
    "direct_source",
    "meal_plan",
    "special_requests",
    "status",
)
STAY_FIELDS = {"room_id", "check_in_date", "check_out_date", "rate_type_id"}
PRICE_FIELDS = {"meal_plan", "number_of_adults", "number_of_children"}
DEDICATED_STATUS_ACTIONS = {
    ReservationStatus.CHECKED_IN: "check-in",
    ReservationStatus.CHECKED_OUT: "check-out",
    ReservationStatus.CANCELLED: "cancel",
}


async def load_snapshot(client: Client) -> AvailabilitySnapshot:
    rooms = await list_rooms(client)
    reservations = await list_reservations(client)
    return snapshot_from_rows(rooms, reservations, fetched_at=datetime.now(timezone.utc))


async def load_pricing_catalog(client: Client) -> tuple[dict[str, dict], list[dict]]:
    room_types = await list_room_types(client)
    rate_types = await list_rate_types(client)
    return {room_type["id"]: room_type for room_type in room_types}, rate_types


async def load_price_adjustments(client: Client) -> tuple[dict[str, dict], list[dict]]:
    meal_plans = await list_meal_plans(client, active_only=True)
    discounts = await list_discounts(client, enabled_only=True)
    return {plan["code"]: plan for plan in meal_plans}, discounts


def _validate_header(request: dict[str, Any]) -> None:
    errors: list[str] = []
    if not request.get("guest_id"):
        errors.append("Select a guest")
    check_in = request.get("check_in_date")
    check_out = request.get("check_out_date")
    if not check_in or not check_out:
        errors.append("Select check-in and check-out dates")
    elif as_date(check_out) <= as_date(check_in):
        errors.append("Check-out must be after check-in")
    if request.get("booking_source") == "agent" and not request.get("agent_id"):
        errors.append("Select an agent for agent bookings")

    status = request.get("status") or ReservationStatus.CONFIRMED.value
    try:
        initial = parse_status(status)
    except BookingValidationError as exc:
        errors.extend(exc.errors)
    else:
        if initial in (ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED):
            errors.append(f"A new booking cannot start as {initial.value}")

    if errors:
        raise BookingValidationError(errors)


def _room_label(snapshot: AvailabilitySnapshot, room_id: str) -> str:
    room = snapshot.room(room_id)
    return str(room.get("room_number")) if room else room_id


def _ensure_free(
    snapshot: AvailabilitySnapshot,
    stays: list[tuple[str, Any, Any]],
    exclude_ids: tuple[str, ...] = (),
) -> None:
    taken = [
        _room_label(snapshot, room_id)
        for room_id, check_in, check_out in stays
        if not is_room_free_for_range(snapshot, room_id, check_in, check_out, exclude_ids)
    ]
    if taken:
        raise ConflictError(
            f"Room(s) {', '.join(taken)} not available for the selected dates"
        )


def _reservation_row(
    request: dict[str, Any],
    slot: dict[str, Any],
    check_in: date,
    check_out: date,
    advance_share: float,
    group_id: str,
) -> dict[str, Any]:
    row = {field: request.get(field) for field in SHARED_FIELDS}
    row.update({field: slot.get(field) for field in SLOT_FIELDS})
    row.update(
        {
            "status": request.get("status") or ReservationStatus.CONFIRMED.value,
            "booking_source": request.get("booking_source") or "direct",
            "meal_plan": request.get("meal_plan") or "NM",
            "check_in_date": check_in,
            "check_out_date": check_out,
            "total_amount": slot["total_amount"],
            "advance_payment": advance_share,
            "payment_status": payment_status(
                slot["total_amount"], slot["total_amount"] - advance_share
            ),
            "booking_group_id": group_id,
        }
    )
    if row["booking_source"] != "agent":
        row["agent_id"] = None
    return row


async def _record_discounts(
    client: Client, reservation_id: str, applied: list[dict[str, Any]]
) -> None:
    for discount in applied:
        try:
            await record_discount_application(client, discount, reservation_id, discount["amount"])
        except BookingError as exc:
            logger.error(
                f"Booked reservation {reservation_id} but could not log discount "
                f"{discount['id']}: {exc.message}"
            )


async def _submit(
    client: Client,
    rows: list[dict[str, Any]],
    applied_discounts: list[list[dict[str, Any]]] | None = None,
    discounts: list[dict[str, Any]] = (),
) -> dict[str, Any]:
    created: list[dict] = []
    failed: list[dict] = []
    used: set[str] = set()
    for index, row in enumerate(rows):
        try:
            reservation = await create_reservation(client, row)
        except BookingError as exc:
            failed.append({"room_id": row["room_id"], "error": exc.message})
            continue
        created.append(reservation)
        if row["status"] == ReservationStatus.CHECKED_IN.value:
            await set_room_status(client, row["room_id"], RoomStatus.OCCUPIED.value)
        applied = applied_discounts[index] if applied_discounts else []
        if applied:
            await _record_discounts(client, reservation["id"], applied)
            used.update(discount["id"] for discount in applied)

    # One use per booking, however many rooms it covers.
    for discount in discounts:
        if discount["id"] not in used:
            continue
        try:
            await increment_discount_use(client, discount)
        except BookingError as exc:
            logger.error(f"Could not count a use of discount {discount['id']}: {exc.message}")

    message = f"Created {len(created)} of {len(rows)} bookings successfully"
    if failed:
        logger.warning(f"{message}; failures: {failed}")
    else:
        logger.info(message)
    return {
        "requested": len(rows),
        "created": created,
        "failed": failed,
        "message": message,
    }


async def create_booking_group(
    client: Client,
    request: dict[str, Any],
    snapshot: AvailabilitySnapshot,
    room_types: dict[str, dict],
    rate_types: list[dict],
    meal_plans: dict[str, dict] | None = None,
    discounts: list[dict] = (),
) -> dict[str, Any]:
    """Book one or more rooms for the same guest and dates."""
    _validate_header(request)
    check_in = as_date(request["check_in_date"])
    check_out = as_date(request["check_out_date"])

    slots = request.get("rooms") or []
    if request.get("auto_assign"):
        slots = auto_assign_rooms(slots, snapshot, check_in, check_out)
    validate_room_slots(slots)
    chosen = resolve_discounts(
        discounts,
        check_in,
        check_out,
        request.get("discount_ids") or (),
        request.get("promo_code"),
    )
    _ensure_free(snapshot, [(slot["room_id"], check_in, check_out) for slot in slots])

    priced = price_room_slots(
        slots,
        room_types,
        check_in,
        check_out,
        rate_types,
        meal_plans=meal_plans,
        meal_plan=request.get("meal_plan"),
        discounts=chosen,
    )
    advance_share = split_advance(request.get("advance_payment") or 0, len(slots))
    group_id = str(uuid.uuid4())
    rows = [
        _reservation_row(request, slot, check_in, check_out, advance_share, group_id)
        for slot in priced["slots"]
    ]

    result = await _submit(
        client, rows, [slot["applied_discounts"] for slot in priced["slots"]], chosen
    )
    return {
        **result,
        "booking_group_id": group_id,
        "grand_total": priced["grand_total"],
        "discount_total": priced["discount_total"],
        "advance_per_room": advance_share,
    }


async def book_calendar_selection(
    client: Client,
    request: dict[str, Any],
    snapshot: AvailabilitySnapshot,
    room_types: dict[str, dict],
    rate_types: list[dict],
    meal_plans: dict[str, dict] | None = None,
    discounts: list[dict] = (),
) -> dict[str, Any]:
    """Book the cells dragged on the calendar grid, one stay per contiguous run."""
    cells = [(cell["room_id"], cell["date"]) for cell in request.get("cells") or []]
    if not cells:
        raise BookingValidationError("Select at least one room and date on the calendar")

    intents = decompose_cells(cells)
    unknown = [intent["room_id"] for intent in intents if snapshot.room(intent["room_id"]) is None]
    if unknown:
        raise BookingValidationError(f"Unknown room(s): {', '.join(unknown)}")

    chosen_per_intent = []
    for intent in intents:
        _validate_header(
            {
                **request,
                "check_in_date": intent["check_in_date"],
                "check_out_date": intent["check_out_date"],
            }
        )
        chosen_per_intent.append(
            resolve_discounts(
                discounts,
                intent["check_in_date"],
                intent["check_out_date"],
                request.get("discount_ids") or (),
                request.get("promo_code"),
            )
        )
    _ensure_free(
        snapshot,
        [(i["room_id"], i["check_in_date"], i["check_out_date"]) for i in intents],
    )

    # Stays sharing dates were booked as one multi-room booking.
    group_ids: dict[tuple[date, date], str] = {}
    rows: list[dict[str, Any]] = []
    applied: list[list[dict[str, Any]]] = []
    grand_total = 0.0
    discount_total = 0.0
    for intent, chosen in zip(intents, chosen_per_intent):
        room = snapshot.room(intent["room_id"])
        slot = {
            "room_id": intent["room_id"],
            "room_type_id": room.get("room_type_id"),
            "rate_type_id": request.get("rate_type_id"),
            "number_of_adults": request.get("number_of_adults") or 1,
            "number_of_children": request.get("number_of_children") or 0,
            "number_of_infants": request.get("number_of_infants") or 0,
        }
        priced = price_room_slots(
            [slot],
            room_types,
            intent["check_in_date"],
            intent["check_out_date"],
            rate_types,
            meal_plans=meal_plans,
            meal_plan=request.get("meal_plan"),
            discounts=chosen,
        )
        grand_total += priced["grand_total"]
        discount_total += priced["discount_total"]
        key = (intent["check_in_date"], intent["check_out_date"])
        group_id = group_ids.setdefault(key, str(uuid.uuid4()))
        rows.append(
            _reservation_row(
                request, priced["slots"][0], key[0], key[1], 0.0, group_id
            )
        )
        applied.append(priced["slots"][0]["applied_discounts"])

    chosen_rows = {row["id"]: row for chosen in chosen_per_intent for row in chosen}
    result = await _submit(client, rows, applied, list(chosen_rows.values()))
    return {
        **result,
        "intents": intents,
        "grand_total": round(grand_total, 2),
        "discount_total": round(discount_total, 2),
    }


async def update_reservation_details(
    client: Client,
    reservation_id: str,
    patch: dict[str, Any],
    snapshot: AvailabilitySnapshot,
    room_types: dict[str, dict],
    rate_types: list[dict],
    meal_plans: dict[str, dict] | None = None,
) -> dict | None:
    """Edit one reservation, re-checking and re-pricing when the stay changes.

    A status move that starts occupying the room is checked for overlap like
    a date change. Check-in, check-out and cancellation carry room and guest
    side effects, so they go through their own actions instead.
    Re-pricing applies the discounts recorded against the reservation again.
    """
    current = await get_reservation_by_id(client, reservation_id)
    if not current:
        raise NotFoundError("Reservation not found")

    data = {k: v for k, v in patch.items() if v is not None}
    becomes_occupying = False
    if "status" in data:
        target = parse_status(data["status"])
        if target in DEDICATED_STATUS_ACTIONS:
            raise BookingValidationError(
                f"Use the {DEDICATED_STATUS_ACTIONS[target]} action to move a "
                f"reservation to {target.value}"
            )
        data["status"] = transition(current["status"], target).value
        becomes_occupying = is_occupying(data["status"]) and not is_occupying(current["status"])

    stay_changed = bool(STAY_FIELDS & data.keys())
    price_changed = stay_changed or bool(PRICE_FIELDS & data.keys())
    if stay_changed or becomes_occupying or price_changed:
        room_id = data.get("room_id", current["room_id"])
        check_in = as_date(data.get("check_in_date", current["check_in_date"]))
        check_out = as_date(data.get("check_out_date", current["check_out_date"]))
        if check_out <= check_in:
            raise BookingValidationError("Check-out must be after check-in")
        if stay_changed or becomes_occupying:
            _ensure_free(
                snapshot, [(room_id, check_in, check_out)], exclude_ids=(reservation_id,)
            )

        room = snapshot.room(room_id) or {}
        if price_changed and "total_amount" not in data and room.get("room_type_id"):
            slot = {
                field: data.get(field, current.get(field))
                for field in ("rate_type_id", "number_of_adults", "number_of_children")
            }
            priced = price_room_slots(
                [{**slot, "room_type_id": room["room_type_id"]}],
                room_types,
                check_in,
                check_out,
                rate_types,
                meal_plans=meal_plans,
                meal_plan=data.get("meal_plan", current.get("meal_plan")),
                discounts=await _recorded_discounts(client, reservation_id),
            )
            data["total_amount"] = priced["grand_total"]

    return await update_reservation(client, reservation_id, data)


async def _recorded_discounts(client: Client, reservation_id: str) -> list[dict]:
    applications = await list_discount_applications(client, reservation_id)
    return [row["discounts"] for row in applications if row.get("discounts")]


async def _require(client: Client, reservation_id: str) -> dict:
    reservation = await get_reservation_by_id(client, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation not found")
    return reservation


async def check_in(client: Client, reservation_id: str) -> dict | None:
    reservation = await _require(client, reservation_id)
    status = transition(reservation["status"], ReservationStatus.CHECKED_IN)
    updated = await update_reservation(client, reservation_id, {"status": status.value})
    await set_room_status(client, reservation["room_id"], RoomStatus.OCCUPIED.value)
    logger.info(f"Checked in reservation {reservation_id}")
    return updated


async def check_out(client: Client, reservation_id: str) -> dict | None:
    reservation = await _require(client, reservation_id)
    status = transition(reservation["status"], ReservationStatus.CHECKED_OUT)
    updated = await update_reservation(client, reservation_id, {"status": status.value})
    await set_room_status(client, reservation["room_id"], RoomStatus.AVAILABLE.value)

    amount = reservation.get("total_amount") or 0
    await record_completed_stay(
        client,
        reservation["guest_id"],
        amount,
        loyalty_points_for(amount),
        str(reservation["check_out_date"]),
    )
    logger.info(f"Checked out reservation {reservation_id}")
    return updated


async def cancel(client: Client, reservation_id: str) -> dict | None:
    reservation = await _require(client, reservation_id)
    status = transition(reservation["status"], ReservationStatus.CANCELLED)
    updated = await update_reservation(client, reservation_id, {"status": status.value})
    if reservation["status"] == ReservationStatus.CHECKED_IN.value:
        await set_room_status(client, reservation["room_id"], RoomStatus.AVAILABLE.value)
    return updated


async def related_reservations(
    client: Client,
    reservation_id: str,
    window_seconds: int = DEFAULT_GROUP_WINDOW_SECONDS,
) -> list[dict]:
    reservation = await _require(client, reservation_id)
    return find_related(reservation, await list_reservations(client), window_seconds)


async def apply_to_group(
    client: Client,
    reservation_id: str,
    action: str,
    window_seconds: int = DEFAULT_GROUP_WINDOW_SECONDS,
) -> dict[str, Any]:
    """Cancel or delete every reservation booked together with this one."""
    if action not in ("cancel", "delete"):
        raise BookingValidationError(f"Unknown group action: {action}")

    group = await related_reservations(client, reservation_id, window_seconds)
    succeeded: list[str] = []
    failed: list[dict] = []
    for reservation in group:
        try:
            if action == "cancel":
                await cancel(client, reservation["id"])
            else:
                await delete_reservation(client, reservation["id"])
        except BookingError as exc:
            failed.append({"reservation_id": reservation["id"], "error": exc.message})
            continue
        succeeded.append(reservation["id"])

    verb = "Cancelled" if action == "cancel" else "Deleted"
    message = f"{verb} {len(succeeded)} of {len(group)} bookings"
    if failed:
        logger.warning(f"{message}; failures: {failed}")
    return {"succeeded": succeeded, "failed": failed, "message": message}


async def sync_room_statuses(
    client: Client, snapshot: AvailabilitySnapshot, today: date | None = None
) -> dict[str, Any]:
    derived = derive_room_statuses(snapshot, today or date.today())
    changed = {
        room_id: status
        for room_id, status in derived.items()
        if (snapshot.room(room_id) or {}).get("status") != status
    }
    for room_id, status in changed.items():
        await set_room_status(client, room_id, status)
    if changed:
        logger.info(f"Synced status for {len(changed)} room(s)")
    return {"updated": len(changed), "statuses": changed}
