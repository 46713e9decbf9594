from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date
from typing import Any

from app.services.availability import as_date
from app.services.errors import BookingValidationError

LOYALTY_POINT_UNIT = 100
FLEXIBLE_DISCOUNT_TYPES = ("promo_code", "seasonal", "long_stay")


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def nights(check_in: date | str, check_out: date | str) -> int:
    days = (as_date(check_out) - as_date(check_in)).days
    return max(math.ceil(days), 1)


def nightly_rate(room_type: dict[str, Any], rate_type: dict[str, Any] | None = None) -> float:
    if rate_type:
        return _to_float(rate_type.get("base_price"))
    return _to_float(room_type.get("base_price"))


def room_total(rate: float, check_in: date | str, check_out: date | str) -> float:
    return round(_to_float(rate) * nights(check_in, check_out), 2)


def _rate_is_valid_on(rate_type: dict[str, Any], check_in: date) -> bool:
    valid_from = rate_type.get("valid_from")
    valid_to = rate_type.get("valid_to")
    if valid_from and as_date(valid_from) > check_in:
        return False
    if valid_to and as_date(valid_to) < check_in:
        return False
    return True


def _rate_fits_stay(rate_type: dict[str, Any], stay_nights: int) -> bool:
    min_nights = int(rate_type.get("min_nights") or 1)
    max_nights = rate_type.get("max_nights")
    if stay_nights < min_nights:
        return False
    return not (max_nights and stay_nights > int(max_nights))


def active_rate_types(
    rate_types: Iterable[dict[str, Any]],
    room_type_id: str,
    check_in: date | str | None = None,
) -> list[dict[str, Any]]:
    """Active plans for a room type, default first, then by name."""
    rows = [
        rate
        for rate in rate_types
        if rate.get("room_type_id") == room_type_id and rate.get("is_active", True)
    ]
    if check_in is not None:
        day = as_date(check_in)
        rows = [rate for rate in rows if _rate_is_valid_on(rate, day)]
    return sorted(rows, key=lambda rate: (not rate.get("is_default"), rate.get("rate_name") or ""))


def select_rate_type(
    rate_types: Iterable[dict[str, Any]],
    room_type_id: str,
    check_in: date | str,
    check_out: date | str,
    rate_type_id: str | None = None,
) -> dict[str, Any] | None:
    """Rate plan chosen for a stay, or ``None`` to use the room type's base price.

    A chosen plan must be an active plan of the room type, valid on the
    check-in date, and allow the length of stay.
    """
    if not rate_type_id:
        return None

    stay_nights = nights(check_in, check_out)
    for rate in active_rate_types(rate_types, room_type_id, check_in):
        if rate.get("id") != rate_type_id:
            continue
        if not _rate_fits_stay(rate, stay_nights):
            raise BookingValidationError(
                f"Rate {rate.get('rate_code') or rate_type_id} does not allow "
                f"a {stay_nights}-night stay"
            )
        return rate
    raise BookingValidationError("Selected rate is not available for these dates")


def meal_plan_cost(meal_plan: dict[str, Any] | None, guests: int, stay_nights: int) -> float:
    """Price per person, per night. An unknown or missing plan costs nothing."""
    if not meal_plan:
        return 0.0
    return round(_to_float(meal_plan.get("price_per_person")) * guests * stay_nights, 2)


def discount_amount(discount: dict[str, Any], amount: float) -> float:
    """What one discount takes off ``amount``, never more than the amount itself.

    Percentage discounts are a share of the amount. Fixed-amount discounts
    are a flat sum. Promo, seasonal and long-stay discounts read a value up
    to 100 as a percentage and anything larger as a flat sum.
    """
    amount = _to_float(amount)
    value = _to_float(discount.get("value"))
    if amount <= 0 or value <= 0:
        return 0.0

    kind = discount.get("discount_type")
    if kind == "percentage" or (kind in FLEXIBLE_DISCOUNT_TYPES and value <= 100):
        off = amount * value / 100
    elif kind == "fixed_amount" or kind in FLEXIBLE_DISCOUNT_TYPES:
        off = value
    else:
        return 0.0
    return min(round(off, 2), amount)


def apply_discounts(amount: float, discounts: Iterable[dict[str, Any]]) -> dict[str, Any]:
    """Apply discounts highest priority first, each to what the previous left.

    After the first discount lands, only combinable ones are considered, and
    a non-combinable discount ends the chain.
    """
    original = round(_to_float(amount), 2)
    remaining = original
    applied: list[dict[str, Any]] = []
    ordered = sorted(discounts, key=lambda row: int(row.get("priority") or 0), reverse=True)
    for discount in ordered:
        combinable = bool(discount.get("can_combine"))
        if applied and not combinable:
            continue
        off = discount_amount(discount, remaining)
        if off <= 0:
            continue
        applied.append(
            {
                "id": discount.get("id"),
                "name": discount.get("name"),
                "discount_type": discount.get("discount_type"),
                "value": _to_float(discount.get("value")),
                "amount": off,
            }
        )
        remaining = max(round(remaining - off, 2), 0.0)
        if not combinable:
            break
    return {
        "original_amount": original,
        "total_discount": round(original - remaining, 2),
        "final_amount": remaining,
        "applied": applied,
    }


def is_discount_valid(discount: dict[str, Any], day: date | str) -> bool:
    if not discount.get("enabled", True):
        return False
    day = as_date(day)
    if discount.get("valid_from") and as_date(discount["valid_from"]) > day:
        return False
    if discount.get("valid_to") and as_date(discount["valid_to"]) < day:
        return False
    maximum_uses = discount.get("maximum_uses")
    return not (maximum_uses and int(discount.get("current_uses") or 0) >= int(maximum_uses))


def discount_applies_to(discount: dict[str, Any], room_type_id: str | None) -> bool:
    room_type_ids = discount.get("applicable_room_types") or []
    return not room_type_ids or room_type_id in room_type_ids


def applicable_discounts(
    discounts: Iterable[dict[str, Any]],
    check_in: date | str,
    check_out: date | str,
    room_type_id: str | None = None,
) -> list[dict[str, Any]]:
    """Discounts a stay qualifies for without a promo code, highest priority first."""
    stay_nights = nights(check_in, check_out)
    rows = [
        discount
        for discount in discounts
        if discount.get("discount_type") != "promo_code"
        and is_discount_valid(discount, check_in)
        and int(discount.get("minimum_nights") or 0) <= stay_nights
        and (room_type_id is None or discount_applies_to(discount, room_type_id))
    ]
    return sorted(rows, key=lambda row: int(row.get("priority") or 0), reverse=True)


def resolve_discounts(
    discounts: Iterable[dict[str, Any]],
    check_in: date | str,
    check_out: date | str,
    discount_ids: Iterable[str] = (),
    promo_code: str | None = None,
) -> list[dict[str, Any]]:
    """The discount rows a booking asked for, checked against its dates.

    Room-type restrictions are left to pricing, so one multi-room booking can
    carry a discount that only some of its rooms receive.
    """
    rows = list(discounts)
    wanted = list(dict.fromkeys(discount_ids))
    if not wanted and not promo_code:
        return []

    eligible = {row.get("id"): row for row in applicable_discounts(rows, check_in, check_out)}
    errors = [
        f"Discount {discount_id} is not available for this stay"
        for discount_id in wanted
        if discount_id not in eligible
    ]
    chosen = [eligible[discount_id] for discount_id in wanted if discount_id in eligible]

    if promo_code:
        promo = next((row for row in rows if row.get("promo_code") == promo_code), None)
        if promo is None or not promo.get("enabled", True):
            errors.append("Invalid promo code")
        elif not is_discount_valid(promo, check_in) or int(
            promo.get("minimum_nights") or 0
        ) > nights(check_in, check_out):
            errors.append("Promo code has expired or is no longer valid")
        elif promo not in chosen:
            chosen.append(promo)

    if errors:
        raise BookingValidationError(errors)
    return chosen


def _discounts_for(
    discounts: list[dict[str, Any]], room_type_id: str | None, applies_to: str
) -> list[dict[str, Any]]:
    return [
        discount
        for discount in discounts
        if (discount.get("applies_to") or "room_rates") == applies_to
        and discount_applies_to(discount, room_type_id)
    ]


def price_room_slots(
    slots: list[dict[str, Any]],
    room_types: dict[str, dict[str, Any]],
    check_in: date | str,
    check_out: date | str,
    rate_types: Iterable[dict[str, Any]] = (),
    *,
    meal_plans: dict[str, dict[str, Any]] | None = None,
    meal_plan: str | None = None,
    discounts: Iterable[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Per-slot totals and the grand total of a multi-room booking.

    Each slot is the room charge less its room-rate discounts, plus the meal
    plan for its adults and children less add-on discounts, then less any
    whole-bill discounts. ``discounts`` are rows already chosen for the
    booking (see ``resolve_discounts``); each room gets those that cover its
    room type.

    Recomputed from scratch on every call, so callers can re-price whenever
    dates, room types, rates, meal plan or discounts change.
    """
    rate_rows = list(rate_types)
    chosen = list(discounts)
    plan = (meal_plans or {}).get(meal_plan or "")
    stay_nights = nights(check_in, check_out)
    priced: list[dict[str, Any]] = []
    for slot in slots:
        room_type = room_types.get(slot.get("room_type_id") or "")
        if room_type is None:
            raise BookingValidationError(f"Unknown room type: {slot.get('room_type_id')}")
        rate_type = select_rate_type(
            rate_rows,
            room_type["id"],
            check_in,
            check_out,
            rate_type_id=slot.get("rate_type_id"),
        )
        rate = nightly_rate(room_type, rate_type)
        room_amount = room_total(rate, check_in, check_out)
        guests = int(slot.get("number_of_adults") or 1) + int(slot.get("number_of_children") or 0)
        meal_amount = meal_plan_cost(plan, guests, stay_nights)

        room_part = apply_discounts(room_amount, _discounts_for(chosen, room_type["id"], "room_rates"))
        meal_part = apply_discounts(meal_amount, _discounts_for(chosen, room_type["id"], "addons"))
        bill_part = apply_discounts(
            room_part["final_amount"] + meal_part["final_amount"],
            _discounts_for(chosen, room_type["id"], "total_bill"),
        )
        applied = room_part["applied"] + meal_part["applied"] + bill_part["applied"]
        priced.append(
            {
                **slot,
                "rate_type_id": rate_type["id"] if rate_type else None,
                "nightly_rate": rate,
                "nights": stay_nights,
                "room_amount": room_amount,
                "meal_plan_amount": meal_amount,
                "discount_amount": round(sum(item["amount"] for item in applied), 2),
                "applied_discounts": applied,
                "total_amount": bill_part["final_amount"],
            }
        )
    return {
        "slots": priced,
        "nights": stay_nights,
        "grand_total": round(sum(slot["total_amount"] for slot in priced), 2),
        "discount_total": round(sum(slot["discount_amount"] for slot in priced), 2),
    }


def split_advance(advance: float, rooms: int) -> float:
    """Even per-room share of a lump-sum advance. Informational only."""
    if rooms <= 0:
        return 0.0
    return round(_to_float(advance) / rooms, 2)


def payment_status(total: float, balance: float) -> str:
    if balance <= 0:
        return "Paid"
    if balance == total:
        return "Pending"
    return "Partial"


def bill_totals(
    items: Iterable[dict[str, Any]],
    discount: float = 0.0,
    paid: float = 0.0,
    *,
    tax_rate: float,
) -> dict[str, Any]:
    line_items = []
    for item in items:
        quantity = _to_float(item.get("quantity", 1))
        rate = _to_float(item.get("rate"))
        line_items.append(
            {**item, "quantity": quantity, "rate": rate, "amount": round(quantity * rate, 2)}
        )

    subtotal = round(sum(item["amount"] for item in line_items), 2)
    tax = round(subtotal * tax_rate, 2)
    total = round(subtotal + tax - _to_float(discount), 2)
    balance = round(total - _to_float(paid), 2)
    return {
        "items": line_items,
        "subtotal": subtotal,
        "tax": tax,
        "discount": _to_float(discount),
        "total": total,
        "paid_amount": _to_float(paid),
        "balance": balance,
        "payment_status": payment_status(total, balance),
    }


def apply_payment(bill: dict[str, Any], amount: float) -> dict[str, Any]:
    if _to_float(amount) <= 0:
        raise BookingValidationError("Payment amount must be greater than zero")
    total = _to_float(bill.get("total"))
    paid = round(_to_float(bill.get("paid_amount")) + _to_float(amount), 2)
    balance = round(total - paid, 2)
    return {
        "paid_amount": paid,
        "balance": balance,
        "payment_status": payment_status(total, balance),
    }


def master_bill(reservation_id: str, bills: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Read-only roll-up of every bill raised against one reservation."""
    rows = [bill for bill in bills if bill.get("reservation_id") == reservation_id]
    if not rows:
        return None

    grand_total = round(sum(_to_float(bill.get("total")) for bill in rows), 2)
    total_paid = round(sum(_to_float(bill.get("paid_amount")) for bill in rows), 2)
    balance = round(grand_total - total_paid, 2)
    return {
        "reservation_id": reservation_id,
        "bills": rows,
        "subtotal": round(sum(_to_float(bill.get("subtotal")) for bill in rows), 2),
        "tax": round(sum(_to_float(bill.get("tax")) for bill in rows), 2),
        "discount": round(sum(_to_float(bill.get("discount")) for bill in rows), 2),
        "grand_total": grand_total,
        "total_paid": total_paid,
        "balance": balance,
        "payment_status": payment_status(grand_total, balance),
    }


def loyalty_points_for(amount: float) -> int:
    return math.floor(_to_float(amount) / LOYALTY_POINT_UNIT)
