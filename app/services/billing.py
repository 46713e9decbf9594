from __future__ import annotations

import logging
from typing import Any

from supabase import Client

from app.core.config import get_settings
from app.crud.bill import create_bill, get_bill_by_id, list_bills, update_bill
from app.crud.reservation import get_reservation_by_id
from app.services.errors import NotFoundError
from app.services.pricing import apply_payment, bill_totals, master_bill

logger = logging.getLogger(__name__)


async def raise_bill(
    client: Client,
    reservation_id: str,
    items: list[dict[str, Any]],
    *,
    bill_type: str = "Room",
    discount: float = 0.0,
    paid: float = 0.0,
    notes: str = "",
    tax_rate: float | None = None,
) -> dict:
    """Total the line items and store the bill against its reservation.

    Tax defaults to the configured ``BILL_TAX_RATE``.
    """
    if not await get_reservation_by_id(client, reservation_id):
        raise NotFoundError("Reservation not found")

    if tax_rate is None:
        tax_rate = get_settings().bill_tax_rate
    totals = bill_totals(items, discount=discount, paid=paid, tax_rate=tax_rate)
    bill = {
        "reservation_id": reservation_id,
        "bill_type": bill_type,
        "notes": notes,
        **{key: value for key, value in totals.items() if key != "items"},
    }
    created = await create_bill(client, bill, totals["items"])
    logger.info(f"Raised {bill_type} bill for reservation {reservation_id}: {totals['total']}")
    return created


async def record_payment(client: Client, bill_id: str, amount: float) -> dict | None:
    bill = await get_bill_by_id(client, bill_id)
    if not bill:
        raise NotFoundError("Bill not found")
    return await update_bill(client, bill_id, apply_payment(bill, amount))


async def reservation_master_bill(client: Client, reservation_id: str) -> dict:
    summary = master_bill(reservation_id, await list_bills(client, reservation_id))
    if summary is None:
        raise NotFoundError("No bills for this reservation")
    return summary
