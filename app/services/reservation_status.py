from __future__ import annotations

from enum import Enum

from app.services.errors import BookingValidationError


class ReservationStatus(str, Enum):
    INQUIRY = "Inquiry"
    TENTATIVE = "Tentative"
    HOLD = "Hold"
    CONFIRMED = "Confirmed"
    CHECKED_IN = "Checked-in"
    CHECKED_OUT = "Checked-out"
    CANCELLED = "Cancelled"


class RoomStatus(str, Enum):
    AVAILABLE = "Available"
    RESERVED = "Reserved"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"
    BLOCKED = "Blocked"


OCCUPYING_STATUSES = frozenset(
    {ReservationStatus.HOLD, ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN}
)

# Ordered pre-arrival pipeline; a booking may skip ahead but never move back.
PRE_ARRIVAL = (
    ReservationStatus.INQUIRY,
    ReservationStatus.TENTATIVE,
    ReservationStatus.HOLD,
    ReservationStatus.CONFIRMED,
)


class InvalidTransitionError(BookingValidationError):
    def __init__(self, current: ReservationStatus, target: ReservationStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change reservation status from {current.value} to {target.value}")


def parse_status(value: str | ReservationStatus) -> ReservationStatus:
    if isinstance(value, ReservationStatus):
        return value
    try:
        return ReservationStatus(value)
    except ValueError:
        raise BookingValidationError(f"Unknown reservation status: {value}") from None


def is_occupying(status: str | ReservationStatus | None) -> bool:
    if status is None:
        return False
    try:
        return ReservationStatus(status) in OCCUPYING_STATUSES
    except ValueError:
        return False


def allowed_transitions(current: str | ReservationStatus) -> set[ReservationStatus]:
    current = parse_status(current)
    if current in (ReservationStatus.CHECKED_OUT, ReservationStatus.CANCELLED):
        return set()

    allowed = {ReservationStatus.CANCELLED}
    if current in PRE_ARRIVAL:
        allowed.update(PRE_ARRIVAL[PRE_ARRIVAL.index(current) + 1 :])
    if current in (ReservationStatus.HOLD, ReservationStatus.CONFIRMED):
        allowed.add(ReservationStatus.CHECKED_IN)
    if current == ReservationStatus.CHECKED_IN:
        allowed.add(ReservationStatus.CHECKED_OUT)
    return allowed


def can_transition(current: str | ReservationStatus, target: str | ReservationStatus) -> bool:
    return parse_status(target) in allowed_transitions(current)


def transition(
    current: str | ReservationStatus, target: str | ReservationStatus
) -> ReservationStatus:
    """Return the target status, or raise if the move is not allowed."""
    current = parse_status(current)
    target = parse_status(target)
    if target not in allowed_transitions(current):
        raise InvalidTransitionError(current, target)
    return target
