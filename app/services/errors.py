from __future__ import annotations


class BookingError(Exception):
    """Base class for booking failures surfaced to the front desk."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BookingValidationError(BookingError):
    """Required fields missing or inconsistent. Raised before any external call."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConflictError(BookingError):
    """The store rejected a write because the data changed underneath us."""


class NotFoundError(BookingError):
    pass


class TransportError(BookingError):
    """The Supabase call itself failed. Not retried."""
