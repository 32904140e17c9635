"""Exceptions raised by the booking domain."""


class BookingError(Exception):
    """Base class for booking domain errors."""


class InvalidInput(BookingError, ValueError):
    """Raised when a caller passes structurally impossible input."""


class BookingNotFound(BookingError, LookupError):
    """Raised when the referenced booking id is absent from the store."""

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class BookingConflictError(BookingError):
    """Raised when the requested slot overlaps an existing booking."""
