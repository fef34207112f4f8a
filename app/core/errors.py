from typing import Optional


class BookingError(Exception):
    """Base for every rejection the booking engine can produce.

    ``code`` is stable and machine readable; ``reason`` narrows it down where
    one error covers several situations (e.g. which availability rule failed).
    """

    code = "booking_error"
    status_code = 400

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason


class InvalidReference(BookingError):
    """Unknown or inactive tenant, professional, service or appointment."""

    code = "invalid_reference"
    status_code = 404


class OutsideAvailability(BookingError):
    code = "outside_availability"
    status_code = 422


class PastSlot(BookingError):
    code = "past_slot"
    status_code = 422


class SlotConflict(BookingError):
    """The requested interval overlaps a committed appointment.

    Expected under contention; the client should re-fetch slots and retry.
    """

    code = "slot_conflict"
    status_code = 409


class RewardUnavailable(BookingError):
    code = "reward_unavailable"
    status_code = 409


class InvalidStatusTransition(BookingError):
    code = "invalid_status_transition"
    status_code = 409


class PersistenceUnavailable(BookingError):
    """Storage or lock acquisition failed; nothing was committed. Safe to retry."""

    code = "persistence_unavailable"
    status_code = 503
    retry_after_seconds = 1
