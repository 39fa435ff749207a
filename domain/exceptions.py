"""Domain exceptions

Rule exceptions mirror ``FailureReason`` one to one. The rules engine reports
them as ``RuleViolation`` values; the classes exist for callers that prefer to
raise, and for ``BookingRejectedError`` which wraps a whole failure list.
"""
from domain.enums import FailureReason


class BookingError(Exception):
    """Base exception for the booking engine."""

    pass


class InvalidRangeError(BookingError, ValueError):
    """Raised when a check-out is not after its check-in."""

    reason = FailureReason.INVALID_RANGE

    def __init__(self, start=None, end=None, message: str = None):
        self.start = start
        self.end = end
        if message is None:
            message = f"Invalid date range: {start} -> {end} (end must be after start)"
        super().__init__(message)


class InvalidStateError(BookingError):
    """Raised when a lifecycle transition is not allowed from the current state."""

    pass


class AlreadyCancelledError(InvalidStateError):
    """Raised when cancelling a booking that is already cancelled."""

    pass


class BookingNotFoundError(BookingError):
    pass


class VillaNotFoundError(BookingError):
    pass


class DuplicateBookingError(BookingError):
    """Raised when a record with the same id or reference is already in the ledger."""

    pass


class ReferenceUnavailableError(BookingError):
    """Raised when every reference candidate collided with an existing one."""

    pass


class BookingRuleError(BookingError):
    """Base exception for user-correctable rule failures."""

    reason: FailureReason = None


class PastDateError(BookingRuleError):
    reason = FailureReason.PAST_DATE


class CapacityExceededError(BookingRuleError):
    reason = FailureReason.CAPACITY_EXCEEDED


class ConflictError(BookingRuleError):
    reason = FailureReason.CONFLICT


class MinimumStayError(BookingRuleError):
    reason = FailureReason.MINIMUM_STAY


class MaximumStayError(BookingRuleError):
    reason = FailureReason.MAXIMUM_STAY


class VillaUnavailableError(BookingRuleError):
    reason = FailureReason.VILLA_UNAVAILABLE


RULE_ERRORS = {
    cls.reason: cls
    for cls in (
        PastDateError,
        CapacityExceededError,
        ConflictError,
        MinimumStayError,
        MaximumStayError,
        VillaUnavailableError,
    )
}


class BookingRejectedError(BookingError):
    """Raised when a booking fails re-validation at confirmation time."""

    def __init__(self, violations):
        self.violations = list(violations)
        reasons = ", ".join(v.reason.value for v in self.violations)
        super().__init__(f"Booking rejected: {reasons}")
