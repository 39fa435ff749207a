"""Domain Enums"""
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttemptState(str, Enum):
    DRAFT = "DRAFT"
    VALIDATED = "VALIDATED"
    CONFIRMED = "CONFIRMED"


class SelectionState(str, Enum):
    AWAITING_CHECK_IN = "AWAITING_CHECK_IN"
    AWAITING_CHECK_OUT = "AWAITING_CHECK_OUT"
    READY = "READY"


class ValidationMode(str, Enum):
    FIRST_FAILURE = "FIRST_FAILURE"
    ALL_FAILURES = "ALL_FAILURES"


class FailureReason(str, Enum):
    PAST_DATE = "PastDateError"
    CAPACITY_EXCEEDED = "CapacityExceededError"
    CONFLICT = "ConflictError"
    MINIMUM_STAY = "MinimumStayError"
    MAXIMUM_STAY = "MaximumStayError"
    VILLA_UNAVAILABLE = "VillaUnavailableError"
    INVALID_RANGE = "InvalidRangeError"

    @property
    def field(self) -> str:
        """Form field the UI should attach the message to"""
        if self is FailureReason.CAPACITY_EXCEEDED:
            return "guests"
        if self is FailureReason.VILLA_UNAVAILABLE:
            return "villa"
        return "dates"


class DayStatus(str, Enum):
    PAST = "past"
    BOOKED = "booked"
    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    SELECTED = "selected"
    CHECKOUT_ONLY = "checkout-only"
    AVAILABLE = "available"


class PaymentMethod(str, Enum):
    CARD = "card"
    BANK = "bank"
    WALLET = "wallet"


class VillaSort(str, Enum):
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    CAPACITY = "capacity"
    RATING = "rating"


class BookingFilter(str, Enum):
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"
    CANCELLED = "cancelled"
