"""Domain Entities - booking lifecycle"""
import random
import string
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional, List

from domain.dates import DateLike, days_between, is_past_date, normalize_date, utc_now
from domain.entities import AvailabilityIndex, Villa
from domain.enums import AttemptState, BookingStatus, PaymentMethod, ValidationMode
from domain.exceptions import AlreadyCancelledError, BookingRejectedError, InvalidStateError
from domain.pricing import PriceCalculator, round_half_up
from domain.rules import BookingRules
from domain.value_objects import (
    CancellationPolicy, DateRange, GuestDetails, Money, PriceQuote, RuleViolation,
)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 8


def generate_reference_number(prefix: str, rng: Optional[random.Random] = None) -> str:
    """Human-readable booking code, e.g. ``SU-7K2M9QXA``"""
    chooser = rng or random
    return f"{prefix}-" + ''.join(chooser.choices(REFERENCE_ALPHABET, k=REFERENCE_LENGTH))


class ConfirmedBooking(BaseModel):
    """Booking ledger record; soft-cancelled, never deleted"""

    # Identity
    id: UUID = Field(default_factory=uuid4)
    reference_number: str

    # Stay
    villa_id: str
    villa_name: str = ""
    check_in: date
    check_out: date
    guests: int = Field(ge=1)

    # Price breakdown
    nightly_rate: int = Field(ge=0)
    nights: int = Field(ge=1)
    cleaning_fee: int = Field(ge=0)
    service_fee: int = Field(ge=0)
    total: int = Field(ge=0)
    currency: str = "IDR"

    # Status
    status: BookingStatus = BookingStatus.CONFIRMED
    refund_amount: Optional[int] = None
    cancelled_at: Optional[datetime] = None

    # Checkout data
    guest_details: GuestDetails
    payment_method: PaymentMethod

    # Metadata
    created_at: datetime = Field(default_factory=utc_now)
    modified_at: datetime = Field(default_factory=utc_now)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        reference_number: str,
        villa: Villa,
        date_range: DateRange,
        guests: int,
        quote: PriceQuote,
        guest_details: GuestDetails,
        payment_method: PaymentMethod
    ) -> "ConfirmedBooking":
        return ConfirmedBooking(
            reference_number=reference_number,
            villa_id=villa.id,
            villa_name=villa.name,
            check_in=date_range.check_in,
            check_out=date_range.check_out,
            guests=guests,
            nightly_rate=quote.nightly_rate,
            nights=quote.nights,
            cleaning_fee=quote.cleaning_fee,
            service_fee=quote.service_fee,
            total=quote.total,
            currency=quote.currency,
            status=BookingStatus.CONFIRMED,
            guest_details=guest_details,
            payment_method=payment_method
        )

    # ==================== STATE TRANSITION METHODS ====================
    def cancel(self, today: DateLike, policy: Optional[CancellationPolicy] = None) -> Money:
        """Cancel a confirmed, not yet started stay and return the refund

        The nights stay occupied in the villa's AvailabilityIndex.
        """
        if self.status == BookingStatus.CANCELLED:
            raise AlreadyCancelledError(f"Booking {self.reference_number} is already cancelled")
        if not self.is_cancellable(today):
            raise InvalidStateError(
                f"Cannot cancel booking with status {self.status.value} and check-in {self.check_in}"
            )

        refund = self.calculate_refund(today, policy or CancellationPolicy())

        self.status = BookingStatus.CANCELLED
        self.refund_amount = refund.amount
        self.cancelled_at = utc_now()
        self._touch()

        return refund

    def mark_completed(self, today: DateLike) -> None:
        """Close a stay whose checkout date has passed"""
        if self.status != BookingStatus.CONFIRMED:
            raise InvalidStateError(
                f"Cannot complete booking with status {self.status.value}"
            )
        if not is_past_date(self.check_out, today):
            raise InvalidStateError("Cannot complete a booking before its checkout date has passed")

        self.status = BookingStatus.COMPLETED
        self._touch()

    # ==================== QUERY METHODS ====================
    def is_cancellable(self, today: DateLike) -> bool:
        return self.status == BookingStatus.CONFIRMED and self.check_in > normalize_date(today)

    def is_due_for_completion(self, today: DateLike) -> bool:
        return self.status == BookingStatus.CONFIRMED and is_past_date(self.check_out, today)

    def is_upcoming(self, today: DateLike) -> bool:
        return self.status != BookingStatus.CANCELLED and self.check_in > normalize_date(today)

    def is_past(self, today: DateLike) -> bool:
        return self.status != BookingStatus.CANCELLED and self.check_in <= normalize_date(today)

    def calculate_refund(self, cancellation_date: DateLike, policy: CancellationPolicy) -> Money:
        """Calculate refund amount based on policy"""
        days_ahead = days_between(cancellation_date, self.check_in)
        percentage = policy.refund_percentage(days_ahead)
        amount = round_half_up(Decimal(self.total) * percentage / Decimal("100"))
        return Money(amount=amount, currency=self.currency)

    def matches(self, search: str) -> bool:
        """Case-insensitive search over guest name, email and reference"""
        needle = search.strip().lower()
        if not needle:
            return True
        return any(
            needle in field.lower()
            for field in (
                self.guest_details.full_name,
                self.guest_details.email,
                self.reference_number,
            )
        )

    def _touch(self) -> None:
        self.modified_at = utc_now()
        self.version += 1


class BookingAttempt(BaseModel):
    """In-memory booking attempt: DRAFT -> VALIDATED -> CONFIRMED

    Rule failures keep the attempt in DRAFT and are returned, not raised.
    Calling ``confirm`` from any state but VALIDATED is a contract violation.
    """

    attempt_id: UUID = Field(default_factory=uuid4)
    villa_id: str
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: int = 1

    state: AttemptState = AttemptState.DRAFT
    violations: List[RuleViolation] = []
    booking_id: Optional[UUID] = None

    class Config:
        from_attributes = True

    # ==================== MODIFICATION METHODS ====================
    def update(
        self,
        check_in: Optional[DateLike] = None,
        check_out: Optional[DateLike] = None,
        guests: Optional[int] = None
    ) -> None:
        """Change the selection; a validated attempt drops back to DRAFT"""
        if self.state == AttemptState.CONFIRMED:
            raise InvalidStateError("Cannot modify a confirmed booking attempt")

        if check_in is not None:
            self.check_in = normalize_date(check_in)
        if check_out is not None:
            self.check_out = normalize_date(check_out)
        if guests is not None:
            self.guests = guests

        self.state = AttemptState.DRAFT
        self.violations = []

    # ==================== STATE TRANSITION METHODS ====================
    def validate(
        self,
        villa: Villa,
        index: AvailabilityIndex,
        rules: BookingRules,
        today: DateLike,
        mode: ValidationMode = ValidationMode.ALL_FAILURES
    ) -> List[RuleViolation]:
        """Run the booking rules; on success move to VALIDATED"""
        if self.state == AttemptState.CONFIRMED:
            raise InvalidStateError("Booking attempt is already confirmed")

        violations = rules.validate(
            villa, index, self.check_in, self.check_out, self.guests, today, mode
        )
        self.violations = violations
        self.state = AttemptState.DRAFT if violations else AttemptState.VALIDATED
        return violations

    def build_confirmation(
        self,
        guest_details: GuestDetails,
        payment_method: PaymentMethod,
        reference_number: str,
        villa: Villa,
        index: AvailabilityIndex,
        rules: BookingRules,
        calculator: PriceCalculator,
        today: DateLike
    ) -> ConfirmedBooking:
        """Re-validate and price the stay without touching the index

        Raises ``BookingRejectedError`` (and returns to DRAFT) if the dates
        were taken since the attempt was validated.
        """
        if self.state != AttemptState.VALIDATED:
            raise InvalidStateError(
                f"Cannot confirm booking attempt in {self.state.value} state"
            )

        violations = self.validate(villa, index, rules, today)
        if violations:
            raise BookingRejectedError(violations)

        date_range = DateRange(check_in=self.check_in, check_out=self.check_out)
        quote = calculator.quote(villa, self.check_in, self.check_out)
        return ConfirmedBooking.create(
            reference_number=reference_number,
            villa=villa,
            date_range=date_range,
            guests=self.guests,
            quote=quote,
            guest_details=guest_details,
            payment_method=payment_method
        )

    def complete_confirmation(self, booking: ConfirmedBooking, index: AvailabilityIndex) -> List[str]:
        """Merge the stored booking's nights and close the attempt"""
        if self.state != AttemptState.VALIDATED:
            raise InvalidStateError(
                f"Cannot confirm booking attempt in {self.state.value} state"
            )

        added = index.merge(booking.check_in, booking.check_out)
        self.state = AttemptState.CONFIRMED
        self.booking_id = booking.id
        return added

    def confirm(
        self,
        guest_details: GuestDetails,
        payment_method: PaymentMethod,
        reference_number: str,
        villa: Villa,
        index: AvailabilityIndex,
        rules: BookingRules,
        calculator: PriceCalculator,
        today: DateLike,
        append: Callable[[ConfirmedBooking], None]
    ) -> ConfirmedBooking:
        """Validated -> Confirmed in one step

        ``append`` stores the record; the index is merged only after it
        returns, so a failing append leaves the occupied dates untouched.
        """
        booking = self.build_confirmation(
            guest_details, payment_method, reference_number,
            villa, index, rules, calculator, today
        )
        append(booking)
        self.complete_confirmation(booking, index)
        return booking

    # ==================== QUERY METHODS ====================
    def nights(self) -> int:
        return PriceCalculator.nights(self.check_in, self.check_out)
