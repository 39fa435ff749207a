"""Application Services - Business use cases"""
import random
from uuid import UUID
from datetime import date
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

import structlog
from pydantic import BaseModel

from application.locks import VillaLockRegistry
from domain.booking import BookingAttempt, ConfirmedBooking, generate_reference_number
from domain.catalog import VillaSearch, filter_villas, sort_villas
from domain.dates import DateLike, today as current_day
from domain.entities import AvailabilityIndex, Villa
from domain.enums import (
    AttemptState, BookingFilter, BookingStatus, PaymentMethod, ValidationMode,
)
from domain.exceptions import (
    BookingNotFoundError, BookingRejectedError, InvalidStateError, ReferenceUnavailableError,
    VillaNotFoundError,
)
from domain.pricing import PriceCalculator
from domain.repositories import AvailabilityRepository, BookingRepository, VillaRepository
from domain.rules import BookingRules
from domain.selection import DateSelection
from domain.value_objects import (
    BookingPolicy, CancellationPolicy, GuestDetails, Money, PriceQuote, RuleViolation,
)

logger = structlog.get_logger(__name__)

ReferenceChecker = Callable[[str], Awaitable[bool]]


class AvailabilityResult(BaseModel):
    available: bool
    reasons: List[RuleViolation] = []


class QuoteResult(BaseModel):
    quote: Optional[PriceQuote] = None
    reasons: List[RuleViolation] = []

    @property
    def ok(self) -> bool:
        return self.quote is not None


class BookingResult(BaseModel):
    booking: Optional[ConfirmedBooking] = None
    reasons: List[RuleViolation] = []

    @property
    def ok(self) -> bool:
        return self.booking is not None


class AvailabilityService:
    """Owns the per-villa AvailabilityIndex instances"""

    def __init__(
        self,
        villa_repo: VillaRepository,
        repository: AvailabilityRepository,
        rules: Optional[BookingRules] = None
    ):
        self.villa_repo = villa_repo
        self.repository = repository
        self.rules = rules or BookingRules()

    async def get_villa(self, villa_id: str) -> Villa:
        villa = await self.villa_repo.find_by_id(villa_id)
        if villa is None:
            raise VillaNotFoundError(f"Villa {villa_id} not found")
        return villa

    async def index_for(self, villa: Villa) -> AvailabilityIndex:
        """Load the villa's index, seeding it from booked dates on first use"""
        index = await self.repository.find_by_villa(villa.id)
        if index is None:
            index = AvailabilityIndex.from_booked_dates(villa.id, villa.booked_dates)
            await self.repository.save(index)
            logger.debug("availability_index_seeded", villa_id=villa.id, nights=len(index.occupied))
        return index

    async def check_availability(
        self,
        villa_id: str,
        check_in: Optional[date],
        check_out: Optional[date],
        today: Optional[DateLike] = None
    ) -> AvailabilityResult:
        """Date-level check; guest count is not part of it"""
        villa = await self.get_villa(villa_id)
        index = await self.index_for(villa)
        reasons = self.rules.validate(
            villa, index, check_in, check_out, 1, today or current_day()
        )
        logger.debug(
            "availability_checked",
            villa_id=villa_id,
            check_in=str(check_in),
            check_out=str(check_out),
            available=not reasons,
        )
        return AvailabilityResult(available=not reasons, reasons=reasons)

    async def calendar(
        self,
        villa_id: str,
        start: date,
        end: date,
        today: Optional[DateLike] = None,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None
    ) -> List[Dict]:
        """Day statuses plus whether a click on each day would be accepted"""
        today = today or current_day()
        villa = await self.get_villa(villa_id)
        index = await self.index_for(villa)
        selection = DateSelection.resume(check_in, check_out)
        return [
            {
                "day": d,
                "status": status,
                "selectable": selection.is_selectable(d, villa, index, self.rules, today),
            }
            for d, status in index.calendar(start, end, today, selection.check_in, selection.check_out)
        ]

    async def select_day(
        self,
        villa_id: str,
        day: date,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        today: Optional[DateLike] = None
    ) -> Tuple[DateSelection, bool]:
        """Apply one date-picker click to the client's current selection"""
        villa = await self.get_villa(villa_id)
        index = await self.index_for(villa)
        selection = DateSelection.resume(check_in, check_out)
        accepted = selection.select(day, villa, index, self.rules, today or current_day())
        return selection, accepted

    async def record_merge(self, index: AvailabilityIndex, added: List[str]) -> None:
        """Persist a merged index and reflect the new nights onto the villa"""
        await self.repository.save(index)
        if added:
            await self.villa_repo.add_booked_dates(index.villa_id, added)


class VillaService:
    """Service for villa browsing and back-office switches"""

    def __init__(self, repository: VillaRepository, availability: AvailabilityService):
        self.repository = repository
        self.availability = availability

    async def get_villa(self, villa_id: str) -> Optional[Villa]:
        return await self.repository.find_by_id(villa_id)

    async def list_villas(self, search: Optional[VillaSearch] = None) -> List[Villa]:
        """Filter and sort the catalogue"""
        search = search or VillaSearch()
        villas = await self.repository.find_all()
        indexes = {}
        if search.has_dates():
            for villa in villas:
                indexes[villa.id] = await self.availability.index_for(villa)
        return sort_villas(filter_villas(villas, search, indexes), search.sort_by)

    async def add_villa(self, villa: Villa) -> Villa:
        return await self.repository.save(villa)

    async def set_villa_availability(self, villa_id: str, is_available: bool) -> Optional[Villa]:
        """Flip the global on/off switch; dates are not touched"""
        villa = await self.repository.find_by_id(villa_id)
        if not villa:
            return None

        villa.is_available = is_available
        await self.repository.update(villa)
        logger.info("villa_availability_changed", villa_id=villa_id, is_available=is_available)
        return villa


class BookingService:
    """Service for the quote -> confirm -> cancel flow"""

    def __init__(
        self,
        repository: BookingRepository,
        availability: AvailabilityService,
        locks: VillaLockRegistry,
        policy: Optional[BookingPolicy] = None,
        cancellation_policy: Optional[CancellationPolicy] = None,
        reference_checker: Optional[ReferenceChecker] = None,
        rng: Optional[random.Random] = None
    ):
        self.repository = repository
        self.availability = availability
        self.locks = locks
        self.policy = policy or BookingPolicy()
        self.cancellation_policy = cancellation_policy or CancellationPolicy()
        self.rules = BookingRules(self.policy)
        self.calculator = PriceCalculator(self.policy)
        self.reference_checker = reference_checker
        self.rng = rng

    # ==================== QUOTING ====================
    async def quote(
        self,
        villa_id: str,
        check_in: Optional[date],
        check_out: Optional[date],
        guests: int,
        today: Optional[DateLike] = None
    ) -> QuoteResult:
        villa = await self.availability.get_villa(villa_id)
        index = await self.availability.index_for(villa)
        reasons = self.rules.validate(
            villa, index, check_in, check_out, guests, today or current_day()
        )
        if reasons:
            logger.info(
                "quote_rejected",
                villa_id=villa_id,
                reasons=[r.reason.value for r in reasons],
            )
            return QuoteResult(reasons=reasons)
        return QuoteResult(quote=self.calculator.quote(villa, check_in, check_out))

    # ==================== LIFECYCLE ====================
    def create_attempt(
        self,
        villa_id: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        guests: int = 1
    ) -> BookingAttempt:
        return BookingAttempt(villa_id=villa_id, check_in=check_in, check_out=check_out, guests=guests)

    async def validate_attempt(
        self,
        attempt: BookingAttempt,
        today: Optional[DateLike] = None,
        mode: ValidationMode = ValidationMode.ALL_FAILURES
    ) -> List[RuleViolation]:
        """Speculative, lock-free validation"""
        villa = await self.availability.get_villa(attempt.villa_id)
        index = await self.availability.index_for(villa)
        return attempt.validate(villa, index, self.rules, today or current_day(), mode)

    async def confirm_booking(
        self,
        attempt: BookingAttempt,
        guest_details: GuestDetails,
        payment_method: PaymentMethod,
        today: Optional[DateLike] = None
    ) -> BookingResult:
        """Confirm a validated attempt

        Under the villa lock: issue a reference, re-validate, append the
        record, then merge its nights. A failed append leaves the index as
        it was.
        """
        if attempt.state != AttemptState.VALIDATED:
            raise InvalidStateError(
                f"Cannot confirm booking attempt in {attempt.state.value} state"
            )
        today = today or current_day()

        async with self.locks.for_villa(attempt.villa_id):
            villa = await self.availability.get_villa(attempt.villa_id)
            index = await self.availability.index_for(villa)
            reference_number = await self._issue_reference()

            try:
                booking = attempt.build_confirmation(
                    guest_details, payment_method, reference_number,
                    villa, index, self.rules, self.calculator, today
                )
            except BookingRejectedError as e:
                logger.warning(
                    "booking_rejected_on_confirm",
                    villa_id=villa.id,
                    reasons=[v.reason.value for v in e.violations],
                )
                return BookingResult(reasons=e.violations)

            await self.repository.save(booking)
            added = attempt.complete_confirmation(booking, index)
            await self.availability.record_merge(index, added)

        logger.info(
            "booking_confirmed",
            reference_number=booking.reference_number,
            villa_id=booking.villa_id,
            nights=booking.nights,
            total=booking.total,
        )
        return BookingResult(booking=booking)

    async def cancel_booking(self, booking_id: UUID, today: Optional[DateLike] = None) -> Money:
        """Soft-cancel and return the refund

        Occupied nights are kept in the index; releasing them is a policy
        decision that has not been made.
        """
        booking = await self._require_booking(booking_id)
        refund = booking.cancel(today or current_day(), self.cancellation_policy)
        await self.repository.update(booking)
        logger.info(
            "booking_cancelled",
            reference_number=booking.reference_number,
            refund=refund.amount,
        )
        return refund

    async def complete_finished_bookings(self, today: Optional[DateLike] = None) -> List[ConfirmedBooking]:
        """Time-based sweep: confirmed stays whose checkout has passed"""
        today = today or current_day()
        completed = []
        for booking in await self.repository.find_by_status(BookingStatus.CONFIRMED):
            if booking.is_due_for_completion(today):
                booking.mark_completed(today)
                await self.repository.update(booking)
                completed.append(booking)
        if completed:
            logger.info("bookings_completed", count=len(completed))
        return completed

    # ==================== QUERIES ====================
    async def get_booking(self, booking_id: UUID) -> Optional[ConfirmedBooking]:
        return await self.repository.find_by_id(booking_id)

    async def get_booking_by_reference(self, reference_number: str) -> Optional[ConfirmedBooking]:
        return await self.repository.find_by_reference(reference_number.strip().upper())

    async def get_guest_bookings(
        self,
        email: str,
        booking_filter: BookingFilter = BookingFilter.ALL,
        today: Optional[DateLike] = None
    ) -> List[ConfirmedBooking]:
        """A guest's bookings, newest first"""
        today = today or current_day()
        bookings = await self.repository.find_by_guest_email(email)
        if booking_filter == BookingFilter.UPCOMING:
            bookings = [b for b in bookings if b.is_upcoming(today)]
        elif booking_filter == BookingFilter.PAST:
            bookings = [b for b in bookings if b.is_past(today)]
        elif booking_filter == BookingFilter.CANCELLED:
            bookings = [b for b in bookings if b.status == BookingStatus.CANCELLED]
        return sorted(bookings, key=lambda b: b.created_at, reverse=True)

    async def get_villa_bookings(self, villa_id: str) -> List[ConfirmedBooking]:
        """Every booking recorded against a villa, by check-in date"""
        bookings = await self.repository.find_by_villa(villa_id)
        return sorted(bookings, key=lambda b: (b.check_in, b.created_at))

    async def list_bookings(
        self,
        status: Optional[BookingStatus] = None,
        search: str = ""
    ) -> List[ConfirmedBooking]:
        """Back-office listing"""
        if status is not None:
            bookings = await self.repository.find_by_status(status)
        else:
            bookings = await self.repository.find_all()
        return sorted(
            (b for b in bookings if b.matches(search)),
            key=lambda b: b.created_at,
            reverse=True,
        )

    # ==================== PRIVATE ====================
    async def _require_booking(self, booking_id: UUID) -> ConfirmedBooking:
        booking = await self.repository.find_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    async def _issue_reference(self) -> str:
        """Random reference, regenerated while it collides with an issued one"""
        for _ in range(self.policy.reference_max_attempts):
            candidate = generate_reference_number(self.policy.reference_prefix, self.rng)
            taken = await self.repository.reference_exists(candidate)
            if not taken and self.reference_checker is not None:
                taken = await self.reference_checker(candidate)
            if not taken:
                return candidate
            logger.warning("reference_collision", reference_number=candidate)
        raise ReferenceUnavailableError(
            f"Could not issue a unique reference after {self.policy.reference_max_attempts} attempts"
        )
