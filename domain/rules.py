"""Booking Rules - stateless policy checks"""
from typing import Iterator, List, Optional

from domain.dates import DateLike, add_days, days_between, is_past_date, normalize_date
from domain.entities import AvailabilityIndex, Villa
from domain.enums import FailureReason, ValidationMode
from domain.value_objects import BookingPolicy, RuleViolation


class BookingRules:
    """Validates a proposed stay against a villa and its occupied dates

    Nothing here raises for bad user input: every failed check becomes a
    ``RuleViolation`` so the caller can show all of them at once.
    """

    def __init__(self, policy: Optional[BookingPolicy] = None):
        self.policy = policy or BookingPolicy()

    def validate(
        self,
        villa: Villa,
        index: AvailabilityIndex,
        check_in: Optional[DateLike],
        check_out: Optional[DateLike],
        guests: int,
        today: DateLike,
        mode: ValidationMode = ValidationMode.ALL_FAILURES
    ) -> List[RuleViolation]:
        checks = self._run_checks(villa, index, check_in, check_out, guests, today)
        if mode is ValidationMode.FIRST_FAILURE:
            first = next(checks, None)
            return [first] if first is not None else []
        return list(checks)

    def can_select_check_in(self, index: AvailabilityIndex, day: DateLike, today: DateLike) -> bool:
        return index.can_be_check_in(day, today)

    def can_select_check_out(
        self,
        villa: Villa,
        index: AvailabilityIndex,
        check_in: DateLike,
        candidate: DateLike,
        today: DateLike
    ) -> bool:
        """Whether ``candidate`` may close a stay starting at ``check_in``

        The check-in night itself was vetted when it was picked, so only the
        nights after it are checked for occupancy.
        """
        if is_past_date(candidate, today):
            return False
        if normalize_date(candidate) < add_days(check_in, villa.effective_minimum_stay(self.policy)):
            return False
        if days_between(check_in, candidate) > villa.effective_maximum_stay(self.policy):
            return False
        return not index.interior_has_conflict(check_in, candidate)

    # ==================== PRIVATE CHECKS ====================
    def _run_checks(
        self,
        villa: Villa,
        index: AvailabilityIndex,
        check_in: Optional[DateLike],
        check_out: Optional[DateLike],
        guests: int,
        today: DateLike
    ) -> Iterator[RuleViolation]:
        if check_in is not None and is_past_date(check_in, today):
            yield RuleViolation(
                reason=FailureReason.PAST_DATE,
                message="Check-in date cannot be in the past."
            )

        if guests < 1:
            yield RuleViolation(
                reason=FailureReason.CAPACITY_EXCEEDED,
                message="At least 1 guest is required."
            )
        elif guests > villa.capacity:
            yield RuleViolation(
                reason=FailureReason.CAPACITY_EXCEEDED,
                message=f"This villa accommodates up to {villa.capacity} guests."
            )

        if check_in is None or check_out is None:
            yield RuleViolation(
                reason=FailureReason.INVALID_RANGE,
                message="Please select check-in and check-out dates."
            )
        elif normalize_date(check_out) <= normalize_date(check_in):
            yield RuleViolation(
                reason=FailureReason.INVALID_RANGE,
                message="Check-out must be after check-in."
            )
        else:
            yield from self._stay_checks(villa, index, check_in, check_out)

        if not villa.is_available:
            yield RuleViolation(
                reason=FailureReason.VILLA_UNAVAILABLE,
                message="This villa is not available for booking."
            )

    def _stay_checks(
        self,
        villa: Villa,
        index: AvailabilityIndex,
        check_in: DateLike,
        check_out: DateLike
    ) -> Iterator[RuleViolation]:
        if index.range_has_conflict(check_in, check_out):
            yield RuleViolation(
                reason=FailureReason.CONFLICT,
                message="Selected dates are not available. Please choose different dates."
            )

        nights = days_between(check_in, check_out)
        minimum_stay = villa.effective_minimum_stay(self.policy)
        maximum_stay = villa.effective_maximum_stay(self.policy)
        if nights < minimum_stay:
            yield RuleViolation(
                reason=FailureReason.MINIMUM_STAY,
                message=f"This villa requires a minimum stay of {minimum_stay} nights."
            )
        if nights > maximum_stay:
            yield RuleViolation(
                reason=FailureReason.MAXIMUM_STAY,
                message=f"Stays are limited to {maximum_stay} nights."
            )
