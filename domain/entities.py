"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field, validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, Set, Tuple

from domain.dates import (
    DateLike, add_days, date_keys, enumerate_days, is_past_date, is_same_day,
    normalize_date, to_date_key, utc_now,
)
from domain.enums import DayStatus
from domain.exceptions import InvalidRangeError
from domain.value_objects import BookingPolicy


class Villa(BaseModel):
    """Villa metadata as supplied by the catalogue"""

    # Identity
    id: str
    name: str
    location: str = ""
    description: str = ""

    # Stay constraints
    capacity: int = Field(gt=0)
    minimum_stay: Optional[int] = Field(default=None, ge=1)
    maximum_stay: Optional[int] = Field(default=None, ge=1)

    # Pricing (whole currency units)
    price_per_night: int = Field(ge=0)
    cleaning_fee: int = Field(ge=0, default=0)
    service_fee_amount: Optional[int] = Field(default=None, ge=0)
    service_fee_rate: Optional[Decimal] = Field(default=None, ge=0)

    # Listing details
    bedrooms: int = Field(ge=0, default=1)
    bathrooms: int = Field(ge=0, default=1)
    amenities: List[str] = []
    rating: float = Field(ge=0, le=5, default=4.8)
    review_count: int = Field(ge=0, default=0)

    # Global on/off switch, independent of dates
    is_available: bool = True

    # Persisted occupied nights, seeds the AvailabilityIndex
    booked_dates: List[str] = []

    class Config:
        from_attributes = True

    @validator('booked_dates')
    def normalize_booked_dates(cls, v):
        return date_keys(v)

    def effective_minimum_stay(self, policy: BookingPolicy) -> int:
        return self.minimum_stay or policy.minimum_stay

    def effective_maximum_stay(self, policy: BookingPolicy) -> int:
        return self.maximum_stay or policy.maximum_stay

    def effective_service_fee_rate(self, policy: BookingPolicy) -> Decimal:
        if self.service_fee_rate is not None:
            return self.service_fee_rate
        return policy.service_fee_rate

    def has_amenity(self, wanted: str) -> bool:
        """Case-insensitive substring match against the amenity list"""
        wanted = wanted.lower()
        return any(wanted in amenity.lower() for amenity in self.amenities)


class AvailabilityIndex(BaseModel):
    """Occupied nights of one villa

    Dates are stored as ``YYYY-MM-DD`` keys. An occupied date blocks a new
    check-in and any interior night, but never a check-out: stays are
    half-open ``[check_in, check_out)``.
    """

    villa_id: str
    occupied: Set[str] = Field(default_factory=set)

    # Metadata
    last_updated: datetime = Field(default_factory=utc_now)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def from_booked_dates(villa_id: str, booked_dates: List[DateLike]) -> "AvailabilityIndex":
        """Seed an index from a persisted booked-date list"""
        return AvailabilityIndex(
            villa_id=villa_id,
            occupied=set(date_keys(booked_dates))
        )

    # ==================== QUERY METHODS ====================
    def is_occupied(self, day: DateLike) -> bool:
        return to_date_key(day) in self.occupied

    def is_checkout_only_day(self, day: DateLike) -> bool:
        """Free day right after an occupied one; usable only as a departure"""
        return self.is_occupied(add_days(day, -1)) and not self.is_occupied(day)

    def can_be_check_in(self, day: DateLike, today: DateLike) -> bool:
        if is_past_date(day, today):
            return False
        return not self.is_occupied(day)

    def range_has_conflict(self, check_in: DateLike, check_out: DateLike) -> bool:
        """True if any night in ``[check_in, check_out)`` is occupied"""
        self._require_range(check_in, check_out)
        return any(key in self.occupied for key in enumerate_days(check_in, check_out).keys())

    def interior_has_conflict(self, check_in: DateLike, check_out: DateLike) -> bool:
        """True if any night strictly between check-in and check-out is occupied"""
        self._require_range(check_in, check_out)
        return any(
            key in self.occupied
            for key in enumerate_days(add_days(check_in, 1), check_out).keys()
        )

    def booked_dates(self) -> List[str]:
        return sorted(self.occupied)

    def day_status(
        self,
        day: DateLike,
        today: DateLike,
        check_in: Optional[DateLike] = None,
        check_out: Optional[DateLike] = None
    ) -> DayStatus:
        """Calendar hint for one day, given the current selection"""
        d = normalize_date(day)
        if is_past_date(d, today):
            return DayStatus.PAST
        if self.is_occupied(d):
            return DayStatus.BOOKED
        if check_in is not None and is_same_day(d, check_in):
            return DayStatus.CHECK_IN
        if check_out is not None and is_same_day(d, check_out):
            return DayStatus.CHECK_OUT
        if check_in is not None and check_out is not None:
            if normalize_date(check_in) < d < normalize_date(check_out):
                return DayStatus.SELECTED
        if self.is_checkout_only_day(d):
            return DayStatus.CHECKOUT_ONLY
        return DayStatus.AVAILABLE

    def calendar(
        self,
        start: DateLike,
        end: DateLike,
        today: DateLike,
        check_in: Optional[DateLike] = None,
        check_out: Optional[DateLike] = None
    ) -> List[Tuple[date, DayStatus]]:
        """Statuses for every day in ``[start, end)``"""
        return [
            (d, self.day_status(d, today, check_in, check_out))
            for d in enumerate_days(start, end)
        ]

    # ==================== MUTATOR ====================
    def merge(self, check_in: DateLike, check_out: DateLike) -> List[str]:
        """Mark every night in ``[check_in, check_out)`` as occupied

        Idempotent. Returns the keys that were not occupied before.
        """
        self._require_range(check_in, check_out)
        added = [key for key in enumerate_days(check_in, check_out).keys() if key not in self.occupied]
        if added:
            self.occupied.update(added)
            self.last_updated = utc_now()
            self.version += 1
        return added

    # ==================== PRIVATE VALIDATION METHODS ====================
    @staticmethod
    def _require_range(check_in: DateLike, check_out: DateLike) -> None:
        start, end = normalize_date(check_in), normalize_date(check_out)
        if end <= start:
            raise InvalidRangeError(start, end)
