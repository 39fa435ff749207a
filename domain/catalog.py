"""Villa browsing: filter and sort"""
from pydantic import BaseModel, Field
from datetime import date
from typing import Dict, List, Optional

from domain.entities import AvailabilityIndex, Villa
from domain.enums import VillaSort

ALL_LOCATIONS = "All Locations"


class VillaSearch(BaseModel):
    """Browse filters"""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: int = Field(default=1, ge=1)
    min_price: int = Field(default=0, ge=0)
    max_price: int = Field(default=10_000_000, ge=0)
    amenities: List[str] = []
    location: str = ALL_LOCATIONS
    sort_by: VillaSort = VillaSort.RATING

    def has_dates(self) -> bool:
        return (
            self.check_in is not None
            and self.check_out is not None
            and self.check_out > self.check_in
        )

    def matches(self, villa: Villa, index: Optional[AvailabilityIndex] = None) -> bool:
        if villa.capacity < self.guests:
            return False
        if not self.min_price <= villa.price_per_night <= self.max_price:
            return False
        if not all(villa.has_amenity(a) for a in self.amenities):
            return False
        if self.location != ALL_LOCATIONS and villa.location != self.location:
            return False
        if self.has_dates():
            if not villa.is_available:
                return False
            if index is not None and index.range_has_conflict(self.check_in, self.check_out):
                return False
        return True


def filter_villas(
    villas: List[Villa],
    search: VillaSearch,
    indexes: Optional[Dict[str, AvailabilityIndex]] = None
) -> List[Villa]:
    indexes = indexes or {}
    return [v for v in villas if search.matches(v, indexes.get(v.id))]


def sort_villas(villas: List[Villa], sort_by: VillaSort) -> List[Villa]:
    if sort_by == VillaSort.PRICE_ASC:
        return sorted(villas, key=lambda v: v.price_per_night)
    if sort_by == VillaSort.PRICE_DESC:
        return sorted(villas, key=lambda v: v.price_per_night, reverse=True)
    if sort_by == VillaSort.CAPACITY:
        return sorted(villas, key=lambda v: v.capacity, reverse=True)
    return sorted(villas, key=lambda v: v.rating, reverse=True)
