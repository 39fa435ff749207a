"""In-Memory Repository Implementations"""
from typing import Optional, List, Dict
from uuid import UUID

from domain.repositories import VillaRepository, AvailabilityRepository, BookingRepository
from domain.booking import ConfirmedBooking
from domain.dates import date_keys
from domain.entities import AvailabilityIndex, Villa
from domain.enums import BookingStatus
from domain.exceptions import BookingNotFoundError, DuplicateBookingError, VillaNotFoundError


class InMemoryVillaRepository(VillaRepository):
    """In-memory implementation of VillaRepository"""

    def __init__(self, villas: Optional[List[Villa]] = None):
        self._storage: Dict[str, Villa] = {v.id: v for v in villas or []}

    async def save(self, villa: Villa) -> Villa:
        """Save villa to memory"""
        self._storage[villa.id] = villa
        return villa

    async def find_by_id(self, villa_id: str) -> Optional[Villa]:
        """Find villa by ID"""
        return self._storage.get(villa_id)

    async def find_all(self) -> List[Villa]:
        """Find all villas"""
        return list(self._storage.values())

    async def update(self, villa: Villa) -> Villa:
        """Update villa"""
        if villa.id in self._storage:
            self._storage[villa.id] = villa
            return villa
        raise VillaNotFoundError(f"Villa {villa.id} not found")

    async def add_booked_dates(self, villa_id: str, keys: List[str]) -> Villa:
        """Merge keys into the villa's booked dates"""
        villa = self._storage.get(villa_id)
        if villa is None:
            raise VillaNotFoundError(f"Villa {villa_id} not found")
        villa.booked_dates = date_keys([*villa.booked_dates, *keys])
        return villa


class InMemoryAvailabilityRepository(AvailabilityRepository):
    """In-memory implementation of AvailabilityRepository"""

    def __init__(self):
        self._storage: Dict[str, AvailabilityIndex] = {}

    async def save(self, index: AvailabilityIndex) -> AvailabilityIndex:
        """Save index to memory"""
        self._storage[index.villa_id] = index
        return index

    async def find_by_villa(self, villa_id: str) -> Optional[AvailabilityIndex]:
        """Find the index for a villa"""
        return self._storage.get(villa_id)


class InMemoryBookingRepository(BookingRepository):
    """In-memory booking ledger keyed by booking id"""

    def __init__(self):
        self._storage: Dict[UUID, ConfirmedBooking] = {}

    async def save(self, booking: ConfirmedBooking) -> ConfirmedBooking:
        """Append booking; ids and reference numbers are unique"""
        if booking.id in self._storage:
            raise DuplicateBookingError(f"Booking {booking.id} already exists")
        if await self.reference_exists(booking.reference_number):
            raise DuplicateBookingError(f"Reference {booking.reference_number} already issued")
        self._storage[booking.id] = booking
        return booking

    async def find_by_id(self, booking_id: UUID) -> Optional[ConfirmedBooking]:
        """Find booking by ID"""
        return self._storage.get(booking_id)

    async def find_by_reference(self, reference_number: str) -> Optional[ConfirmedBooking]:
        """Find booking by reference number"""
        for booking in self._storage.values():
            if booking.reference_number == reference_number:
                return booking
        return None

    async def reference_exists(self, reference_number: str) -> bool:
        return await self.find_by_reference(reference_number) is not None

    async def find_by_guest_email(self, email: str) -> List[ConfirmedBooking]:
        """Find bookings made with a guest email"""
        email = email.strip().lower()
        return [b for b in self._storage.values() if b.guest_details.email.lower() == email]

    async def find_by_villa(self, villa_id: str) -> List[ConfirmedBooking]:
        """Find bookings for a villa"""
        return [b for b in self._storage.values() if b.villa_id == villa_id]

    async def find_by_status(self, status: BookingStatus) -> List[ConfirmedBooking]:
        """Find bookings in a status"""
        return [b for b in self._storage.values() if b.status == status]

    async def find_all(self) -> List[ConfirmedBooking]:
        """Find all bookings"""
        return list(self._storage.values())

    async def update(self, booking: ConfirmedBooking) -> ConfirmedBooking:
        """Update booking"""
        if booking.id in self._storage:
            self._storage[booking.id] = booking
            return booking
        raise BookingNotFoundError(f"Booking {booking.id} not found")
