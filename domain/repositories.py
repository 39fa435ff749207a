"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID

from domain.booking import ConfirmedBooking
from domain.entities import AvailabilityIndex, Villa
from domain.enums import BookingStatus


class VillaRepository(ABC):
    """Repository interface for villa metadata"""

    @abstractmethod
    async def save(self, villa: Villa) -> Villa:
        """Save villa"""
        pass

    @abstractmethod
    async def find_by_id(self, villa_id: str) -> Optional[Villa]:
        """Find villa by ID"""
        pass

    @abstractmethod
    async def find_all(self) -> List[Villa]:
        """Find all villas"""
        pass

    @abstractmethod
    async def update(self, villa: Villa) -> Villa:
        """Update villa"""
        pass

    @abstractmethod
    async def add_booked_dates(self, villa_id: str, keys: List[str]) -> Villa:
        """Reflect newly occupied nights back into the villa's booked dates"""
        pass


class AvailabilityRepository(ABC):
    """Repository interface for per-villa AvailabilityIndex"""

    @abstractmethod
    async def save(self, index: AvailabilityIndex) -> AvailabilityIndex:
        """Save availability index"""
        pass

    @abstractmethod
    async def find_by_villa(self, villa_id: str) -> Optional[AvailabilityIndex]:
        """Find the index for a villa"""
        pass


class BookingRepository(ABC):
    """Repository interface for the booking ledger"""

    @abstractmethod
    async def save(self, booking: ConfirmedBooking) -> ConfirmedBooking:
        """Append a new booking"""
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: UUID) -> Optional[ConfirmedBooking]:
        """Find booking by ID"""
        pass

    @abstractmethod
    async def find_by_reference(self, reference_number: str) -> Optional[ConfirmedBooking]:
        """Find booking by reference number"""
        pass

    @abstractmethod
    async def reference_exists(self, reference_number: str) -> bool:
        """Check whether a reference number was already issued"""
        pass

    @abstractmethod
    async def find_by_guest_email(self, email: str) -> List[ConfirmedBooking]:
        """Find bookings made with a guest email"""
        pass

    @abstractmethod
    async def find_by_villa(self, villa_id: str) -> List[ConfirmedBooking]:
        """Find bookings for a villa"""
        pass

    @abstractmethod
    async def find_by_status(self, status: BookingStatus) -> List[ConfirmedBooking]:
        """Find bookings in a status"""
        pass

    @abstractmethod
    async def find_all(self) -> List[ConfirmedBooking]:
        """Find all bookings"""
        pass

    @abstractmethod
    async def update(self, booking: ConfirmedBooking) -> ConfirmedBooking:
        """Update booking"""
        pass
