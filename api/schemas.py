"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import BookingStatus, DayStatus, PaymentMethod, SelectionState


# ============================================================================
# VILLA SCHEMAS
# ============================================================================

class CreateVillaRequest(BaseModel):
    """Create villa request DTO"""
    id: str
    name: str
    location: str = ""
    description: str = ""
    capacity: int = Field(gt=0)
    minimum_stay: Optional[int] = Field(None, ge=1)
    maximum_stay: Optional[int] = Field(None, ge=1)
    price_per_night: int = Field(ge=0)
    cleaning_fee: int = Field(ge=0, default=0)
    service_fee_amount: Optional[int] = Field(None, ge=0)
    service_fee_rate: Optional[Decimal] = Field(None, ge=0)
    bedrooms: int = Field(ge=0, default=1)
    bathrooms: int = Field(ge=0, default=1)
    amenities: List[str] = []
    rating: float = Field(ge=0, le=5, default=4.8)
    review_count: int = Field(ge=0, default=0)
    is_available: bool = True
    booked_dates: List[str] = []


class SetVillaAvailabilityRequest(BaseModel):
    """Toggle villa availability request DTO"""
    is_available: bool


class VillaResponse(BaseModel):
    """Villa response DTO"""
    id: str
    name: str
    location: str
    description: str
    capacity: int
    minimum_stay: int
    maximum_stay: int
    price_per_night: int
    cleaning_fee: int
    bedrooms: int
    bathrooms: int
    amenities: List[str]
    rating: float
    review_count: int
    is_available: bool
    booked_dates: List[str]


class CalendarDayResponse(BaseModel):
    """Calendar day response DTO"""
    day: date
    status: DayStatus
    selectable: bool


class SelectDayRequest(BaseModel):
    """One date-picker click on top of the dates already chosen"""
    day: date
    check_in: Optional[date] = None
    check_out: Optional[date] = None


class SelectionResponse(BaseModel):
    """Date selection response DTO"""
    state: SelectionState
    accepted: bool
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    nights: int


# ============================================================================
# AVAILABILITY & QUOTE SCHEMAS
# ============================================================================

class CheckAvailabilityRequest(BaseModel):
    """Check availability request DTO"""
    villa_id: str
    check_in: Optional[date] = None
    check_out: Optional[date] = None


class FailureReasonResponse(BaseModel):
    """Rule violation DTO"""
    reason: str
    field: str
    message: str


class AvailabilityResponse(BaseModel):
    """Availability response DTO"""
    villa_id: str
    available: bool
    reasons: List[FailureReasonResponse]


class QuoteRequest(BaseModel):
    """Quote request DTO"""
    villa_id: str
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: int = 1


class QuoteResponse(BaseModel):
    """Quote response DTO"""
    villa_id: str
    nights: int
    nightly_rate: int
    subtotal: int
    cleaning_fee: int
    service_fee: int
    total: int
    currency: str


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class GuestDetailsRequest(BaseModel):
    """Guest details request DTO"""
    full_name: str
    email: str
    phone: str
    special_requests: Optional[str] = None


class CreateBookingRequest(BaseModel):
    """Create booking request DTO"""
    villa_id: str
    check_in: date
    check_out: date
    guests: int
    guest_details: GuestDetailsRequest
    payment_method: PaymentMethod = PaymentMethod.CARD


class GuestDetailsResponse(BaseModel):
    """Guest details response DTO"""
    full_name: str
    email: str
    phone: str
    special_requests: Optional[str] = None


class BookingResponse(BaseModel):
    """Booking response DTO"""
    id: UUID
    reference_number: str
    villa_id: str
    villa_name: str
    check_in: date
    check_out: date
    guests: int
    nightly_rate: int
    nights: int
    cleaning_fee: int
    service_fee: int
    total: int
    currency: str
    status: BookingStatus
    refund_amount: Optional[int] = None
    guest_details: GuestDetailsResponse
    payment_method: PaymentMethod
    created_at: datetime
    modified_at: datetime
    version: int


class MoneyResponse(BaseModel):
    """Money response DTO"""
    amount: int
    currency: str


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    is_admin: bool
    disabled: bool
