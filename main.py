from fastapi import FastAPI, HTTPException, Depends, Query
from uuid import UUID
from datetime import date, timedelta
from typing import List, Optional
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Villas
    CreateVillaRequest, SetVillaAvailabilityRequest, VillaResponse, CalendarDayResponse,
    SelectDayRequest, SelectionResponse,
    # Availability & quotes
    CheckAvailabilityRequest, AvailabilityResponse, FailureReasonResponse,
    QuoteRequest, QuoteResponse,
    # Bookings
    CreateBookingRequest, BookingResponse, GuestDetailsResponse, MoneyResponse,
    # Auth
    Token, UserResponse
)

from api.dependencies import get_current_admin, get_user
from infrastructure.config import settings
from infrastructure.logging_config import setup_logging
from infrastructure.security import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from infrastructure.seed import demo_villas
from domain.auth import User

from application.locks import VillaLockRegistry
from application.services import AvailabilityService, BookingService, VillaService
from infrastructure.repositories.in_memory_repositories import (
    InMemoryVillaRepository, InMemoryAvailabilityRepository, InMemoryBookingRepository
)
from domain.catalog import ALL_LOCATIONS, VillaSearch
from domain.entities import Villa
from domain.enums import BookingFilter, BookingStatus, DayStatus, PaymentMethod, VillaSort
from domain.exceptions import (
    BookingNotFoundError, DuplicateBookingError, InvalidStateError, ReferenceUnavailableError,
    VillaNotFoundError,
)
from domain.rules import BookingRules
from domain.value_objects import GuestDetails, RuleViolation

setup_logging()

app = FastAPI(
    title="Villa Booking API",
    description="Availability, pricing and booking lifecycle for Ubud villa rentals",
    version="1.0.0"
)

# Initialize repositories
villa_repo = InMemoryVillaRepository(demo_villas() if settings.seed_demo_data else None)
availability_repo = InMemoryAvailabilityRepository()
booking_repo = InMemoryBookingRepository()

# One lock per villa, shared by every request
villa_locks = VillaLockRegistry()
booking_policy = settings.booking_policy()
cancellation_policy = settings.cancellation_policy()

# Dependency injection
def get_availability_service() -> AvailabilityService:
    return AvailabilityService(villa_repo, availability_repo, BookingRules(booking_policy))

def get_villa_service() -> VillaService:
    return VillaService(villa_repo, get_availability_service())

def get_booking_service() -> BookingService:
    return BookingService(
        booking_repo,
        get_availability_service(),
        villa_locks,
        policy=booking_policy,
        cancellation_policy=cancellation_policy
    )

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/booking-status", tags=["Enum Reference"])
async def get_booking_statuses():
    """Get all BookingStatus enum values"""
    return {
        "values": [item.value for item in BookingStatus],
        "description": "Booking status values: pending, confirmed, completed, cancelled"
    }

@app.get("/api/enums/payment-method", tags=["Enum Reference"])
async def get_payment_methods():
    """Get all PaymentMethod enum values"""
    return {
        "values": [item.value for item in PaymentMethod],
        "description": "Payment method values: card, bank, wallet"
    }

@app.get("/api/enums/day-status", tags=["Enum Reference"])
async def get_day_statuses():
    """Get all DayStatus enum values"""
    return {
        "values": [item.value for item in DayStatus],
        "description": "Calendar day values, in precedence order: past, booked, check-in, check-out, selected, checkout-only, available"
    }

@app.get("/api/enums/villa-sort", tags=["Enum Reference"])
async def get_villa_sorts():
    """Get all VillaSort enum values"""
    return {
        "values": [item.value for item in VillaSort],
        "description": "Villa sort values: price-asc, price-desc, capacity, rating"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.username}, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_admin)):
    return current_user

# ============================================================================
# VILLA ENDPOINTS
# ============================================================================

@app.get("/api/villas", response_model=List[VillaResponse], tags=["Villas"])
async def list_villas(
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    guests: int = Query(1, ge=1),
    min_price: int = Query(0, ge=0),
    max_price: int = Query(10_000_000, ge=0),
    amenities: List[str] = Query([]),
    location: str = ALL_LOCATIONS,
    sort_by: VillaSort = VillaSort.RATING,
    service: VillaService = Depends(get_villa_service)
):
    """Browse villas with filters and sorting"""
    search = VillaSearch(
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        min_price=min_price,
        max_price=max_price,
        amenities=amenities,
        location=location,
        sort_by=sort_by
    )
    villas = await service.list_villas(search)
    return [_villa_to_response(v) for v in villas]

@app.get("/api/villas/{villa_id}", response_model=VillaResponse, tags=["Villas"])
async def get_villa(
    villa_id: str,
    service: VillaService = Depends(get_villa_service)
):
    """Get villa by ID"""
    villa = await service.get_villa(villa_id)
    if not villa:
        raise HTTPException(status_code=404, detail="Villa not found")
    return _villa_to_response(villa)

@app.get("/api/villas/{villa_id}/calendar", response_model=List[CalendarDayResponse], tags=["Villas"])
async def get_villa_calendar(
    villa_id: str,
    start: Optional[date] = None,
    days: int = Query(42, ge=1, le=366),
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    service: AvailabilityService = Depends(get_availability_service)
):
    """Day-by-day calendar statuses for the date picker"""
    start = start or date.today()
    try:
        calendar = await service.calendar(
            villa_id, start, start + timedelta(days=days),
            check_in=check_in, check_out=check_out
        )
    except VillaNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [CalendarDayResponse(**day) for day in calendar]

@app.post("/api/villas/{villa_id}/selection", response_model=SelectionResponse, tags=["Villas"])
async def select_villa_day(
    villa_id: str,
    request: SelectDayRequest,
    service: AvailabilityService = Depends(get_availability_service)
):
    """Apply a date-picker click; a rejected click leaves the dates unchanged"""
    try:
        selection, accepted = await service.select_day(
            villa_id, request.day,
            check_in=request.check_in, check_out=request.check_out
        )
    except VillaNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return SelectionResponse(
        state=selection.state,
        accepted=accepted,
        check_in=selection.check_in,
        check_out=selection.check_out,
        nights=selection.nights()
    )

# ============================================================================
# AVAILABILITY & QUOTE ENDPOINTS
# ============================================================================

@app.post("/api/availability/check", response_model=AvailabilityResponse, tags=["Availability"])
async def check_availability(
    request: CheckAvailabilityRequest,
    service: AvailabilityService = Depends(get_availability_service)
):
    """Check a date range; every failed rule is listed"""
    try:
        result = await service.check_availability(
            villa_id=request.villa_id,
            check_in=request.check_in,
            check_out=request.check_out
        )
    except VillaNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return AvailabilityResponse(
        villa_id=request.villa_id,
        available=result.available,
        reasons=_reasons(result.reasons)
    )

@app.post("/api/bookings/quote", response_model=QuoteResponse, tags=["Availability"])
async def quote_stay(
    request: QuoteRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Price a stay; rejected with the failed rules when it cannot be booked"""
    try:
        result = await service.quote(
            villa_id=request.villa_id,
            check_in=request.check_in,
            check_out=request.check_out,
            guests=request.guests
        )
    except VillaNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if not result.ok:
        raise HTTPException(status_code=400, detail={"reasons": [r.dict() for r in _reasons(result.reasons)]})
    return QuoteResponse(villa_id=request.villa_id, **result.quote.dict())

# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingResponse, status_code=201, tags=["Bookings"])
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service)
):
    """Validate and confirm a booking in one request"""
    try:
        guest_details = GuestDetails(**request.guest_details.dict())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    attempt = service.create_attempt(
        villa_id=request.villa_id,
        check_in=request.check_in,
        check_out=request.check_out,
        guests=request.guests
    )
    try:
        violations = await service.validate_attempt(attempt)
        if violations:
            raise HTTPException(status_code=400, detail={"reasons": [r.dict() for r in _reasons(violations)]})

        result = await service.confirm_booking(attempt, guest_details, request.payment_method)
    except VillaNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DuplicateBookingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ReferenceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not result.ok:
        raise HTTPException(status_code=400, detail={"reasons": [r.dict() for r in _reasons(result.reasons)]})
    return _booking_to_response(result.booking)

@app.get("/api/bookings/reference/{reference_number}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking_by_reference(
    reference_number: str,
    service: BookingService = Depends(get_booking_service)
):
    """Get booking by reference number"""
    booking = await service.get_booking_by_reference(reference_number)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return _booking_to_response(booking)

@app.get("/api/bookings/guest/{email}", response_model=List[BookingResponse], tags=["Bookings"])
async def get_guest_bookings(
    email: str,
    booking_filter: BookingFilter = Query(BookingFilter.ALL, alias="filter"),
    service: BookingService = Depends(get_booking_service)
):
    """Get a guest's bookings, newest first"""
    bookings = await service.get_guest_bookings(email, booking_filter)
    return [_booking_to_response(b) for b in bookings]

@app.get("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service)
):
    """Get booking by ID"""
    booking = await service.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return _booking_to_response(booking)

@app.post("/api/bookings/{booking_id}/cancel", response_model=MoneyResponse, tags=["Bookings"])
async def cancel_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service)
):
    """Cancel a booking and return the refund"""
    try:
        refund = await service.cancel_booking(booking_id)
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return MoneyResponse(amount=refund.amount, currency=refund.currency)

# ============================================================================
# ADMIN ENDPOINTS
# ============================================================================

@app.get("/api/admin/bookings", response_model=List[BookingResponse], tags=["Admin"])
async def list_bookings(
    status: Optional[BookingStatus] = None,
    search: str = "",
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_admin)
):
    """List bookings with status filter and search"""
    bookings = await service.list_bookings(status=status, search=search)
    return [_booking_to_response(b) for b in bookings]

@app.post("/api/admin/bookings/complete-past", response_model=List[BookingResponse], tags=["Admin"])
async def complete_past_bookings(
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_admin)
):
    """Mark confirmed stays whose checkout has passed as completed"""
    bookings = await service.complete_finished_bookings()
    return [_booking_to_response(b) for b in bookings]

@app.get("/api/admin/villas/{villa_id}/bookings", response_model=List[BookingResponse], tags=["Admin"])
async def list_villa_bookings(
    villa_id: str,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_admin)
):
    """Bookings recorded against one villa"""
    bookings = await service.get_villa_bookings(villa_id)
    return [_booking_to_response(b) for b in bookings]

@app.post("/api/admin/villas", response_model=VillaResponse, status_code=201, tags=["Admin"])
async def create_villa(
    request: CreateVillaRequest,
    service: VillaService = Depends(get_villa_service),
    current_user: User = Depends(get_current_admin)
):
    """Add a villa to the catalogue"""
    if await service.get_villa(request.id):
        raise HTTPException(status_code=409, detail="Villa already exists")
    try:
        villa = Villa(**request.dict())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    villa = await service.add_villa(villa)
    return _villa_to_response(villa)

@app.put("/api/admin/villas/{villa_id}/availability", response_model=VillaResponse, tags=["Admin"])
async def set_villa_availability(
    villa_id: str,
    request: SetVillaAvailabilityRequest,
    service: VillaService = Depends(get_villa_service),
    current_user: User = Depends(get_current_admin)
):
    """Switch a villa on or off for booking"""
    villa = await service.set_villa_availability(villa_id, request.is_available)
    if not villa:
        raise HTTPException(status_code=404, detail="Villa not found")
    return _villa_to_response(villa)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _reasons(violations: List[RuleViolation]) -> List[FailureReasonResponse]:
    """Convert RuleViolation values to FailureReasonResponse"""
    return [
        FailureReasonResponse(reason=v.reason.value, field=v.field, message=v.message)
        for v in violations
    ]

def _villa_to_response(villa: Villa) -> VillaResponse:
    """Convert Villa entity to VillaResponse"""
    return VillaResponse(
        id=villa.id,
        name=villa.name,
        location=villa.location,
        description=villa.description,
        capacity=villa.capacity,
        minimum_stay=villa.effective_minimum_stay(booking_policy),
        maximum_stay=villa.effective_maximum_stay(booking_policy),
        price_per_night=villa.price_per_night,
        cleaning_fee=villa.cleaning_fee,
        bedrooms=villa.bedrooms,
        bathrooms=villa.bathrooms,
        amenities=villa.amenities,
        rating=villa.rating,
        review_count=villa.review_count,
        is_available=villa.is_available,
        booked_dates=villa.booked_dates
    )

def _booking_to_response(booking) -> BookingResponse:
    """Convert ConfirmedBooking entity to BookingResponse"""
    return BookingResponse(
        id=booking.id,
        reference_number=booking.reference_number,
        villa_id=booking.villa_id,
        villa_name=booking.villa_name,
        check_in=booking.check_in,
        check_out=booking.check_out,
        guests=booking.guests,
        nightly_rate=booking.nightly_rate,
        nights=booking.nights,
        cleaning_fee=booking.cleaning_fee,
        service_fee=booking.service_fee,
        total=booking.total,
        currency=booking.currency,
        status=booking.status,
        refund_amount=booking.refund_amount,
        guest_details=GuestDetailsResponse(**booking.guest_details.dict()),
        payment_method=booking.payment_method,
        created_at=booking.created_at,
        modified_at=booking.modified_at,
        version=booking.version
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
