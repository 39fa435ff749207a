"""Domain Value Objects"""
import re
from pydantic import BaseModel, Field, validator
from datetime import date
from decimal import Decimal
from typing import Optional

from domain.enums import FailureReason
from domain.exceptions import RULE_ERRORS, InvalidRangeError


class DateRange(BaseModel):
    """Value Object for a half-open stay ``[check_in, check_out)``"""
    check_in: date
    check_out: date

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out must be after check-in')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        return (self.check_out - self.check_in).days

    class Config:
        frozen = True


class Money(BaseModel):
    """Value Object for monetary amounts in whole currency units"""
    amount: int = Field(ge=0)
    currency: str = "IDR"

    class Config:
        frozen = True


class PriceQuote(BaseModel):
    """Itemised price for a stay; every amount is an integer"""
    nightly_rate: int = Field(ge=0)
    nights: int = Field(ge=0)
    subtotal: int = Field(ge=0)
    cleaning_fee: int = Field(ge=0)
    service_fee: int = Field(ge=0)
    total: int = Field(ge=0)
    currency: str = "IDR"

    class Config:
        frozen = True


class BookingPolicy(BaseModel):
    """Fallbacks for villa fields that may be left unset"""
    minimum_stay: int = Field(default=1, ge=1)
    maximum_stay: int = Field(default=30, ge=1)
    service_fee_rate: Decimal = Field(default=Decimal("0.10"), ge=0)
    reference_prefix: str = "SU"
    reference_max_attempts: int = Field(default=10, ge=1)
    currency: str = "IDR"

    @validator('reference_prefix')
    def prefix_is_two_letters(cls, v):
        if not re.fullmatch(r"[A-Z]{2}", v):
            raise ValueError('Reference prefix must be two uppercase letters')
        return v

    class Config:
        frozen = True


class RuleViolation(BaseModel):
    """A single user-correctable failure reported by the rules engine"""
    reason: FailureReason
    message: str
    field: str = ""

    def __init__(self, **data):
        if not data.get("field") and data.get("reason") is not None:
            data["field"] = FailureReason(data["reason"]).field
        super().__init__(**data)

    def to_exception(self) -> Exception:
        if self.reason is FailureReason.INVALID_RANGE:
            return InvalidRangeError(message=self.message)
        return RULE_ERRORS[self.reason](self.message)

    class Config:
        frozen = True


PHONE_PATTERN = re.compile(r"^\+62\d{9,13}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class GuestDetails(BaseModel):
    """Contact details collected at checkout"""
    full_name: str
    email: str
    phone: str
    special_requests: Optional[str] = None

    @validator('full_name')
    def full_name_required(cls, v):
        if not v.strip():
            raise ValueError('Full name is required')
        return v.strip()

    @validator('email')
    def email_format(cls, v):
        if not v.strip():
            raise ValueError('Email is required')
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError('Invalid email format')
        return v.strip()

    @validator('phone')
    def indonesian_phone(cls, v):
        compact = re.sub(r"\s", "", v)
        if not compact or compact == "+62":
            raise ValueError('Phone number is required')
        if not PHONE_PATTERN.match(compact):
            raise ValueError('Invalid Indonesian phone format')
        return compact

    class Config:
        frozen = True


class CancellationPolicy(BaseModel):
    """Value Object for cancellation policy"""
    policy_name: str = "Standard"
    full_refund_days: int = Field(default=2, ge=0)
    partial_refund_days: int = Field(default=1, ge=0)
    partial_refund_percentage: Decimal = Field(default=Decimal("50"), ge=0, le=100)

    def refund_percentage(self, days_until_check_in: int) -> Decimal:
        """Percentage of the total returned when cancelling this far ahead"""
        if days_until_check_in >= self.full_refund_days:
            return Decimal("100")
        if days_until_check_in >= self.partial_refund_days:
            return self.partial_refund_percentage
        return Decimal("0")

    class Config:
        frozen = True
