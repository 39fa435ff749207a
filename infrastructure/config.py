"""Application settings using Pydantic Settings."""
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.value_objects import BookingPolicy, CancellationPolicy


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Auth (admin back-office)
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    admin_username: str = "admin"
    admin_password: str = "admin123"

    # Logging Configuration
    log_level: str = "INFO"

    # Villa fallbacks
    default_minimum_stay: int = 1
    default_maximum_stay: int = 30
    service_fee_rate: Decimal = Decimal("0.10")
    currency: str = "IDR"

    # Booking references
    reference_prefix: str = "SU"
    reference_max_attempts: int = 10

    # Cancellation refunds
    full_refund_days: int = 2
    partial_refund_days: int = 1
    partial_refund_percentage: Decimal = Decimal("50")

    seed_demo_data: bool = True

    def booking_policy(self) -> BookingPolicy:
        return BookingPolicy(
            minimum_stay=self.default_minimum_stay,
            maximum_stay=self.default_maximum_stay,
            service_fee_rate=self.service_fee_rate,
            reference_prefix=self.reference_prefix,
            reference_max_attempts=self.reference_max_attempts,
            currency=self.currency,
        )

    def cancellation_policy(self) -> CancellationPolicy:
        return CancellationPolicy(
            full_refund_days=self.full_refund_days,
            partial_refund_days=self.partial_refund_days,
            partial_refund_percentage=self.partial_refund_percentage,
        )


# Global settings instance
settings = Settings()
