"""Configuration settings for the Movie Booking System."""

from decimal import Decimal
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Booking backend
    backend_api_url: str = "http://localhost:5086/api"
    backend_timeout_seconds: float = 10.0

    # Seat layout
    seats_per_row: int = 10

    # Occupancy simulation (the backend has no booking table to read from)
    occupancy_seed: str = "movie-booking-system"
    occupancy_ratio: float = 0.25

    # Pricing
    booking_fee: Decimal = Decimal("0.00")
    currency_symbol: str = "$"

    # Payment
    default_user_id: int = 1
    default_payment_method: str = "credit"
    payment_status: str = "completed"

    # Login stub
    admin_email: str = "admin@theater.com"
    admin_password: str = "admin123"
    min_password_length: int = 6

    # Session tokens
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    SESSION_TOKEN_EXPIRE_MINUTES: int = 120

    # Display formats
    showtime_label_format: str = "%Y-%m-%d %H:%M"
    showtime_time_format: str = "%H:%M"

    # Application Configuration
    debug: bool = False
    environment: str = "development"

    # CORS Configuration
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["*"]
    cors_expose_headers: list[str] = ["X-Request-ID", "X-Process-Time"]

    # Logging Configuration
    log_level: str = "INFO"
    enable_json_logging: bool = False
    enable_request_logging: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8"
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
