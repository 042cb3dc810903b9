"""
Environment configuration for the reservation service.
Uses Pydantic's settings management to read environment variables
(prefixed with HOTEL_) and an optional .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_prefix="HOTEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = "Hotel Reservation Core"
    API_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Storage configuration
    STORAGE_BACKEND: Literal["memory", "json"] = "memory"
    DATA_DIR: Path = Path("data")

    # Business rules
    GRACE_PERIOD_HOURS: int = Field(default=24, ge=0)

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["standard", "json"] = "standard"

    @property
    def rooms_file(self) -> Path:
        return self.DATA_DIR / "rooms.json"

    @property
    def reservations_file(self) -> Path:
        return self.DATA_DIR / "reservations.json"

    @property
    def wait_list_file(self) -> Path:
        return self.DATA_DIR / "wait_list_reservations.json"

    @property
    def guests_file(self) -> Path:
        return self.DATA_DIR / "guests.json"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()
