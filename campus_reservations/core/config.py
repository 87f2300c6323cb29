# campus_reservations/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "production"] = "development"
    log_level: str = Field(default="INFO", description="Root log level for the API process")
    host: str = Field(default="0.0.0.0", description="Bind address for the API server")
    port: int = Field(default=8000, ge=1, le=65535)

    database_url: str = Field(
        default="sqlite:///./campus_reservations.db",
        description="SQLAlchemy URL of the reservations store",
    )
    database_echo: bool = False

    # Optional distributed slot lock. The process-local lock is always used.
    redis_url: Optional[str] = Field(default=None, description="Redis URL for cross-process slot locks")
    lock_namespace: str = "campus_reservations"
    booking_lock_ttl_seconds: int = Field(default=30, ge=1)
    booking_lock_wait_seconds: float = Field(default=10.0, gt=0)

    # Booking policy
    initial_booking_status: Literal["pending", "approved"] = Field(
        default="approved",
        description="Status assigned to newly created bookings",
    )
    open_when_unscheduled: bool = Field(
        default=True,
        description="Treat days without any availability rule as open",
    )
    reject_past_dates: bool = Field(
        default=True,
        description="Refuse bookings whose date is before today",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @field_validator("redis_url", mode="before")
    @classmethod
    def _blank_redis_url_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
