"""
Centralized configuration with environment variable overrides.

Store wiring, collection names, working hours and logging are all
configurable here. Services receive the values they need explicitly.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_calendar.logging_context import LOG_FORMAT, install_session_filter

load_dotenv()

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("firestore", "memory")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Afri Beauty Studio")
    contact_email: str = os.getenv("BUSINESS_CONTACT_EMAIL", "bookings@example.com")


@dataclass(frozen=True)
class StoreConfig:
    """Document store backend and collection names."""

    backend: str = os.getenv("STORE_BACKEND", "firestore")
    project_id: str = os.getenv("GCP_PROJECT", "")
    database: str = os.getenv("FIRESTORE_DATABASE", "(default)")
    calendar_collection: str = os.getenv("CALENDAR_COLLECTION", "calendar")
    bookings_collection: str = os.getenv("BOOKINGS_COLLECTION", "bookings")


@dataclass(frozen=True)
class ScheduleConfig:
    """Working hours used to generate the default slots of a day."""

    first_slot_hour: int = _safe_int("FIRST_SLOT_HOUR", "9")
    last_slot_hour: int = _safe_int("LAST_SLOT_HOUR", "17")
    slot_interval_minutes: int = _safe_int("SLOT_INTERVAL_MINUTES", "60")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "booking-calendar")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.store.backend not in STORE_BACKENDS:
        raise ValueError(
            f"STORE_BACKEND must be one of {STORE_BACKENDS}, got {config.store.backend!r}"
        )
    if not config.store.calendar_collection or not config.store.bookings_collection:
        raise ValueError("CALENDAR_COLLECTION and BOOKINGS_COLLECTION must not be empty")
    if config.store.calendar_collection == config.store.bookings_collection:
        raise ValueError(
            "CALENDAR_COLLECTION and BOOKINGS_COLLECTION must differ, "
            f"both are {config.store.calendar_collection!r}"
        )

    for hour_name, hour_value in [
        ("FIRST_SLOT_HOUR", config.schedule.first_slot_hour),
        ("LAST_SLOT_HOUR", config.schedule.last_slot_hour),
    ]:
        if not 0 <= hour_value <= 23:
            raise ValueError(f"{hour_name} must be between 0 and 23, got {hour_value}")

    if config.schedule.first_slot_hour > config.schedule.last_slot_hour:
        raise ValueError(
            "FIRST_SLOT_HOUR must not be after LAST_SLOT_HOUR, got "
            f"{config.schedule.first_slot_hour} > {config.schedule.last_slot_hour}"
        )
    if not 5 <= config.schedule.slot_interval_minutes <= 240:
        raise ValueError(
            "SLOT_INTERVAL_MINUTES must be between 5 and 240, "
            f"got {config.schedule.slot_interval_minutes}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_session_filter()
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
