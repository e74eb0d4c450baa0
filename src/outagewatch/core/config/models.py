"""
Pydantic configuration models for OutageWatch.

These models provide type-safe configuration with validation for:
- The target district and tracked outage categories
- HTTP fetching
- Telegram notifications
- State database, logging and scheduling
"""

from __future__ import annotations

import os
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class ExtractorKind(str, Enum):
    """Extraction strategy used for a category's source page."""

    PLANNED = "planned"
    EMERGENCY = "emergency"


class OutcomeStatus(str, Enum):
    """Result of one category check."""

    NO_DATA = "NO_DATA"
    UNCHANGED = "UNCHANGED"
    UPDATED = "UPDATED"
    FAILED = "FAILED"


# =============================================================================
# Category Configuration
# =============================================================================


DEFAULT_DISTRICT = "Warszawa URSUS"


class CategoryConfig(BaseModel):
    """One independently tracked outage feed.

    Immutable once loaded. The ``key`` is both the persistence key and the
    label used in logs.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Persistence key and log label",
    )
    kind: ExtractorKind = Field(
        ...,
        description="Extraction strategy for the source page",
    )
    url: str = Field(
        ...,
        description="Source page URL",
    )
    header: str = Field(
        ...,
        description="Title line prepended to notifications",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers (e.g. Referer)",
    )
    enabled: bool = Field(
        default=True,
        description="Skip this category when False",
    )

    @field_validator("url")
    @classmethod
    def url_has_scheme(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return v


def default_categories() -> list[CategoryConfig]:
    """Emergency first, then planned."""
    return [
        CategoryConfig(
            key="LATEST_URSUS_EMERGENCIES",
            kind=ExtractorKind.EMERGENCY,
            url="https://www.mpwik.com.pl/view/awarie",
            header="Awarie:",
            headers={"Referer": "https://www.mpwik.com.pl/view/planowane"},
        ),
        CategoryConfig(
            key="LATEST_URSUS_OUTAGES",
            kind=ExtractorKind.PLANNED,
            url="https://www.mpwik.com.pl/view/planowane",
            header="Wyłączenia planowane:",
            headers={"Referer": "https://www.mpwik.com.pl/view/awarie"},
        ),
    ]


# =============================================================================
# HTTP Configuration
# =============================================================================


DEFAULT_USER_AGENT = "outagewatch/0.1 (water outage notifier; +https://www.mpwik.com.pl)"


class HttpConfig(BaseModel):
    """Fetch settings shared by all categories."""

    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum attempts on transport errors and 429s",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Descriptive client identifier",
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: {
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "pl-PL,pl;q=0.9,en-US;q=0.6,en;q=0.5",
            "Cache-Control": "max-age=0",
        },
        description="Default headers for every request",
    )


# =============================================================================
# Notification Configuration
# =============================================================================


TELEGRAM_MESSAGE_LIMIT = 4096


class TelegramConfig(BaseModel):
    """Telegram bot credentials. Missing credentials disable notifications."""

    bot_token: str | None = Field(
        default_factory=lambda: os.environ.get("TELEGRAM_BOT_TOKEN") or None,
    )
    chat_id: str | None = Field(
        default_factory=lambda: os.environ.get("TELEGRAM_CHAT_ID") or None,
    )
    api_url: str = Field(default="https://api.telegram.org")
    parse_mode: str = Field(default="HTML")
    disable_web_page_preview: bool = Field(default=True)
    timeout_seconds: float = Field(default=15.0, ge=1.0, le=120.0)
    max_message_length: int = Field(
        default=TELEGRAM_MESSAGE_LIMIT,
        ge=100,
        le=TELEGRAM_MESSAGE_LIMIT,
    )

    @field_validator("bot_token", "chat_id", mode="before")
    @classmethod
    def blank_is_none(cls, v: Any) -> Any:
        # ${VAR} expansion of an unset variable yields ""
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, int):
            return str(v)
        return v

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)


# =============================================================================
# Database / Logging / Schedule
# =============================================================================


class DatabaseConfig(BaseModel):
    """State store database settings."""

    url: str = Field(
        default="sqlite:///data/outagewatch.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        description="Log SQL statements",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: str | None = Field(
        default="logs/outagewatch.log",
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"level must be one of {sorted(valid)}")
        return v.upper()


class ScheduleConfig(BaseModel):
    """Recurring trigger used by ``outagewatch watch``."""

    interval_minutes: int = Field(
        default=15,
        ge=1,
        le=24 * 60,
        description="Minutes between checks",
    )
    jitter_seconds: int = Field(
        default=0,
        ge=0,
        le=3600,
        description="Random delay added to each run",
    )
    run_on_start: bool = Field(
        default=True,
        description="Run one check immediately when the scheduler starts",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration (configs/app.yaml)."""

    district: str = Field(
        default=DEFAULT_DISTRICT,
        min_length=1,
        description="Prefix matched against district section headers",
    )
    categories: list[CategoryConfig] = Field(
        default_factory=default_categories,
        description="Tracked categories, checked in this order",
    )
    http: HttpConfig = Field(default_factory=HttpConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)

    @field_validator("categories")
    @classmethod
    def unique_keys(cls, v: list[CategoryConfig]) -> list[CategoryConfig]:
        seen: set[str] = set()
        for category in v:
            if category.key in seen:
                raise ValueError(f"duplicate category key: {category.key}")
            seen.add(category.key)
        return v

    @property
    def enabled_categories(self) -> list[CategoryConfig]:
        return [c for c in self.categories if c.enabled]

    def get_category(self, key: str) -> CategoryConfig | None:
        for category in self.categories:
            if category.key == key:
                return category
        return None
