"""Configuration loading and validation."""

from .models import (
    # Enums
    ExtractorKind,
    OutcomeStatus,
    # Config models
    AppConfig,
    CategoryConfig,
    DatabaseConfig,
    HttpConfig,
    LoggingConfig,
    ScheduleConfig,
    TelegramConfig,
    default_categories,
)
from .loader import ConfigError, load_app_config, validate_config_file

__all__ = [
    # Enums
    "ExtractorKind",
    "OutcomeStatus",
    # Config models
    "AppConfig",
    "CategoryConfig",
    "DatabaseConfig",
    "HttpConfig",
    "LoggingConfig",
    "ScheduleConfig",
    "TelegramConfig",
    "default_categories",
    # Loaders
    "ConfigError",
    "load_app_config",
    "validate_config_file",
]
