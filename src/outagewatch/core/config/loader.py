"""
Reads ``configs/app.yaml`` into an ``AppConfig``.

String values may reference environment variables as ``${VAR}`` or
``${VAR:-default}``; Telegram credentials normally arrive that way.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AppConfig


DEFAULT_CONFIG_PATH = Path("configs/app.yaml")

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")


class ConfigError(Exception):
    """The configuration file is missing, unreadable or invalid."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        super().__init__(message)
        self.path = path
        self.details = details


def _read_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML mapping; an empty file is an empty mapping.

    Raises:
        ConfigError: Missing file, unreadable file, bad YAML, or a non-mapping
    """
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}", path=path)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping", path=path)
    return data


def _expand_env_vars(value: Any) -> Any:
    """Substitute ``${VAR}`` references in every string of a YAML tree.

    Unset variables without a default become "".
    """
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(
            lambda m: os.environ.get(m.group("name"), m.group("default") or ""),
            value,
        )
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _field_errors(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]


def load_app_config(path: Path | str | None = None, expand_env: bool = True) -> AppConfig:
    """Load and validate the application configuration.

    Without ``path``, ``configs/app.yaml`` is used if it exists and the
    built-in defaults (Ursus, both categories) otherwise. An explicit path
    must exist.

    Raises:
        ConfigError: If the file cannot be loaded or fails validation
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return AppConfig()
        path = DEFAULT_CONFIG_PATH
    path = Path(path)

    data = _read_yaml(path)
    if expand_env:
        data = _expand_env_vars(data)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid app configuration in {path}",
            path=path,
            details="\n".join(_field_errors(e)),
        ) from e


def validate_config_file(path: Path | str) -> list[str]:
    """Problems found in a configuration file, one line each (empty if valid)."""
    try:
        load_app_config(path)
    except ConfigError as e:
        if isinstance(e.__cause__, ValidationError) and e.details:
            return e.details.splitlines()
        return [str(e)]
    return []
