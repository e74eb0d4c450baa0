"""
Helpers shared by CLI commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from outagewatch.core.config import AppConfig, ConfigError, load_app_config
from outagewatch.core.logging import setup_logging

err_console = Console(stderr=True)

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to app.yaml (default: configs/app.yaml)",
    envvar="OUTAGEWATCH_CONFIG",
)


def load_config_or_exit(path: Optional[Path], *, log_level: str | None = None) -> AppConfig:
    """Load configuration and set up logging, exiting with a message on error."""
    try:
        config = load_app_config(path)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    setup_logging(
        level=log_level or config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config
