"""
OutageWatch CLI - Main entry point.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel

from outagewatch import __app_name__, __version__

# Telegram credentials usually live in .env
load_dotenv()

console = Console()

app = typer.Typer(
    name=__app_name__,
    help="Water-outage change notifier for one Warsaw district",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """OutageWatch - MPWiK water-outage notifier."""


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import check, state  # noqa: E402
from .commands._common import ConfigOption, err_console, load_config_or_exit  # noqa: E402

app.command("check")(check.check)
app.command("watch")(check.watch)
app.add_typer(state.app, name="state", help="Inspect stored and current reports")


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Create default configuration, directories and the state database."""
    path = config_path or Path("configs/app.yaml")

    for dir_path in (path.parent, Path("data"), Path("logs")):
        dir_path.mkdir(parents=True, exist_ok=True)

    if not path.exists() or force:
        path.write_text(DEFAULT_APP_CONFIG, encoding="utf-8")

    config = load_config_or_exit(path, log_level="WARNING")

    from outagewatch.persistence.db import init_db
    init_db(config.database.url)

    console.print(Panel.fit(
        "[bold green]OK - OutageWatch initialized[/bold green]\n\n"
        f"  - [cyan]{path}[/cyan] - configuration\n"
        f"  - [cyan]{config.database.url}[/cyan] - state database\n\n"
        "Next steps:\n"
        "  1. Put TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID in [yellow].env[/yellow]\n"
        "  2. Preview a page: [yellow]outagewatch state preview -k LATEST_URSUS_OUTAGES[/yellow]\n"
        "  3. Run a check: [yellow]outagewatch check[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


# =============================================================================
# Validate Command
# =============================================================================


@app.command()
def validate(
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Check a configuration file without running anything.

    Exits 1 and lists every problem found if the file is not usable.
    """
    from outagewatch.core.config import validate_config_file
    from outagewatch.core.config.loader import DEFAULT_CONFIG_PATH

    path = config_path or DEFAULT_CONFIG_PATH
    errors = validate_config_file(path)

    if errors:
        err_console.print(f"[red]Invalid configuration:[/red] {path}")
        for error in errors:
            err_console.print(f"  - {error}", markup=False)
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] {path}")


DEFAULT_APP_CONFIG = """\
# OutageWatch configuration

district: Warszawa URSUS

categories:
  - key: LATEST_URSUS_EMERGENCIES
    kind: emergency
    url: https://www.mpwik.com.pl/view/awarie
    header: "Awarie:"
    headers:
      Referer: https://www.mpwik.com.pl/view/planowane
  - key: LATEST_URSUS_OUTAGES
    kind: planned
    url: https://www.mpwik.com.pl/view/planowane
    header: "Wyłączenia planowane:"
    headers:
      Referer: https://www.mpwik.com.pl/view/awarie

http:
  timeout_seconds: 30
  max_retries: 3

telegram:
  bot_token: ${TELEGRAM_BOT_TOKEN}
  chat_id: ${TELEGRAM_CHAT_ID}

database:
  url: sqlite:///data/outagewatch.db

logging:
  level: INFO
  file: logs/outagewatch.log
  json_format: true
  rich_console: true

schedule:
  interval_minutes: 15
  jitter_seconds: 30
  run_on_start: true
"""


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
