"""
Check commands: run the outage check once or on a schedule.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from outagewatch.core.config.models import OutcomeStatus
from outagewatch.core.orchestrator.runner import RunSummary

from ._common import ConfigOption, err_console, load_config_or_exit

console = Console()

STATUS_STYLES = {
    OutcomeStatus.UPDATED: "green",
    OutcomeStatus.UNCHANGED: "default",
    OutcomeStatus.NO_DATA: "dim",
    OutcomeStatus.FAILED: "red",
}


def check(
    category: Optional[list[str]] = typer.Option(
        None,
        "--category",
        "-k",
        help="Only check this category key (repeatable)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Compare only; don't notify or save state",
    ),
    config_path: Optional[Path] = ConfigOption,
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level",
    ),
) -> None:
    """Check all configured categories once.

    Exits 0 whenever the run completes; per-category failures are shown in
    the summary table.

    Examples:
        outagewatch check
        outagewatch check -k LATEST_URSUS_OUTAGES --dry-run
    """
    from outagewatch.core.orchestrator import run_outage_check

    config = load_config_or_exit(config_path, log_level=log_level)

    if dry_run:
        console.print("[yellow]Dry run mode - nothing will be sent or saved[/yellow]")

    try:
        summary = asyncio.run(run_outage_check(
            config,
            category_keys=category or None,
            dry_run=dry_run,
        ))
    except ValueError as e:
        err_console.print(str(e), style="red", markup=False)
        available = ", ".join(c.key for c in config.categories)
        err_console.print(f"[dim]Available: {available}[/dim]")
        raise typer.Exit(1)

    console.print()
    show_summary(summary)


def watch(
    config_path: Optional[Path] = ConfigOption,
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        min=1,
        help="Minutes between checks (overrides config)",
    ),
) -> None:
    """Run the check on a recurring schedule (foreground, Ctrl+C to stop)."""
    from outagewatch.core.scheduler import SchedulerService

    config = load_config_or_exit(config_path)
    schedule = config.schedule
    if interval is not None:
        schedule = schedule.model_copy(update={"interval_minutes": interval})

    console.print(
        f"[bold]Watching {config.district}[/bold] every {schedule.interval_minutes} minute(s)"
    )

    service = SchedulerService(schedule, str(config_path) if config_path else None)
    try:
        asyncio.run(service.start())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


def show_summary(summary: RunSummary) -> None:
    """Show a table of per-category outcomes."""
    table = Table(title=f"Outage Check {summary.run_id}")

    table.add_column("Category", style="cyan")
    table.add_column("Outcome", justify="center")
    table.add_column("Records", justify="right")
    table.add_column("Notified", justify="center")
    table.add_column("Saved", justify="center")
    table.add_column("Details")

    for key, outcome in summary.outcomes.items():
        style = STATUS_STYLES.get(outcome.status, "default")
        details = outcome.reason or outcome.change_summary or ""
        if outcome.notify_error:
            details = f"{details} (notify failed: {outcome.notify_error})".strip()

        table.add_row(
            key,
            f"[{style}]{outcome.status.value}[/{style}]",
            str(outcome.record_count),
            "yes" if outcome.notified else "-",
            "yes" if outcome.persisted else "-",
            details,
        )

    console.print(table)
    if summary.duration_seconds is not None:
        console.print(f"[dim]Completed in {summary.duration_seconds:.1f}s[/dim]")
