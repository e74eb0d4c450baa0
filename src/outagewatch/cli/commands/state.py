"""
State commands: inspect stored reports and preview current ones.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ._common import ConfigOption, err_console, load_config_or_exit

console = Console()

app = typer.Typer(
    help="Inspect stored and current outage reports",
    no_args_is_help=True,
)


@app.command("show")
def show_state(
    category: Optional[str] = typer.Option(
        None,
        "--category",
        "-k",
        help="Print the full stored report for this key",
    ),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Show the last notified report per category."""
    from outagewatch.persistence.store import SqlStateStore, StoreReadError

    config = load_config_or_exit(config_path, log_level="WARNING")
    store = SqlStateStore.from_url(config.database.url, echo=config.database.echo)

    try:
        if category:
            snapshot = store.get_snapshot(category)
            if snapshot is None:
                console.print(f"[dim]Nothing stored for {category}[/dim]")
                return
            console.print(Panel(
                Text(snapshot.report),
                title=f"[bold]{category}[/bold]",
                subtitle=snapshot.last_updated.isoformat(timespec="seconds"),
            ))
            return

        snapshots = store.all_snapshots()
    except StoreReadError as e:
        err_console.print(str(e), style="red", markup=False)
        raise typer.Exit(1)

    if not snapshots:
        console.print("[dim]No state stored yet. Run:[/dim] outagewatch check")
        return

    table = Table(title="Stored Reports", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Fingerprint")
    table.add_column("Records", justify="right")
    table.add_column("Last Updated", justify="right")

    for snapshot in snapshots:
        records = snapshot.report.count("<strong>")
        table.add_row(
            snapshot.key,
            snapshot.fingerprint,
            str(records),
            snapshot.last_updated.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command("preview")
def preview(
    category: str = typer.Option(
        ...,
        "--category",
        "-k",
        help="Category key to fetch",
    ),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Fetch a category page and print its canonical report without comparing."""
    from outagewatch.core.backends import BackendError, HttpBackend, RequestSpec
    from outagewatch.core.extract import DocumentParseError, build_extractor
    from outagewatch.core.normalize import compose_message

    config = load_config_or_exit(config_path, log_level="WARNING")
    selected = config.get_category(category)
    if selected is None:
        err_console.print(f"[red]Unknown category:[/red] {category}")
        raise typer.Exit(1)

    async def _fetch() -> str:
        async with HttpBackend.from_config(config.http) as backend:
            result = await backend.fetch(RequestSpec(
                url=selected.url,
                headers=dict(selected.headers),
                category=selected.key,
            ))
        if not result.ok:
            raise BackendError(f"Unexpected status {result.status_code}", url=selected.url)
        return result.html

    try:
        html = asyncio.run(_fetch())
        report = build_extractor(selected.kind, config.district).extract_report(html, selected.url)
    except (BackendError, DocumentParseError) as e:
        err_console.print(str(e), style="red", markup=False)
        raise typer.Exit(1)

    if not report:
        console.print(f"[dim]No outages for {config.district}[/dim]")
        return

    console.print(Panel(Text(compose_message(selected.header, report)), title=selected.key))
