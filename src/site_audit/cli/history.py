"""``site-audit history``: list past audits."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..config import load_config
from ..models import HistoryEntry
from ..storage import HistoryDB
from . import app
from ._common import console, score_style

STATUS_STYLES = {"complete": "green", "failed": "red", "running": "yellow"}


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", min=1, max=1000, help="Audits to list"),
    host: Optional[str] = typer.Option(None, "--host", help="Only audits of this hostname"),
    json_output: bool = typer.Option(False, "--json", help="Print entries as JSON"),
    storage_dir: Optional[Path] = typer.Option(
        None, "--storage-dir", help="Storage directory (default from config)"
    ),
) -> None:
    """
    List past audits, newest first.

    [bold cyan]Examples:[/bold cyan]

      site-audit history

      site-audit history --host example.com --json -n 5
    """
    root = storage_dir or load_config().storage_path
    if not (root / "history.db").exists():
        console.print(f"[yellow]No history found[/yellow] in {root}. Run [bold]site-audit run URL[/bold] first.")
        raise typer.Exit(0)

    try:
        with HistoryDB(root) as db:
            entries = db.recent(limit, hostname=host)
    except Exception as e:
        console.print(f"[red]Could not read {root / 'history.db'}:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps([e.to_json_dict() for e in entries], indent=2))
        return
    if not entries:
        suffix = f" for {host}" if host else ""
        console.print(f"[yellow]No audits recorded{suffix}.[/yellow]")
        return
    console.print(_table(entries))


def _table(entries: list[HistoryEntry]) -> Table:
    table = Table(title="Audit history")
    table.add_column("Job", style="bold")
    table.add_column("Host", style="cyan")
    table.add_column("When")
    table.add_column("Status")
    table.add_column("Score", justify="right")

    for entry in entries:
        # 2024-01-02T03:04:05.678Z -> 2024-01-02 03:04:05
        when = entry.created_at.replace("T", " ").split(".")[0].rstrip("Z")
        status_style = STATUS_STYLES.get(entry.status, "white")
        if entry.overall_score is None:
            score = "[dim]-[/dim]"
        else:
            style = score_style(entry.overall_score)
            score = f"[{style}]{entry.overall_score:g}[/{style}]"
        table.add_row(
            entry.job_id,
            entry.hostname,
            when,
            f"[{status_style}]{entry.status}[/{status_style}]",
            score,
        )
    return table
