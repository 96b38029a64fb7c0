"""``site-audit run``: audit one page and print the report."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel
from rich.table import Table

from ..exceptions import ConfigurationError, RequiredCollectorFailure, ValidationFailure
from ..logging_config import setup_logging
from ..report.models import FinalReport
from ..service import AuditService
from . import app
from ._common import (
    EXIT_REQUIRED_DATA,
    EXIT_VALIDATION,
    RATING_STYLES,
    console,
    resolve_config,
    score_style,
)


@app.command()
def run(
    url: str = typer.Argument(..., help="Page to audit, e.g. example.com"),
    label: str = typer.Option(
        "homepage", "--label", "-l", help="Page label: homepage or product-page"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Use local heuristics only"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Errors only"),
) -> None:
    """
    Run a full audit of URL.

    [bold cyan]Examples:[/bold cyan]

      site-audit run example.com

      site-audit run https://shop.example.com/p/1 --label product-page --json
    """
    if label not in ("homepage", "product-page"):
        console.print(f"[red]Error:[/red] unknown label {label!r}")
        raise typer.Exit(EXIT_VALIDATION)

    try:
        settings = resolve_config(config=config, verbose=verbose, quiet=quiet, no_ai=no_ai)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_VALIDATION)

    logger = setup_logging(verbose=verbose, quiet=quiet or json_output)

    async def _audit() -> FinalReport:
        async with AuditService(settings) as service:
            return await service.audit(url, label)

    try:
        report = asyncio.run(_audit())
    except ValidationFailure as e:
        console.print(f"[red]Invalid URL:[/red] {e.message}")
        raise typer.Exit(EXIT_VALIDATION)
    except RequiredCollectorFailure as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Audit failed:[/red] {e}")
        raise typer.Exit(EXIT_REQUIRED_DATA)
    except KeyboardInterrupt:
        console.print("\n[yellow]Audit interrupted[/yellow]")
        raise typer.Exit(130)

    if json_output:
        print(json.dumps(report.to_json_dict(), indent=2))
    else:
        _output_rich(report)


def _output_rich(report: FinalReport) -> None:
    style = score_style(report.overall_score)
    console.print()
    console.print(
        Panel(
            report.executive_summary,
            title=f"{report.hostname} | [{style}]{report.overall_score:g}/100[/{style}]",
            subtitle=f"{report.audit_duration_ms / 1000:.1f}s",
        )
    )

    table = Table(title="Sections", show_lines=False, pad_edge=True)
    table.add_column("Section", style="bold")
    table.add_column("Rating")
    table.add_column("Score", justify="right")
    table.add_column("Findings", justify="right")
    for section in report.sections:
        rating_style = RATING_STYLES[section.rating]
        table.add_row(
            section.title,
            f"[{rating_style}]{section.rating.value}[/{rating_style}]",
            "-" if section.score is None else f"{section.score:g}",
            str(len(section.findings)),
        )
    console.print(table)

    if report.top_fixes:
        console.print("\n[bold]Top fixes[/bold]")
        for i, fix in enumerate(report.top_fixes, 1):
            console.print(f"  {i}. [bold]{fix.title}[/bold] [dim]({fix.section}, {fix.impact})[/dim]")
            console.print(f"     {fix.description}")

    if report.failed_collectors:
        console.print(f"\n[yellow]Data unavailable:[/yellow] {', '.join(report.failed_collectors)}")
    console.print()
