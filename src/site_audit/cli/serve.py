"""``site-audit serve``: run the HTTP API under uvicorn."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import ConfigurationError
from ..logging_config import setup_logging
from . import app
from ._common import EXIT_VALIDATION, console, resolve_config


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8765, "--port", "-p", min=1, max=65535, help="TCP port"),
    config: Optional[Path] = typer.Option(None, "-c", "--config", help="Config file"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Use local heuristics only"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logging"),
) -> None:
    """
    Serve POST /api/audit, GET /api/history and GET /api/health.

    [bold cyan]Examples:[/bold cyan]

      site-audit serve --port 8080
    """
    try:
        from ..server import _check_deps

        _check_deps()
    except ImportError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    try:
        settings = resolve_config(config=config, verbose=verbose, no_ai=no_ai)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_VALIDATION)

    import uvicorn

    from ..server.app import create_app
    from ..server.ratelimit import SlidingWindowRateLimiter
    from ..service import AuditService

    setup_logging(verbose=verbose)

    # the app lifespan closes the service
    asgi_app = create_app(
        AuditService(settings),
        SlidingWindowRateLimiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds),
        max_duration_seconds=settings.audit_max_duration_seconds,
        max_pages=settings.max_pages_per_request,
    )

    base = f"http://{host}:{port}"
    console.print(
        f"[bold]Site Audit API[/bold] on [link={base}]{base}[/link] "
        f"({settings.rate_limit_max_requests} audits per {settings.rate_limit_window_seconds:g}s per client)"
    )
    uvicorn.run(asgi_app, host=host, port=port, log_level="info" if verbose else "warning")
