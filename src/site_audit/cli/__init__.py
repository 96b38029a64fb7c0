"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="site-audit",
    help="Site Audit - concurrent website auditor",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"site-audit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Audit websites for design, performance, SEO, accessibility and security."""


# Import subcommands to register them
from .run import run as _run  # noqa: F401, E402
from .serve import serve as _serve  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
