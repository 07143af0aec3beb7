"""Main Typer application — imports and registers all CLI commands.

Entry point: ``deltaforge`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from deltaforge import __version__
from deltaforge.cli.commands.build import build_cmd
from deltaforge.cli.commands.changed import changed_cmd
from deltaforge.cli.commands.persist import persist_cmd
from deltaforge.cli.commands.store_cmds import clean_cmd, fingerprints_cmd
from deltaforge.config import BuildSettings

app = typer.Typer(
    name="deltaforge",
    help="deltaforge: incremental-build change detection for web resource groups.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="changed", help="Show which groups changed since the last build.")(changed_cmd)
app.command(name="build", help="Select groups to process and persist their fingerprints.")(build_cmd)
app.command(name="persist", help="Persist fingerprints for target groups.")(persist_cmd)
app.command(name="fingerprints", help="List stored fingerprints.")(fingerprints_cmd)
app.command(name="clean", help="Remove all stored fingerprints.")(clean_cmd)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"deltaforge {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (default: DELTAFORGE_LOG_LEVEL or INFO)."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """deltaforge: incremental-build change detection for web resource groups."""
    _configure_logging(log_level or BuildSettings().log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
