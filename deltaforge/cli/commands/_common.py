"""Shared option handling for deltaforge commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from deltaforge.config import BuildSettings
from deltaforge.core.errors import DeltaforgeError
from deltaforge.core.incremental_build import IncrementalBuild
from deltaforge.core.model_loader import load_group_model
from deltaforge.models.config import TargetMatch
from deltaforge.models.resources import GroupModel

console = Console()

ModelOption = typer.Option(
    None, "--model", "-m", help="Group model JSON file (default: DELTAFORGE_MODEL_FILE)."
)
ContextOption = typer.Option(
    None, "--context", "-c", help="Folder that resource URIs resolve against."
)
StoreOption = typer.Option(
    None, "--store", "-s", help="Fingerprint store location."
)
BackendOption = typer.Option(
    None, "--backend", "-b", help="Fingerprint store backend: sqlite, json or memory."
)
TargetsOption = typer.Option(
    None, "--targets", "-t", help="Comma-separated group names, or 'all'."
)
MatchOption = typer.Option(
    None, "--match", help="How --targets is matched: exact or substring."
)
HashOption = typer.Option(
    None, "--hash", help="Hash strategy: sha256, sha1, md5 or crc32."
)


def open_build(
    *,
    model_file: Path | None = None,
    context_folder: Path | None = None,
    store_path: Path | None = None,
    store_backend: str | None = None,
    target_groups: str | None = None,
    target_match: TargetMatch | None = None,
    hash_strategy: str | None = None,
    **overrides: object,
) -> IncrementalBuild:
    """Create an ``IncrementalBuild`` from settings plus CLI overrides."""
    settings = BuildSettings()
    config = settings.to_build_config(
        model_file=model_file,
        context_folder=context_folder,
        store_path=store_path,
        store_backend=store_backend,
        target_groups=target_groups,
        target_match=target_match,
        hash_strategy=hash_strategy,
        **overrides,
    )
    try:
        return IncrementalBuild(config)
    except (DeltaforgeError, KeyError) as exc:
        fail(exc)


def load_model(build: IncrementalBuild) -> GroupModel:
    """Load the group model configured for *build*, exiting on error."""
    try:
        return load_group_model(build.config.model_file)
    except DeltaforgeError as exc:
        fail(exc)


def fail(exc: BaseException, code: int = 1) -> NoReturn:
    """Print *exc* and exit the command with *code*."""
    message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
    console.print(f"[bold red]Error:[/bold red] {escape(str(message))}")
    raise typer.Exit(code=code)
