"""``deltaforge build`` — resolve target groups and record their fingerprints.

This is the build-step entry point: it selects the groups to process
(changed groups for an incremental build, otherwise the target filter),
persists fresh fingerprints for them, and prints the group names so the
processing stage can pick them up.
"""

from __future__ import annotations

from pathlib import Path

import typer

from deltaforge.cli.commands._common import (
    BackendOption,
    ContextOption,
    HashOption,
    MatchOption,
    ModelOption,
    StoreOption,
    TargetsOption,
    console,
    fail,
    load_model,
    open_build,
)
from deltaforge.core.errors import IncrementalStateError
from deltaforge.models.config import TargetMatch
from deltaforge.monitor.renderer import SelectionRenderer


def build_cmd(
    model: Path = ModelOption,
    context: Path = ContextOption,
    store: Path = StoreOption,
    backend: str = BackendOption,
    targets: str = TargetsOption,
    match: TargetMatch = MatchOption,
    hash_name: str = HashOption,
    full: bool = typer.Option(
        False, "--full", help="Skip change detection and take every target group."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Print only the group names, one per line."
    ),
) -> None:
    """Select groups to process and persist their fingerprints."""
    build = open_build(
        model_file=model,
        context_folder=context,
        store_path=store,
        store_backend=backend,
        target_groups=targets,
        target_match=match,
        hash_strategy=hash_name,
        incremental_build_enabled=False if full else None,
    )
    group_model = load_model(build)
    try:
        names = build.target_group_names(group_model)
    except IncrementalStateError as exc:
        fail(exc, code=2)

    if quiet:
        for name in names:
            typer.echo(name)
        return

    renderer = SelectionRenderer(console)
    if build.last_selection is not None:
        renderer.print_selection(build.last_selection, group_model.group_names)
    if build.last_persist is not None:
        renderer.print_persist(build.last_persist)
    if names:
        console.print(f"[bold]Groups to process:[/bold] {', '.join(names)}")
    else:
        console.print("[dim]Nothing to process (nothing configured or nothing changed).[/dim]")
