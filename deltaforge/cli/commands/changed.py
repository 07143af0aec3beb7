"""``deltaforge changed`` — report which groups changed since the last build.

Runs change detection only.  Nothing is written to the fingerprint store,
so the command can be repeated without moving the baseline.
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


def changed_cmd(
    model: Path = ModelOption,
    context: Path = ContextOption,
    store: Path = StoreOption,
    backend: str = BackendOption,
    targets: str = TargetsOption,
    match: TargetMatch = MatchOption,
    hash_name: str = HashOption,
    names_only: bool = typer.Option(
        False, "--names-only", "-n", help="Print only changed group names, one per line."
    ),
    strict_unknown: bool = typer.Option(
        False,
        "--strict-unknown",
        help="Do not select groups whose only problem is an unreadable resource.",
    ),
) -> None:
    """Show the groups whose resources (or CSS imports) changed."""
    build = open_build(
        model_file=model,
        context_folder=context,
        store_path=store,
        store_backend=backend,
        target_groups=targets,
        target_match=match,
        hash_strategy=hash_name,
        unknown_as_changed=False if strict_unknown else None,
    )
    group_model = load_model(build)
    try:
        selection = build.detect_changed(group_model)
    except IncrementalStateError as exc:
        fail(exc, code=2)

    if names_only:
        for name in selection.changed:
            typer.echo(name)
        return

    SelectionRenderer(console).print_selection(selection, group_model.group_names)
