"""``deltaforge persist`` — record current fingerprints without detection."""

from __future__ import annotations

from pathlib import Path

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


def persist_cmd(
    model: Path = ModelOption,
    context: Path = ContextOption,
    store: Path = StoreOption,
    backend: str = BackendOption,
    targets: str = TargetsOption,
    match: TargetMatch = MatchOption,
    hash_name: str = HashOption,
) -> None:
    """Persist fingerprints for every target group (default: all groups)."""
    build = open_build(
        model_file=model,
        context_folder=context,
        store_path=store,
        store_backend=backend,
        target_groups=targets,
        target_match=match,
        hash_strategy=hash_name,
    )
    group_model = load_model(build)
    flt = build.target_filter
    names = [name for name in group_model.group_names if flt.accepts(name)]
    try:
        report = build.persist(group_model, names)
    except IncrementalStateError as exc:
        fail(exc, code=2)
    SelectionRenderer(console).print_persist(report)
