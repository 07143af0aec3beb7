"""``deltaforge fingerprints`` and ``deltaforge clean`` — inspect or reset the store."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from deltaforge.cli.commands._common import (
    BackendOption,
    StoreOption,
    console,
    fail,
    open_build,
)
from deltaforge.config import BuildSettings
from deltaforge.core.errors import DeltaforgeError, FingerprintStoreError, IncrementalStateError
from deltaforge.core.fingerprint_store import destroy_store
from deltaforge.core.incremental_build import IncrementalBuild
from deltaforge.monitor.renderer import SelectionRenderer

logger = logging.getLogger(__name__)


def fingerprints_cmd(
    store: Path = StoreOption,
    backend: str = BackendOption,
) -> None:
    """List the fingerprints currently stored."""
    build = open_build(store_path=store, store_backend=backend)
    try:
        entries = build.store.entries()
    except FingerprintStoreError as exc:
        fail(exc, code=2)
    SelectionRenderer(console).print_entries(entries)


def clean_cmd(
    store: Path = StoreOption,
    backend: str = BackendOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Remove every stored fingerprint; the next build processes all groups."""
    if not yes:
        typer.confirm("Remove all stored fingerprints?", abort=True)
    config = BuildSettings().to_build_config(store_path=store, store_backend=backend)
    try:
        IncrementalBuild(config).clean()
    except IncrementalStateError as exc:
        # The store could not even be opened; remove its files instead.
        logger.warning("%s", exc)
        try:
            destroy_store(config.store_backend, config.store_path)
        except (DeltaforgeError, KeyError) as destroy_exc:
            fail(destroy_exc, code=2)
    except (FingerprintStoreError, KeyError) as exc:
        fail(exc, code=2)
    console.print("[bold green]Fingerprint store cleared.[/bold green]")
