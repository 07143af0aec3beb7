"""Incremental build driver — wires the detection engine into a build step.

The ``IncrementalBuild`` decides which groups a build step must process,
records fresh fingerprints for them, and optionally hands each group to an
external processor (the minification/bundling pipeline is not part of this
package).

Phase ordering is strict: change detection for every group finishes before
the single-threaded persistence pass starts, and only then does processing
(possibly parallel across groups) begin.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any

from deltaforge.core.change_detector import ChangeDetector
from deltaforge.core.css_imports import CssImportWalker
from deltaforge.core.errors import (
    FingerprintStoreError,
    GroupProcessingError,
    IncrementalStateError,
)
from deltaforge.core.fingerprint_store import FingerprintStore, create_store
from deltaforge.core.group_selector import GroupSelector, TargetFilter
from deltaforge.core.hasher import HashStrategy, create_hash_strategy
from deltaforge.core.locator import FileSystemLocator, ResourceLocator
from deltaforge.core.persister import FingerprintPersister
from deltaforge.models.config import BuildConfig, TargetMatch
from deltaforge.models.fingerprints import GroupSelection, PersistReport
from deltaforge.models.resources import Group, GroupModel

logger = logging.getLogger(__name__)

GroupProcessor = Callable[[Group], Any]


class IncrementalBuild:
    """Build-step driver around change detection and fingerprint persistence.

    Parameters
    ----------
    config:
        Build options.  Uses defaults if not provided.
    store:
        Fingerprint store.  Created from ``config.store_backend`` if omitted.
    locator:
        Resource locator.  Defaults to a ``FileSystemLocator`` over
        ``config.context_folder``.
    hash_strategy:
        Fingerprinting backend.  Resolved from ``config.hash_strategy`` if
        omitted.
    """

    def __init__(
        self,
        config: BuildConfig | None = None,
        *,
        store: FingerprintStore | None = None,
        locator: ResourceLocator | None = None,
        hash_strategy: HashStrategy | None = None,
    ) -> None:
        self.config = config or BuildConfig()
        if store is None:
            try:
                store = create_store(self.config.store_backend, self.config.store_path)
            except FingerprintStoreError as exc:
                raise IncrementalStateError(
                    f"Cannot open {self.config.store_backend} fingerprint store "
                    f"{self.config.store_path}: {exc}. Run 'clean' to reset the store."
                ) from exc
        self.store = store
        self.locator = locator or FileSystemLocator(self.config.context_folder)
        self.hash_strategy = hash_strategy or create_hash_strategy(self.config.hash_strategy)

        walker = CssImportWalker()
        self.detector = ChangeDetector(
            self.store,
            self.locator,
            self.hash_strategy,
            walker,
            unknown_as_changed=self.config.unknown_as_changed,
        )
        self.selector = GroupSelector(self.detector)
        self.persister = FingerprintPersister(
            self.store, self.locator, self.hash_strategy, walker
        )
        self.last_selection: GroupSelection | None = None
        self.last_persist: PersistReport | None = None

    @property
    def target_filter(self) -> TargetFilter:
        return TargetFilter(self.config.target_groups, self.config.target_match)

    # ------------------------------------------------------------------
    # Target resolution
    # ------------------------------------------------------------------

    def detect_changed(self, model: GroupModel) -> GroupSelection:
        """Run change detection over *model* under the configured filter.

        Raises
        ------
        IncrementalStateError
            If the fingerprint store cannot be read.
        """
        try:
            selection = self.selector.select(model.groups, self.target_filter)
        except FingerprintStoreError as exc:
            logger.error("Incremental state unavailable, aborting build step: %s", exc)
            raise IncrementalStateError(
                f"Cannot determine incremental state from fingerprint store "
                f"({self.config.store_backend}: {self.config.store_path}): {exc}. "
                f"No groups were selected; run 'clean' to reset the store."
            ) from exc
        self.last_selection = selection
        return selection

    def target_group_names(self, model: GroupModel) -> list[str]:
        """Resolve which groups to process, then persist their fingerprints.

        - incremental build enabled: groups with detected changes
        - no filter (or ``"all"``): every model group
        - otherwise: the groups named by the filter, in the order listed
          (model order for substring matching)
        """
        flt = self.target_filter
        if self.config.incremental_build_enabled:
            names = self.detect_changed(model).changed
        elif flt.accepts_all:
            names = model.group_names
        elif flt.match is TargetMatch.SUBSTRING:
            names = [name for name in model.group_names if flt.accepts(name)]
        else:
            names = [name for name in flt.names if model.get_group(name) is not None]
            missing = [name for name in flt.names if model.get_group(name) is None]
            if missing:
                logger.warning("Target group(s) not in model: %s", ", ".join(missing))

        self.persist(model, names)

        if not names:
            logger.info("Nothing to process (nothing configured or nothing changed since last build).")
        else:
            logger.info("The following groups will be processed: %s", ", ".join(names))
        return names

    def persist(self, model: GroupModel, group_names: list[str]) -> PersistReport:
        """Persist fingerprints for the named groups of *model*."""
        groups: list[Group] = []
        for name in group_names:
            group = model.get_group(name)
            if group is None:
                logger.warning("Cannot persist fingerprints for unknown group '%s'", name)
                continue
            groups.append(group)
        try:
            report = self.persister.persist(groups)
        except FingerprintStoreError as exc:
            raise IncrementalStateError(
                f"Cannot record fingerprints in "
                f"{self.config.store_backend} store {self.config.store_path}: {exc}"
            ) from exc
        self.last_persist = report
        return report

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def run(self, model: GroupModel, processor: GroupProcessor | None = None) -> list[str]:
        """Resolve targets, persist fingerprints, then process each group.

        Returns the names of the processed groups.
        """
        names = self.target_group_names(model)
        if processor is None or not names:
            return names

        groups = [g for g in (model.get_group(n) for n in names) if g is not None]
        if self.config.parallel_processing and len(groups) > 1:
            self._process_parallel(groups, processor)
        else:
            failures: dict[str, BaseException] = {}
            for group in groups:
                try:
                    processor(group)
                except Exception as exc:
                    logger.error("Processing failed for group %s: %s", group.name, exc)
                    failures[group.name] = exc
            if failures:
                raise GroupProcessingError(failures)
        return names

    def _process_parallel(self, groups: list[Group], processor: GroupProcessor) -> None:
        failures: dict[str, BaseException] = {}
        workers = max(1, min(self.config.max_workers, len(groups)))
        logger.debug("Processing %d group(s) with %d worker(s)", len(groups), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(processor, group): group.name for group in groups}
            for future in as_completed(futures):
                name = futures[future]
                exc = future.exception()
                if exc is not None:
                    logger.error("Processing failed for group %s: %s", name, exc)
                    failures[name] = exc
        if failures:
            raise GroupProcessingError(failures)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def clean(self) -> None:
        """Remove every persisted fingerprint (explicit cleanup request)."""
        self.store.clear()
        logger.info("Fingerprint store cleared (%s)", self.config.store_backend)
