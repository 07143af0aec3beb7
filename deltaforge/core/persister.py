"""Recording of current fingerprints for everything about to be processed.

Every resource of every given group gets its current fingerprint written,
changed or not.  CSS resources pull in their whole ``@import`` closure.
Resources that cannot be read are logged and skipped; the pass itself never
fails because of them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from deltaforge.core.change_detector import decode_css, fingerprint_of, read_resource
from deltaforge.core.css_imports import CssImportWalker
from deltaforge.core.errors import LocateError
from deltaforge.core.fingerprint_store import FingerprintStore
from deltaforge.core.hasher import HashStrategy
from deltaforge.core.locator import ResourceLocator
from deltaforge.models.fingerprints import PersistReport
from deltaforge.models.resources import Group, Resource, ResourceType

logger = logging.getLogger(__name__)


class FingerprintPersister:
    """Write fresh fingerprints into a ``FingerprintStore``.

    Parameters
    ----------
    store:
        Destination store.  Written to, never read.
    locator:
        Source of current resource content.
    hash_strategy:
        Fingerprinting backend; must match the detector's.
    import_walker:
        CSS ``@import`` extractor.
    """

    def __init__(
        self,
        store: FingerprintStore,
        locator: ResourceLocator,
        hash_strategy: HashStrategy,
        import_walker: CssImportWalker | None = None,
    ) -> None:
        self.store = store
        self.locator = locator
        self.hash_strategy = hash_strategy
        self.import_walker = import_walker or CssImportWalker()

    def persist(self, groups: Iterable[Group]) -> PersistReport:
        """Persist fingerprints for all resources in *groups* and flush."""
        written: dict[str, str] = {}
        failed: list[str] = []
        visited: set[str] = set()
        for group in groups:
            for resource in group.resources:
                self._persist(resource, visited, written, failed)
        self.store.flush()
        logger.info(
            "Persisted %d fingerprint(s); %d resource(s) could not be read",
            len(written), len(failed),
        )
        return PersistReport(written=written, failed=failed)

    def _persist(
        self,
        resource: Resource,
        visited: set[str],
        written: dict[str, str],
        failed: list[str],
    ) -> None:
        stack: list[Resource] = [resource]
        while stack:
            current = stack.pop()
            if current.uri in visited:
                continue
            visited.add(current.uri)

            try:
                content = read_resource(self.locator, current.uri)
                fingerprint = fingerprint_of(self.hash_strategy, current.uri, content)
            except LocateError as exc:
                logger.warning("Could not fingerprint %s: %s", current.uri, exc.reason or exc)
                failed.append(current.uri)
                continue

            self.store.set(current.uri, fingerprint)
            written[current.uri] = fingerprint
            logger.debug("Persist fingerprint for %s: %s", current.uri, fingerprint)

            if current.type is ResourceType.CSS:
                imports = self.import_walker.imports(decode_css(content), current.uri)
                stack.extend(Resource.css(uri) for uri in reversed(imports))
