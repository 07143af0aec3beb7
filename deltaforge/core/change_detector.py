"""Per-resource change detection with early exit over the CSS import closure.

A resource is CHANGED when its current fingerprint differs from the stored
one (a never-seen resource has no stored fingerprint, so it is always
CHANGED).  An unchanged CSS resource is still CHANGED when anything in its
transitive ``@import`` closure is CHANGED.  Content that cannot be located
or hashed is UNKNOWN, never UNCHANGED.

The walk is depth-first, in import order, and stops at the first CHANGED
resource.  Each URI is
evaluated at most once per top-level ``detect`` call, so ``@import`` cycles
terminate.  Status is threaded through return values; nothing is signalled
by exceptions.

Store read failures (``FingerprintStoreError``) are not handled here: they
propagate to the driver, which must abort.
"""

from __future__ import annotations

import io
import logging

from deltaforge.core.css_imports import CssImportWalker
from deltaforge.core.errors import LocateError
from deltaforge.core.fingerprint_store import FingerprintStore
from deltaforge.core.hasher import HashStrategy
from deltaforge.core.locator import ResourceLocator
from deltaforge.models.fingerprints import ChangeStatus
from deltaforge.models.resources import Resource, ResourceType

logger = logging.getLogger(__name__)


def read_resource(locator: ResourceLocator, uri: str) -> bytes:
    """Read the full content of *uri*, mapping I/O failures to ``LocateError``."""
    try:
        with locator.locate(uri) as stream:
            return stream.read()
    except LocateError:
        raise
    except OSError as exc:
        raise LocateError(uri, str(exc)) from exc


def fingerprint_of(hash_strategy: HashStrategy, uri: str, content: bytes) -> str:
    """Fingerprint *content*, mapping hashing I/O failures to ``LocateError``."""
    try:
        return hash_strategy.get_hash(io.BytesIO(content))
    except OSError as exc:
        raise LocateError(uri, f"hashing failed: {exc}") from exc


def decode_css(content: bytes) -> str:
    """Decode stylesheet bytes for import scanning (UTF-8, lenient)."""
    return content.decode("utf-8-sig", errors="replace")


class ChangeDetector:
    """Decide whether a resource changed since its fingerprint was stored.

    Parameters
    ----------
    store:
        Baseline fingerprints from the previous build.  Only read.
    locator:
        Source of current resource content.
    hash_strategy:
        Fingerprinting backend; must match the one used to persist.
    import_walker:
        CSS ``@import`` extractor.  A default walker is used if omitted.
    unknown_as_changed:
        How ``is_changed`` maps an UNKNOWN status to a boolean.
    """

    def __init__(
        self,
        store: FingerprintStore,
        locator: ResourceLocator,
        hash_strategy: HashStrategy,
        import_walker: CssImportWalker | None = None,
        *,
        unknown_as_changed: bool = True,
    ) -> None:
        self.store = store
        self.locator = locator
        self.hash_strategy = hash_strategy
        self.import_walker = import_walker or CssImportWalker()
        self.unknown_as_changed = unknown_as_changed

    def detect(self, resource: Resource) -> ChangeStatus:
        """Return the tri-state change status of *resource*.

        The import closure is walked depth-first with an explicit stack, in
        the order the imports appear, so chain depth is bounded only by
        memory.  The first CHANGED resource ends the walk; otherwise any
        UNKNOWN resource makes the result UNKNOWN.
        """
        status = ChangeStatus.UNCHANGED
        visited: set[str] = set()
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
                logger.warning("Change status unknown for %s: %s", current.uri, exc.reason or exc)
                status = ChangeStatus.UNKNOWN
                continue

            previous = self.store.get(current.uri)
            logger.debug(
                "fingerprint <current, previous> for %s: <%s, %s>",
                current.uri, fingerprint, previous,
            )
            if fingerprint != previous:
                if current is not resource:
                    logger.debug("Import %s of %s changed", current.uri, resource.uri)
                return ChangeStatus.CHANGED

            if current.type is ResourceType.CSS:
                imports = self.import_walker.imports(decode_css(content), current.uri)
                if imports:
                    logger.debug("Found @import(s) in %s: %s", current.uri, ", ".join(imports))
                # reversed so the first import is evaluated first
                stack.extend(Resource.css(uri) for uri in reversed(imports))
        return status

    def is_changed(self, resource: Resource) -> bool:
        """Boolean view of ``detect``; UNKNOWN follows ``unknown_as_changed``."""
        status = self.detect(resource)
        if status is ChangeStatus.UNKNOWN:
            return self.unknown_as_changed
        return status is ChangeStatus.CHANGED
