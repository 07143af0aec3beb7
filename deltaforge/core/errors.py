"""Exception taxonomy for change detection and fingerprint persistence.

Only ``FingerprintStoreError`` (and its driver-level wrapper
``IncrementalStateError``) is fatal.  ``LocateError`` is caught at the
resource that raised it and surfaces as an UNKNOWN status or a failed
persistence entry.  CSS parse problems and import cycles are never raised.
"""

from __future__ import annotations


class DeltaforgeError(RuntimeError):
    """Base class for all deltaforge errors."""


class LocateError(DeltaforgeError):
    """Raised when a resource's content cannot be located or read."""

    def __init__(self, uri: str, reason: str = "") -> None:
        self.uri = uri
        self.reason = reason
        message = f"Cannot locate resource '{uri}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class FingerprintStoreError(DeltaforgeError):
    """Raised when the fingerprint store cannot be read or written."""


class IncrementalStateError(DeltaforgeError):
    """Raised when incremental state cannot be determined safely.

    The build step must abort: neither "process everything" nor
    "process nothing" is a safe fallback.
    """


class GroupModelError(DeltaforgeError):
    """Raised when a group model is missing, malformed, or inconsistent."""


class GroupProcessingError(DeltaforgeError):
    """Raised when one or more groups failed in the processing stage."""

    def __init__(self, failures: dict[str, BaseException]) -> None:
        self.failures = failures
        names = ", ".join(sorted(failures))
        super().__init__(f"Processing failed for group(s): {names}")


class UnknownBackendError(KeyError):
    """Raised when a registry lookup names an unknown backend."""

    def __init__(self, kind: str, name: str, available: list[str]) -> None:
        self.kind = kind
        self.name = name
        self.available = available
        super().__init__(
            f"Unknown {kind} '{name}'. Available: {', '.join(sorted(available))}"
        )
