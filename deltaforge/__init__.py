"""deltaforge: incremental-build change detection for web resource groups.

Selects the resource groups whose content, or whose transitively
``@import``-ed CSS, changed since the previous build, and records fresh
content fingerprints for everything that will be reprocessed.
"""

__version__ = "0.1.0"
__description__ = (
    "Fingerprint-based change detection for incremental web resource builds"
)

from deltaforge.core.incremental_build import IncrementalBuild
from deltaforge.models.config import BuildConfig

__all__ = ["IncrementalBuild", "BuildConfig", "__version__"]
