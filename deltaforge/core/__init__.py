"""Change-detection and fingerprint-persistence engine."""

from deltaforge.core.change_detector import ChangeDetector
from deltaforge.core.css_imports import CssImportWalker
from deltaforge.core.fingerprint_store import (
    FingerprintStore,
    InMemoryFingerprintStore,
    JsonFingerprintStore,
    SqliteFingerprintStore,
    create_store,
)
from deltaforge.core.group_selector import GroupSelector, TargetFilter
from deltaforge.core.hasher import HashStrategy, create_hash_strategy
from deltaforge.core.incremental_build import IncrementalBuild
from deltaforge.core.locator import (
    CompositeLocator,
    FileSystemLocator,
    InMemoryLocator,
    ResourceLocator,
)
from deltaforge.core.persister import FingerprintPersister

__all__ = [
    "ChangeDetector",
    "CompositeLocator",
    "CssImportWalker",
    "FileSystemLocator",
    "FingerprintPersister",
    "FingerprintStore",
    "GroupSelector",
    "HashStrategy",
    "InMemoryFingerprintStore",
    "InMemoryLocator",
    "IncrementalBuild",
    "JsonFingerprintStore",
    "ResourceLocator",
    "SqliteFingerprintStore",
    "TargetFilter",
    "create_hash_strategy",
    "create_store",
]
