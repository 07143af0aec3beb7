"""deltaforge data models — all Pydantic v2, all frozen (immutable)."""

from deltaforge.models.config import BuildConfig, TargetMatch
from deltaforge.models.fingerprints import (
    ChangeStatus,
    FingerprintEntry,
    GroupSelection,
    PersistReport,
    ResourceIssue,
)
from deltaforge.models.resources import Group, GroupModel, Resource, ResourceType

__all__ = [
    # resources
    "ResourceType",
    "Resource",
    "Group",
    "GroupModel",
    # fingerprints
    "ChangeStatus",
    "FingerprintEntry",
    "ResourceIssue",
    "GroupSelection",
    "PersistReport",
    # config
    "BuildConfig",
    "TargetMatch",
]
