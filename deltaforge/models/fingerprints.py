"""Fingerprint entries and detection/persistence result models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeStatus(str, Enum):
    """Tri-state outcome of change detection for one resource."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    UNKNOWN = "unknown"  # content could not be located or hashed


class FingerprintEntry(BaseModel):
    """Last-known fingerprint of a resource."""

    model_config = ConfigDict(frozen=True)

    uri: str
    hash: str
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class ResourceIssue(BaseModel):
    """A resource whose change status could not be determined."""

    model_config = ConfigDict(frozen=True)

    group: str
    uri: str


class GroupSelection(BaseModel):
    """Result of evaluating candidate groups for changes.

    ``changed`` is in group declaration order.  ``skipped`` holds groups
    excluded by the target filter, which were never evaluated.
    """

    model_config = ConfigDict(frozen=True)

    changed: list[str] = []
    evaluated: list[str] = []
    skipped: list[str] = []
    unknown: list[ResourceIssue] = []

    @property
    def unchanged(self) -> list[str]:
        """Evaluated groups that were not selected."""
        selected = set(self.changed)
        return [name for name in self.evaluated if name not in selected]


class PersistReport(BaseModel):
    """Fingerprints written by a persistence pass, plus URIs that failed."""

    model_config = ConfigDict(frozen=True)

    written: dict[str, str] = {}
    failed: list[str] = []
