"""Build configuration models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class TargetMatch(str, Enum):
    """How a target-group filter is matched against group names."""

    EXACT = "exact"
    SUBSTRING = "substring"  # name occurs anywhere in the raw filter string


class BuildConfig(BaseModel):
    """Immutable options for a single build invocation.

    Built from ``BuildSettings`` or CLI options by the driver; the detection
    engine itself only ever sees plain constructor arguments.
    """

    model_config = ConfigDict(frozen=True)

    context_folder: Path = Path("src/main/webapp")
    model_file: Path = Path("groups.json")
    store_backend: str = "sqlite"
    store_path: Path = Path(".deltaforge/fingerprints.db")
    hash_strategy: str = "sha256"
    target_groups: str | None = None  # comma-separated names, or None/"all"
    target_match: TargetMatch = TargetMatch.EXACT
    incremental_build_enabled: bool = True
    parallel_processing: bool = False
    max_workers: int = 4
    unknown_as_changed: bool = True
