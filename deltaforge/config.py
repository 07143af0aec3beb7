"""Runtime settings — env-driven defaults for build drivers.

Reads from a .env file and DELTAFORGE_* environment variables.  The
detection engine never reads settings directly; drivers turn them into a
frozen ``BuildConfig`` with ``to_build_config()``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from deltaforge.models.config import BuildConfig, TargetMatch


class BuildSettings(BaseSettings):
    """Build settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export DELTAFORGE_LOG_LEVEL=DEBUG
        export DELTAFORGE_STORE_BACKEND=json
        export DELTAFORGE_STORE_PATH=target/fingerprints.json
        export DELTAFORGE_TARGET_GROUPS=core,theme
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DELTAFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Inputs
    context_folder: Path = Path("src/main/webapp")
    model_file: Path = Path("groups.json")

    # Incremental state
    store_backend: str = "sqlite"
    store_path: Path = Path(".deltaforge/fingerprints.db")
    hash_strategy: str = "sha256"
    incremental_build_enabled: bool = True
    unknown_as_changed: bool = True

    # Target selection
    target_groups: str | None = None
    target_match: TargetMatch = TargetMatch.EXACT

    # Processing
    parallel_processing: bool = False
    max_workers: int = 4

    def to_build_config(self, **overrides: object) -> BuildConfig:
        """Freeze these settings into a ``BuildConfig``.

        Keyword arguments whose value is ``None`` are ignored, so CLI
        options left unset fall through to the settings.
        """
        values = self.model_dump(exclude={"log_level"})
        values.update({k: v for k, v in overrides.items() if v is not None})
        return BuildConfig(**values)
