"""Persisted mapping from resource URI to last-known fingerprint.

The detection engine treats a store as an opaque key/value surface:
``get`` (``None`` for never-seen URIs), ``set`` (last write wins) and
``clear``.  Which backend is used is decided by the build driver through
``STORE_BACKENDS``.

Backends
--------
- ``memory`` — process-local dict; nothing survives the process.
- ``json``   — a JSON object on disk, loaded eagerly, written on ``flush()``.
- ``sqlite`` — one row per URI, WAL journal, written through on ``set``.

Every backend failure surfaces as ``FingerprintStoreError``.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

from deltaforge.core.errors import FingerprintStoreError, UnknownBackendError
from deltaforge.models.fingerprints import FingerprintEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class FingerprintStore(Protocol):
    """Protocol every fingerprint backend satisfies."""

    def get(self, uri: str) -> str | None:
        """Return the stored fingerprint for *uri*, or ``None``."""
        ...

    def set(self, uri: str, fingerprint: str) -> None:
        """Record *fingerprint* as the current baseline for *uri*."""
        ...

    def clear(self) -> None:
        """Drop every stored fingerprint."""
        ...

    def flush(self) -> None:
        """Make pending writes durable."""
        ...

    def entries(self) -> list[FingerprintEntry]:
        """Return all stored entries ordered by URI."""
        ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class InMemoryFingerprintStore:
    """Dict-backed store, seeded from an optional mapping."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, str] = dict(initial or {})

    def get(self, uri: str) -> str | None:
        with self._lock:
            return self._data.get(uri)

    def set(self, uri: str, fingerprint: str) -> None:
        with self._lock:
            self._data[uri] = fingerprint

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def flush(self) -> None:
        pass

    def entries(self) -> list[FingerprintEntry]:
        with self._lock:
            items = sorted(self._data.items())
        return [FingerprintEntry(uri=uri, hash=h) for uri, h in items]

    def as_dict(self) -> dict[str, str]:
        """Copy of the current mapping."""
        with self._lock:
            return dict(self._data)


# ---------------------------------------------------------------------------
# JSON file
# ---------------------------------------------------------------------------


class JsonFingerprintStore(InMemoryFingerprintStore):
    """On-disk JSON map, suitable for a build directory.

    Parameters
    ----------
    path:
        JSON file location.  A missing file means an empty store; an
        unreadable or malformed file raises ``FingerprintStoreError``.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        super().__init__(self._load())

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FingerprintStoreError(
                f"Cannot read fingerprint store {self._path}: {exc}"
            ) from exc
        if not isinstance(raw, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
        ):
            raise FingerprintStoreError(
                f"Fingerprint store {self._path} is not a string-to-string JSON object"
            )
        return raw

    def flush(self) -> None:
        data = self.as_dict()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, sort_keys=True, indent=2), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as exc:
            raise FingerprintStoreError(
                f"Cannot write fingerprint store {self._path}: {exc}"
            ) from exc
        logger.debug("Flushed %d fingerprint(s) to %s", len(data), self._path)

    def clear(self) -> None:
        super().clear()
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise FingerprintStoreError(
                f"Cannot remove fingerprint store {self._path}: {exc}"
            ) from exc


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------

_CREATE_FINGERPRINTS = """
CREATE TABLE IF NOT EXISTS fingerprints (
    uri         TEXT PRIMARY KEY,
    hash        TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


class SqliteFingerprintStore:
    """Durable incremental-build state backed by SQLite.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise FingerprintStoreError(
                f"Cannot open fingerprint store {self._db_path}: {exc}"
            ) from exc

    @property
    def path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_FINGERPRINTS)
            conn.commit()

    def get(self, uri: str) -> str | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT hash FROM fingerprints WHERE uri = ?", (uri,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise FingerprintStoreError(
                f"Cannot read fingerprint for '{uri}' from {self._db_path}: {exc}"
            ) from exc
        return row[0] if row else None

    def set(self, uri: str, fingerprint: str) -> None:
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO fingerprints (uri, hash, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(uri) DO UPDATE SET
                        hash = excluded.hash,
                        updated_at = excluded.updated_at
                    """,
                    (uri, fingerprint, datetime.now(timezone.utc).isoformat()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise FingerprintStoreError(
                f"Cannot write fingerprint for '{uri}' to {self._db_path}: {exc}"
            ) from exc

    def clear(self) -> None:
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM fingerprints")
                conn.commit()
        except sqlite3.Error as exc:
            raise FingerprintStoreError(
                f"Cannot clear fingerprint store {self._db_path}: {exc}"
            ) from exc

    def flush(self) -> None:
        # Every set() commits.
        pass

    def entries(self) -> list[FingerprintEntry]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT uri, hash, updated_at FROM fingerprints ORDER BY uri ASC"
                ).fetchall()
        except sqlite3.Error as exc:
            raise FingerprintStoreError(
                f"Cannot list fingerprint store {self._db_path}: {exc}"
            ) from exc
        return [
            FingerprintEntry(uri=uri, hash=h, updated_at=updated_at)
            for uri, h, updated_at in rows
        ]


# ---------------------------------------------------------------------------
# Backend registry
# ---------------------------------------------------------------------------

STORE_BACKENDS: dict[str, Callable[[Path], FingerprintStore]] = {
    "memory": lambda _path: InMemoryFingerprintStore(),
    "json": JsonFingerprintStore,
    "sqlite": SqliteFingerprintStore,
}


def create_store(backend: str, path: Path) -> FingerprintStore:
    """Instantiate the store backend registered under *backend*."""
    try:
        factory = STORE_BACKENDS[backend.strip().lower()]
    except KeyError:
        raise UnknownBackendError("store backend", backend, list(STORE_BACKENDS)) from None
    return factory(Path(path))


def destroy_store(backend: str, path: Path) -> list[Path]:
    """Delete the files behind a store without opening it.

    Used to recover from a store too damaged to load.  Returns the paths
    that were removed.
    """
    name = backend.strip().lower()
    if name not in STORE_BACKENDS:
        raise UnknownBackendError("store backend", backend, list(STORE_BACKENDS))
    path = Path(path)
    if name == "memory":
        return []
    candidates = [path]
    if name == "sqlite":
        candidates += [path.with_name(path.name + "-wal"), path.with_name(path.name + "-shm")]
    removed: list[Path] = []
    for candidate in candidates:
        try:
            if candidate.exists():
                candidate.unlink()
                removed.append(candidate)
        except OSError as exc:
            raise FingerprintStoreError(f"Cannot remove {candidate}: {exc}") from exc
    logger.warning("Destroyed %s fingerprint store at %s", name, path)
    return removed
