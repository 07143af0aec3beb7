"""Content fingerprinting strategies.

A hash strategy turns a byte stream into a deterministic fingerprint string.
Strategies are resolved by name from ``HASH_STRATEGIES`` once, when a build
is wired together.
"""

from __future__ import annotations

import hashlib
import zlib
from collections.abc import Callable
from typing import BinaryIO, Protocol, runtime_checkable

from deltaforge.core.errors import UnknownBackendError

_CHUNK_SIZE = 65536


@runtime_checkable
class HashStrategy(Protocol):
    """Protocol for fingerprinting backends.

    Implementations must return the same string for identical bytes across
    runs and processes.
    """

    def get_hash(self, stream: BinaryIO) -> str:
        """Consume *stream* and return its fingerprint."""
        ...


class HashlibStrategy:
    """Fingerprint with any ``hashlib`` algorithm, reading in chunks.

    Parameters
    ----------
    algorithm:
        A name accepted by ``hashlib.new`` (``"sha256"``, ``"sha1"``, ...).
    """

    def __init__(self, algorithm: str = "sha256") -> None:
        hashlib.new(algorithm)  # fail fast on an unsupported name
        self.algorithm = algorithm

    def get_hash(self, stream: BinaryIO) -> str:
        digest = hashlib.new(self.algorithm)
        for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
        return digest.hexdigest()

    def __repr__(self) -> str:
        return f"HashlibStrategy({self.algorithm!r})"


class Crc32Strategy:
    """Cheap CRC32 fingerprint, rendered as 8 lowercase hex digits."""

    def get_hash(self, stream: BinaryIO) -> str:
        crc = 0
        for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
            crc = zlib.crc32(chunk, crc)
        return f"{crc & 0xFFFFFFFF:08x}"

    def __repr__(self) -> str:
        return "Crc32Strategy()"


HASH_STRATEGIES: dict[str, Callable[[], HashStrategy]] = {
    "sha256": lambda: HashlibStrategy("sha256"),
    "sha1": lambda: HashlibStrategy("sha1"),
    "md5": lambda: HashlibStrategy("md5"),
    "crc32": Crc32Strategy,
}


def create_hash_strategy(name: str) -> HashStrategy:
    """Instantiate the hash strategy registered under *name*."""
    try:
        factory = HASH_STRATEGIES[name.strip().lower()]
    except KeyError:
        raise UnknownBackendError("hash strategy", name, list(HASH_STRATEGIES)) from None
    return factory()
