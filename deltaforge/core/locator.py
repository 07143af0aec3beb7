"""Resource locators — turn a resource URI into a readable byte stream.

Every locator either returns an open binary stream or raises
``LocateError``.  Callers own the stream and must close it; locators never
keep a reference to what they hand out.

Supported URI forms for ``FileSystemLocator``:

* ``css/a.css``      — relative to the context folder
* ``/css/a.css``     — context-relative (leading slash)
* ``file:///abs/a.css`` — absolute filesystem path
"""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable
from urllib.parse import unquote, urlparse

from deltaforge.core.errors import LocateError

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceLocator(Protocol):
    """Protocol for resource content backends."""

    def locate(self, uri: str) -> BinaryIO:
        """Return a readable byte stream for *uri* or raise ``LocateError``."""
        ...


class FileSystemLocator:
    """Locate resources on disk below a context folder.

    Parameters
    ----------
    context_folder:
        Directory that relative and ``/``-prefixed URIs resolve against.
    """

    def __init__(self, context_folder: Path) -> None:
        self.context_folder = Path(context_folder)

    def resolve(self, uri: str) -> Path:
        """Map *uri* to a filesystem path without touching the disk."""
        if uri.startswith("file:"):
            return Path(unquote(urlparse(uri).path))
        relative = uri.split("?", 1)[0].split("#", 1)[0].lstrip("/")
        return self.context_folder / relative

    def locate(self, uri: str) -> BinaryIO:
        path = self.resolve(uri)
        try:
            return path.open("rb")
        except OSError as exc:
            raise LocateError(uri, f"{exc.strerror or exc} ({path})") from exc

    def __repr__(self) -> str:
        return f"FileSystemLocator({str(self.context_folder)!r})"


class InMemoryLocator:
    """Serve resources from a mapping of URI to content.

    Useful for drivers that already hold resource bytes, and for tests.
    ``str`` values are encoded as UTF-8.
    """

    def __init__(self, resources: Mapping[str, bytes | str] | None = None) -> None:
        self._resources: dict[str, bytes] = {}
        for uri, content in (resources or {}).items():
            self.put(uri, content)

    def put(self, uri: str, content: bytes | str) -> None:
        """Add or replace the content served for *uri*."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._resources[uri] = content

    def remove(self, uri: str) -> None:
        """Stop serving *uri*; later lookups raise ``LocateError``."""
        self._resources.pop(uri, None)

    def locate(self, uri: str) -> BinaryIO:
        try:
            return io.BytesIO(self._resources[uri])
        except KeyError:
            raise LocateError(uri, "not found in memory") from None


class CompositeLocator:
    """Try several locators in order and return the first stream found.

    Raises ``LocateError`` listing every delegate's failure when none of
    them can serve the URI.
    """

    def __init__(self, locators: Sequence[ResourceLocator]) -> None:
        if not locators:
            raise ValueError("CompositeLocator needs at least one locator")
        self._locators = list(locators)

    def locate(self, uri: str) -> BinaryIO:
        reasons: list[str] = []
        for locator in self._locators:
            try:
                return locator.locate(uri)
            except LocateError as exc:
                logger.debug("%r could not locate %s: %s", locator, uri, exc.reason)
                reasons.append(exc.reason or type(locator).__name__)
        raise LocateError(uri, "; ".join(reasons))
