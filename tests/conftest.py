"""Shared test fixtures for deltaforge."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

import pytest

from deltaforge.core.change_detector import ChangeDetector
from deltaforge.core.fingerprint_store import InMemoryFingerprintStore
from deltaforge.core.group_selector import GroupSelector
from deltaforge.core.locator import InMemoryLocator
from deltaforge.core.persister import FingerprintPersister
from deltaforge.models.resources import Group, Resource


class FirstLineHash:
    """Test hash strategy: the fingerprint is the content's first line.

    Lets a test spell out fingerprints directly in resource content, e.g.
    ``"h1\\n@import 'b.css';"`` fingerprints as ``"h1"``.
    """

    def get_hash(self, stream: BinaryIO) -> str:
        return stream.read().decode("utf-8").split("\n", 1)[0].strip()


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def store() -> InMemoryFingerprintStore:
    """Provide an empty in-memory fingerprint store."""
    return InMemoryFingerprintStore()


@pytest.fixture
def locator() -> InMemoryLocator:
    """Provide an empty in-memory locator; tests ``put`` their resources."""
    return InMemoryLocator()


@pytest.fixture
def hash_strategy() -> FirstLineHash:
    return FirstLineHash()


@pytest.fixture
def detector(
    store: InMemoryFingerprintStore, locator: InMemoryLocator, hash_strategy: FirstLineHash
) -> ChangeDetector:
    """Provide a ChangeDetector wired to the test store and locator."""
    return ChangeDetector(store, locator, hash_strategy)


@pytest.fixture
def selector(detector: ChangeDetector) -> GroupSelector:
    return GroupSelector(detector)


@pytest.fixture
def persister(
    store: InMemoryFingerprintStore, locator: InMemoryLocator, hash_strategy: FirstLineHash
) -> FingerprintPersister:
    return FingerprintPersister(store, locator, hash_strategy)


# ---------------------------------------------------------------------------
# Group factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_group() -> Callable[..., Group]:
    """Factory fixture: build a Group from a name and resource URIs."""

    def _factory(name: str, *uris: str) -> Group:
        return Group(name=name, resources=[Resource.create(uri) for uri in uris])

    return _factory


@pytest.fixture
def webapp(tmp_dir: Path) -> Path:
    """A small on-disk web application with nested CSS imports.

    Layout::

        webapp/
            css/main.css       @import "base/reset.css"; @import url(theme.css);
            css/base/reset.css
            css/theme.css      @import "base/reset.css";
            js/app.js
            js/vendor.js
            groups.json        core: main.css + app.js, vendor: vendor.js
    """
    root = tmp_dir / "webapp"
    (root / "css" / "base").mkdir(parents=True)
    (root / "js").mkdir()
    (root / "css" / "main.css").write_text(
        '@import "base/reset.css";\n@import url(theme.css);\nbody { color: black; }\n',
        encoding="utf-8",
    )
    (root / "css" / "base" / "reset.css").write_text(
        "* { margin: 0; }\n", encoding="utf-8"
    )
    (root / "css" / "theme.css").write_text(
        '@import "base/reset.css";\nh1 { color: red; }\n', encoding="utf-8"
    )
    (root / "js" / "app.js").write_text("console.log('app');\n", encoding="utf-8")
    (root / "js" / "vendor.js").write_text("var vendor = 1;\n", encoding="utf-8")
    (root / "groups.json").write_text(
        json.dumps({
            "groups": [
                {"name": "core", "resources": ["css/main.css", "js/app.js"]},
                {"name": "vendor", "resources": [{"uri": "js/vendor.js", "type": "js"}]},
            ]
        }),
        encoding="utf-8",
    )
    return root
