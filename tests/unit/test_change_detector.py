"""Tests for ChangeDetector — fingerprint comparison and CSS import closure."""

from __future__ import annotations

import io
from typing import BinaryIO

import pytest

from deltaforge.core.change_detector import ChangeDetector
from deltaforge.core.errors import FingerprintStoreError
from deltaforge.core.fingerprint_store import InMemoryFingerprintStore
from deltaforge.core.locator import InMemoryLocator
from deltaforge.models.fingerprints import ChangeStatus
from deltaforge.models.resources import Resource, ResourceType


class CountingLocator(InMemoryLocator):
    """Records every URI that gets located."""

    def __init__(self, resources=None) -> None:
        super().__init__(resources)
        self.calls: list[str] = []

    def locate(self, uri: str) -> BinaryIO:
        self.calls.append(uri)
        return super().locate(uri)


class TestDirectChanges:
    def test_never_seen_resource_is_changed(self, detector, locator):
        locator.put("a.js", "h1")
        assert detector.detect(Resource.create("a.js")) is ChangeStatus.CHANGED
        assert detector.is_changed(Resource.create("a.js")) is True

    def test_matching_fingerprint_is_unchanged(self, detector, locator, store):
        locator.put("a.js", "h1")
        store.set("a.js", "h1")
        assert detector.detect(Resource.create("a.js")) is ChangeStatus.UNCHANGED
        assert detector.is_changed(Resource.create("a.js")) is False

    def test_different_fingerprint_is_changed(self, detector, locator, store):
        locator.put("a.js", "h1-new")
        store.set("a.js", "h1")
        assert detector.detect(Resource.create("a.js")) is ChangeStatus.CHANGED

    def test_non_css_imports_are_not_followed(self, detector, locator, store):
        locator.put("a.js", "h1\n@import 'b.css';")
        store.set("a.js", "h1")
        # b.css is unknown to the locator; following it would yield UNKNOWN.
        assert detector.detect(Resource.create("a.js")) is ChangeStatus.UNCHANGED

    def test_detection_does_not_write_to_store(self, detector, locator, store):
        locator.put("a.css", "h1\n@import 'b.css';")
        locator.put("b.css", "h2")
        detector.detect(Resource.create("a.css"))
        assert store.as_dict() == {}


class TestImportClosure:
    def test_changed_direct_import(self, detector, locator, store):
        locator.put("a.css", "h1\n@import 'b.css';")
        locator.put("b.css", "h2x")
        store.set("a.css", "h1")
        store.set("b.css", "h2")
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.CHANGED

    def test_unchanged_closure(self, detector, locator, store):
        locator.put("a.css", "h1\n@import 'b.css';")
        locator.put("b.css", "h2")
        store.set("a.css", "h1")
        store.set("b.css", "h2")
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.UNCHANGED

    def test_changed_transitive_import(self, detector, locator, store):
        locator.put("a.css", "h1\n@import 'b.css';")
        locator.put("b.css", "h2\n@import 'c.css';")
        locator.put("c.css", "h3-new")
        store.set("a.css", "h1")
        store.set("b.css", "h2")
        store.set("c.css", "h3")
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.CHANGED

    def test_imports_resolved_relative_to_importer(self, detector, locator, store):
        locator.put("css/a.css", "h1\n@import url(../shared/b.css);")
        locator.put("shared/b.css", "h2-new")
        store.set("css/a.css", "h1")
        store.set("shared/b.css", "h2")
        assert detector.detect(Resource.create("css/a.css")) is ChangeStatus.CHANGED

    def test_imported_resource_treated_as_css(self, detector, locator, store):
        # The import target has no .css extension but is still scanned.
        locator.put("a.css", "h1\n@import 'b.less';")
        locator.put("b.less", "h2\n@import 'c.css';")
        locator.put("c.css", "h3-new")
        store.set("a.css", "h1")
        store.set("b.less", "h2")
        store.set("c.css", "h3")
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.CHANGED

    def test_directly_changed_css_skips_import_scan(self, store, hash_strategy):
        locator = CountingLocator({"a.css": "h1-new\n@import 'b.css';", "b.css": "h2"})
        store.set("a.css", "h1")
        detector = ChangeDetector(store, locator, hash_strategy)
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.CHANGED
        assert locator.calls == ["a.css"]

    def test_short_circuits_on_first_changed_import(self, store, hash_strategy):
        locator = CountingLocator({
            "a.css": "h1\n@import 'b.css';\n@import 'c.css';",
            "b.css": "h2-new",
            "c.css": "h3",
        })
        store.set("a.css", "h1")
        store.set("b.css", "h2")
        store.set("c.css", "h3")
        detector = ChangeDetector(store, locator, hash_strategy)
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.CHANGED
        assert "c.css" not in locator.calls

    def test_shared_import_visited_once(self, store, hash_strategy):
        locator = CountingLocator({
            "a.css": "h1\n@import 'b.css';\n@import 'c.css';",
            "b.css": "h2\n@import 'shared.css';",
            "c.css": "h3\n@import 'shared.css';",
            "shared.css": "h4",
        })
        for uri, h in {"a.css": "h1", "b.css": "h2", "c.css": "h3", "shared.css": "h4"}.items():
            store.set(uri, h)
        detector = ChangeDetector(store, locator, hash_strategy)
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.UNCHANGED
        assert locator.calls.count("shared.css") == 1

    def test_each_detect_call_uses_fresh_visited_set(self, store, hash_strategy):
        locator = CountingLocator({"a.css": "h1"})
        store.set("a.css", "h1")
        detector = ChangeDetector(store, locator, hash_strategy)
        detector.detect(Resource.create("a.css"))
        detector.detect(Resource.create("a.css"))
        assert locator.calls == ["a.css", "a.css"]


class TestUnknownStatus:
    def test_missing_resource_is_unknown(self, detector):
        assert detector.detect(Resource.create("missing.js")) is ChangeStatus.UNKNOWN

    def test_unknown_is_changed_by_default(self, detector):
        assert detector.is_changed(Resource.create("missing.js")) is True

    def test_unknown_policy_can_be_lenient(self, store, locator, hash_strategy):
        detector = ChangeDetector(store, locator, hash_strategy, unknown_as_changed=False)
        assert detector.is_changed(Resource.create("missing.js")) is False

    def test_missing_import_is_unknown_not_unchanged(self, detector, locator, store):
        locator.put("a.css", "h1\n@import 'gone.css';")
        store.set("a.css", "h1")
        store.set("gone.css", "h2")
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.UNKNOWN

    def test_changed_import_wins_over_unknown_import(self, detector, locator, store):
        locator.put("a.css", "h1\n@import 'gone.css';\n@import 'b.css';")
        locator.put("b.css", "h2-new")
        store.set("a.css", "h1")
        store.set("b.css", "h2")
        assert detector.detect(Resource.create("a.css")) is ChangeStatus.CHANGED

    def test_hashing_io_failure_is_unknown(self, store, locator):
        class BrokenHash:
            def get_hash(self, stream: BinaryIO) -> str:
                raise OSError("disk error")

        locator.put("a.js", "h1")
        store.set("a.js", "h1")
        detector = ChangeDetector(store, locator, BrokenHash())
        assert detector.detect(Resource.create("a.js")) is ChangeStatus.UNKNOWN

    def test_stream_read_failure_is_unknown(self, store, hash_strategy):
        class FailingStream(io.BytesIO):
            def read(self, *args):
                raise OSError("connection reset")

        class FlakyLocator:
            def locate(self, uri: str) -> BinaryIO:
                return FailingStream(b"")

        detector = ChangeDetector(store, FlakyLocator(), hash_strategy)
        assert detector.detect(Resource.create("a.js")) is ChangeStatus.UNKNOWN


class TestStoreFailures:
    def test_store_read_failure_propagates(self, locator, hash_strategy):
        class BrokenStore(InMemoryFingerprintStore):
            def get(self, uri: str) -> str | None:
                raise FingerprintStoreError("store offline")

        locator.put("a.js", "h1")
        detector = ChangeDetector(BrokenStore(), locator, hash_strategy)
        with pytest.raises(FingerprintStoreError, match="offline"):
            detector.detect(Resource.create("a.js"))


def test_resource_css_factory_sets_type():
    assert Resource.css("x.less").type is ResourceType.CSS
