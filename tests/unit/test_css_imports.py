"""Tests for CssImportWalker and URI resolution."""

from __future__ import annotations

import pytest

from deltaforge.core.css_imports import CssImportWalker, resolve_uri


@pytest.fixture
def walker() -> CssImportWalker:
    return CssImportWalker()


class TestImportForms:
    @pytest.mark.parametrize(
        "css",
        [
            '@import "b.css";',
            "@import 'b.css';",
            "@import url(b.css);",
            '@import url("b.css");',
            "@import url( 'b.css' );",
            '@import url("b.css") screen and (min-width: 600px);',
            "@import 'b.css' print;",
            "@IMPORT 'b.css';",
        ],
    )
    def test_recognised_forms(self, walker, css):
        assert walker.imports(css) == ["b.css"]

    def test_order_is_preserved(self, walker):
        css = "@import 'z.css';\n@import 'a.css';\n@import 'm.css';"
        assert walker.imports(css) == ["z.css", "a.css", "m.css"]

    def test_duplicates_reported_once(self, walker):
        css = "@import 'a.css';\n@import url(a.css);\n@import 'b.css';"
        assert walker.imports(css) == ["a.css", "b.css"]

    def test_commented_imports_ignored(self, walker):
        css = "/* @import 'old.css'; */\n@import 'new.css';\n/*\n@import 'x.css';\n*/"
        assert walker.imports(css) == ["new.css"]

    def test_unterminated_comment_runs_to_end(self, walker):
        css = "@import 'kept.css';\n/* open comment\n@import 'hidden.css';\nbody {}"
        assert walker.imports(css) == ["kept.css"]

    def test_no_imports(self, walker):
        assert walker.imports("body { color: red; }") == []

    def test_byte_order_mark_ignored(self, walker):
        assert walker.imports("\ufeff@import 'b.css';") == ["b.css"]


class TestResolution:
    def test_relative_to_importer_directory(self, walker):
        assert walker.imports("@import 'b.css';", "css/a.css") == ["css/b.css"]

    def test_parent_directory(self, walker):
        assert walker.imports("@import '../lib/b.css';", "css/sub/a.css") == ["css/lib/b.css"]

    def test_context_relative_base(self):
        assert resolve_uri("/css/a.css", "b.css") == "/css/b.css"

    def test_absolute_target_unchanged(self):
        assert resolve_uri("css/a.css", "/root.css") == "/root.css"

    def test_scheme_target_unchanged(self):
        assert resolve_uri("css/a.css", "http://cdn.example.com/x.css") == "http://cdn.example.com/x.css"

    def test_url_base(self):
        assert (
            resolve_uri("http://example.com/css/a.css", "../b.css")
            == "http://example.com/b.css"
        )

    def test_prefixed_base_keeps_prefix(self):
        assert resolve_uri("classpath:css/a.css", "b.css") == "classpath:css/b.css"

    def test_no_base(self):
        assert resolve_uri("", "./b.css") == "b.css"


class TestMalformed:
    @pytest.mark.parametrize(
        "css",
        [
            "@import ;",
            "@import url();",
            "@import url('b.css';",
            '@import "b.css;\nbody{}',
            "@import;",
        ],
    )
    def test_malformed_occurrence_ignored(self, walker, css):
        assert walker.imports(css) == []

    def test_malformed_does_not_abort_rest_of_file(self, walker):
        css = "@import ;\n@import url();\n@import 'good.css';"
        assert walker.imports(css) == ["good.css"]
