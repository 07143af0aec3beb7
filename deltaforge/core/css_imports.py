"""Extraction of ``@import`` targets from CSS text.

The walker only looks one level deep; the change detector and the
fingerprint persister apply it across the whole closure, each with its own
visited-set guard.

Recognised forms::

    @import "a.css";
    @import 'a.css' screen;
    @import url(a.css);
    @import url("a.css") print;

Relative targets resolve against the directory of the importing URI.
Malformed occurrences are skipped; parsing never raises.
"""

from __future__ import annotations

import logging
import posixpath
import re
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

_COMMENT_RE = re.compile(r"/\*.*?(?:\*/|\Z)", re.DOTALL)
_IMPORT_KEYWORD_RE = re.compile(r"@import\b", re.IGNORECASE)
_URL_RE = re.compile(
    r"""\s*url\(\s*(?:"(?P<dq>[^"\n]*)"|'(?P<sq>[^'\n]*)'|(?P<bare>[^'")\s]*))\s*\)""",
    re.IGNORECASE,
)
_STRING_RE = re.compile(r"""\s*(?:"(?P<dq>[^"\n]*)"|'(?P<sq>[^'\n]*)')""")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


class CssImportWalker:
    """Find the ``@import`` targets directly referenced by a stylesheet."""

    def imports(self, css: str, base_uri: str = "") -> list[str]:
        """Return resolved import targets of *css* in first-seen order.

        Parameters
        ----------
        css:
            Stylesheet text.
        base_uri:
            URI of the stylesheet, used to resolve relative targets.
        """
        text = _COMMENT_RE.sub("", css.lstrip("\ufeff"))
        found: list[str] = []
        seen: set[str] = set()
        for match in _IMPORT_KEYWORD_RE.finditer(text):
            target = self._parse_target(text, match.end())
            if not target:
                snippet = text[match.start():match.start() + 60].splitlines()[0]
                logger.debug("Ignoring malformed @import in %s: %r", base_uri or "<css>", snippet)
                continue
            resolved = resolve_uri(base_uri, target)
            if resolved not in seen:
                seen.add(resolved)
                found.append(resolved)
        return found

    @staticmethod
    def _parse_target(text: str, pos: int) -> str | None:
        for pattern in (_URL_RE, _STRING_RE):
            match = pattern.match(text, pos)
            if match:
                value = match.group("dq")
                if value is None:
                    value = match.group("sq")
                if value is None:
                    value = match.groupdict().get("bare")
                value = (value or "").strip()
                return value or None
        return None


def resolve_uri(base_uri: str, target: str) -> str:
    """Resolve an ``@import`` *target* against the importing *base_uri*.

    Absolute targets (``/x.css``, ``http://...``, ``classpath:x.css``) are
    returned unchanged.
    """
    if target.startswith("/") or _SCHEME_RE.match(target):
        return target
    if not base_uri:
        return posixpath.normpath(target)
    if "://" in base_uri:
        return urljoin(base_uri, target)

    prefix = ""
    path = base_uri
    scheme = _SCHEME_RE.match(base_uri)
    if scheme:
        prefix, path = base_uri[:scheme.end()], base_uri[scheme.end():]
    joined = posixpath.normpath(posixpath.join(posixpath.dirname(path), target))
    if path.startswith("/") and not joined.startswith("/"):
        joined = "/" + joined
    return prefix + joined
