"""
Asset path rewriting for translated tag markup.

Translated documents live in ``<output>/<lang>/...`` while images and other
untranslated resources are shared from the source-language directory
``<output>/<source_lang>/...``. Relative resource references are prefixed so
they resolve into that directory, and the referenced files are copied there
from the input tree.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import PurePosixPath
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup, Tag

# "http:", "https:", "data:", "mailto:" ...
_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

# Tags whose href points at a resource rather than a navigation target
_HREF_TAGS = ["link"]


def asset_prefix(relative_path: PurePosixPath | str, source_language: str) -> str:
    """
    Build the prefix leading from a translated document to its source assets.

    ``guide/intro.html`` in ``<output>/fr/guide/`` needs ``../../en/guide/`` to
    reach ``<output>/en/guide/``.
    """
    parents = PurePosixPath(relative_path).parent.parts
    climb = "../" * (len(parents) + 1)
    subdir = "".join(f"{part}/" for part in parents)
    return f"{climb}{source_language}/{subdir}"


def reference_path(reference: str) -> PurePosixPath | None:
    """
    File path part of a relative reference, without query or fragment.

    Returns None when nothing file-like is left.
    """
    path = unquote(urlsplit(reference.strip()).path)
    if not path or path.endswith("/"):
        return None
    return PurePosixPath(path)


def _resource_attributes(soup: BeautifulSoup) -> Iterator[tuple[Tag, str]]:
    for tag in soup.find_all(src=True):
        yield tag, "src"
    for tag in soup.find_all(_HREF_TAGS, href=True):
        yield tag, "href"


class AssetPathRewriter:
    """Prefixes relative resource references; idempotent."""

    def __init__(self, prefix: str):
        if not prefix:
            raise ValueError("Asset prefix must not be empty")
        self.prefix = prefix

    def needs_rewrite(self, path: str) -> bool:
        """True for relative paths that have not been rewritten yet."""
        path = path.strip()
        if not path or path.startswith(self.prefix):
            return False
        if path.startswith(("#", "/", "?")):
            return False
        return _SCHEME.match(path) is None

    def references(self, markup: str) -> list[str]:
        """Relative resource references in ``markup`` that would be rewritten."""
        soup = BeautifulSoup(markup, "html.parser")
        found: list[str] = []
        for tag, attr in _resource_attributes(soup):
            value = tag[attr]
            if self.needs_rewrite(value) and value.strip() not in found:
                found.append(value.strip())
        return found

    def rewrite(self, markup: str) -> str:
        """
        Return ``markup`` with relative resource references prefixed.

        Markup without anything to rewrite is returned unchanged; otherwise
        it is re-serialized by the HTML parser.
        """
        soup = BeautifulSoup(markup, "html.parser")
        changed = False
        for tag, attr in _resource_attributes(soup):
            value = tag[attr]
            if self.needs_rewrite(value):
                tag[attr] = f"{self.prefix}{value.strip()}"
                changed = True
        return str(soup) if changed else markup
