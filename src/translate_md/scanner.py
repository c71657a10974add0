"""
Document discovery for translate-md.

Lists translatable documents under an input directory and reads them.
Listing is a pure function returning an owned list; nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

import aiofiles

from translate_md.exceptions import DocumentReadError


class MarkupKind(str, Enum):
    """Markup flavour of a source document."""

    MARKDOWN = "markdown"
    HTML = "html"

    @property
    def embeds_resources(self) -> bool:
        """Whether documents of this kind carry relative resource references."""
        return self is MarkupKind.HTML

    @property
    def format_hint(self) -> str:
        """Output format name passed to the translation service."""
        return "HTML" if self is MarkupKind.HTML else "Markdown"


# Supported file extensions and their markup kinds
SUPPORTED_EXTENSIONS = {
    ".md": MarkupKind.MARKDOWN,
    ".markdown": MarkupKind.MARKDOWN,
    ".html": MarkupKind.HTML,
    ".htm": MarkupKind.HTML,
}


@dataclass(frozen=True)
class DocumentEntry:
    """A document found on disk, before it is read."""

    relative_path: PurePosixPath
    kind: MarkupKind


@dataclass(frozen=True)
class SourceDocument:
    """A source document read into memory; immutable for the run."""

    relative_path: PurePosixPath
    source_path: Path
    content: str
    kind: MarkupKind

    @property
    def name(self) -> str:
        return str(self.relative_path)

    @property
    def length(self) -> int:
        return len(self.content)


def markup_kind_for(path: Path | PurePosixPath) -> MarkupKind | None:
    """Return the markup kind for a file name, or None if unsupported."""
    return SUPPORTED_EXTENSIONS.get(path.suffix.lower())


def find_documents(
    input_dir: Path,
    *,
    recursive: bool = True,
    exclude: Path | Iterable[Path] | None = None,
) -> list[DocumentEntry]:
    """
    List supported documents under a directory.

    Args:
        input_dir: Directory to scan.
        recursive: Whether to descend into subdirectories.
        exclude: Directory, or directories, to leave out (typically output
            trees living inside the input directory).

    Returns:
        Entries sorted by relative path.

    Raises:
        FileNotFoundError: If input_dir does not exist.
        NotADirectoryError: If input_dir is not a directory.
    """
    input_dir = Path(input_dir).resolve()
    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not input_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {input_dir}")

    if exclude is None:
        exclude = []
    elif isinstance(exclude, (str, Path)):
        exclude = [exclude]
    excluded = [Path(p).resolve() for p in exclude]
    pattern = "**/*" if recursive else "*"
    entries: list[DocumentEntry] = []

    for path in input_dir.glob(pattern):
        if not path.is_file():
            continue
        if any(path.resolve().is_relative_to(p) for p in excluded):
            continue
        kind = markup_kind_for(path)
        if kind is None:
            continue
        relative = PurePosixPath(path.relative_to(input_dir).as_posix())
        entries.append(DocumentEntry(relative_path=relative, kind=kind))

    return sorted(entries, key=lambda e: e.relative_path)


async def read_document(input_dir: Path, entry: DocumentEntry) -> SourceDocument:
    """
    Read one document as UTF-8 text.

    Raises:
        DocumentReadError: If the file cannot be opened or decoded.
    """
    source_path = Path(input_dir) / entry.relative_path
    try:
        async with aiofiles.open(source_path, encoding="utf-8") as f:
            content = await f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(source_path, str(e)) from e

    return SourceDocument(
        relative_path=entry.relative_path,
        source_path=source_path,
        content=content,
        kind=entry.kind,
    )
