"""
Boundary-aware text splitting.

Long documents are cut into chunks no longer than the service's input limit,
preferring paragraph breaks, then sentence ends, then line breaks. Chunks
partition the text losslessly: joining them in order gives back the input.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

PARAGRAPH_BREAK = "\n\n"
LINE_BREAK = "\n"
# Sentence-ending punctuation followed by a space
_SENTENCE_END = re.compile(r"[.!?] ")


@dataclass(frozen=True)
class Chunk:
    """One contiguous segment of a document."""

    index: int
    text: str

    def __len__(self) -> int:
        return len(self.text)


def _find_boundary(text: str, start: int, end: int) -> int | None:
    """
    Return the offset just past the best boundary inside ``text[start:end]``.

    The returned offset is always greater than ``start``; None means no
    boundary exists and the caller must hard-cut.
    """
    pos = text.rfind(PARAGRAPH_BREAK, start, end)
    if pos != -1:
        return pos + len(PARAGRAPH_BREAK)

    last_sentence = None
    for match in _SENTENCE_END.finditer(text, start, end):
        last_sentence = match
    if last_sentence is not None:
        return last_sentence.end()

    pos = text.rfind(LINE_BREAK, start, end)
    if pos != -1:
        return pos + len(LINE_BREAK)

    return None


def split_text(text: str, max_size: int) -> Iterator[Chunk]:
    """
    Split text into ordered chunks of at most ``max_size`` characters.

    Args:
        text: Text to split.
        max_size: Maximum chunk length in characters.

    Yields:
        Chunks in document order. Empty text yields nothing.

    Raises:
        ValueError: If max_size is not positive.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")

    return _split(text, max_size)


def _split(text: str, max_size: int) -> Iterator[Chunk]:
    cursor = 0
    index = 0
    length = len(text)

    while cursor < length:
        candidate_end = cursor + max_size
        if candidate_end >= length:
            yield Chunk(index, text[cursor:])
            return

        end = _find_boundary(text, cursor, candidate_end)
        if end is None:
            end = candidate_end

        yield Chunk(index, text[cursor:end])
        cursor = end
        index += 1


class ChunkSplitter:
    """Splits documents into chunks of a fixed maximum size."""

    def __init__(self, max_size: int):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size

    def split(self, text: str) -> Iterator[Chunk]:
        """Split ``text``; see :func:`split_text`."""
        return split_text(text, self.max_size)
