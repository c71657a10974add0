"""
Markdown reformatting through the text-transformation service.

Extracted Markdown is often messy (broken headings, stray whitespace, page
artifacts). Each Markdown document under the input directory is sent for
cleanup and written to the same relative path under the output directory.
Documents are independent, so they run as tasks of the batch scheduler and
a failure only affects its own document. Existing outputs are skipped.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from translate_md.config import Settings
from translate_md.exceptions import DocumentReadError, OutputWriteError
from translate_md.scanner import (
    DocumentEntry,
    MarkupKind,
    SourceDocument,
    find_documents,
    read_document,
)
from translate_md.translation.chunker import ChunkSplitter
from translate_md.translation.client import TranslationClient
from translate_md.translation.guard import IdempotencyGuard
from translate_md.translation.output import write_text
from translate_md.translation.pipeline import CHUNK_JOINER, TaskState
from translate_md.translation.scheduler import BatchScheduler

logger = logging.getLogger(__name__)


@dataclass
class FormatOutcome:
    """Final status of one reformatted document."""

    document: str
    state: TaskState
    destination: Path
    chunks: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is not TaskState.FAILED


def count_states(outcomes: Iterable[FormatOutcome]) -> Counter[TaskState]:
    return Counter(o.state for o in outcomes)


class MarkdownFormatter:
    """Reformats every Markdown document of a directory tree."""

    def __init__(
        self,
        settings: Settings,
        client: TranslationClient,
        output_dir: Path,
        *,
        scheduler: BatchScheduler | None = None,
        splitter: ChunkSplitter | None = None,
        guard: IdempotencyGuard | None = None,
        on_outcome: Callable[[FormatOutcome], None] | None = None,
    ):
        self.settings = settings
        self.client = client
        self.output_dir = Path(output_dir)
        self.scheduler = scheduler or BatchScheduler(settings.processing.concurrency)
        self.splitter = splitter or ChunkSplitter(settings.processing.chunk_size)
        self.guard = guard or IdempotencyGuard()
        self._on_outcome = on_outcome

    def discover(self, input_dir: Path) -> list[DocumentEntry]:
        """Markdown documents under ``input_dir``, leaving out output trees."""
        entries = find_documents(
            input_dir,
            recursive=self.settings.processing.recursive,
            exclude=[self.output_dir, self.settings.paths.resolve_output_dir(input_dir)],
        )
        return [e for e in entries if e.kind is MarkupKind.MARKDOWN]

    async def run(
        self,
        input_dir: Path,
        entries: Sequence[DocumentEntry] | None = None,
    ) -> list[FormatOutcome]:
        """
        Reformat documents in batches of the configured concurrency.

        Returns:
            One FormatOutcome per document, in input order.
        """
        input_dir = Path(input_dir)
        if entries is None:
            entries = self.discover(input_dir)
        if not entries:
            logger.info("No Markdown documents found in %s", input_dir)
            return []

        logger.info("Reformatting %d document(s) into %s", len(entries), self.output_dir)
        results = await self.scheduler.run(
            [partial(self.format_document, input_dir, entry) for entry in entries]
        )

        outcomes: list[FormatOutcome] = []
        for entry, result in zip(entries, results, strict=True):
            if result.ok and result.value is not None:
                outcomes.append(result.value)
                continue
            logger.error("%s failed unexpectedly: %s", entry.relative_path, result.error)
            outcome = FormatOutcome(
                document=str(entry.relative_path),
                state=TaskState.FAILED,
                destination=self.destination_for(entry),
                error=str(result.error),
            )
            self._notify(outcome)
            outcomes.append(outcome)

        counts = count_states(outcomes)
        logger.info(
            "Formatting finished: %s",
            ", ".join(f"{state.value}={counts[state]}" for state in TaskState if counts[state]),
        )
        return outcomes

    def destination_for(self, entry: DocumentEntry) -> Path:
        return self.output_dir / Path(*entry.relative_path.parts)

    async def format_document(self, input_dir: Path, entry: DocumentEntry) -> FormatOutcome:
        """Reformat one document: skip, read, request, write."""
        outcome = FormatOutcome(
            document=str(entry.relative_path),
            state=TaskState.PENDING,
            destination=self.destination_for(entry),
        )

        if await self.guard.should_skip(outcome.destination):
            logger.info("%s skipped: %s already exists", outcome.document, outcome.destination)
            return self._finish(outcome, TaskState.SKIPPED_EXISTS)

        try:
            document = await read_document(input_dir, entry)
        except DocumentReadError as e:
            logger.error("Skipping %s: %s", outcome.document, e.reason)
            outcome.error = e.reason
            return self._finish(outcome, TaskState.FAILED)

        try:
            text, outcome.chunks = await self._reformat(document)
        except Exception as e:
            logger.error(
                "%s formatting failed: %s: %s", outcome.document, type(e).__name__, e
            )
            outcome.error = str(e)
            return self._finish(outcome, TaskState.FAILED)

        try:
            await write_text(outcome.destination, text)
        except OutputWriteError as e:
            logger.error("%s write failed: %s", outcome.document, e)
            outcome.error = str(e)
            return self._finish(outcome, TaskState.FAILED)

        logger.info("%s formatted and saved to %s", outcome.document, outcome.destination)
        return self._finish(outcome, TaskState.DONE)

    async def _reformat(self, document: SourceDocument) -> tuple[str, int]:
        if document.length <= self.settings.processing.large_file_threshold:
            return await self.client.reformat(document.content), 1

        parts: list[str] = []
        chunks = list(self.splitter.split(document.content))
        for chunk in chunks:
            logger.debug(
                "%s chunk %d/%d (%d chars)",
                document.name,
                chunk.index + 1,
                len(chunks),
                len(chunk),
            )
            parts.append(await self.client.reformat(chunk.text))
        return CHUNK_JOINER.join(parts), len(chunks)

    def _finish(self, outcome: FormatOutcome, state: TaskState) -> FormatOutcome:
        outcome.state = state
        self._notify(outcome)
        return outcome

    def _notify(self, outcome: FormatOutcome) -> None:
        if self._on_outcome is not None:
            self._on_outcome(outcome)
