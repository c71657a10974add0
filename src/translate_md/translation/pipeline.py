"""
Translation pipeline for translate-md.

Documents are processed one at a time. For each document one LanguageTask is
built per configured language and the tasks run through the batch scheduler,
so languages of the same document translate concurrently up to the
configured limit. Inside a task, chunks are translated strictly in order.

Per task the states are::

    PENDING -> SKIPPED_EXISTS
    PENDING -> COPIED -> DONE                 (source language)
    PENDING -> SKIPPED_NO_TRANSLATE           ("don't translate")
    PENDING -> TRANSLATING -> TRANSLATED -> DONE
    TRANSLATING -> FAILED                     (nothing is written)
    TRANSLATED -> FAILED                      (write error)

For tag markup, the resources a document references are first copied into
the source-language directory, which every translation points back to.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import aiofiles.os

from translate_md.config import Settings, is_no_translate
from translate_md.exceptions import DocumentReadError, OutputWriteError
from translate_md.scanner import DocumentEntry, SourceDocument, find_documents, read_document
from translate_md.translation.assets import AssetPathRewriter, asset_prefix, reference_path
from translate_md.translation.chunker import ChunkSplitter
from translate_md.translation.client import TranslationClient, TranslationResult
from translate_md.translation.guard import IdempotencyGuard
from translate_md.translation.output import copy_file, write_text
from translate_md.translation.scheduler import BatchScheduler

logger = logging.getLogger(__name__)

# Separator used when reassembling translated chunks, whatever boundary
# (paragraph, sentence or line break) each chunk was cut at
CHUNK_JOINER = "\n\n"


class TaskState(str, Enum):
    """Lifecycle states of a LanguageTask."""

    PENDING = "pending"
    SKIPPED_EXISTS = "skipped_exists"
    SKIPPED_NO_TRANSLATE = "skipped_no_translate"
    COPIED = "copied"
    TRANSLATING = "translating"
    TRANSLATED = "translated"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class LanguageTask:
    """Translate (or copy, or skip) one document into one language."""

    document: SourceDocument
    language: str
    instructions: str
    destination: Path


@dataclass
class TaskOutcome:
    """Final in-memory status of a LanguageTask."""

    document: str
    language: str
    state: TaskState
    destination: Path
    copied: bool = False
    chunks: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is not TaskState.FAILED


@dataclass
class DocumentReport:
    """Outcomes for every language of one document."""

    document: str
    outcomes: list[TaskOutcome] = field(default_factory=list)
    read_error: str | None = None
    # Resource files copied into the source-language directory
    assets: list[Path] = field(default_factory=list)


@dataclass
class RunReport:
    """Summary of one pipeline run."""

    documents: list[DocumentReport] = field(default_factory=list)

    @property
    def outcomes(self) -> list[TaskOutcome]:
        return [o for d in self.documents for o in d.outcomes]

    def counts(self) -> Counter[TaskState]:
        """Number of tasks per final state."""
        return Counter(o.state for o in self.outcomes)

    @property
    def unreadable(self) -> list[DocumentReport]:
        return [d for d in self.documents if d.read_error is not None]

    @property
    def has_failures(self) -> bool:
        return bool(self.unreadable) or any(not o.succeeded for o in self.outcomes)


# Called once per finished LanguageTask (CLI progress display)
OutcomeCallback = Callable[[TaskOutcome], None] | None


class TranslationOrchestrator:
    """
    Drives documents through the translation pipeline.

    Resumable: a task whose destination already exists is skipped, so
    re-running after a crash only performs the missing work.
    """

    def __init__(
        self,
        settings: Settings,
        client: TranslationClient,
        output_dir: Path,
        *,
        scheduler: BatchScheduler | None = None,
        splitter: ChunkSplitter | None = None,
        guard: IdempotencyGuard | None = None,
        on_outcome: OutcomeCallback = None,
    ):
        """
        Args:
            settings: Loaded settings; treated as read-only.
            client: Translation client used for every request.
            output_dir: Root of the output tree (one subdirectory per language).
            scheduler: Batch scheduler; defaults to the configured concurrency.
            splitter: Chunk splitter; defaults to the configured chunk size.
            guard: Idempotency guard.
            on_outcome: Optional callback invoked as each task finishes.
        """
        self.settings = settings
        self.client = client
        self.output_dir = Path(output_dir)
        self.scheduler = scheduler or BatchScheduler(settings.processing.concurrency)
        self.splitter = splitter or ChunkSplitter(settings.processing.chunk_size)
        self.guard = guard or IdempotencyGuard()
        self._on_outcome = on_outcome

    # ------------------------------------------------------------------
    # Run / document level
    # ------------------------------------------------------------------

    def discover(self, input_dir: Path) -> list[DocumentEntry]:
        """List the documents under ``input_dir``, leaving out the output tree."""
        return find_documents(
            input_dir,
            recursive=self.settings.processing.recursive,
            exclude=self.output_dir,
        )

    async def run(
        self,
        input_dir: Path,
        entries: Sequence[DocumentEntry] | None = None,
    ) -> RunReport:
        """
        Process every document under ``input_dir``, one document at a time.

        Args:
            input_dir: Directory holding the source documents.
            entries: Documents to process; discovered from input_dir if None.

        Returns:
            RunReport with one DocumentReport per document.
        """
        input_dir = Path(input_dir)
        if entries is None:
            entries = self.discover(input_dir)

        report = RunReport()
        if not entries:
            logger.info("No documents found in %s", input_dir)
            return report

        logger.info(
            "Found %d document(s); languages: %s",
            len(entries),
            ", ".join(self.settings.languages),
        )

        for number, entry in enumerate(entries, start=1):
            logger.info("[%d/%d] Processing %s", number, len(entries), entry.relative_path)
            report.documents.append(await self.process_document(input_dir, entry))

        counts = report.counts()
        logger.info(
            "Run finished: %s",
            ", ".join(f"{state.value}={counts[state]}" for state in TaskState if counts[state])
            or "nothing to do",
        )
        return report

    async def process_document(self, input_dir: Path, entry: DocumentEntry) -> DocumentReport:
        """Read one document and run all of its LanguageTasks."""
        try:
            document = await read_document(input_dir, entry)
        except DocumentReadError as e:
            logger.error("Skipping %s: %s", entry.relative_path, e.reason)
            return DocumentReport(document=str(entry.relative_path), read_error=e.reason)

        assets: list[Path] = []
        if document.kind.embeds_resources:
            assets = await self.share_assets(input_dir, document)

        tasks = self.build_tasks(document)
        results = await self.scheduler.run([self._task_runner(task) for task in tasks])

        outcomes: list[TaskOutcome] = []
        for task, result in zip(tasks, results, strict=True):
            if result.ok and result.value is not None:
                outcomes.append(result.value)
                continue
            # run_task handles expected errors itself; anything else lands here
            logger.error(
                "%s [%s] failed unexpectedly: %s", document.name, task.language, result.error
            )
            outcome = TaskOutcome(
                document=document.name,
                language=task.language,
                state=TaskState.FAILED,
                destination=task.destination,
                error=str(result.error),
            )
            self._notify(outcome)
            outcomes.append(outcome)

        return DocumentReport(document=document.name, outcomes=outcomes, assets=assets)

    async def share_assets(self, input_dir: Path, document: SourceDocument) -> list[Path]:
        """
        Copy the resources a document references into ``<output>/<source_lang>/``.

        That is where the rewritten references of every translation point.
        Missing files and references leaving the input tree are logged and
        skipped; copies made by an earlier run are kept.

        Returns:
            Destinations copied by this call.
        """
        language = self.settings.source_language
        input_root = Path(input_dir).resolve()
        output_root = self.output_dir.resolve()
        shared_root = output_root / language
        document_dir = Path(*document.relative_path.parent.parts)
        rewriter = AssetPathRewriter(asset_prefix(document.relative_path, language))

        copied: list[Path] = []
        for reference in rewriter.references(document.content):
            path = reference_path(reference)
            if path is None:
                continue
            source = (input_root / document_dir / Path(*path.parts)).resolve()
            destination = (shared_root / document_dir / Path(*path.parts)).resolve()

            if (
                not source.is_relative_to(input_root)
                or source.is_relative_to(output_root)
                or not destination.is_relative_to(shared_root)
            ):
                logger.warning(
                    "%s: resource %s lies outside the input tree, not shared",
                    document.name,
                    reference,
                )
                continue
            if not await aiofiles.os.path.isfile(source):
                logger.warning("%s: resource %s not found", document.name, reference)
                continue
            if await self.guard.should_skip(destination):
                continue

            try:
                await copy_file(source, destination)
            except OutputWriteError as e:
                logger.warning("%s: could not share resource %s: %s", document.name, reference, e)
                continue
            copied.append(destination)

        if copied:
            logger.info(
                "%s: shared %d resource file(s) into %s", document.name, len(copied), shared_root
            )
        return copied

    def build_tasks(self, document: SourceDocument) -> list[LanguageTask]:
        """One LanguageTask per configured language, in configuration order."""
        return [
            LanguageTask(
                document=document,
                language=language,
                instructions=instructions,
                destination=self.destination_for(document, language),
            )
            for language, instructions in self.settings.languages.items()
        ]

    def destination_for(self, document: SourceDocument, language: str) -> Path:
        """``<output>/<language>/<relative path of the document>``."""
        return self.output_dir / language / Path(*document.relative_path.parts)

    # ------------------------------------------------------------------
    # Task level
    # ------------------------------------------------------------------

    async def resolve_state(self, task: LanguageTask) -> TaskState:
        """
        Decide what a pending task will do, without doing it.

        Returns SKIPPED_EXISTS, COPIED, SKIPPED_NO_TRANSLATE or TRANSLATING.
        """
        if await self.guard.should_skip(task.destination):
            return TaskState.SKIPPED_EXISTS
        if self.settings.is_source_language(task.language):
            return TaskState.COPIED
        if is_no_translate(task.instructions):
            return TaskState.SKIPPED_NO_TRANSLATE
        return TaskState.TRANSLATING

    def _task_runner(self, task: LanguageTask) -> Callable[[], Awaitable[TaskOutcome]]:
        async def runner() -> TaskOutcome:
            return await self.run_task(task)

        return runner

    async def run_task(self, task: LanguageTask) -> TaskOutcome:
        """Execute one LanguageTask through its state machine."""
        document = task.document
        outcome = TaskOutcome(
            document=document.name,
            language=task.language,
            state=TaskState.PENDING,
            destination=task.destination,
        )

        state = await self.resolve_state(task)

        if state is TaskState.SKIPPED_EXISTS:
            logger.info(
                "%s [%s] skipped: %s already exists",
                document.name,
                task.language,
                task.destination,
            )
            return self._finish(outcome, TaskState.SKIPPED_EXISTS)

        if state is TaskState.SKIPPED_NO_TRANSLATE:
            logger.info("%s [%s] skipped as per instructions", document.name, task.language)
            return self._finish(outcome, TaskState.SKIPPED_NO_TRANSLATE)

        if state is TaskState.COPIED:
            try:
                await copy_file(document.source_path, task.destination)
            except OutputWriteError as e:
                logger.error("%s [%s] copy failed: %s", document.name, task.language, e)
                outcome.error = str(e)
                return self._finish(outcome, TaskState.FAILED)
            outcome.copied = True
            logger.info(
                "%s [%s] copied source to %s", document.name, task.language, task.destination
            )
            return self._finish(outcome, TaskState.DONE)

        outcome.state = TaskState.TRANSLATING
        try:
            translated, outcome.chunks = await self._translate(task)
        except Exception as e:
            logger.error(
                "%s [%s] translation failed: %s: %s",
                document.name,
                task.language,
                type(e).__name__,
                e,
            )
            outcome.error = str(e)
            return self._finish(outcome, TaskState.FAILED)

        outcome.state = TaskState.TRANSLATED
        if document.kind.embeds_resources:
            rewriter = AssetPathRewriter(
                asset_prefix(document.relative_path, self.settings.source_language)
            )
            translated = rewriter.rewrite(translated)

        try:
            await write_text(task.destination, translated)
        except OutputWriteError as e:
            logger.error("%s [%s] write failed: %s", document.name, task.language, e)
            outcome.error = str(e)
            return self._finish(outcome, TaskState.FAILED)

        logger.info(
            "%s [%s] translated (%d chunk%s) and saved to %s",
            document.name,
            task.language,
            outcome.chunks,
            "" if outcome.chunks == 1 else "s",
            task.destination,
        )
        return self._finish(outcome, TaskState.DONE)

    async def _translate(self, task: LanguageTask) -> tuple[str, int]:
        """Translate the whole document, chunk by chunk if it is large."""
        document = task.document
        format_hint = document.kind.format_hint

        if document.length <= self.settings.processing.large_file_threshold:
            text = await self.client.translate(
                document.content, task.language, task.instructions, format_hint
            )
            return text, 1

        chunks = list(self.splitter.split(document.content))
        logger.info(
            "%s [%s] is large (%d chars), translating %d chunks",
            document.name,
            task.language,
            document.length,
            len(chunks),
        )

        results: list[TranslationResult] = []
        # Strictly sequential: chunk i+1 is sent only after chunk i returned
        for chunk in chunks:
            logger.debug(
                "%s [%s] chunk %d/%d (%d chars)",
                document.name,
                task.language,
                chunk.index + 1,
                len(chunks),
                len(chunk),
            )
            text = await self.client.translate(
                chunk.text, task.language, task.instructions, format_hint
            )
            results.append(TranslationResult(index=chunk.index, text=text))

        return CHUNK_JOINER.join(r.text for r in results), len(chunks)

    def _finish(self, outcome: TaskOutcome, state: TaskState) -> TaskOutcome:
        outcome.state = state
        self._notify(outcome)
        return outcome

    def _notify(self, outcome: TaskOutcome) -> None:
        if self._on_outcome is not None:
            self._on_outcome(outcome)
