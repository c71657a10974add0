"""
Translation pipeline for translate-md.

Provides:
- Boundary-aware chunking of large documents
- Batch scheduling with bounded concurrency
- A resumable per-document, per-language orchestrator
- Service-driven cleanup of extracted Markdown
"""

from translate_md.translation.assets import AssetPathRewriter, asset_prefix
from translate_md.translation.chunker import Chunk, ChunkSplitter, split_text
from translate_md.translation.client import TranslationClient, TranslationResult
from translate_md.translation.fences import remove_fence_lines, strip_code_fences
from translate_md.translation.formatter import FormatOutcome, MarkdownFormatter
from translate_md.translation.guard import IdempotencyGuard
from translate_md.translation.pipeline import (
    DocumentReport,
    LanguageTask,
    RunReport,
    TaskOutcome,
    TaskState,
    TranslationOrchestrator,
)
from translate_md.translation.scheduler import BatchScheduler, TaskResult

__all__ = [
    "AssetPathRewriter",
    "asset_prefix",
    "BatchScheduler",
    "TaskResult",
    "Chunk",
    "ChunkSplitter",
    "split_text",
    "IdempotencyGuard",
    "TranslationClient",
    "TranslationResult",
    "FormatOutcome",
    "MarkdownFormatter",
    "remove_fence_lines",
    "strip_code_fences",
    "DocumentReport",
    "LanguageTask",
    "RunReport",
    "TaskOutcome",
    "TaskState",
    "TranslationOrchestrator",
]
