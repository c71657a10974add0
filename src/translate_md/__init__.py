"""
translate-md: resumable multi-language translation of extracted documents.

This package provides tools for:
- Splitting large Markdown/HTML documents into service-sized chunks
- Translating every document into several languages concurrently
- Skipping work whose output already exists, so interrupted runs resume
"""

__version__ = "0.1.0"

from translate_md.config import Settings, load_settings
from translate_md.exceptions import (
    ConfigError,
    DocumentReadError,
    OutputWriteError,
    PermanentServiceError,
    TranslateMdError,
    TranslationError,
    TransientServiceError,
)
from translate_md.scanner import MarkupKind, SourceDocument, find_documents
from translate_md.translation import (
    BatchScheduler,
    ChunkSplitter,
    TranslationClient,
    TranslationOrchestrator,
)

__all__ = [
    # Config
    "Settings",
    "load_settings",
    # Errors
    "TranslateMdError",
    "ConfigError",
    "DocumentReadError",
    "TranslationError",
    "TransientServiceError",
    "PermanentServiceError",
    "OutputWriteError",
    # Scanner
    "MarkupKind",
    "SourceDocument",
    "find_documents",
    # Translation
    "BatchScheduler",
    "ChunkSplitter",
    "TranslationClient",
    "TranslationOrchestrator",
]
