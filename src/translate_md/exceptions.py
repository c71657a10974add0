"""
Exception hierarchy for translate-md.

Kept in its own module so the config, scanner, client and pipeline layers can
share it without importing each other.
"""

from __future__ import annotations

from pathlib import Path


class TranslateMdError(Exception):
    """Base class for all translate-md errors."""


class ConfigError(TranslateMdError):
    """Configuration is missing or malformed. Fatal at startup."""


class DocumentReadError(TranslateMdError):
    """A source document could not be read; the document is skipped."""

    def __init__(self, path: Path | str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class TranslationError(TranslateMdError):
    """A translation request failed for one chunk or a whole document."""

    def __init__(self, message: str, language: str = "", details: dict | None = None):
        super().__init__(message)
        self.language = language
        self.details = details or {}


class TransientServiceError(TranslationError):
    """Network or service-side failure (timeouts, connection errors, 5xx, 429)."""


class PermanentServiceError(TranslationError):
    """The service answered but the response is unusable (e.g. empty content)."""


class OutputWriteError(TranslateMdError):
    """A destination file could not be written."""

    def __init__(self, path: Path | str, reason: str):
        super().__init__(f"Cannot write {path}: {reason}")
        self.path = Path(path)
        self.reason = reason
