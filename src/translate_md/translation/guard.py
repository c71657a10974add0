"""
Idempotency guard.

An existing output file is the only proof that a (document, language) pair
is done. There is no manifest and no checksum. Two pipeline processes started
against the same output tree can both pass the check for the same file; that
race is known and not handled.
"""

from __future__ import annotations

from pathlib import Path

import aiofiles.os


class IdempotencyGuard:
    """Decides whether a LanguageTask's work already exists on disk."""

    async def should_skip(self, destination: Path) -> bool:
        """Return True iff an artifact already exists at ``destination``."""
        return await aiofiles.os.path.exists(destination)
