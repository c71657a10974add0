"""Writes into the output tree."""

from __future__ import annotations

from pathlib import Path

import aiofiles
import aiofiles.os

from translate_md.exceptions import OutputWriteError


async def write_text(destination: Path, text: str) -> None:
    """Write ``text`` as UTF-8, creating parent directories."""
    try:
        await aiofiles.os.makedirs(destination.parent, exist_ok=True)
        async with aiofiles.open(destination, "w", encoding="utf-8") as f:
            await f.write(text)
    except OSError as e:
        raise OutputWriteError(destination, str(e)) from e


async def copy_file(source: Path, destination: Path) -> None:
    """Copy ``source`` byte for byte, creating parent directories."""
    try:
        await aiofiles.os.makedirs(destination.parent, exist_ok=True)
        async with aiofiles.open(source, "rb") as src:
            data = await src.read()
        async with aiofiles.open(destination, "wb") as dst:
            await dst.write(data)
    except OSError as e:
        raise OutputWriteError(destination, str(e)) from e
