"""
File I/O utilities: safe write and atomic replace.

All functions operate on explicit paths; there are no implicit directory lookups.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os


def safe_write(filepath: str, content: str, mode: str = "w", encoding: str = "utf-8") -> None:
    """Write content to a file, creating parent directories as needed."""
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    with open(filepath, mode, encoding=encoding) as f:
        f.write(content)


def temp_path_for(path: Path) -> Path:
    """Return a hidden sibling path for staging a write to *path*.

    The leading dot keeps staging files out of directory scans that only
    accept well-formed entry names.
    """
    return path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")


async def atomic_write_text(path: Path, content: str, encoding: str = "utf-8", newline: str | None = None) -> None:
    """Write *content* to *path* so readers see either the old or the new file.

    The data is staged in a temporary file in the same directory, flushed,
    and moved over the target with ``os.replace``.
    """
    tmp_path = temp_path_for(path)
    try:
        async with aiofiles.open(tmp_path, "w", encoding=encoding, newline=newline) as f:
            await f.write(content)
            await f.flush()
        await aiofiles.os.replace(tmp_path, path)
    except BaseException:
        if await aiofiles.os.path.exists(tmp_path):
            await aiofiles.os.remove(tmp_path)
        raise
