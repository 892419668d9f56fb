"""EntryStore protocol and the file-per-date implementation.

The store is the only code that touches diary documents on disk. Every
method is a coroutine; blocking filesystem calls run on aiofiles' worker
threads so the event loop, which owns all index and session state, never
stalls on I/O.
"""

from __future__ import annotations

import asyncio
import os
from collections import Counter
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiofiles
import aiofiles.os
from loguru import logger

from inkwell.core.exceptions import ConfigurationError, DecodeSkipped, IOFailure, StorageUnavailable
from inkwell.core.utils.file_io import atomic_write_text

from .datekey import DateKey

EMPTY_DOCUMENT = "<html><body></body></html>"
"""Content returned for a date that has no file yet."""


@runtime_checkable
class EntryStore(Protocol):
    """Protocol for a DateKey → document content mapping.

    Implementations raise :class:`~inkwell.core.exceptions.IOFailure` for
    failed reads, writes and deletes, and never for a missing entry.
    """

    async def ensure_directory(self) -> None:
        """Create the storage root. Raises StorageUnavailable on failure."""
        ...

    def list_dates(self) -> AsyncIterator[DateKey]:
        """Yield the date of every stored entry, in no particular order."""
        ...

    async def read(self, date: DateKey) -> str:
        """Return the entry content, or ``EMPTY_DOCUMENT`` if absent."""
        ...

    async def write(self, date: DateKey, content: str) -> bool:
        """Persist *content*. Returns True if the entry did not exist before."""
        ...

    async def create(self, date: DateKey, content: str = EMPTY_DOCUMENT) -> bool:
        """Write *content* only if the entry is absent. Returns True if it wrote."""
        ...

    async def delete(self, date: DateKey) -> bool:
        """Remove the entry. Returns True if deleted, False if it didn't exist."""
        ...

    async def exists(self, date: DateKey) -> bool:
        """Check whether an entry exists for *date*."""
        ...


class FileEntryStore:
    """Diary directory with one ``YYYY-MM-DD<extension>`` file per entry.

    Implements EntryStore. Files whose names do not decode as a date are
    ignored and never written. Writes and deletes for the same date are
    serialized, so a later write can never be overtaken by an earlier one.
    """

    def __init__(self, diary_dir: Path | str, extension: str = ".html", encoding: str = "utf-8"):
        if not extension.startswith(".") or len(extension) < 2:
            raise ConfigurationError(f"Entry extension must look like '.html', got {extension!r}")
        self.diary_dir = Path(diary_dir).expanduser()
        self.extension = extension
        self.encoding = encoding
        # Per-date locks live only while some call holds or awaits them
        self._locks: dict[DateKey, asyncio.Lock] = {}
        self._lock_users: Counter[DateKey] = Counter()

    def path_for(self, date: DateKey) -> Path:
        """Get the file path for a given date."""
        return self.diary_dir / f"{date.encode()}{self.extension}"

    @asynccontextmanager
    async def _locked(self, date: DateKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(date, asyncio.Lock())
        self._lock_users[date] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[date] -= 1
            if not self._lock_users[date]:
                del self._lock_users[date]
                del self._locks[date]

    def _decode_name(self, name: str) -> DateKey:
        if not name.endswith(self.extension):
            raise DecodeSkipped(f"Unexpected extension: {name!r}")
        return DateKey.parse(name[: -len(self.extension)])

    async def ensure_directory(self) -> None:
        try:
            await aiofiles.os.makedirs(self.diary_dir, exist_ok=True)
        except OSError as e:
            raise StorageUnavailable(f"Cannot create diary directory {self.diary_dir}: {e}") from e

        if not await aiofiles.os.access(self.diary_dir, os.W_OK | os.X_OK):
            raise StorageUnavailable(f"Diary directory {self.diary_dir} is not writable")
        logger.debug(f"Diary directory ready: {self.diary_dir}")

    async def list_dates(self) -> AsyncIterator[DateKey]:
        try:
            names = await aiofiles.os.listdir(self.diary_dir)
        except FileNotFoundError:
            return
        except OSError as e:
            raise IOFailure(f"Cannot list diary directory {self.diary_dir}: {e}") from e

        for name in names:
            try:
                date = self._decode_name(name)
            except DecodeSkipped:
                logger.debug(f"Skipping foreign file {name}")
                continue
            yield date

    async def read(self, date: DateKey) -> str:
        path = self.path_for(date)
        try:
            async with aiofiles.open(path, encoding=self.encoding, newline="") as f:
                return await f.read()
        except FileNotFoundError:
            return EMPTY_DOCUMENT
        except (OSError, UnicodeError) as e:
            raise IOFailure(f"Cannot read entry {date}: {e}") from e

    async def write(self, date: DateKey, content: str) -> bool:
        path = self.path_for(date)
        async with self._locked(date):
            try:
                created = not await aiofiles.os.path.exists(path)
                await atomic_write_text(path, content, encoding=self.encoding, newline="")
            except (OSError, UnicodeError) as e:
                raise IOFailure(f"Cannot write entry {date}: {e}") from e
        logger.debug(f"Wrote entry {date} ({len(content)} chars, created={created})")
        return created

    async def create(self, date: DateKey, content: str = EMPTY_DOCUMENT) -> bool:
        """Write *content* only if no entry exists. Returns True if it wrote."""
        path = self.path_for(date)
        async with self._locked(date):
            try:
                if await aiofiles.os.path.exists(path):
                    return False
                await atomic_write_text(path, content, encoding=self.encoding, newline="")
            except (OSError, UnicodeError) as e:
                raise IOFailure(f"Cannot create entry {date}: {e}") from e
        logger.debug(f"Created entry {date}")
        return True

    async def delete(self, date: DateKey) -> bool:
        path = self.path_for(date)
        async with self._locked(date):
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                return False
            except OSError as e:
                raise IOFailure(f"Cannot delete entry {date}: {e}") from e
        logger.debug(f"Deleted entry {date}")
        return True

    async def exists(self, date: DateKey) -> bool:
        return await aiofiles.os.path.isfile(self.path_for(date))
