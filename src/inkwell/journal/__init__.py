"""Diary entry persistence and synchronization.

Provides date keys, a file-per-date EntryStore, the sorted and searchable
EntryIndex, the EditSession state machine with its focus-bound auto-save
loop, and the DiaryEngine facade tying them together.
"""

from .config import DiarySettings
from .datekey import DateKey
from .engine import DiaryEngine
from .index import EntryIndex
from .search import ContentQuery
from .session import EditSession, SessionState
from .store import EMPTY_DOCUMENT, EntryStore, FileEntryStore

__all__ = [
    "EMPTY_DOCUMENT",
    "ContentQuery",
    "DateKey",
    "DiaryEngine",
    "DiarySettings",
    "EditSession",
    "EntryIndex",
    "EntryStore",
    "FileEntryStore",
    "SessionState",
]
