"""Content search over diary entries.

A query is a case-insensitive substring match against the stored document.
Content is read from the store on every evaluation; nothing is cached, so
a freshly saved entry is matched on the next filter pass.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from .datekey import DateKey
from .store import EntryStore

Predicate = Callable[[DateKey], Awaitable[bool]]
"""Async callable deciding whether a date is visible."""


class ContentQuery:
    """Predicate accepting dates whose document contains *query*.

    Example::

        index.set_filter(ContentQuery(store, "vacation"))
    """

    def __init__(self, store: EntryStore, query: str):
        if not query or not query.strip():
            raise ValueError("ContentQuery requires a non-empty query")
        self.store = store
        self.query = query
        self._needle = query.casefold()

    async def __call__(self, date: DateKey) -> bool:
        content = await self.store.read(date)
        return self._needle in content.casefold()

    def __repr__(self) -> str:
        return f"ContentQuery({self.query!r})"
