"""In-memory index of known diary dates.

The index mirrors which entries exist on disk: rebuilt from a directory
scan at startup and patched by :meth:`EntryIndex.insert` /
:meth:`EntryIndex.remove` whenever a store operation creates or removes a
file. It is always sorted most-recent-first and can be narrowed by an
async predicate (see :mod:`inkwell.journal.search`) without losing the
full set.

All methods must be awaited from the event loop that owns the engine;
the index itself holds no locks.
"""

from __future__ import annotations

from loguru import logger

from inkwell.core.events import ENTRIES_CHANGED, Event, EventBus
from inkwell.core.exceptions import IOFailure

from .datekey import DateKey
from .search import ContentQuery, Predicate
from .store import EntryStore


class EntryIndex:
    """Sorted, filterable, observable set of DateKeys.

    Args:
        store: Backing store, used for directory scans and content search.
        bus: Event bus receiving ``entries.changed`` notifications.
    """

    def __init__(self, store: EntryStore, bus: EventBus | None = None):
        self._store = store
        self._bus = bus or EventBus()
        self._dates: list[DateKey] = []
        self._known: set[DateKey] = set()
        self._predicate: Predicate | None = None
        self._matches: set[DateKey] = set()
        self._filter_generation = 0
        # One log per rebuild in progress; insert/remove calls landing
        # mid-scan are replayed on top of the scan result.
        self._scan_logs: list[list[tuple[DateKey, bool]]] = []

    # ── Views ──────────────────────────────────────────────────────

    @property
    def dates(self) -> list[DateKey]:
        """All known dates, most recent first."""
        return list(self._dates)

    @property
    def visible(self) -> list[DateKey]:
        """Dates passing the current filter, most recent first."""
        if self._predicate is None:
            return list(self._dates)
        return [d for d in self._dates if d in self._matches]

    @property
    def predicate(self) -> Predicate | None:
        return self._predicate

    def __contains__(self, date: object) -> bool:
        return date in self._known

    def __len__(self) -> int:
        return len(self._dates)

    # ── Mutation ───────────────────────────────────────────────────

    async def rebuild(self) -> None:
        """Replace the contents with a fresh scan of the store.

        Raises:
            IOFailure: If the directory listing fails. The index is left as it was.
        """
        log: list[tuple[DateKey, bool]] = []
        self._scan_logs.append(log)
        try:
            scanned = {date async for date in self._store.list_dates()}
        finally:
            self._scan_logs.remove(log)

        for date, present in log:
            if present:
                scanned.add(date)
            else:
                scanned.discard(date)

        self._set_dates(scanned)
        self._matches &= self._known
        logger.info(f"Entry index rebuilt: {len(self._dates)} entries")

        if self._predicate is not None:
            await self.set_filter(self._predicate)
        else:
            await self._notify()

    async def insert(self, date: DateKey) -> None:
        """Add *date* if absent. Idempotent."""
        self._record(date, True)
        if date in self._known:
            return
        self._set_dates(self._known | {date})

        predicate = self._predicate
        if predicate is not None:
            generation = self._filter_generation
            accepted = await self._accepts(predicate, date)
            if accepted and generation == self._filter_generation and date in self._known:
                self._matches.add(date)
        await self._notify()

    async def remove(self, date: DateKey) -> None:
        """Drop *date* if present. Idempotent."""
        self._record(date, False)
        if date not in self._known:
            return
        self._set_dates(self._known - {date})
        self._matches.discard(date)
        await self._notify()

    # ── Filtering ──────────────────────────────────────────────────

    async def set_filter(self, predicate: Predicate | None) -> None:
        """Restrict the visible dates to those accepted by *predicate*.

        ``None`` clears the filter. When a newer call arrives while this one
        is still evaluating, this one is abandoned without touching state.
        """
        self._filter_generation += 1
        generation = self._filter_generation

        if predicate is None:
            self._predicate = None
            self._matches = set()
            await self._notify()
            return

        evaluated: set[DateKey] = set()
        matches: set[DateKey] = set()
        pending = list(self._dates)
        while pending:
            for date in pending:
                if await self._accepts(predicate, date):
                    matches.add(date)
                evaluated.add(date)
                if generation != self._filter_generation:
                    logger.debug(f"Filter {predicate!r} superseded before completion")
                    return
            # Dates inserted while we were reading still need a verdict
            pending = [d for d in self._dates if d not in evaluated]

        self._predicate = predicate
        self._matches = matches & self._known
        logger.debug(f"Filter {predicate!r} matched {len(self._matches)}/{len(self._dates)} entries")
        await self._notify()

    async def search(self, query: str | None) -> None:
        """Filter by document content. A blank query shows every entry."""
        if not query or not query.strip():
            await self.set_filter(None)
        else:
            await self.set_filter(ContentQuery(self._store, query))

    # ── Internal ───────────────────────────────────────────────────

    def _set_dates(self, dates: set[DateKey]) -> None:
        self._known = set(dates)
        self._dates = sorted(self._known, reverse=True)

    def _record(self, date: DateKey, present: bool) -> None:
        for log in self._scan_logs:
            log.append((date, present))

    async def _accepts(self, predicate: Predicate, date: DateKey) -> bool:
        try:
            return await predicate(date)
        except IOFailure as e:
            logger.warning(f"Could not evaluate filter for {date}: {e}")
            await self._bus.error(f"Could not search entry {date}", e, source="index")
            return False

    async def _notify(self) -> None:
        await self._bus.emit(
            Event(
                name=ENTRIES_CHANGED,
                payload={"dates": self.visible, "total": len(self._dates)},
                source="index",
            )
        )
