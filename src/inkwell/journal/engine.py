"""Diary engine — the surface the presentation layer talks to.

Wires an :class:`EntryStore`, :class:`EntryIndex` and :class:`EditSession`
onto one :class:`EventBus`. The presentation layer issues commands here
and renders whatever the bus reports; it never touches the store.

Usage::

    engine = DiaryEngine.from_settings(DiarySettings.from_config(config))
    engine.bus.on(ENTRIES_CHANGED, redraw_list)
    await engine.start()
    await engine.set_focus(True)
    engine.edit_buffer("<html><body>Dear diary</body></html>")
"""

from __future__ import annotations

from loguru import logger

from inkwell.core.events import SHUTDOWN, STARTUP, BusyTracker, Event, EventBus
from inkwell.core.exceptions import IOFailure, StorageUnavailable

from .config import DiarySettings
from .datekey import DateKey
from .index import EntryIndex
from .session import EditSession, SessionState
from .store import EMPTY_DOCUMENT, EntryStore, FileEntryStore


class DiaryEngine:
    """Entry persistence and synchronization engine.

    Args:
        store: Backing store for entries.
        bus: Shared event bus. A private one is created when omitted.
        autosave_interval: Seconds between auto-save ticks while focused.
        flush_on_leave: See :class:`EditSession`.
    """

    def __init__(
        self,
        store: EntryStore,
        bus: EventBus | None = None,
        *,
        autosave_interval: float = 5.0,
        flush_on_leave: bool = False,
    ):
        self.store = store
        self.bus = bus or EventBus()
        self._busy = BusyTracker(self.bus, source="engine")
        self.index = EntryIndex(store, self.bus)
        self.session = EditSession(
            store,
            self.index,
            self.bus,
            autosave_interval=autosave_interval,
            flush_on_leave=flush_on_leave,
            busy=self._busy,
        )
        self._unavailable: StorageUnavailable | None = None

    @classmethod
    def from_settings(cls, settings: DiarySettings, bus: EventBus | None = None) -> DiaryEngine:
        store = FileEntryStore(settings.diary_dir, extension=settings.extension)
        return cls(
            store,
            bus,
            autosave_interval=settings.autosave_interval,
            flush_on_leave=settings.flush_on_leave,
        )

    @property
    def busy(self) -> bool:
        return self._busy.busy

    # ── Lifecycle ──────────────────────────────────────────────────

    async def start(self, initial_date: DateKey | None = None, *, open_initial: bool = True) -> None:
        """Prepare the diary directory, load the index and open a date.

        Raises:
            StorageUnavailable: The diary directory is unusable. Every later
                command raises the same error.
        """
        try:
            await self.store.ensure_directory()
        except StorageUnavailable as e:
            self._unavailable = e
            logger.error(f"Diary storage unavailable: {e}")
            await self.bus.error("Diary storage unavailable", e, source="engine")
            raise

        async with self._busy:
            await self._rebuild_index()
        await self.bus.emit(Event(name=STARTUP, payload={"entries": len(self.index)}, source="engine"))

        if open_initial:
            await self.session.open(initial_date or DateKey.today())

    async def shutdown(self) -> None:
        """Stop auto-save and wait for any dispatched save."""
        await self.session.close()
        await self.bus.emit(Event(name=SHUTDOWN, source="engine"))

    # ── Queries ────────────────────────────────────────────────────

    async def list_dates(self, query: str | None = None) -> list[DateKey]:
        """Visible dates, most recent first.

        Passing *query* applies it as the search filter first; omitting it
        keeps whatever filter is installed.
        """
        self._require_storage()
        if query is not None:
            await self.index.search(query)
        return self.index.visible

    async def search(self, query: str | None) -> list[DateKey]:
        self._require_storage()
        await self.index.search(query)
        return self.index.visible

    async def refresh(self) -> None:
        """Rescan the diary directory."""
        self._require_storage()
        async with self._busy:
            await self._rebuild_index()

    # ── Commands ───────────────────────────────────────────────────

    async def open_date(self, date: DateKey) -> bool:
        self._require_storage()
        return await self.session.open(date)

    def edit_buffer(self, content: str) -> None:
        self.session.edit(content)

    async def set_focus(self, focused: bool) -> None:
        self._require_storage()
        await self.session.set_focus(focused)

    async def save_now(self) -> bool:
        """Persist the active buffer without waiting for the next tick."""
        self._require_storage()
        return await self.session.flush()

    async def request_delete(self, date: DateKey) -> bool:
        """Delete the entry for *date*. Confirmation happens before this call."""
        self._require_storage()
        return await self.session.delete(date)

    async def create_entry(self, date: DateKey) -> bool:
        """Create the entry for *date* with an empty document if missing, then open it.

        Returns:
            True if the entry is open afterwards.
        """
        self._require_storage()
        try:
            async with self._busy:
                created = await self.store.create(date, EMPTY_DOCUMENT)
        except IOFailure as e:
            logger.error(f"Failed to create entry {date}: {e}")
            await self.bus.error(f"Could not create entry {date}", e, source="engine")
            return False
        await self.index.insert(date)
        if created:
            logger.info(f"Created entry {date}")

        # Already open: reloading would throw away the pending buffer
        if self.session.date == date and self.session.state is not SessionState.LOADING:
            return True
        return await self.session.open(date)

    async def new_entry_today(self) -> bool:
        return await self.create_entry(DateKey.today())

    # ── Internal ───────────────────────────────────────────────────

    async def _rebuild_index(self) -> None:
        try:
            await self.index.rebuild()
        except IOFailure as e:
            logger.error(f"Could not scan diary directory: {e}")
            await self.bus.error("Could not load diary entries", e, source="engine")

    def _require_storage(self) -> None:
        if self._unavailable is not None:
            raise StorageUnavailable(str(self._unavailable)) from self._unavailable
