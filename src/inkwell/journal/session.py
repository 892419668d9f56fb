"""Edit session — the open document and its persisted form.

An :class:`EditSession` tracks at most one active date, the content last
known to be on disk for it (``synced_content``) and the pending editor
buffer. It loads and saves through the :class:`EntryStore`, keeps the
:class:`EntryIndex` in step with files it creates or removes, and owns
the focus-bound auto-save timer.

State machine::

    IDLE ──open──▶ LOADING ──ok──▶ ACTIVE ──tick (dirty)──▶ SAVING
      ▲               │ fail          ▲                        │
      └───────────────┘               └──────── done ──────────┘
    delete(active date) from any state ──▶ IDLE

Every coroutine here runs on the engine's event loop. Results of store
calls are applied only if the session is still on the same *generation*:
each ``open`` and each delete of the active date bumps the generation, so
a load or save that resolves late never touches the newer session.
"""

from __future__ import annotations

import asyncio
import enum

from loguru import logger

from inkwell.core.events import DOCUMENT_CHANGED, DOCUMENT_SAVED, BusyTracker, Event, EventBus
from inkwell.core.exceptions import IOFailure

from .autosave import DEFAULT_INTERVAL_SECONDS, AutoSaveTimer
from .datekey import DateKey
from .index import EntryIndex
from .store import EntryStore


class SessionState(enum.Enum):
    """Lifecycle of the active document."""

    IDLE = "idle"
    LOADING = "loading"
    ACTIVE = "active"
    SAVING = "saving"


class EditSession:
    """Mediator between the editing surface and the entry store.

    Args:
        store: Entry persistence.
        index: Index to update when a save creates a new file or a delete
            removes one.
        bus: Receives ``document.changed``, ``document.saved``,
            ``busy.changed`` and ``error.occurred``.
        autosave_interval: Seconds between auto-save ticks while focused.
        flush_on_leave: Persist dirty edits on focus loss, date switch and
            close. Off by default: edits not yet picked up by a tick are
            dropped in those cases.
        busy: Shared busy tracker; one is created when omitted.
    """

    def __init__(
        self,
        store: EntryStore,
        index: EntryIndex,
        bus: EventBus | None = None,
        *,
        autosave_interval: float = DEFAULT_INTERVAL_SECONDS,
        flush_on_leave: bool = False,
        busy: BusyTracker | None = None,
    ):
        self._store = store
        self._index = index
        self._bus = bus or EventBus()
        self._busy = busy or BusyTracker(self._bus, source="session")
        self._flush_on_leave = flush_on_leave
        self._timer = AutoSaveTimer(self.autosave_tick, interval=autosave_interval)

        self._state = SessionState.IDLE
        self._date: DateKey | None = None
        self._synced = ""
        self._buffer = ""
        self._generation = 0
        self._focused = False
        self._save_task: asyncio.Task[bool] | None = None

    # ── Read-only state ────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def date(self) -> DateKey | None:
        """The active date, or None when idle."""
        return self._date

    @property
    def synced_content(self) -> str:
        return self._synced

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def is_dirty(self) -> bool:
        return self._state in (SessionState.ACTIVE, SessionState.SAVING) and self._buffer != self._synced

    @property
    def focused(self) -> bool:
        return self._focused

    @property
    def timer(self) -> AutoSaveTimer:
        return self._timer

    @property
    def save_in_flight(self) -> bool:
        return self._save_task is not None and not self._save_task.done()

    # ── Commands ───────────────────────────────────────────────────

    async def open(self, date: DateKey) -> bool:
        """Make *date* the active document.

        Returns:
            True if the loaded content was applied, False if the load failed
            or was superseded by a later ``open``/``delete``.
        """
        if self._flush_on_leave and self._date != date:
            await self.flush()
        elif date == self._date:
            # Reloading the active date: the read must see the save in flight
            await self._wait_for_save()

        self._generation += 1
        generation = self._generation
        self._state = SessionState.LOADING
        self._date = date
        logger.debug(f"Loading entry {date}")

        try:
            async with self._busy:
                content = await self._store.read(date)
        except IOFailure as e:
            if generation != self._generation:
                logger.debug(f"Ignoring failed load of {date}: session moved on")
                return False
            logger.error(f"Failed to load entry {date}: {e}")
            self._reset()
            await self._emit_document()
            await self._bus.error(f"Failed to load entry {date}", e, source="session")
            return False

        if generation != self._generation:
            logger.debug(f"Discarding stale load of {date}")
            return False

        self._synced = content
        self._buffer = content
        self._state = SessionState.ACTIVE
        await self._emit_document()
        return True

    def edit(self, content: str) -> None:
        """Replace the pending buffer. Does not persist anything."""
        if self._state not in (SessionState.ACTIVE, SessionState.SAVING):
            logger.debug(f"Ignoring edit while {self._state.value}")
            return
        self._buffer = content

    async def autosave_tick(self) -> asyncio.Task[bool] | None:
        """Dispatch a save if the buffer differs from what is on disk.

        Skips when a save is already in flight; ticks never overlap saves.

        Returns:
            The dispatched save task, or None if nothing was dispatched.
        """
        if self.save_in_flight:
            logger.trace("Auto-save tick skipped: save in flight")
            return None
        if self._state is not SessionState.ACTIVE or self._buffer == self._synced:
            return None
        return self._dispatch_save()

    async def flush(self) -> bool:
        """Persist the buffer now if it is dirty.

        Waits for an in-flight save first. Returns False only when a save
        was attempted and failed.
        """
        await self._wait_for_save()
        if self._state is not SessionState.ACTIVE or self._buffer == self._synced:
            return True
        return await self._dispatch_save()

    async def delete(self, date: DateKey) -> bool:
        """Delete the entry for *date*.

        If *date* is active the session drops to IDLE and the buffer is
        cleared, unsaved edits included; confirming that loss is the
        caller's job. A save already in flight is allowed to land first so
        it cannot recreate the file afterwards. If the store delete fails,
        the session is put back as it was.

        Returns:
            True if the store delete succeeded (including "nothing to delete").
        """
        await self._wait_for_save()

        # Detach first so no tick can dispatch a save that recreates the file
        restore = None
        if date == self._date:
            self._generation += 1
            if self._state is SessionState.ACTIVE:
                restore = (self._generation, self._date, self._synced, self._buffer)
            self._reset()
            await self._emit_document()

        try:
            async with self._busy:
                existed = await self._store.delete(date)
        except IOFailure as e:
            logger.error(f"Failed to delete entry {date}: {e}")
            if restore is not None and restore[0] == self._generation:
                _, self._date, self._synced, self._buffer = restore
                self._state = SessionState.ACTIVE
                await self._emit_document()
            await self._bus.error(f"Could not delete entry {date}", e, source="session")
            return False

        await self._index.remove(date)
        if existed:
            logger.info(f"Deleted entry {date}")
        return True

    async def set_focus(self, focused: bool) -> None:
        """Start or stop the auto-save timer as the editor gains or loses focus."""
        if focused == self._focused:
            return
        self._focused = focused
        if focused:
            self._timer.start()
            return
        self._timer.stop()
        if self._flush_on_leave:
            await self.flush()

    async def close(self) -> None:
        """Stop the timer and let any dispatched save finish."""
        self._focused = False
        self._timer.shutdown()
        if self._flush_on_leave:
            await self.flush()
        else:
            await self._wait_for_save()

    # ── Internal ───────────────────────────────────────────────────

    def _dispatch_save(self) -> asyncio.Task[bool]:
        assert self._date is not None
        self._state = SessionState.SAVING
        task = asyncio.create_task(
            self._save(self._date, self._buffer, self._generation),
            name=f"save-{self._date}",
        )
        self._save_task = task
        return task

    async def _save(self, date: DateKey, content: str, generation: int) -> bool:
        try:
            async with self._busy:
                created = await self._store.write(date, content)
        except IOFailure as e:
            logger.warning(f"Auto-save of {date} failed: {e}")
            if generation == self._generation:
                self._state = SessionState.ACTIVE
            await self._bus.error("Auto-save failed", e, source="session")
            return False

        # The file exists now whichever session is current
        if created:
            await self._index.insert(date)

        if generation != self._generation:
            logger.debug(f"Save of {date} landed after the session moved on")
            return True

        self._synced = content
        self._state = SessionState.ACTIVE
        logger.debug(f"Saved entry {date}")
        await self._bus.emit(
            Event(name=DOCUMENT_SAVED, payload={"date": date, "content": content}, source="session")
        )
        return True

    async def _wait_for_save(self) -> None:
        # Loop: another save may be dispatched while we were waiting
        while self._save_task is not None and not self._save_task.done():
            await asyncio.wait({self._save_task})

    def _reset(self) -> None:
        self._state = SessionState.IDLE
        self._date = None
        self._synced = ""
        self._buffer = ""

    async def _emit_document(self) -> None:
        await self._bus.emit(
            Event(
                name=DOCUMENT_CHANGED,
                payload={"date": self._date, "content": self._buffer},
                source="session",
            )
        )
