"""Event bus for diary state notifications.

The engine never binds presentation widgets directly; it publishes events
and lets the presentation layer subscribe. Hooks can be sync or async and
are run in registration order, named hooks before wildcard hooks.

Usage::

    from inkwell.core.events import ENTRIES_CHANGED, Event, EventBus

    bus = EventBus()

    def redraw(event: Event) -> None:
        print(event.payload["dates"])

    unsubscribe = bus.on(ENTRIES_CHANGED, redraw)
    await bus.emit(Event(name=ENTRIES_CHANGED, payload={"dates": []}, source="index"))
    unsubscribe()
"""

from __future__ import annotations

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, Union

from loguru import logger

# ---------------------------------------------------------------------------
# Well-known event names
# ---------------------------------------------------------------------------

ENTRIES_CHANGED = "entries.changed"  # payload: dates (visible), total
DOCUMENT_CHANGED = "document.changed"  # payload: date, content
DOCUMENT_SAVED = "document.saved"  # payload: date, content
BUSY_CHANGED = "busy.changed"  # payload: busy
ERROR_OCCURRED = "error.occurred"  # payload: message, cause
STARTUP = "startup"  # payload: entries
SHUTDOWN = "shutdown"


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """An immutable notification published on the bus."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


Hook = Union[Callable[[Event], None], Callable[[Event], Awaitable[None]]]


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """Pub/sub bus for engine notifications.

    A failing hook is logged and skipped; it never reaches the component
    that emitted the event.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._wildcard_hooks: list[Hook] = []

    def on(self, event_name: str, hook: Hook) -> Callable[[], None]:
        """Register *hook* for *event_name*. Returns a function that unregisters it."""
        self._hooks[event_name].append(hook)
        return lambda: self.off(event_name, hook)

    def on_all(self, hook: Hook) -> Callable[[], None]:
        """Register *hook* for every event."""
        self._wildcard_hooks.append(hook)
        return lambda: self._discard(self._wildcard_hooks, hook)

    def off(self, event_name: str, hook: Hook) -> None:
        """Unregister *hook* from *event_name*. Unknown hooks are ignored."""
        self._discard(self._hooks.get(event_name, []), hook)

    async def emit(self, event: Event) -> None:
        """Run every hook subscribed to *event*, awaiting async ones."""
        hooks = [*self._hooks.get(event.name, []), *self._wildcard_hooks]
        for hook in hooks:
            try:
                result = hook(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning(f"Event hook {hook!r} failed for {event.name}: {exc}")

    async def error(self, message: str, cause: BaseException, source: str = "") -> None:
        """Publish an ``error.occurred`` event for a recoverable failure."""
        await self.emit(Event(name=ERROR_OCCURRED, payload={"message": message, "cause": cause}, source=source))

    @staticmethod
    def _discard(hooks: list[Hook], hook: Hook) -> None:
        if hook in hooks:
            hooks.remove(hook)


# ---------------------------------------------------------------------------
# Busy tracking
# ---------------------------------------------------------------------------


class BusyTracker:
    """Counts in-flight storage operations and reports idle/busy transitions.

    Used as an async context manager around each store call. Only the
    first entry and the last exit publish ``busy.changed``.
    """

    def __init__(self, bus: EventBus, source: str = "") -> None:
        self._bus = bus
        self._source = source
        self._depth = 0

    @property
    def busy(self) -> bool:
        return self._depth > 0

    async def __aenter__(self) -> BusyTracker:
        self._depth += 1
        if self._depth == 1:
            await self._bus.emit(Event(name=BUSY_CHANGED, payload={"busy": True}, source=self._source))
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._depth -= 1
        if self._depth == 0:
            await self._bus.emit(Event(name=BUSY_CHANGED, payload={"busy": False}, source=self._source))
