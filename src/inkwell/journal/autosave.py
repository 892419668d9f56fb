"""Focus-bound auto-save timer backed by APScheduler.

Wraps APScheduler's ``AsyncIOScheduler`` to run a recurring tick coroutine
while the editing surface holds focus. Starting the timer adds an
interval job whose first run is one full interval away; stopping removes
the job. Removing the job only prevents future ticks: a tick coroutine
already running, and any save task it dispatched, runs to completion.

APScheduler is imported lazily (only in :meth:`AutoSaveTimer.start`) so
the module can be imported without a running event loop.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

TickFn = Callable[[], Awaitable[Any]]
"""Async callable invoked on every tick, typically ``EditSession.autosave_tick``."""

DEFAULT_INTERVAL_SECONDS = 5.0


class AutoSaveTimer:
    """Cancellable recurring tick.

    Args:
        tick_fn: Coroutine function run on each tick.
        interval: Seconds between ticks (and before the first one).
        job_id: APScheduler job id.
        timezone: Scheduler timezone; irrelevant for interval triggers but
            pinned to avoid local-zone lookups.
    """

    def __init__(
        self,
        tick_fn: TickFn,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        job_id: str = "autosave",
        timezone: str = "UTC",
    ):
        if interval <= 0:
            raise ValueError(f"Auto-save interval must be positive, got {interval}")
        self._tick_fn = tick_fn
        self._interval = interval
        self._job_id = job_id
        self._timezone = timezone
        self._scheduler: Any = None  # AsyncIOScheduler, lazily created
        self._job: Any = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        """Whether future ticks are scheduled."""
        return self._job is not None

    # ── Lifecycle ──────────────────────────────────────────────────

    def start(self) -> None:
        """Schedule recurring ticks. No-op if already running.

        Must be called from a running asyncio event loop.
        """
        if self._job is not None:
            return

        from apscheduler.schedulers.asyncio import AsyncIOScheduler
        from apscheduler.triggers.interval import IntervalTrigger

        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(timezone=self._timezone)
            self._scheduler.start()

        self._job = self._scheduler.add_job(
            self._tick_fn,
            trigger=IntervalTrigger(seconds=self._interval, timezone=self._timezone),
            id=self._job_id,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        logger.debug(f"Auto-save timer started (every {self._interval}s)")

    def stop(self) -> None:
        """Cancel future ticks. Work already dispatched is left alone."""
        if self._job is None:
            return
        job, self._job = self._job, None
        try:
            job.remove()
        except LookupError:
            # JobLookupError subclasses KeyError; the scheduler may already be gone
            logger.debug(f"Auto-save job {self._job_id} was already removed")
        logger.debug("Auto-save timer stopped")

    def shutdown(self) -> None:
        """Stop ticking and tear down the scheduler."""
        self.stop()
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
            self._scheduler = None
