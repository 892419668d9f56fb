"""Fixtures for journal tests: real file stores plus a gated variant for race tests."""

from __future__ import annotations

import asyncio

import pytest

from inkwell.core.events import Event, EventBus
from inkwell.core.exceptions import IOFailure
from inkwell.journal import DateKey, EntryIndex, FileEntryStore



class GatedStore(FileEntryStore):
    """FileEntryStore whose reads, writes and scans can be held open or failed.

    ``read_gates``/``write_gate``/``list_gate`` are asyncio.Events the call
    waits on before touching disk; ``fail_reads``, ``fail_writes`` and
    ``fail_deletes`` hold the dates (or ``"*"``) for which the call raises IOFailure.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.read_gates: dict[DateKey, asyncio.Event] = {}
        self.write_gate: asyncio.Event | None = None
        self.list_gate: asyncio.Event | None = None
        self.fail_reads: set = set()
        self.fail_writes: set = set()
        self.fail_deletes: set = set()
        self.reads: list[DateKey] = []
        self.writes: list[tuple[DateKey, str]] = []

    async def read(self, date):
        self.reads.append(date)
        gate = self.read_gates.get(date)
        if gate is not None:
            await gate.wait()
        if date in self.fail_reads or "*" in self.fail_reads:
            raise IOFailure(f"Cannot read entry {date}: simulated")
        return await super().read(date)

    async def write(self, date, content):
        self.writes.append((date, content))
        if self.write_gate is not None:
            await self.write_gate.wait()
        if date in self.fail_writes or "*" in self.fail_writes:
            raise IOFailure(f"Cannot write entry {date}: simulated")
        return await super().write(date, content)

    async def delete(self, date):
        if date in self.fail_deletes or "*" in self.fail_deletes:
            raise IOFailure(f"Cannot delete entry {date}: simulated")
        return await super().delete(date)

    async def list_dates(self):
        if self.list_gate is not None:
            await self.list_gate.wait()
        async for date in super().list_dates():
            yield date


class Recorder:
    """Collects every event published on a bus."""

    def __init__(self, bus: EventBus):
        self.events: list[Event] = []
        bus.on_all(self.events.append)

    def named(self, name: str) -> list[Event]:
        return [e for e in self.events if e.name == name]


@pytest.fixture
def diary_dir(tmp_path):
    path = tmp_path / "diary"
    path.mkdir()
    return path


@pytest.fixture
def store(diary_dir):
    return FileEntryStore(diary_dir)


@pytest.fixture
def gated_store(diary_dir):
    return GatedStore(diary_dir)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return Recorder(bus)


@pytest.fixture
def gated_index(gated_store, bus):
    return EntryIndex(gated_store, bus)


@pytest.fixture
def settle():
    """Let pending tasks on the loop advance to their next await."""

    async def _settle(rounds: int = 5) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
