"""Tests for AutoSaveTimer — APScheduler-backed recurring tick."""

import asyncio

import pytest

from inkwell.journal.autosave import DEFAULT_INTERVAL_SECONDS, AutoSaveTimer


class TickCounter:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


@pytest.mark.smoke
class TestAutoSaveTimerConfig:
    def test_default_interval(self):
        timer = AutoSaveTimer(TickCounter())
        assert timer.interval == DEFAULT_INTERVAL_SECONDS == 5.0
        assert not timer.is_running

    @pytest.mark.parametrize("interval", [0, -1, -0.5])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError, match="positive"):
            AutoSaveTimer(TickCounter(), interval=interval)

    def test_stop_when_not_started(self):
        timer = AutoSaveTimer(TickCounter())
        timer.stop()
        timer.shutdown()
        assert not timer.is_running


class TestAutoSaveTimerLifecycle:
    async def test_start_and_stop(self):
        timer = AutoSaveTimer(TickCounter(), interval=60)
        try:
            timer.start()
            assert timer.is_running
            timer.start()  # no-op
            assert timer.is_running
            timer.stop()
            assert not timer.is_running
            timer.start()
            assert timer.is_running
        finally:
            timer.shutdown()
        assert not timer.is_running

    async def test_first_tick_waits_one_interval(self):
        counter = TickCounter()
        timer = AutoSaveTimer(counter, interval=0.5)
        try:
            timer.start()
            await asyncio.sleep(0.1)
            assert counter.calls == 0
        finally:
            timer.shutdown()

    async def test_ticks_repeat_until_stopped(self):
        counter = TickCounter()
        timer = AutoSaveTimer(counter, interval=0.05)
        try:
            timer.start()
            await asyncio.wait_for(_until(lambda: counter.calls >= 2), timeout=3.0)

            timer.stop()
            await asyncio.sleep(0.01)
            stopped_at = counter.calls
            await asyncio.sleep(0.2)
            assert counter.calls == stopped_at
        finally:
            timer.shutdown()


async def _until(condition) -> None:
    while not condition():
        await asyncio.sleep(0.01)
