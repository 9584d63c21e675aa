"""
Tests for the timer schedulers.
"""

import asyncio

import pytest

from fruit_catcher.catcher_core.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    TimerSet,
)


@pytest.fixture
def scheduler():
    return ManualScheduler()


class TestManualScheduler:
    """Test the virtual-clock scheduler."""

    def test_call_later_fires_once_when_due(self, scheduler):
        """One-shot callbacks fire once, when due."""
        calls = []
        handle = scheduler.call_later(0.5, lambda: calls.append(scheduler.now))

        scheduler.advance(0.49)
        assert calls == []
        assert handle.active

        scheduler.advance(0.01)
        assert calls == [pytest.approx(0.5)]
        assert not handle.active

        scheduler.advance(10.0)
        assert len(calls) == 1

    def test_call_every_repeats(self, scheduler):
        """Repeating callbacks fire every interval."""
        calls = []
        scheduler.call_every(0.25, lambda: calls.append(scheduler.now))

        fired = scheduler.advance(1.0)

        assert fired == 4
        assert calls == [0.25, 0.5, 0.75, 1.0]

    def test_repeating_does_not_drift(self, scheduler):
        """Many small advances keep a repeating timer on schedule."""
        count = []
        scheduler.call_every(1 / 60, lambda: count.append(1))
        for _ in range(600):
            scheduler.advance(1 / 60)
        assert abs(len(count) - 600) <= 1

    def test_cancel_prevents_firing(self, scheduler):
        """A cancelled callback never fires."""
        calls = []
        handle = scheduler.call_later(1.0, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()

        scheduler.advance(2.0)

        assert calls == []
        assert handle.cancelled
        assert scheduler.pending_count == 0

    def test_cancel_of_already_due_callback(self, scheduler):
        """A callback cancelled by an earlier one in the same advance never runs."""
        calls = []
        second = None

        def first():
            calls.append("first")
            second.cancel()

        scheduler.call_later(1.0, first)
        second = scheduler.call_later(1.0, lambda: calls.append("second"))

        scheduler.advance(1.0)

        assert calls == ["first"]

    def test_cancel_inside_repeating_callback(self, scheduler):
        """Cancelling from inside a repeating callback stops it."""
        calls = []
        handle = None

        def tick():
            calls.append(1)
            if len(calls) == 3:
                handle.cancel()

        handle = scheduler.call_every(0.1, tick)
        scheduler.advance(5.0)

        assert len(calls) == 3

    def test_fifo_for_equal_due_times(self, scheduler):
        """Callbacks due at the same time fire in schedule order."""
        calls = []
        scheduler.call_later(0.5, lambda: calls.append("a"))
        scheduler.call_later(0.5, lambda: calls.append("b"))
        scheduler.call_later(0.2, lambda: calls.append("c"))

        scheduler.advance(1.0)

        assert calls == ["c", "a", "b"]

    def test_callback_scheduled_during_advance_fires_if_due(self, scheduler):
        """Callbacks scheduled mid-advance fire in the same advance if due."""
        calls = []
        scheduler.call_later(0.1, lambda: scheduler.call_later(0.1, lambda: calls.append("x")))

        scheduler.advance(0.3)

        assert calls == ["x"]

    def test_advance_to_absolute_time(self, scheduler):
        """advance_to moves to an absolute time and never backwards."""
        calls = []
        scheduler.call_every(0.5, lambda: calls.append(1))
        scheduler.advance_to(1.5)
        assert len(calls) == 3
        assert scheduler.now == 1.5

        # Past targets do not move the clock back
        scheduler.advance_to(1.0)
        assert scheduler.now == 1.5

    def test_invalid_arguments(self, scheduler):
        """Negative delays or non-positive intervals should raise."""
        with pytest.raises(ValueError):
            scheduler.call_later(-1.0, lambda: None)
        with pytest.raises(ValueError):
            scheduler.call_every(0.0, lambda: None)
        with pytest.raises(ValueError):
            scheduler.advance(-0.1)


class TestTimerSet:
    """Test grouped cancellation."""

    def test_cancel_all_is_idempotent(self, scheduler):
        """cancel_all can be called repeatedly."""
        timers = TimerSet()
        timers.countdown = scheduler.call_every(1.0, lambda: None)
        timers.frame = scheduler.call_every(0.1, lambda: None)
        timers.spawn = scheduler.call_later(0.5, lambda: None)
        handles = (timers.countdown, timers.frame, timers.spawn)

        timers.cancel_all()
        timers.cancel_all()

        assert all(handle.cancelled for handle in handles)
        assert not timers.spawn_pending
        assert scheduler.pending_count == 0


class TestAsyncioScheduler:
    """Test the asyncio-backed scheduler."""

    def test_one_shot_and_repeating(self):
        """The asyncio scheduler honours one-shot, repeating and cancel."""
        calls = {"once": 0, "every": 0, "cancelled": 0}

        async def main():
            scheduler = AsyncioScheduler()
            scheduler.call_later(0.01, lambda: calls.__setitem__("once", calls["once"] + 1))
            doomed = scheduler.call_later(0.01, lambda: calls.__setitem__("cancelled", 1))
            doomed.cancel()

            handle = None

            def tick():
                calls["every"] += 1
                if calls["every"] == 3:
                    handle.cancel()

            handle = scheduler.call_every(0.01, tick)
            await asyncio.sleep(0.2)

        asyncio.run(main())

        assert calls == {"once": 1, "every": 3, "cancelled": 0}
