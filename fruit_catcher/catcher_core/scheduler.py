"""
Scheduler
=========

Cancellable one-shot and repeating timers that drive the session.

Two implementations share the same interface:

- ManualScheduler: virtual clock advanced explicitly (tests, Gymnasium env,
  the pygame tool which feeds it real frame time).
- AsyncioScheduler: wraps an asyncio event loop's ``call_later``.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Tuple


Callback = Callable[[], None]


class TimerHandle:
    """
    Handle to a scheduled callback.

    Cancelling is idempotent, and a cancelled handle never fires again, even
    when it was already due.
    """

    def __init__(self, callback: Callback, interval: Optional[float] = None):
        self._callback = callback
        self._interval = interval
        self._cancelled = False
        self._finished = False
        self._on_cancel: Optional[Callback] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self._interval is not None

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def active(self) -> bool:
        """True while the callback may still fire."""
        return not (self._cancelled or self._finished)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()
            self._on_cancel = None

    def _fire(self) -> None:
        if not self.active:
            return
        if not self.repeating:
            self._finished = True
        self._callback()

    def __repr__(self) -> str:
        kind = f"every {self._interval}s" if self.repeating else "once"
        state = "active" if self.active else ("cancelled" if self._cancelled else "done")
        return f"TimerHandle({kind}, {state})"


class ManualScheduler:
    """
    Scheduler with a virtual clock.

    Nothing fires until ``advance`` is called; callbacks then run in due-time
    order (FIFO for equal times), each to completion before the next.
    """

    def __init__(self, start_time: float = 0.0):
        self._now = start_time
        self._counter = itertools.count()
        # (due_time, sequence, handle, start, fire_index)
        self._queue: List[Tuple[float, int, TimerHandle, float, int]] = []

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def pending_count(self) -> int:
        """Number of timers that may still fire."""
        return sum(1 for entry in self._queue if entry[2].active)

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """
        Schedule a one-shot callback.

        Args:
            delay: Seconds from now (>= 0).
            callback: Zero-argument callable.

        Returns:
            Handle that can cancel the callback.
        """
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        handle = TimerHandle(callback)
        self._push(self._now + delay, handle, self._now, 1)
        return handle

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        """
        Schedule a repeating callback, first firing one interval from now.

        Due times are computed as ``start + n * interval`` so they never drift.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        handle = TimerHandle(callback, interval)
        self._push(self._now + interval, handle, self._now, 1)
        return handle

    def _push(self, due: float, handle: TimerHandle, start: float, index: int) -> None:
        heapq.heappush(self._queue, (due, next(self._counter), handle, start, index))

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every callback that falls due.

        Args:
            seconds: Amount of virtual time to advance (>= 0).

        Returns:
            Number of callbacks fired.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance by negative time: {seconds}")
        return self.advance_to(self._now + seconds)

    def advance_to(self, target: float) -> int:
        """
        Move the clock to an absolute time, firing every callback due by then.

        Targets in the past leave the clock where it is.

        Returns:
            Number of callbacks fired.
        """
        target = max(target, self._now)
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, handle, start, index = heapq.heappop(self._queue)
            if not handle.active:
                continue
            self._now = due
            if handle.repeating:
                # Re-arm before firing so a cancel inside the callback sticks
                self._push(start + (index + 1) * handle.interval, handle, start, index + 1)
            handle._fire()
            fired += 1

        self._now = target
        return fired


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    @property
    def now(self) -> float:
        return self._loop.time()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        handle = TimerHandle(callback)
        loop_handle = self._loop.call_later(delay, handle._fire)
        handle._on_cancel = loop_handle.cancel
        return handle

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        handle = TimerHandle(callback, interval)
        start = self._loop.time()

        def _tick(index: int) -> None:
            if not handle.active:
                return
            loop_handle = self._loop.call_at(start + (index + 1) * interval, _tick, index + 1)
            handle._on_cancel = loop_handle.cancel
            handle._fire()

        loop_handle = self._loop.call_at(start + interval, _tick, 1)
        handle._on_cancel = loop_handle.cancel
        return handle


class TimerSet:
    """The session's three schedules: countdown, frame step and spawn delay."""

    def __init__(self):
        self.countdown: Optional[TimerHandle] = None
        self.frame: Optional[TimerHandle] = None
        self.spawn: Optional[TimerHandle] = None

    @property
    def spawn_pending(self) -> bool:
        return self.spawn is not None and self.spawn.active

    def cancel_all(self) -> None:
        """Cancel every handle; safe to call repeatedly."""
        try:
            if self.countdown is not None:
                self.countdown.cancel()
        finally:
            try:
                if self.frame is not None:
                    self.frame.cancel()
            finally:
                if self.spawn is not None:
                    self.spawn.cancel()
                self.countdown = None
                self.frame = None
                self.spawn = None
