from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

Callback = Callable[[], None]


class TimerHandle(Protocol):
    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Delayed/periodic callback scheduling.

    Contract:
      - `call_later(delay_ms, cb)` runs `cb` once after `delay_ms`.
      - `call_every(interval_ms, cb)` runs `cb` every `interval_ms` until cancelled.
      - a cancelled handle never fires again, even if it was already due.
    """

    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle: ...

    def call_every(self, interval_ms: int, callback: Callback) -> TimerHandle: ...


class AsyncioTimer:
    """Handle for a one-shot or repeating timer on an asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, delay_ms: int, callback: Callback, *, repeat: bool) -> None:
        self._loop = loop
        self._delay_s = delay_ms / 1000
        self._callback = callback
        self._repeat = repeat
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = None
        self._arm()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _arm(self) -> None:
        self._handle = self._loop.call_later(self._delay_s, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        if self._repeat:
            # Re-arm before running so a callback that cancels itself wins.
            self._arm()
        else:
            self._handle = None
        self._callback()


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop (used by the web service)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay_ms: int, callback: Callback) -> AsyncioTimer:
        return AsyncioTimer(self._get_loop(), delay_ms, callback, repeat=False)

    def call_every(self, interval_ms: int, callback: Callback) -> AsyncioTimer:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        return AsyncioTimer(self._get_loop(), interval_ms, callback, repeat=True)


@dataclass(slots=True)
class ManualTimer:
    due_ms: int
    callback: Callback
    interval_ms: int | None = None
    _cancelled: bool = field(default=False, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualScheduler:
    """Virtual-clock scheduler.

    Nothing fires until `advance()` is called. Timers fire in due-time order; ties
    fire in the order they were scheduled. Useful for tests and synchronous drivers
    (terminal UIs, replays) where wall-clock time is irrelevant.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: list[tuple[int, int, ManualTimer]] = []
        self._seq = itertools.count()

    def _push(self, timer: ManualTimer) -> None:
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))

    def call_later(self, delay_ms: int, callback: Callback) -> ManualTimer:
        timer = ManualTimer(due_ms=self.now_ms + max(0, delay_ms), callback=callback)
        self._push(timer)
        return timer

    def call_every(self, interval_ms: int, callback: Callback) -> ManualTimer:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        timer = ManualTimer(due_ms=self.now_ms + interval_ms, callback=callback, interval_ms=interval_ms)
        self._push(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, ms: int) -> int:
        """Move the clock forward by `ms`, firing everything due. Returns the number of callbacks run."""

        if ms < 0:
            raise ValueError("cannot move the clock backwards")

        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = due
            if timer.interval_ms is not None:
                timer.due_ms = due + timer.interval_ms
                self._push(timer)
            timer.callback()
            fired += 1
        self.now_ms = target
        return fired
