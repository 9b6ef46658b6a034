"""
Scheduler Module - Cancellable Timed Callbacks
==============================================
Clocks and a cooperative scheduler used by playback.

The scheduler never spawns threads. The host loop calls `poll()` once per
frame (the same place it reads the camera and checks the keyboard), and
scripts can call `run_until_idle()` to sleep until each task is due.
Tests drive it with a ManualClock so no real time passes.
"""

import heapq
import itertools
import time
from typing import Any, Callable, List, Optional, Tuple


class Clock:
    """Source of monotonic time in milliseconds."""

    def now_ms(self) -> float:
        raise NotImplementedError

    def sleep_ms(self, duration_ms: float):
        raise NotImplementedError


class MonotonicClock(Clock):
    """Wall clock backed by time.monotonic()."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0

    def sleep_ms(self, duration_ms: float):
        if duration_ms > 0:
            time.sleep(duration_ms / 1000.0)


class ManualClock(Clock):
    """Clock that only moves when told to. Sleeping advances it instantly."""

    def __init__(self, start_ms: float = 0.0):
        self._now = float(start_ms)

    def now_ms(self) -> float:
        return self._now

    def advance(self, duration_ms: float):
        """Move time forward."""
        if duration_ms < 0:
            raise ValueError("Clock cannot go backwards")
        self._now += duration_ms

    def sleep_ms(self, duration_ms: float):
        if duration_ms > 0:
            self._now += duration_ms


class ScheduledTask:
    """
    Handle for one pending callback.

    Cancelling is idempotent; a cancelled task is skipped when it comes due.
    """

    __slots__ = ('due_ms', 'callback', 'args', '_cancelled', '_done', '_scheduler')

    def __init__(
        self,
        due_ms: float,
        callback: Callable[..., Any],
        args: Tuple[Any, ...],
        scheduler: Optional['Scheduler'] = None
    ):
        self.due_ms = due_ms
        self.callback = callback
        self.args = args
        self._cancelled = False
        self._done = False
        self._scheduler = scheduler

    def cancel(self):
        if not self.pending:
            return
        self._cancelled = True
        if self._scheduler is not None:
            self._scheduler._task_cancelled()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)


class Scheduler:
    """
    Cooperative scheduler of cancellable callbacks.

    Tasks run in due-time order; tasks due at the same instant run in the
    order they were scheduled. If a callback raises, the exception
    propagates out of `poll()` and the remaining tasks stay queued for the
    next call.

    Cancelled tasks are dropped from the queue once they make up more than
    half of it.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or MonotonicClock()
        self._queue: List[Tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()
        # Cancelled entries still sitting in _queue
        self._cancelled = 0

    def now_ms(self) -> float:
        return self.clock.now_ms()

    def call_at(self, due_ms: float, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        """Schedule a callback at an absolute clock time."""
        task = ScheduledTask(due_ms, callback, args, self)
        heapq.heappush(self._queue, (due_ms, next(self._counter), task))
        return task

    def call_later(self, delay_ms: float, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        """Schedule a callback `delay_ms` from now."""
        return self.call_at(self.now_ms() + max(0.0, delay_ms), callback, *args)

    def _task_cancelled(self):
        self._cancelled += 1
        if self._cancelled * 2 > len(self._queue):
            self._queue = [entry for entry in self._queue if entry[2].pending]
            heapq.heapify(self._queue)
            self._cancelled = 0

    def _discard_cancelled(self):
        while self._queue and not self._queue[0][2].pending:
            heapq.heappop(self._queue)
            self._cancelled -= 1

    def queue_size(self) -> int:
        """Entries held in the queue, cancelled ones included."""
        return len(self._queue)

    def next_due_ms(self) -> Optional[float]:
        """Due time of the earliest pending task, or None."""
        self._discard_cancelled()
        return self._queue[0][0] if self._queue else None

    def pending_count(self) -> int:
        return len(self._queue) - self._cancelled

    def poll(self) -> int:
        """
        Run every task that is due now.

        Returns:
            Number of callbacks that ran
        """
        ran = 0
        now = self.now_ms()
        while True:
            self._discard_cancelled()
            if not self._queue or self._queue[0][0] > now:
                return ran
            _, _, task = heapq.heappop(self._queue)
            task._done = True
            ran += 1
            task.callback(*task.args)

    def run_until_idle(self, timeout_ms: Optional[float] = None) -> int:
        """
        Sleep until each task is due and run it, until nothing is pending.

        Args:
            timeout_ms: Stop waiting after this long (None waits indefinitely)

        Returns:
            Number of callbacks that ran
        """
        ran = 0
        deadline = None if timeout_ms is None else self.now_ms() + timeout_ms
        while True:
            due = self.next_due_ms()
            if due is None:
                return ran
            if deadline is not None and due > deadline:
                self.clock.sleep_ms(deadline - self.now_ms())
                return ran
            self.clock.sleep_ms(due - self.now_ms())
            ran += self.poll()

    def cancel_all(self):
        queue, self._queue = self._queue, []
        self._cancelled = 0
        for _, _, task in queue:
            task._cancelled = True
