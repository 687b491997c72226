"""Single-shot alarms for the control thread.

Every timer in the player (inactivity auto-hide, tap hold-off, jump indicator,
play-next countdown, seek timeout) is a :class:`TimerHandle` obtained from a
:class:`Scheduler`. Once ``cancel()`` returns the callback is guaranteed not to
run.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from playdeck.backend.common.logging import get_logger

log = get_logger(__name__)


class TimerHandle:
    def __init__(self, callback: Callable[[], None], deadline: float, name: str = "timer") -> None:
        self._callback = callback
        self.deadline = deadline
        self.name = name
        self._lock = threading.Lock()
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True

    def _claim(self) -> bool:
        with self._lock:
            if self._cancelled or self._fired:
                return False
            self._fired = True
            return True

    def _run(self) -> None:
        if not self._claim():
            return
        try:
            self._callback()
        except Exception:  # noqa: BLE001
            log.exception("timer_callback_failed", extra={"timer": self.name})


class Scheduler(ABC):
    """Source of time and cancellable single-shot alarms."""

    @abstractmethod
    def monotonic(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None], *, name: str = "timer") -> TimerHandle:
        raise NotImplementedError

    def call_soon(self, callback: Callable[[], None], *, name: str = "soon") -> TimerHandle:
        return self.call_later(0.0, callback, name=name)


class ThreadingScheduler(Scheduler):
    """Backs alarms with :class:`threading.Timer`.

    Callbacks run on timer threads but are serialized through ``control_lock``
    so they never interleave with each other or with intents that hold it.
    """

    def __init__(self, control_lock: Optional[threading.RLock] = None) -> None:
        self.control_lock = control_lock or threading.RLock()

    def monotonic(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None], *, name: str = "timer") -> TimerHandle:
        handle = TimerHandle(callback, self.monotonic() + max(0.0, delay), name=name)

        def _fire() -> None:
            with self.control_lock:
                handle._run()

        timer = threading.Timer(max(0.0, delay), _fire)
        timer.daemon = True
        timer.name = f"playdeck-{name}"
        timer.start()
        return handle


class ManualScheduler(Scheduler):
    """Host-driven scheduler: time only moves when :meth:`advance` is called."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def monotonic(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None], *, name: str = "timer") -> TimerHandle:
        handle = TimerHandle(callback, self._now + max(0.0, delay), name=name)
        with self._lock:
            heapq.heappush(self._queue, (handle.deadline, next(self._counter), handle))
        return handle

    def pending(self) -> List[TimerHandle]:
        with self._lock:
            entries = sorted(self._queue)
        return [entry[2] for entry in entries if entry[2].active]

    def run_pending(self) -> int:
        """Run everything due at the current time without moving the clock."""
        return self.advance(0.0)

    def advance(self, seconds: float) -> int:
        target = self._now + max(0.0, seconds)
        fired = 0
        while True:
            with self._lock:
                if not self._queue or self._queue[0][0] > target:
                    break
                deadline, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, deadline)
            if handle.active:
                handle._run()
                fired += 1
        self._now = target
        return fired
