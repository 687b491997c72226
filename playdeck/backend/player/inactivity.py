"""Auto-hide timer for the control panel."""

from __future__ import annotations

from typing import Callable, Optional

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.scheduling import Scheduler, TimerHandle

log = get_logger(__name__)

DEFAULT_INACTIVITY_INTERVAL = 3.0


class InactivityTimer:
    """Single-shot, restartable timer.

    ``start`` always replaces the pending alarm, so only the most recent start
    can fire. While suppressed (an open scrub session) ``start`` is a no-op.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_fire: Callable[[], None],
        interval: float = DEFAULT_INACTIVITY_INTERVAL,
    ) -> None:
        self._scheduler = scheduler
        self._on_fire = on_fire
        self.interval = interval
        self._handle: Optional[TimerHandle] = None
        self._generation = 0
        self._suppressed = False

    @property
    def pending(self) -> bool:
        return self._handle is not None and self._handle.active

    @property
    def suppressed(self) -> bool:
        return self._suppressed

    def start(self) -> None:
        self.cancel()
        if self._suppressed:
            return
        generation = self._generation
        self._handle = self._scheduler.call_later(
            self.interval,
            lambda: self._fire(generation),
            name="inactivity",
        )

    def cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def suppress(self) -> None:
        self.cancel()
        self._suppressed = True

    def resume(self) -> None:
        self._suppressed = False
        self.start()

    def _fire(self, generation: int) -> None:
        if generation != self._generation or self._suppressed:
            return
        self._handle = None
        log.debug("controls_auto_hide")
        self._on_fire()
