"""Countdown shown after playback finishes before advancing to the next item."""

from __future__ import annotations

from typing import Callable, Optional

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.scheduling import Scheduler, TimerHandle

log = get_logger(__name__)


class PlayNextCountdown:
    def __init__(self, scheduler: Scheduler, on_expire: Callable[[], None], duration: float = 6.0) -> None:
        self._scheduler = scheduler
        self._on_expire = on_expire
        self.duration = duration
        self._handle: Optional[TimerHandle] = None
        self._started_at: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self.duration > 0

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def remaining(self) -> float:
        if not self.active or self._started_at is None:
            return 0.0
        elapsed = self._scheduler.monotonic() - self._started_at
        return max(0.0, self.duration - elapsed)

    def progress(self) -> float:
        """Fraction of the countdown already elapsed, for the ring animation."""
        if not self.active:
            return 0.0
        return 1.0 - self.remaining() / self.duration

    def start(self) -> None:
        self.cancel()
        if not self.enabled:
            return
        self._started_at = self._scheduler.monotonic()
        self._handle = self._scheduler.call_later(self.duration, self._expire, name="play_next")
        log.debug("play_next_countdown_started", extra={"duration": self.duration})

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._started_at = None

    def play_now(self) -> None:
        was_active = self.active
        self.cancel()
        if was_active:
            self._on_expire()

    def _expire(self) -> None:
        self._handle = None
        self._started_at = None
        self._on_expire()
