"""Turns raw touch events into controller intents.

Hosts forward taps, long-press and pan callbacks here. Only one long-press or
pan session may be open at a time; ``changed``/``ended`` events that arrive
without a matching ``began`` are dropped.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.observable import Signal
from playdeck.backend.common.scheduling import Scheduler, TimerHandle
from playdeck.backend.common.types import JumpDirection, Orientation
from playdeck.backend.player.models import IndicatorPhase, JumpIndicator, PanFeedback, ViewGeometry
from playdeck.config.settings.player import PlayerOptions

if TYPE_CHECKING:
    from playdeck.backend.player.controller import PlayerController

log = get_logger(__name__)


class GestureKind(str, Enum):
    TAP = "tap"
    DOUBLE_TAP = "double_tap"
    LONG_PRESS = "long_press"
    PAN = "pan"


@dataclass(slots=True)
class GestureSession:
    kind: GestureKind
    origin: Tuple[float, float]
    initial_slider_value: float = 0.0
    initial_transform: float = 1.0
    orientation: Orientation = Orientation.PORTRAIT


class InputDisambiguator:
    def __init__(
        self,
        controller: "PlayerController",
        geometry: ViewGeometry,
        *,
        scheduler: Optional[Scheduler] = None,
        options: Optional[PlayerOptions] = None,
    ) -> None:
        self._controller = controller
        self._scheduler = scheduler or controller.scheduler
        self._lock = getattr(self._scheduler, "control_lock", None) or threading.RLock()
        self.geometry = geometry
        self.options = options or controller.options

        self.jump_indicator: Signal[JumpIndicator] = Signal("jump_indicator")
        self.pan_feedback: Signal[PanFeedback] = Signal("pan_feedback")

        self._session: Optional[GestureSession] = None
        self._pending_tap: Optional[TimerHandle] = None
        self._tap_generation = 0
        self._indicator_timers: List[TimerHandle] = []

    @property
    def session(self) -> Optional[GestureSession]:
        return self._session

    def update_geometry(self, geometry: ViewGeometry) -> None:
        with self._lock:
            self.geometry = geometry

    def reset(self) -> None:
        """Drop every open session and pending timer without committing anything."""
        with self._lock:
            self._cancel_pending_tap()
            self._cancel_indicator()
            session, self._session = self._session, None
            if session is not None and session.kind is GestureKind.LONG_PRESS:
                self._controller.end_scrub(None)
            if session is not None and session.kind is GestureKind.PAN:
                self.pan_feedback.emit(PanFeedback())

    # ------------------------------------------------------------------
    # Taps
    # ------------------------------------------------------------------
    def tap(self, x: float, y: float = 0.0) -> None:
        with self._lock:
            if self._session is not None:
                log.debug("tap_ignored_during_gesture", extra={"gesture": self._session.kind.value})
                return
            if self._pending_tap is not None and self._pending_tap.active:
                self._cancel_pending_tap()
                self._double_tap(x)
                return
            self._tap_generation += 1
            generation = self._tap_generation
            self._pending_tap = self._scheduler.call_later(
                self.options.tap_hold_off,
                lambda: self._commit_single_tap(generation),
                name="tap_hold_off",
            )

    def _commit_single_tap(self, generation: int) -> None:
        with self._lock:
            if generation != self._tap_generation:
                return
            self._pending_tap = None
            self._controller.toggle_controls()

    def _cancel_pending_tap(self) -> None:
        self._tap_generation += 1
        if self._pending_tap is not None:
            self._pending_tap.cancel()
            self._pending_tap = None

    def _double_tap(self, x: float) -> None:
        direction = JumpDirection.FORWARD if x > self.geometry.midpoint_x else JumpDirection.REVERSE
        log.debug("double_tap", extra={"direction": direction.value})
        self._controller.jump_from_double_tap(direction)
        self._show_indicator(direction)

    def _show_indicator(self, direction: JumpDirection) -> None:
        self._cancel_indicator()
        fade = self.options.indicator_fade
        hold = self.options.indicator_hold
        self.jump_indicator.emit(JumpIndicator(direction, IndicatorPhase.FADE_IN, fade))
        self._indicator_timers = [
            self._scheduler.call_later(
                fade + hold,
                lambda: self._indicator_phase(direction, IndicatorPhase.FADE_OUT, fade),
                name="jump_indicator",
            ),
            self._scheduler.call_later(
                2 * fade + hold,
                lambda: self._indicator_phase(direction, IndicatorPhase.HIDDEN, 0.0),
                name="jump_indicator",
            ),
        ]

    def _indicator_phase(self, direction: JumpDirection, phase: IndicatorPhase, duration: float) -> None:
        with self._lock:
            self.jump_indicator.emit(JumpIndicator(direction, phase, duration))
            if phase is IndicatorPhase.HIDDEN:
                self._indicator_timers = []
                if self.options.hide_controls_during_jump_indicator:
                    self._controller.set_controls_hidden(False)

    def _cancel_indicator(self) -> None:
        for handle in self._indicator_timers:
            handle.cancel()
        self._indicator_timers = []

    # ------------------------------------------------------------------
    # Long press scrubbing
    # ------------------------------------------------------------------
    def long_press_began(self, x: float, y: float = 0.0) -> None:
        with self._lock:
            if self._session is not None:
                log.debug("long_press_rejected", extra={"gesture": self._session.kind.value})
                return
            self._cancel_pending_tap()
            initial = self._controller.begin_scrub()
            self._session = GestureSession(
                kind=GestureKind.LONG_PRESS,
                origin=(x, y),
                initial_slider_value=initial,
                orientation=self._controller.snapshot.orientation,
            )

    def long_press_changed(self, x: float, y: float = 0.0) -> None:
        with self._lock:
            session = self._active(GestureKind.LONG_PRESS, "long_press_changed")
            if session is None:
                return
            self._controller.preview_scrub(self._slider_value(session, x))

    def long_press_ended(self, x: float, y: float = 0.0) -> Optional[float]:
        """Commit the scrub; returns the seek target, if any."""
        with self._lock:
            session = self._active(GestureKind.LONG_PRESS, "long_press_ended")
            if session is None:
                return None
            self._session = None
            return self._controller.end_scrub(self._slider_value(session, x))

    def long_press_cancelled(self) -> None:
        with self._lock:
            session = self._active(GestureKind.LONG_PRESS, "long_press_cancelled")
            if session is None:
                return
            self._session = None
            self._controller.end_scrub(None)

    def _slider_value(self, session: GestureSession, x: float) -> float:
        width = self.geometry.seek_bar_width
        delta = (x - session.origin[0]) / width if width > 0 else 0.0
        return min(max(session.initial_slider_value + delta, 0.0), 1.0)

    # ------------------------------------------------------------------
    # Pan to rotate
    # ------------------------------------------------------------------
    def pan_began(self, x: float = 0.0, y: float = 0.0) -> None:
        with self._lock:
            if self._session is not None:
                log.debug("pan_rejected", extra={"gesture": self._session.kind.value})
                return
            self._session = GestureSession(
                kind=GestureKind.PAN,
                origin=(x, y),
                orientation=self._controller.snapshot.orientation,
            )

    def pan_changed(self, dx: float, dy: float) -> None:
        """``dx``/``dy`` are the translation since ``pan_began``."""
        with self._lock:
            session = self._active(GestureKind.PAN, "pan_changed")
            if session is None or abs(dy) <= abs(dx):
                return
            if dy < 0 and session.orientation is Orientation.PORTRAIT:
                scale = min(1.0 + abs(dy) / self.options.pan_zoom_divisor, self.options.pan_zoom_max)
                self.pan_feedback.emit(PanFeedback(scale=session.initial_transform * scale))
            elif dy >= 0 and session.orientation.is_landscape:
                self.pan_feedback.emit(PanFeedback(scale=session.initial_transform, offset_y=dy / 2))

    def pan_ended(self, dx: float, dy: float) -> Optional[Orientation]:
        """Close the pan; returns the orientation requested, if any."""
        with self._lock:
            session = self._active(GestureKind.PAN, "pan_ended")
            if session is None:
                return None
            self._session = None
            self.pan_feedback.emit(PanFeedback(scale=session.initial_transform))
            if abs(dy) <= abs(dx):
                return None
            target = None
            if dy < 0 and session.orientation is Orientation.PORTRAIT:
                target = Orientation.LANDSCAPE_RIGHT
            elif dy >= 0 and session.orientation.is_landscape:
                target = Orientation.PORTRAIT
            if target is not None:
                self._controller.request_orientation(target)
            return target

    def pan_cancelled(self) -> None:
        with self._lock:
            session = self._active(GestureKind.PAN, "pan_cancelled")
            if session is None:
                return
            self._session = None
            self.pan_feedback.emit(PanFeedback(scale=session.initial_transform))

    def _active(self, kind: GestureKind, event: str) -> Optional[GestureSession]:
        session = self._session
        if session is None or session.kind is not kind:
            log.debug("gesture_orphaned", extra={"event": event})
            return None
        return session
