"""Authoritative playback state and the intents that mutate it."""

from __future__ import annotations

from dataclasses import replace
from concurrent.futures import Future
from functools import wraps
from typing import Any, Mapping, Optional, Union
import math
import threading

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.observable import Observable, Signal
from playdeck.backend.common.scheduling import Scheduler, ThreadingScheduler, TimerHandle
from playdeck.backend.common.tasks import TaskRunner
from playdeck.backend.common.types import JumpDirection, Orientation, PlayStatus
from playdeck.backend.network_handlers.session import HttpSession
from playdeck.backend.player.exceptions import PlayerError
from playdeck.backend.player.formatting import format_clock, format_duration
from playdeck.backend.player.inactivity import InactivityTimer
from playdeck.backend.player.interfaces import (
    GeometryRequester,
    NowPlayingReporter,
    PlayerDelegate,
    PlayerDriver,
    PlayerEvents,
)
from playdeck.backend.player.models import (
    LoadConfiguration,
    NowPlayingInfo,
    NowPlayingMetadata,
    PlaybackFinished,
    PlaybackState,
    RemoteCommand,
    RemoteCommandKind,
)
from playdeck.backend.player.play_next import PlayNextCountdown
from playdeck.backend.player.subtitles.models import SubtitleSource
from playdeck.backend.player.subtitles.parser import CueListParser
from playdeck.backend.player.subtitles.service import SubtitleService
from playdeck.backend.player.subtitles.track import SubtitleTrack
from playdeck.config.settings.player import PlayerOptions

log = get_logger(__name__)


def _serialized(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


def _normalize_duration(duration: Optional[float]) -> float:
    if duration is None or math.isnan(duration) or duration <= 0:
        return math.inf
    return float(duration)


class PlayerController(PlayerEvents):
    """Single owner of :class:`PlaybackState`.

    Input handlers, remote commands and the driver never write fields directly;
    they call the named intents below. Every intent runs under one control lock
    so timer callbacks, driver events and user input never interleave.
    """

    def __init__(
        self,
        driver: PlayerDriver,
        *,
        options: Optional[PlayerOptions] = None,
        scheduler: Optional[Scheduler] = None,
        subtitle_service: Optional[SubtitleService] = None,
        now_playing: Optional[NowPlayingReporter] = None,
        geometry: Optional[GeometryRequester] = None,
        delegate: Optional[PlayerDelegate] = None,
    ) -> None:
        self.options = options or PlayerOptions()
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = getattr(self._scheduler, "control_lock", None) or threading.RLock()
        self._driver = driver
        self._subtitle_service = subtitle_service
        self._owns_subtitle_service = False
        self._now_playing = now_playing
        self._geometry = geometry
        self._delegate = delegate or PlayerDelegate()
        self._has_delegate = delegate is not None

        self.track = SubtitleTrack(CueListParser(self.options.subtitle_markup))
        self.state: Observable[PlaybackState] = Observable(
            PlaybackState(controls_hidden=self.options.initial_controls_hidden),
            name="playback_state",
        )
        self.finished: Signal[PlaybackFinished] = Signal("playback_finished")
        self.subtitle_errors: Signal[Exception] = Signal("subtitle_errors")
        self.media_errors: Signal[str] = Signal("media_errors")

        self.inactivity = InactivityTimer(
            self._scheduler,
            self._on_inactivity,
            interval=self.options.inactivity_interval,
        )
        self.play_next = PlayNextCountdown(
            self._scheduler,
            self._advance_to_next,
            duration=self.options.play_next_countdown,
        )

        self._metadata: Optional[NowPlayingMetadata] = None
        self._start_position = 0.0
        self._play_on_ready = self.options.autoplay_on_ready
        self._paused_by_scrub = False
        self._resume_after_seek = False
        self._seek_timeout: Optional[TimerHandle] = None
        self._seek_generation = 0
        self._finished_fired = False
        self._subtitle_generation = 0

        self._driver.attach(self)

    @classmethod
    def from_settings(cls, driver: PlayerDriver, **kwargs: Any) -> "PlayerController":
        from playdeck.config.settings import get_settings

        settings = get_settings()
        kwargs.setdefault("options", settings.player)
        controller = cls(driver, **kwargs)
        log.info("player_configured", extra={"app": settings.app_name, "env": settings.env})
        if controller._subtitle_service is None:
            controller._subtitle_service = SubtitleService(
                task_runner=TaskRunner(max_workers=settings.task_workers, context="subtitles"),
                http=HttpSession(timeout=settings.http_timeout),
            )
            controller._owns_subtitle_service = True
        return controller

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> PlaybackState:
        return self.state.value

    @property
    def subtitle_text(self) -> Observable[str]:
        return self.track.current_text

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def current_second(self) -> int:
        return int(math.ceil(self.snapshot.display_position))

    def current_progress(self) -> float:
        return self.snapshot.progress

    def elapsed_label(self) -> str:
        return format_clock(self.snapshot.display_position)

    def duration_label(self) -> str:
        return format_duration(self.snapshot.duration_seconds)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @_serialized
    def load(self, config: Union[LoadConfiguration, Mapping[str, Any]]) -> None:
        if not isinstance(config, LoadConfiguration):
            config = LoadConfiguration.model_validate(config)
        self._reset_session()
        self._start_position = config.start_position_seconds
        self._play_on_ready = self.options.autoplay_on_ready
        self._set(
            PlaybackState(
                orientation=self.snapshot.orientation,
                controls_hidden=self.options.initial_controls_hidden,
                playback_rate=config.start_playback_rate,
            )
        )
        self._metadata = NowPlayingMetadata(
            title=config.title,
            author=config.author_name,
            cover_image=config.cover_image,
        )
        if self._now_playing is not None:
            self._now_playing.set_metadata(self._metadata)

        log.info(
            "player_load",
            extra={"title": config.title, "start_position": config.start_position_seconds},
        )
        self._driver.load(config.source)
        if config.start_playback_rate != 1.0:
            self._driver.set_rate(config.start_playback_rate)
        self.unload_subtitles()
        if config.start_subtitle_source:
            self.configure_text_track(config.start_subtitle_source)

    @_serialized
    def switch_rendition(self, url: str, start_position: float = 0.0) -> None:
        """Reload the same title from another URL, resuming at ``start_position``."""
        current = self.snapshot
        self._cancel_seek_timeout()
        self._resume_after_seek = False
        self._start_position = max(0.0, start_position)
        self._play_on_ready = current.is_playing or self.options.autoplay_on_ready
        self._update(
            status=PlayStatus.PAUSED,
            is_loading=True,
            media_ready=False,
            pending_seek_target=None,
            buffer_progress=0.0,
        )
        log.info("rendition_switch", extra={"start_position": self._start_position})
        self._driver.load(url)

    @_serialized
    def clean_player_data(self) -> None:
        """Release the loaded media and reset state; orientation survives."""
        if self.snapshot.is_playing:
            self._driver.pause()
        self._driver.unload()
        self._reset_session()
        self.unload_subtitles()
        self._set(
            PlaybackState(
                orientation=self.snapshot.orientation,
                controls_hidden=True,
                is_loading=False,
            )
        )
        log.info("player_cleaned")

    @_serialized
    def clean_now_playing_data(self) -> None:
        self._metadata = None
        if self._now_playing is not None:
            self._now_playing.clear()

    def close(self) -> None:
        self.clean_player_data()
        if self._owns_subtitle_service and self._subtitle_service is not None:
            self._subtitle_service.close()

    # ------------------------------------------------------------------
    # Transport intents
    # ------------------------------------------------------------------
    @_serialized
    def request_play(self) -> None:
        current = self.snapshot
        self._paused_by_scrub = False
        if current.is_playing:
            return
        self.play_next.cancel()
        self._driver.play()
        changes: dict[str, Any] = {"status": PlayStatus.PLAYING}
        if current.media_ready:
            changes["is_loading"] = False
        self._update(**changes)

    @_serialized
    def request_pause(self, *, by_scrub: bool = False) -> None:
        current = self.snapshot
        if not current.is_playing:
            if not by_scrub:
                self._paused_by_scrub = False
            return
        self._paused_by_scrub = by_scrub
        self._driver.pause()
        self._update(status=PlayStatus.PAUSED)

    @_serialized
    def toggle_play(self) -> None:
        if self.snapshot.is_playing:
            self.request_pause()
        else:
            self.request_play()

    @_serialized
    def request_seek(self, target: float, *, resume: Optional[bool] = None) -> float:
        """Ask the driver to seek; returns the clamped target.

        ``resume`` decides whether a scrub-induced pause ends once the driver
        confirms the seek. ``None`` uses ``auto_resume_after_seek``.
        """
        current = self.snapshot
        target = self._clamp(target, current)
        self._resume_after_seek = self.options.auto_resume_after_seek if resume is None else resume
        self._arm_seek_timeout(target)
        if not (current.has_duration and target >= current.duration_seconds):
            self._finished_fired = False
            self.play_next.cancel()
        self._update(pending_seek_target=target)
        log.debug("seek_requested", extra={"target": target})
        self._driver.seek_to(target)
        self._refresh_subtitles(target)
        return target

    @_serialized
    def time_jump(self, direction: Union[JumpDirection, str], magnitude: Optional[float] = None) -> float:
        direction = JumpDirection(direction)
        step = self.options.jump_seconds if magnitude is None else magnitude
        base = self.snapshot.display_position
        return self.request_seek(base + direction.sign * step)

    @_serialized
    def set_rate(self, rate: float) -> None:
        if not rate > 0:
            raise PlayerError(f"Playback rate must be positive, got {rate}")
        self._driver.set_rate(rate)
        self._update(playback_rate=rate)

    # ------------------------------------------------------------------
    # Presentation intents
    # ------------------------------------------------------------------
    @_serialized
    def set_orientation(self, orientation: Union[Orientation, str]) -> None:
        self._update(orientation=Orientation(orientation))

    @_serialized
    def request_orientation(self, orientation: Union[Orientation, str]) -> None:
        orientation = Orientation(orientation)
        if self._geometry is None:
            log.debug("geometry_request_dropped", extra={"orientation": orientation.value})
            return
        self._geometry.request_orientation(orientation)

    @_serialized
    def toggle_full_screen(self) -> None:
        if self.snapshot.orientation is Orientation.PORTRAIT:
            self.request_orientation(Orientation.LANDSCAPE_RIGHT)
        else:
            self.request_orientation(Orientation.PORTRAIT)

    @_serialized
    def set_controls_hidden(self, hidden: bool, *, restart_timer: bool = True) -> None:
        if hidden and self.snapshot.scrubbing:
            log.debug("controls_hide_ignored_during_scrub")
            return
        self._update(controls_hidden=hidden)
        if hidden:
            self.inactivity.cancel()
        elif restart_timer:
            self.inactivity.start()

    @_serialized
    def toggle_controls(self) -> None:
        self.set_controls_hidden(not self.snapshot.controls_hidden)

    @_serialized
    def start_loading(self) -> None:
        self._update(is_loading=True)

    @_serialized
    def stop_loading(self) -> None:
        self._update(is_loading=False)

    @_serialized
    def open_settings(self) -> None:
        self._delegate.setting()

    # ------------------------------------------------------------------
    # Gesture-driven intents
    # ------------------------------------------------------------------
    @_serialized
    def jump_from_double_tap(self, direction: Union[JumpDirection, str]) -> float:
        if self.options.hide_controls_during_jump_indicator:
            self.set_controls_hidden(True)
        else:
            self.set_controls_hidden(False)
        return self.time_jump(direction)

    @_serialized
    def begin_scrub(self) -> float:
        """Open a scrub session; returns the slider value it starts from."""
        current = self.snapshot
        initial = current.progress
        self.request_pause(by_scrub=True)
        self.inactivity.suppress()
        self._update(scrubbing=True, scrub_position=initial)
        self.set_controls_hidden(False, restart_timer=False)
        return initial

    @_serialized
    def preview_scrub(self, value: float) -> None:
        if not self.snapshot.scrubbing:
            log.debug("scrub_preview_orphaned")
            return
        self._update(scrub_position=min(max(value, 0.0), 1.0))

    @_serialized
    def end_scrub(self, value: Optional[float]) -> Optional[float]:
        """Close the scrub session, committing at most one seek.

        ``value`` is the normalized slider position, ``None`` when the
        gesture was cancelled.
        """
        current = self.snapshot
        if not current.scrubbing:
            log.debug("scrub_end_orphaned")
            return None
        self._update(scrubbing=False, scrub_position=None)
        target = None
        deferred_resume = False
        if value is not None and current.has_duration:
            value = min(max(value, 0.0), 1.0)
            target = self.request_seek(value * current.duration_seconds)
            deferred_resume = self._resume_after_seek
        if self._paused_by_scrub and not deferred_resume:
            self.request_play()
        self.inactivity.resume()
        return target

    # ------------------------------------------------------------------
    # Subtitles
    # ------------------------------------------------------------------
    @_serialized
    def configure_text_track(self, source: Union[SubtitleSource, str, None]) -> Optional[Future]:
        """Fetch and attach a subtitle source; ``None`` or ``""`` removes subtitles."""
        if source is None or (isinstance(source, str) and not source.strip()):
            self.unload_subtitles()
            return None
        source = SubtitleSource.coerce(source)
        self._subtitle_generation += 1
        generation = self._subtitle_generation
        future = self._subtitles().load_async(source)

        def _deliver(fut: Future) -> None:
            self._scheduler.call_soon(
                lambda: self._on_subtitles_fetched(generation, source, fut),
                name="subtitles_loaded",
            )

        future.add_done_callback(_deliver)
        return future

    @_serialized
    def load_subtitle_text(self, text: str, source: Optional[SubtitleSource] = None) -> int:
        self._subtitle_generation += 1
        cues = self.track.load(text, source)
        self._refresh_subtitles(self.snapshot.display_position)
        return len(cues)

    @_serialized
    def unload_subtitles(self) -> None:
        self._subtitle_generation += 1
        self.track.unload()

    @_serialized
    def report_subtitle_position(self, position: float) -> str:
        current = self.snapshot
        if current.pending_seek_target is not None:
            position = current.pending_seek_target
        return self._refresh_subtitles(position)

    @_serialized
    def _on_subtitles_fetched(self, generation: int, source: SubtitleSource, future: Future) -> None:
        if generation != self._subtitle_generation:
            log.info("subtitle_result_discarded", extra={"source": source.location})
            return
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.warning("subtitle_load_failed", extra={"source": source.location, "error": str(exc)})
            self.subtitle_errors.emit(exc)
            return
        count = self.load_subtitle_text(future.result(), source)
        log.info("subtitle_loaded", extra={"source": source.location, "cues": count})

    # ------------------------------------------------------------------
    # Remote commands
    # ------------------------------------------------------------------
    @_serialized
    def handle_remote_command(self, command: RemoteCommand) -> None:
        kind = RemoteCommandKind(command.kind)
        log.debug("remote_command", extra={"command": kind.value})
        if kind is RemoteCommandKind.PLAY:
            self.request_play()
        elif kind is RemoteCommandKind.PAUSE:
            self.request_pause()
        elif kind is RemoteCommandKind.SEEK_TO:
            if command.position_seconds is None:
                log.debug("remote_seek_without_position")
                return
            self.request_seek(command.position_seconds)
        elif kind is RemoteCommandKind.NEXT:
            self._delegate.next_track()
        elif kind is RemoteCommandKind.PREVIOUS:
            if self.snapshot.display_position < self.options.previous_track_threshold:
                self._delegate.previous_track()
            else:
                self.request_seek(0.0)

    # ------------------------------------------------------------------
    # Play-next
    # ------------------------------------------------------------------
    @_serialized
    def play_next_now(self) -> None:
        self.play_next.play_now()

    @_serialized
    def replay(self) -> None:
        self.play_next.cancel()
        self.request_seek(0.0, resume=False)
        self.request_play()

    # ------------------------------------------------------------------
    # Driver events
    # ------------------------------------------------------------------
    @_serialized
    def report_position(self, position: float, duration: Optional[float] = None, rate: Optional[float] = None) -> None:
        current = self.snapshot
        changes: dict[str, Any] = {}
        if duration is not None:
            changes["duration_seconds"] = _normalize_duration(duration)
        if rate is not None and rate >= 0:
            changes["playback_rate"] = rate
        if position is None or math.isnan(position):
            position = current.position_seconds
        position = max(0.0, position)

        pending = current.pending_seek_target
        if pending is None:
            changes["position_seconds"] = position
            self._update(**changes)
        elif abs(position - pending) <= self.options.seek_tolerance:
            self._update(**changes)
            self._confirm_seek(pending)
        else:
            # Stale pre-seek report: keep showing the seek target.
            self._update(**changes)
            log.debug("stale_position_coalesced", extra={"position": position, "target": pending})

        updated = self.snapshot
        self._refresh_subtitles(updated.display_position)
        self._report_now_playing(updated)
        self._check_finished(updated)

    @_serialized
    def seek_completed(self, position: Optional[float] = None) -> None:
        current = self.snapshot
        if current.pending_seek_target is None:
            return
        target = current.pending_seek_target if position is None else self._clamp(position, current)
        self._confirm_seek(target)

    @_serialized
    def media_ready(self, duration: Optional[float] = None) -> None:
        changes: dict[str, Any] = {"media_ready": True, "is_loading": False}
        if duration is not None:
            changes["duration_seconds"] = _normalize_duration(duration)
        self._update(**changes)
        log.info("media_ready", extra={"duration": changes.get("duration_seconds")})
        if self._start_position > 0:
            self.request_seek(self._start_position, resume=False)
        self._start_position = 0.0
        if self._play_on_ready:
            self.request_play()
        self.set_controls_hidden(False)

    @_serialized
    def buffer_progress(self, fraction: float) -> None:
        if fraction is None or math.isnan(fraction):
            fraction = 0.0
        self._update(buffer_progress=min(max(fraction, 0.0), 1.0))

    @_serialized
    def media_failed(self, reason: str) -> None:
        log.error("media_failed", extra={"reason": reason})
        self._cancel_seek_timeout()
        self._paused_by_scrub = False
        self._update(
            status=PlayStatus.PAUSED,
            is_loading=False,
            media_ready=False,
            pending_seek_target=None,
        )
        self.media_errors.emit(reason)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _set(self, state: PlaybackState) -> None:
        self.state.accept(state)

    def _update(self, **changes: Any) -> None:
        if changes:
            self.state.accept(replace(self.state.value, **changes))

    def _clamp(self, target: float, current: PlaybackState) -> float:
        if target is None or math.isnan(target):
            target = 0.0
        target = max(0.0, float(target))
        if current.has_duration:
            target = min(target, current.duration_seconds)
        return target

    def _subtitles(self) -> SubtitleService:
        if self._subtitle_service is None:
            self._subtitle_service = SubtitleService()
            self._owns_subtitle_service = True
        return self._subtitle_service

    def _refresh_subtitles(self, position: float) -> str:
        return self.track.active_text(position)

    def _report_now_playing(self, current: PlaybackState) -> None:
        if self._now_playing is None:
            return
        self._now_playing.update(
            NowPlayingInfo(
                elapsed_seconds=current.display_position,
                duration_seconds=current.duration_seconds if current.has_duration else None,
                rate=current.playback_rate if current.is_playing else 0.0,
            )
        )

    def _check_finished(self, current: PlaybackState) -> None:
        if not current.has_duration or current.pending_seek_target is not None:
            return
        if current.position_seconds < current.duration_seconds or self._finished_fired:
            return
        self._finished_fired = True
        log.info("playback_finished", extra={"duration": current.duration_seconds})
        self.finished.emit(PlaybackFinished(current.position_seconds, current.duration_seconds))
        if self._has_delegate:
            self.play_next.start()

    def _arm_seek_timeout(self, target: float) -> None:
        self._cancel_seek_timeout()
        self._seek_generation += 1
        generation = self._seek_generation
        self._seek_timeout = self._scheduler.call_later(
            self.options.seek_timeout,
            lambda: self._on_seek_timeout(generation, target),
            name="seek_timeout",
        )

    def _cancel_seek_timeout(self) -> None:
        self._seek_generation += 1
        if self._seek_timeout is not None:
            self._seek_timeout.cancel()
            self._seek_timeout = None

    @_serialized
    def _on_seek_timeout(self, generation: int, target: float) -> None:
        if generation != self._seek_generation or self.snapshot.pending_seek_target is None:
            return
        log.warning("seek_confirmation_timeout", extra={"target": target})
        self._confirm_seek(target)

    def _confirm_seek(self, target: float) -> None:
        self._cancel_seek_timeout()
        self._update(position_seconds=target, pending_seek_target=None)
        log.debug("seek_confirmed", extra={"position": target})
        resume, self._resume_after_seek = self._resume_after_seek, False
        if resume and self._paused_by_scrub:
            self.request_play()
        self._refresh_subtitles(target)

    def _on_inactivity(self) -> None:
        with self._lock:
            self.set_controls_hidden(True)

    def _advance_to_next(self) -> None:
        with self._lock:
            log.info("play_next_advance")
            self._delegate.next_track()

    def _reset_session(self) -> None:
        self._cancel_seek_timeout()
        self.inactivity.cancel()
        self.play_next.cancel()
        self._finished_fired = False
        self._paused_by_scrub = False
        self._resume_after_seek = False
        self._start_position = 0.0
