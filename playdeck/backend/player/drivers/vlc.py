"""python-vlc backed :class:`PlayerDriver`."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.tasks import TaskRunner, TaskSpec
from playdeck.backend.player.drivers.vlc_paths import resolve_vlc_runtime
from playdeck.backend.player.exceptions import DriverUnavailable, PlayerError
from playdeck.backend.player.interfaces import PlayerDriver, PlayerEvents

log = get_logger(__name__)


class VlcPlayerDriver(PlayerDriver):
    """Forwards requests to libVLC and translates its events for the controller.

    libVLC fires events on its own threads and must not be re-entered from
    them. Handlers read the payload and hand the listener call to a single
    worker, so listener calls keep their order.
    """

    name = "vlc"

    def __init__(self, vlc_root: Optional[str] = None, instance_args: Sequence[str] = ()) -> None:
        runtime = resolve_vlc_runtime(vlc_root)
        if runtime is None:
            log.info("vlc_system_runtime")
        try:
            import vlc  # type: ignore
        except Exception as exc:  # noqa: BLE001
            raise DriverUnavailable(f"python-vlc import failed: {exc}") from exc
        self._vlc = vlc
        self._instance = vlc.Instance(*instance_args)
        if self._instance is None:
            raise DriverUnavailable("libVLC could not create an instance")
        self._player = self._instance.media_player_new()
        self._media: Any = None
        self._temp_file: Optional[Path] = None
        self._length_ms = 0
        self._rate = 1.0
        self.listener: Optional[PlayerEvents] = None
        self._events = TaskRunner(max_workers=1, context="vlc-events")
        self._register_events()

    # ------------------------------------------------------------------
    # PlayerDriver
    # ------------------------------------------------------------------
    def load(self, source: Union[str, bytes]) -> None:
        self._release_media()
        self._length_ms = 0
        media = self._create_media(source)
        self._media = media
        self._player.set_media(media)
        media.event_manager().event_attach(
            self._vlc.EventType.MediaParsedChanged,
            self._on_parsed,
        )
        media.parse_with_options(self._vlc.MediaParseFlag.network, 0)
        log.info("vlc_media_loaded", extra={"source": self._describe(source)})

    def play(self) -> None:
        if self._player.play() == -1:
            raise PlayerError("libVLC refused to start playback")

    def pause(self) -> None:
        self._player.set_pause(1)

    def seek_to(self, seconds: float) -> None:
        self._player.set_time(int(seconds * 1000))

    def set_rate(self, rate: float) -> None:
        self._rate = rate
        self._player.set_rate(rate)

    def unload(self) -> None:
        self._player.stop()
        self._release_media()

    def release(self) -> None:
        self.unload()
        self._player.release()
        self._instance.release()
        self._events.close(wait=False)

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every event forwarded so far has reached the listener."""
        if not self._events.closed:
            self._events.submit(TaskSpec(fn=lambda: None, name="vlc_drain")).result(timeout)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _create_media(self, source: Union[str, bytes]):  # noqa: ANN202
        if isinstance(source, bytes):
            with tempfile.NamedTemporaryFile(prefix="playdeck-", suffix=".media", delete=False) as fh:
                fh.write(source)
                self._temp_file = Path(fh.name)
            return self._instance.media_new_path(str(self._temp_file))
        path = Path(source).expanduser()
        if "://" not in source and path.exists():
            return self._instance.media_new_path(str(path))
        return self._instance.media_new(source)

    def _release_media(self) -> None:
        if self._media is not None:
            self._media.release()
            self._media = None
        if self._temp_file is not None:
            try:
                self._temp_file.unlink()
            except OSError as exc:
                log.warning("vlc_temp_cleanup_failed", extra={"path": str(self._temp_file), "error": str(exc)})
            self._temp_file = None

    @staticmethod
    def _describe(source: Union[str, bytes]) -> str:
        if isinstance(source, bytes):
            return f"<{len(source)} bytes>"
        return source

    def _forward(self, method: str, *args: Any) -> None:
        listener = self.listener
        if listener is None or self._events.closed:
            return
        self._events.submit(TaskSpec(fn=getattr(listener, method), args=args, name=f"vlc_{method}"))

    def _register_events(self) -> None:
        event_type = self._vlc.EventType
        manager = self._player.event_manager()
        handlers = {
            event_type.MediaPlayerTimeChanged: self._on_time_changed,
            event_type.MediaPlayerLengthChanged: self._on_length_changed,
            event_type.MediaPlayerBuffering: self._on_buffering,
            event_type.MediaPlayerEndReached: self._on_end_reached,
            event_type.MediaPlayerEncounteredError: self._on_error,
        }
        for event, handler in handlers.items():
            manager.event_attach(event, handler)

    def _on_parsed(self, event) -> None:  # noqa: ANN001
        if self._media is None:
            return
        duration_ms = self._media.get_duration()
        self._length_ms = max(duration_ms, 0)
        self._forward("media_ready", duration_ms / 1000 if duration_ms > 0 else None)

    def _on_time_changed(self, event) -> None:  # noqa: ANN001
        duration = self._length_ms / 1000 if self._length_ms > 0 else None
        self._forward("report_position", event.u.new_time / 1000, duration, self._rate)

    def _on_length_changed(self, event) -> None:  # noqa: ANN001
        self._length_ms = max(event.u.new_length, 0)

    def _on_buffering(self, event) -> None:  # noqa: ANN001
        self._forward("buffer_progress", event.u.new_cache / 100)

    def _on_end_reached(self, event) -> None:  # noqa: ANN001
        if self._length_ms <= 0:
            return
        length = self._length_ms / 1000
        self._forward("report_position", length, length, self._rate)

    def _on_error(self, event) -> None:  # noqa: ANN001
        log.error("vlc_playback_error")
        self._forward("media_failed", "libVLC reported a playback error")
