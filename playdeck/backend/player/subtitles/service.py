"""Subtitle text retrieval for local files and remote URLs."""

from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path
from typing import Optional, Union

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.tasks import TaskRunner, TaskSpec
from playdeck.backend.network_handlers.session import HttpSession, NetError
from playdeck.backend.player.exceptions import SubtitleFetchError
from playdeck.backend.player.subtitles.models import SubtitleSource

log = get_logger(__name__)

SourceLike = Union[SubtitleSource, str, Path]


class SubtitleService:
    """Fetches raw cue-list text off the control thread.

    Parsing is left to :class:`~playdeck.backend.player.subtitles.track.SubtitleTrack`;
    this service only turns a source into UTF-8 text.
    """

    def __init__(
        self,
        task_runner: Optional[TaskRunner] = None,
        http: Optional[HttpSession] = None,
        *,
        retries: int = 0,
        backoff_sec: float = 1.0,
    ) -> None:
        self._task_runner = task_runner or TaskRunner(max_workers=2, context="subtitles")
        self._http = http or HttpSession()
        self._retries = retries
        self._backoff_sec = backoff_sec

    def fetch_text(self, source: SourceLike) -> str:
        source = SubtitleSource.coerce(source)
        if source.is_remote:
            try:
                return self._http.get_text(source.location)
            except NetError as exc:
                raise SubtitleFetchError(f"Unable to download subtitles from {source.location}: {exc}") from exc

        path = source.local_path
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise SubtitleFetchError(f"Unable to read subtitles at {path}: {exc}") from exc

    def load_async(self, source: SourceLike) -> Future:
        source = SubtitleSource.coerce(source)
        log.debug("subtitle_fetch_submitted", extra={"source": source.location})
        return self._task_runner.submit(
            TaskSpec(
                fn=self.fetch_text,
                args=(source,),
                name="subtitle_fetch",
                retries=self._retries,
                backoff_sec=self._backoff_sec,
            )
        )

    def close(self) -> None:
        self._task_runner.close(wait=False)
        self._http.close()
