"""Active-cue resolution for the currently loaded subtitle source."""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from playdeck.backend.common.logging import get_logger
from playdeck.backend.common.observable import Observable
from playdeck.backend.player.subtitles.models import Cue, SubtitleSource
from playdeck.backend.player.subtitles.parser import CueListParser

log = get_logger(__name__)


class SubtitleTrack:
    """Owns the cue list of one subtitle source.

    ``current_text`` is an :class:`Observable` so the caption renderer can
    subscribe once and follow every position query, load and unload.
    """

    def __init__(self, parser: Optional[CueListParser] = None) -> None:
        self._parser = parser or CueListParser()
        self._cues: Tuple[Cue, ...] = ()
        self._source: Optional[SubtitleSource] = None
        self.current_text: Observable[str] = Observable("", name="subtitle_text")

    @property
    def cues(self) -> Tuple[Cue, ...]:
        return self._cues

    @property
    def source(self) -> Optional[SubtitleSource]:
        return self._source

    @property
    def is_loaded(self) -> bool:
        return bool(self._cues)

    def load(self, text: str, source: Optional[SubtitleSource] = None) -> List[Cue]:
        cues = self._parser.parse(text)
        self.load_cues(cues, source)
        return cues

    def load_cues(self, cues: Iterable[Cue], source: Optional[SubtitleSource] = None) -> None:
        self._cues = tuple(cues)
        self._source = source
        log.info(
            "subtitle_track_loaded",
            extra={"cues": len(self._cues), "source": source.location if source else None},
        )

    def unload(self) -> None:
        had_cues = bool(self._cues)
        self._cues = ()
        self._source = None
        self.current_text.accept("")
        if had_cues:
            log.info("subtitle_track_unloaded")

    def cue_at(self, position: float) -> Optional[Cue]:
        # Overlapping cues resolve to the first one in stored order.
        for cue in self._cues:
            if cue.contains(position):
                return cue
        return None

    def active_text(self, position: float) -> str:
        cue = self.cue_at(position)
        text = cue.text if cue else ""
        self.current_text.accept(text)
        return text
