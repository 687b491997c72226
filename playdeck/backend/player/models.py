"""Value types exchanged between the controller and its collaborators."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from playdeck.backend.common.types import JumpDirection, Orientation, PlayStatus


class LoadConfiguration(BaseModel):
    """What the host hands over when a video is loaded.

    Exactly one of ``source_url`` / ``source_bytes`` must be given.
    """

    source_url: Optional[str] = None
    source_bytes: Optional[bytes] = None
    title: str = ""
    cover_image: Optional[str] = Field(default=None, description="URL or path of the artwork")
    author_name: str = ""
    start_position_seconds: float = Field(default=0.0, ge=0)
    start_playback_rate: float = Field(default=1.0, gt=0)
    start_subtitle_source: Optional[str] = None

    @model_validator(mode="after")
    def _one_source(self) -> "LoadConfiguration":
        if (self.source_url is None) == (self.source_bytes is None):
            raise ValueError("exactly one of source_url or source_bytes is required")
        if self.source_url is not None and not self.source_url.strip():
            raise ValueError("source_url must not be empty")
        return self

    @property
    def source(self) -> str | bytes:
        return self.source_url if self.source_url is not None else self.source_bytes


@dataclass(frozen=True, slots=True)
class PlaybackState:
    """Immutable snapshot of the authoritative player state."""

    status: PlayStatus = PlayStatus.PAUSED
    is_loading: bool = True
    media_ready: bool = False
    position_seconds: float = 0.0
    duration_seconds: float = math.inf
    playback_rate: float = 1.0
    orientation: Orientation = Orientation.PORTRAIT
    controls_hidden: bool = False
    pending_seek_target: Optional[float] = None
    buffer_progress: float = 0.0
    scrubbing: bool = False
    scrub_position: Optional[float] = None

    @property
    def is_playing(self) -> bool:
        return self.status is PlayStatus.PLAYING

    @property
    def has_duration(self) -> bool:
        return math.isfinite(self.duration_seconds) and self.duration_seconds > 0

    @property
    def display_position(self) -> float:
        if self.pending_seek_target is not None:
            return self.pending_seek_target
        return self.position_seconds

    @property
    def progress(self) -> float:
        if not self.has_duration:
            return 0.0
        return min(max(self.display_position / self.duration_seconds, 0.0), 1.0)


@dataclass(frozen=True, slots=True)
class NowPlayingMetadata:
    title: str
    author: str
    cover_image: Optional[str] = None


@dataclass(frozen=True, slots=True)
class NowPlayingInfo:
    elapsed_seconds: float
    duration_seconds: Optional[float]
    rate: float


class RemoteCommandKind(str, Enum):
    PLAY = "play"
    PAUSE = "pause"
    SEEK_TO = "seek_to"
    NEXT = "next"
    PREVIOUS = "previous"


@dataclass(frozen=True, slots=True)
class RemoteCommand:
    kind: RemoteCommandKind
    position_seconds: Optional[float] = None

    @classmethod
    def seek_to(cls, seconds: float) -> "RemoteCommand":
        return cls(RemoteCommandKind.SEEK_TO, seconds)


@dataclass(frozen=True, slots=True)
class ViewGeometry:
    """Screen-derived values the gesture layer needs, supplied by the host."""

    width: float
    height: float
    seek_bar_width: float

    @property
    def midpoint_x(self) -> float:
        return self.width / 2


class IndicatorPhase(str, Enum):
    FADE_IN = "fade_in"
    FADE_OUT = "fade_out"
    HIDDEN = "hidden"


@dataclass(frozen=True, slots=True)
class JumpIndicator:
    direction: JumpDirection
    phase: IndicatorPhase
    duration: float = 0.0


@dataclass(frozen=True, slots=True)
class PlaybackFinished:
    position_seconds: float
    duration_seconds: float


@dataclass(frozen=True, slots=True)
class PanFeedback:
    """Visual feedback for an in-flight vertical pan."""

    scale: float = 1.0
    offset_y: float = 0.0
