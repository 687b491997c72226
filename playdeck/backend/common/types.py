from __future__ import annotations

from enum import Enum
from typing import Literal


LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class PlayStatus(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE_LEFT = "landscape_left"
    LANDSCAPE_RIGHT = "landscape_right"

    @property
    def is_landscape(self) -> bool:
        return self is not Orientation.PORTRAIT


class JumpDirection(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"

    @property
    def sign(self) -> int:
        return 1 if self is JumpDirection.FORWARD else -1
