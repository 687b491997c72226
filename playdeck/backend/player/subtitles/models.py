"""Dataclasses shared by the subtitle engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse


@dataclass(frozen=True, slots=True)
class Cue:
    start_time: float
    end_time: float
    text: str

    def contains(self, position: float) -> bool:
        return self.start_time <= position <= self.end_time

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def as_dict(self) -> dict[str, object]:
        return {"start": self.start_time, "end": self.end_time, "text": self.text}


@dataclass(frozen=True, slots=True)
class SubtitleSource:
    """Where a cue list comes from: a local path, ``file://`` URL or http(s) URL."""

    location: str
    language: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union["SubtitleSource", str, Path]) -> "SubtitleSource":
        if isinstance(value, SubtitleSource):
            return value
        return cls(location=str(value))

    @property
    def is_remote(self) -> bool:
        return urlparse(self.location).scheme in ("http", "https")

    @property
    def local_path(self) -> Optional[Path]:
        if self.is_remote:
            return None
        parsed = urlparse(self.location)
        if parsed.scheme == "file":
            return Path(parsed.path)
        return Path(self.location).expanduser()
