"""Clock labels for elapsed time and duration."""

from __future__ import annotations

import math
from typing import Optional

NO_DURATION = "--:--"


def format_clock(seconds: Optional[float]) -> str:
    """``MM:SS`` below an hour, ``H:MM:SS`` from an hour. Always truncates."""

    if seconds is None or not math.isfinite(seconds):
        return NO_DURATION
    total = int(max(0.0, seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None or not math.isfinite(seconds) or seconds <= 0:
        return NO_DURATION
    return format_clock(seconds)
