"""Cue timestamp parsing."""

from __future__ import annotations

from playdeck.backend.common.logging import get_logger
from playdeck.backend.player.exceptions import MalformedTimecode

log = get_logger(__name__)


def _lenient_number(segment: str, token: str) -> float:
    # Unparseable segments count as zero instead of failing the whole token.
    try:
        value = float(segment)
    except ValueError:
        log.debug("timecode_segment_defaulted", extra={"token": token, "segment": segment})
        return 0.0
    if value != value or value in (float("inf"), float("-inf")):
        log.debug("timecode_segment_defaulted", extra={"token": token, "segment": segment})
        return 0.0
    return value


def parse_timecode(token: str) -> float:
    """Convert ``MM:SS.mmm`` or ``HH:MM:SS.mmm`` into seconds.

    The seconds field must carry a ``.`` separated milliseconds part; tokens
    without it, or with any other number of ``:`` fields, raise
    :class:`MalformedTimecode`.
    """

    raw = token.strip()
    parts = raw.split(":")
    if len(parts) == 2:
        hours_part = None
        minutes_part, seconds_field = parts
    elif len(parts) == 3:
        hours_part, minutes_part, seconds_field = parts
    else:
        raise MalformedTimecode(f"Unsupported timecode shape: {token!r}")

    seconds_parts = seconds_field.split(".")
    if len(seconds_parts) != 2:
        raise MalformedTimecode(f"Missing milliseconds in timecode: {token!r}")

    hours = _lenient_number(hours_part, raw) if hours_part is not None else 0.0
    minutes = _lenient_number(minutes_part, raw)
    seconds = _lenient_number(seconds_parts[0], raw)
    milliseconds = _lenient_number(seconds_parts[1], raw)

    return hours * 3600 + minutes * 60 + seconds + milliseconds / 1000


def try_parse_timecode(token: str) -> float | None:
    try:
        return parse_timecode(token)
    except MalformedTimecode:
        return None
