"""Exceptions for the player subsystem."""

from __future__ import annotations

from playdeck.backend.common.errors import PlaydeckError


class PlayerError(PlaydeckError):
    """Top-level error raised by the player subsystem."""


class DriverUnavailable(PlayerError):
    """Raised when a playback driver backend cannot be initialised."""


class SubtitleError(PlayerError):
    """Raised when subtitle loading or parsing fails."""


class MalformedTimecode(SubtitleError, ValueError):
    """Raised when a cue timestamp token cannot be interpreted."""


class SubtitleFetchError(SubtitleError):
    """Raised when a subtitle source cannot be read or downloaded."""
