from __future__ import annotations


class PlaydeckError(Exception):
    """Base for all playdeck exceptions."""


class ConfigError(PlaydeckError):
    """Configuration related issues."""


class TaskError(PlaydeckError):
    """Task scheduling/execution issues."""


class NetworkError(PlaydeckError):
    """Network/HTTP layer issues."""
