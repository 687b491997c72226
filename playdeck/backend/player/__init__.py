"""Playback control core: state, gestures, subtitles and driver seams."""

from playdeck.backend.player.controller import PlayerController
from playdeck.backend.player.exceptions import (
    DriverUnavailable,
    MalformedTimecode,
    PlayerError,
    SubtitleError,
    SubtitleFetchError,
)
from playdeck.backend.player.gestures import GestureKind, GestureSession, InputDisambiguator
from playdeck.backend.player.inactivity import InactivityTimer
from playdeck.backend.player.interfaces import (
    GeometryRequester,
    NowPlayingReporter,
    PlayerDelegate,
    PlayerDriver,
    PlayerEvents,
)
from playdeck.backend.player.models import (
    LoadConfiguration,
    PlaybackState,
    RemoteCommand,
    RemoteCommandKind,
    ViewGeometry,
)
from playdeck.backend.player.play_next import PlayNextCountdown

__all__ = [
    "DriverUnavailable",
    "GeometryRequester",
    "GestureKind",
    "GestureSession",
    "InactivityTimer",
    "InputDisambiguator",
    "LoadConfiguration",
    "MalformedTimecode",
    "NowPlayingReporter",
    "PlayNextCountdown",
    "PlaybackState",
    "PlayerController",
    "PlayerDelegate",
    "PlayerDriver",
    "PlayerError",
    "PlayerEvents",
    "RemoteCommand",
    "RemoteCommandKind",
    "SubtitleError",
    "SubtitleFetchError",
    "ViewGeometry",
]
