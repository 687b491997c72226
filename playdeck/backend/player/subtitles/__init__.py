from playdeck.backend.player.subtitles.models import Cue, SubtitleSource
from playdeck.backend.player.subtitles.parser import (
    CueListParser,
    ParserState,
    markup_policy,
    parse_cues,
)
from playdeck.backend.player.subtitles.service import SubtitleService
from playdeck.backend.player.subtitles.timecode import parse_timecode
from playdeck.backend.player.subtitles.track import SubtitleTrack

__all__ = [
    "Cue",
    "CueListParser",
    "ParserState",
    "SubtitleService",
    "SubtitleSource",
    "SubtitleTrack",
    "markup_policy",
    "parse_cues",
    "parse_timecode",
]
