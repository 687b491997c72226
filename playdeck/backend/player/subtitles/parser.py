"""Cue list (WebVTT-style) parser.

The parser walks the input line by line with a small state machine:

* ``SEEKING_CUE``: between blocks. Headers, NOTE blocks and cue identifiers
  move the machine to ``IN_CUE_TIMING``.
* ``IN_CUE_TIMING``: waiting for a ``start --> end`` line.
* ``IN_CUE_TEXT``: collecting payload lines until a blank line or the end of
  the input closes the cue.

Blocks whose timing line cannot be parsed are dropped without interrupting the
rest of the file.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from playdeck.backend.common.logging import get_logger
from playdeck.backend.player.subtitles.models import Cue
from playdeck.backend.player.subtitles.timecode import try_parse_timecode

log = get_logger(__name__)

TIMING_SEPARATOR = " --> "

MarkupPolicy = Callable[[str], str]

_CUE_INDEX_RE = re.compile(r"^[+-]?\d+$")
_TAG_RE = re.compile(r"<[^>]+>")


def keep_markup(text: str) -> str:
    return text


def strip_tags(text: str) -> str:
    """Remove ``<...>`` tags (voice spans, inline timestamps) and unescape entities."""
    return html.unescape(_TAG_RE.sub("", text)).strip()


class StripLiterals:
    """Remove specific tag literals, leaving any other markup untouched."""

    def __init__(self, literals: Sequence[str] = ("<b>", "</b>")) -> None:
        self.literals = tuple(literals)

    def __call__(self, text: str) -> str:
        for literal in self.literals:
            text = text.replace(literal, "")
        return text.strip()


MARKUP_POLICIES: dict[str, MarkupPolicy] = {
    "keep": keep_markup,
    "strip_tags": strip_tags,
    "strip_bold": StripLiterals(("<b>", "</b>")),
}


def markup_policy(name: str) -> MarkupPolicy:
    try:
        return MARKUP_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown subtitle markup policy '{name}'") from None


class ParserState(str, Enum):
    SEEKING_CUE = "seeking_cue"
    IN_CUE_TIMING = "in_cue_timing"
    IN_CUE_TEXT = "in_cue_text"


@dataclass
class _PendingCue:
    start: Optional[float] = None
    end: Optional[float] = None
    lines: List[str] = field(default_factory=list)
    line_no: int = 0

    @property
    def has_timing(self) -> bool:
        return self.start is not None and self.end is not None


class CueListParser:
    def __init__(self, markup: MarkupPolicy | str = keep_markup) -> None:
        self.markup: MarkupPolicy = markup_policy(markup) if isinstance(markup, str) else markup

    def parse(self, text: str) -> List[Cue]:
        cues: List[Cue] = []
        state = ParserState.SEEKING_CUE
        pending: Optional[_PendingCue] = None
        dropped = 0

        for line_no, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()

            if not stripped:
                if pending is not None:
                    dropped += self._flush(pending, cues)
                pending = None
                state = ParserState.SEEKING_CUE
                continue

            if _CUE_INDEX_RE.match(stripped):
                continue

            if "-->" in stripped:
                if pending is not None:
                    dropped += self._flush(pending, cues)
                pending = self._start_cue(stripped, line_no)
                state = ParserState.IN_CUE_TEXT
                continue

            if state is ParserState.IN_CUE_TEXT and pending is not None:
                pending.lines.append(line)
            else:
                state = ParserState.IN_CUE_TIMING

        if pending is not None:
            dropped += self._flush(pending, cues)

        if dropped:
            log.debug("cue_blocks_dropped", extra={"dropped": dropped, "parsed": len(cues)})
        return cues

    def _start_cue(self, line: str, line_no: int) -> _PendingCue:
        pending = _PendingCue(line_no=line_no)
        endpoints = line.split(TIMING_SEPARATOR)
        if len(endpoints) != 2:
            return pending
        start_token = endpoints[0].strip()
        # Cue settings (``align:start`` etc.) may follow the end timestamp.
        end_fields = endpoints[1].split()
        end_token = end_fields[0] if end_fields else ""
        pending.start = try_parse_timecode(start_token)
        pending.end = try_parse_timecode(end_token)
        return pending

    def _flush(self, pending: _PendingCue, cues: List[Cue]) -> int:
        if not pending.has_timing:
            log.debug("cue_block_dropped", extra={"line": pending.line_no, "reason": "timing"})
            return 1
        start, end = pending.start, pending.end
        if start < 0 or end <= start:
            log.debug("cue_block_dropped", extra={"line": pending.line_no, "reason": "range"})
            return 1
        body = "\n".join(pending.lines).strip()
        cues.append(Cue(start_time=start, end_time=end, text=self.markup(body)))
        return 0


def parse_cues(text: str, markup: MarkupPolicy | str = keep_markup) -> List[Cue]:
    return CueListParser(markup).parse(text)
