"""Tests for the cue list parser."""

from __future__ import annotations

import pytest

from playdeck.backend.player.subtitles.models import Cue
from playdeck.backend.player.subtitles.parser import (
    CueListParser,
    StripLiterals,
    markup_policy,
    parse_cues,
    strip_tags,
)

SAMPLE = """WEBVTT
Kind: captions

NOTE this block is ignored

intro
00:00:01.000 --> 00:00:03.000
Hello

2
00:00:04.000 --> 00:00:06.500 align:start position:10%
Two
lines

00:07.000 --> 00:09.000
Short form
"""


class TestParse:

    def test_empty_input(self) -> None:
        assert parse_cues("") == []

    def test_single_cue(self) -> None:
        assert parse_cues("00:00:01.000 --> 00:00:03.000\nHello\n\n") == [Cue(1.0, 3.0, "Hello")]

    def test_sample_document(self) -> None:
        cues = parse_cues(SAMPLE)
        assert [c.start_time for c in cues] == [1.0, 4.0, 7.0]
        assert cues[1].end_time == pytest.approx(6.5)
        assert cues[1].text == "Two\nlines"
        assert cues[2].text == "Short form"

    def test_last_cue_without_trailing_blank_line(self) -> None:
        cues = parse_cues("00:01.000 --> 00:02.000\nEnd")
        assert cues == [Cue(1.0, 2.0, "End")]

    def test_crlf_line_endings(self) -> None:
        cues = parse_cues("WEBVTT\r\n\r\n00:01.000 --> 00:02.000\r\nHi\r\n")
        assert cues == [Cue(1.0, 2.0, "Hi")]

    def test_malformed_block_is_dropped_alone(self) -> None:
        text = (
            "00:01.000 --> 00:02.000\nKept\n\n"
            "00:03 --> 00:04.000\nDropped\n\n"
            "00:05.000 --> 00:06.000\nAlso kept\n"
        )
        assert [c.text for c in parse_cues(text)] == ["Kept", "Also kept"]

    def test_missing_separator_spacing_drops_block(self) -> None:
        assert parse_cues("00:01.000-->00:02.000\nX\n") == []

    def test_non_increasing_range_is_dropped(self) -> None:
        text = "00:05.000 --> 00:05.000\nZero\n\n00:06.000 --> 00:04.000\nBackwards\n"
        assert parse_cues(text) == []

    def test_timing_line_closes_previous_cue(self) -> None:
        text = "00:01.000 --> 00:02.000\nFirst\n00:03.000 --> 00:04.000\nSecond\n"
        assert [c.text for c in parse_cues(text)] == ["First", "Second"]

    def test_cue_identifier_numbers_are_skipped(self) -> None:
        text = "1\n00:01.000 --> 00:02.000\nOne\n\n2\n00:03.000 --> 00:04.000\nTwo\n"
        assert [c.text for c in parse_cues(text)] == ["One", "Two"]

    def test_stored_order_is_input_order(self) -> None:
        text = "00:05.000 --> 00:06.000\nLater\n\n00:01.000 --> 00:02.000\nEarlier\n"
        assert [c.text for c in parse_cues(text)] == ["Later", "Earlier"]


class TestMarkup:

    def test_default_keeps_markup(self) -> None:
        cues = parse_cues("00:01.000 --> 00:02.000\n<b>Bold</b>\n")
        assert cues[0].text == "<b>Bold</b>"

    def test_strip_tags(self) -> None:
        assert strip_tags("<v Bob>Hi &amp; bye</v>") == "Hi & bye"
        assert strip_tags("<00:00:01.000><c.yellow>Karaoke</c>") == "Karaoke"

    def test_strip_bold_leaves_other_tags(self) -> None:
        assert StripLiterals()("<b>Hi</b> <i>there</i>") == "Hi <i>there</i>"

    def test_policy_by_name(self) -> None:
        parser = CueListParser("strip_tags")
        cues = parser.parse("00:01.000 --> 00:02.000\n<i>Soft</i>\n")
        assert cues[0].text == "Soft"

    def test_unknown_policy(self) -> None:
        with pytest.raises(ValueError):
            markup_policy("shout")
