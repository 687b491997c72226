"""Inspect cue list files from the command line."""

from __future__ import annotations

import argparse
import sys
from typing import Any, Optional, Sequence

from playdeck.backend.common.errors import ConfigError
from playdeck.backend.common.logging import init_logging
from playdeck.backend.player.exceptions import MalformedTimecode, SubtitleFetchError
from playdeck.backend.player.formatting import format_clock
from playdeck.backend.player.subtitles.parser import MARKUP_POLICIES, CueListParser
from playdeck.backend.player.subtitles.service import SubtitleService
from playdeck.backend.player.subtitles.timecode import parse_timecode
from playdeck.backend.player.subtitles.track import SubtitleTrack
from playdeck.config.settings import get_settings

from ._utils import build_subparser, exit_with_error, print_json, require_subcommand, to_serializable


def _read_source(location: str) -> str:
    service = SubtitleService()
    try:
        return service.fetch_text(location)
    except SubtitleFetchError as exc:
        exit_with_error(str(exc))
    finally:
        service.close()


def _handle_parse(args: argparse.Namespace) -> None:
    cues = CueListParser(args.markup).parse(_read_source(args.source))
    print_json(to_serializable(cues))


def _handle_at(args: argparse.Namespace) -> None:
    track = SubtitleTrack(CueListParser(args.markup))
    track.load(_read_source(args.source))
    print(track.active_text(args.seconds))


def _handle_timecode(args: argparse.Namespace) -> None:
    try:
        seconds = parse_timecode(args.token)
    except MalformedTimecode as exc:
        exit_with_error(str(exc))
    print_json({"token": args.token, "seconds": seconds, "clock": format_clock(seconds)})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playdeck-subtitles",
        description="Parse cue lists and query the active cue at a position.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level written to stderr (defaults to the configured log_level).",
    )
    subparsers = parser.add_subparsers(dest="command")
    require_subcommand(subparsers)

    markup_choices = sorted(MARKUP_POLICIES)

    parse_parser = build_subparser(subparsers, "parse", help="Print every cue of a file or URL as JSON.")
    parse_parser.add_argument("source", help="Local path, file:// URL or http(s) URL.")
    parse_parser.add_argument("--markup", choices=markup_choices, default="keep", help="Inline markup policy.")
    parse_parser.set_defaults(func=_handle_parse)

    at_parser = build_subparser(subparsers, "at", help="Print the cue text active at a position.")
    at_parser.add_argument("source", help="Local path, file:// URL or http(s) URL.")
    at_parser.add_argument("seconds", type=float, help="Playback position in seconds.")
    at_parser.add_argument("--markup", choices=markup_choices, default="strip_tags", help="Inline markup policy.")
    at_parser.set_defaults(func=_handle_at)

    timecode_parser = build_subparser(subparsers, "timecode", help="Parse one cue timestamp.")
    timecode_parser.add_argument("token", help="MM:SS.mmm or HH:MM:SS.mmm")
    timecode_parser.set_defaults(func=_handle_timecode)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    level = args.log_level
    if level is None:
        try:
            level = get_settings().log_level
        except ConfigError as exc:
            exit_with_error(str(exc))
    init_logging(level, stream=sys.stderr)
    handler: Any = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return
    handler(args)


if __name__ == "__main__":  # pragma: no cover
    main()
