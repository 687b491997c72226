"""Shared fakes for controller and gesture tests."""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, List, Optional, Tuple

import pytest

from playdeck.backend.common.scheduling import ManualScheduler
from playdeck.backend.player.controller import PlayerController
from playdeck.backend.player.interfaces import (
    GeometryRequester,
    NowPlayingReporter,
    PlayerDelegate,
    PlayerDriver,
)
from playdeck.backend.player.models import LoadConfiguration
from playdeck.config.settings.player import PlayerOptions


class RecordingDriver(PlayerDriver):
    name = "recording"

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []

    def load(self, source) -> None:
        self.calls.append(("load", source))

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def seek_to(self, seconds: float) -> None:
        self.calls.append(("seek_to", seconds))

    def set_rate(self, rate: float) -> None:
        self.calls.append(("set_rate", rate))

    def unload(self) -> None:
        self.calls.append(("unload",))

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def seeks(self) -> List[float]:
        return [call[1] for call in self.calls if call[0] == "seek_to"]


class RecordingReporter(NowPlayingReporter):
    def __init__(self) -> None:
        self.metadata = None
        self.updates: list = []
        self.cleared = 0

    def set_metadata(self, metadata) -> None:
        self.metadata = metadata

    def update(self, info) -> None:
        self.updates.append(info)

    def clear(self) -> None:
        self.cleared += 1


class RecordingGeometry(GeometryRequester):
    def __init__(self) -> None:
        self.requests: list = []

    def request_orientation(self, orientation) -> None:
        self.requests.append(orientation)


class RecordingDelegate(PlayerDelegate):
    def __init__(self) -> None:
        self.calls: List[str] = []

    def next_track(self) -> None:
        self.calls.append("next")

    def previous_track(self) -> None:
        self.calls.append("previous")

    def setting(self) -> None:
        self.calls.append("setting")


class DeferredSubtitleService:
    """Hands out futures the test resolves by hand."""

    def __init__(self) -> None:
        self.requests: list = []

    def load_async(self, source) -> Future:
        future: Future = Future()
        self.requests.append((source, future))
        return future

    def close(self) -> None:
        pass


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def geometry() -> RecordingGeometry:
    return RecordingGeometry()


@pytest.fixture
def delegate() -> RecordingDelegate:
    return RecordingDelegate()


@pytest.fixture
def subtitle_service() -> DeferredSubtitleService:
    return DeferredSubtitleService()


@pytest.fixture
def make_controller(scheduler, driver, reporter, geometry, delegate, subtitle_service):
    def _make(options: Optional[PlayerOptions] = None, **overrides) -> PlayerController:
        kwargs = dict(
            options=options or PlayerOptions(),
            scheduler=scheduler,
            subtitle_service=subtitle_service,
            now_playing=reporter,
            geometry=geometry,
            delegate=delegate,
        )
        kwargs.update(overrides)
        return PlayerController(driver, **kwargs)

    return _make


@pytest.fixture
def controller(make_controller) -> PlayerController:
    return make_controller()


@pytest.fixture
def ready_controller(controller, driver) -> PlayerController:
    """Loaded, ready and playing a 600 second title."""
    controller.load(LoadConfiguration(source_url="https://cdn.example.com/title.m3u8", title="Title"))
    controller.media_ready(600.0)
    driver.calls.clear()
    return controller
