"""Capability interfaces for the controller's external collaborators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Union

from playdeck.backend.common.types import Orientation
from playdeck.backend.player.models import NowPlayingInfo, NowPlayingMetadata


class PlayerEvents(ABC):
    """What a driver reports back. Implemented by the controller."""

    @abstractmethod
    def report_position(self, position: float, duration: Optional[float] = None, rate: Optional[float] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def seek_completed(self, position: Optional[float] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def media_ready(self, duration: Optional[float] = None) -> None:
        raise NotImplementedError

    @abstractmethod
    def buffer_progress(self, fraction: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def media_failed(self, reason: str) -> None:
        raise NotImplementedError


class PlayerDriver(ABC):
    """Wraps the real decoder. Every call is a request; results come back
    through :class:`PlayerEvents`."""

    name: str = "driver"

    def attach(self, listener: PlayerEvents) -> None:
        self.listener = listener

    @abstractmethod
    def load(self, source: Union[str, bytes]) -> None:
        raise NotImplementedError

    @abstractmethod
    def play(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def pause(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def seek_to(self, seconds: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_rate(self, rate: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def unload(self) -> None:
        raise NotImplementedError


class NowPlayingReporter(ABC):
    @abstractmethod
    def set_metadata(self, metadata: NowPlayingMetadata) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, info: NowPlayingInfo) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class GeometryRequester(ABC):
    @abstractmethod
    def request_orientation(self, orientation: Orientation) -> None:
        raise NotImplementedError


class PlayerDelegate:
    """Host callbacks. Every hook is optional."""

    def next_track(self) -> None:
        pass

    def previous_track(self) -> None:
        pass

    def setting(self) -> None:
        pass
