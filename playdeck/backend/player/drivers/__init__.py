"""Concrete :class:`~playdeck.backend.player.interfaces.PlayerDriver` backends."""

from playdeck.backend.player.drivers.vlc import VlcPlayerDriver
from playdeck.backend.player.drivers.vlc_paths import VLCRuntimePaths, resolve_vlc_runtime

__all__ = ["VLCRuntimePaths", "VlcPlayerDriver", "resolve_vlc_runtime"]
