from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

__all__ = [
    "PATHS",
    "PlayerOptions",
    "Settings",
    "core",
    "paths",
    "player",
    "get_settings",
    "get_user_settings_path",
    "get_vlc_runtime_root",
    "load_player_options",
    "load_user_settings",
]

_MODULE_EXPORTS = {
    "core": {
        "Settings",
        "get_settings",
        "load_user_settings",
    },
    "paths": {
        "PATHS",
        "get_user_settings_path",
        "get_vlc_runtime_root",
    },
    "player": {
        "PlayerOptions",
        "load_player_options",
    },
}

_SUBMODULE_NAMES = {"core", "paths", "player"}

if TYPE_CHECKING:  # pragma: no cover - only for static analysis
    from . import core, paths, player
    from .core import Settings, get_settings, load_user_settings
    from .paths import PATHS, get_user_settings_path, get_vlc_runtime_root
    from .player import PlayerOptions, load_player_options


def __getattr__(name: str) -> Any:
    if name in _SUBMODULE_NAMES:
        module = importlib.import_module(f"{__name__}.{name}")
        globals()[name] = module
        return module

    for module_name, symbols in _MODULE_EXPORTS.items():
        if name in symbols:
            module = importlib.import_module(f"{__name__}.{module_name}")
            value = getattr(module, name)
            globals()[name] = value
            return value

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    exported = set(__all__)
    exported.update(_SUBMODULE_NAMES)
    for symbols in _MODULE_EXPORTS.values():
        exported.update(symbols)
    exported.update(globals().keys())
    return sorted(exported)
