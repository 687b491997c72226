from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError

from playdeck.backend.common.errors import ConfigError
from playdeck.backend.common.logging import get_logger

from .paths import get_user_settings_path
from .player import PlayerOptions, load_player_options

log = get_logger(__name__)

_SETTINGS_LOCK = threading.Lock()
_SETTINGS_SINGLETON: Optional["Settings"] = None


@dataclass
class Settings:
    app_name: str
    env: str
    log_level: str
    task_workers: int
    http_timeout: float
    user_settings_path: os.PathLike[str]
    player: PlayerOptions

    def as_dict(self) -> Dict[str, Any]:
        return {
            "app_name": self.app_name,
            "env": self.env,
            "log_level": self.log_level,
            "task_workers": self.task_workers,
            "http_timeout": self.http_timeout,
            "user_settings_path": str(self.user_settings_path),
            "player": self.player.as_dict(),
        }


def load_user_settings() -> Dict[str, Any]:
    user_path = get_user_settings_path()
    if not user_path.exists():
        return {}
    try:
        with user_path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("user_settings_unreadable", extra={"path": str(user_path), "error": str(exc)})
        return {}


def _coerce_number(raw: Any, default, cast, minimum):
    try:
        return max(minimum, cast(raw))
    except (TypeError, ValueError):
        return default


def _build_settings() -> Settings:
    user_cfg = load_user_settings()
    app_name = os.getenv("PLAYDECK_APP_NAME", user_cfg.get("app_name", "playdeck"))
    env = os.getenv("PLAYDECK_ENV", user_cfg.get("env", "development"))
    log_level = os.getenv("PLAYDECK_LOG_LEVEL", user_cfg.get("log_level", "INFO")).upper()

    task_workers_raw = os.getenv("PLAYDECK_TASK_WORKERS") or user_cfg.get("task_workers", 2)
    task_workers = _coerce_number(task_workers_raw, 2, int, 1)

    http_timeout_raw = os.getenv("PLAYDECK_HTTP_TIMEOUT") or user_cfg.get("http_timeout", 20)
    http_timeout = _coerce_number(http_timeout_raw, 20.0, float, 1.0)

    try:
        player = load_player_options(user_cfg)
    except ValidationError as exc:
        raise ConfigError(f"Invalid player options: {exc}") from exc

    return Settings(
        app_name=app_name,
        env=env,
        log_level=log_level,
        task_workers=task_workers,
        http_timeout=http_timeout,
        user_settings_path=get_user_settings_path(),
        player=player,
    )


def get_settings(*, reload: bool = False) -> Settings:
    global _SETTINGS_SINGLETON
    with _SETTINGS_LOCK:
        if _SETTINGS_SINGLETON is None or reload:
            _SETTINGS_SINGLETON = _build_settings()

        return _SETTINGS_SINGLETON


__all__ = [
    "Settings",
    "get_settings",
    "load_user_settings",
]
