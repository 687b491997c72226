"""Tunables for the playback controller and gesture layer."""

from __future__ import annotations

import os
from typing import Any, Dict, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

MarkupName = Literal["keep", "strip_tags", "strip_bold"]

_ENV_PREFIX = "PLAYDECK_PLAYER_"


class PlayerOptions(BaseModel):
    """Behaviour switches that differed between historical player builds.

    Every field can be set from the user settings file (``player`` block) or
    from a ``PLAYDECK_PLAYER_<FIELD>`` environment variable.
    """

    model_config = ConfigDict(frozen=True)

    inactivity_interval: float = Field(default=3.0, gt=0)
    tap_hold_off: float = Field(default=0.1, gt=0)
    jump_seconds: float = Field(default=10.0, gt=0)
    indicator_fade: float = Field(default=0.3, ge=0)
    indicator_hold: float = Field(default=0.6, ge=0)
    initial_controls_hidden: bool = False
    auto_resume_after_seek: bool = True
    hide_controls_during_jump_indicator: bool = False
    autoplay_on_ready: bool = True
    seek_tolerance: float = Field(default=0.5, ge=0)
    seek_timeout: float = Field(default=2.0, gt=0)
    previous_track_threshold: float = Field(default=5.0, ge=0)
    play_next_countdown: float = Field(default=6.0, ge=0)
    subtitle_markup: MarkupName = "strip_tags"
    pan_zoom_divisor: float = Field(default=200.0, gt=0)
    pan_zoom_max: float = Field(default=1.3, ge=1.0)

    def as_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def _env_overrides() -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for name in PlayerOptions.model_fields:
        value = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
        if value is not None and value.strip():
            overrides[name] = value.strip()
    return overrides


def load_player_options(user_cfg: Mapping[str, Any] | None = None) -> PlayerOptions:
    """Merge the user settings ``player`` block with environment overrides.

    Raises :class:`pydantic.ValidationError` on invalid values.
    """

    block = dict((user_cfg or {}).get("player") or {})
    block.update(_env_overrides())
    return PlayerOptions.model_validate(block)


__all__ = ["MarkupName", "PlayerOptions", "load_player_options"]
