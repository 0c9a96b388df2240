"""Configuration for the facetrack overlay service and tools.

Settings are loaded from YAML defaults and overridden by environment variables
prefixed with `FTV_`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from facetrack.core.overlay.draw import BOX_COLOR, BOX_LINE_WIDTH, parse_hex_color


class FacetrackSettings(BaseSettings):
    """Runtime configuration loaded from YAML defaults and `FTV_` env overrides."""

    # Local stand-in for the upload service: videos and their annotation JSON sidecars.
    videos_dir: str = "testdata/videos"
    annotations_dir: str | None = Field(
        default=None, description="defaults to videos_dir when unset"
    )
    default_video: str | None = None
    media_base_url: str = "/media/videos"

    # Rendered video box. The player page renders videos at 1000x500.
    display_width: int = 1000
    display_height: int = 500

    overlay_line_width: float = BOX_LINE_WIDTH
    overlay_color: str = BOX_COLOR

    model_config = SettingsConfigDict(env_prefix="FTV_", validate_assignment=True)

    @field_validator("display_width", "display_height")
    @classmethod
    def _validate_display(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("display size must be > 0")
        return v

    @field_validator("overlay_line_width")
    @classmethod
    def _validate_line_width(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("overlay_line_width must be > 0")
        return float(v)

    @field_validator("overlay_color")
    @classmethod
    def _validate_color(cls, v: str) -> str:
        parse_hex_color(v)
        return v.strip()

    @field_validator("default_video")
    @classmethod
    def _validate_default_video(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return None
        if not is_safe_basename(v):
            raise ValueError("default_video must be a plain file name")
        return v

    @property
    def annotations_path(self) -> Path:
        return Path(self.annotations_dir or self.videos_dir)

    @property
    def videos_path(self) -> Path:
        return Path(self.videos_dir)


def is_safe_basename(name: str) -> bool:
    """Return True if `name` is a plain filename (no path separators)."""

    if not name:
        return False
    if "/" in name or "\\" in name:
        return False
    return Path(name).name == name and name not in {".", ".."}


def settings_to_dict(settings: FacetrackSettings) -> dict[str, Any]:
    return cast(dict[str, Any], settings.model_dump())


def _config_path() -> Path:
    """Return the YAML configuration path (defaults to config/facetrack.config.yml)."""

    return Path(os.getenv("FTV_CONFIG", "config/facetrack.config.yml"))


def load_settings() -> FacetrackSettings:
    """Load settings from YAML and environment variables.

    YAML provides defaults; environment variables override.
    """

    data: dict[str, Any] = {}
    path = _config_path()
    if path.exists():
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    env_settings = FacetrackSettings()
    env_overrides: dict[str, Any] = {
        name: getattr(env_settings, name) for name in env_settings.model_fields_set
    }

    merged = {**data, **env_overrides}
    return FacetrackSettings(**merged)
