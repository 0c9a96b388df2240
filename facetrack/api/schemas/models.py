"""Pydantic models for the HTTP/WS API."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from facetrack.core.overlay.draw import parse_hex_color
from facetrack.core.types import PixelRect


class UploadRequestSchema(BaseModel):
    """Body of `POST /api/videos`. Without a name the configured default is used."""

    name: str | None = None


class UploadResultSchema(BaseModel):
    """Where the client can play the video from."""

    secure_url: str


class AnnotationsSchema(BaseModel):
    """Face annotations passed through unchanged to the client."""

    model_config = ConfigDict(extra="allow")

    faceDetectionAnnotations: list[dict[str, Any]] = Field(default_factory=list)


class VideoResultSchema(BaseModel):
    uploadResult: UploadResultSchema
    annotations: AnnotationsSchema


class VideoResponseSchema(BaseModel):
    """Response of `POST /api/videos`."""

    result: VideoResultSchema


class SessionSchema(BaseModel):
    """Summary of the currently loaded video."""

    name: str
    url: str
    faces: int
    tracks: int
    boxes: int
    time_span: tuple[float, float] | None = None


class PixelRectSchema(BaseModel):
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_rect(cls, rect: PixelRect) -> PixelRectSchema:
        return cls(x=rect.x, y=rect.y, width=rect.width, height=rect.height)


class OverlayFrameSchema(BaseModel):
    """Outlines to stroke on a `width` x `height` canvas at playback time `t`."""

    type: Literal["overlay"] = "overlay"
    t: float
    width: int
    height: int
    line_width: float
    color: str
    boxes: list[PixelRectSchema]


class ThumbnailsSchema(BaseModel):
    """Base64 JPEG thumbnails, one per detected face, in detection order."""

    thumbnails: list[str | None]


class TimeUpdateMessage(BaseModel):
    """Client playback event sent over `/stream/overlay`."""

    type: Literal["timeupdate"]
    t: float = Field(allow_inf_nan=False)
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class ConfigSchema(BaseModel):
    """Runtime configuration payload."""

    videos_dir: str
    annotations_dir: str | None = None
    default_video: str | None = None
    media_base_url: str = "/media/videos"
    display_width: int = Field(default=1000, gt=0)
    display_height: int = Field(default=500, gt=0)
    overlay_line_width: float = Field(default=4, gt=0)
    overlay_color: str = "#800080"

    @field_validator("overlay_color")
    @classmethod
    def _validate_color(cls, v: str) -> str:
        parse_hex_color(v)
        return v
