"""Drawing surfaces and the host capabilities the overlay renderer relies on.

The renderer only needs `{current_time, rendered_width, rendered_height}` from the
playback host and `{clear_rect, stroke_rect, resize}` from the surface, so any UI
toolkit can sit behind these protocols.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import cv2
import numpy as np

from facetrack.core.types import PixelRect

RGB = tuple[int, int, int]


@runtime_checkable
class PlaybackHost(Protocol):
    """Video element stand-in: current position and on-screen display box."""

    @property
    def current_time(self) -> float: ...

    @property
    def rendered_width(self) -> int: ...

    @property
    def rendered_height(self) -> int: ...


@runtime_checkable
class DrawingSurface(Protocol):
    """Canvas stand-in with pixel-space clear/stroke primitives."""

    def resize(self, width: int, height: int) -> None: ...

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def stroke_rect(
        self, x: float, y: float, width: float, height: float, line_width: float, color: RGB
    ) -> None: ...


def _span(start: float, length: float, limit: int) -> tuple[int, int]:
    """Clip [start, start + length) to [0, limit) on integer pixel bounds."""

    lo, hi = sorted((start, start + length))
    return max(0, math.floor(lo)), min(limit, math.ceil(hi))


class CanvasSurface:
    """Transparent RGBA overlay buffer drawn with OpenCV.

    Pixels are stored as (height, width, 4) uint8 in BGRA order so the buffer can be
    blended directly onto OpenCV frames.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.pixels = np.zeros((max(0, int(height)), max(0, int(width)), 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def resize(self, width: int, height: int) -> None:
        """Match the given display size. A size change discards the contents."""

        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) != (self.width, self.height):
            self.pixels = np.zeros((height, width, 4), dtype=np.uint8)

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        x0, x1 = _span(x, width, self.width)
        y0, y1 = _span(y, height, self.height)
        if x1 <= x0 or y1 <= y0:
            return
        self.pixels[y0:y1, x0:x1] = 0

    def stroke_rect(
        self, x: float, y: float, width: float, height: float, line_width: float, color: RGB
    ) -> None:
        if self.pixels.size == 0:
            return
        x1, x2 = sorted((x, x + width))
        y1, y2 = sorted((y, y + height))
        r, g, b = color
        cv2.rectangle(
            self.pixels,
            (int(round(x1)), int(round(y1))),
            (int(round(x2)), int(round(y2))),
            (b, g, r, 255),
            max(1, int(round(line_width))),
        )

    def is_blank(self) -> bool:
        return not self.pixels.any()

    def composite(self, frame: np.ndarray) -> np.ndarray:
        """Return a copy of the BGR `frame` with the overlay alpha-blended on top."""

        if frame.shape[:2] != self.pixels.shape[:2]:
            raise ValueError(
                f"frame size {frame.shape[1]}x{frame.shape[0]} does not match "
                f"overlay size {self.width}x{self.height}"
            )
        if self.is_blank():
            return frame.copy()
        alpha = self.pixels[:, :, 3:4].astype(np.float32) / 255.0
        blended = frame.astype(np.float32) * (1.0 - alpha) + self.pixels[:, :, :3] * alpha
        return blended.astype(np.uint8)


@dataclass(frozen=True)
class StrokedRect:
    """A rectangle outline currently shown on a `RecordingSurface`."""

    rect: PixelRect
    line_width: float
    color: RGB


@dataclass
class RecordingSurface:
    """Surface that remembers which outlines are visible instead of rasterizing.

    Clearing the whole surface drops every outline; a partial clear drops the
    outlines that intersect the cleared region.
    """

    width: int = 0
    height: int = 0
    visible: list[StrokedRect] = field(default_factory=list)
    calls: list[tuple] = field(default_factory=list)

    def resize(self, width: int, height: int) -> None:
        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) != (self.width, self.height):
            self.width, self.height = width, height
            self.visible.clear()
        self.calls.append(("resize", width, height))

    def clear_rect(self, x: float, y: float, width: float, height: float) -> None:
        self.calls.append(("clear_rect", x, y, width, height))
        if width <= 0 or height <= 0:
            return
        if x <= 0 and y <= 0 and x + width >= self.width and y + height >= self.height:
            self.visible.clear()
            return
        self.visible = [s for s in self.visible if not _intersects(s.rect, x, y, width, height)]

    def stroke_rect(
        self, x: float, y: float, width: float, height: float, line_width: float, color: RGB
    ) -> None:
        self.calls.append(("stroke_rect", x, y, width, height, line_width, color))
        self.visible.append(StrokedRect(PixelRect(x, y, width, height), line_width, color))

    def visible_rects(self) -> list[PixelRect]:
        return [s.rect for s in self.visible]


def _intersects(rect: PixelRect, x: float, y: float, width: float, height: float) -> bool:
    rx1, rx2 = sorted((rect.x, rect.x + rect.width))
    ry1, ry2 = sorted((rect.y, rect.y + rect.height))
    return rx1 <= x + width and x <= rx2 and ry1 <= y + height and y <= ry2
