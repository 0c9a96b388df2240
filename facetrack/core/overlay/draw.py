"""Overlay rendering: normalized face boxes -> pixel outlines on a drawing surface.

On every playback time-change the renderer clears the whole surface, looks up the
boxes active at the current time and strokes them. Pixel coordinates are always
computed against the *rendered* (on-screen) size of the video, never its source
resolution, so the overlay stays aligned however the video is scaled.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from facetrack.core.annotations.index import AnnotationIndex
from facetrack.core.overlay.surface import RGB, DrawingSurface, PlaybackHost
from facetrack.core.types import NormalizedBox, PixelRect

logger = logging.getLogger(__name__)

BOX_LINE_WIDTH = 4
BOX_COLOR = "#800080"  # purple

_HEX_COLOR = re.compile(r"^#([0-9a-fA-F]{6})$")


def parse_hex_color(value: str) -> RGB:
    """Parse a `#rrggbb` string into an (r, g, b) tuple."""

    match = _HEX_COLOR.match(value.strip())
    if match is None:
        raise ValueError(f"color must look like #rrggbb, got {value!r}")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


@dataclass(frozen=True)
class OverlayStyle:
    """Outline style for face boxes. Constant for a renderer, never data-driven."""

    line_width: float = BOX_LINE_WIDTH
    color: str = BOX_COLOR

    def __post_init__(self) -> None:
        if self.line_width <= 0:
            raise ValueError("line_width must be > 0")
        parse_hex_color(self.color)

    @property
    def rgb(self) -> RGB:
        return parse_hex_color(self.color)


def to_pixel_rect(box: NormalizedBox, width: float, height: float) -> PixelRect:
    """Scale a normalized box to pixel space of a `width` x `height` display box."""

    return PixelRect(
        x=box.left * width,
        y=box.top * height,
        width=(box.right - box.left) * width,
        height=(box.bottom - box.top) * height,
    )


class OverlayRenderer:
    """Redraws the active face boxes on `surface` for each playback time-change.

    Holds no per-frame state: the same time, dimensions and index always produce the
    same surface contents.
    """

    def __init__(
        self,
        index: AnnotationIndex,
        surface: DrawingSurface,
        style: OverlayStyle | None = None,
    ) -> None:
        self.index = index
        self.surface = surface
        self.style = style or OverlayStyle()

    def on_time_change(self, current_time: float, width: float, height: float) -> list[PixelRect]:
        """Clear the surface and stroke the boxes active at `current_time`.

        Returns the rectangles that were drawn. Boxes with a non-positive width or
        height are empty and are skipped. With a zero-sized surface nothing is drawn.
        """

        self.surface.clear_rect(0, 0, width, height)
        if width <= 0 or height <= 0:
            return []

        color = self.style.rgb
        drawn: list[PixelRect] = []
        for box in self.index.active_boxes(current_time):
            rect = to_pixel_rect(box, width, height)
            if rect.width <= 0 or rect.height <= 0:
                continue
            self.surface.stroke_rect(
                rect.x, rect.y, rect.width, rect.height, self.style.line_width, color
            )
            drawn.append(rect)
        return drawn

    def on_playback_event(self, host: PlaybackHost) -> list[PixelRect]:
        """Handle a time-change event from `host`.

        Dimensions are read from the host's rendered display box on every call and
        the surface is resized to match before drawing.
        """

        width = int(host.rendered_width)
        height = int(host.rendered_height)
        self.surface.resize(width, height)
        rects = self.on_time_change(host.current_time, width, height)
        logger.debug("t=%.3f drew %d box(es) at %dx%d", host.current_time, len(rects), width, height)
        return rects
