"""OpenCV playback host.

`VideoPlayer` plays the role of the page's video element: it exposes the current
playback time and the rendered display size, and notifies listeners on every time
update. Play/pause only gate future updates; they never draw anything.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import cv2

from facetrack.core.types import Frame, PlaybackState
from facetrack.core.video_sources.base import FileSource, VideoSource

logger = logging.getLogger(__name__)

TimeUpdateListener = Callable[["VideoPlayer"], None]


class VideoPlayer:
    """Frame-stepping player with a display box that may differ from the source size."""

    def __init__(self, source: VideoSource, display_size: tuple[int, int] | None = None) -> None:
        self.source = source
        self._display_size = display_size
        self._listeners: list[TimeUpdateListener] = []
        self.playing = False
        self.ended = False
        self.current_frame: Frame | None = None

    @classmethod
    def open(cls, path: str | Path, display_size: tuple[int, int] | None = None) -> VideoPlayer:
        return cls(FileSource(path), display_size=display_size)

    @property
    def intrinsic_size(self) -> tuple[int, int]:
        """Source resolution (width, height)."""

        return self.source.frame_size

    @property
    def rendered_width(self) -> int:
        if self._display_size is not None:
            return int(self._display_size[0])
        return int(self.intrinsic_size[0])

    @property
    def rendered_height(self) -> int:
        if self._display_size is not None:
            return int(self._display_size[1])
        return int(self.intrinsic_size[1])

    @property
    def current_time(self) -> float:
        return float(self.source.position)

    def snapshot(self) -> PlaybackState:
        return PlaybackState(self.current_time, self.rendered_width, self.rendered_height)

    def set_display_size(self, width: int, height: int) -> None:
        """Rescale the on-screen video box (the CSS-resize equivalent)."""

        if width <= 0 or height <= 0:
            raise ValueError("display size must be positive")
        self._display_size = (int(width), int(height))

    def on_time_update(self, listener: TimeUpdateListener) -> TimeUpdateListener:
        """Register `listener`; it is called with the player after each new frame."""

        self._listeners.append(listener)
        return listener

    def play(self) -> None:
        if not self.ended:
            self.playing = True

    def pause(self) -> None:
        self.playing = False

    def step(self) -> Frame | None:
        """Advance one frame while playing and fire the time-update listeners.

        Returns the frame scaled to the rendered size, or `None` when paused or at
        the end of the stream.
        """

        if not self.playing:
            return None
        frame = self.source.read()
        if frame is None:
            self.ended = True
            self.playing = False
            logger.info("Playback ended at t=%.3f", self.current_time)
            return None
        size = (self.rendered_width, self.rendered_height)
        if size != (frame.shape[1], frame.shape[0]) and size[0] > 0 and size[1] > 0:
            frame = cv2.resize(frame, size, interpolation=cv2.INTER_AREA)
        self.current_frame = frame
        for listener in list(self._listeners):
            listener(self)
        return frame

    def close(self) -> None:
        self.pause()
        self.source.close()

    def __enter__(self) -> VideoPlayer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
