"""Video source abstractions.

The player consumes frames through a small interface (`VideoSource`) so the
decoder can be swapped (or faked in tests) without touching playback or overlay
code.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import cv2

from facetrack.core.types import Frame

logger = logging.getLogger(__name__)


class VideoSource(ABC):
    """Base interface for anything that can produce timestamped video frames."""

    fps: float = 0.0
    frame_size: tuple[int, int] = (0, 0)
    position: float = 0.0

    @abstractmethod
    def read(self) -> Frame | None:
        """Return the next frame, or `None` at end of stream.

        After a successful read `position` holds the frame's presentation time in
        seconds.
        """

        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Release any underlying resources."""

        raise NotImplementedError


class FileSource(VideoSource):
    """A `VideoSource` backed by `cv2.VideoCapture` on a local file."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        self.cap = cv2.VideoCapture(self.path)
        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open video source: {self.path}")
        self.fps = float(self.cap.get(cv2.CAP_PROP_FPS) or 0.0)
        self.frame_size = (
            int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0),
            int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0),
        )
        self.frame_index = -1
        self.position = 0.0
        logger.info(
            "Opened %s (%dx%d @ %.2f fps)", self.path, self.frame_size[0], self.frame_size[1], self.fps
        )

    def read(self) -> Frame | None:
        """Read the next frame and update `position`."""

        ok, frame = self.cap.read()
        if not ok or frame is None:
            return None
        self.frame_index += 1
        msec = float(self.cap.get(cv2.CAP_PROP_POS_MSEC) or 0.0)
        if msec > 0:
            self.position = msec / 1000.0
        elif self.fps > 0:
            # Some backends do not report positions; derive from the frame count.
            self.position = self.frame_index / self.fps
        else:
            self.position = 0.0
        if self.frame_size == (0, 0):
            self.frame_size = (int(frame.shape[1]), int(frame.shape[0]))
        return frame

    def close(self) -> None:
        """Release the underlying OpenCV capture."""

        self.cap.release()
