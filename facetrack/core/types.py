"""Shared type definitions used across facetrack.

This module centralizes the small, immutable annotation types (boxes, time offsets,
tracks) and the per-event snapshots passed into the overlay core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import numpy as np

Frame = np.ndarray

NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class NormalizedBox:
    """Rectangle expressed as fractions (0-1) of the frame width/height."""

    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0


@dataclass(frozen=True)
class TimeOffset:
    """Sample time as whole seconds plus a nanosecond component."""

    seconds: int = 0
    nanos: int = 0

    @property
    def total_seconds(self) -> Decimal:
        """Exact offset in seconds."""

        return Decimal(self.seconds) + Decimal(self.nanos) / NANOS_PER_SECOND

    def __float__(self) -> float:
        return self.seconds + self.nanos / NANOS_PER_SECOND


@dataclass(frozen=True)
class TimestampedBox:
    """A single sampled detection: time offset + normalized rectangle."""

    time_offset: TimeOffset
    box: NormalizedBox


@dataclass(frozen=True)
class Track:
    """One continuously followed face across frames."""

    timestamped_boxes: tuple[TimestampedBox, ...] = ()
    confidence: float | None = None


@dataclass(frozen=True)
class TrackGroup:
    """One detected face: its tracks and an optional base64 JPEG thumbnail."""

    tracks: tuple[Track, ...] = ()
    thumbnail: str | None = None


@dataclass(frozen=True)
class AnnotationSet:
    """All face-tracking detections for one video, in detection order."""

    groups: tuple[TrackGroup, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PixelRect:
    """Rectangle in device pixels, relative to the rendered video box."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the playback host taken at a time-change event."""

    current_time: float
    width: int
    height: int
