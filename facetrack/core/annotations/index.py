"""Time lookup over a video's face annotations.

A sample is *active* at query time `t` when its timestamp and `t`, both rounded to
one decimal place, are equal. Playback time-change events fire at a coarser,
platform-dependent cadence than the annotation sampling, so exact equality would
almost never match; the one-decimal window (about 50 ms either side) does.

There is no interpolation: between two sampled frames a face has no box, and a
gap in the samples shows as a gap in the overlay.
"""

from __future__ import annotations

import math
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from facetrack.core.annotations.parse import parse_annotation_set
from facetrack.core.types import AnnotationSet, NormalizedBox

TIME_DECIMALS = 1

_QUANTUM = Decimal(1).scaleb(-TIME_DECIMALS)
_SCALE = 10**TIME_DECIMALS


def time_bucket(seconds: float | Decimal) -> int:
    """Return the rounded time as an integer count of decitenths (0.25 -> 3).

    Rounds half-up on the exact value of `seconds`, so the float `0.35`
    (0.34999...) lands in bucket 3.
    """

    value = seconds if isinstance(seconds, Decimal) else Decimal(seconds)
    return int(value.quantize(_QUANTUM, rounding=ROUND_HALF_UP) * _SCALE)


class AnnotationIndex:
    """Read-only index answering "which boxes are visible at time t"."""

    def __init__(self, annotation_set: AnnotationSet | None = None) -> None:
        self.annotation_set = annotation_set or AnnotationSet()
        self._buckets: dict[int, list[NormalizedBox]] = defaultdict(list)
        self._box_count = 0
        first: float | None = None
        last: float | None = None
        for group in self.annotation_set.groups:
            for track in group.tracks:
                for sample in track.timestamped_boxes:
                    # Bucketed from float seconds, like the query times.
                    ts = float(sample.time_offset)
                    self._buckets[time_bucket(ts)].append(sample.box)
                    self._box_count += 1
                    first = ts if first is None or ts < first else first
                    last = ts if last is None or ts > last else last
        self._buckets = dict(self._buckets)
        self._span = None if first is None or last is None else (first, last)

    @classmethod
    def from_payload(cls, payload: Any) -> AnnotationIndex:
        """Build an index straight from a decoded JSON annotations payload."""

        return cls(parse_annotation_set(payload))

    def active_boxes(self, time: float) -> list[NormalizedBox]:
        """Return the normalized boxes active at `time` (group, track, sample order)."""

        if time is None or not math.isfinite(time):
            return []
        return list(self._buckets.get(time_bucket(time), ()))

    @property
    def track_count(self) -> int:
        return sum(len(group.tracks) for group in self.annotation_set.groups)

    @property
    def box_count(self) -> int:
        return self._box_count

    def time_span(self) -> tuple[float, float] | None:
        """Return (first, last) sample time in seconds, or None when empty."""

        return self._span

    def thumbnails(self) -> list[str | None]:
        """Per-face thumbnails in detection order."""

        return [group.thumbnail for group in self.annotation_set.groups]
