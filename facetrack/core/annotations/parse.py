"""Parsing of face-detection annotation payloads.

The payload follows the Video Intelligence JSON layout::

    {"faceDetectionAnnotations": [
        {"thumbnail": "<base64 jpg>",
         "tracks": [{"timestampedObjects": [
             {"timeOffset": {"seconds": "1", "nanos": 500000000},
              "normalizedBoundingBox": {"left": 0.1, "top": 0.2, "right": 0.5, "bottom": 0.6}}
         ]}]}
    ]}

Numeric fields that are missing or unreadable default to 0. Proto3 JSON omits zero
values, so a box at `left == 0` or a sample at `seconds == 0` simply lacks the key.
Only a container of the wrong type (a track that is not an object, say) is an error.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from facetrack.core.types import (
    AnnotationSet,
    NormalizedBox,
    TimeOffset,
    TimestampedBox,
    Track,
    TrackGroup,
)


class AnnotationFormatError(ValueError):
    """Raised when an annotation payload has the wrong structure."""


def _as_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise AnnotationFormatError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise AnnotationFormatError(f"{what} must be an object, got {type(value).__name__}")
    return value


_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def _number(value: Any) -> float:
    """Return `value` as a finite float; anything unreadable counts as 0."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _leading_integer(value: Any) -> int:
    """Read an int64 field the way `parseInt` does: `"1.5"` -> 1, `"abc"` -> 0."""

    # int64 fields are encoded as JSON strings.
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def parse_time_offset(data: Any) -> TimeOffset:
    raw = _as_mapping(data, "timeOffset")
    return TimeOffset(
        seconds=_leading_integer(raw.get("seconds")),
        nanos=int(_number(raw.get("nanos"))),
    )


def parse_box(data: Any) -> NormalizedBox:
    raw = _as_mapping(data, "normalizedBoundingBox")
    return NormalizedBox(
        left=_number(raw.get("left")),
        top=_number(raw.get("top")),
        right=_number(raw.get("right")),
        bottom=_number(raw.get("bottom")),
    )


def parse_timestamped_box(data: Any) -> TimestampedBox:
    raw = _as_mapping(data, "timestampedObject")
    return TimestampedBox(
        time_offset=parse_time_offset(raw.get("timeOffset")),
        box=parse_box(raw.get("normalizedBoundingBox")),
    )


def parse_track(data: Any) -> Track:
    raw = _as_mapping(data, "track")
    boxes = tuple(
        parse_timestamped_box(obj)
        for obj in _as_list(raw.get("timestampedObjects"), "timestampedObjects")
    )
    confidence = raw.get("confidence")
    return Track(
        timestamped_boxes=boxes,
        confidence=None if confidence is None else _number(confidence),
    )


def parse_track_group(data: Any) -> TrackGroup:
    raw = _as_mapping(data, "faceDetectionAnnotation")
    tracks = tuple(parse_track(t) for t in _as_list(raw.get("tracks"), "tracks"))
    thumbnail = raw.get("thumbnail")
    return TrackGroup(tracks=tracks, thumbnail=thumbnail if isinstance(thumbnail, str) else None)


def parse_annotation_set(payload: Any) -> AnnotationSet:
    """Build an `AnnotationSet` from a decoded JSON payload.

    Accepts the `annotations` object (with `faceDetectionAnnotations`), the bare list of
    face annotations, or `None`. Empty inputs produce an empty set.

    Raises:
        AnnotationFormatError: When a container has the wrong JSON type.
    """

    if payload is None:
        return AnnotationSet()
    if isinstance(payload, Mapping):
        items = _as_list(payload.get("faceDetectionAnnotations"), "faceDetectionAnnotations")
    else:
        items = _as_list(payload, "faceDetectionAnnotations")
    return AnnotationSet(groups=tuple(parse_track_group(item) for item in items))


def _unwrap(payload: Any) -> Any:
    # Full upload results carry the annotations under "annotations", sometimes
    # wrapped in {"result": ...}.
    if isinstance(payload, Mapping):
        if isinstance(payload.get("result"), Mapping):
            payload = payload["result"]
        if isinstance(payload, Mapping) and "annotations" in payload:
            return payload["annotations"]
    return payload


def load_annotation_file(path: str | Path) -> dict[str, Any]:
    """Read a JSON annotation file and return `{"faceDetectionAnnotations": [...]}`.

    The file may hold the annotations object, the bare list of face annotations, or
    a full upload result.

    Raises:
        FileNotFoundError: When the file does not exist.
        AnnotationFormatError: When the file is not valid JSON of the expected shape.
    """

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = _unwrap(json.load(f))
    except json.JSONDecodeError as e:
        raise AnnotationFormatError(f"{path.name}: invalid JSON ({e.msg})") from e

    if payload is None:
        return {"faceDetectionAnnotations": []}
    if isinstance(payload, list):
        return {"faceDetectionAnnotations": payload}
    if not isinstance(payload, Mapping):
        raise AnnotationFormatError(f"{path.name}: annotations must be an object or a list")
    items = _as_list(payload.get("faceDetectionAnnotations"), "faceDetectionAnnotations")
    return {"faceDetectionAnnotations": items}
