from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from facetrack.core.annotations.parse import (
    AnnotationFormatError,
    load_annotation_file,
    parse_annotation_set,
    parse_box,
    parse_time_offset,
)
from facetrack.core.types import NormalizedBox, TimeOffset


def test_parse_full_payload(payload):
    parsed = parse_annotation_set(payload)
    assert len(parsed.groups) == 2
    first = parsed.groups[0]
    assert first.thumbnail == "AAAA"
    assert len(first.tracks[0].timestamped_boxes) == 2
    sample = first.tracks[0].timestamped_boxes[0]
    assert sample.time_offset == TimeOffset(seconds=0, nanos=500000000)
    assert sample.box == NormalizedBox(0.1, 0.2, 0.5, 0.6)


def test_missing_fields_default_to_zero():
    assert parse_box({"right": 0.3}) == NormalizedBox(0.0, 0.0, 0.3, 0.0)
    assert parse_box(None) == NormalizedBox()
    assert parse_time_offset({}) == TimeOffset(0, 0)
    assert parse_time_offset({"seconds": "", "nanos": None}) == TimeOffset(0, 0)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [("1.5", 1), ("abc", 0), ("5e8", 5), (" 7s", 7), ("-2", -2), (3.9, 3), (True, 0)],
)
def test_seconds_read_leading_integer(seconds, expected):
    assert parse_time_offset({"seconds": seconds}).seconds == expected


def test_unreadable_values_default_to_zero():
    assert parse_time_offset({"nanos": "5e8"}) == TimeOffset(0, 500000000)
    assert parse_time_offset({"nanos": "later"}) == TimeOffset(0, 0)
    assert parse_box({"left": "wide", "top": None, "right": "0.5", "bottom": "nan"}) == (
        NormalizedBox(0.0, 0.0, 0.5, 0.0)
    )


def test_malformed_fields_do_not_reject_the_payload():
    parsed = parse_annotation_set(
        {"faceDetectionAnnotations": [{"tracks": [{"timestampedObjects": [
            {"timeOffset": {"seconds": "1.5", "nanos": "x"},
             "normalizedBoundingBox": {"left": "wide", "right": 0.4, "bottom": 0.4}}
        ], "confidence": "high"}]}]}
    )
    track = parsed.groups[0].tracks[0]
    assert track.confidence == 0.0
    assert track.timestamped_boxes[0].time_offset == TimeOffset(1, 0)
    assert track.timestamped_boxes[0].box == NormalizedBox(0.0, 0.0, 0.4, 0.4)


def test_time_offset_total_seconds_is_exact():
    offset = parse_time_offset({"seconds": "3", "nanos": 100000000})
    assert offset.total_seconds == Decimal("3.1")
    assert float(offset) == pytest.approx(3.1)


def test_bare_list_payload_is_accepted(payload):
    parsed = parse_annotation_set(payload["faceDetectionAnnotations"])
    assert len(parsed.groups) == 2


def test_groups_without_tracks_are_empty():
    parsed = parse_annotation_set({"faceDetectionAnnotations": [{}]})
    assert parsed.groups[0].tracks == ()
    assert parsed.groups[0].thumbnail is None


@pytest.mark.parametrize(
    "bad",
    [
        {"faceDetectionAnnotations": {"tracks": []}},
        {"faceDetectionAnnotations": [{"tracks": "nope"}]},
        {"faceDetectionAnnotations": [{"tracks": [{"timestampedObjects": [42]}]}]},
        {"faceDetectionAnnotations": [{"tracks": [{"timestampedObjects": [
            {"timeOffset": "soon"}
        ]}]}]},
        "not-a-payload",
    ],
)
def test_structural_errors_raise(bad):
    with pytest.raises(AnnotationFormatError):
        parse_annotation_set(bad)


def test_format_error_is_a_value_error():
    assert issubclass(AnnotationFormatError, ValueError)


def test_load_annotation_file_unwraps_upload_results(tmp_path: Path, payload):
    wrapped = {
        "result": {
            "uploadResult": {"secure_url": "https://example.test/v.mp4"},
            "annotations": payload,
        }
    }
    path = tmp_path / "v.json"
    path.write_text(json.dumps(wrapped), encoding="utf-8")
    loaded = load_annotation_file(path)
    assert loaded == {"faceDetectionAnnotations": payload["faceDetectionAnnotations"]}


def test_load_annotation_file_accepts_bare_list_and_null(tmp_path: Path):
    listed = tmp_path / "list.json"
    listed.write_text("[]", encoding="utf-8")
    assert load_annotation_file(listed) == {"faceDetectionAnnotations": []}

    null = tmp_path / "null.json"
    null.write_text("null", encoding="utf-8")
    assert load_annotation_file(null) == {"faceDetectionAnnotations": []}


def test_load_annotation_file_errors(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_annotation_file(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(AnnotationFormatError):
        load_annotation_file(broken)

    scalar = tmp_path / "scalar.json"
    scalar.write_text("42", encoding="utf-8")
    with pytest.raises(AnnotationFormatError):
        load_annotation_file(scalar)
