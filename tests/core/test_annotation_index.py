from __future__ import annotations

import math
from decimal import Decimal

import pytest

from facetrack.core.annotations.index import AnnotationIndex, time_bucket
from facetrack.core.types import NormalizedBox


def _sample(seconds=None, nanos=None, **box):
    offset = {}
    if seconds is not None:
        offset["seconds"] = seconds
    if nanos is not None:
        offset["nanos"] = nanos
    return {"timeOffset": offset, "normalizedBoundingBox": box}


def _index(*tracks_per_group):
    return AnnotationIndex.from_payload(
        {
            "faceDetectionAnnotations": [
                {"tracks": [{"timestampedObjects": list(track)} for track in tracks]}
                for tracks in tracks_per_group
            ]
        }
    )


def test_times_with_same_rounding_share_active_boxes(payload):
    index = AnnotationIndex.from_payload(payload)
    expected = index.active_boxes(0.5)
    assert len(expected) == 2
    for t in (0.46, 0.5, 0.51, 0.549):
        assert index.active_boxes(t) == expected
    assert index.active_boxes(0.56) != expected


def test_time_bucket_rounds_half_up_on_exact_value():
    assert time_bucket(0.25) == 3
    assert time_bucket(0.35) == 3  # float 0.35 is 0.34999...
    assert time_bucket(Decimal("0.35")) == 4
    assert time_bucket(0.04) == 0
    assert time_bucket(12.96) == 130


@pytest.mark.parametrize(
    ("seconds", "nanos", "t"),
    [(None, 350000000, 0.35), ("1", 150000000, 1.15), ("2", 50000000, 2.05)],
)
def test_samples_on_rounding_ties_are_active_at_their_own_time(seconds, nanos, t):
    index = _index([[_sample(seconds=seconds, nanos=nanos, right=0.5, bottom=0.5)]])
    assert index.active_boxes(t) == [NormalizedBox(0.0, 0.0, 0.5, 0.5)]
    assert index.active_boxes(t + 0.1) == []


def test_missing_seconds_uses_nanos_only():
    index = _index([[_sample(nanos=500000000, left=0.1, top=0.1, right=0.2, bottom=0.2)]])
    assert index.active_boxes(0.5) == [NormalizedBox(0.1, 0.1, 0.2, 0.2)]
    assert index.active_boxes(0.6) == []


def test_string_seconds_are_parsed_as_integers():
    index = _index([[_sample(seconds="2", nanos=100000000, right=1.0, bottom=1.0)]])
    assert len(index.active_boxes(2.1)) == 1
    assert index.active_boxes(0.1) == []


def test_no_interpolation_between_samples():
    index = _index(
        [
            [
                _sample(seconds=1, right=0.5, bottom=0.5),
                _sample(seconds=2, right=0.5, bottom=0.5),
            ]
        ]
    )
    assert len(index.active_boxes(1.0)) == 1
    assert index.active_boxes(1.5) == []
    assert len(index.active_boxes(2.0)) == 1


@pytest.mark.parametrize("payload", [None, {}, {"faceDetectionAnnotations": []}, []])
def test_empty_annotation_sets_never_match(payload):
    index = AnnotationIndex.from_payload(payload)
    for t in (0.0, 0.5, 1.0, 3600.0):
        assert index.active_boxes(t) == []
    assert index.time_span() is None
    assert index.box_count == 0


def test_default_index_is_empty():
    assert AnnotationIndex().active_boxes(0.0) == []


def test_active_boxes_follow_group_then_track_order():
    a = _sample(nanos=100000000, left=0.1, right=0.2, bottom=0.2)
    b = _sample(nanos=100000000, left=0.3, right=0.4, bottom=0.2)
    c = _sample(nanos=100000000, left=0.5, right=0.6, bottom=0.2)
    index = _index([[a], [b]], [[c]])
    assert [box.left for box in index.active_boxes(0.1)] == [0.1, 0.3, 0.5]


def test_unordered_samples_are_tolerated():
    index = _index([[_sample(seconds=3, right=1, bottom=1), _sample(seconds=1, right=1, bottom=1)]])
    assert len(index.active_boxes(1.0)) == 1
    assert len(index.active_boxes(3.0)) == 1
    assert index.time_span() == (1.0, 3.0)


@pytest.mark.parametrize("t", [math.nan, math.inf, -math.inf])
def test_non_finite_times_have_no_boxes(payload, t):
    assert AnnotationIndex.from_payload(payload).active_boxes(t) == []


def test_counts_span_and_thumbnails(payload):
    index = AnnotationIndex.from_payload(payload)
    assert index.track_count == 2
    assert index.box_count == 3
    assert index.time_span() == (0.5, 0.6)
    assert index.thumbnails() == ["AAAA", "BBBB"]


def test_active_boxes_returns_a_fresh_list(payload):
    index = AnnotationIndex.from_payload(payload)
    first = index.active_boxes(0.5)
    first.clear()
    assert len(index.active_boxes(0.5)) == 2
