from __future__ import annotations

import json
from pathlib import Path

import pytest

import facetrack.api.services.state as state
from facetrack.core.config.settings import FacetrackSettings


def face_payload() -> dict:
    """Two faces: one sampled at 0.5s/0.6s, one at 0.5s with only right/bottom set."""

    return {
        "faceDetectionAnnotations": [
            {
                "thumbnail": "AAAA",
                "tracks": [
                    {
                        "timestampedObjects": [
                            {
                                "timeOffset": {"nanos": 500000000},
                                "normalizedBoundingBox": {
                                    "left": 0.1,
                                    "top": 0.2,
                                    "right": 0.5,
                                    "bottom": 0.6,
                                },
                            },
                            {
                                "timeOffset": {"nanos": 600000000},
                                "normalizedBoundingBox": {
                                    "left": 0.2,
                                    "top": 0.2,
                                    "right": 0.6,
                                    "bottom": 0.6,
                                },
                            },
                        ]
                    }
                ],
            },
            {
                "thumbnail": "BBBB",
                "tracks": [
                    {
                        "timestampedObjects": [
                            {
                                "timeOffset": {"seconds": "0", "nanos": 500000000},
                                "normalizedBoundingBox": {"right": 0.25, "bottom": 0.5},
                            }
                        ]
                    }
                ],
            },
        ]
    }


@pytest.fixture
def payload() -> dict:
    return face_payload()


@pytest.fixture
def videos_dir(tmp_path: Path) -> Path:
    """A videos dir with `clip.mp4` + `clip.json` and an unannotated `raw.mp4`."""

    (tmp_path / "clip.mp4").write_bytes(b"fake-mp4")
    (tmp_path / "clip.json").write_text(json.dumps(face_payload()), encoding="utf-8")
    (tmp_path / "raw.mp4").write_bytes(b"fake-mp4")
    return tmp_path


@pytest.fixture
def app_state(videos_dir: Path):
    """Point the API state at `videos_dir` and reset it afterwards."""

    previous = (state._settings, state._session)
    state._settings = FacetrackSettings(videos_dir=str(videos_dir))
    state._session = None
    try:
        yield state
    finally:
        state._settings, state._session = previous
