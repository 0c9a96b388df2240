"""Local annotation store.

Stands in for the upload/annotation service: a video `clip.mp4` under
`videos_dir` is served together with the face annotations read from
`<annotations_dir>/clip.json`. The JSON file may hold either the annotations
object itself or the full upload result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

from facetrack.core.annotations.index import AnnotationIndex
from facetrack.core.annotations.parse import AnnotationFormatError, load_annotation_file
from facetrack.core.config.settings import FacetrackSettings, is_safe_basename

logger = logging.getLogger(__name__)

ALLOWED_VIDEO_SUFFIXES = {".mp4", ".mov", ".mkv", ".avi", ".webm"}


class VideoNotFoundError(LookupError):
    """Raised when a video or its annotation sidecar does not exist."""


@dataclass(frozen=True)
class VideoSession:
    """Immutable snapshot of the loaded video: media URL and its annotations."""

    name: str
    url: str
    index: AnnotationIndex
    annotations: dict[str, Any]


def video_path(settings: FacetrackSettings, name: str) -> Path:
    """Resolve a playable video by basename.

    Raises:
        ValueError: When `name` is not a plain file name.
        VideoNotFoundError: When the file is missing or not a supported video.
    """

    if not is_safe_basename(name):
        raise ValueError(f"Invalid video name: {name!r}")
    path = settings.videos_path / name
    if path.suffix.lower() not in ALLOWED_VIDEO_SUFFIXES or not path.is_file():
        raise VideoNotFoundError(name)
    return path


def annotation_path(settings: FacetrackSettings, name: str) -> Path:
    return settings.annotations_path / f"{Path(name).stem}.json"


def load_annotations(path: Path) -> dict[str, Any]:
    """Read an annotation sidecar; see `load_annotation_file`.

    Raises:
        VideoNotFoundError: When the file does not exist.
        AnnotationFormatError: When the file content is malformed.
    """

    if not path.is_file():
        raise VideoNotFoundError(path.name)
    return load_annotation_file(path)


def open_session(settings: FacetrackSettings, name: str) -> VideoSession:
    """Load `name` and its annotations into a new session snapshot."""

    video_path(settings, name)
    ann_path = annotation_path(settings, name)
    try:
        annotations = load_annotations(ann_path)
        index = AnnotationIndex.from_payload(annotations)
    except AnnotationFormatError:
        logger.warning("Malformed annotations for %s at %s", name, ann_path)
        raise
    url = f"{settings.media_base_url.rstrip('/')}/{quote(name)}"
    return VideoSession(name=name, url=url, index=index, annotations=annotations)


def list_annotated_videos(settings: FacetrackSettings) -> list[str]:
    """List video basenames that have an annotation sidecar, sorted by name."""

    root = settings.videos_path
    if not root.is_dir():
        return []
    names = []
    for p in sorted(root.iterdir()):
        if not p.is_file() or p.suffix.lower() not in ALLOWED_VIDEO_SUFFIXES:
            continue
        if annotation_path(settings, p.name).is_file():
            names.append(p.name)
    return names
