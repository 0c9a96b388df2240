"""Media endpoints.

Serves the local demo videos that have face annotations. Only files directly
under the configured `videos_dir` are exposed.
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from facetrack.api.services.state import get_settings
from facetrack.api.services.store import VideoNotFoundError, list_annotated_videos, video_path


class VideoFileInfo(BaseModel):
    """Represents a locally available, annotated video file.

    Attributes:
        name: Basename of the video file (e.g. "clip.mp4").
        url: Relative URL the player can load the video from.
    """

    name: str
    url: str


router = APIRouter(prefix="/media", tags=["media"])


@router.get("/videos", response_model=list[VideoFileInfo])
def list_videos() -> list[VideoFileInfo]:
    """List annotated videos available on the server, sorted by filename."""

    settings = get_settings()
    base = settings.media_base_url.rstrip("/")
    return [
        VideoFileInfo(name=name, url=f"{base}/{quote(name)}")
        for name in list_annotated_videos(settings)
    ]


@router.get("/videos/{name}")
def video_file(name: str) -> FileResponse:
    """Stream a video file for playback.

    Args:
        name: Basename of the video under `videos_dir`.
    """

    try:
        path = video_path(get_settings(), name)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid video name") from None
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail="Video not found") from None
    return FileResponse(path, headers={"Cache-Control": "public, max-age=3600"})
