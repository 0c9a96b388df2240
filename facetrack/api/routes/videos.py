"""Video session endpoints.

`POST /api/videos` plays the part of the upload service: it loads a video with its
face annotations and returns `{"result": {"uploadResult": ..., "annotations": ...}}`.
The remaining endpoints query the loaded session.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, HTTPException, Query

from facetrack.api.schemas.models import (
    AnnotationsSchema,
    OverlayFrameSchema,
    SessionSchema,
    ThumbnailsSchema,
    UploadRequestSchema,
    UploadResultSchema,
    VideoResponseSchema,
    VideoResultSchema,
)
from facetrack.api.services.overlay import overlay_frame
from facetrack.api.services.state import get_session, get_settings, load_video
from facetrack.api.services.store import VideoNotFoundError, VideoSession
from facetrack.core.annotations.parse import AnnotationFormatError
from facetrack.core.types import PlaybackState

router = APIRouter(prefix="/api/videos", tags=["videos"])

logger = logging.getLogger(__name__)


def _current_session() -> VideoSession:
    session = get_session()
    if session is None:
        raise HTTPException(status_code=404, detail="No video loaded")
    return session


@router.post("", response_model=VideoResponseSchema)
def upload_video(req: UploadRequestSchema | None = Body(default=None)) -> VideoResponseSchema:
    """Load a video and its annotations, replacing the current session."""

    name = (req.name if req else None) or get_settings().default_video
    if not name:
        raise HTTPException(status_code=400, detail="No video selected")
    try:
        session = load_video(name)
    except AnnotationFormatError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid video name") from None
    except VideoNotFoundError:
        raise HTTPException(status_code=404, detail=f"Video not found: {name}") from None
    except Exception:
        logger.exception("Failed to load video %s", name)
        raise

    return VideoResponseSchema(
        result=VideoResultSchema(
            uploadResult=UploadResultSchema(secure_url=session.url),
            annotations=AnnotationsSchema(**session.annotations),
        )
    )


@router.get("/current", response_model=SessionSchema)
def current_video() -> SessionSchema:
    """Summarize the loaded video."""

    session = _current_session()
    index = session.index
    return SessionSchema(
        name=session.name,
        url=session.url,
        faces=len(index.annotation_set.groups),
        tracks=index.track_count,
        boxes=index.box_count,
        time_span=index.time_span(),
    )


@router.get("/current/boxes", response_model=OverlayFrameSchema)
def current_boxes(
    t: float = Query(..., allow_inf_nan=False, description="Playback time in seconds"),
    width: int | None = Query(default=None, ge=0, description="Rendered video width"),
    height: int | None = Query(default=None, ge=0, description="Rendered video height"),
) -> OverlayFrameSchema:
    """Return the outlines the overlay shows at time `t` on a `width` x `height` video box."""

    session = _current_session()
    settings = get_settings()
    state = PlaybackState(
        current_time=t,
        width=settings.display_width if width is None else width,
        height=settings.display_height if height is None else height,
    )
    return overlay_frame(session, settings, state)


@router.get("/current/thumbnails", response_model=ThumbnailsSchema)
def current_thumbnails() -> ThumbnailsSchema:
    return ThumbnailsSchema(thumbnails=_current_session().index.thumbnails())

