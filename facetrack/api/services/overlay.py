"""Server-side evaluation of the overlay a client canvas would show."""

from __future__ import annotations

from facetrack.api.schemas.models import OverlayFrameSchema, PixelRectSchema
from facetrack.api.services.store import VideoSession
from facetrack.core.config.settings import FacetrackSettings
from facetrack.core.overlay.draw import OverlayRenderer, OverlayStyle
from facetrack.core.overlay.surface import RecordingSurface
from facetrack.core.types import PixelRect, PlaybackState


def style_from_settings(settings: FacetrackSettings) -> OverlayStyle:
    return OverlayStyle(line_width=settings.overlay_line_width, color=settings.overlay_color)


def render_state(
    session: VideoSession, settings: FacetrackSettings, state: PlaybackState
) -> list[PixelRect]:
    """Run one clear-then-draw pass for `state` and return the visible outlines."""

    surface = RecordingSurface(width=state.width, height=state.height)
    renderer = OverlayRenderer(session.index, surface, style_from_settings(settings))
    renderer.on_time_change(state.current_time, state.width, state.height)
    return surface.visible_rects()


def overlay_frame(
    session: VideoSession, settings: FacetrackSettings, state: PlaybackState
) -> OverlayFrameSchema:
    rects = render_state(session, settings, state)
    return OverlayFrameSchema(
        t=state.current_time,
        width=state.width,
        height=state.height,
        line_width=settings.overlay_line_width,
        color=settings.overlay_color,
        boxes=[PixelRectSchema.from_rect(r) for r in rects],
    )
