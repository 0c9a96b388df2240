from __future__ import annotations

import json
import logging
import time

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from facetrack.api.schemas.models import TimeUpdateMessage
from facetrack.api.services.overlay import overlay_frame
from facetrack.api.services.state import get_session, get_settings
from facetrack.core.types import PlaybackState

router = APIRouter()

logger = logging.getLogger(__name__)


@router.websocket("/stream/overlay")
async def stream_overlay(ws: WebSocket):
    """Answer each client `timeupdate` event with the overlay for that instant.

    Messages are handled one at a time in arrival order, so replies never
    interleave. The session is looked up per message; loading another video takes
    effect on the next event.
    """

    await ws.accept()
    try:
        while True:
            raw = await ws.receive_text()
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await ws.send_json({"type": "error", "detail": "message must be JSON"})
                continue
            if not isinstance(msg, dict):
                await ws.send_json({"type": "error", "detail": "message must be an object"})
                continue

            if msg.get("type") == "ping":
                await ws.send_json({"type": "pong", "t": msg.get("t"), "server_time": time.time()})
                continue

            try:
                event = TimeUpdateMessage.model_validate(msg)
            except ValidationError as e:
                detail = e.errors(include_url=False, include_context=False)
                await ws.send_json({"type": "error", "detail": detail})
                continue

            session = get_session()
            if session is None:
                await ws.send_json({"type": "error", "detail": "No video loaded"})
                continue

            state = PlaybackState(event.t, event.width, event.height)
            frame = overlay_frame(session, get_settings(), state)
            await ws.send_json(frame.model_dump())
    except WebSocketDisconnect:
        return
    except Exception:
        logger.exception("Overlay websocket crashed")
        try:
            await ws.close(code=1011)
        except RuntimeError:
            pass
