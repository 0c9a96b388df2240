"""In-process state for settings and the loaded video session.

FastAPI routes use this module to access the settings and the current
`VideoSession`. A session is an immutable snapshot; loading another video
replaces it wholesale.
"""

from __future__ import annotations

import logging
from threading import RLock

from facetrack.api.services.store import VideoSession, open_session
from facetrack.core.config.settings import FacetrackSettings, load_settings, settings_to_dict

logger = logging.getLogger(__name__)

_settings: FacetrackSettings | None = None
_session: VideoSession | None = None
_lock = RLock()


def get_settings() -> FacetrackSettings:
    """Return cached settings, loading them on first use."""

    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
    return _settings


def reload_settings(data: dict | None = None) -> FacetrackSettings:
    """Reload settings and drop the current session.

    Args:
        data: Optional patch dict merged into the loaded settings.
    """

    global _settings, _session
    with _lock:
        base = load_settings()
        if data:
            _settings = FacetrackSettings(**{**settings_to_dict(base), **data})
        else:
            _settings = base
        _session = None
    return _settings


def get_session() -> VideoSession | None:
    with _lock:
        return _session


def load_video(name: str) -> VideoSession:
    """Open `name` and make it the current session."""

    global _session
    settings = get_settings()
    session = open_session(settings, name)
    with _lock:
        previous = _session
        _session = session
    if previous is not None and previous.name != name:
        logger.info("Switched video %s -> %s", previous.name, name)
    logger.info(
        "Loaded %s: %d track(s), %d box(es)", name, session.index.track_count, session.index.box_count
    )
    return session


def clear_session() -> None:
    """Discard the current session (if present)."""

    global _session
    with _lock:
        _session = None
