"""Health check endpoints."""

from fastapi import APIRouter

from facetrack.api.services.state import get_session

router = APIRouter()


@router.get("/health")
def health() -> dict[str, str | None]:
    """Lightweight health endpoint; also reports which video is loaded."""

    session = get_session()
    return {"status": "ok", "video": session.name if session else None}
