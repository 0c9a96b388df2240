"""Configuration endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from facetrack.api.schemas.models import ConfigSchema
from facetrack.api.services.state import get_settings, reload_settings
from facetrack.core.config.settings import settings_to_dict

router = APIRouter()


@router.get("/config", response_model=ConfigSchema)
def get_config() -> ConfigSchema:
    """Return the current effective configuration."""

    settings = get_settings()
    return ConfigSchema(**settings_to_dict(settings))


@router.post("/config", response_model=ConfigSchema)
def update_config(cfg: ConfigSchema) -> ConfigSchema:
    """Update in-memory settings and unload the current video.

    This endpoint updates runtime configuration only. Persist configuration via
    environment variables or the YAML config file.
    """

    data = cfg.model_dump()
    try:
        settings = reload_settings(data)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None
    return ConfigSchema(**settings_to_dict(settings))
