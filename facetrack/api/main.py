"""FastAPI application entrypoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facetrack.api.routes import config, health, media, stream, videos


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler.

    Drops the loaded video session when the app shuts down.
    """

    from facetrack.api.services.state import clear_session

    yield
    clear_session()


app = FastAPI(title="Face Tracking Overlay API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(config.router)
app.include_router(media.router)
app.include_router(videos.router)
app.include_router(stream.router)


if __name__ == "__main__":
    uvicorn.run("facetrack.api.main:app", host="0.0.0.0", port=8000, reload=True)
