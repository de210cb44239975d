"""FastAPI application."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from learnpath.persistence import MemoryBackend, PostgrestBackend
from learnpath.utils.logging_config import get_logger
from server.routers import paths
from server.server_config import APP_TITLE, APP_VERSION, BACKEND

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the configured backend for the lifetime of the app."""
    if BACKEND == "memory":
        app.state.backend = MemoryBackend()
        yield
        return

    backend = PostgrestBackend.from_env()
    app.state.backend = backend
    try:
        yield
    finally:
        await backend.aclose()


app = FastAPI(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)
app.include_router(paths.router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
