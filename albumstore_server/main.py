# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Albumstore Server - Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from albumstore_server.api.schemas import HealthResponse
from albumstore_server.config import settings
from albumstore_server.database import async_session_maker, engine, init_db
from albumstore_server.repository import AlbumRepository
from albumstore_server.routers import albums
from albumstore_server.services.albums import AlbumService
from albumstore_server.services.storage import build_blob_store

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Provision the database and build the album service once per process."""
    await init_db()
    blob_store = build_blob_store(settings)
    app.state.album_service = AlbumService(blob_store, AlbumRepository(async_session_maker))
    logger.info("Album service ready (storage backend: %s)", settings.storage_backend)
    yield
    await engine.dispose()


app = FastAPI(
    title="Albumstore Server",
    description="Album cover upload and metadata API",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


app.include_router(albums.router)


@app.get("/")
async def root():
    """API info."""
    return {
        "name": "Albumstore Server",
        "version": VERSION,
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check for load balancers."""
    return HealthResponse()
