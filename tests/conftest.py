# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest fixtures. The app is pointed at a throwaway SQLite database and image directory."""

import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="albumstore-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP}/albums.db"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["IMAGE_DIR"] = os.path.join(_TMP, "images")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from albumstore_server.models import Base
from albumstore_server.repository import AlbumRepository


@pytest.fixture
async def session_maker(tmp_path):
    """Session factory on a fresh SQLite file, independent of the app engine."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/repo.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def repository(session_maker):
    return AlbumRepository(session_maker)


@pytest.fixture
async def client():
    """HTTP client with the app lifespan (init_db, service wiring) running."""
    from albumstore_server.main import app

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
