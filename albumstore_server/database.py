# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database connection and session management."""

import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from albumstore_server.config import settings
from albumstore_server.models.base import Base

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    """SQLite pools don't take sizing options."""
    options: dict = {"echo": False, "pool_pre_ping": True}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(pool_size=10, max_overflow=20)
    return options


engine: AsyncEngine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Check connectivity and create the albums table if missing. Call at startup."""
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready (%s)", engine.url.render_as_string(hide_password=True))
