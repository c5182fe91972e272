# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album persistence. One table, rows keyed by an auto-increment id."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from albumstore_server.models import Album


class AlbumRepository:
    """Repository for album rows. Each call runs in its own session."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def create(self, image_url: str, metadata: dict[str, Any]) -> int:
        """Insert a new album and return the id the database assigned."""
        async with self._session_maker() as session:
            album = Album(image_url=image_url, album_metadata=metadata)
            session.add(album)
            await session.commit()
            return album.id

    async def get_by_id(self, album_id: int) -> Album | None:
        """Get album by id, or None when no row matches."""
        async with self._session_maker() as session:
            return await session.get(Album, album_id)

    async def count(self) -> int:
        async with self._session_maker() as session:
            return await session.scalar(select(func.count()).select_from(Album)) or 0
