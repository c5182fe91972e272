# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album ingestion and lookup.

Creating an album is two independent writes: the image goes to the blob store,
then the metadata row goes to the database. There is no transaction spanning
both. If the insert fails after the image was stored, the image is left
orphaned and only logged.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import BinaryIO

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from albumstore_server.api.schemas import AlbumMetadata
from albumstore_server.repository import AlbumRepository
from albumstore_server.services.storage import BlobStore

logger = logging.getLogger(__name__)

_ALBUM_ID_RE = re.compile(r"[0-9]+")
# Largest value a BIGINT primary key can hold
MAX_ALBUM_ID = 2**63 - 1


class AlbumError(Exception):
    """Base for album service errors."""


class InvalidImageError(AlbumError):
    """Upload has no usable image file."""


class InvalidAlbumIDError(AlbumError):
    def __init__(self, raw_id: str) -> None:
        self.raw_id = raw_id
        super().__init__(f"Invalid album ID: {raw_id!r}")


class AlbumNotFoundError(AlbumError):
    def __init__(self, album_id: int) -> None:
        self.album_id = album_id
        super().__init__(f"Album {album_id} not found")


class AlbumPersistenceError(AlbumError):
    """Database read or write failed."""


class MetadataDecodeError(AlbumError):
    """Stored metadata could not be decoded into artist/title/year."""


@dataclass
class ImageUpload:
    filename: str
    content_type: str | None
    stream: BinaryIO


@dataclass
class CreatedAlbum:
    album_id: int
    image_reference: str
    image_size: int | None


@dataclass
class AlbumRecord:
    album_id: int
    image_url: str
    metadata: AlbumMetadata


def parse_album_id(raw_id: str) -> int:
    """Parse a path id. Only plain non-negative decimal integers are accepted."""
    if not _ALBUM_ID_RE.fullmatch(raw_id):
        raise InvalidAlbumIDError(raw_id)
    album_id = int(raw_id)
    if album_id > MAX_ALBUM_ID:
        raise InvalidAlbumIDError(raw_id)
    return album_id


class AlbumService:
    """Validates uploads, stores the image, then records the album."""

    def __init__(self, blob_store: BlobStore, repository: AlbumRepository) -> None:
        self.blob_store = blob_store
        self.repository = repository

    async def create_album(self, upload: ImageUpload | None, metadata: AlbumMetadata) -> CreatedAlbum:
        if upload is None or not upload.filename or upload.stream is None:
            raise InvalidImageError("Invalid image file")
        name = self.blob_store.storage_name(upload.filename)
        if not name:
            raise InvalidImageError("Invalid image file")

        # StorageError propagates; nothing has been persisted yet
        stored = await asyncio.to_thread(self.blob_store.store, name, upload.content_type, upload.stream)

        try:
            album_id = await self.repository.create(stored.reference, metadata.model_dump())
        except SQLAlchemyError as e:
            logger.error("Album insert failed, image %s is orphaned: %s", stored.reference, e)
            raise AlbumPersistenceError(str(e)) from e

        logger.info("Created album %d (%s)", album_id, stored.reference)
        return CreatedAlbum(album_id=album_id, image_reference=stored.reference, image_size=stored.size)

    async def get_album(self, raw_id: str) -> AlbumRecord:
        album_id = parse_album_id(raw_id)
        try:
            album = await self.repository.get_by_id(album_id)
        except SQLAlchemyError as e:
            raise AlbumPersistenceError(str(e)) from e
        if album is None:
            raise AlbumNotFoundError(album_id)

        raw = album.album_metadata
        try:
            if isinstance(raw, (str, bytes)):
                metadata = AlbumMetadata.model_validate_json(raw)
            else:
                metadata = AlbumMetadata.model_validate(raw)
        except ValidationError as e:
            raise MetadataDecodeError(f"Failed to decode metadata for album {album_id}") from e

        return AlbumRecord(album_id=album.id, image_url=album.image_url, metadata=metadata)
