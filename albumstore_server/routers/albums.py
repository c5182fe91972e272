# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album API routes - upload and lookup."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.datastructures import FormData, UploadFile

from albumstore_server.api.schemas import AlbumCreatedResponse, AlbumMetadata, AlbumResponse
from albumstore_server.services.albums import (
    AlbumNotFoundError,
    AlbumPersistenceError,
    AlbumService,
    ImageUpload,
    InvalidAlbumIDError,
    InvalidImageError,
    MetadataDecodeError,
)
from albumstore_server.services.storage import StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/albums", tags=["albums"])


def get_album_service(request: Request) -> AlbumService:
    """Dependency returning the service wired up at startup."""
    return request.app.state.album_service


def _form_text(form: FormData, key: str) -> str:
    """Text field value; missing fields and file parts read as ""."""
    value = form.get(key)
    return value if isinstance(value, str) else ""


@router.post("", response_model=AlbumCreatedResponse, response_model_exclude_none=True)
async def create_album(
    request: Request,
    service: AlbumService = Depends(get_album_service),
) -> AlbumCreatedResponse:
    """
    Upload an album cover (multipart: image file, artist, title, year).
    An image part that isn't a file is rejected with 400, like a missing one.
    """
    try:
        async with request.form() as form:
            image = form.get("image")
            upload = None
            if isinstance(image, UploadFile):
                upload = ImageUpload(filename=image.filename or "", content_type=image.content_type, stream=image.file)
            metadata = AlbumMetadata(
                artist=_form_text(form, "artist"),
                title=_form_text(form, "title"),
                year=_form_text(form, "year"),
            )
            created = await service.create_album(upload, metadata)
    except InvalidImageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        logger.error("Image upload failed: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except AlbumPersistenceError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    # Local storage reports where the file went; S3 reports how much was uploaded
    if created.image_size is None:
        return AlbumCreatedResponse(album_id=created.album_id, image_path=created.image_reference)
    return AlbumCreatedResponse(album_id=created.album_id, image_size=created.image_size)


@router.get("/{album_id}", response_model=AlbumResponse)
async def get_album(
    album_id: str,
    service: AlbumService = Depends(get_album_service),
) -> AlbumResponse:
    """Get album by ID."""
    try:
        record = await service.get_album(album_id)
    except InvalidAlbumIDError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AlbumNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Album not found")
    except (AlbumPersistenceError, MetadataDecodeError) as e:
        logger.error("Album lookup failed for %s: %s", album_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return AlbumResponse(album_id=record.album_id, image_url=record.image_url, metadata=record.metadata)
