# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from pydantic import BaseModel, Field


class AlbumMetadata(BaseModel):
    """Free-form album fields. Empty strings are valid values."""

    artist: str = ""
    title: str = ""
    year: str = ""


class AlbumResponse(BaseModel):
    album_id: int = Field(serialization_alias="albumID")
    image_url: str
    metadata: AlbumMetadata


class AlbumCreatedResponse(BaseModel):
    """Local storage reports the written path, S3 storage the byte size."""

    album_id: int = Field(serialization_alias="albumID")
    image_path: str | None = Field(default=None, serialization_alias="imagePath")
    image_size: int | None = Field(default=None, serialization_alias="imageSize")


class HealthResponse(BaseModel):
    status: str = "ok"
