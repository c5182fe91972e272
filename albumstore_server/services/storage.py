# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Image blob storage: local directory or S3 bucket.

Both strategies write an uploaded byte stream and hand back an address for it.
They also decide the name the bytes are stored under, since the local store
keeps the client's filename while the S3 store generates a collision-free key.
"""

import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Any, BinaryIO, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from albumstore_server.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Writing the image to the storage backend failed."""


@dataclass(frozen=True)
class StoredImage:
    reference: str
    # Bytes written; None when the backend doesn't report it (local)
    size: int | None = None


class BlobStore(Protocol):
    def storage_name(self, filename: str) -> str:
        ...

    def store(self, name: str, content_type: str | None, stream: BinaryIO) -> StoredImage:
        ...


class LocalBlobStore:
    """Writes images into a directory. Same filename overwrites the previous file."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def storage_name(self, filename: str) -> str:
        # Basename only so a crafted filename can't escape the directory
        return PurePath(filename.replace("\\", "/")).name

    def store(self, name: str, content_type: str | None, stream: BinaryIO) -> StoredImage:
        path = self.directory / name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as e:
            raise StorageError(f"failed to save image: {e}") from e
        logger.debug("Saved image %s", path)
        return StoredImage(reference=str(path))


class S3BlobStore:
    """Uploads images as public-read objects and returns their public URL."""

    def __init__(self, client: Any, bucket: str, public_base_url: str | None = None) -> None:
        self.client = client
        self.bucket = bucket
        self.public_base_url = (public_base_url or f"https://{bucket}.s3.amazonaws.com").rstrip("/")

    def storage_name(self, filename: str) -> str:
        return uuid.uuid4().hex + PurePath(filename).suffix

    def store(self, name: str, content_type: str | None, stream: BinaryIO) -> StoredImage:
        data = stream.read()
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=name,
                Body=data,
                ACL="public-read",
                **extra,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"failed to upload image to bucket {self.bucket}: {e}") from e
        logger.debug("Uploaded s3://%s/%s (%d bytes)", self.bucket, name, len(data))
        return StoredImage(reference=f"{self.public_base_url}/{name}", size=len(data))


def build_blob_store(settings: Settings) -> BlobStore:
    """Pick the storage strategy named by settings.storage_backend."""
    if settings.storage_backend == "s3":
        client = boto3.client(
            "s3",
            region_name=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
        )
        return S3BlobStore(client, settings.s3_bucket, settings.s3_public_base_url)
    return LocalBlobStore(settings.image_dir)
