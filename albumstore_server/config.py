# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Configuration for Albumstore Server."""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (required). DB_DSN is accepted for older deployments.
    database_url: str = Field(validation_alias=AliasChoices("DATABASE_URL", "DB_DSN"))

    # Image storage: "local" writes under image_dir, "s3" uploads to s3_bucket
    storage_backend: Literal["local", "s3"] = "local"
    image_dir: Path = Path("images")
    s3_bucket: str | None = None
    s3_region: str | None = None
    # For S3-compatible stores (MinIO, R2, ...)
    s3_endpoint_url: str | None = None
    # Base of the public URLs returned for uploads; defaults to the bucket's virtual-host URL
    s3_public_base_url: str | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    # CORS: comma-separated origins, or "*" for allow all
    cors_origins: str = "*"

    @model_validator(mode="after")
    def _check_bucket(self) -> "Settings":
        if self.storage_backend == "s3" and not self.s3_bucket:
            raise ValueError("S3_BUCKET must be set when STORAGE_BACKEND=s3")
        return self


settings = Settings()
