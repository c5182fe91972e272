# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album model."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from albumstore_server.models.base import Base


class Album(Base):
    """Uploaded album cover plus its artist/title/year metadata.

    The metadata is kept as one serialized JSON document in the ``metadata``
    column; ``metadata`` itself is reserved on declarative classes, hence
    the ``album_metadata`` attribute name.
    """

    __tablename__ = "albums"

    # BIGINT everywhere except SQLite, where only INTEGER PRIMARY KEY autoincrements
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    image_url: Mapped[str] = mapped_column(String(255), nullable=False)
    album_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
