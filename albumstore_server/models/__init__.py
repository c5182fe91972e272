# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from albumstore_server.models.base import Base
from albumstore_server.models.album import Album

__all__ = [
    "Base",
    "Album",
]
