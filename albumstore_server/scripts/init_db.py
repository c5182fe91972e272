#!/usr/bin/env python3
# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Create the albums table. Run: python -m albumstore_server.scripts.init_db"""

import asyncio
import sys

from sqlalchemy.exc import SQLAlchemyError

from albumstore_server.database import async_session_maker, engine, init_db
from albumstore_server.repository import AlbumRepository


async def main() -> int:
    try:
        await init_db()
        total = await AlbumRepository(async_session_maker).count()
    except (SQLAlchemyError, OSError) as e:
        print(f"Database initialisation failed: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()
    print(f"albums table ready ({total} rows).")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
