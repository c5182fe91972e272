# Copyright (C) 2024 Albumstore Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Run the server. Usage: python -m albumstore_server"""

import logging

import uvicorn

from albumstore_server.config import settings


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Server starting on port %s ...", settings.port)
    uvicorn.run(
        "albumstore_server.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
