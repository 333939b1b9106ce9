"""Run the blockwatch API server.

Usage:
    python -m blockwatch
"""

import logging

import uvicorn

from blockwatch.config import settings


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-5s %(name)s - %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    uvicorn.run("blockwatch.api.main:app", host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    main()
