"""Entry point for serving the Book Catalog API.

Host and port are read from the ``HOST`` and ``PORT`` environment
variables (see ``book_catalog_api.app.core.config``), as are the
database location and log level.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from book_catalog_api.app.core.config import settings
from book_catalog_api.app.main import app


async def run_api() -> None:
    """Serve the API with Uvicorn until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


async def main() -> None:
    logging.getLogger(__name__).info(
        "Starting %s on %s:%s", settings.project_name, settings.host, settings.port
    )
    await run_api()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
