"""
Main entrypoint for the Book Catalog API.

This module assembles the FastAPI application, sets up logging,
wires the book service to its SQLite store and includes versioned
routers.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``, e.g.::

    uvicorn book_catalog_api.app.main:app --reload

The application title, version and database location are provided via
``Settings`` from ``core.config``.
"""

from typing import Optional

from fastapi import FastAPI

from .api.errors import register_error_handlers
from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import get_database_path, init_db
from .core.logging_config import setup_logging
from .repositories.book_repository import SQLiteBookStore
from .services.book_service import BookService


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings to build the app from.  Defaults to the settings read
        from the environment at import time.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the setup below
    # can log.
    setup_logging(
        settings.log_level,
        settings.log_file or None,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    db_path = get_database_path(settings.database_url)
    app.state.book_service = BookService(SQLiteBookStore(db_path, timeout=settings.db_timeout))

    register_error_handlers(app)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if it does not exist and brings the
        # schema up to date.
        init_db(db_path)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
