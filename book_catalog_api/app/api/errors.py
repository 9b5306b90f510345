"""
Translation of catalog errors into HTTP responses.

Every :class:`BookCatalogError` that escapes an endpoint is rendered as
a JSON body carrying the request path, the error kind, the message and
the status code.  The status depends only on the error kind.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from book_catalog_api.app.core.errors import BookCatalogError, BookErrorKind

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[BookErrorKind, int] = {
    BookErrorKind.DUPLICATE_ISBN: status.HTTP_409_CONFLICT,
    BookErrorKind.ISBN_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookErrorKind.TITLE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookErrorKind.AUTHOR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookErrorKind.PUBLISHER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookErrorKind.YEAR_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookErrorKind.PRICE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookErrorKind.VALIDATION_ERROR: 422,
    BookErrorKind.ISBN_MISMATCH: status.HTTP_400_BAD_REQUEST,
}


async def book_catalog_error_handler(request: Request, exc: BookCatalogError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={
            "api_path": request.url.path,
            "error_kind": exc.kind.value,
            "error_message": exc.message,
            "status_code": status_code,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BookCatalogError, book_catalog_error_handler)
