"""
Error taxonomy of the book catalog.

Every rejected catalog operation raises :class:`BookCatalogError`
carrying a :class:`BookErrorKind` and a human readable message.  None
of these errors are transient, so nothing in the service retries them.
The HTTP layer translates the kind into a status code (see
``api/errors.py``).
"""

from enum import Enum


class BookErrorKind(str, Enum):
    DUPLICATE_ISBN = "duplicate_isbn"
    ISBN_NOT_FOUND = "isbn_not_found"
    TITLE_NOT_FOUND = "title_not_found"
    AUTHOR_NOT_FOUND = "author_not_found"
    PUBLISHER_NOT_FOUND = "publisher_not_found"
    YEAR_NOT_FOUND = "year_not_found"
    PRICE_NOT_FOUND = "price_not_found"
    VALIDATION_ERROR = "validation_error"
    ISBN_MISMATCH = "isbn_mismatch"


class BookCatalogError(Exception):
    """A catalog operation was rejected."""

    def __init__(self, kind: BookErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"BookCatalogError({self.kind.value!r}, {self.message!r})"
