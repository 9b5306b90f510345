"""
Business logic for the book catalog.

``BookService`` validates incoming book data, canonicalizes ISBNs,
enforces ISBN uniqueness and translates store outcomes into
``BookRead`` results or :class:`BookCatalogError` rejections.  The
service keeps no state of its own besides the injected store; every
call round-trips to it.

Operations that check and then write (add, update, delete) run inside
one store transaction so two concurrent requests for the same ISBN
cannot both pass the existence check.

Attribute lookups on text fields (title, authors, publisher) are
substring matches and return every matching book.  Year and price
lookups are exact.  Prices are compared in whole cents.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

from book_catalog_api.app.core.errors import BookCatalogError, BookErrorKind
from book_catalog_api.app.core.isbn import is_canonical_isbn, normalize_isbn
from book_catalog_api.app.repositories.book_repository import BookRecord, BookStore
from book_catalog_api.app.schemas.book import BookCreate, BookRead, BookUpdate

logger = logging.getLogger(__name__)

ISBN_NOT_FOUND = "Book with ISBN {isbn} was not found"
ISBN_ALREADY_EXISTS = "Book with ISBN {isbn} already exists"
ISBN_MISMATCH = "ISBN {body} in the request body does not match ISBN {key}"
TITLE_NOT_FOUND = "No book found with title {title!r}"
AUTHOR_NOT_FOUND = "No book found with authors matching {authors!r}"
PUBLISHER_NOT_FOUND = "No book found with publisher matching {publisher!r}"
YEAR_NOT_FOUND = "No book found published in {year}"
PRICE_NOT_FOUND = "No book found with price {price}"

# SQLite stores INTEGER columns as signed 64-bit values.
SQLITE_INTEGER_MIN = -(2**63)
SQLITE_INTEGER_MAX = 2**63 - 1


def price_to_cents(price: float) -> Optional[int]:
    """Convert a decimal price to integer cents.

    Returns ``None`` when ``price`` is not finite or has more than two
    fractional digits, i.e. when it cannot equal any stored price.
    """
    try:
        amount = Decimal(str(price))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    cents = amount * 100
    if cents != cents.to_integral_value():
        return None
    return int(cents)


def cents_to_price(cents: int) -> float:
    return float(Decimal(cents) / 100)


def _fits_integer_column(value: int) -> bool:
    return SQLITE_INTEGER_MIN <= value <= SQLITE_INTEGER_MAX


def _isbn_key(isbn: Optional[str]) -> Optional[str]:
    """Canonical lookup key for an ISBN given by a caller."""
    if isbn is None:
        return None
    return normalize_isbn(isbn.strip())


def _validate_fields(
    title: str,
    authors: str,
    publisher: str,
    year_published: int,
    price: float,
) -> tuple[List[str], Optional[int]]:
    """Check the descriptive fields of a book.

    Returns the list of violations and the price in cents (``None`` when
    the price is invalid).
    """
    errors: List[str] = []
    if not title or not title.strip():
        errors.append("Book title cannot be blank")
    if not authors or not authors.strip():
        errors.append("Authors cannot be blank")
    if not publisher or not publisher.strip():
        errors.append("Publisher cannot be blank")
    if year_published is None or year_published <= 0:
        errors.append("Year published must be a positive number")
    elif year_published > SQLITE_INTEGER_MAX:
        errors.append("Year published is too large")
    price_cents = price_to_cents(price) if price is not None else None
    if price_cents is None:
        errors.append("Price must be a number with at most two decimal places")
    elif price_cents <= 0:
        errors.append("Price must be a positive number")
        price_cents = None
    elif price_cents > SQLITE_INTEGER_MAX:
        errors.append("Price is too large")
        price_cents = None
    return errors, price_cents


def _validate_isbn(raw: Optional[str]) -> tuple[List[str], Optional[str]]:
    if raw is None or not raw.strip():
        return ["ISBN cannot be blank"], None
    isbn = _isbn_key(raw)
    if not is_canonical_isbn(isbn):
        return [
            f"Invalid ISBN {raw!r}: it must be an ISBN-10 or an ISBN-13 starting with 978 or 979"
        ], None
    return [], isbn


def _raise_if_invalid(errors: List[str]) -> None:
    if errors:
        raise BookCatalogError(BookErrorKind.VALIDATION_ERROR, "; ".join(errors))


def _require_fragment(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise BookCatalogError(
            BookErrorKind.VALIDATION_ERROR, f"{field} to search for cannot be blank"
        )
    return value.strip()


def _to_read(record: BookRecord) -> BookRead:
    return BookRead(
        id=record.id,
        title=record.title,
        authors=record.authors,
        publisher=record.publisher,
        isbn=record.isbn,
        year_published=record.year_published,
        price=cents_to_price(record.price_cents),
    )


def _non_empty(records: List[BookRecord], kind: BookErrorKind, message: str) -> List[BookRead]:
    if not records:
        raise BookCatalogError(kind, message)
    return [_to_read(record) for record in records]


class BookService:
    """Catalog operations over an injected :class:`BookStore`."""

    def __init__(self, store: BookStore) -> None:
        self.store = store

    def add_book(self, candidate: BookCreate) -> BookRead:
        """Validate, canonicalize and persist a new book.

        Raises ``DUPLICATE_ISBN`` when a book with the same canonical
        ISBN is already stored.
        """
        errors, price_cents = _validate_fields(
            candidate.title,
            candidate.authors,
            candidate.publisher,
            candidate.year_published,
            candidate.price,
        )
        isbn_errors, isbn = _validate_isbn(candidate.isbn)
        _raise_if_invalid(errors + isbn_errors)

        record = BookRecord(
            title=candidate.title.strip(),
            authors=candidate.authors.strip(),
            publisher=candidate.publisher.strip(),
            isbn=isbn,
            year_published=candidate.year_published,
            price_cents=price_cents,
        )
        with self.store.transaction() as tx:
            if tx.find_by_isbn(isbn) is not None:
                logger.info("Rejected duplicate ISBN %s", isbn)
                raise BookCatalogError(
                    BookErrorKind.DUPLICATE_ISBN, ISBN_ALREADY_EXISTS.format(isbn=isbn)
                )
            saved = tx.save(record)
        logger.info("Added book %s with ISBN %s", saved.id, saved.isbn)
        return _to_read(saved)

    def add_all_books(self, candidates: Iterable[BookCreate]) -> List[BookRead]:
        """Add each candidate in order as an independent operation.

        This is not a transaction: the first failing candidate aborts the
        batch by propagating its error, books added before it stay
        stored and later candidates are not attempted.
        """
        added: List[BookRead] = []
        for position, candidate in enumerate(candidates):
            try:
                added.append(self.add_book(candidate))
            except BookCatalogError:
                logger.warning(
                    "Batch add stopped at position %s after %s book(s) were added",
                    position,
                    len(added),
                )
                raise
        return added

    def get_all_books(self) -> List[BookRead]:
        return [_to_read(record) for record in self.store.find_all()]

    def get_book_by_isbn(self, isbn: str) -> BookRead:
        key = _isbn_key(isbn)
        record = self.store.find_by_isbn(key) if key else None
        if record is None:
            raise BookCatalogError(
                BookErrorKind.ISBN_NOT_FOUND, ISBN_NOT_FOUND.format(isbn=key or isbn)
            )
        return _to_read(record)

    def get_books_by_title(self, title: str) -> List[BookRead]:
        fragment = _require_fragment(title, "Title")
        return _non_empty(
            self.store.find_by_title_contains(fragment),
            BookErrorKind.TITLE_NOT_FOUND,
            TITLE_NOT_FOUND.format(title=fragment),
        )

    def get_books_by_authors(self, authors: str) -> List[BookRead]:
        fragment = _require_fragment(authors, "Authors")
        return _non_empty(
            self.store.find_by_authors_contains(fragment),
            BookErrorKind.AUTHOR_NOT_FOUND,
            AUTHOR_NOT_FOUND.format(authors=fragment),
        )

    def get_books_by_publisher(self, publisher: str) -> List[BookRead]:
        fragment = _require_fragment(publisher, "Publisher")
        return _non_empty(
            self.store.find_by_publisher_contains(fragment),
            BookErrorKind.PUBLISHER_NOT_FOUND,
            PUBLISHER_NOT_FOUND.format(publisher=fragment),
        )

    def get_books_by_year_published(self, year_published: int) -> List[BookRead]:
        records = self.store.find_by_year(year_published) if _fits_integer_column(year_published) else []
        return _non_empty(
            records,
            BookErrorKind.YEAR_NOT_FOUND,
            YEAR_NOT_FOUND.format(year=year_published),
        )

    def get_books_by_price(self, price: float) -> List[BookRead]:
        price_cents = price_to_cents(price)
        records: List[BookRecord] = []
        if price_cents is not None and _fits_integer_column(price_cents):
            records = self.store.find_by_price(price_cents)
        return _non_empty(
            records,
            BookErrorKind.PRICE_NOT_FOUND,
            PRICE_NOT_FOUND.format(price=price),
        )

    def update_book(self, isbn: str, changes: BookUpdate) -> BookRead:
        """Overwrite title, authors, publisher, year and price of a book.

        ``isbn`` locates the book and is never changed.  A body ISBN, if
        given, must canonicalize to the same value or the update is
        rejected with ``ISBN_MISMATCH``.
        """
        key = _isbn_key(isbn)
        if changes.isbn is not None and _isbn_key(changes.isbn) != key:
            raise BookCatalogError(
                BookErrorKind.ISBN_MISMATCH,
                ISBN_MISMATCH.format(body=changes.isbn, key=key),
            )
        errors, price_cents = _validate_fields(
            changes.title,
            changes.authors,
            changes.publisher,
            changes.year_published,
            changes.price,
        )
        _raise_if_invalid(errors)

        with self.store.transaction() as tx:
            if not key or tx.find_by_isbn(key) is None:
                raise BookCatalogError(
                    BookErrorKind.ISBN_NOT_FOUND, ISBN_NOT_FOUND.format(isbn=key or isbn)
                )
            tx.update_fields(
                key,
                changes.title.strip(),
                changes.authors.strip(),
                changes.publisher.strip(),
                changes.year_published,
                price_cents,
            )
            updated = tx.find_by_isbn(key)
        logger.info("Updated book with ISBN %s", key)
        return _to_read(updated)

    def delete_book_by_isbn(self, isbn: str) -> None:
        key = _isbn_key(isbn)
        with self.store.transaction() as tx:
            if not key or tx.find_by_isbn(key) is None:
                raise BookCatalogError(
                    BookErrorKind.ISBN_NOT_FOUND, ISBN_NOT_FOUND.format(isbn=key or isbn)
                )
            tx.delete_by_isbn(key)
        logger.info("Deleted book with ISBN %s", key)

    def delete_books_by_title(self, title: str) -> int:
        """Delete every book whose title equals ``title`` exactly.

        Returns the number of deleted books.
        """
        with self.store.transaction() as tx:
            if not title or not tx.find_by_title(title):
                raise BookCatalogError(
                    BookErrorKind.TITLE_NOT_FOUND, TITLE_NOT_FOUND.format(title=title)
                )
            deleted = tx.delete_by_title(title)
        logger.info("Deleted %s book(s) titled %r", deleted, title)
        return deleted

    def delete_all_books(self) -> int:
        deleted = self.store.delete_all()
        logger.info("Deleted all books (%s removed)", deleted)
        return deleted
