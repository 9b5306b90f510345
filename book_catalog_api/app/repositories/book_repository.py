"""
Record store for books.

``BookStore`` is the persistence port consumed by the catalog
service; ``SQLiteBookStore`` implements it on top of the SQLite
database managed by ``core.db``.  The store works on ``BookRecord``
values whose price is kept in integer cents.

Each method opens its own connection unless the store is bound to a
transaction via :meth:`SQLiteBookStore.transaction`, in which case all
calls share that transaction's connection.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, List, Optional, Protocol

from book_catalog_api.app.core.db import get_connection
from book_catalog_api.app.core.errors import BookCatalogError, BookErrorKind

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, authors, publisher, isbn, year_published, price_cents"


@dataclass
class BookRecord:
    """Persisted representation of a book."""

    title: str
    authors: str
    publisher: str
    isbn: str
    year_published: int
    price_cents: int
    id: Optional[int] = None


class BookStore(Protocol):
    def transaction(self) -> ContextManager["BookStore"]:
        ...

    def find_all(self) -> List[BookRecord]:
        ...

    def find_by_isbn(self, isbn: str) -> Optional[BookRecord]:
        ...

    def find_by_title(self, title: str) -> List[BookRecord]:
        ...

    def find_by_title_contains(self, fragment: str) -> List[BookRecord]:
        ...

    def find_by_authors_contains(self, fragment: str) -> List[BookRecord]:
        ...

    def find_by_publisher_contains(self, fragment: str) -> List[BookRecord]:
        ...

    def find_by_year(self, year_published: int) -> List[BookRecord]:
        ...

    def find_by_price(self, price_cents: int) -> List[BookRecord]:
        ...

    def save(self, book: BookRecord) -> BookRecord:
        ...

    def update_fields(
        self,
        isbn: str,
        title: str,
        authors: str,
        publisher: str,
        year_published: int,
        price_cents: int,
    ) -> None:
        ...

    def delete_by_isbn(self, isbn: str) -> None:
        ...

    def delete_by_title(self, title: str) -> int:
        ...

    def delete_all(self) -> int:
        ...


def _like_pattern(fragment: str) -> str:
    """Build a LIKE pattern matching ``fragment`` literally anywhere."""
    escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SQLiteBookStore:
    """SQLite implementation of :class:`BookStore`."""

    def __init__(
        self,
        db_path: str,
        timeout: float = 5.0,
        connection: Optional[sqlite3.Connection] = None,
    ) -> None:
        self.db_path = db_path
        self.timeout = timeout
        self._conn = connection

    @contextmanager
    def transaction(self) -> Iterator["SQLiteBookStore"]:
        """Run the enclosed calls as one atomic unit.

        ``BEGIN IMMEDIATE`` takes the database write lock up front, so a
        check-then-act sequence cannot interleave with another writer.
        Commits when the block exits normally and rolls back otherwise.
        Nested use joins the outer transaction.
        """
        if self._conn is not None:
            yield self
            return
        conn = get_connection(self.db_path, self.timeout)
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield SQLiteBookStore(self.db_path, self.timeout, connection=conn)
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        if self._conn is not None:
            yield self._conn.cursor()
            return
        conn = get_connection(self.db_path, self.timeout)
        try:
            yield conn.cursor()
            conn.commit()
        finally:
            conn.close()

    def _select(self, where: str = "", params: tuple = ()) -> List[BookRecord]:
        query = f"SELECT {_COLUMNS} FROM books"
        if where:
            query += f" WHERE {where}"
        query += " ORDER BY id ASC"
        with self._cursor() as cursor:
            rows = cursor.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    def find_all(self) -> List[BookRecord]:
        return self._select()

    def find_by_isbn(self, isbn: str) -> Optional[BookRecord]:
        books = self._select("isbn = ?", (isbn,))
        return books[0] if books else None

    def find_by_title(self, title: str) -> List[BookRecord]:
        return self._select("title = ?", (title,))

    def find_by_title_contains(self, fragment: str) -> List[BookRecord]:
        return self._select("title LIKE ? ESCAPE '\\'", (_like_pattern(fragment),))

    def find_by_authors_contains(self, fragment: str) -> List[BookRecord]:
        return self._select("authors LIKE ? ESCAPE '\\'", (_like_pattern(fragment),))

    def find_by_publisher_contains(self, fragment: str) -> List[BookRecord]:
        return self._select("publisher LIKE ? ESCAPE '\\'", (_like_pattern(fragment),))

    def find_by_year(self, year_published: int) -> List[BookRecord]:
        return self._select("year_published = ?", (year_published,))

    def find_by_price(self, price_cents: int) -> List[BookRecord]:
        return self._select("price_cents = ?", (price_cents,))

    def save(self, book: BookRecord) -> BookRecord:
        """Insert ``book`` and return it with the assigned id.

        A clash on the unique ISBN column is reported as
        ``DUPLICATE_ISBN``.
        """
        try:
            with self._cursor() as cursor:
                cursor.execute(
                    """
                    INSERT INTO books (title, authors, publisher, isbn, year_published, price_cents)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        book.title,
                        book.authors,
                        book.publisher,
                        book.isbn,
                        book.year_published,
                        book.price_cents,
                    ),
                )
                book_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" not in str(exc):
                raise
            logger.warning("Unique constraint rejected ISBN %s", book.isbn)
            raise BookCatalogError(
                BookErrorKind.DUPLICATE_ISBN,
                f"Book with ISBN {book.isbn} already exists",
            ) from exc
        return BookRecord(
            id=book_id,
            title=book.title,
            authors=book.authors,
            publisher=book.publisher,
            isbn=book.isbn,
            year_published=book.year_published,
            price_cents=book.price_cents,
        )

    def update_fields(
        self,
        isbn: str,
        title: str,
        authors: str,
        publisher: str,
        year_published: int,
        price_cents: int,
    ) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                UPDATE books
                SET title = ?, authors = ?, publisher = ?, year_published = ?, price_cents = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE isbn = ?
                """,
                (title, authors, publisher, year_published, price_cents, isbn),
            )

    def delete_by_isbn(self, isbn: str) -> None:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM books WHERE isbn = ?", (isbn,))

    def delete_by_title(self, title: str) -> int:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM books WHERE title = ?", (title,))
            return cursor.rowcount

    def delete_all(self) -> int:
        with self._cursor() as cursor:
            count = cursor.execute("SELECT COUNT(*) FROM books").fetchone()[0]
            cursor.execute("DELETE FROM books")
            return count

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> BookRecord:
        return BookRecord(
            id=row["id"],
            title=row["title"],
            authors=row["authors"],
            publisher=row["publisher"],
            isbn=row["isbn"],
            year_published=row["year_published"],
            price_cents=row["price_cents"],
        )
