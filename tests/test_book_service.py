"""Tests for the catalog service against a temporary SQLite store."""
import threading

import pytest

from book_catalog_api.app.core.errors import BookCatalogError, BookErrorKind
from book_catalog_api.app.schemas.book import BookUpdate
from book_catalog_api.app.services.book_service import price_to_cents


def _update(**overrides):
    data = {
        "title": "Effective Java, Third Edition",
        "authors": "J. Bloch",
        "publisher": "Pearson",
        "year_published": 2019,
        "price": 39.5,
    }
    data.update(overrides)
    return BookUpdate(**data)


def test_add_book_assigns_id_and_canonical_isbn(service, make_book):
    book = service.add_book(make_book(isbn="9780134685991"))

    assert book.id is not None
    assert book.isbn == "978-0-1346-8599-1"
    assert book.price == 45.99
    assert service.get_book_by_isbn("978-0-13-468599-1") == book


def test_add_book_rejects_same_digits_with_other_dashes(service, make_book):
    service.add_book(make_book(isbn="978-0-306-40615-7"))

    with pytest.raises(BookCatalogError) as excinfo:
        service.add_book(make_book(isbn="9780306406157", title="Other"))

    assert excinfo.value.kind is BookErrorKind.DUPLICATE_ISBN
    assert "978-0-3064-0615-7" in excinfo.value.message
    assert len(service.get_all_books()) == 1


def test_add_book_treats_check_letter_case_as_same_isbn(service, make_book):
    service.add_book(make_book(isbn="0-8044-2957-X"))

    with pytest.raises(BookCatalogError) as excinfo:
        service.add_book(make_book(isbn="080442957x"))

    assert excinfo.value.kind is BookErrorKind.DUPLICATE_ISBN


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"title": "   "}, "title"),
        ({"authors": ""}, "Authors"),
        ({"publisher": " "}, "Publisher"),
        ({"year_published": 0}, "Year"),
        ({"year_published": 10**20}, "Year"),
        ({"price": -1.0}, "Price"),
        ({"price": 10.005}, "Price"),
        ({"price": 1e20}, "Price"),
        ({"isbn": "123"}, "ISBN"),
        ({"isbn": "1230306406157"}, "ISBN"),
        ({"isbn": "  "}, "ISBN"),
    ],
)
def test_add_book_validates_fields(service, make_book, overrides, fragment):
    with pytest.raises(BookCatalogError) as excinfo:
        service.add_book(make_book(**overrides))

    assert excinfo.value.kind is BookErrorKind.VALIDATION_ERROR
    assert fragment in excinfo.value.message
    assert service.get_all_books() == []


def test_validation_reports_every_violation(service, make_book):
    with pytest.raises(BookCatalogError) as excinfo:
        service.add_book(make_book(title="", publisher="", price=0.0))

    message = excinfo.value.message
    assert "title" in message
    assert "Publisher" in message
    assert "Price" in message


def test_add_all_books_returns_books_in_order(service, make_book):
    books = service.add_all_books(
        [
            make_book(isbn="0306406152", title="First"),
            make_book(isbn="9780306406157", title="Second"),
        ]
    )

    assert [book.title for book in books] == ["First", "Second"]
    assert books[0].id < books[1].id


def test_add_all_books_stops_at_first_failure(service, make_book):
    with pytest.raises(BookCatalogError) as excinfo:
        service.add_all_books(
            [
                make_book(isbn="0306406152", title="Kept"),
                make_book(isbn="0-306-40615-2", title="Duplicate"),
                make_book(isbn="9780306406157", title="Never tried"),
            ]
        )

    assert excinfo.value.kind is BookErrorKind.DUPLICATE_ISBN
    assert [book.title for book in service.get_all_books()] == ["Kept"]


def test_get_book_by_unknown_isbn(service):
    with pytest.raises(BookCatalogError) as excinfo:
        service.get_book_by_isbn("9780306406157")

    assert excinfo.value.kind is BookErrorKind.ISBN_NOT_FOUND
    assert "978-0-3064-0615-7" in excinfo.value.message


def test_get_all_books_in_store_order(service, make_book):
    assert service.get_all_books() == []
    service.add_book(make_book(isbn="0306406152", title="B"))
    service.add_book(make_book(isbn="9780306406157", title="A"))

    assert [book.title for book in service.get_all_books()] == ["B", "A"]


def test_text_queries_match_substrings(service, make_book):
    service.add_book(make_book(isbn="0306406152", title="Java Concurrency in Practice",
                               authors="Brian Goetz, Tim Peierls", publisher="Addison-Wesley"))
    service.add_book(make_book(isbn="9780306406157", title="Effective Java",
                               authors="Joshua Bloch", publisher="Addison-Wesley Professional"))
    service.add_book(make_book(isbn="9791234567890", title="Fluent Python",
                               authors="Luciano Ramalho", publisher="O'Reilly"))

    assert [b.title for b in service.get_books_by_title("Java")] == [
        "Java Concurrency in Practice",
        "Effective Java",
    ]
    assert [b.title for b in service.get_books_by_title("java")] == [
        "Java Concurrency in Practice",
        "Effective Java",
    ]
    assert [b.authors for b in service.get_books_by_authors("Goetz")] == ["Brian Goetz, Tim Peierls"]
    assert len(service.get_books_by_publisher("Addison")) == 2
    assert [b.publisher for b in service.get_books_by_publisher("Reilly")] == ["O'Reilly"]


def test_like_wildcards_are_matched_literally(service, make_book):
    service.add_book(make_book(isbn="0306406152", title="100% Pure"))
    service.add_book(make_book(isbn="9780306406157", title="1000 Pure"))

    assert [b.title for b in service.get_books_by_title("100%")] == ["100% Pure"]
    with pytest.raises(BookCatalogError):
        service.get_books_by_title("1_0")


@pytest.mark.parametrize(
    "method, kind",
    [
        ("get_books_by_title", BookErrorKind.TITLE_NOT_FOUND),
        ("get_books_by_authors", BookErrorKind.AUTHOR_NOT_FOUND),
        ("get_books_by_publisher", BookErrorKind.PUBLISHER_NOT_FOUND),
    ],
)
def test_text_queries_without_match(service, make_book, method, kind):
    service.add_book(make_book())

    with pytest.raises(BookCatalogError) as excinfo:
        getattr(service, method)("Nothing like this")

    assert excinfo.value.kind is kind


def test_blank_text_query_is_rejected(service):
    with pytest.raises(BookCatalogError) as excinfo:
        service.get_books_by_title("  ")

    assert excinfo.value.kind is BookErrorKind.VALIDATION_ERROR


def test_year_query_is_exact(service, make_book):
    service.add_book(make_book(isbn="0306406152", year_published=2018))
    service.add_book(make_book(isbn="9780306406157", year_published=2019))

    assert [b.isbn for b in service.get_books_by_year_published(2018)] == ["0-306-40615-2"]
    with pytest.raises(BookCatalogError) as excinfo:
        service.get_books_by_year_published(2017)
    assert excinfo.value.kind is BookErrorKind.YEAR_NOT_FOUND


def test_price_query_is_exact(service, make_book):
    service.add_book(make_book(isbn="0306406152", price=19.99))

    assert [b.price for b in service.get_books_by_price(19.99)] == [19.99]
    for price in (19.999, 19.98, 20.0):
        with pytest.raises(BookCatalogError) as excinfo:
            service.get_books_by_price(price)
        assert excinfo.value.kind is BookErrorKind.PRICE_NOT_FOUND


def test_price_to_cents():
    assert price_to_cents(19.99) == 1999
    assert price_to_cents(0.1) == 10
    assert price_to_cents(20) == 2000
    assert price_to_cents(19.999) is None
    assert price_to_cents(float("nan")) is None
    assert price_to_cents(float("inf")) is None


def test_update_book_overwrites_fields_and_keeps_key(service, make_book):
    original = service.add_book(make_book(isbn="9780306406157"))

    updated = service.update_book("978-0-306-40615-7", _update())

    assert updated.id == original.id
    assert updated.isbn == original.isbn
    assert updated.title == "Effective Java, Third Edition"
    assert updated.authors == "J. Bloch"
    assert updated.publisher == "Pearson"
    assert updated.year_published == 2019
    assert updated.price == 39.5
    assert service.get_book_by_isbn("9780306406157") == updated


def test_update_book_accepts_matching_body_isbn(service, make_book):
    service.add_book(make_book(isbn="9780306406157"))

    updated = service.update_book("9780306406157", _update(isbn="978-0-306-40615-7"))

    assert updated.title == "Effective Java, Third Edition"


def test_update_book_rejects_mismatching_body_isbn(service, make_book):
    service.add_book(make_book(isbn="9780306406157"))
    service.add_book(make_book(isbn="0306406152"))

    with pytest.raises(BookCatalogError) as excinfo:
        service.update_book("9780306406157", _update(isbn="0306406152"))

    assert excinfo.value.kind is BookErrorKind.ISBN_MISMATCH
    assert service.get_book_by_isbn("9780306406157").title == "Effective Java"


def test_update_unknown_book(service):
    with pytest.raises(BookCatalogError) as excinfo:
        service.update_book("9780306406157", _update())

    assert excinfo.value.kind is BookErrorKind.ISBN_NOT_FOUND


def test_update_book_validates_fields(service, make_book):
    service.add_book(make_book(isbn="9780306406157"))

    with pytest.raises(BookCatalogError) as excinfo:
        service.update_book("9780306406157", _update(price=0.0))

    assert excinfo.value.kind is BookErrorKind.VALIDATION_ERROR
    assert service.get_book_by_isbn("9780306406157").price == 45.99


def test_delete_book_by_isbn(service, make_book):
    service.add_book(make_book(isbn="9780306406157"))

    service.delete_book_by_isbn("978-0-306-40615-7")

    with pytest.raises(BookCatalogError) as excinfo:
        service.delete_book_by_isbn("9780306406157")
    assert excinfo.value.kind is BookErrorKind.ISBN_NOT_FOUND
    assert service.get_all_books() == []


def test_delete_books_by_title_is_exact(service, make_book):
    service.add_book(make_book(isbn="0306406152", title="Effective Java"))
    service.add_book(make_book(isbn="9780306406157", title="Effective Java"))
    service.add_book(make_book(isbn="9791234567890", title="Effective Java Workbook"))

    assert service.delete_books_by_title("Effective Java") == 2
    assert [b.title for b in service.get_all_books()] == ["Effective Java Workbook"]

    with pytest.raises(BookCatalogError) as excinfo:
        service.delete_books_by_title("Effective")
    assert excinfo.value.kind is BookErrorKind.TITLE_NOT_FOUND


def test_delete_all_books_is_repeatable(service, make_book):
    service.add_book(make_book(isbn="0306406152"))
    service.add_book(make_book(isbn="9780306406157"))

    assert service.delete_all_books() == 2
    assert service.get_all_books() == []
    assert service.delete_all_books() == 0


def test_out_of_range_queries_find_nothing(service, make_book):
    service.add_book(make_book())

    with pytest.raises(BookCatalogError) as excinfo:
        service.get_books_by_year_published(10**20)
    assert excinfo.value.kind is BookErrorKind.YEAR_NOT_FOUND

    with pytest.raises(BookCatalogError) as excinfo:
        service.get_books_by_price(1e20)
    assert excinfo.value.kind is BookErrorKind.PRICE_NOT_FOUND


def test_update_book_rejects_out_of_range_year(service, make_book):
    service.add_book(make_book(isbn="9780306406157"))

    with pytest.raises(BookCatalogError) as excinfo:
        service.update_book("9780306406157", _update(year_published=10**20))

    assert excinfo.value.kind is BookErrorKind.VALIDATION_ERROR
    assert service.get_book_by_isbn("9780306406157").year_published == 2018


def test_isbn_keys_ignore_surrounding_whitespace(service, make_book):
    service.add_book(make_book(isbn="9780306406157"))

    assert service.get_book_by_isbn(" 9780306406157 ").isbn == "978-0-3064-0615-7"
    updated = service.update_book("\t978-0-306-40615-7 ", _update(isbn=" 9780306406157"))
    assert updated.title == "Effective Java, Third Edition"

    service.delete_book_by_isbn(" 9780306406157\n")
    assert service.get_all_books() == []


def test_concurrent_adds_of_one_isbn_store_one_book(service, make_book):
    workers = 8
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def add():
        barrier.wait()
        try:
            service.add_book(make_book(isbn="9780306406157"))
            outcome = "added"
        except BookCatalogError as exc:
            outcome = exc.kind
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=add) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count("added") == 1
    assert results.count(BookErrorKind.DUPLICATE_ISBN) == workers - 1
    assert len(service.get_all_books()) == 1
