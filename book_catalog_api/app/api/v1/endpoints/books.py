"""
Book catalog endpoints for API v1.

These routes expose the operations of ``BookService``: adding single
books or batches, looking books up by ISBN or by one of their
attributes, overwriting a book and deleting books.  Rejections raised
by the service are turned into HTTP responses by the handler in
``api/errors.py``, so the handlers below only deal with the success
path.

Every returned book carries a ``links`` mapping pointing at the
related operations for that book.
"""

from typing import Dict, List
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from book_catalog_api.app.core.isbn import normalize_isbn
from book_catalog_api.app.schemas.book import BookCreate, BookRead, BookUpdate, MessageRead
from book_catalog_api.app.services.book_service import BookService

router = APIRouter()


def get_book_service(request: Request) -> BookService:
    """Return the service wired into the application by ``create_app``."""
    return request.app.state.book_service


def _book_links(request: Request, book: BookRead) -> Dict[str, str]:
    base = str(request.url_for("list_books")).rstrip("/")
    by_isbn = f"{base}/isbn/{quote(book.isbn, safe='')}"
    return {
        "self": by_isbn,
        "books": f"{base}/",
        "update": by_isbn,
        "delete": by_isbn,
        "delete_by_title": f"{base}/title/{quote(book.title, safe='')}",
        "by_title": f"{base}/search/title?{urlencode({'title': book.title})}",
        "by_authors": f"{base}/search/authors?{urlencode({'authors': book.authors})}",
        "by_publisher": f"{base}/search/publisher?{urlencode({'publisher': book.publisher})}",
        "by_year_published": f"{base}/search/year?{urlencode({'year_published': book.year_published})}",
        "by_price": f"{base}/search/price?{urlencode({'price': book.price})}",
    }


def _with_links(request: Request, books: List[BookRead]) -> List[BookRead]:
    for book in books:
        book.links = _book_links(request, book)
    return books


@router.get("/", response_model=List[BookRead])
async def list_books(
    request: Request,
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    """Return every stored book."""
    return _with_links(request, service.get_all_books())


@router.get("/isbn/{isbn}", response_model=BookRead)
async def get_book_by_isbn(
    isbn: str,
    request: Request,
    service: BookService = Depends(get_book_service),
) -> BookRead:
    """Return the book with the given ISBN (any dash placement)."""
    return _with_links(request, [service.get_book_by_isbn(isbn)])[0]


@router.get("/search/title", response_model=List[BookRead])
async def search_by_title(
    request: Request,
    title: str = Query(..., description="Fragment of the title"),
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    return _with_links(request, service.get_books_by_title(title))


@router.get("/search/authors", response_model=List[BookRead])
async def search_by_authors(
    request: Request,
    authors: str = Query(..., description="Fragment of the authors field"),
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    return _with_links(request, service.get_books_by_authors(authors))


@router.get("/search/publisher", response_model=List[BookRead])
async def search_by_publisher(
    request: Request,
    publisher: str = Query(..., description="Fragment of the publisher name"),
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    return _with_links(request, service.get_books_by_publisher(publisher))


@router.get("/search/year", response_model=List[BookRead])
async def search_by_year_published(
    request: Request,
    year_published: int = Query(..., description="Exact year of publication"),
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    return _with_links(request, service.get_books_by_year_published(year_published))


@router.get("/search/price", response_model=List[BookRead])
async def search_by_price(
    request: Request,
    price: float = Query(..., description="Exact price"),
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    return _with_links(request, service.get_books_by_price(price))


@router.post("/", response_model=BookRead, status_code=status.HTTP_201_CREATED)
async def add_book(
    book_in: BookCreate,
    request: Request,
    response: Response,
    service: BookService = Depends(get_book_service),
) -> BookRead:
    """Add a book.  The ISBN is stored in canonical dashed form."""
    book = _with_links(request, [service.add_book(book_in)])[0]
    response.headers["Location"] = book.links["self"]
    return book


@router.post("/batch", response_model=List[BookRead], status_code=status.HTTP_201_CREATED)
async def add_books(
    books_in: List[BookCreate],
    request: Request,
    service: BookService = Depends(get_book_service),
) -> List[BookRead]:
    """Add several books in order.

    Not atomic: the first rejected book ends the request with its error,
    books before it remain stored.
    """
    return _with_links(request, service.add_all_books(books_in))


@router.put("/", include_in_schema=False)
async def put_not_supported() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        content={"message": "PUT method is not supported for this endpoint"},
    )


@router.put("/isbn/{isbn}", response_model=BookRead, status_code=status.HTTP_202_ACCEPTED)
async def update_book(
    isbn: str,
    book_in: BookUpdate,
    request: Request,
    service: BookService = Depends(get_book_service),
) -> BookRead:
    """Overwrite title, authors, publisher, year and price of a book."""
    return _with_links(request, [service.update_book(isbn, book_in)])[0]


@router.delete("/isbn/{isbn}", response_model=MessageRead)
async def delete_book_by_isbn(
    isbn: str,
    service: BookService = Depends(get_book_service),
) -> MessageRead:
    service.delete_book_by_isbn(isbn)
    return MessageRead(message=f"Book with ISBN {normalize_isbn(isbn.strip())} has been deleted", deleted=1)


@router.delete("/title/{title:path}", response_model=MessageRead)
async def delete_books_by_title(
    title: str,
    service: BookService = Depends(get_book_service),
) -> MessageRead:
    deleted = service.delete_books_by_title(title)
    return MessageRead(message=f"Book with title {title!r} has been deleted", deleted=deleted)


@router.delete("/", response_model=MessageRead)
async def delete_all_books(
    service: BookService = Depends(get_book_service),
) -> MessageRead:
    deleted = service.delete_all_books()
    return MessageRead(message="All books have been deleted", deleted=deleted)
