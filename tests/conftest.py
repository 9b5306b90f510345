import pytest
from fastapi.testclient import TestClient

from book_catalog_api.app.core.config import Settings
from book_catalog_api.app.core.db import init_db
from book_catalog_api.app.main import create_app
from book_catalog_api.app.repositories.book_repository import SQLiteBookStore
from book_catalog_api.app.schemas.book import BookCreate
from book_catalog_api.app.services.book_service import BookService


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "books.db")
    init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return SQLiteBookStore(db_path)


@pytest.fixture
def service(store):
    return BookService(store)


@pytest.fixture
def make_book():
    """Factory for valid ``BookCreate`` payloads; keyword arguments override fields."""

    def _make(**overrides):
        data = {
            "title": "Effective Java",
            "authors": "Joshua Bloch",
            "publisher": "Addison-Wesley",
            "isbn": "978-0-13-468599-1",
            "year_published": 2018,
            "price": 45.99,
        }
        data.update(overrides)
        return BookCreate(**data)

    return _make


@pytest.fixture
def client(tmp_path):
    settings = Settings(database_url=str(tmp_path / "api.db"))
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
