"""
Pydantic models for book data.

``BookBase`` holds the fields shared by requests and responses;
``BookCreate`` is the payload for adding a book, ``BookUpdate`` the
payload for overwriting one (its ISBN is optional and, when present,
must name the same book as the lookup key) and ``BookRead`` the
representation returned by the API.  Domain validation (non-blank
text, positive numbers, ISBN shape) is performed by the service so
that direct callers get the same error taxonomy as HTTP clients.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class BookBase(BaseModel):
    title: str = Field(..., examples=["Effective Java"])
    authors: str = Field(..., examples=["Joshua Bloch"])
    publisher: str = Field(..., examples=["Addison-Wesley"])
    year_published: int = Field(..., examples=[2018])
    price: float = Field(..., examples=[45.99])


class BookCreate(BookBase):
    """Schema for adding a book."""

    isbn: str = Field(..., examples=["978-0-13-468599-1"])


class BookUpdate(BookBase):
    """Schema for overwriting the descriptive fields of a book."""

    isbn: Optional[str] = Field(None, examples=["978-0-13-468599-1"])


class BookRead(BookBase):
    """Schema for reading a book from the API."""

    id: int
    isbn: str
    links: Dict[str, str] = Field(default_factory=dict)

    model_config = {
        "from_attributes": True,
    }


class MessageRead(BaseModel):
    """Plain acknowledgement returned by delete endpoints."""

    message: str
    deleted: int = 0
