"""
Pytest configuration and fixtures for the books test suite.
"""
import os
import tempfile
from typing import AsyncGenerator, Generator

# app.util.db builds its engine on import; keep it out of the working tree
os.environ.setdefault("BOOKS_APP__CONFIG_DIR", tempfile.mkdtemp(prefix="books-test-"))

import pytest
from aiohttp import ClientSession
from aioresponses import aioresponses
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from app.internal.metadata.open_library import OpenLibraryProvider
from app.internal.models import Book, BookPayload


# Database fixtures
@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database shared across threads for testing."""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for tests."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# Async HTTP mocking fixtures
@pytest.fixture(scope="function")
def aioresponses_mocker() -> Generator[aioresponses, None, None]:
    """Provide aioresponses context manager for HTTP mocking."""
    with aioresponses() as mocked:
        yield mocked


@pytest.fixture(scope="function")
async def client_session() -> AsyncGenerator[ClientSession, None]:
    async with ClientSession() as session:
        yield session


@pytest.fixture
def provider() -> OpenLibraryProvider:
    return OpenLibraryProvider(base_url="https://openlibrary.org", timeout=5)


# Sample data fixtures
@pytest.fixture
def valid_book_payload() -> BookPayload:
    return BookPayload(
        title="Valid Book",
        author="Author",
        isbn="1234567890",
        publication_year=0,
    )


@pytest.fixture
def open_library_valid_response() -> dict:
    """Open Library answer for a recognized ISBN without an edition key."""
    return {"ISBN:1234567890": {"title": "Valid Book", "publish_date": "2009"}}


@pytest.fixture
def open_library_full_response() -> dict:
    """Trimmed ``jscmd=data`` answer as returned for a real edition."""
    return {
        "ISBN:9780140328721": {
            "url": "https://openlibrary.org/books/OL7353617M/Fantastic_Mr._Fox",
            "key": "/books/OL7353617M",
            "title": "Fantastic Mr. Fox",
            "authors": [
                {
                    "url": "https://openlibrary.org/authors/OL34184A/Roald_Dahl",
                    "name": "Roald Dahl",
                }
            ],
            "number_of_pages": 96,
            "publishers": [{"name": "Puffin"}],
            "publish_date": "October 1, 1988",
        }
    }


@pytest.fixture
def stored_books(db_session: Session) -> list[Book]:
    books = [
        Book(
            title="Existing Book",
            author="Author",
            isbn="1234567890",
            publication_year=2023,
            canonical_url="https://openlibrary.org/books/OL1M",
        ),
        Book(
            title="Another Book",
            author="Another Author",
            isbn="0987654321",
            publication_year=2001,
        ),
    ]
    for book in books:
        db_session.add(book)
    db_session.commit()
    for book in books:
        db_session.refresh(book)
    return books
