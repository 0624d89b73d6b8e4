from typing import Protocol, assert_never

from aiohttp import ClientSession

from app.internal.db_queries import BookRepository
from app.internal.metadata.open_library import (
    Accepted,
    EnrichmentOutcome,
    LookupUnavailable,
    ProcessingError,
    Rejected,
)
from app.internal.models import Book, BookPayload
from app.util.exceptions import (
    BookNotFoundError,
    IsbnValidationError,
    LookupProcessingError,
    LookupUnavailableError,
)
from app.util.log import logger


class IsbnResolver(Protocol):
    async def resolve(
        self, client_session: ClientSession, isbn: str, current_year: int
    ) -> EnrichmentOutcome: ...


def apply_enrichment(book: Book, outcome: Accepted) -> Book:
    """
    Merge an accepted lookup into a new book. The lookup always wins for the
    canonical URL; the year is only filled in when the client left it at 0.
    """
    if outcome.canonical_url is not None:
        book.canonical_url = outcome.canonical_url
    if book.publication_year == 0 and outcome.resolved_year is not None:
        book.publication_year = outcome.resolved_year
    return book


class BookRecords:
    """
    Create, read, update and delete books.

    Only creation consults the ISBN resolver; a book is written once the
    lookup has accepted it, never before.
    """

    repository: BookRepository
    resolver: IsbnResolver
    client_session: ClientSession

    def __init__(
        self,
        repository: BookRepository,
        resolver: IsbnResolver,
        client_session: ClientSession,
    ):
        self.repository = repository
        self.resolver = resolver
        self.client_session = client_session

    async def create(self, payload: BookPayload) -> Book:
        outcome = await self.resolver.resolve(
            self.client_session, payload.isbn, payload.publication_year
        )

        match outcome:
            case Accepted():
                book = apply_enrichment(payload.to_book(), outcome)
            case Rejected(reason=reason):
                logger.info("Rejected book creation", isbn=payload.isbn, reason=reason)
                raise IsbnValidationError(payload.isbn, reason)
            case LookupUnavailable(detail=detail):
                raise LookupUnavailableError(payload.isbn, detail)
            case ProcessingError(detail=detail):
                raise LookupProcessingError(payload.isbn, detail)
            case _:
                assert_never(outcome)

        created = self.repository.create(book)
        logger.info("Created book", book_id=created.id, isbn=created.isbn)
        return created

    def list_all(self) -> list[Book]:
        return self.repository.list_all()

    def get(self, book_id: int) -> Book | None:
        return self.repository.find_by_id(book_id)

    def update(self, book_id: int, payload: BookPayload) -> Book:
        book = self.repository.find_by_id(book_id)
        if book is None:
            raise BookNotFoundError(book_id)

        # wholesale replacement, the isbn is not looked up again
        book.title = payload.title
        book.author = payload.author
        book.isbn = payload.isbn
        book.publication_year = payload.publication_year
        book.canonical_url = payload.canonical_url

        saved = self.repository.save(book)
        logger.info("Updated book", book_id=book_id)
        return saved

    def delete(self, book_id: int) -> None:
        if not self.repository.exists_by_id(book_id):
            raise BookNotFoundError(book_id)
        self.repository.delete_by_id(book_id)
        logger.info("Deleted book", book_id=book_id)
