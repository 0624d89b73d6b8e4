from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, delete, select

from app.internal.models import Book
from app.util.exceptions import handle_database_error


class BookRepository(Protocol):
    """Storage operations the book records workflow depends on."""

    def create(self, book: Book) -> Book: ...

    def list_all(self) -> list[Book]: ...

    def find_by_id(self, book_id: int) -> Book | None: ...

    def exists_by_id(self, book_id: int) -> bool: ...

    def save(self, book: Book) -> Book: ...

    def delete_by_id(self, book_id: int) -> None: ...


class SQLBookRepository:
    """
    ``BookRepository`` backed by a SQLModel session. Every mutating call commits
    on its own; no transaction spans two calls.
    """

    session: Session

    def __init__(self, session: Session):
        self.session = session

    def create(self, book: Book) -> Book:
        if book.id is not None:
            raise ValueError("Cannot create a book that already has an id")
        return self._commit(book, "create book")

    def list_all(self) -> list[Book]:
        return list(self.session.exec(select(Book).order_by(col(Book.id))).all())

    def find_by_id(self, book_id: int) -> Book | None:
        return self.session.get(Book, book_id)

    def exists_by_id(self, book_id: int) -> bool:
        return (
            self.session.exec(select(Book.id).where(Book.id == book_id)).first()
            is not None
        )

    def save(self, book: Book) -> Book:
        return self._commit(book, "save book")

    def delete_by_id(self, book_id: int) -> None:
        try:
            self.session.execute(delete(Book).where(col(Book.id) == book_id))
            self.session.commit()
        except SQLAlchemyError as e:
            handle_database_error(
                e, "delete book", rollback_session=self.session, book_id=book_id
            )
            raise

    def _commit(self, book: Book, operation: str) -> Book:
        try:
            self.session.add(book)
            self.session.commit()
            self.session.refresh(book)
        except SQLAlchemyError as e:
            handle_database_error(
                e, operation, rollback_session=self.session, book_id=book.id, isbn=book.isbn
            )
            raise
        return book
