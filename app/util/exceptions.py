"""
Exception types and error logging helpers for the books service.

The exception classes describe how a book operation failed so the API layer
can pick a status code; the ``handle_*`` helpers give every caught failure the
same structured log shape.
"""
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.util.log import logger


class BookRecordError(Exception):
    """Base class for failures of a book record operation."""


class IsbnValidationError(BookRecordError):
    """The ISBN was rejected by the bibliographic lookup. Nothing was written."""

    def __init__(self, isbn: str, reason: str):
        super().__init__(f"ISBN {isbn} rejected: {reason}")
        self.isbn = isbn
        self.reason = reason


class LookupUnavailableError(BookRecordError):
    """The bibliographic lookup could not be reached. The request may be resubmitted."""

    def __init__(self, isbn: str, detail: str):
        super().__init__(f"ISBN lookup unavailable for {isbn}: {detail}")
        self.isbn = isbn
        self.detail = detail


class LookupProcessingError(BookRecordError):
    """The bibliographic lookup answered with data that could not be processed."""

    def __init__(self, isbn: str, detail: str):
        super().__init__(f"ISBN lookup response for {isbn} could not be processed: {detail}")
        self.isbn = isbn
        self.detail = detail


class BookNotFoundError(BookRecordError):
    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} not found")
        self.book_id = book_id


def handle_external_api_error(
    error: Exception,
    service: str,
    operation: str,
    **context: Any
) -> None:
    """
    Standard logging for external API failures.

    Args:
        error: The caught exception
        service: Name of the external service (e.g., "Open Library")
        operation: What operation was being attempted (e.g., "ISBN lookup")
        **context: Additional context to log (e.g., isbn=...)

    Example:
        try:
            async with client_session.get(url) as response:
                ...
        except ClientError as e:
            handle_external_api_error(e, "Open Library", "ISBN lookup", isbn=isbn)
            return LookupUnavailable(detail=str(e))
    """
    logger.error(
        f"{service} {operation} failed",
        error=str(error),
        error_type=type(error).__name__,
        service=service,
        operation=operation,
        **context
    )


def handle_database_error(
    error: SQLAlchemyError,
    operation: str,
    rollback_session: Any = None,
    **context: Any
) -> None:
    """
    Standard logging and handling for database errors.

    Args:
        error: The caught SQLAlchemy exception
        operation: What database operation was being attempted
        rollback_session: Optional SQLModel Session to rollback
        **context: Additional context to log

    Example:
        try:
            session.add(book)
            session.commit()
        except SQLAlchemyError as e:
            handle_database_error(e, "save book", rollback_session=session, book_id=book.id)
            raise
    """
    logger.error(
        f"Database {operation} failed",
        error=str(error),
        error_type=type(error).__name__,
        operation=operation,
        **context
    )

    if rollback_session is not None:
        try:
            rollback_session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.warning(
                "Failed to rollback session after database error",
                error=str(rollback_error)
            )


def handle_validation_error(
    error: ValidationError,
    data_source: str,
    **context: Any
) -> None:
    """
    Standard logging for data validation failures.

    Args:
        error: The caught ValidationError
        data_source: Where the invalid data came from (e.g., "Open Library response")
        **context: Additional context to log
    """
    logger.error(
        f"{data_source} validation failed",
        error=str(error),
        error_type=type(error).__name__,
        data_source=data_source,
        **context
    )
