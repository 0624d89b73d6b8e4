from typing import Annotated

from aiohttp import ClientSession
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session

from app.internal.books import BookRecords
from app.internal.db_queries import SQLBookRepository
from app.internal.metadata.open_library import open_library_provider
from app.internal.models import BookPayload, BookRead
from app.util.connection import get_connection
from app.util.db import get_session
from app.util.exceptions import (
    BookNotFoundError,
    IsbnValidationError,
    LookupProcessingError,
    LookupUnavailableError,
)
from app.util.log import logger

router = APIRouter(prefix="/books", tags=["Books"])


def get_book_records(
    session: Annotated[Session, Depends(get_session)],
    client_session: Annotated[ClientSession, Depends(get_connection)],
) -> BookRecords:
    return BookRecords(
        repository=SQLBookRepository(session),
        resolver=open_library_provider,
        client_session=client_session,
    )


@router.post("", status_code=201, response_model=BookRead)
async def create_book(
    body: BookPayload,
    records: Annotated[BookRecords, Depends(get_book_records)],
):
    try:
        return await records.create(body)
    except IsbnValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid ISBN: {e.isbn}")
    except LookupUnavailableError:
        raise HTTPException(
            status_code=503, detail="ISBN lookup is unavailable, try again later"
        )
    except LookupProcessingError:
        raise HTTPException(
            status_code=502, detail="ISBN lookup returned an unusable response"
        )
    except Exception as e:
        logger.exception("Failed to create book", isbn=body.isbn, error=e)
        raise HTTPException(status_code=500, detail="Failed to create book")


@router.get("", response_model=list[BookRead])
async def list_books(
    records: Annotated[BookRecords, Depends(get_book_records)],
):
    return records.list_all()


@router.get("/{book_id}", response_model=BookRead)
async def get_book(
    book_id: int,
    records: Annotated[BookRecords, Depends(get_book_records)],
):
    book = records.get(book_id)
    if book is None:
        raise HTTPException(status_code=404, detail="Book not found")
    return book


@router.put("/{book_id}", response_model=BookRead)
async def update_book(
    book_id: int,
    body: BookPayload,
    records: Annotated[BookRecords, Depends(get_book_records)],
):
    try:
        return records.update(book_id, body)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found")
    except Exception as e:
        logger.exception("Failed to update book", book_id=book_id, error=e)
        raise HTTPException(status_code=500, detail="Failed to update book")


@router.delete("/{book_id}")
async def delete_book(
    book_id: int,
    records: Annotated[BookRecords, Depends(get_book_records)],
):
    try:
        records.delete(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found")
    except Exception as e:
        logger.exception("Failed to delete book", book_id=book_id, error=e)
        raise HTTPException(status_code=500, detail="Failed to delete book")
    return Response(status_code=204)
