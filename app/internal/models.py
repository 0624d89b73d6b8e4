from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlmodel import Field as SQLField, SQLModel


class Book(SQLModel, table=True):
    """A persisted book record. ``publication_year == 0`` means the year is unknown."""

    id: int | None = SQLField(default=None, primary_key=True)
    title: str
    author: str
    isbn: str = SQLField(index=True)
    publication_year: int = 0
    canonical_url: str | None = None


class BookPayload(BaseModel):
    """
    Client-supplied fields of a book, used for both create and update.

    Updates replace every field with the payload's values; there is no
    partial patch.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    isbn: str = Field(min_length=1)
    publication_year: int = Field(default=0, ge=0)
    canonical_url: str | None = None

    def to_book(self) -> Book:
        return Book(
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            publication_year=self.publication_year,
            canonical_url=self.canonical_url,
        )


class BookRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    title: str
    author: str
    isbn: str
    publication_year: int
    canonical_url: str | None = None
