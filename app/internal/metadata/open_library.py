"""
Open Library provider used to validate and enrich books when they are created.
"""
import json
from enum import StrEnum
from typing import Literal, Optional
from urllib.parse import quote, urlsplit

from aiohttp import ClientError, ClientSession, ClientTimeout
from pydantic import BaseModel, ValidationError

from app.internal.env_settings import Settings
from app.util.exceptions import handle_external_api_error, handle_validation_error
from app.util.log import logger


class OpenLibraryEdition(BaseModel):
    """Edition entry of an Open Library ``api/books`` response (``jscmd=data``)."""
    title: Optional[str] = None
    key: Optional[str] = None
    publish_date: Optional[str] = None


class RejectionReason(StrEnum):
    not_found = "not_found"
    """The response was empty or did not mention the lookup key."""
    rejected_by_source = "rejected_by_source"
    """Open Library refused the request with a 4xx status other than 408/429."""


class Accepted(BaseModel):
    kind: Literal["accepted"] = "accepted"
    canonical_url: Optional[str] = None
    resolved_year: Optional[int] = None


class Rejected(BaseModel):
    kind: Literal["rejected"] = "rejected"
    reason: RejectionReason


class LookupUnavailable(BaseModel):
    kind: Literal["lookup_unavailable"] = "lookup_unavailable"
    detail: str


class ProcessingError(BaseModel):
    kind: Literal["processing_error"] = "processing_error"
    detail: str


EnrichmentOutcome = Accepted | Rejected | LookupUnavailable | ProcessingError

# client errors that say Open Library is busy, not that the isbn is wrong
TRANSIENT_CLIENT_STATUSES = frozenset({408, 429})


def parse_publish_year(publish_date: str) -> Optional[int]:
    """
    Open Library publish dates are free text ("2009", "1999 printing", "March 2009").
    Only a leading token of plain ASCII digits is taken as the year.
    """
    tokens = publish_date.split()
    if not tokens or not (tokens[0].isascii() and tokens[0].isdigit()):
        return None
    return int(tokens[0])


class OpenLibraryProvider:
    """Resolves ISBNs against the Open Library books API."""

    base_url: str
    timeout: float

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        settings = Settings().app
        self.base_url = (base_url or settings.openlibrary_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.isbn_lookup_timeout

    @staticmethod
    def lookup_key(isbn: str) -> str:
        return f"ISBN:{isbn}"

    def build_params(self, isbn: str) -> dict[str, str]:
        return {
            "bibkeys": self.lookup_key(isbn),
            "format": "json",
            "jscmd": "data",
        }

    def _canonical_url(self, isbn: str, edition: OpenLibraryEdition) -> str:
        # only the path of the key is kept, the origin is always base_url
        path = urlsplit(edition.key).path if edition.key else ""
        if not path.strip("/"):
            # editions without a key are still reachable through the isbn redirect
            path = f"/isbn/{quote(isbn)}"
        return f"{self.base_url}/{path.lstrip('/')}"

    async def resolve(
        self,
        client_session: ClientSession,
        isbn: str,
        current_year: int,
    ) -> EnrichmentOutcome:
        """
        Look up a single ISBN and decide whether the book may be created.

        Exactly one request is made. ``current_year`` is the client-supplied
        publication year; a resolved year is only returned when it is ``0``.
        """
        lookup_key = self.lookup_key(isbn)

        try:
            async with client_session.get(
                f"{self.base_url}/api/books",
                params=self.build_params(isbn),
                timeout=ClientTimeout(total=self.timeout),
            ) as response:
                if (
                    response.status >= 500
                    or response.status in TRANSIENT_CLIENT_STATUSES
                ):
                    logger.warning(
                        f"Open Library returned {response.status}",
                        isbn=isbn,
                        status=response.status,
                    )
                    return LookupUnavailable(detail=f"Open Library returned {response.status}")
                if response.status != 200:
                    logger.info(
                        f"Open Library rejected ISBN lookup with {response.status}",
                        isbn=isbn,
                        status=response.status,
                    )
                    return Rejected(reason=RejectionReason.rejected_by_source)

                data = await response.json(content_type=None)

        except (ClientError, TimeoutError) as e:
            handle_external_api_error(e, "Open Library", "ISBN lookup", isbn=isbn)
            return LookupUnavailable(detail=str(e) or type(e).__name__)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            handle_external_api_error(e, "Open Library", "parse response", isbn=isbn)
            return ProcessingError(detail="Open Library response is not valid JSON")

        if not data:
            logger.info("ISBN not found in Open Library", isbn=isbn)
            return Rejected(reason=RejectionReason.not_found)
        if not isinstance(data, dict):
            logger.error(
                "Unexpected Open Library response shape",
                isbn=isbn,
                response_type=type(data).__name__,
            )
            return ProcessingError(detail="Open Library response is not a JSON object")

        raw_entry = data.get(lookup_key)
        if raw_entry is None:
            logger.info("ISBN not found in Open Library", isbn=isbn, keys=list(data)[:5])
            return Rejected(reason=RejectionReason.not_found)

        try:
            edition = OpenLibraryEdition.model_validate(raw_entry)
        except ValidationError as e:
            handle_validation_error(e, "Open Library response", isbn=isbn)
            return ProcessingError(detail=f"Invalid Open Library entry for {lookup_key}")

        canonical_url = None
        if edition.title:
            canonical_url = self._canonical_url(isbn, edition)

        resolved_year = None
        if current_year == 0 and edition.publish_date is not None:
            resolved_year = parse_publish_year(edition.publish_date)
            if resolved_year is None:
                logger.debug(
                    "Could not parse publish date",
                    isbn=isbn,
                    publish_date=edition.publish_date,
                )

        logger.info(
            "ISBN accepted by Open Library",
            isbn=isbn,
            canonical_url=canonical_url,
            resolved_year=resolved_year,
        )
        return Accepted(canonical_url=canonical_url, resolved_year=resolved_year)


# Global provider instance
open_library_provider = OpenLibraryProvider()
