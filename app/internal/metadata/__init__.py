"""
ISBN validation and metadata enrichment for newly created books.

Books are checked against Open Library before they are stored; a recognized
ISBN may contribute a canonical URL and, when the client left it unknown, a
publication year.
"""

from .open_library import (
    Accepted,
    EnrichmentOutcome,
    LookupUnavailable,
    OpenLibraryProvider,
    ProcessingError,
    Rejected,
    RejectionReason,
    open_library_provider,
)

__all__ = [
    "Accepted",
    "EnrichmentOutcome",
    "LookupUnavailable",
    "OpenLibraryProvider",
    "ProcessingError",
    "Rejected",
    "RejectionReason",
    "open_library_provider",
]
