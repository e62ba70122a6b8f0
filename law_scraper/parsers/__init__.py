"""
Parser strategies for law notice extraction.

Parsers handle the extraction phase - converting listing and detail
pages into structured records.

Strategies:
- parse_listing: Listing table rows and pagination summary
- LawDetailParser: Labelled detail page rows
"""

from .base import ParserStrategy
from .listing import ListingPage, Pagination, parse_listing, parse_pagination
from .law_detail import LawDetailParser

__all__ = [
    "ParserStrategy",
    "ListingPage",
    "Pagination",
    "parse_listing",
    "parse_pagination",
    "LawDetailParser",
]
