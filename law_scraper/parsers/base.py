"""
Base class for parser strategies.

Parsers implement the extraction phase - converting a listing row's
detail page into a structured DetailRecord.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from law_scraper.core.models import DetailRecord, SummaryRecord
from law_scraper.core.http_client import HttpClient
from law_scraper.navigators.base import SourceConfig

logger = structlog.get_logger(__name__)


class ParserStrategy(ABC):
    """
    Abstract base class for parser strategies.

    Parsers fetch a record's detail page and extract its fields.
    Failures propagate to the caller, which decides whether to skip.
    """

    def __init__(self, http_client: Optional[HttpClient] = None):
        """
        Initialize parser.

        Args:
            http_client: Open HTTP client shared with the rest of the crawl
                         (may be omitted when only parse() is used)
        """
        self.http_client = http_client
        self.logger = logger.bind(parser=self.__class__.__name__)

    async def extract(
        self,
        summary: SummaryRecord,
        source: SourceConfig,
    ) -> DetailRecord:
        """
        Fetch and parse the detail page of a listing row.

        Args:
            summary: Listing row with subject_url
            source: Source configuration

        Returns:
            DetailRecord (empty stub when the row has no detail link)

        Raises:
            httpx.HTTPError: Fetch failed
            ParseError: Page structure not recognised
        """
        if not summary.subject_url:
            return DetailRecord.empty()

        if not self.http_client:
            raise RuntimeError("Parser has no HTTP client. Pass an open HttpClient.")

        html = await self.http_client.get_text(summary.subject_url)
        return self.parse(html, base_url=summary.subject_url)

    @abstractmethod
    def parse(self, html: str, base_url: str) -> DetailRecord:
        """
        Parse detail page HTML.

        Args:
            html: Raw HTML content
            base_url: URL used to resolve relative links

        Returns:
            DetailRecord
        """
        pass

    def get_strategy_name(self) -> str:
        """Return human-readable strategy name."""
        return self.__class__.__name__
