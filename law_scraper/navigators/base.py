"""
Base class for navigator strategies.

Navigators implement the discovery phase of scraping - walking the
listing pages of a source and collecting one record per row.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import structlog

from law_scraper.core.models import SummaryRecord
from law_scraper.core.http_client import HttpClient

logger = structlog.get_logger(__name__)


@dataclass
class SourceConfig:
    """Configuration for the notice source."""

    source_id: str
    source_name: str
    base_url: str

    # Discovery settings
    listing_url: str
    page_param: str = "b"  # Query parameter carrying the page number
    max_pages: Optional[int] = None  # None = follow the listing's page count

    # Request headers
    referer: Optional[str] = None

    # Detail enrichment
    detail_concurrency: int = 2
    detail_delay: float = 0.2  # Seconds each worker sleeps after a detail fetch

    # Calendar day used for urgency classification
    timezone: str = "Asia/Taipei"

    @classmethod
    def from_dict(cls, data: dict) -> "SourceConfig":
        """
        Create from dictionary (e.g., from YAML).

        Numeric settings accept strings (environment substitution yields
        text); blank or non-numeric values fall back to defaults.
        """
        delay_ms = _as_number(data.get("detail_delay_ms"), 200)
        max_pages = _as_number(data.get("max_pages"), None)

        return cls(
            source_id=data["source_id"],
            source_name=data["source_name"],
            base_url=data["base_url"],
            listing_url=data["listing_url"],
            page_param=data.get("page_param", "b"),
            max_pages=int(max_pages) if max_pages is not None else None,
            referer=data.get("referer") or None,
            detail_concurrency=max(1, int(_as_number(data.get("detail_concurrency"), 2))),
            detail_delay=max(0.0, delay_ms / 1000.0),
            timezone=data.get("timezone") or "Asia/Taipei",
        )

    @property
    def request_referer(self) -> str:
        """Referer sent with every request; the site root when unset."""
        return self.referer or self.base_url.rstrip("/") + "/"


def _as_number(value, default):
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return default
    # inf and nan come through float() and YAML (.inf, .nan)
    return number if math.isfinite(number) else default


class NavigatorStrategy(ABC):
    """
    Abstract base class for navigator strategies.

    Navigators discover listing rows from source index pages.
    """

    def __init__(self, http_client: HttpClient):
        """
        Initialize navigator.

        Args:
            http_client: Open HTTP client shared with the rest of the crawl
        """
        self.http_client = http_client
        self.logger = logger.bind(navigator=self.__class__.__name__)

    @abstractmethod
    async def discover(
        self,
        source: SourceConfig,
        max_pages: Optional[int] = None,
    ) -> list[SummaryRecord]:
        """
        Discover listing rows from source.

        Args:
            source: Source configuration
            max_pages: Optional page cap (overrides source.max_pages)

        Returns:
            List of SummaryRecord objects in listing order
        """
        pass

    def get_strategy_name(self) -> str:
        """Return human-readable strategy name."""
        return self.__class__.__name__
