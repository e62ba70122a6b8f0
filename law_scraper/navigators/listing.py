"""
Paginated listing navigator: index page 1..N -> summary records.

Pages are fetched sequentially because each page reports the total page
count used to decide whether to continue.
"""

from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

import httpx

from law_scraper.core.exceptions import PageUnavailableError, ParseError
from law_scraper.core.models import SummaryRecord
from law_scraper.parsers.listing import ListingPage, parse_listing

from .base import NavigatorStrategy, SourceConfig


def build_page_url(listing_url: str, page: int, page_param: str = "b") -> str:
    """
    Build the listing URL for a page number.

    Page 1 is the bare listing URL.
    """
    if page <= 1:
        return listing_url

    parts = urlsplit(listing_url)
    query = [(k, v) for k, v in parse_qsl(parts.query) if k != page_param]
    query.append((page_param, str(page)))
    return urlunsplit(parts._replace(query=urlencode(query)))


class ListingNavigator(NavigatorStrategy):
    """
    Navigator for the KAA law listing.

    Walks pages 1..total_pages, refreshing total_pages from every page
    that parses. A page that cannot be fetched or parsed is logged and
    skipped; it never aborts the crawl.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.total_records: Optional[int] = None
        self.skipped_pages: list[int] = []

    async def discover(
        self,
        source: SourceConfig,
        max_pages: Optional[int] = None,
    ) -> list[SummaryRecord]:
        """
        Collect summary records from every listing page.

        Args:
            source: Source configuration
            max_pages: Optional page cap (defaults to source.max_pages)

        Returns:
            List of SummaryRecord objects in listing order
        """
        page_cap = max_pages if max_pages is not None else source.max_pages

        self.logger.info(
            "discovering_records",
            source=source.source_id,
            url=source.listing_url,
            page_cap=page_cap,
        )

        records: list[SummaryRecord] = []
        self.total_records = None
        self.skipped_pages = []
        total_pages = 1
        page = 1

        while page <= total_pages:
            if page_cap is not None and page > page_cap:
                self.logger.info("page_cap_reached", page_cap=page_cap)
                break

            try:
                listing = await self._fetch_page(source, page)
            except PageUnavailableError as e:
                self.logger.warning("page_skipped", page=page, url=e.url, error=e.reason)
                self.skipped_pages.append(page)
                page += 1
                continue

            pagination = listing.pagination
            if page == 1 and pagination.total_records is not None:
                self.total_records = pagination.total_records
                self.logger.info(
                    "listing_summary",
                    total_records=pagination.total_records,
                    total_pages=pagination.total_pages,
                )

            total_pages = pagination.total_pages
            records.extend(listing.records)

            self.logger.info(
                "page_parsed",
                page=page,
                total_pages=total_pages,
                count=len(listing.records),
            )
            page += 1

        self.logger.info(
            "discovery_complete",
            source=source.source_id,
            count=len(records),
            skipped_pages=self.skipped_pages,
        )

        return records

    async def _fetch_page(self, source: SourceConfig, page: int) -> ListingPage:
        """Fetch and parse one listing page, folding failures into PageUnavailableError."""
        url = build_page_url(source.listing_url, page, source.page_param)

        try:
            html = await self.http_client.get_text(url)
            return parse_listing(html, source.listing_url)
        except httpx.HTTPError as e:
            raise PageUnavailableError(page, url, str(e)) from e
        except ParseError as e:
            raise PageUnavailableError(page, url, str(e)) from e
