"""
Listing page parser.

Extracts one SummaryRecord per table row and the pagination summary
("資料筆數：N ... 頁數：c/t") from a KAA law listing page.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup

from law_scraper.core.exceptions import ParseError
from law_scraper.core.models import SummaryRecord
from law_scraper.core.normalizer import absolute_url, clean_text

LISTING_TABLE_SELECTOR = ".mtable table"
PAGINATION_SELECTOR = ".quantity .q_box2"
MIN_ROW_CELLS = 4

TOTAL_RECORDS_PATTERN = re.compile(r"資料筆數：(\d+)")
PAGE_PATTERN = re.compile(r"頁數：(\d+)/(\d+)")


@dataclass
class Pagination:
    """Pagination summary of one listing page."""
    total_records: Optional[int] = None
    current_page: int = 1
    total_pages: int = 1


@dataclass
class ListingPage:
    """Parsed listing page."""
    records: list[SummaryRecord] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)


def parse_pagination(soup: BeautifulSoup) -> Pagination:
    """
    Read the pagination summary box.

    Missing parts fall back to a single page.
    """
    box = soup.select_one(PAGINATION_SELECTOR)
    summary = clean_text(box.get_text()) if box else ""

    total_match = TOTAL_RECORDS_PATTERN.search(summary)
    page_match = PAGE_PATTERN.search(summary)

    return Pagination(
        total_records=int(total_match.group(1)) if total_match else None,
        current_page=int(page_match.group(1)) if page_match else 1,
        total_pages=int(page_match.group(2)) if page_match else 1,
    )


def parse_listing(html: str, base_url: str) -> ListingPage:
    """
    Parse a listing page into summary records and pagination.

    Args:
        html: Raw HTML content
        base_url: URL used to resolve relative detail links

    Returns:
        ListingPage

    Raises:
        ParseError: If the listing table is missing
    """
    soup = BeautifulSoup(html, "lxml")
    table = soup.select_one(LISTING_TABLE_SELECTOR)
    if table is None:
        raise ParseError("Unable to locate the law listing table.")

    records = []
    # First row is the header
    for row in table.find_all("tr")[1:]:
        cells = row.find_all("td")
        if len(cells) < MIN_ROW_CELLS:
            continue

        title_cell = cells[2]
        anchor = title_cell.find("a")
        subject_url = None
        subject = ""

        if anchor is not None:
            subject_url = absolute_url(anchor.get("href"), base_url)
            title_div = anchor.find("div")
            if title_div is not None:
                subject = clean_text(title_div.get("title"))
            subject = subject or clean_text(anchor.get_text())

        records.append(
            SummaryRecord(
                year=clean_text(cells[0].get_text()),
                serial=clean_text(cells[1].get_text()),
                category=clean_text(cells[3].get_text()),
                subject=subject or clean_text(title_cell.get_text()),
                subject_url=subject_url,
            )
        )

    return ListingPage(records=records, pagination=parse_pagination(soup))
