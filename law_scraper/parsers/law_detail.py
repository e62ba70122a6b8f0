"""
KAA law detail page parser.

Detail pages are a two-column table of labelled rows (th = label,
td = value). Rows are dispatched on the normalized label; unknown
labels are ignored.
"""

from typing import Callable

from bs4 import BeautifulSoup, Tag

from law_scraper.core.exceptions import ParseError
from law_scraper.core.models import DetailRecord, Link
from law_scraper.core.normalizer import (
    absolute_url,
    canonical_date,
    clean_text,
    normalize_label,
    parse_law_year,
)

from .base import ParserStrategy

DETAIL_ROWS_SELECTOR = ".addtable table tr"

DEFAULT_ATTACHMENT_LABEL = "附件"


def extract_links(cell: Tag, base_url: str, default_label: str = "") -> list[Link]:
    """
    Collect anchors of a table cell as Links.

    Anchors without a usable href are skipped. An empty anchor text
    falls back to default_label, or to the URL itself when that is empty.
    """
    links = []
    for anchor in cell.find_all("a"):
        url = absolute_url(anchor.get("href"), base_url)
        if not url:
            continue
        label = clean_text(anchor.get_text()) or default_label or url
        links.append(Link(label=label, url=url))
    return links


def _set_law_year(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.law_year_label = text
    record.law_year = parse_law_year(text)


def _set_issuer(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.issuer = text


def _set_date(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.date = canonical_date(text) or text or None


def _set_document_number(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.document_number = text


def _set_article_number(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.article_number = text


def _set_subject(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.subject = text or record.subject


def _set_content(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.content = text


def _set_deadline(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    record.deadline = canonical_date(text) or text or None


def _set_attachments(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    attachments = extract_links(cell, base_url, DEFAULT_ATTACHMENT_LABEL)
    if attachments:
        record.attachments = attachments


def _set_related_links(record: DetailRecord, cell: Tag, text: str, base_url: str) -> None:
    links = extract_links(cell, base_url)
    if links:
        record.related_links = links


RowHandler = Callable[[DetailRecord, Tag, str, str], None]

# Normalized th label -> handler
ROW_HANDLERS: dict[str, RowHandler] = {
    "法規年度": _set_law_year,
    "發文單位": _set_issuer,
    "發文日期": _set_date,
    "發文字號": _set_document_number,
    "條文編號": _set_article_number,
    "條文主旨": _set_subject,
    "條文內容": _set_content,
    "截止日期": _set_deadline,
    "相關檔案": _set_attachments,
    "相關網址": _set_related_links,
}


class LawDetailParser(ParserStrategy):
    """
    Parser for KAA law detail pages.

    Extracts:
    - Law year, issuer, issue date, document and article numbers
    - Subject override and content
    - Attachments and related links
    """

    def parse(self, html: str, base_url: str) -> DetailRecord:
        """
        Parse detail page HTML into a DetailRecord.

        Raises:
            ParseError: If the page has no labelled rows
        """
        soup = BeautifulSoup(html, "lxml")
        rows = soup.select(DETAIL_ROWS_SELECTOR)
        if not rows:
            raise ParseError("Unable to parse detail page content.")

        record = DetailRecord.empty()

        for row in rows:
            header = row.find("th")
            cell = row.find("td")
            label = normalize_label(header.get_text()) if header else ""
            if not label or cell is None:
                continue

            handler = ROW_HANDLERS.get(label)
            if handler is None:
                continue

            handler(record, cell, clean_text(cell.get_text()), base_url)

        return record
