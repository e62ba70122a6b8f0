"""
Filtering and sorting over classified documents.

FilterState is immutable; apply_filters() is a pure function of the
documents and the state, so the same inputs always give the same view.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from law_scraper.core.models import DeadlineCategory, EnrichedDocument, Region


class SortMode(str, Enum):
    """Result ordering."""
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    SERIAL_ASC = "serial-asc"
    SERIAL_DESC = "serial-desc"


class TimeRange(str, Enum):
    """Issued-within bucket."""
    THREE_MONTHS = "3m"
    ONE_YEAR = "1y"
    OVER_ONE_YEAR = "gt1y"
    ALL = "all"


DEFAULT_STATUSES = frozenset(DeadlineCategory)

THREE_MONTHS_DAYS = 90
ONE_YEAR_DAYS = 365


@dataclass(frozen=True)
class FilterState:
    """
    View controls.

    region None means all regions. statuses always holds at least one
    category; the session enforces that when toggling.
    """
    search: str = ""
    sort: SortMode = SortMode.DATE_DESC
    statuses: frozenset = DEFAULT_STATUSES
    region: Optional[Region] = None
    time_range: TimeRange = TimeRange.THREE_MONTHS
    simple_view: bool = False

    def is_default(self) -> bool:
        return self == FilterState()

    def same_predicate(self, other: "FilterState") -> bool:
        """True when both states select the same documents (ordering and display aside)."""
        return (
            self.search == other.search
            and self.statuses == other.statuses
            and self.region == other.region
            and self.time_range == other.time_range
        )


def searchable_fields(doc: EnrichedDocument) -> list[str]:
    """Lower-cased text fields matched by free-text search."""
    record = doc.record
    fields = [
        record.subject,
        record.subject_url,
        record.category,
        record.issuer,
        record.document_number,
        record.article_number,
        record.serial,
        record.content,
        record.date,
        record.deadline,
    ]
    for link in (*record.attachments, *record.related_links):
        fields.append(link.label)
        fields.append(link.url)
    return [value.casefold() for value in fields if value]


def matches_search(doc: EnrichedDocument, query: str) -> bool:
    """Case-insensitive substring match on any searchable field."""
    needle = query.strip().casefold()
    if not needle:
        return True
    return any(needle in value for value in searchable_fields(doc))


def matches_time_range(doc: EnrichedDocument, time_range: TimeRange) -> bool:
    """
    Check the issued-within bucket.

    Documents without days_since_issued only pass TimeRange.ALL.
    """
    if time_range == TimeRange.ALL:
        return True
    if doc.days_since_issued is None:
        return False
    if time_range == TimeRange.THREE_MONTHS:
        return doc.days_since_issued <= THREE_MONTHS_DAYS
    if time_range == TimeRange.ONE_YEAR:
        return doc.days_since_issued <= ONE_YEAR_DAYS
    return doc.days_since_issued > ONE_YEAR_DAYS


_DIGIT_RUNS = re.compile(r"(\d+)")


def collation_key(value: Optional[str]) -> tuple:
    """
    Numeric-aware, case- and accent-insensitive sort key.

    Digit runs compare as integers, so "第2條" sorts before "第10條".
    Full-width digits are folded to ASCII first.

    Non-digit text compares by code point. CJK characters are not put
    in zh-Hant (stroke or bopomofo) collation order, so serials that
    differ only in their Chinese text can sort differently from a
    locale-aware browser collator. "乙" (U+4E59) sorts before "甲"
    (U+7532) here, for example.
    """
    text = unicodedata.normalize("NFKD", value or "")
    text = "".join(ch for ch in text if not unicodedata.combining(ch)).casefold()
    # split() with a capture group alternates text / digits, so positions line up
    parts = _DIGIT_RUNS.split(text)
    return tuple(int(part) if i % 2 else part for i, part in enumerate(parts))


def serial_value(doc: EnrichedDocument) -> str:
    """Article number when present, else the listing serial."""
    record = doc.record
    if record.article_number is not None:
        return record.article_number
    return record.serial or ""


def sort_documents(documents: list[EnrichedDocument], mode: SortMode) -> list[EnrichedDocument]:
    """
    Return a sorted copy.

    All modes are stable. Date modes put undated documents last in
    both directions.
    """
    if mode in (SortMode.SERIAL_ASC, SortMode.SERIAL_DESC):
        return sorted(
            documents,
            key=lambda doc: collation_key(serial_value(doc)),
            reverse=mode == SortMode.SERIAL_DESC,
        )

    dated = [doc for doc in documents if doc.issued_date is not None]
    undated = [doc for doc in documents if doc.issued_date is None]
    dated.sort(key=lambda doc: doc.issued_date, reverse=mode != SortMode.DATE_ASC)
    return dated + undated


def apply_filters(documents: list[EnrichedDocument], state: FilterState) -> list[EnrichedDocument]:
    """
    Filter and sort documents for display.

    Predicates are conjunctive; each is a no-op at its default
    "don't filter" value.
    """
    results = documents

    if state.search.strip():
        results = [doc for doc in results if matches_search(doc, state.search)]

    if state.statuses:
        results = [doc for doc in results if doc.deadline_category in state.statuses]

    if state.region is not None:
        results = [doc for doc in results if doc.region == state.region]

    if state.time_range != TimeRange.ALL:
        results = [doc for doc in results if matches_time_range(doc, state.time_range)]

    return sort_documents(results, state.sort)
