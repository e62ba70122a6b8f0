"""
Data models for the law scraper.

Records flow through the pipeline as:
SummaryRecord (listing row) + DetailRecord (detail page) -> LawRecord
(serialized to the dataset file) -> EnrichedDocument (classified, view side).
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional


class DeadlineCategory(str, Enum):
    """Deadline urgency of a record."""
    DUE_SOON = "due-soon"
    ACTIVE = "active"
    EXPIRED = "expired"
    NO_DEADLINE = "no-deadline"  # Neither issue date nor deadline resolvable


class Region(str, Enum):
    """Coarse region tag inferred from issuer/subject text."""
    CENTRAL = "central"
    KAOHSIUNG = "kaohsiung"
    TAIPEI = "taipei"
    NEW_TAIPEI = "newTaipei"
    OTHER = "other"


@dataclass(frozen=True)
class Link:
    """Labelled link (attachment or related URL)."""
    label: str
    url: str

    def to_dict(self) -> dict:
        return {"label": self.label, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict) -> "Link":
        return cls(label=_as_text(data.get("label")), url=_as_text(data.get("url")))


@dataclass(frozen=True)
class SummaryRecord:
    """One row of the paginated listing, before detail enrichment."""
    year: str
    serial: str
    category: str
    subject: str
    subject_url: Optional[str] = None


@dataclass
class DetailRecord:
    """
    Fields parsed from one detail page.

    Every field is optional; None means the page had no such row.
    """
    issuer: Optional[str] = None
    date: Optional[str] = None  # Canonical YYYY-MM-DD, or raw text if unresolvable
    document_number: Optional[str] = None
    article_number: Optional[str] = None
    subject: Optional[str] = None
    content: Optional[str] = None
    law_year: Optional[int] = None
    law_year_label: Optional[str] = None
    deadline: Optional[str] = None
    attachments: list[Link] = field(default_factory=list)
    related_links: list[Link] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "DetailRecord":
        """Empty-but-valid stub used when a detail page is missing or broken."""
        return cls()


@dataclass(frozen=True)
class LawRecord:
    """
    Listing row merged with its detail page.

    This is the pre-classification record written to the dataset file.
    """
    year: str
    serial: str
    category: str
    subject: str
    subject_url: Optional[str] = None

    issuer: Optional[str] = None
    date: Optional[str] = None
    document_number: Optional[str] = None
    article_number: Optional[str] = None
    content: Optional[str] = None
    law_year: Optional[int] = None
    law_year_label: Optional[str] = None
    deadline: Optional[str] = None
    attachments: tuple[Link, ...] = ()
    related_links: tuple[Link, ...] = ()

    def to_dict(self) -> dict:
        """Convert to the camelCase dataset schema."""
        return {
            "year": self.year,
            "serial": self.serial,
            "category": self.category,
            "subject": self.subject,
            "subjectUrl": self.subject_url,
            "issuer": self.issuer,
            "date": self.date,
            "documentNumber": self.document_number,
            "articleNumber": self.article_number,
            "content": self.content,
            "lawYear": self.law_year,
            "lawYearLabel": self.law_year_label,
            "deadline": self.deadline,
            "attachments": [a.to_dict() for a in self.attachments],
            "relatedLinks": [r.to_dict() for r in self.related_links],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LawRecord":
        """Create from a dataset entry. Missing keys become None."""
        law_year = data.get("lawYear")
        return cls(
            year=_as_text(data.get("year")),
            serial=_as_text(data.get("serial")),
            category=_as_text(data.get("category")),
            subject=_as_text(data.get("subject")),
            subject_url=_as_optional_text(data.get("subjectUrl")),
            issuer=_as_optional_text(data.get("issuer")),
            date=_as_optional_text(data.get("date")),
            document_number=_as_optional_text(data.get("documentNumber")),
            article_number=_as_optional_text(data.get("articleNumber")),
            content=_as_optional_text(data.get("content")),
            law_year=_as_law_year(law_year),
            law_year_label=_as_optional_text(data.get("lawYearLabel")),
            deadline=_as_optional_text(data.get("deadline")),
            attachments=_as_links(data.get("attachments")),
            related_links=_as_links(data.get("relatedLinks")),
        )


def _as_text(value) -> str:
    return "" if value is None else str(value)


def _as_optional_text(value) -> Optional[str]:
    """Strings pass through, numbers become text, anything else is dropped."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _as_law_year(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def _as_links(items) -> tuple:
    if not isinstance(items, list):
        return ()
    return tuple(Link.from_dict(item) for item in items if isinstance(item, dict))


def merge_records(summary: SummaryRecord, detail: DetailRecord) -> LawRecord:
    """
    Merge a listing row with its detail page into a new LawRecord.

    Neither input is modified. The detail subject replaces the listing
    subject only when it is non-empty.
    """
    return LawRecord(
        year=summary.year,
        serial=summary.serial,
        category=summary.category,
        subject=detail.subject or summary.subject,
        subject_url=summary.subject_url,
        issuer=detail.issuer,
        date=detail.date,
        document_number=detail.document_number,
        article_number=detail.article_number,
        content=detail.content,
        law_year=detail.law_year,
        law_year_label=detail.law_year_label,
        deadline=detail.deadline,
        attachments=tuple(detail.attachments),
        related_links=tuple(detail.related_links),
    )


@dataclass(frozen=True)
class EnrichedDocument:
    """LawRecord plus fields derived during classification."""
    record: LawRecord
    issued_date: Optional[date]
    deadline_date: Optional[date]
    deadline_category: DeadlineCategory
    days_until_deadline: Optional[int] = None
    days_since_issued: Optional[int] = None
    region: Region = Region.OTHER


@dataclass
class Dataset:
    """Output of one crawl run and input of the view layer."""
    documents: list[LawRecord]
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    total_records: Optional[int] = None

    def __post_init__(self):
        if self.total_records is None:
            self.total_records = len(self.documents)

    def to_dict(self) -> dict:
        """Convert to the JSON hand-off schema."""
        return {
            "documents": [d.to_dict() for d in self.documents],
            "updatedAt": self.updated_at.isoformat(),
            "totalRecords": self.total_records,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Dataset":
        entries = data.get("documents")
        if not isinstance(entries, list):
            entries = []
        total = data.get("totalRecords")
        return cls(
            documents=[LawRecord.from_dict(d) for d in entries if isinstance(d, dict)],
            updated_at=_parse_timestamp(data.get("updatedAt")) or datetime.now(timezone.utc),
            total_records=total if isinstance(total, int) and not isinstance(total, bool) else None,
        )


def _parse_timestamp(value) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        # fromisoformat() before 3.11 rejects a trailing "Z"
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
