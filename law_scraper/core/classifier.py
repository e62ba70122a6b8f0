"""
Record classification: deadline urgency and region inference.

Region rules are ordered data evaluated first-match-wins, so each table
can be tested on its own.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import structlog

from .models import DeadlineCategory, EnrichedDocument, LawRecord, Region
from .normalizer import resolve_date

logger = structlog.get_logger(__name__)


DEADLINE_SOON_DAYS = 7
RECENT_ISSUED_DAYS = 14
ACTIVE_ISSUED_DAYS = 90

LAW_COMMITTEE = "法規研究委員會"
WORK_REPORT = "座談會工作報告"
SCIENCE_PARK_AUTHORITY = "科學園區管理局"

# (region, keywords) - checked in order against issuer, then subject
REGION_RULES: list[tuple[Region, tuple[str, ...]]] = [
    (
        Region.CENTRAL,
        (
            "內政部",
            "國土管理署",
            "行政院",
            "經濟部",
            "中央",
            "中華民國全國建築師公會",
            "環境部",
        ),
    ),
    (Region.KAOHSIUNG, ("高雄",)),
    (Region.TAIPEI, ("臺北", "台北")),
    (Region.NEW_TAIPEI, ("新北",)),
]

CITY_OR_COUNTY_KEYWORDS: tuple[str, ...] = (
    "臺北市", "台北市", "新北市", "高雄市", "臺中市", "台中市",
    "臺南市", "台南市", "基隆市", "桃園市", "新竹市", "嘉義市",
    "新竹縣", "苗栗縣", "彰化縣", "南投縣", "雲林縣", "嘉義縣",
    "屏東縣", "宜蘭縣", "花蓮縣", "臺東縣", "台東縣", "澎湖縣",
    "金門縣", "連江縣",
)

# Predicate over (issuer, subject)
RegionPredicate = Callable[[str, str], bool]

# Evaluated before the generic REGION_RULES table
SPECIAL_REGION_RULES: list[tuple[RegionPredicate, Region]] = [
    (
        lambda issuer, subject: LAW_COMMITTEE in subject and WORK_REPORT in subject,
        Region.KAOHSIUNG,
    ),
    (
        lambda issuer, subject: LAW_COMMITTEE in issuer or LAW_COMMITTEE in subject,
        Region.KAOHSIUNG,
    ),
    (
        lambda issuer, subject: SCIENCE_PARK_AUTHORITY in issuer
        or SCIENCE_PARK_AUTHORITY in subject,
        Region.CENTRAL,
    ),
]


@dataclass(frozen=True)
class DeadlineTiming:
    """Result of deadline categorization."""
    category: DeadlineCategory
    days_until_deadline: Optional[int] = None
    days_since_issued: Optional[int] = None


def categorize_deadline(
    today: date,
    issued_date: Optional[date],
    deadline_date: Optional[date],
) -> DeadlineTiming:
    """
    Categorize urgency from the deadline, falling back to the issue date.

    Args:
        today: Reference calendar day
        issued_date: Issue date, if known
        deadline_date: Deadline, if known

    Returns:
        DeadlineTiming with exactly one day count set when a date exists
    """
    if deadline_date is not None:
        diff = (deadline_date - today).days
        if diff < 0:
            category = DeadlineCategory.EXPIRED
        elif diff <= DEADLINE_SOON_DAYS:
            category = DeadlineCategory.DUE_SOON
        else:
            category = DeadlineCategory.ACTIVE
        return DeadlineTiming(category=category, days_until_deadline=diff)

    if issued_date is not None:
        diff = max((today - issued_date).days, 0)
        if diff <= RECENT_ISSUED_DAYS:
            category = DeadlineCategory.DUE_SOON
        elif diff <= ACTIVE_ISSUED_DAYS:
            category = DeadlineCategory.ACTIVE
        else:
            category = DeadlineCategory.EXPIRED
        return DeadlineTiming(category=category, days_since_issued=diff)

    return DeadlineTiming(category=DeadlineCategory.NO_DEADLINE)


def match_region_rules(text: str) -> Optional[Region]:
    """Return the first REGION_RULES region with a keyword in text."""
    if not text:
        return None
    for region, keywords in REGION_RULES:
        if any(keyword in text for keyword in keywords):
            return region
    return None


def has_city_or_county(text: str) -> bool:
    return any(keyword in text for keyword in CITY_OR_COUNTY_KEYWORDS)


def detect_region(issuer: Optional[str], subject: Optional[str]) -> Region:
    """
    Infer the region of a record from issuer and subject text.

    Order: special committee/science-park rules, issuer keywords,
    subject keywords (only when issuer is empty), then central when no
    city or county is named at all, otherwise other.
    """
    issuer = (issuer or "").strip()
    subject = (subject or "").strip()

    for predicate, region in SPECIAL_REGION_RULES:
        if predicate(issuer, subject):
            return region

    region = match_region_rules(issuer)
    if region:
        return region

    if not issuer:
        region = match_region_rules(subject)
        if region:
            return region

    if not has_city_or_county(issuer) and not has_city_or_county(subject):
        return Region.CENTRAL

    return Region.OTHER


def classify_document(record: LawRecord, today: date) -> EnrichedDocument:
    """Derive dates, urgency and region for one record."""
    issued_date = resolve_date(record.date)
    deadline_date = resolve_date(record.deadline)
    timing = categorize_deadline(today, issued_date, deadline_date)

    return EnrichedDocument(
        record=record,
        issued_date=issued_date,
        deadline_date=deadline_date,
        deadline_category=timing.category,
        days_until_deadline=timing.days_until_deadline,
        days_since_issued=timing.days_since_issued,
        region=detect_region(record.issuer, record.subject),
    )


def classify_documents(records: list[LawRecord], today: date) -> list[EnrichedDocument]:
    """Classify a dataset against a single reference day."""
    documents = [classify_document(record, today) for record in records]
    logger.debug("documents_classified", count=len(documents), today=today.isoformat())
    return documents
