"""
Normalization utilities for KAA law notice data.

Handles:
- Whitespace and label cleanup of text extracted from HTML
- Relative to absolute URL conversion
- Dates in Gregorian and ROC (Minguo) year numbering
"""

import re
from datetime import date, datetime
from typing import Optional
from urllib.parse import urljoin
from zoneinfo import ZoneInfo

import structlog

logger = structlog.get_logger(__name__)


# ROC year 1 is Gregorian 1912
ROC_YEAR_OFFSET = 1911

# Leading numbers at or above this are already Gregorian years
GREGORIAN_YEAR_THRESHOLD = 1900

DEFAULT_TIMEZONE = "Asia/Taipei"


def clean_text(value: Optional[str]) -> str:
    """
    Collapse runs of whitespace and strip the ends.

    Args:
        value: Raw text (None is treated as empty)

    Returns:
        Cleaned text
    """
    if not value:
        return ""
    return re.sub(r"\s+", " ", value).strip()


def normalize_label(value: Optional[str]) -> str:
    """Clean a table header label and drop ASCII/full-width colons."""
    return re.sub(r"[:：]", "", clean_text(value))


def absolute_url(value: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve a possibly relative href against base_url.

    Returns None for empty hrefs and for hrefs that are not http(s) or
    relative paths (javascript:, mailto:, ...).
    """
    href = clean_text(value)
    if not href:
        return None

    try:
        resolved = urljoin(base_url, href)
    except ValueError:
        logger.debug("invalid_href", href=href)
        return None

    if not resolved.startswith(("http://", "https://")):
        return None
    return resolved


def to_gregorian_year(value: int) -> int:
    """Convert an ROC year to Gregorian, leaving Gregorian years untouched."""
    if value >= GREGORIAN_YEAR_THRESHOLD:
        return value
    return value + ROC_YEAR_OFFSET


def resolve_date(raw: Optional[str]) -> Optional[date]:
    """
    Parse a loosely formatted date into a calendar date.

    Supported formats (anything with up to three digit groups):
    - "2024-05-01", "2024/5/1"
    - "113/5/1", "113.05.01" (ROC years)
    - "中華民國113年5月1日"
    - "113" (month and day default to 1)

    Args:
        raw: Date string

    Returns:
        date or None if no year is present or the date is invalid
    """
    parts = re.findall(r"\d+", clean_text(raw))
    if not parts:
        return None

    year = to_gregorian_year(int(parts[0]))
    month = int(parts[1]) if len(parts) > 1 else 1
    day = int(parts[2]) if len(parts) > 2 else 1

    try:
        return date(year, month, day)
    except (ValueError, OverflowError):
        logger.debug("invalid_date", text=raw)
        return None


def canonical_date(raw: Optional[str]) -> Optional[str]:
    """Resolve a date and format it as YYYY-MM-DD."""
    resolved = resolve_date(raw)
    return resolved.isoformat() if resolved else None


def today(tz: str = DEFAULT_TIMEZONE) -> date:
    """Current calendar day in the given timezone."""
    return datetime.now(ZoneInfo(tz)).date()


def parse_law_year(label: Optional[str]) -> Optional[int]:
    """Extract the numeric law year from a label like "113年度"."""
    digits = re.sub(r"[^\d]", "", label or "")
    if not digits:
        return None
    return int(digits) or None
