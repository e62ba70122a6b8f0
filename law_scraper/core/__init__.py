"""
Core layer - stable foundation for the scraping system.

Components:
- models: SummaryRecord, DetailRecord, LawRecord, EnrichedDocument, Dataset
- http_client: Retrying HTTP client with browser headers
- normalizer: Text cleanup, URL resolution, Gregorian/ROC date parsing
- classifier: Deadline urgency and region inference
- exceptions: Crawl and view error types
"""

from .models import (
    Link,
    SummaryRecord,
    DetailRecord,
    LawRecord,
    EnrichedDocument,
    Dataset,
    DeadlineCategory,
    Region,
    merge_records,
)
from .normalizer import (
    clean_text,
    normalize_label,
    absolute_url,
    resolve_date,
    canonical_date,
    today,
)
from .classifier import (
    categorize_deadline,
    detect_region,
    classify_document,
    classify_documents,
)
from .exceptions import (
    ScraperError,
    ParseError,
    PageUnavailableError,
    DatasetLoadError,
)

__all__ = [
    "Link",
    "SummaryRecord",
    "DetailRecord",
    "LawRecord",
    "EnrichedDocument",
    "Dataset",
    "DeadlineCategory",
    "Region",
    "merge_records",
    "clean_text",
    "normalize_label",
    "absolute_url",
    "resolve_date",
    "canonical_date",
    "today",
    "categorize_deadline",
    "detect_region",
    "classify_document",
    "classify_documents",
    "ScraperError",
    "ParseError",
    "PageUnavailableError",
    "DatasetLoadError",
]
