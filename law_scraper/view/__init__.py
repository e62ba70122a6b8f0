"""
View layer - filter, sort and incremental pagination over a dataset.

Components:
- filters: FilterState and the pure apply_filters / sort_documents
- pagination: ViewPagination (chunked reveal)
- session: ViewSession, the event boundary that owns mutable state
- loader: Dataset loading from disk or HTTP
- presenters: Text rendering of documents and status lines
"""

from .filters import (
    FilterState,
    SortMode,
    TimeRange,
    apply_filters,
    sort_documents,
    collation_key,
)
from .pagination import PAGE_CHUNK, ViewPagination
from .session import ViewSession
from .loader import load_dataset

__all__ = [
    "FilterState",
    "SortMode",
    "TimeRange",
    "apply_filters",
    "sort_documents",
    "collation_key",
    "PAGE_CHUNK",
    "ViewPagination",
    "ViewSession",
    "load_dataset",
]
