"""
View session: the mutable side of the viewer.

Holds the classified documents, the current FilterState and the
pagination. Every user event goes through one method here; filtering
and sorting stay in the pure functions of view.filters.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Union

import httpx
import structlog

from law_scraper.core.classifier import classify_documents
from law_scraper.core.exceptions import DatasetLoadError
from law_scraper.core.models import Dataset, DeadlineCategory, EnrichedDocument, Region
from law_scraper.core.normalizer import DEFAULT_TIMEZONE, today as calendar_today
from law_scraper.navigators.base import SourceConfig

from .filters import FilterState, SortMode, TimeRange, apply_filters
from .loader import load_dataset
from .pagination import PAGE_CHUNK, ViewPagination
from .presenters import LOAD_FAILED_MESSAGE, status_message

logger = structlog.get_logger(__name__)


class ViewSession:
    """
    Filter/sort/paginate session over one dataset.

    Usage:
        session = ViewSession()
        await session.load("docs/data/documents.json")
        session.set_search("建築")
        session.load_more()
        for doc in session.visible_documents:
            ...
    """

    def __init__(
        self,
        chunk_size: int = PAGE_CHUNK,
        timezone: str = DEFAULT_TIMEZONE,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize session.

        Args:
            chunk_size: Results revealed per load-more
            timezone: Zone whose calendar day drives urgency classification
            clock: Returns the reference day (defaults to today in timezone)
        """
        self.timezone = timezone
        self.clock = clock or (lambda: calendar_today(timezone))

        self.documents: list[EnrichedDocument] = []
        self.filtered: list[EnrichedDocument] = []
        self.filters = FilterState()
        self.pagination = ViewPagination(chunk_size=chunk_size, visible_count=chunk_size)

        self.total_records: Optional[int] = None
        self.updated_at: Optional[datetime] = None
        self.error: Optional[str] = None

    @classmethod
    def from_source(cls, source: SourceConfig, chunk_size: int = PAGE_CHUNK) -> "ViewSession":
        """Session classifying in the timezone of the configured source."""
        return cls(chunk_size=chunk_size, timezone=source.timezone)

    # Loading

    async def load(
        self,
        location: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> bool:
        """
        Load and classify a dataset.

        Returns:
            False when loading failed; error holds the message to show
        """
        try:
            dataset = await load_dataset(location, transport=transport)
        except DatasetLoadError as e:
            logger.error("view_load_failed", error=str(e))
            self.error = LOAD_FAILED_MESSAGE
            return False

        self.set_dataset(dataset)
        return True

    def set_dataset(self, dataset: Dataset) -> None:
        """Classify the dataset against the current day and render."""
        self.documents = classify_documents(dataset.documents, self.clock())
        self.total_records = dataset.total_records
        self.updated_at = dataset.updated_at
        self.error = None
        self.render()

    # Rendering

    def render(self, preserve_pagination: bool = False) -> list[EnrichedDocument]:
        """Recompute the filtered list and adjust pagination."""
        self.filtered = apply_filters(self.documents, self.filters)

        if preserve_pagination:
            self.pagination.preserve(len(self.filtered))
        else:
            self.pagination.reset()

        return self.visible_documents

    @property
    def visible_documents(self) -> list[EnrichedDocument]:
        return self.filtered[: self.pagination.visible_count]

    @property
    def has_more(self) -> bool:
        return self.pagination.has_more(len(self.filtered))

    @property
    def sentinel_hidden(self) -> bool:
        """The load-more sentinel is hidden when nothing remains to reveal."""
        return not self.filtered or not self.has_more

    @property
    def status(self) -> str:
        if self.error:
            return self.error
        return status_message(len(self.filtered), len(self.documents), self.total_records)

    def load_more(self) -> bool:
        """
        Reveal the next chunk (sentinel scrolled into view).

        Returns:
            False when there was nothing more to reveal
        """
        revealed = self.pagination.reveal_more(len(self.filtered))
        if revealed:
            logger.debug("load_more", visible=self.pagination.visible_count, total=len(self.filtered))
        return revealed

    on_sentinel_visible = load_more

    # Events

    def _apply(self, **changes) -> None:
        previous = self.filters
        self.filters = replace(previous, **changes)
        self.render(preserve_pagination=self.filters.same_predicate(previous))

    def set_search(self, text: str) -> None:
        self._apply(search=(text or "").strip())

    def clear_search(self) -> bool:
        """Escape key: clear a non-empty search."""
        if not self.filters.search:
            return False
        self._apply(search="")
        return True

    def set_sort(self, mode: Union[SortMode, str]) -> None:
        self._apply(sort=SortMode(mode))

    def set_region(self, region: Union[Region, str, None]) -> None:
        """Select a region; None or "all" shows every region."""
        self._apply(region=None if region in (None, "all") else Region(region))

    def set_time_range(self, time_range: Union[TimeRange, str]) -> None:
        self._apply(time_range=TimeRange(time_range))

    def toggle_simple_view(self) -> bool:
        self._apply(simple_view=not self.filters.simple_view)
        return self.filters.simple_view

    def toggle_status(self, category: Union[DeadlineCategory, str], checked: bool) -> bool:
        """
        Check or uncheck a status box.

        Unchecking the last checked status is rejected: the box stays
        checked and nothing is re-rendered.

        Returns:
            True if the change was applied
        """
        category = DeadlineCategory(category)
        statuses = set(self.filters.statuses)

        if checked:
            statuses.add(category)
        else:
            statuses.discard(category)
            if not statuses:
                logger.debug("last_status_kept", status=category.value)
                return False

        self._apply(statuses=frozenset(statuses))
        return True

    def reset(self) -> bool:
        """
        Restore default filters.

        Returns:
            False (no-op) when every control is already at its default
        """
        if self.filters.is_default():
            return False
        self.filters = FilterState()
        self.render()
        return True
