"""
Detail enrichment with a fixed pool of concurrent workers.

Workers share a single index cursor over the summary list and write
into their own slot of a pre-sized result list, so output order always
matches input order. A failing detail page degrades to an empty stub.
"""

import asyncio
import itertools
from typing import Optional

import structlog

from .core.models import DetailRecord, LawRecord, SummaryRecord, merge_records
from .navigators.base import SourceConfig
from .parsers.base import ParserStrategy

logger = structlog.get_logger(__name__)

PROGRESS_LOG_INTERVAL = 100


class DetailEnricher:
    """
    Enrich summary records with their detail pages.

    Usage:
        enricher = DetailEnricher(parser, source, concurrency=2, delay=0.2)
        records = await enricher.enrich_all(summaries)
    """

    def __init__(
        self,
        parser: ParserStrategy,
        source: SourceConfig,
        concurrency: Optional[int] = None,
        delay: Optional[float] = None,
    ):
        """
        Initialize enricher.

        Args:
            parser: Detail parser with an open HTTP client
            source: Source configuration
            concurrency: Worker count (defaults to source.detail_concurrency)
            delay: Seconds each worker sleeps after a record (defaults to source.detail_delay)
        """
        self.parser = parser
        self.source = source
        self.concurrency = max(1, concurrency if concurrency is not None else source.detail_concurrency)
        self.delay = max(0.0, delay if delay is not None else source.detail_delay)
        self.failures = 0

    async def enrich_all(self, summaries: list[SummaryRecord]) -> list[LawRecord]:
        """
        Fetch and merge detail pages for every summary.

        Args:
            summaries: Listing rows in order

        Returns:
            List where results[i] is summaries[i] merged with its detail
        """
        total = len(summaries)
        results: list[Optional[LawRecord]] = [None] * total
        cursor = itertools.count()
        self.failures = 0

        worker_count = min(self.concurrency, total)
        logger.info("enrichment_started", records=total, workers=worker_count, delay=self.delay)

        await asyncio.gather(
            *(self._worker(worker_id, summaries, results, cursor) for worker_id in range(worker_count))
        )

        logger.info("enrichment_complete", records=total, failures=self.failures)
        return results

    async def _worker(
        self,
        worker_id: int,
        summaries: list[SummaryRecord],
        results: list[Optional[LawRecord]],
        cursor: "itertools.count[int]",
    ) -> None:
        """Claim indexes from the shared cursor until it passes the end."""
        total = len(summaries)

        while True:
            # next() runs without an await in between, so no index is claimed twice
            index = next(cursor)
            if index >= total:
                break

            summary = summaries[index]
            detail = await self._fetch_detail(summary, worker_id)
            results[index] = merge_records(summary, detail)

            if (index + 1) % PROGRESS_LOG_INTERVAL == 0:
                logger.info("enrichment_progress", processed=index + 1, total=total)

            if self.delay > 0:
                await asyncio.sleep(self.delay)

    async def _fetch_detail(self, summary: SummaryRecord, worker_id: int) -> DetailRecord:
        """Extract one detail page, substituting the empty stub on failure."""
        try:
            return await self.parser.extract(summary, self.source)
        except Exception as e:
            self.failures += 1
            logger.warning(
                "detail_failed",
                url=summary.subject_url,
                worker=worker_id,
                error=str(e),
            )
            return DetailRecord.empty()


async def enrich_all(
    summaries: list[SummaryRecord],
    parser: ParserStrategy,
    source: SourceConfig,
    concurrency: Optional[int] = None,
    delay: Optional[float] = None,
) -> list[LawRecord]:
    """
    Convenience function to enrich summaries with one call.

    Args:
        summaries: Listing rows in order
        parser: Detail parser with an open HTTP client
        source: Source configuration
        concurrency: Worker count
        delay: Per-worker delay in seconds

    Returns:
        Order-preserving list of merged records
    """
    enricher = DetailEnricher(parser, source, concurrency=concurrency, delay=delay)
    return await enricher.enrich_all(summaries)
