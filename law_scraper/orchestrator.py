"""
Master orchestrator for the law scraping pipeline.

Coordinates:
- Source configuration loading
- Listing discovery
- Concurrent detail enrichment
- Dataset output
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import httpx
import structlog

from .core.models import Dataset
from .core.http_client import HttpClient
from .config.loader import load_source
from .enricher import DetailEnricher
from .navigators.base import SourceConfig
from .navigators.listing import ListingNavigator
from .parsers.law_detail import LawDetailParser

logger = structlog.get_logger(__name__)

DEFAULT_OUTPUT_PATH = "docs/data/documents.json"


class MasterScraper:
    """
    Master orchestrator for the scraping pipeline.

    Coordinates discovery, enrichment and output.
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        output_path: str = DEFAULT_OUTPUT_PATH,
        source: Optional[SourceConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize master scraper.

        Args:
            config_path: Path to a source YAML file
            output_path: Dataset file to write
            source: Ready-made source config (skips YAML loading)
            transport: Custom httpx transport (tests)
        """
        self.config_path = config_path
        self.output_path = Path(output_path)
        self.source = source
        self.transport = transport

        # Statistics
        self.stats = {
            "pages_skipped": 0,
            "records_discovered": 0,
            "records_enriched": 0,
            "detail_failures": 0,
        }

    async def run(
        self,
        max_pages: Optional[int] = None,
        concurrency: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> Dataset:
        """
        Run the scraping pipeline.

        Args:
            max_pages: Listing page cap (None = source setting)
            concurrency: Detail worker count (None = source setting)
            delay: Per-worker delay in seconds (None = source setting)

        Returns:
            Dataset with merged records
        """
        source = self.source or load_source(self.config_path)

        logger.info(
            "starting_scrape",
            source=source.source_id,
            source_name=source.source_name,
            max_pages=max_pages if max_pages is not None else source.max_pages,
        )

        http_client = HttpClient(referer=source.request_referer, transport=self.transport)

        async with http_client:
            navigator = ListingNavigator(http_client=http_client)
            summaries = await navigator.discover(source, max_pages)
            self.stats["records_discovered"] = len(summaries)
            self.stats["pages_skipped"] = len(navigator.skipped_pages)

            parser = LawDetailParser(http_client=http_client)
            logger.info(
                "fetching_details",
                source=source.source_id,
                navigator=navigator.get_strategy_name(),
                parser=parser.get_strategy_name(),
                records=len(summaries),
            )

            enricher = DetailEnricher(parser, source, concurrency=concurrency, delay=delay)
            documents = await enricher.enrich_all(summaries)
            self.stats["records_enriched"] = len(documents)
            self.stats["detail_failures"] = enricher.failures

        dataset = Dataset(
            documents=documents,
            updated_at=datetime.now(timezone.utc),
            total_records=navigator.total_records,
        )

        logger.info("scrape_complete", **self.stats)

        return dataset

    def save_json(self, dataset: Dataset, path: Optional[str] = None) -> str:
        """
        Save dataset to JSON file.

        Args:
            dataset: Dataset to save
            path: Optional path (defaults to output_path)

        Returns:
            Path to saved file
        """
        filepath = Path(path) if path else self.output_path
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(dataset.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info("saved_json", path=str(filepath), records=len(dataset.documents))
        return str(filepath)


async def run_scraper(
    config_path: Optional[str] = None,
    output_path: str = DEFAULT_OUTPUT_PATH,
    max_pages: Optional[int] = None,
    concurrency: Optional[int] = None,
    delay: Optional[float] = None,
) -> Dataset:
    """
    Convenience function to crawl and write the dataset.

    Args:
        config_path: Path to a source YAML file
        output_path: Dataset file to write
        max_pages: Listing page cap
        concurrency: Detail worker count
        delay: Per-worker delay in seconds

    Returns:
        Dataset that was written
    """
    scraper = MasterScraper(config_path=config_path, output_path=output_path)
    dataset = await scraper.run(max_pages=max_pages, concurrency=concurrency, delay=delay)
    scraper.save_json(dataset)
    return dataset
