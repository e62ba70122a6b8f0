"""
Dataset loading for the view layer.

The dataset is read either from a local file or over HTTP with a
cache-busting request. Any failure is terminal for that load and is
raised as DatasetLoadError; there is no automatic retry.
"""

import json
import time
from pathlib import Path
from typing import Optional

import httpx
import structlog

from law_scraper.core.exceptions import DatasetLoadError
from law_scraper.core.http_client import HttpClient
from law_scraper.core.models import Dataset

logger = structlog.get_logger(__name__)


def is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


async def fetch_payload(location: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> dict:
    """Fetch the dataset JSON over HTTP, bypassing caches."""
    async with HttpClient(transport=transport) as client:
        response = await client.get(
            location,
            params={"_": str(int(time.time() * 1000))},
            headers={"Cache-Control": "no-cache", "Pragma": "no-cache"},
        )
        return response.json()


def read_payload(location: str) -> dict:
    """Read the dataset JSON from disk."""
    with open(Path(location), "r", encoding="utf-8") as f:
        return json.load(f)


async def load_dataset(
    location: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dataset:
    """
    Load a dataset file.

    Args:
        location: Local path or http(s) URL
        transport: Custom httpx transport (tests)

    Returns:
        Dataset

    Raises:
        DatasetLoadError: Fetch, read, or decode failure
    """
    logger.info("loading_dataset", location=location)

    try:
        if is_remote(location):
            payload = await fetch_payload(location, transport)
        else:
            payload = read_payload(location)
        if not isinstance(payload, dict):
            raise ValueError("Dataset root must be an object")
        dataset = Dataset.from_dict(payload)
    except (httpx.HTTPError, OSError, ValueError, TypeError, AttributeError) as e:
        logger.error("dataset_load_failed", location=location, error=str(e))
        raise DatasetLoadError(f"Unable to load dataset from {location}: {e}") from e

    logger.info(
        "dataset_loaded",
        documents=len(dataset.documents),
        total_records=dataset.total_records,
        updated_at=dataset.updated_at.isoformat(),
    )
    return dataset
