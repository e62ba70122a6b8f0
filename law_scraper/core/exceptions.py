"""Exception hierarchy for crawl and view failures."""


class ScraperError(Exception):
    """Base class for law scraper errors."""


class ParseError(ScraperError):
    """Expected page structure was not found."""


class PageUnavailableError(ScraperError):
    """A listing page could not be fetched or parsed."""

    def __init__(self, page: int, url: str, reason: str):
        super().__init__(f"Page {page} unavailable ({url}): {reason}")
        self.page = page
        self.url = url
        self.reason = reason


class DatasetLoadError(ScraperError):
    """The dataset file could not be loaded by the view layer."""
