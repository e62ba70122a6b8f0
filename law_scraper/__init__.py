"""
Law Scraper - KAA regulatory notice crawler and viewer.

Architecture:
- core/: Stable foundation (models, HTTP client, normalizers, classifier)
- navigators/: Discovery of listing rows across paginated index pages
- parsers/: Extraction of listing tables and detail pages
- view/: Filter, sort and incremental pagination over a loaded dataset
- config/: YAML-driven source definition
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
