"""
Navigator strategies for record discovery.

Navigators handle the discovery phase - finding all listing rows
from a source's paginated index.

Strategies:
- ListingNavigator: index page 1..N -> summary records
"""

from .base import NavigatorStrategy, SourceConfig
from .listing import ListingNavigator, build_page_url

__all__ = [
    "NavigatorStrategy",
    "SourceConfig",
    "ListingNavigator",
    "build_page_url",
]
