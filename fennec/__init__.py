"""Screen-scraping client for FurAffinity.

This package turns the site's HTML pages into typed records. Every page kind
is described by a pair of declarative field maps, one for the "classic" theme
and one for the "beta" theme; the theme is detected on each fetched page.

The public entry point is :class:`fennec.client.FennecClient`.
"""

from fennec.client import FennecClient
from fennec.common.exceptions import (
    DataFormatAssumptionException,
    FieldMapException,
    SiteError,
)
from fennec.config import ClientConfig
from fennec.data_types import NoteFolder, PageTheme

__all__ = [
    "ClientConfig",
    "DataFormatAssumptionException",
    "FennecClient",
    "FieldMapException",
    "NoteFolder",
    "PageTheme",
    "SiteError",
]
