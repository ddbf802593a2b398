"""Theme detection for fetched pages."""

from __future__ import annotations

import logging

from fennec.common.page import HtmlNode
from fennec.data_types import PageTheme

logger = logging.getLogger(__name__)

THEME_MARKER_ATTRIBUTE = "data-static-path"
BETA_STATIC_PATH = "/themes/beta"


def detect_theme(page: HtmlNode) -> PageTheme:
    """Determine which theme a page was rendered with.

    The beta theme serves its static assets from ``/themes/beta`` and
    advertises that path on ``<body>``. A missing or different marker means
    the classic theme.

    Args:
        page: The parsed document.

    Returns:
        PageTheme.BETA or PageTheme.CLASSIC.
    """
    body = page.first("body")
    static_path = body.attr(THEME_MARKER_ATTRIBUTE) if body is not None else None
    theme = (
        PageTheme.BETA if static_path == BETA_STATIC_PATH else PageTheme.CLASSIC
    )
    logger.debug(f"Detected {theme.value} theme at {page.url}")
    return theme
