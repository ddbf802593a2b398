"""Parsed HTML wrapper used by the extractor.

HtmlNode wraps an lxml HtmlElement and exposes the handful of operations the
field maps need: CSS selection, text, inner HTML and attributes. CSS
selectors are compiled by lxml's cssselect integration. An empty match is a
normal result; an invalid selector raises FieldMapException.
"""

from __future__ import annotations

import logging
from xml.sax.saxutils import escape

from cssselect import SelectorError
from lxml import etree, html
from lxml.html import HtmlElement

from fennec.common.exceptions import FieldMapException
from fennec.common.normalizers import strip_xml_declaration

logger = logging.getLogger(__name__)


class HtmlNode:
    """Wrapper around HtmlElement with forgiving CSS queries.

    Attributes:
        _element: The wrapped lxml element.
        _url: URL of the page the element belongs to, for error context.
    """

    def __init__(self, element: HtmlElement, url: str = "") -> None:
        self._element = element
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    def css(self, selector: str) -> list[HtmlNode]:
        """Return every element matching a CSS selector, in document order.

        Args:
            selector: CSS selector, evaluated relative to this element.

        Returns:
            Matching nodes; empty when nothing matches.

        Raises:
            FieldMapException: If the selector can't be compiled.
        """
        try:
            results = self._element.cssselect(selector)
        except SelectorError as e:
            raise FieldMapException(
                f"Invalid CSS selector: {e}",
                selector=selector,
                request_url=self._url,
            ) from e
        return [HtmlNode(result, self._url) for result in results]

    def first(self, selector: str) -> HtmlNode | None:
        """Return the first element matching ``selector``, or None."""
        matches = self.css(selector)
        return matches[0] if matches else None

    def text(self) -> str:
        """Visible text of the element and its descendants, trimmed."""
        return self._element.text_content().strip()

    def inner_html(self) -> str:
        """Serialized children of the element, including leading text."""
        elem = self._element
        leading = escape(elem.text) if elem.text else ""
        inner = "".join(
            html.tostring(child, encoding="unicode") for child in elem
        )
        return (leading + inner).strip()

    def attr(self, name: str) -> str | None:
        """Value of an attribute, or None if it doesn't exist."""
        return self._element.get(name)

    @property
    def tag(self) -> str:
        tag = self._element.tag
        # Comments and processing instructions have a callable tag
        return tag.lower() if isinstance(tag, str) else ""

    def children(self) -> list[HtmlNode]:
        """Element children, skipping comments."""
        return [
            HtmlNode(child, self._url)
            for child in self._element
            if isinstance(child, HtmlElement)
        ]

    def tail_text(self) -> str | None:
        """Text directly following this element inside its parent, trimmed."""
        tail = self._element.tail
        return tail.strip() if tail is not None else None

    def __repr__(self) -> str:
        return f"<HtmlNode {self.tag} {self._url!r}>"


def parse_page(body: str, url: str = "") -> HtmlNode:
    """Parse a full HTML document.

    Args:
        body: Response text.
        url: The URL the body was fetched from.

    Returns:
        HtmlNode wrapping the document's ``<html>`` element. A blank body
        produces an empty document, so every field resolves as absent.
    """
    try:
        doc = html.document_fromstring(strip_xml_declaration(body))
    except etree.ParserError:
        logger.debug(f"Empty document from {url}")
        doc = html.document_fromstring("<html><body></body></html>")
    return HtmlNode(doc, url)
