"""Search results pages.

Search is a POST of the search form; the results page has no next link.
Instead a ``next_page`` submit button is present while more results exist.
"""

from __future__ import annotations

from functools import partial

from fennec.common.field_map import (
    SELECTOR_THUMB,
    SELECTOR_USER,
    SELECTOR_VIEW,
    DualFieldMap,
    ExtractionContext,
    derived,
    field_map,
    listing,
    pick_date_from_thumbnail,
    pick_element_id,
    pick_image,
    pick_link,
    text,
)
from fennec.common.page import HtmlNode
from fennec.data_types import FORM_URLENCODED, HttpMethod, RequestBody, RequestOptions

SEARCH_PATH = "/search/"

SEARCH_RESULT = field_map(
    id=pick_element_id("-"),
    self_link=pick_link(SELECTOR_VIEW),
    title=text(f"figcaption {SELECTOR_VIEW}"),
    artist_name=text(f"figcaption {SELECTOR_USER}"),
    thumb_url=pick_image(SELECTOR_THUMB),
    when=pick_date_from_thumbnail(SELECTOR_THUMB),
)


def exists(node: HtmlNode, context: ExtractionContext, selector: str) -> bool:
    return node.first(selector) is not None


NEXT_BUTTON = "button[type='submit'][name='next_page']"


def search_map(body: RequestBody) -> DualFieldMap:
    """Rules for a search results page, bound to the form body to POST."""
    return DualFieldMap(
        classic=field_map(
            submissions=listing("#gallery-search-results figure.t-image", SEARCH_RESULT),
            more=derived(partial(exists, selector=f"fieldset#search-results {NEXT_BUTTON}")),
        ),
        beta=field_map(
            submissions=listing("#gallery-search-results figure.t-image", SEARCH_RESULT),
            more=derived(partial(exists, selector=f"div#search-results {NEXT_BUTTON}")),
        ),
        request=RequestOptions(
            method=HttpMethod.POST, body=body, content_type=FORM_URLENCODED
        ),
    )
