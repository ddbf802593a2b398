"""Gallery, scraps and favorites listing pages.

The three listings share tile markup. They differ only in how the beta
theme links to the next page: the gallery uses small forms whose submit
button reads "Next"/"Prev", the other two use plain pagination links.
"""

from __future__ import annotations

from functools import partial
from typing import Literal

from fennec.common.field_map import (
    SELECTOR_USER,
    SELECTOR_VIEW,
    DualFieldMap,
    ExtractionContext,
    Field,
    derived,
    field_map,
    fixed,
    listing,
    pick,
    pick_date_from_thumbnail,
    pick_element_id,
    pick_image,
    pick_link,
    text,
)
from fennec.common.normalizers import fix_url
from fennec.common.page import HtmlNode

GalleryKind = Literal["gallery", "scraps", "favorites"]

GALLERY_TILES = "section.gallery figure[id*='sid-']"

CLASSIC_GALLERY_TILE = field_map(
    id=pick_element_id("-"),
    self_link=pick_link("b > u > a"),
    title=pick("figcaption > p:nth-child(1) > a", "title"),
    artist_name=pick("figcaption > p:nth-child(2) > a", "title"),
    thumb_url=pick_image("b > u > a > img"),
    when=pick_date_from_thumbnail("b > u > a > img"),
)

BETA_GALLERY_TILE = field_map(
    id=pick_element_id("-"),
    self_link=pick_link(SELECTOR_VIEW),
    title=text(f"figcaption p:nth-child(1) {SELECTOR_VIEW}"),
    artist_name=text(f"figcaption p:nth-child(2) {SELECTOR_USER}"),
    thumb_url=pick_image(f"{SELECTOR_VIEW} > img"),
    when=pick_date_from_thumbnail(f"{SELECTOR_VIEW} > img"),
)


def form_action_for_button(
    page: HtmlNode, context: ExtractionContext, label: str
) -> str | None:
    """Action of the first form with a direct ``<button>`` child reading ``label``."""
    for form in page.css("form"):
        for child in form.children():
            if child.tag == "button" and label in child.text():
                return fix_url(form.attr("action"))
    return None


def beta_page_link(kind: GalleryKind, direction: Literal["next", "previous"]) -> Field:
    if kind == "gallery":
        label = "Next" if direction == "next" else "Prev"
        return derived(partial(form_action_for_button, label=label))
    side = "right" if direction == "next" else "left"
    return pick_link(f".pagination a.button.{side}")


def gallery_map(path: str, kind: GalleryKind) -> DualFieldMap:
    """Rules for one page of a user's gallery, scraps or favorites."""
    return DualFieldMap(
        classic=field_map(
            self_link=fixed(path),
            submissions=listing(GALLERY_TILES, CLASSIC_GALLERY_TILE),
            next_page=pick_link("a.button-link.right"),
            previous_page=pick_link("a.button-link.left"),
        ),
        beta=field_map(
            self_link=fixed(path),
            submissions=listing(GALLERY_TILES, BETA_GALLERY_TILE),
            next_page=beta_page_link(kind, "next"),
            previous_page=beta_page_link(kind, "previous"),
        ),
    )
