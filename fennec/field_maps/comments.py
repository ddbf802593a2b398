"""Comment threads shared by submission and journal pages, plus reply pages.

Both page kinds render comments with the same markup, so the rules are built
once per container selector.
"""

from __future__ import annotations

from fennec.common.field_map import (
    SELECTOR_USER,
    DualFieldMap,
    ListField,
    field_map,
    fixed,
    inner_html,
    listing,
    pick_element_id,
    pick_image,
    pick_link,
    pick_timestamp,
    text,
    when,
)

CLASSIC_COMMENT = field_map(
    id=pick_element_id(":"),
    self_link=pick_link("a.comment-link"),
    user_name=text("tbody > tr:nth-child(1) > td:nth-child(3) > div > ul > li > b"),
    user_url=pick_link(
        "tbody > tr:nth-child(1) > td:nth-child(3) > div > ul > li > ul > li:nth-child(1) > a"
    ),
    user_thumb_url=pick_image("img.avatar"),
    body_text=text("div.message-text"),
    body_html=inner_html("div.message-text"),
    timestamp=pick_timestamp(),
    when=when("tbody > tr:nth-child(2) > th:nth-child(2) > h4 > span"),
)

BETA_COMMENT = field_map(
    id=pick_element_id(":", "a.comment_anchor"),
    self_link=pick_link("a.comment-link"),
    user_name=text("strong.comment_username > h3"),
    user_url=pick_link(f".avatar-desktop > {SELECTOR_USER}"),
    user_thumb_url=pick_image(
        f".avatar-desktop > {SELECTOR_USER} > img.comment_useravatar"
    ),
    body_text=text("div.comment_text"),
    body_html=inner_html("div.comment_text"),
    timestamp=pick_timestamp(),
    when=when(".comment-date span.popup_date"),
)


def classic_comments(container: str) -> ListField:
    return listing(f"{container} table.container-comment", CLASSIC_COMMENT)


def beta_comments(container: str) -> ListField:
    return listing(f"{container} div.comment_container", BETA_COMMENT)


CLASSIC_REPLY_CELL = (
    "#pageid-reply-to > div:nth-child(6) > form > table > tbody > tr > td"
    " > table:nth-child(1) > tbody > tr:nth-child(2) > td"
)
BETA_REPLY_CELL = (
    "#site-content > form > table > tbody > tr > td"
    " > table:nth-child(1) > tbody > tr:nth-child(2) > td"
)


def comment_text_map(comment_id: int) -> DualFieldMap:
    """Rules for the quoted comment on a ``/replyto/`` page."""
    return DualFieldMap(
        classic=field_map(
            id=fixed(comment_id),
            body_text=text(CLASSIC_REPLY_CELL),
            body_html=inner_html(CLASSIC_REPLY_CELL),
        ),
        beta=field_map(
            id=fixed(comment_id),
            body_text=text(BETA_REPLY_CELL),
            body_html=inner_html(BETA_REPLY_CELL),
        ),
    )
