"""Journal detail pages and a user's journal list."""

from __future__ import annotations

from fennec.common.field_map import (
    SELECTOR_JOURNAL,
    SELECTOR_USER,
    DualFieldMap,
    field_map,
    fixed,
    inner_html,
    listing,
    pick_element_id,
    pick_image,
    pick_link,
    pick_regex,
    text,
    when,
)
from fennec.common.normalizers import PARENS_RE, parse_int, strip_tilde
from fennec.field_maps.comments import beta_comments, classic_comments

CLASSIC_JOURNAL_ENTRY = field_map(
    id=pick_element_id(":"),
    self_link=pick_link(SELECTOR_JOURNAL),
    title=text(f"tbody > tr > td > div.no_overflow {SELECTOR_JOURNAL}"),
    body_text=text("tbody > tr > td > div.no_overflow.alt1"),
    body_html=inner_html("tbody > tr > td > div.no_overflow.alt1"),
    when=when("td > span.popup_date"),
    comment_count=pick_regex(
        PARENS_RE, f'{SELECTOR_JOURNAL}:contains("Comments")', as_number=True
    ),
)

BETA_JOURNAL_ENTRY = field_map(
    id=pick_element_id(":"),
    self_link=pick_link(SELECTOR_JOURNAL),
    title=text(".section-header h2"),
    body_text=text(".section-body div.journal-body"),
    body_html=inner_html(".section-body div.journal-body"),
    when=when(".section-header span.popup_date"),
    comment_count=text(f"{SELECTOR_JOURNAL} > span.font-large", parse_int),
)


def journals_map(path: str, user_name: str) -> DualFieldMap:
    """Rules for one page of ``/journals/<user>/``."""
    return DualFieldMap(
        classic=field_map(
            self_link=fixed(path),
            user_name=fixed(user_name),
            journals=listing(
                "table.page-journals-list table.maintable[id*='jid:']",
                CLASSIC_JOURNAL_ENTRY,
            ),
            next_page=pick_link("a.button-link.right"),
            previous_page=pick_link("a.button-link.left"),
        ),
        beta=field_map(
            self_link=fixed(path),
            user_name=fixed(user_name),
            journals=listing(
                "#columnpage .content section[id*='jid:']", BETA_JOURNAL_ENTRY
            ),
            next_page=pick_link(".pagination a.button.right"),
            previous_page=pick_link(".pagination a.button.left"),
        ),
    )


CLASSIC_JOURNAL_HEADER = "#page-journal td.journal-title-box"


def journal_map(journal_id: int, path: str) -> DualFieldMap:
    """Rules for ``/journal/<id>/``."""
    return DualFieldMap(
        classic=field_map(
            id=fixed(journal_id),
            self_link=fixed(path),
            title=text(f"{CLASSIC_JOURNAL_HEADER} > b > font > div"),
            user_name=text(f"{CLASSIC_JOURNAL_HEADER} {SELECTOR_USER}"),
            user_url=pick_link(f"{CLASSIC_JOURNAL_HEADER} {SELECTOR_USER}"),
            user_thumb_url=pick_image(
                f"#page-journal td.avatar-box {SELECTOR_USER} > img"
            ),
            body_text=text("div.journal-body"),
            body_html=inner_html("div.journal-body"),
            when=when(f"{CLASSIC_JOURNAL_HEADER} span.popup_date"),
            comments=classic_comments("#page-comments"),
        ),
        beta=field_map(
            id=fixed(journal_id),
            self_link=fixed(path),
            title=text(".content .section-header h2.journal-title"),
            user_name=text("#user-profile .username h2 span", strip_tilde),
            user_url=pick_link(f"#user-profile {SELECTOR_USER}.current"),
            user_thumb_url=pick_image(f"#user-profile {SELECTOR_USER}.current > img"),
            body_text=text(".content .journal-item div.journal-content"),
            body_html=inner_html(".content .journal-item div.journal-content"),
            when=when(".content .section-header span.popup_date"),
            comments=beta_comments("#comments-journal"),
        ),
    )
