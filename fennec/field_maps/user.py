"""User profile pages.

A profile has several optional panels (featured submission, top journal,
profile picture). Each is a nested record that resolves to None when the
user hasn't set it up.

The classic theme lays the profile out in nested tables, so its selectors
are long positional chains.
"""

from __future__ import annotations

from fennec.common.field_map import (
    SELECTOR_JOURNAL,
    SELECTOR_USER,
    SELECTOR_VIEW,
    DualFieldMap,
    ExtractionContext,
    ListField,
    attr,
    derived,
    field_map,
    fixed,
    inner_html,
    listing,
    nested,
    pick_date_from_thumbnail,
    pick_element_id,
    pick_image,
    pick_link,
    pick_regex,
    text,
    when,
)
from fennec.common.normalizers import (
    COLON_POST_RE,
    COLON_PRE_RE,
    PARENS_NUMBER_RE,
    PARENS_RE,
    get_journal_id,
    get_view_id,
    strip_tilde,
)
from fennec.common.page import HtmlNode


def classic_contact_value(item: HtmlNode, context: ExtractionContext) -> str | None:
    # Either "<strong>Service:</strong> <a>value</a>" or "<strong>..</strong> value"
    children = item.children()
    if len(children) > 1:
        return children[1].text()
    if children:
        return children[0].tail_text()
    return None


def beta_contact_value(item: HtmlNode, context: ExtractionContext) -> str | None:
    children = item.children()
    if len(children) > 2:
        return children[2].text()
    if len(children) > 1:
        return children[1].tail_text()
    if children:
        return children[0].tail_text()
    return None


def gallery_strip(selector: str, thumb: str, date_thumb: str) -> ListField:
    return listing(
        f"{selector} figure[id*='sid-']",
        field_map(
            id=pick_element_id("-"),
            self_link=pick_link(SELECTOR_VIEW),
            thumb_url=pick_image(thumb),
            when=pick_date_from_thumbnail(date_thumb),
        ),
    )


CLASSIC_PROFILE_ROW = (
    "#page-userpage > tbody > tr:nth-child(1) > td > table > tbody > tr > td"
    " > table > tbody > tr > td > table > tbody"
)
CLASSIC_HEADER = f"{CLASSIC_PROFILE_ROW} > tr:nth-child(3) > td.alt1 > table > tbody > tr > td:nth-child(1)"
CLASSIC_STATISTICS = (
    f"{CLASSIC_PROFILE_ROW} > tr:nth-child(3) > td.alt1 > table > tbody > tr"
    " > td:nth-child(2) > table > tbody > tr:nth-child(2) > td"
)
CLASSIC_USER_CLASS = f"{CLASSIC_PROFILE_ROW} > tr:nth-child(2) > td.lead"
CLASSIC_TOP_JOURNAL = (
    "#page-userpage > tbody > tr:nth-child(2) > td:nth-child(2) > table:nth-child(1)"
)

BETA_FEATURED = "section.userpage-left-column:nth-child(1) div.section-body"
BETA_TOP_JOURNAL = "section.userpage-right-column:nth-child(2)"
BETA_PROFILE_ID = "section.userpage-right-column:nth-child(3) .section-submission"
BETA_USERNAME = "#user-profile .user-profile-main .username h2 span"
BETA_HEADER = "#page-userpage .userpage-layout-profile-container div.userpage-profile"
BETA_STATISTICS = "section.userpage-right-column:nth-child(1) div.section-body div.table"

CLASSIC_USER = field_map(
    user_name=text("#page-userpage table.maintable > tbody tr td.lead b", strip_tilde),
    user_class=pick_regex(PARENS_RE, CLASSIC_USER_CLASS),
    user_thumb_url=pick_image(f"#page-userpage {SELECTOR_USER} > img.avatar"),
    header_text=text(CLASSIC_HEADER),
    header_html=inner_html(CLASSIC_HEADER),
    statistics_text=text(CLASSIC_STATISTICS),
    statistics_html=inner_html(CLASSIC_STATISTICS),
    featured_submission=nested(
        field_map(
            id=pick_element_id("_", "#featured-submission b"),
            self_link=pick_link(f"#featured-submission {SELECTOR_VIEW}"),
            title=text("#featured-submission b > span"),
            thumb_url=pick_image(f"#featured-submission {SELECTOR_VIEW} > img"),
        )
    ),
    latest_submissions=gallery_strip(
        "#gallery-latest-submissions", f"{SELECTOR_VIEW} img", f"{SELECTOR_VIEW} img"
    ),
    favorites=gallery_strip(
        "#gallery-latest-favorites", f"{SELECTOR_VIEW} img", f"{SELECTOR_VIEW} img"
    ),
    top_journal=nested(
        field_map(
            id=attr(f"{CLASSIC_TOP_JOURNAL} b > {SELECTOR_JOURNAL}", "href", get_journal_id),
            self_link=pick_link(f"{CLASSIC_TOP_JOURNAL} b > {SELECTOR_JOURNAL}"),
            title=text(f"{CLASSIC_TOP_JOURNAL} b > {SELECTOR_JOURNAL}"),
            body_text=text(f"{CLASSIC_TOP_JOURNAL} .journal-body"),
            body_html=inner_html(f"{CLASSIC_TOP_JOURNAL} .journal-body"),
            when=when(f"{CLASSIC_TOP_JOURNAL} td > span.popup_date"),
            comment_count=pick_regex(
                PARENS_RE,
                f'{CLASSIC_TOP_JOURNAL} {SELECTOR_JOURNAL}:contains("Comments")',
                as_number=True,
            ),
        )
    ),
    profile_id=nested(
        field_map(
            id=attr(f"#profilepic-submission {SELECTOR_VIEW}", "href", get_view_id),
            self_link=pick_link(f"#profilepic-submission {SELECTOR_VIEW}"),
            thumb_url=pick_image(f"#profilepic-submission {SELECTOR_VIEW} > img"),
            when=pick_date_from_thumbnail(f"#profilepic-submission {SELECTOR_VIEW} > img"),
        )
    ),
    artist_information=listing(
        "table > tbody > tr > td.user-info div.user-info-item",
        field_map(title=text("strong"), value=pick_regex(COLON_POST_RE)),
    ),
    contact_information=listing(
        "table > tbody > tr > td.user-contacts .classic-contact-info-item",
        field_map(
            service=pick_regex(COLON_PRE_RE, ".contact-service-name > strong"),
            link=pick_link(),
            value=derived(classic_contact_value),
        ),
    ),
    shouts=listing(
        "table[id*='shout-']",
        field_map(
            id=pick_element_id("-"),
            user_name=text(f".from-header > {SELECTOR_USER}"),
            user_url=pick_link(f".from-header > {SELECTOR_USER}"),
            user_thumb_url=pick_image(f"{SELECTOR_USER} > img.avatar"),
            body_text=text("div.no_overflow"),
            body_html=inner_html("div.no_overflow"),
            when=when("td > span.popup_date"),
        ),
    ),
)

BETA_USER = field_map(
    user_name=text(BETA_USERNAME, strip_tilde),
    user_class=pick_regex(COLON_POST_RE, BETA_USERNAME, "title"),
    user_thumb_url=pick_image("#user-profile img.user-nav-avatar"),
    header_text=text(BETA_HEADER),
    header_html=inner_html(BETA_HEADER),
    statistics_text=text(BETA_STATISTICS),
    statistics_html=inner_html(BETA_STATISTICS),
    featured_submission=nested(
        field_map(
            id=attr(f"{BETA_FEATURED} {SELECTOR_VIEW}", "href", get_view_id),
            self_link=pick_link(f"{BETA_FEATURED} {SELECTOR_VIEW}"),
            title=text(f"{BETA_FEATURED} div.userpage-featured-title {SELECTOR_VIEW}"),
            thumb_url=pick_image(f"{BETA_FEATURED} {SELECTOR_VIEW} > img"),
        )
    ),
    latest_submissions=gallery_strip(
        "#gallery-latest-submissions", f"{SELECTOR_VIEW} img", f"{SELECTOR_VIEW} > img"
    ),
    favorites=gallery_strip(
        "#gallery-latest-favorites", f"{SELECTOR_VIEW} img", f"{SELECTOR_VIEW} > img"
    ),
    top_journal=nested(
        field_map(
            id=attr(f"{BETA_TOP_JOURNAL} {SELECTOR_JOURNAL}", "href", get_journal_id),
            self_link=pick_link(f"{BETA_TOP_JOURNAL} {SELECTOR_JOURNAL}"),
            title=text(f"{BETA_TOP_JOURNAL} .section-body > h2"),
            body_text=text(f"{BETA_TOP_JOURNAL} .section-body > div.user-submitted-links"),
            body_html=inner_html(
                f"{BETA_TOP_JOURNAL} .section-body > div.user-submitted-links"
            ),
            when=when(f"{BETA_TOP_JOURNAL} .section-body span.popup_date"),
            comment_count=pick_regex(
                PARENS_NUMBER_RE,
                f"{BETA_TOP_JOURNAL} {SELECTOR_JOURNAL} span",
                as_number=True,
            ),
        )
    ),
    profile_id=nested(
        field_map(
            id=attr(f"{BETA_PROFILE_ID} {SELECTOR_VIEW}", "href", get_view_id),
            self_link=pick_link(f"{BETA_PROFILE_ID} {SELECTOR_VIEW}"),
            thumb_url=pick_image(f"{BETA_PROFILE_ID} {SELECTOR_VIEW} > img"),
            when=pick_date_from_thumbnail(f"{BETA_PROFILE_ID} {SELECTOR_VIEW} > img"),
        )
    ),
    artist_information=listing(
        "#userpage-contact-item div.table-row",
        field_map(title=text("strong"), value=derived(beta_contact_value)),
    ),
    contact_information=listing(
        "#userpage-contact div.user-contact-item div.user-contact-user-info",
        field_map(
            service=text("strong"),
            link=pick_link(),
            value=derived(beta_contact_value),
        ),
    ),
    shouts=listing(
        "#page-userpage section.userpage-right-column:nth-child(4) .comment_container",
        field_map(
            id=pick_element_id("-", "a[id*='shout-'].comment_anchor"),
            user_name=text(f".comment_username {SELECTOR_USER} h3"),
            user_url=pick_link(f".comment_username {SELECTOR_USER}"),
            user_thumb_url=pick_image("img.comment_useravatar"),
            body_text=text(".shout-base .comment_text"),
            body_html=inner_html(".shout-base .comment_text"),
            when=when(".shout-date > span.popup_date"),
        ),
    ),
)


def user_page_map(path: str) -> DualFieldMap:
    """Rules for ``/user/<name>/``."""
    return DualFieldMap(
        classic=field_map(self_link=fixed(path), **CLASSIC_USER.fields),
        beta=field_map(self_link=fixed(path), **BETA_USER.fields),
    )
