"""The "other messages" notification center (``/msg/others/``).

Every notification row carries a selection checkbox whose value is the
notification id.
"""

from __future__ import annotations

from fennec.common.field_map import (
    SELECTOR_JOURNAL,
    SELECTOR_USER,
    SELECTOR_VIEW,
    Converter,
    DualFieldMap,
    FieldMap,
    attr,
    field_map,
    listing,
    pick_checkbox_value,
    pick_image,
    pick_link,
    text,
    when,
)
from fennec.common.normalizers import (
    get_journal_id,
    get_view_id,
    strip_quotes,
    strip_tilde,
)

MESSAGES_PATH = "/msg/others/"

CLASSIC_ROW = "li:not(.section-controls)"
BETA_STREAM = "ul.message-stream > li"


def _submission_message(
    date: str, user_name: str = SELECTOR_USER, title: Converter | None = None
) -> FieldMap:
    return field_map(
        id=pick_checkbox_value(),
        submission_id=attr(SELECTOR_VIEW, "href", get_view_id),
        submission_title=text(SELECTOR_VIEW, title),
        submission_url=pick_link(SELECTOR_VIEW),
        user_name=text(user_name),
        user_url=pick_link(SELECTOR_USER),
        when=when(date),
    )


def _journal_comment_message(date: str) -> FieldMap:
    return field_map(
        id=pick_checkbox_value(),
        title=text(SELECTOR_JOURNAL),
        url=pick_link(SELECTOR_JOURNAL),
        journal_id=attr(SELECTOR_JOURNAL, "href", get_journal_id),
        user_name=text(SELECTOR_USER),
        user_url=pick_link(SELECTOR_USER),
        when=when(date),
    )


def _shout_message(date: str) -> FieldMap:
    return field_map(
        id=pick_checkbox_value(),
        user_name=text(SELECTOR_USER),
        user_url=pick_link(SELECTOR_USER),
        when=when(date),
    )


def _journal_message(date: str, user_name: str = SELECTOR_USER) -> FieldMap:
    return field_map(
        id=pick_checkbox_value(),
        journal_title=text(SELECTOR_JOURNAL),
        journal_url=pick_link(SELECTOR_JOURNAL),
        user_name=text(user_name),
        user_url=pick_link(SELECTOR_USER),
        when=when(date),
    )


MESSAGES = DualFieldMap(
    classic=field_map(
        my_username=text("a#my-username", strip_tilde),
        watches=listing(
            f"ul#watches > {CLASSIC_ROW}",
            field_map(
                id=pick_checkbox_value(),
                user_name=text("div > span"),
                user_url=pick_link(),
                user_thumb_url=pick_image(),
                when=when("div > small > span"),
            ),
        ),
        comments=listing(f"ul#comments > {CLASSIC_ROW}", _submission_message("span")),
        journal_comments=listing(
            f"fieldset#messages-comments-journal > ul.message-stream > {CLASSIC_ROW}",
            _journal_comment_message("span"),
        ),
        shouts=listing(
            f"fieldset#messages-shouts > ul.message-stream > {CLASSIC_ROW}",
            _shout_message("span"),
        ),
        favorites=listing(f"ul#favorites > {CLASSIC_ROW}", _submission_message("span")),
        journals=listing(f"ul#journals > {CLASSIC_ROW}", _journal_message("span")),
    ),
    beta=field_map(
        my_username=text(
            f".mobile-navigation article.mobile-menu h2 > {SELECTOR_USER}", strip_tilde
        ),
        watches=listing(
            f"#messages-watches {BETA_STREAM}",
            field_map(
                id=pick_checkbox_value(),
                user_name=text("div.info > span:nth-child(1)"),
                user_url=pick_link(SELECTOR_USER),
                user_thumb_url=pick_image("img.avatar"),
                when=when("div.info span.popup_date"),
            ),
        ),
        comments=listing(
            f"#messages-comments-submission {BETA_STREAM}",
            _submission_message("span.popup_date"),
        ),
        journal_comments=listing(
            f"#messages-comments-journal {BETA_STREAM}",
            _journal_comment_message("span.popup_date"),
        ),
        shouts=listing(
            f"#messages-shouts {BETA_STREAM}", _shout_message("span.popup_date")
        ),
        favorites=listing(
            f"#messages-favorites {BETA_STREAM}",
            # Favorite notifications quote the submission title
            _submission_message(
                "span.popup_date", f"{SELECTOR_USER} > strong", strip_quotes
            ),
        ),
        journals=listing(
            f"#messages-journals {BETA_STREAM}",
            _journal_message("span.popup_date", f"{SELECTOR_USER} > strong"),
        ),
    ),
)
