"""Private notes: the inbox listing and single notes."""

from __future__ import annotations

from functools import partial

from fennec.common.field_map import (
    SELECTOR_USER,
    DualFieldMap,
    ExtractionContext,
    derived,
    field_map,
    fixed,
    inner_html,
    listing,
    pick_checkbox_value,
    pick_link,
    text,
    when,
)
from fennec.common.page import HtmlNode

NOTES_PATH = "/msg/pms/"


def has_class(
    node: HtmlNode, context: ExtractionContext, selector: str, name: str
) -> bool:
    """Whether the element at ``selector`` carries CSS class ``name``."""
    target = node.first(selector)
    if target is None:
        return False
    return name in (target.attr("class") or "").split()


NOTES = DualFieldMap(
    classic=field_map(
        notes=listing(
            "#notes-list > tbody > tr.note",
            field_map(
                id=pick_checkbox_value(),
                self_link=pick_link("td.subject > a"),
                title=text("td.subject > a"),
                user_name=text("td.col-from > a"),
                user_url=pick_link("td.col-from > a"),
                unread=derived(partial(has_class, selector="td.subject > a", name="unread")),
                when=when("td:nth-child(3) > span"),
            ),
        )
    ),
    beta=field_map(
        notes=listing(
            "#notes-list > div.message-center-pms-note-list-view",
            field_map(
                id=pick_checkbox_value(),
                self_link=pick_link('a[href*="/msg/pms/"]'),
                title=text("div.note-list-subject"),
                user_name=text(f".note-list-sender {SELECTOR_USER}"),
                user_url=pick_link(f".note-list-sender {SELECTOR_USER}"),
                unread=derived(
                    partial(has_class, selector="div.note-list-subject", name="unread")
                ),
                when=when(".note-list-senddate span.popup_date"),
            ),
        )
    ),
)


CLASSIC_NOTE = "#pms-form > table.maintable > tbody"
CLASSIC_NOTE_SENDER = f"{CLASSIC_NOTE} > tr:nth-child(2) > td > font > a:nth-child(1)"
BETA_NOTE_SENDER = f"#message .addresses > {SELECTOR_USER}:nth-child(2)"


def note_map(note_id: int, path: str) -> DualFieldMap:
    """Rules for ``/viewmessage/<id>/``."""
    return DualFieldMap(
        classic=field_map(
            id=fixed(note_id),
            self_link=fixed(path),
            title=text(f"{CLASSIC_NOTE} > tr > td > font > b"),
            user_name=text(CLASSIC_NOTE_SENDER),
            user_url=pick_link(CLASSIC_NOTE_SENDER),
            body_text=text(f"{CLASSIC_NOTE} > tr:nth-child(2) > td"),
            body_html=inner_html(f"{CLASSIC_NOTE} > tr:nth-child(2) > td"),
            when=when(f"{CLASSIC_NOTE} > tr:nth-child(2) > td span.popup_date"),
        ),
        beta=field_map(
            id=fixed(note_id),
            self_link=fixed(path),
            title=text("#message .addresses h2"),
            user_name=text(f"{BETA_NOTE_SENDER} > strong"),
            user_url=pick_link(BETA_NOTE_SENDER),
            body_text=text("#message .section-body div.user-submitted-links"),
            body_html=inner_html("#message .section-body div.user-submitted-links"),
            when=when("#message .addresses span.popup_date"),
        ),
    )
