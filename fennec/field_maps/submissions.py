"""Submission detail pages and the new-submissions inbox.

The detail page needs two derived fields. ``type`` is inferred from the
main content element: an audio player means music, a story or poetry file
means story, a flash ``<object>`` means flash, anything else with a source
is an image. ``content_url`` is then read from the element that actually
holds the file for that type, so a music page yields the audio source even
though it also shows a cover image.
"""

from __future__ import annotations

from functools import partial

from fennec.common.field_map import (
    SELECTOR_USER,
    SELECTOR_VIEW,
    DualFieldMap,
    ExtractionContext,
    attr,
    derived,
    field_map,
    fixed,
    inner_html,
    listing,
    pick_checkbox_value,
    pick_date_from_thumbnail,
    pick_image,
    pick_link,
    pluck,
    text,
    when,
)
from fennec.common.normalizers import fix_url, get_view_id
from fennec.common.page import HtmlNode
from fennec.field_maps.comments import beta_comments, classic_comments

SUBMISSION_IMAGE = "#submissionImg"
AUDIO_PLAYER = ".audio-player-container audio.audio-player"


def detect_submission_type(container: HtmlNode) -> str:
    """Classify a submission by the element holding its content."""
    if container.first(AUDIO_PLAYER) is not None:
        return "music"

    image = container.first(SUBMISSION_IMAGE)
    src = image.attr("src") if image is not None else None
    if src:
        if "/stories/" in src or "poetry" in src:
            return "story"
        if "/music/" in src:
            return "music"
        return "image"

    if container.first("object") is not None:
        return "flash"
    return "unknown"


def submission_type(container: HtmlNode, context: ExtractionContext) -> str:
    return detect_submission_type(container)


def content_url(
    container: HtmlNode, context: ExtractionContext, story_link: str
) -> str | None:
    """URL of the submitted file itself, by submission type."""
    match detect_submission_type(container):
        case "image":
            node, name = container.first(SUBMISSION_IMAGE), "data-fullview-src"
        case "story":
            node, name = container.first(story_link), "href"
        case "music":
            node, name = container.first(AUDIO_PLAYER), "src"
        case "flash":
            node, name = container.first("object"), "data"
        case _:
            return None

    if node is None:
        return None
    return fix_url(node.attr(name))


KEYWORD = field_map(value=text())
VIEW_LINK_ID = field_map(value=attr(None, "href", get_view_id))

CLASSIC_PAGE = "#page-submission"
CLASSIC_TITLE = f"{CLASSIC_PAGE} div.classic-submission-title.information"
CLASSIC_DESCRIPTION = (
    f"{CLASSIC_PAGE} > table > tbody > tr:nth-child(1) > td > table > tbody"
    " > tr:nth-child(2) > td > table > tbody > tr:nth-child(2) > td"
)
BETA_PAGE = "#submission_page"


def submission_map(submission_id: int, path: str) -> DualFieldMap:
    """Rules for ``/view/<id>/``."""
    return DualFieldMap(
        classic=field_map(
            id=fixed(submission_id),
            self_link=fixed(path),
            type=derived(submission_type, CLASSIC_PAGE),
            title=text(f"{CLASSIC_TITLE} > h2"),
            thumb_url=pick_image(SUBMISSION_IMAGE, "data-preview-src"),
            content_url=derived(
                partial(content_url, story_link="#text-container a[href*='/stories/']"),
                CLASSIC_PAGE,
            ),
            artist_name=text(f"{CLASSIC_TITLE} > {SELECTOR_USER}"),
            artist_url=pick_link(f"{CLASSIC_TITLE} > {SELECTOR_USER}"),
            artist_thumb_url=pick_image(
                f"{CLASSIC_PAGE} div.classic-submission-title.avatar {SELECTOR_USER} > img"
            ),
            body_text=text(CLASSIC_DESCRIPTION),
            body_html=inner_html(CLASSIC_DESCRIPTION),
            when=when(f"{CLASSIC_PAGE} td.stats-container span.popup_date"),
            keywords=listing(f"{CLASSIC_PAGE} #keywords > a", KEYWORD, pluck("value")),
            nav_items=listing(
                f"{CLASSIC_PAGE} div.minigallery-container {SELECTOR_VIEW}",
                VIEW_LINK_ID,
                pluck("value"),
                skip_missing=True,
            ),
            comments=classic_comments("#comments-submission"),
        ),
        beta=field_map(
            id=fixed(submission_id),
            self_link=fixed(path),
            type=derived(submission_type, BETA_PAGE),
            title=text(f"{BETA_PAGE} div.submission-title p"),
            thumb_url=pick_image(SUBMISSION_IMAGE, "data-preview-src"),
            content_url=derived(
                partial(content_url, story_link="#submission-content a[href*='/stories/']"),
                BETA_PAGE,
            ),
            artist_name=text(f"{BETA_PAGE} .submission-id-container {SELECTOR_USER}"),
            artist_url=pick_link(f"{BETA_PAGE} .submission-id-container {SELECTOR_USER}"),
            artist_thumb_url=pick_image(
                f"{BETA_PAGE} .submission-id-avatar {SELECTOR_USER} > img"
            ),
            body_text=text(f"{BETA_PAGE} div.submission-description"),
            body_html=inner_html(f"{BETA_PAGE} div.submission-description"),
            when=when(f"{BETA_PAGE} .submission-id-container span.popup_date"),
            keywords=listing(
                f"{BETA_PAGE} div.submission-sidebar section.tags-row > span.tags > a",
                KEYWORD,
                pluck("value"),
            ),
            nav_items=listing(
                f"{BETA_PAGE} section.minigallery-more div.preview-gallery {SELECTOR_VIEW}",
                VIEW_LINK_ID,
                pluck("value"),
                skip_missing=True,
            ),
            comments=beta_comments("#comments-submission"),
        ),
    )


# New-submission inbox tiles are keyed by their selection checkbox
CLASSIC_INBOX_TILE = field_map(
    id=pick_checkbox_value(),
    self_link=pick_link("b > u > a"),
    title=text("figcaption > label > p:nth-child(2) > a"),
    artist_name=text("figcaption > label > p:nth-child(3) > a"),
    thumb_url=pick_image("b > u > a > img"),
    when=pick_date_from_thumbnail("b > u > a > img"),
)

BETA_INBOX_TILE = field_map(
    id=pick_checkbox_value(),
    self_link=pick_link(SELECTOR_VIEW),
    title=text(f"figcaption label p {SELECTOR_VIEW}"),
    artist_name=text(f"figcaption label p {SELECTOR_USER}"),
    thumb_url=pick_image(f"{SELECTOR_VIEW} > img"),
    when=pick_date_from_thumbnail(f"{SELECTOR_VIEW} > img"),
)


def submissions_inbox_map(path: str) -> DualFieldMap:
    """Rules for one page of ``/msg/submissions/``."""
    classic_nav = "#messages-form .navigation a[class*='more']"
    beta_nav = "#messagecenter-new-submissions div > a[class*='more']"
    return DualFieldMap(
        classic=field_map(
            self_link=fixed(path),
            submissions=listing("figure.t-image", CLASSIC_INBOX_TILE),
            next_page=pick_link(f"{classic_nav}:not(.prev)"),
            previous_page=pick_link(f"{classic_nav}.prev"),
        ),
        beta=field_map(
            self_link=fixed(path),
            submissions=listing("#messagecenter-submissions figure.t-image", BETA_INBOX_TILE),
            next_page=pick_link(f"{beta_nav}:not(.prev)"),
            previous_page=pick_link(f"{beta_nav}.prev"),
        ),
    )
