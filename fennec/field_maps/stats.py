"""Per-submission statistics (``/stats/<user>/submissions/``).

The statistics page is only offered for the logged-in user's own account.
"""

from __future__ import annotations

from fennec.common.field_map import (
    SELECTOR_VIEW,
    DualFieldMap,
    field_map,
    listing,
    pick_element_id,
    pick_image,
    pick_link,
    pluck,
    text,
    when,
)
from fennec.common.normalizers import parse_int

KEYWORD = field_map(value=text())

CLASSIC_STATISTIC = field_map(
    id=pick_element_id("-"),
    submission_title=text(f"td.stats-title {SELECTOR_VIEW}"),
    submission_url=pick_link(f"td.stats-title {SELECTOR_VIEW}"),
    thumb_url=pick_image(f"td.stats-thumb {SELECTOR_VIEW} > img"),
    when=when("span.popup_date"),
    views=text("td.views", parse_int),
    favorites=text("td.favorites", parse_int),
    comments=text("td.comments", parse_int),
    keywords=listing("td.stats-keywords > a", KEYWORD, pluck("value")),
)

BETA_STATISTIC = field_map(
    id=pick_element_id("-"),
    submission_title=text(f".stats-title {SELECTOR_VIEW}"),
    submission_url=pick_link(f".stats-title {SELECTOR_VIEW}"),
    thumb_url=pick_image(f".stats-thumb {SELECTOR_VIEW} > img"),
    when=when("span.popup_date"),
    views=text(".views span.font-large", parse_int),
    favorites=text(".favorites span.font-large", parse_int),
    comments=text(".comments span.font-large", parse_int),
    keywords=listing(".stats-keywords > a", KEYWORD, pluck("value")),
)

STATISTICS = DualFieldMap(
    classic=field_map(
        statistics=listing("table.stats-list tr.stats-submission[id*='sid-']", CLASSIC_STATISTIC)
    ),
    beta=field_map(
        statistics=listing("#stats-page section.stats-submission[id*='sid-']", BETA_STATISTIC)
    ),
)


def statistics_path(user_name: str, page: int | str = 1) -> str:
    return f"/stats/{user_name}/submissions/{page}/"
