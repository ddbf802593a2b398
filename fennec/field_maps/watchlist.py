"""Watch lists: the users someone watches, and the users watching them.

Watch list pages render identically under both themes, so one FieldMap
serves both halves of the dual map.
"""

from __future__ import annotations

from functools import partial
from typing import Literal

from fennec.common.field_map import (
    DualFieldMap,
    derived,
    field_map,
    fixed,
    listing,
    pick_link,
    text,
)
from fennec.common.normalizers import strip_tilde
from fennec.field_maps.gallery import form_action_for_button

WatchDirection = Literal["by", "to"]

WATCHED_USER = field_map(
    user_name=text(None, strip_tilde),
    user_url=pick_link(None),
)


def watchlist_path(direction: WatchDirection, user_name: str, page: int | str = 1) -> str:
    """``/watchlist/by/<user>/`` lists who the user watches, ``to`` their watchers."""
    base = f"/watchlist/{direction}/{user_name}/"
    return base if str(page) == "1" else f"{base}{page}/"


def watchlist_map(path: str, user_name: str) -> DualFieldMap:
    shared = field_map(
        self_link=fixed(path),
        user_name=fixed(user_name),
        users=listing('div.watch-list-items > a[href*="/user/"]', WATCHED_USER),
        next_page=derived(partial(form_action_for_button, label="Next")),
        previous_page=derived(partial(form_action_for_button, label="Back")),
    )
    return DualFieldMap(classic=shared, beta=shared)
