"""Classification of site responses into logical status codes.

The site often answers error conditions with an ordinary 200 page, so the
status line alone can't tell success from failure. A 200 body is matched
against an ordered table of known page fragments; the first fragment found
decides the logical status.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fennec.data_types import TransportResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SoftErrorRule:
    """A page fragment that marks a 200 response as an error.

    Attributes:
        fragment: Exact substring to look for in the body.
        status: Logical status the response classifies as.
    """

    fragment: str
    status: int


SOFT_ERROR_RULES: tuple[SoftErrorRule, ...] = (
    SoftErrorRule(
        "This user has voluntarily disabled access to their userpage.", 403
    ),
    SoftErrorRule(
        "The submission you are trying to find is not in our database.", 404
    ),
    SoftErrorRule(
        "The journal you are trying to find is not in our database.", 404
    ),
    SoftErrorRule("This user cannot be found.", 404),
    SoftErrorRule("was not found in our database", 404),
    SoftErrorRule("You must be logged in to view this page.", 401),
    SoftErrorRule("For more information please check the", 500),
    SoftErrorRule(
        "The server is currently having difficulty responding to all requests.",
        503,
    ),
)


def classify(
    response: TransportResponse,
    rules: Sequence[SoftErrorRule] = SOFT_ERROR_RULES,
) -> int:
    """Return the logical status of a response.

    Args:
        response: Raw transport response.
        rules: Ordered soft-error table; first match wins.

    Returns:
        The transport status when it isn't 200, the status of the first
        matching soft-error rule, or 200.
    """
    if response.status_code != 200:
        return response.status_code

    body = response.body or ""
    for rule in rules:
        if rule.fragment in body:
            logger.debug(
                f"Soft error page classified as {rule.status}",
                extra={"fragment": rule.fragment},
            )
            return rule.status

    return 200
