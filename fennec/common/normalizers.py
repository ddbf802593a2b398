"""Converters from raw scraped strings to typed values.

Every function here is pure and total: malformed or missing input yields
None instead of raising, because an absent or mangled field on the site is
an expected condition rather than an error.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from lxml import etree, html

VIEW_PATH_RE = re.compile(r"/view/(\d+)")
JOURNAL_PATH_RE = re.compile(r"/journal/(\d+)")
THUMBNAIL_RE = re.compile(
    r"^(?:https?:)?//t\.(?:facdn|furaffinity)\.net/(\d+)@(\d+)-(\d+)"
)
PARENS_RE = re.compile(r"\((\S*?)\)")
PARENS_NUMBER_RE = re.compile(r"\((\d+).*\)")
COLON_POST_RE = re.compile(r": (.*?)$")
COLON_PRE_RE = re.compile(r"^(.*?):$")
XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")

_ORDINAL_RE = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)\b")

# Tried in order until one parses:
#   Sep 27th, 2021 06:16 AM   (standard)
#   Sep 27th, 2021, 06:16 AM  (beta note)
#   Sep 27, 2021 06:16AM      (beta note list)
DATE_FORMATS = (
    "%b %d, %Y %I:%M %p",
    "%b %d, %Y, %I:%M %p",
    "%b %d, %Y %I:%M%p",
)

# Markup dropped before rendering an error page as plain text.
NOISE_TAGS = ("script", "style", "noscript", "template")
NOISE_SELECTORS = ("#ddmenu", "nav", "footer", ".footer", ".mobile-navigation")


def fix_url(value: str | None) -> str | None:
    """Rewrite a protocol-relative URL to explicit HTTPS.

    Any other value, including relative paths and absolute URLs, passes
    through unchanged, so the function is idempotent.

    Examples:
        >>> fix_url("//t.furaffinity.net/1@200-2.jpg")
        'https://t.furaffinity.net/1@200-2.jpg'
        >>> fix_url("/user/foo/")
        '/user/foo/'
    """
    if not value:
        return value
    if value.startswith("//"):
        return f"https:{value}"
    return value


def parse_int(value: str | int | None) -> int | None:
    """Parse a base-10 integer, tolerating surrounding whitespace."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    value = value.strip()
    if not re.fullmatch(r"[+-]?\d+", value):
        return None
    return int(value)


def _path_id(regex: re.Pattern[str], value: str | None) -> int | None:
    if not value:
        return None
    match = regex.search(value)
    if match is None:
        return None
    return int(match.group(1))


def get_view_id(value: str | None) -> int | None:
    """Extract the submission id from a ``/view/<id>/`` link."""
    return _path_id(VIEW_PATH_RE, value)


def get_journal_id(value: str | None) -> int | None:
    """Extract the journal id from a ``/journal/<id>/`` link."""
    return _path_id(JOURNAL_PATH_RE, value)


def split_id(value: str | None, separator: str) -> int | None:
    """Parse the numeric suffix of element ids such as ``sid-123`` or ``cid:123``."""
    if not value or separator not in value:
        return None
    return parse_int(value.split(separator)[1])


def match_group(
    regex: re.Pattern[str],
    value: str | None,
    position: int = 1,
    as_number: bool = False,
) -> str | int | None:
    """Return one capture group of ``regex`` searched in ``value``."""
    if value is None:
        return None
    match = regex.search(value)
    if match is None or match.lastindex is None or match.lastindex < position:
        return None
    group = match.group(position)
    if as_number:
        return parse_int(group)
    return group


def strip_tilde(value: str | None) -> str | None:
    """Drop the status sigil the site prefixes to user names (``~name``)."""
    if value is None:
        return None
    value = value.strip()
    if value.startswith("~"):
        return value[1:]
    return value


def strip_quotes(value: str | None) -> str | None:
    if value and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def read_date(value: str | None, tz: ZoneInfo | None = None) -> datetime | None:
    """Parse a human-readable timestamp as rendered by the site.

    The site renders times in the viewing account's configured zone. When
    ``tz`` is given the wall-clock value is interpreted in that zone and
    returned as an aware UTC datetime; otherwise a naive datetime is returned.

    Args:
        value: Text such as ``"on Sep 27th, 2021 06:16 AM"``.
        tz: Zone the account renders times in.

    Returns:
        The parsed datetime, or None when no known format matches.
    """
    if not value:
        return None

    text = " ".join(value.split())
    if text.startswith("on "):
        text = text[3:]
    text = _ORDINAL_RE.sub(r"\1", text)

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if tz is None:
            return parsed
        return parsed.replace(tzinfo=tz).astimezone(timezone.utc)

    return None


def from_timestamp(value: str | int | None) -> datetime | None:
    """Convert unix seconds (e.g. a ``data-timestamp`` attribute) to UTC."""
    seconds = parse_int(value)
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def date_from_thumbnail(value: str | None) -> datetime | None:
    """Read the upload time encoded in a thumbnail URL.

    Thumbnail URLs look like ``//t.furaffinity.net/<id>@<size>-<unix>.jpg``.
    """
    if not value:
        return None
    match = THUMBNAIL_RE.match(value)
    if match is None:
        return None
    return from_timestamp(match.group(3))


def strip_xml_declaration(body: str) -> str:
    """Remove a leading ``<?xml ...?>`` declaration.

    lxml refuses str input that declares an encoding. The text is already
    decoded, so the declaration carries nothing worth keeping.
    """
    return XML_DECLARATION_RE.sub("", body, count=1)


def html_to_text(body: str) -> str:
    """Render an HTML page as plain text for error diagnostics.

    Scripts, styles and the site's navigation chrome are dropped; remaining
    whitespace is collapsed.
    """
    body = strip_xml_declaration(body or "")
    if not body.strip():
        return ""
    try:
        doc = html.fromstring(body)
    except (etree.ParserError, ValueError):
        return " ".join(body.split())

    noise = list(doc.iter(*NOISE_TAGS))
    for selector in NOISE_SELECTORS:
        noise.extend(doc.cssselect(selector))
    for node in noise:
        # The document root itself can't be dropped
        if node.getparent() is not None:
            node.drop_tree()

    return " ".join(doc.text_content().split())
