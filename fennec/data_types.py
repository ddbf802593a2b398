"""Data types shared by the fetch, extraction and pagination layers.

These types are deliberately small and immutable:

1. PageTheme - which of the two site layouts a page was rendered with
2. TransportOptions / TransportResponse - the transport boundary
3. FetchResult - a classified, successful fetch
4. NoteFolder - targets for the note "move" write operation
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# A cursor is an opaque reference to a listing page: a site path, an absolute
# URL on the site origin, or a form action. None terminates a listing.
PaginationCursor = str

FormValue = str | int
RequestBody = dict[str, FormValue | list[FormValue]]

FORM_URLENCODED = "application/x-www-form-urlencoded"


class PageTheme(Enum):
    """The two alternate layouts the site renders for the same page."""

    CLASSIC = "classic"
    BETA = "beta"


class HttpMethod(Enum):
    """HTTP methods used against the site."""

    GET = "GET"
    POST = "POST"


class NoteFolder(Enum):
    """Destination folders accepted by the note manager."""

    UNREAD = "unread"
    RESTORE = "restore"
    ARCHIVE = "archive"
    TRASH = "trash"


@dataclass(frozen=True)
class RequestOptions:
    """Per-page request options declared next to a field map.

    Attributes:
        method: HTTP method.
        body: Form or JSON body. List values are sent as repeated keys.
        content_type: Body encoding; form-encoded bodies use FORM_URLENCODED.
    """

    method: HttpMethod = HttpMethod.GET
    body: RequestBody | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class TransportOptions:
    """Everything a transport needs to issue one request.

    Attributes:
        method: HTTP method.
        cookies: Raw ``Cookie`` header value, if any.
        body: Request body, if any.
        content_type: Body encoding.
    """

    method: HttpMethod = HttpMethod.GET
    cookies: str | None = None
    body: RequestBody | None = None
    content_type: str | None = None

    @classmethod
    def from_request(
        cls, options: RequestOptions | None, cookies: str | None
    ) -> TransportOptions:
        """Combine declared request options with the client's cookies."""
        if options is None:
            return cls(cookies=cookies)
        return cls(
            method=options.method,
            cookies=cookies,
            body=options.body,
            content_type=options.content_type,
        )


@dataclass(frozen=True)
class TransportResponse:
    """Raw response returned by a transport.

    Attributes:
        status_code: HTTP status code as reported by the network layer.
        body: Decoded response text.
    """

    status_code: int
    body: str


@dataclass(frozen=True)
class FetchResult:
    """A fetch that classified as successful.

    Attributes:
        url: Absolute URL that was requested.
        body: Response text.
        attempts: Number of requests issued, including retries.
    """

    url: str
    body: str
    attempts: int = 1


@dataclass(frozen=True)
class Extraction:
    """Output of applying a dual field map to one page.

    Attributes:
        record: Field name to extracted value.
        theme: Theme detected on the page the record came from.
        url: URL of the page.
    """

    record: dict[str, Any]
    theme: PageTheme
    url: str = ""
