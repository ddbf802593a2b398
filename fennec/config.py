"""Client configuration and search parameter models.

ClientConfig is validated on construction, so a misspelled timezone fails
when the client is built rather than on the first date it parses.

Example::

    config = ClientConfig(cookies="a=...; b=...", timezone="US/Pacific")
    client = FennecClient(config)
"""

from __future__ import annotations

from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from fennec.common.error_classifier import SOFT_ERROR_RULES, SoftErrorRule
from fennec.common.request_manager import SITE_ROOT, Transport
from fennec.data_types import RequestBody


class ClientConfig(BaseModel):
    """Settings for a FennecClient.

    Attributes:
        cookies: Raw ``Cookie`` header of a logged-in session. Most pages
            need the ``a`` and ``b`` cookies.
        disable_retry: Surface server errors immediately instead of backing
            off and retrying.
        timezone: IANA zone the account renders times in. When set, parsed
            dates are converted to UTC; otherwise they are naive.
        transport: Transport used for requests. Defaults to HttpxTransport.
        max_retries: Retries for server errors after the first attempt.
        retry_base_delay: Seconds before the first retry; doubled for each
            further retry.
        site_root: Origin that request paths are resolved against.
        soft_error_rules: Ordered table of error-page fragments.
        timeout: Request timeout, in seconds, for the default transport.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    cookies: str | None = None
    disable_retry: bool = False
    timezone: str | None = None
    transport: Transport | None = None
    max_retries: int = Field(default=6, ge=0)
    retry_base_delay: float = Field(default=2.0, ge=0)
    site_root: str = SITE_ROOT
    soft_error_rules: tuple[SoftErrorRule, ...] = SOFT_ERROR_RULES
    timeout: float | None = 30.0

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone {value!r}") from e
        return value

    @property
    def zone(self) -> ZoneInfo | None:
        """The configured timezone as a ZoneInfo, if any."""
        return ZoneInfo(self.timezone) if self.timezone else None


class SearchRatings(BaseModel):
    """Content ratings to include in a search. At least one must be set."""

    general: bool = False
    mature: bool = False
    adult: bool = False

    @model_validator(mode="after")
    def check_any_selected(self) -> SearchRatings:
        if not (self.general or self.mature or self.adult):
            raise ValueError("At least one rating must be selected")
        return self


class SearchTypes(BaseModel):
    """Submission types to include in a search. At least one must be set."""

    art: bool = False
    flash: bool = False
    photo: bool = False
    music: bool = False
    story: bool = False
    poetry: bool = False

    @model_validator(mode="after")
    def check_any_selected(self) -> SearchTypes:
        if not any(self.model_dump().values()):
            raise ValueError("At least one submission type must be selected")
        return self


class SearchQueryParams(BaseModel):
    """Search form options.

    Omitted ratings default to general only; omitted types default to every
    type, matching the site's own search form.
    """

    perpage: Literal[24, 48, 72] = 72
    order_by: Literal["relevancy", "date", "popularity"] = "relevancy"
    order_dir: Literal["desc", "asc"] = "desc"
    range: Literal[
        "24hours",
        "72hours",
        "30days",
        "90days",
        "1year",
        "3years",
        "5years",
        "all",
    ] = "5years"
    ratings: SearchRatings | None = None
    types: SearchTypes | None = None
    mode: Literal["any", "all", "extended"] = "extended"

    def to_body(self, query: str, page: int = 1) -> RequestBody:
        """Build the form body the search page is POSTed with.

        Args:
            query: Search terms.
            page: 1-based results page.

        Returns:
            Form fields, with checkbox fields present only when checked.
        """
        body: RequestBody = {
            "q": query,
            "page": page,
            "perpage": self.perpage,
            "order-by": self.order_by,
            "order-direction": self.order_dir,
            "do_search": "Search",
            "range": self.range,
            "mode": self.mode,
        }

        ratings = self.ratings or SearchRatings(general=True)
        for name, checked in ratings.model_dump().items():
            if checked:
                body[f"rating-{name}"] = "on"

        types = self.types or SearchTypes(
            art=True, flash=True, photo=True, music=True, story=True, poetry=True
        )
        for name, checked in types.model_dump().items():
            if checked:
                body[f"type-{name}"] = "on"

        return body
