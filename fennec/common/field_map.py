"""Declarative field maps.

A FieldMap describes how to pull one record out of a parsed page. Each output
field is bound to a rule:

- ``Field``: select one node and read a value from it with an extraction
  mode (``Attr``, ``Text``, ``Html``, ``Fixed`` or ``Custom``), then pass the
  raw value through an optional converter.
- ``When``: select one node and parse a site timestamp from its text or,
  failing that, its ``title`` tooltip.
- ``ListField``: select every matching node and apply a nested FieldMap to
  each, optionally folding each record with a converter.
- ``Nested``: apply a nested FieldMap to a single node.

A DualFieldMap pairs a classic and a beta FieldMap that must produce the same
field names; the extractor picks one per page based on the detected theme.

Rules are frozen dataclasses rather than bare callables so a map can be
inspected with ``describe()`` in tests.

Example::

    SUBMISSION_TILE = field_map(
        id=pick_element_id("-"),
        self_link=pick_link(SELECTOR_VIEW),
        title=text("figcaption a"),
        when=pick_date_from_thumbnail(),
    )
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

from fennec.common.exceptions import FieldMapException
from fennec.common.normalizers import (
    date_from_thumbnail,
    fix_url,
    from_timestamp,
    match_group,
    parse_int,
    split_id,
)
from fennec.data_types import PageTheme, RequestOptions

if TYPE_CHECKING:
    from fennec.common.page import HtmlNode

Converter = Callable[[Any], Any]

SELECTOR_USER = 'a[href*="/user/"]'
SELECTOR_VIEW = 'a[href*="/view/"]'
SELECTOR_JOURNAL = 'a[href*="/journal/"]'
SELECTOR_THUMB = 'img[src*="//t.furaffinity.net/"]'


@dataclass(frozen=True)
class ExtractionContext:
    """Per-call settings available to rules while extracting.

    Attributes:
        timezone: Zone the account renders timestamps in, if known.
        url: URL of the page being extracted.
    """

    timezone: ZoneInfo | None = None
    url: str = ""


# =============================================================================
# Extraction modes
# =============================================================================


@dataclass(frozen=True)
class Attr:
    """Read an attribute of the selected node."""

    name: str

    def describe(self) -> str:
        return f"attr:{self.name}"


@dataclass(frozen=True)
class Text:
    """Read the trimmed visible text of the selected node."""

    def describe(self) -> str:
        return "text"


@dataclass(frozen=True)
class Html:
    """Read the inner HTML of the selected node."""

    def describe(self) -> str:
        return "html"


@dataclass(frozen=True)
class Fixed:
    """Return a constant, ignoring the document.

    Used for values known from the request rather than the page, such as
    the self link or an id taken from the requested path.
    """

    value: Any

    def describe(self) -> str:
        return f"fixed:{self.value!r}"


@dataclass(frozen=True)
class Custom:
    """Derive a value from the selected node with a function.

    The function receives the matched node and the extraction context.
    """

    func: Callable[[HtmlNode, ExtractionContext], Any]

    def describe(self) -> str:
        return f"custom:{_callable_name(self.func)}"


ExtractMode = Attr | Text | Html | Fixed | Custom


# =============================================================================
# Rules
# =============================================================================


@dataclass(frozen=True)
class Field:
    """A scalar output field.

    Attributes:
        selector: CSS selector relative to the context node. None means the
            context node itself.
        extract: How to read the raw value from the node.
        convert: Optional raw value -> typed value function. Only called
            when a raw value was found.
    """

    selector: str | None = None
    extract: ExtractMode = field(default_factory=Text)
    convert: Converter | None = None

    def describe(self) -> dict[str, Any]:
        return {
            "kind": "field",
            "selector": self.selector,
            "extract": self.extract.describe(),
            "convert": _callable_name(self.convert),
        }


@dataclass(frozen=True)
class When:
    """A timestamp field read from visible text, then the ``title`` tooltip."""

    selector: str | None = None

    def describe(self) -> dict[str, Any]:
        return {"kind": "when", "selector": self.selector}


@dataclass(frozen=True)
class ListField:
    """A repeated structure, one nested record per matching node.

    Attributes:
        selector: CSS selector for the repeating nodes.
        item: FieldMap applied to each node.
        convert: Optional function applied to each record; used to fold a
            single-property record down to a scalar.
        skip_missing: Drop entries that fold to None.
    """

    selector: str
    item: FieldMap
    convert: Converter | None = None
    skip_missing: bool = False

    def describe(self) -> dict[str, Any]:
        return {
            "kind": "list",
            "selector": self.selector,
            "item": self.item.describe(),
            "convert": _callable_name(self.convert),
            "skip_missing": self.skip_missing,
        }


@dataclass(frozen=True)
class Nested:
    """A single nested record.

    Resolves to None when the selector matches nothing or when every field
    of the nested record is absent.
    """

    item: FieldMap
    selector: str | None = None

    def describe(self) -> dict[str, Any]:
        return {
            "kind": "nested",
            "selector": self.selector,
            "item": self.item.describe(),
        }


Rule = Field | When | ListField | Nested


@dataclass(frozen=True)
class FieldMap:
    """Output field name -> rule, for one theme."""

    fields: Mapping[str, Rule]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "fields", MappingProxyType(dict(self.fields))
        )

    def names(self) -> frozenset[str]:
        return frozenset(self.fields)

    def describe(self) -> dict[str, Any]:
        return {name: rule.describe() for name, rule in self.fields.items()}


@dataclass(frozen=True)
class DualFieldMap:
    """A classic and a beta FieldMap producing the same record shape.

    Attributes:
        classic: Rules for the classic theme.
        beta: Rules for the beta theme.
        request: Request options the page must be fetched with, if not a
            plain GET.

    Raises:
        FieldMapException: If the two variants declare different fields.
    """

    classic: FieldMap
    beta: FieldMap
    request: RequestOptions | None = None

    def __post_init__(self) -> None:
        _check_parity(self.classic, self.beta, path="")

    def for_theme(self, theme: PageTheme) -> FieldMap:
        match theme:
            case PageTheme.CLASSIC:
                return self.classic
            case PageTheme.BETA:
                return self.beta

    def with_request(self, request: RequestOptions) -> DualFieldMap:
        """Return a copy bound to different request options."""
        return DualFieldMap(self.classic, self.beta, request)


def _check_parity(classic: FieldMap, beta: FieldMap, path: str) -> None:
    if classic.names() != beta.names():
        missing = sorted(classic.names() ^ beta.names())
        raise FieldMapException(
            f"Classic and beta field maps disagree on fields {missing}",
            field_name=path or None,
        )
    for name, rule in classic.fields.items():
        other = beta.fields[name]
        if isinstance(rule, ListField | Nested) and isinstance(
            other, ListField | Nested
        ):
            _check_parity(rule.item, other.item, path=f"{path}{name}.")


def _callable_name(func: Callable[..., Any] | None) -> str | None:
    if func is None:
        return None
    if isinstance(func, partial):
        return _callable_name(func.func)
    return getattr(func, "__name__", repr(func))


# =============================================================================
# Builders
# =============================================================================


def field_map(**fields: Rule) -> FieldMap:
    """Build a FieldMap from keyword arguments."""
    return FieldMap(fields)


def text(selector: str | None = None, convert: Converter | None = None) -> Field:
    return Field(selector, Text(), convert)


def inner_html(selector: str | None = None) -> Field:
    return Field(selector, Html())


def attr(
    selector: str | None, name: str, convert: Converter | None = None
) -> Field:
    return Field(selector, Attr(name), convert)


def fixed(value: Any) -> Field:
    return Field(None, Fixed(value))


def derived(
    func: Callable[[HtmlNode, ExtractionContext], Any],
    selector: str | None = None,
    convert: Converter | None = None,
) -> Field:
    """A field computed from the matched node by ``func``."""
    return Field(selector, Custom(func), convert)


def when(selector: str | None = None) -> When:
    return When(selector)


def listing(
    selector: str,
    item: FieldMap,
    convert: Converter | None = None,
    skip_missing: bool = False,
) -> ListField:
    return ListField(selector, item, convert, skip_missing)


def nested(item: FieldMap, selector: str | None = None) -> Nested:
    return Nested(item, selector)


def pick(selector: str | None, attribute: str) -> Field:
    """Read a URL-valued attribute, normalizing protocol-relative URLs."""
    return Field(selector, Attr(attribute), fix_url)


def pick_link(selector: str | None = "a") -> Field:
    return pick(selector, "href")


def pick_image(selector: str | None = "img", attribute: str = "src") -> Field:
    return pick(selector, attribute)


def pick_checkbox_value(selector: str = "input[type='checkbox']") -> Field:
    return Field(selector, Attr("value"), parse_int)


def pick_element_id(separator: str, selector: str | None = None) -> Field:
    """Parse the numeric part of an ``id`` attribute like ``sid-123``."""
    return Field(selector, Attr("id"), partial(split_id, separator=separator))


def pick_date_from_thumbnail(
    selector: str | None = "img", attribute: str = "src"
) -> Field:
    return Field(selector, Attr(attribute), date_from_thumbnail)


def pick_timestamp(attribute: str = "data-timestamp") -> Field:
    return Field(None, Attr(attribute), from_timestamp)


def pick_regex(
    regex: re.Pattern[str],
    selector: str | None = None,
    attribute: str | None = None,
    position: int = 1,
    as_number: bool = False,
) -> Field:
    """Extract a capture group from an attribute or the node's text."""
    extract: ExtractMode = Attr(attribute) if attribute else Text()
    return Field(
        selector,
        extract,
        partial(match_group, regex, position=position, as_number=as_number),
    )


def pluck(key: str) -> Converter:
    """Converter folding ``{key: value}`` records down to ``value``."""

    def fold(record: Mapping[str, Any]) -> Any:
        return record.get(key)

    fold.__name__ = f"pluck_{key}"
    return fold
