"""Applies field maps to parsed pages.

The extractor detects the theme of a page, picks the matching half of a
DualFieldMap and resolves every rule recursively. A selector that matches
nothing resolves to None (or an empty list); extraction never fails because
a field is missing.
"""

from __future__ import annotations

import logging
from typing import Any

from typing_extensions import assert_never

from fennec.common.exceptions import FieldMapException
from fennec.common.field_map import (
    Attr,
    Custom,
    DualFieldMap,
    ExtractionContext,
    ExtractMode,
    Field,
    FieldMap,
    Fixed,
    Html,
    ListField,
    Nested,
    Rule,
    Text,
    When,
)
from fennec.common.normalizers import read_date
from fennec.common.page import HtmlNode, parse_page
from fennec.common.theme import detect_theme
from fennec.data_types import Extraction

logger = logging.getLogger(__name__)


def extract(
    page: HtmlNode,
    dual_map: DualFieldMap,
    context: ExtractionContext | None = None,
) -> Extraction:
    """Extract one record from a parsed page.

    Args:
        page: The parsed document.
        dual_map: Classic and beta rules for the record.
        context: Timezone and URL used while resolving rules.

    Returns:
        Extraction holding the record and the theme it was read with.

    Raises:
        FieldMapException: If a rule is malformed (e.g. an invalid selector).
    """
    context = context or ExtractionContext(url=page.url)
    theme = detect_theme(page)
    record = apply_field_map(page, dual_map.for_theme(theme), context)
    return Extraction(record=record, theme=theme, url=page.url)


def extract_body(
    body: str,
    dual_map: DualFieldMap,
    context: ExtractionContext | None = None,
) -> Extraction:
    """Parse response text and extract one record from it."""
    url = context.url if context else ""
    return extract(parse_page(body, url), dual_map, context)


def apply_field_map(
    node: HtmlNode, field_map: FieldMap, context: ExtractionContext
) -> dict[str, Any]:
    """Resolve every rule of ``field_map`` against ``node``."""
    record: dict[str, Any] = {}
    for name, rule in field_map.fields.items():
        try:
            record[name] = resolve_rule(node, rule, context)
        except FieldMapException as e:
            if e.field_name is not None:
                raise
            raise FieldMapException(
                e.message,
                selector=e.selector,
                field_name=name,
                request_url=e.request_url,
            ) from e
    return record


def resolve_rule(node: HtmlNode, rule: Rule, context: ExtractionContext) -> Any:
    """Resolve a single rule relative to a context node."""
    match rule:
        case Field():
            return _resolve_field(node, rule, context)
        case When():
            return _resolve_when(node, rule, context)
        case ListField():
            return _resolve_list(node, rule, context)
        case Nested():
            return _resolve_nested(node, rule, context)
        case _:
            assert_never(rule)


def _select(node: HtmlNode, selector: str | None) -> HtmlNode | None:
    if selector is None:
        return node
    return node.first(selector)


def _resolve_field(
    node: HtmlNode, rule: Field, context: ExtractionContext
) -> Any:
    if isinstance(rule.extract, Fixed):
        return rule.extract.value

    target = _select(node, rule.selector)
    if target is None:
        return None

    raw = _read(target, rule.extract, context)
    if raw is None or rule.convert is None:
        return raw
    return rule.convert(raw)


def _read(node: HtmlNode, mode: ExtractMode, context: ExtractionContext) -> Any:
    match mode:
        case Attr(name=name):
            return node.attr(name)
        case Text():
            return node.text()
        case Html():
            return node.inner_html()
        case Custom(func=func):
            return func(node, context)
        case Fixed(value=value):
            return value
        case _:
            assert_never(mode)


def _resolve_when(
    node: HtmlNode, rule: When, context: ExtractionContext
) -> Any:
    target = _select(node, rule.selector)
    if target is None:
        return None

    parsed = read_date(target.text(), context.timezone)
    if parsed is None:
        parsed = read_date(target.attr("title"), context.timezone)
    return parsed


def _resolve_list(
    node: HtmlNode, rule: ListField, context: ExtractionContext
) -> list[Any]:
    items = []
    for item_node in node.css(rule.selector):
        record = apply_field_map(item_node, rule.item, context)
        value = rule.convert(record) if rule.convert else record
        if value is None and rule.skip_missing:
            continue
        items.append(value)
    return items


def _resolve_nested(
    node: HtmlNode, rule: Nested, context: ExtractionContext
) -> dict[str, Any] | None:
    target = _select(node, rule.selector)
    if target is None:
        return None

    record = apply_field_map(target, rule.item, context)
    if all(value is None or value == [] for value in record.values()):
        return None
    return record
