"""Boundary parsing for externally supplied catalog data.

Attribute filters arrive as JSON in query strings, product attributes
are stored as JSON text in one of two shapes, and variation attribute
ids are stored as text. All of it is validated here so the resolver
and the facet computer only ever see well-formed values. Malformed
input degrades to an empty value and never raises.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from storefront.domain.value_objects import AttributeAssignment, VariationAttribute

T = TypeVar("T")


@dataclass(frozen=True)
class ParseError:
    """Why a raw value was rejected."""

    code: str
    message: str


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of parsing an external value.

    ``value`` always holds a usable (possibly empty) result; ``error``
    is set when the input was malformed and the value is a fallback.
    """

    value: T
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def value_or(self, default: T) -> T:
        """Return the parsed value, or ``default`` when parsing failed."""
        return self.value if self.error is None else default


def parse_attribute_id(raw: Any) -> int | None:
    """Parse an attribute (or value) id.

    Args:
        raw: Integer or numeric string.

    Returns:
        Positive integer id, or None when ``raw`` is not one.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    if isinstance(raw, str):
        text = raw.strip()
        if text.isdigit():
            number = int(text)
            return number if number > 0 else None
    return None


def parse_attribute_filters(raw: str | None) -> ParseResult[dict[int, tuple[int, ...]]]:
    """Parse the serialized attribute filter mapping.

    The expected shape is a JSON object of attribute id to a list of
    value ids, e.g. ``{"3": [12, 14], "5": ["20"]}``. Keys and ids that
    are not numeric are dropped, as are attributes left with no values.

    Args:
        raw: JSON text from the request, or None.

    Returns:
        ParseResult with the filter mapping (empty on malformed input).
    """
    if raw is None or not raw.strip():
        return ParseResult(value={})

    try:
        payload = json.loads(raw)
    except ValueError:
        return ParseResult(
            value={},
            error=ParseError("INVALID_JSON", "Attribute filters are not valid JSON"),
        )

    if not isinstance(payload, dict):
        return ParseResult(
            value={},
            error=ParseError("INVALID_SHAPE", "Attribute filters must be a JSON object"),
        )

    filters: dict[int, tuple[int, ...]] = {}
    for key, values in payload.items():
        attribute_id = parse_attribute_id(key)
        if attribute_id is None or not isinstance(values, list):
            continue
        value_ids: list[int] = []
        for item in values:
            value_id = parse_attribute_id(item)
            if value_id is not None and value_id not in value_ids:
                value_ids.append(value_id)
        if value_ids:
            filters[attribute_id] = tuple(value_ids)

    return ParseResult(value=filters)


def _stringify(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, bool)):
        return None
    if isinstance(value, list):
        parts = [str(item).strip() for item in value if item is not None]
        return ", ".join(part for part in parts if part) or None
    text = str(value).strip()
    return text or None


def parse_product_attributes(raw: Any) -> ParseResult[tuple[AttributeAssignment, ...]]:
    """Normalize stored product attributes into assignments.

    Two stored shapes are accepted: an array of
    ``{"attributeId": ..., "value": ...}`` objects, or an object mapping
    attribute id to value. JSON text is decoded first.

    Args:
        raw: JSON text, decoded list or dict, or None.

    Returns:
        ParseResult with assignments in stored order.
    """
    if raw is None or raw == "":
        return ParseResult(value=())

    payload = raw
    if isinstance(raw, str):
        try:
            payload = json.loads(raw)
        except ValueError:
            return ParseResult(
                value=(),
                error=ParseError("INVALID_JSON", "Product attributes are not valid JSON"),
            )

    if isinstance(payload, dict):
        pairs = list(payload.items())
    elif isinstance(payload, list):
        pairs = [
            (item.get("attributeId", item.get("attribute_id")), item.get("value"))
            for item in payload
            if isinstance(item, dict)
        ]
    else:
        return ParseResult(
            value=(),
            error=ParseError("INVALID_SHAPE", "Product attributes must be an array or object"),
        )

    assignments: list[AttributeAssignment] = []
    for raw_id, raw_value in pairs:
        attribute_id = parse_attribute_id(raw_id)
        value = _stringify(raw_value)
        if attribute_id is not None and value is not None:
            assignments.append(AttributeAssignment(attribute_id=attribute_id, value=value))
    return ParseResult(value=tuple(assignments))


def parse_variation_attributes(
    rows: Iterable[tuple[Any, Any]],
) -> tuple[tuple[VariationAttribute, ...], list[str]]:
    """Convert stored variation attribute rows into domain values.

    Args:
        rows: ``(attribute_id, value)`` pairs as stored.

    Returns:
        Tuple of (parsed attributes, raw ids that were skipped because
        they are not numeric or carry no value).
    """
    parsed: list[VariationAttribute] = []
    skipped: list[str] = []
    for raw_id, raw_value in rows:
        attribute_id = parse_attribute_id(raw_id)
        value = _stringify(raw_value)
        if attribute_id is None or value is None:
            skipped.append(str(raw_id))
            continue
        parsed.append(VariationAttribute(attribute_id=attribute_id, value=value))
    return tuple(parsed), skipped


def split_multi_value(value: str) -> list[str]:
    """Split a comma-separated multi-value entry, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]
