"""Combination keys and variation SKUs.

A combination key is the canonical string form of an attribute-id to
value mapping. Two mappings with the same entries always produce the
same key regardless of insertion order.
"""

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storefront.catalog.attributes import AttributeSnapshot

KEY_SEPARATOR = "|"
PAIR_SEPARATOR = ":"
ESCAPE = "\\"

_INVALID_SLUG_CHARS = re.compile(r"[^a-z0-9-]")
_REPEATED_DASHES = re.compile(r"-+")


def _escape_value(value: str) -> str:
    return (
        value.replace(ESCAPE, ESCAPE * 2)
        .replace(KEY_SEPARATOR, ESCAPE + KEY_SEPARATOR)
        .replace(PAIR_SEPARATOR, ESCAPE + PAIR_SEPARATOR)
    )


def compose_key(mapping: Mapping[int, str]) -> str:
    """Compose the combination key for an attribute mapping.

    Entries are ordered by attribute id ascending and rendered as
    ``attributeId:value`` joined with ``|``. Separator characters inside
    values are backslash-escaped, so distinct mappings never share a key.

    Args:
        mapping: Attribute id to value.

    Returns:
        Combination key, or an empty string for an empty mapping
        (meaning "no selection").
    """
    return KEY_SEPARATOR.join(
        f"{attribute_id}{PAIR_SEPARATOR}{_escape_value(mapping[attribute_id])}"
        for attribute_id in sorted(mapping)
    )


def slugify_value(value: str) -> str:
    """Turn an attribute value into a SKU-safe slug.

    Example:
        >>> slugify_value("Oak 12.5 mm")
        'oak12-5mm'
    """
    slug = value.strip().lower().replace(".", "-")
    slug = _INVALID_SLUG_CHARS.sub("", slug)
    slug = _REPEATED_DASHES.sub("-", slug)
    return slug.strip("-")


def generate_variation_sku(
    product_slug: str,
    attributes: Mapping[int, str],
    snapshot: "AttributeSnapshot | None" = None,
) -> str:
    """Generate a variation SKU from the product slug and its attributes.

    The SKU reads ``{productSlug}-{attributeSlug}-{valueSlug}...`` with
    attributes ordered by id. Attribute slugs come from the catalog
    snapshot and fall back to the attribute id. Values that slugify to
    nothing are skipped.

    Args:
        product_slug: Slug of the owning product.
        attributes: Attribute id to value of the variation.
        snapshot: Attribute catalog snapshot for slug lookup.

    Returns:
        Generated SKU; the product slug alone when no attribute
        contributes.
    """
    parts = [product_slug]
    for attribute_id in sorted(attributes):
        value_slug = slugify_value(attributes[attribute_id])
        if not value_slug:
            continue
        attribute_slug = snapshot.id_to_slug(attribute_id) if snapshot else None
        parts.append(attribute_slug or str(attribute_id))
        parts.append(value_slug)
    return "-".join(parts)
