"""Variation resolution.

Maps a selection of attribute values to the single variation carrying
exactly that combination. Each variation's combination key is composed
once when the lookup is built, so resolving a selection costs one key
composition and one dictionary lookup.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from storefront.catalog.attributes import AttributeSnapshot
from storefront.catalog.keys import compose_key
from storefront.catalog.parsing import parse_attribute_id
from storefront.domain.value_objects import Variation

_DIGITS = re.compile(r"(\d+)")


# ============================================================================
# Lookup
# ============================================================================


@dataclass(frozen=True)
class VariationLookup:
    """Immutable index of a product's variations by combination key.

    Attributes:
        by_key: Combination key to variation. When two variations share
            a combination, the first in stored order wins.
        attribute_ids: Every attribute id used by any variation, ascending.
        combinations: Each variation with its attribute mapping, in
            stored order.
    """

    by_key: Mapping[str, Variation]
    attribute_ids: tuple[int, ...]
    combinations: tuple[tuple[Variation, Mapping[int, str]], ...]


def build_lookup(
    variations: Iterable[Variation],
    known_attribute_ids: Iterable[int] | None = None,
) -> VariationLookup:
    """Index variations by their full attribute combination.

    Args:
        variations: Variations in stored order.
        known_attribute_ids: When given, attributes not in this set
            (e.g., deleted from the catalog) are ignored.

    Returns:
        Immutable lookup.
    """
    known = frozenset(known_attribute_ids) if known_attribute_ids is not None else None
    by_key: dict[str, Variation] = {}
    attribute_ids: set[int] = set()
    combinations: list[tuple[Variation, Mapping[int, str]]] = []

    for variation in variations:
        mapping = {
            attr.attribute_id: attr.value
            for attr in variation.attributes
            if known is None or attr.attribute_id in known
        }
        attribute_ids.update(mapping)
        combinations.append((variation, MappingProxyType(mapping)))
        if mapping:
            by_key.setdefault(compose_key(mapping), variation)

    return VariationLookup(
        by_key=MappingProxyType(by_key),
        attribute_ids=tuple(sorted(attribute_ids)),
        combinations=tuple(combinations),
    )


# ============================================================================
# Resolver
# ============================================================================


class VariationResolver:
    """Resolves attribute selections against one product's variations.

    Example usage:
        resolver = VariationResolver(variations)
        selection = resolver.default_selection()
        variation = resolver.resolve(selection)
    """

    def __init__(
        self,
        variations: Sequence[Variation],
        known_attribute_ids: Iterable[int] | None = None,
    ) -> None:
        """Initialize resolver and build its lookup.

        Args:
            variations: Variations of one product, in stored order.
            known_attribute_ids: Attribute ids present in the catalog.
        """
        self._variations = variations
        self._known = frozenset(known_attribute_ids) if known_attribute_ids is not None else None
        self._lookup = build_lookup(variations, self._known)

    @property
    def variations(self) -> Sequence[Variation]:
        return self._variations

    @property
    def attribute_ids(self) -> tuple[int, ...]:
        """Attribute ids used by any variation."""
        return self._lookup.attribute_ids

    def with_variations(self, variations: Sequence[Variation]) -> "VariationResolver":
        """Return a resolver for ``variations``.

        The lookup is rebuilt only when a different sequence object is
        passed; the same object returns this resolver unchanged.
        """
        if variations is self._variations:
            return self
        return VariationResolver(variations, self._known)

    def _restrict(self, selected: Mapping[int, str]) -> dict[int, str] | None:
        desired: dict[int, str] = {}
        for attribute_id in self._lookup.attribute_ids:
            value = selected.get(attribute_id)
            if not value:
                return None
            desired[attribute_id] = value
        return desired or None

    def resolve(self, selected: Mapping[int, str]) -> Variation | None:
        """Find the variation matching a complete selection.

        Args:
            selected: Attribute id to chosen value. Ids not used by any
                variation are ignored.

        Returns:
            The matching variation, or None when any attribute is left
            unselected or no variation carries the combination.
        """
        desired = self._restrict(selected)
        if desired is None:
            return None
        return self._lookup.by_key.get(compose_key(desired))

    def default_selection(self) -> dict[int, str]:
        """Initial selection for a product page.

        The first variation spanning every attribute wins. Without one,
        each attribute takes its value from the first variation that
        defines it.
        """
        required = self._lookup.attribute_ids
        for _, mapping in self._lookup.combinations:
            if all(attribute_id in mapping for attribute_id in required):
                return dict(mapping)

        selection: dict[int, str] = {}
        for _, mapping in self._lookup.combinations:
            for attribute_id, value in mapping.items():
                selection.setdefault(attribute_id, value)
        return selection

    def select(
        self,
        current: Mapping[int, str],
        attribute_id: int,
        value: str,
    ) -> dict[int, str] | None:
        """Apply a single-attribute change to a selection.

        A complete selection is matched by key. A partial one snaps to the
        first variation, in stored order, carrying every chosen value, so
        the fields left open take that variation's values.

        Args:
            current: Current selection.
            attribute_id: Attribute being changed.
            value: New value.

        Returns:
            The full attribute mapping of the matching variation, or None
            when no variation matches (the caller keeps its current state).
        """
        used = self._lookup.attribute_ids
        if attribute_id not in used or not value:
            return None

        desired = {
            selected_id: selected
            for selected_id, selected in current.items()
            if selected_id in used and selected
        }
        desired[attribute_id] = value

        restricted = self._restrict(desired)
        if restricted is not None:
            return restricted if compose_key(restricted) in self._lookup.by_key else None

        for _, mapping in self._lookup.combinations:
            if all(mapping.get(selected_id) == selected for selected_id, selected in desired.items()):
                return dict(mapping)
        return None


# ============================================================================
# External Representation
# ============================================================================


def params_to_selection(
    params: Mapping[str, str],
    snapshot: AttributeSnapshot,
    attribute_ids: Iterable[int],
) -> dict[int, str]:
    """Translate slug-keyed parameters into an id-keyed selection.

    Empty values, unknown slugs and attributes the product's variations
    do not use are ignored. Numeric keys are accepted for attributes
    missing from the catalog, mirroring ``selection_to_params``.
    """
    allowed = set(attribute_ids)
    selection: dict[int, str] = {}
    for key, value in params.items():
        if not value or not value.strip():
            continue
        attribute_id = snapshot.slug_to_id(key)
        if attribute_id is None:
            parsed = parse_attribute_id(key)
            if parsed is not None and parsed not in snapshot.by_id:
                attribute_id = parsed
        if attribute_id is not None and attribute_id in allowed:
            selection[attribute_id] = value
    return selection


def selection_to_params(
    selection: Mapping[int, str],
    snapshot: AttributeSnapshot,
) -> dict[str, str]:
    """Translate an id-keyed selection into slug-keyed parameters.

    Attributes missing from the catalog fall back to their id string.
    """
    return {
        snapshot.id_to_slug(attribute_id) or str(attribute_id): value
        for attribute_id, value in sorted(selection.items())
    }


class VariationSelector:
    """Selection state for one product page.

    In local mode the selector owns the selection. In URL-backed mode
    the slug-keyed parameters are the only source of truth and every
    change is written back into them for the caller to publish.
    """

    def __init__(
        self,
        resolver: VariationResolver,
        snapshot: AttributeSnapshot,
        params: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize selector.

        Args:
            resolver: Resolver for the product's variations.
            snapshot: Attribute catalog snapshot for slug translation.
            params: External parameters; None selects local mode.
        """
        self._resolver = resolver
        self._snapshot = snapshot
        self._params: dict[str, str] | None = dict(params) if params is not None else None
        self._local: dict[int, str] = resolver.default_selection() if params is None else {}

    @property
    def url_backed(self) -> bool:
        return self._params is not None

    @property
    def is_default(self) -> bool:
        """Whether the selection came from the default rather than input."""
        if self._params is None:
            return False
        return not self._params_selection()

    @property
    def params(self) -> dict[str, str]:
        """External parameters reflecting the current selection."""
        if self._params is None:
            return selection_to_params(self._local, self._snapshot)
        return dict(self._params)

    @property
    def selected_attributes(self) -> dict[int, str]:
        if self._params is None:
            return dict(self._local)
        return self._params_selection() or self._resolver.default_selection()

    @property
    def selected_variation(self) -> Variation | None:
        return self._resolver.resolve(self.selected_attributes)

    def _params_selection(self) -> dict[int, str]:
        return params_to_selection(
            self._params or {}, self._snapshot, self._resolver.attribute_ids
        )

    def select(self, attribute_id: int, value: str) -> bool:
        """Change one attribute; a change matching no variation is ignored.

        Returns:
            True when the selection changed.
        """
        current = self.selected_attributes
        updated = self._resolver.select(current, attribute_id, value)
        if updated is None or updated == current:
            return False

        if self._params is None:
            self._local = updated
            return True

        used = set(self._resolver.attribute_ids)
        params = {
            key: val
            for key, val in self._params.items()
            if self._param_attribute_id(key) not in used
        }
        params.update(selection_to_params(updated, self._snapshot))
        self._params = params
        return True

    def _param_attribute_id(self, key: str) -> int | None:
        attribute_id = self._snapshot.slug_to_id(key)
        return attribute_id if attribute_id is not None else parse_attribute_id(key)


# ============================================================================
# Display Order
# ============================================================================


def _natural_key(value: str) -> list[int | str]:
    normalized = value.strip().replace(",", ".", 1).casefold()
    parts = _DIGITS.split(normalized)
    return [int(part) if index % 2 else part for index, part in enumerate(parts)]


def sort_variations_for_display(variations: Sequence[Variation]) -> list[Variation]:
    """Order variations by their attribute values, numbers compared numerically.

    Attributes are compared in ascending id order; a variation missing an
    attribute sorts as if its value were empty. Ties keep stored order.
    """
    if len(variations) <= 1:
        return list(variations)

    attribute_ids = sorted({attr.attribute_id for v in variations for attr in v.attributes})

    def sort_key(variation: Variation) -> list[list[int | str]]:
        mapping = variation.attribute_map
        return [_natural_key(mapping.get(attribute_id, "")) for attribute_id in attribute_ids]

    return sorted(variations, key=sort_key)
