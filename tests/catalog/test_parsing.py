"""Tests for boundary parsing."""

from storefront.catalog.parsing import (
    parse_attribute_filters,
    parse_attribute_id,
    parse_product_attributes,
    parse_variation_attributes,
    split_multi_value,
)
from storefront.domain.value_objects import AttributeAssignment, VariationAttribute


class TestParseAttributeId:
    """Tests for parse_attribute_id."""

    def test_accepts_ints_and_numeric_strings(self) -> None:
        assert parse_attribute_id(3) == 3
        assert parse_attribute_id(" 12 ") == 12

    def test_rejects_everything_else(self) -> None:
        for raw in ("abc", "", "1.5", -1, 0, True, None, [1]):
            assert parse_attribute_id(raw) is None


class TestParseAttributeFilters:
    """Tests for parse_attribute_filters."""

    def test_parses_object_of_value_lists(self) -> None:
        """Numeric keys map to tuples of value ids."""
        result = parse_attribute_filters('{"3": [12, "14"], "5": [20]}')
        assert result.ok
        assert result.value == {3: (12, 14), 5: (20,)}

    def test_drops_malformed_entries(self) -> None:
        """Non-numeric keys, non-list values and empty lists are dropped."""
        result = parse_attribute_filters('{"x": [1], "5": "7", "6": [], "7": ["a", 9, 9]}')
        assert result.ok
        assert result.value == {7: (9,)}

    def test_invalid_json_degrades_to_empty(self) -> None:
        """Malformed JSON yields an empty mapping and an error."""
        result = parse_attribute_filters("{not json")
        assert result.value == {}
        assert result.error is not None
        assert result.error.code == "INVALID_JSON"

    def test_non_object_degrades_to_empty(self) -> None:
        result = parse_attribute_filters("[1, 2]")
        assert result.value == {}
        assert result.error.code == "INVALID_SHAPE"
        assert result.value_or({1: (1,)}) == {1: (1,)}

    def test_missing_input_is_empty_without_error(self) -> None:
        assert parse_attribute_filters(None).ok
        assert parse_attribute_filters("   ").value == {}


class TestParseProductAttributes:
    """Tests for parse_product_attributes."""

    def test_array_and_object_shapes_normalize_identically(self) -> None:
        """Both stored shapes yield the same assignments."""
        array = parse_product_attributes('[{"attributeId": "1", "value": "Oak"}, {"attributeId": 2, "value": 8}]')
        obj = parse_product_attributes('{"1": "Oak", "2": 8}')
        expected = (
            AttributeAssignment(attribute_id=1, value="Oak"),
            AttributeAssignment(attribute_id=2, value="8"),
        )
        assert array.value == expected
        assert obj.value == expected

    def test_skips_invalid_ids_and_blank_values(self) -> None:
        result = parse_product_attributes({"abc": "x", "3": "  ", "4": ["a", "b"]})
        assert result.value == (AttributeAssignment(attribute_id=4, value="a, b"),)

    def test_invalid_payloads(self) -> None:
        assert parse_product_attributes(None).value == ()
        assert parse_product_attributes("oops").error.code == "INVALID_JSON"
        assert parse_product_attributes("42").error.code == "INVALID_SHAPE"


class TestParseVariationAttributes:
    """Tests for parse_variation_attributes."""

    def test_skips_non_numeric_ids(self) -> None:
        """Legacy rows with non-numeric ids are reported and skipped."""
        parsed, skipped = parse_variation_attributes([("1", "red"), ("color", "blue"), ("2", "")])
        assert parsed == (VariationAttribute(attribute_id=1, value="red"),)
        assert skipped == ["color", "2"]


def test_split_multi_value() -> None:
    """Comma-separated entries are trimmed and blanks dropped."""
    assert split_multi_value("Wood, Stone,, ") == ["Wood", "Stone"]
