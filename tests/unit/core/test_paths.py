# tests/unit/core/test_paths.py
"""Tests for path expansion and whitelist splitting."""

import pytest

from morphic.core.paths import expand_path, split_whitelist


class TestExpandPath:
    """expand_path() flattens nested specs in a fixed order."""

    def test_reference_ordering(self) -> None:
        """The mixed spec expands to exactly this sequence."""
        spec = ["thing", ("thing", [("okay", "then"), ("if", "yes")]), ("and", "another")]

        assert expand_path(spec) == [
            (("thing", "if"), ("yes",)),
            (("thing", "okay"), ("then",)),
            ((), ("thing",)),
            (("and",), ("another",)),
        ]

    def test_bare_names_form_one_top_level_group(self) -> None:
        assert expand_path(["reference", "quantity"]) == [((), ("reference", "quantity"))]

    def test_pair_with_bare_nested_name(self) -> None:
        assert expand_path([("shipping_address", "city")]) == [(("shipping_address",), ("city",))]

    def test_nested_names_grouped_before_nested_pairs(self) -> None:
        """All bare names inside a pair form one group, even when interleaved with pairs."""
        spec = [("line_items", ["sku", ("note", "body"), "quantity"])]

        assert expand_path(spec) == [
            (("line_items",), ("sku", "quantity")),
            (("line_items", "note"), ("body",)),
        ]

    def test_pending_run_flushed_after_each_pair(self) -> None:
        spec = ["reference", ("shipping_address", "city"), "quantity"]

        assert expand_path(spec) == [
            (("shipping_address",), ("city",)),
            ((), ("reference",)),
            ((), ("quantity",)),
        ]

    def test_three_levels_deep(self) -> None:
        spec = [("shipments", [("line_items", [("note", "body")])])]

        assert expand_path(spec) == [(("shipments", "line_items", "note"), ("body",))]

    def test_mapping_spec(self) -> None:
        assert expand_path({"line_items": ["sku"], "gift_item": "sku"}) == [
            (("line_items",), ("sku",)),
            (("gift_item",), ("sku",)),
        ]

    def test_mapping_entry_inside_list(self) -> None:
        assert expand_path(["reference", {"line_items": "sku"}]) == [
            (("line_items",), ("sku",)),
            ((), ("reference",)),
        ]

    def test_lone_nested_pair(self) -> None:
        assert expand_path([("line_items", ("note", "body"))]) == [(("line_items", "note"), ("body",))]

    def test_empty_spec(self) -> None:
        assert expand_path([]) == []

    @pytest.mark.parametrize(
        "spec",
        [
            "reference",
            42,
            [42],
            [(1, "sku")],
            [("line_items", "sku", "extra")],
            [("line_items", 7)],
        ],
    )
    def test_malformed_spec_raises_type_error(self, spec: object) -> None:
        with pytest.raises(TypeError):
            expand_path(spec)


class TestSplitWhitelist:
    """split_whitelist() splits one level deep for the caster."""

    def test_names_and_nested(self) -> None:
        names, nested = split_whitelist(["reference", ("line_items", ["sku", ("note", "body")]), ("gift_item", "sku")])

        assert names == ("reference",)
        assert nested == {
            "line_items": ["sku", ("note", "body")],
            "gift_item": ["sku"],
        }

    def test_repeated_pairs_are_concatenated(self) -> None:
        names, nested = split_whitelist([("line_items", "sku"), ("line_items", ["quantity"])])

        assert names == ()
        assert nested == {"line_items": ["sku", "quantity"]}

    def test_malformed_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            split_whitelist([None])
