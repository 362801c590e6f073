"""Tests for flatten/nest conversion."""

import pytest

from strata.config import (
    Computed,
    copy_values,
    flatten,
    merge_layers,
    nest,
    unwrap_functions,
)


class TestFlatten:
    """Tests for flatten()."""

    def test_nested_to_flat(self):
        nested = {"style": {"bg_color": "blue", "font": {"size": 10}}, "name": "x"}
        assert flatten(nested) == {
            "style.bg_color": "blue",
            "style.font.size": 10,
            "name": "x",
        }

    def test_lists_are_leaves(self):
        assert flatten({"tags": ["a", {"b": 1}]}) == {"tags": ["a", {"b": 1}]}

    def test_is_leaf_stops_descent(self):
        nested = {"track": {"metadata": {"owner": "me"}, "label": "t"}}
        flat = flatten(nested, is_leaf=lambda path: path == "track.metadata")
        assert flat == {"track.metadata": {"owner": "me"}, "track.label": "t"}

    def test_prefix(self):
        assert flatten({"a": 1}, prefix="root.") == {"root.a": 1}

    def test_empty(self):
        assert flatten({}) == {}


class TestNest:
    """Tests for nest()."""

    def test_flat_to_nested(self):
        flat = {"style.bg_color": "blue", "style.height": 3, "name": "x"}
        assert nest(flat) == {"style": {"bg_color": "blue", "height": 3}, "name": "x"}

    def test_intermediate_containers_are_reused(self):
        nested = nest({"a.b.c": 1, "a.b.d": 2, "a.e": 3})
        assert nested == {"a": {"b": {"c": 1, "d": 2}, "e": 3}}

    def test_dict_leaf_is_not_merged_into(self):
        with pytest.raises(ValueError, match="already holds a value"):
            nest({"a.b": {"c": 1}, "a.b.d": 2})

    def test_value_then_container_conflict(self):
        with pytest.raises(ValueError, match="already holds a value"):
            nest({"a": 1, "a.b": 2})

    def test_container_then_value_conflict(self):
        with pytest.raises(ValueError, match="nested settings"):
            nest({"a.b": 2, "a": 1})

    def test_none_leaf_is_kept(self):
        assert nest({"a.b": None}) == {"a": {"b": None}}

    def test_none_leaf_blocks_container(self):
        with pytest.raises(ValueError):
            nest({"a": None, "a.b": 1})


class TestRoundTrip:
    """flatten and nest invert each other on slot-only trees."""

    @pytest.mark.parametrize(
        "nested",
        [
            {},
            {"a": 1},
            {"style": {"bg_color": "blue", "height": 12}},
            {"a": {"b": {"c": {"d": [1, 2]}}}, "e": "f"},
            {"x": {"y": None}, "z": True},
        ],
    )
    def test_nest_of_flatten(self, nested):
        assert nest(flatten(nested)) == nested

    @pytest.mark.parametrize(
        "flat",
        [
            {"a": 1},
            {"style.bg_color": "blue", "style.height": 12},
            {"a.b.c": 1, "a.d": 2, "e": 3},
        ],
    )
    def test_flatten_of_nest(self, flat):
        assert flatten(nest(flat)) == flat


class TestLayerHelpers:
    """Tests for merge_layers(), unwrap_functions() and copy_values()."""

    def test_merge_local_wins(self):
        merged = merge_layers({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert merged == {"a": 1, "b": 3, "c": 4}

    def test_merge_does_not_mutate_inputs(self):
        base = {"a": 1}
        merge_layers(base, {"a": 2})
        assert base == {"a": 1}

    def test_unwrap_functions(self):
        def original():
            return 1

        wrapped = Computed(function=lambda: 2, original=original)
        plain = lambda: 3  # noqa: E731
        flat = unwrap_functions({"a": wrapped, "b": plain, "c": 4})
        assert flat == {"a": original, "b": plain, "c": 4}

    def test_copy_values_copies_containers(self):
        tags = ["x"]
        copied = copy_values({"tags": tags, "style": {"bg": "red"}})
        copied["tags"].append("y")
        copied["style"]["bg"] = "blue"
        assert tags == ["x"]
        assert copied["tags"] is not tags

    def test_copy_values_keeps_callables(self):
        wrapped = Computed.of(len)
        assert copy_values({"a": wrapped, "b": len}) == {"a": wrapped, "b": len}
        assert copy_values({"a": wrapped})["a"] is wrapped
