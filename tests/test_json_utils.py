"""Tests for JSON utilities and fingerprints of exported settings."""

import io
import json
from enum import Enum

import pytest

from strata.config import Computed
from strata.utils.fingerprint import canonical_json, fingerprint_tree
from strata.utils.json_utils import (
    ConfigJSONEncoder,
    callable_name,
    dump_config,
    dumps_config,
)


def label_feature(feature):
    return feature["name"]


class Color(Enum):
    RED = "red"


class TestConfigJSONEncoder:
    """Tests for ConfigJSONEncoder class."""

    def test_encode_function(self):
        """Test encoding a plain function."""
        result = json.loads(json.dumps({"label": label_feature}, cls=ConfigJSONEncoder))
        assert result["label"] == f"<callable {__name__}.label_feature>"

    def test_encode_computed_uses_original(self):
        """Test that wrappers are encoded as the function they wrap."""
        wrapped = Computed(function=lambda feature: "x", original=label_feature)
        result = json.loads(json.dumps({"label": wrapped}, cls=ConfigJSONEncoder))
        assert result["label"] == f"<callable {__name__}.label_feature>"

    def test_encode_builtin(self):
        result = json.loads(json.dumps([len], cls=ConfigJSONEncoder))
        assert result == ["<callable builtins.len>"]

    def test_encode_enum(self):
        result = json.loads(json.dumps({"color": Color.RED}, cls=ConfigJSONEncoder))
        assert result["color"] == "red"

    def test_encode_set(self):
        result = json.loads(json.dumps({"tags": {"b", "a"}}, cls=ConfigJSONEncoder))
        assert result["tags"] == ["a", "b"]

    def test_encode_unsupported(self):
        """Test that unsupported objects still raise TypeError."""
        with pytest.raises(TypeError):
            json.dumps({"value": object()}, cls=ConfigJSONEncoder)

    def test_callable_name_of_lambda(self):
        assert callable_name(lambda: 1).endswith("<lambda>")


class TestDumpHelpers:
    """Tests for dumps_config and dump_config."""

    def test_dumps_config(self):
        text = dumps_config({"style": {"label": label_feature}}, sort_keys=True)
        assert "label_feature" in text

    def test_dump_config(self):
        buffer = io.StringIO()
        dump_config({"a": 1, "b": [1, 2]}, buffer)
        assert json.loads(buffer.getvalue()) == {"a": 1, "b": [1, 2]}


class TestFingerprint:
    """Tests for canonical JSON and fingerprint_tree."""

    def test_canonical_json_sorts_keys(self):
        assert canonical_json({"b": 1, "a": {"d": 2, "c": 3}}) == '{"a":{"c":3,"d":2},"b":1}'

    def test_key_order_does_not_matter(self):
        first = {"style": {"bg_color": "blue", "height": 3}}
        second = {"style": {"height": 3, "bg_color": "blue"}}
        assert fingerprint_tree(first) == fingerprint_tree(second)

    def test_values_matter(self):
        assert fingerprint_tree({"a": 1}) != fingerprint_tree({"a": 2})

    def test_hex_digest(self):
        digest = fingerprint_tree({})
        assert len(digest) == 16
        int(digest, 16)
