"""Tests for validation results, errors and engine options."""

from __future__ import annotations

import pytest

from strata.config import (
    ConfigValidationError,
    Configuration,
    EngineOptions,
    InvalidValuePolicy,
    ListenerErrorPolicy,
    Schema,
    Slot,
    UnrecognizedKeyWarning,
    ValidationError,
    ValidationIssue,
    ValidationResult,
    validate_config,
)


@pytest.fixture
def schema():
    return Schema(
        [
            Slot("name", type="string", required=True),
            Slot("port", type="integer", default=8080),
            Slot("debug", type="boolean", default=False),
        ]
    )


class TestValidationError:
    """Tests for the ValidationError exception."""

    def test_str_with_value(self):
        error = ValidationError("port", "must be an integer", "http")
        assert str(error) == "port: must be an integer (got: 'http')"

    def test_str_without_value(self):
        error = ValidationError("name", "required")
        assert str(error) == "name: required"

    def test_is_value_error(self):
        assert issubclass(ValidationError, ValueError)

    def test_attributes(self):
        error = ValidationError("port", "bad", 1)
        assert (error.key, error.message, error.value) == ("port", "bad", 1)


class TestUnrecognizedKeyWarning:
    """Tests for the unknown key warning category."""

    def test_is_user_warning(self):
        assert issubclass(UnrecognizedKeyWarning, UserWarning)

    def test_carries_key(self, schema):
        config = Configuration(schema)
        with pytest.warns(UnrecognizedKeyWarning) as record:
            config.load_base({"server": {"host": "localhost"}})
        assert record[0].message.key == "server.host"


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_missing_required_is_an_error(self, schema):
        result = validate_config(Configuration(schema))
        assert not result
        assert [issue.key for issue in result.errors] == ["name"]

    def test_complete_config_is_valid(self, schema):
        config = Configuration(schema, {"name": "svc"})
        result = config.validate()
        assert result
        assert result.errors == []
        assert result.warnings == []

    def test_required_only_set_locally_warns(self, schema):
        config = Configuration(schema)
        config.set("name", "svc")
        result = config.validate()
        assert result.valid
        assert [issue.key for issue in result.warnings] == ["name"]

    def test_raise_for_errors(self, schema):
        result = validate_config(Configuration(schema))
        with pytest.raises(ConfigValidationError) as exc_info:
            result.raise_for_errors()
        assert exc_info.value.errors == result.errors
        assert "name: required setting is not set" in str(exc_info.value)

    def test_raise_for_errors_on_valid_result(self):
        ValidationResult(valid=True).raise_for_errors()

    def test_type_changing_normalizer_is_valid(self):
        """Test that stored values are not run through their normalizer twice."""
        schema = Schema(
            [Slot("hosts", type="string", normalizer=lambda s: s.split(","))]
        )
        config = Configuration(schema, {"hosts": "a,b"})

        result = config.validate()
        assert config.get("hosts") == ["a", "b"]
        assert result.valid
        assert result.errors == []

    def test_normalizer_runs_once_per_write(self):
        calls = []

        def record(value):
            calls.append(value)
            return value.upper()

        schema = Schema([Slot("level", type="string", normalizer=record)])
        config = Configuration(schema, {"level": "high"})
        config.validate()
        assert calls == ["high"]

    def test_stored_unknown_key_is_an_error(self, schema):
        config = Configuration(schema, {"name": "svc"})
        config.store.target("base").write("ghost", 1)

        result = config.validate()
        assert [issue.key for issue in result.errors] == ["base:ghost"]
        assert result.errors[0].message == "unknown configuration key"


class TestConfigValidationError:
    """Tests for ConfigValidationError formatting."""

    def test_str_lists_errors_and_warnings(self):
        error = ConfigValidationError(
            "invalid",
            errors=[ValidationIssue("a", "bad", 1)],
            warnings=[ValidationIssue("b", "odd")],
        )
        text = str(error)
        assert text.splitlines() == [
            "invalid",
            "Errors:",
            "  - a: bad (got: 1)",
            "Warnings:",
            "  - b: odd",
        ]


class TestEngineOptions:
    """Tests for EngineOptions dataclass."""

    def test_default_values(self):
        options = EngineOptions()
        assert options.on_invalid is InvalidValuePolicy.RAISE
        assert options.listener_errors is ListenerErrorPolicy.LOG

    def test_strings_are_converted(self):
        options = EngineOptions(on_invalid="skip", listener_errors="raise")
        assert options.on_invalid is InvalidValuePolicy.SKIP
        assert options.listener_errors is ListenerErrorPolicy.RAISE

    def test_validation_on_invalid(self):
        with pytest.raises(ValueError, match="on_invalid"):
            EngineOptions(on_invalid="ignore")

    def test_validation_listener_errors(self):
        with pytest.raises(ValueError, match="listener_errors"):
            EngineOptions(listener_errors="print")

    def test_to_dict_from_dict(self):
        options = EngineOptions(on_invalid="skip")
        d = options.to_dict()
        assert d == {"on_invalid": "skip", "listener_errors": "log"}
        assert EngineOptions.from_dict(d) == options

    def test_from_dict_with_defaults(self):
        assert EngineOptions.from_dict({}) == EngineOptions()

    def test_listener_policy_reaches_configuration(self, schema):
        config = Configuration(schema, options=EngineOptions(listener_errors="raise"))

        def failing(key, old, new):
            raise RuntimeError("listener failed")

        config.watch("port", failing)
        with pytest.raises(RuntimeError, match="listener failed"):
            config.set("port", 9000)
        assert config.get("port") == 9000
