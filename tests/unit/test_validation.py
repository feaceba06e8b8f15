"""
Unit Tests for Input Validation
===============================

Tests for structural checks, normalization and the plausibility hook.
"""

import logging
import math

import pytest

from lasercalc.core import (
    CUSTOM_VALIDATION_FAILED,
    INVALID_NUMBER,
    INVALID_OPTION,
    INVALID_TYPE,
    MISSING_REQUIRED,
    OUT_OF_RANGE,
    FieldIssue,
    InputSchema,
    number_field,
    select_field,
    text_field,
    validate_inputs,
)


@pytest.fixture
def schema():
    return InputSchema(specs=(
        number_field("thickness", "Material Thickness", 0.1, 100, value=5),
        number_field("pierce_count", "Number of Pierces", 1, 1000, integer=True),
        select_field("assist_gas", "Assist Gas", [("oxygen", "O2"), ("nitrogen", "N2")]),
        number_field("ambient_temperature", "Ambient Temperature", -10, 50, value=20, required=False),
        number_field("max_cost", "Maximum Cost", 0.1, 1000, required=False),
        text_field("note", "Note"),
    ))


@pytest.fixture
def valid():
    return {"thickness": 5, "pierce_count": 10, "assist_gas": "oxygen"}


def codes(issues):
    return {issue.field: issue.code for issue in issues}


class TestStructuralValidation:
    """Test cases for schema-driven errors."""

    def test_valid_input(self, schema, valid):
        result = validate_inputs(schema, valid)

        assert result.is_valid
        assert result.errors == []
        assert result.values["thickness"] == 5.0
        assert result.values["pierce_count"] == 10

    def test_missing_required(self, schema):
        result = validate_inputs(schema, {})

        assert not result.is_valid
        assert codes(result.errors) == {
            "thickness": MISSING_REQUIRED,
            "pierce_count": MISSING_REQUIRED,
            "assist_gas": MISSING_REQUIRED,
        }

    def test_blank_string_is_missing(self, schema, valid):
        result = validate_inputs(schema, {**valid, "thickness": "  "})
        assert codes(result.errors) == {"thickness": MISSING_REQUIRED}

    def test_all_errors_reported_at_once(self, schema):
        result = validate_inputs(schema, {"thickness": 500, "pierce_count": "abc", "assist_gas": "helium"})

        assert codes(result.errors) == {
            "thickness": OUT_OF_RANGE,
            "pierce_count": INVALID_NUMBER,
            "assist_gas": INVALID_OPTION,
        }
        assert result.error_fields() == ["thickness", "pierce_count", "assist_gas"]

    def test_range_message(self, schema, valid):
        result = validate_inputs(schema, {**valid, "thickness": 0.05})
        assert result.errors[0].message == "Material Thickness must be between 0.1 and 100"

    def test_bounds_are_inclusive(self, schema, valid):
        assert validate_inputs(schema, {**valid, "thickness": 0.1}).is_valid
        assert validate_inputs(schema, {**valid, "thickness": 100}).is_valid
        assert not validate_inputs(schema, {**valid, "thickness": 100.0001}).is_valid

    def test_numeric_strings_accepted(self, schema, valid):
        result = validate_inputs(schema, {**valid, "thickness": " 2.5 "})

        assert result.is_valid
        assert result.values["thickness"] == 2.5

    @pytest.mark.parametrize("value", [True, math.nan, math.inf, "1e400", [5]])
    def test_non_numbers_rejected(self, schema, valid, value):
        result = validate_inputs(schema, {**valid, "thickness": value})
        assert codes(result.errors) == {"thickness": INVALID_NUMBER}

    @pytest.mark.parametrize("field", ["thickness", "pierce_count"])
    def test_huge_integers_rejected(self, schema, valid, field):
        """Integers too large for a float are not numbers, not crashes."""
        for value in (10 ** 400, -(10 ** 400)):
            result = validate_inputs(schema, {**valid, field: value})
            assert codes(result.errors) == {field: INVALID_NUMBER}

    def test_integer_field(self, schema, valid):
        """Integral floats are accepted and cast; fractional values are not."""
        result = validate_inputs(schema, {**valid, "pierce_count": 12.0})
        assert result.values["pierce_count"] == 12
        assert isinstance(result.values["pierce_count"], int)

        result = validate_inputs(schema, {**valid, "pierce_count": 12.5})
        assert codes(result.errors) == {"pierce_count": INVALID_NUMBER}

    def test_option_is_case_sensitive(self, schema, valid):
        result = validate_inputs(schema, {**valid, "assist_gas": "Oxygen"})
        assert codes(result.errors) == {"assist_gas": INVALID_OPTION}

    def test_text_must_be_string(self, schema, valid):
        result = validate_inputs(schema, {**valid, "note": 42})
        assert codes(result.errors) == {"note": INVALID_TYPE}

    def test_optional_defaults(self, schema, valid):
        """Omitted optional fields take their default, or None without one."""
        result = validate_inputs(schema, valid)

        assert result.values["ambient_temperature"] == 20
        assert result.values["max_cost"] is None
        assert result.values["note"] is None

    def test_unknown_keys_dropped(self, schema, valid):
        result = validate_inputs(schema, {**valid, "colour": "red"})

        assert result.is_valid
        assert "colour" not in result.values

    def test_non_mapping_input(self, schema):
        result = validate_inputs(schema, None)

        assert not result.is_valid
        assert len(result.errors) == 3


class TestCustomValidation:
    """Test cases for the plausibility hook."""

    def test_issues_become_warnings(self, schema, valid):
        def check(values):
            return [FieldIssue(field="thickness", message="Thick", code="THICK")]

        result = validate_inputs(schema, valid, check)

        assert result.is_valid
        assert codes(result.warnings) == {"thickness": "THICK"}

    def test_receives_normalized_values(self, schema, valid):
        seen = {}

        def check(values):
            seen.update(values)
            return []

        validate_inputs(schema, {**valid, "thickness": "7"}, check)
        assert seen["thickness"] == 7.0
        assert seen["ambient_temperature"] == 20

    def test_skipped_on_errors(self, schema):
        called = []
        result = validate_inputs(schema, {}, lambda values: called.append(values) or [])

        assert called == []
        assert result.warnings == []

    def test_hook_failure_is_a_warning(self, schema, valid, caplog):
        def check(values):
            raise ZeroDivisionError("division by zero")

        with caplog.at_level(logging.WARNING, logger="lasercalc.core.validation"):
            result = validate_inputs(schema, valid, check)

        assert result.is_valid
        assert len(result.warnings) == 1
        assert result.warnings[0].code == CUSTOM_VALIDATION_FAILED
        assert result.warnings[0].field == ""
        assert "Custom validation failed" in caplog.text
