"""
Generic input validation against an InputSchema.

The validator never raises: every structural problem is collected into a
ValidationResult so the caller sees the complete error set at once.
Calculator-specific plausibility checks run only after the structural checks
pass and are always advisory.
"""

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .schema import FieldKind, FieldSpec, InputSchema, is_real_number

logger = logging.getLogger(__name__)

# Error codes
MISSING_REQUIRED = "MISSING_REQUIRED"
OUT_OF_RANGE = "OUT_OF_RANGE"
INVALID_OPTION = "INVALID_OPTION"
INVALID_NUMBER = "INVALID_NUMBER"
INVALID_TYPE = "INVALID_TYPE"
CUSTOM_VALIDATION_FAILED = "CUSTOM_VALIDATION_FAILED"


class FieldIssue(BaseModel):
    """A field-level error or advisory warning."""
    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    code: str


class ValidationResult(BaseModel):
    """
    Outcome of validating raw input.

    Attributes:
        errors: Structural errors; any error blocks execution
        warnings: Advisory warnings; never block execution
        values: Normalized input (numbers coerced, defaults filled in)
    """
    model_config = ConfigDict(frozen=True)

    errors: List[FieldIssue] = Field(default_factory=list)
    warnings: List[FieldIssue] = Field(default_factory=list)
    values: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def error_fields(self) -> List[str]:
        """Fields with at least one error, in order of first occurrence."""
        fields = []
        for issue in self.errors:
            if issue.field not in fields:
                fields.append(issue.field)
        return fields


CustomValidation = Callable[[Dict[str, Any]], List[FieldIssue]]


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _coerce_number(value: Any) -> Optional[float]:
    """Return value as float, or None if it is not a real number."""
    try:
        if is_real_number(value):
            return float(value)
        if isinstance(value, str):
            return float(value.strip())
    except (ValueError, OverflowError):
        return None
    return None


def _check_number(spec: FieldSpec, value: Any, errors: List[FieldIssue]) -> Optional[float]:
    number = _coerce_number(value)
    if number is None or not math.isfinite(number):
        errors.append(FieldIssue(
            field=spec.id,
            message=f"{spec.label} must be a finite number",
            code=INVALID_NUMBER
        ))
        return None

    if spec.integer and not number.is_integer():
        errors.append(FieldIssue(
            field=spec.id,
            message=f"{spec.label} must be a whole number",
            code=INVALID_NUMBER
        ))
        return None

    below = spec.min is not None and number < spec.min
    above = spec.max is not None and number > spec.max
    if below or above:
        errors.append(FieldIssue(
            field=spec.id,
            message=f"{spec.label} must be between {spec.min:g} and {spec.max:g}"
            if spec.min is not None and spec.max is not None
            else f"{spec.label} is out of range",
            code=OUT_OF_RANGE
        ))
        return None

    return int(number) if spec.integer else number


def _check_select(spec: FieldSpec, value: Any, errors: List[FieldIssue]) -> Optional[str]:
    allowed = spec.option_values()
    if not isinstance(value, str) or value not in allowed:
        errors.append(FieldIssue(
            field=spec.id,
            message=f"{spec.label} must be one of: {', '.join(allowed)}",
            code=INVALID_OPTION
        ))
        return None
    return allowed[allowed.index(value)]


def _check_text(spec: FieldSpec, value: Any, errors: List[FieldIssue]) -> Optional[str]:
    if not isinstance(value, str):
        errors.append(FieldIssue(
            field=spec.id,
            message=f"{spec.label} must be text",
            code=INVALID_TYPE
        ))
        return None
    return value


def validate_inputs(
    schema: InputSchema,
    raw: Mapping[str, Any],
    custom_validation: Optional[CustomValidation] = None
) -> ValidationResult:
    """
    Validate raw input against a schema.

    Args:
        schema: Calculator input schema
        raw: Untyped input mapping (e.g. form values); keys not in the schema
            are ignored
        custom_validation: Optional plausibility hook run on the normalized
            values when there are no structural errors

    Returns:
        ValidationResult with all errors and warnings
    """
    raw = raw if isinstance(raw, Mapping) else {}
    errors: List[FieldIssue] = []
    warnings: List[FieldIssue] = []
    values: Dict[str, Any] = {}

    for spec in schema.specs:
        value = raw.get(spec.id)

        if _is_missing(value):
            if spec.required:
                errors.append(FieldIssue(
                    field=spec.id,
                    message=f"{spec.label} is required",
                    code=MISSING_REQUIRED
                ))
            elif spec.value is not None:
                values[spec.id] = int(spec.value) if spec.integer else spec.value
            else:
                values[spec.id] = None
            continue

        if spec.kind == FieldKind.NUMBER:
            checked = _check_number(spec, value, errors)
        elif spec.kind == FieldKind.SELECT:
            checked = _check_select(spec, value, errors)
        else:
            checked = _check_text(spec, value, errors)

        if checked is not None:
            values[spec.id] = checked

    if not errors and custom_validation is not None:
        try:
            warnings.extend(custom_validation(dict(values)))
        except Exception as e:
            logger.warning("Custom validation failed: %s", e, exc_info=True)
            warnings.append(FieldIssue(
                field="",
                message=f"Plausibility checks could not be completed: {e}",
                code=CUSTOM_VALIDATION_FAILED
            ))

    return ValidationResult(errors=errors, warnings=warnings, values=values)
