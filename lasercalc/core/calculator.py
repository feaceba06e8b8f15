"""
The calculator contract.

A Calculator binds one InputSchema to one pure compute function, plus an
optional plausibility hook and a shipped example. Calculators hold no mutable
state: they are built once at import and reused for every request.

The generic container drives every calculator the same way:

    >>> calc = get_calculator("laser-parameter-optimizer")
    >>> validation = calc.validate_inputs(form_values)
    >>> if validation.is_valid:
    ...     result = calc.calculate(form_values)
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .result import CalculationResult, create_error_result, create_success_result
from .schema import InputSchema
from .validation import CustomValidation, ValidationResult, validate_inputs

logger = logging.getLogger(__name__)

ComputeFunction = Callable[[Dict[str, Any]], Any]


class CalculationError(ValueError):
    """Raised by compute functions when an internal invariant is violated."""


class CalculatorInfo(BaseModel):
    """Descriptive metadata of a calculator."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    title: str
    description: str = ""
    category: str = "Core Engineering"
    version: str = "1.0.0"
    latency_budget_ms: float = Field(default=100.0, gt=0)


class Calculator:
    """
    Thin adapter wiring schema, validation and compute together.

    Attributes:
        info: CalculatorInfo metadata
        schema: InputSchema of accepted fields
        compute: Pure function mapping normalized inputs to a result model
        custom_validation: Optional advisory plausibility hook
    """

    def __init__(
        self,
        info: CalculatorInfo,
        schema: InputSchema,
        compute: ComputeFunction,
        example_inputs: Mapping[str, Any],
        custom_validation: Optional[CustomValidation] = None
    ):
        """
        Initialize calculator.

        Raises:
            ValueError: If the example inputs do not pass the schema
        """
        self.info = info
        self.schema = schema
        self.compute = compute
        self.custom_validation = custom_validation
        self._example_inputs = dict(example_inputs)

        example_check = validate_inputs(schema, self._example_inputs)
        if not example_check.is_valid:
            fields = ", ".join(example_check.error_fields())
            raise ValueError(f"Example inputs for '{info.id}' fail validation: {fields}")

    def __repr__(self) -> str:
        return f"Calculator(id={self.info.id!r}, version={self.info.version!r})"

    @property
    def id(self) -> str:
        return self.info.id

    def validate_inputs(self, raw: Mapping[str, Any]) -> ValidationResult:
        """Validate raw input; never raises."""
        return validate_inputs(self.schema, raw, self.custom_validation)

    def calculate(self, raw: Mapping[str, Any]) -> CalculationResult:
        """
        Validate and compute, returning a result envelope.

        Invalid input and exceptions inside the compute function both produce
        ``success=False``; nothing propagates to the caller.
        """
        started = time.perf_counter()
        version = self.info.version

        validation = self.validate_inputs(raw)
        if not validation.is_valid:
            messages = "; ".join(issue.message for issue in validation.errors)
            logger.debug("%s: rejected invalid input (%s)", self.id, ", ".join(validation.error_fields()))
            return create_error_result(
                f"Invalid inputs: {messages}",
                raw if isinstance(raw, Mapping) else {},
                version=version,
                started=started
            )

        inputs = validation.values
        try:
            data = self.compute(dict(inputs))
        except Exception as e:
            result = create_error_result(
                f"Calculation failed: {e}", inputs, version=version, started=started
            )
            logger.warning(
                "%s: calculation failed for input %s: %s",
                self.id, result.metadata.input_hash, e, exc_info=True
            )
            return result

        result = create_success_result(data, inputs, version=version, started=started)
        logger.debug(
            "%s: computed input %s in %.2f ms",
            self.id, result.metadata.input_hash, result.metadata.calculation_time_ms
        )
        if result.metadata.calculation_time_ms > self.info.latency_budget_ms:
            logger.info(
                "%s: calculation took %.0f ms (budget %.0f ms)",
                self.id, result.metadata.calculation_time_ms, self.info.latency_budget_ms
            )
        return result

    def get_default_inputs(self) -> Dict[str, Any]:
        """Schema defaults for every field that declares one."""
        return self.schema.defaults()

    def get_example_inputs(self) -> Dict[str, Any]:
        """A complete, valid example input."""
        return dict(self._example_inputs)
