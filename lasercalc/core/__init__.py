"""
Calculator contract: schemas, validation, result envelopes, material data.
"""

from .schema import (
    FieldKind,
    SelectOption,
    FieldSpec,
    InputSchema,
    number_field,
    select_field,
    text_field
)
from .validation import (
    FieldIssue,
    ValidationResult,
    validate_inputs,
    MISSING_REQUIRED,
    OUT_OF_RANGE,
    INVALID_OPTION,
    INVALID_NUMBER,
    INVALID_TYPE,
    CUSTOM_VALIDATION_FAILED
)
from .result import (
    ResultMetadata,
    CalculationResult,
    fingerprint_inputs,
    create_success_result,
    create_error_result
)
from .calculator import Calculator, CalculatorInfo, CalculationError
from .materials import (
    Material,
    LaserType,
    AssistGas,
    MaterialProperties,
    GasProperties,
    get_material,
    get_gas
)

__all__ = [
    'FieldKind',
    'SelectOption',
    'FieldSpec',
    'InputSchema',
    'number_field',
    'select_field',
    'text_field',
    'FieldIssue',
    'ValidationResult',
    'validate_inputs',
    'MISSING_REQUIRED',
    'OUT_OF_RANGE',
    'INVALID_OPTION',
    'INVALID_NUMBER',
    'INVALID_TYPE',
    'CUSTOM_VALIDATION_FAILED',
    'ResultMetadata',
    'CalculationResult',
    'fingerprint_inputs',
    'create_success_result',
    'create_error_result',
    'Calculator',
    'CalculatorInfo',
    'CalculationError',
    'Material',
    'LaserType',
    'AssistGas',
    'MaterialProperties',
    'GasProperties',
    'get_material',
    'get_gas',
]
