"""
Result envelope returned by every calculator.
"""

import hashlib
import json
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ResultMetadata(BaseModel):
    """Metadata stamped on every calculation result."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    calculation_time_ms: float = Field(..., ge=0)
    version: str
    input_hash: str


class CalculationResult(BaseModel):
    """
    Success/failure wrapper around calculator output.

    Exactly one of ``data`` and ``error`` is set, depending on ``success``.
    """
    model_config = ConfigDict(frozen=True)

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    metadata: ResultMetadata

    @model_validator(mode="after")
    def validate_payload(self) -> "CalculationResult":
        """Enforce the data/error exclusivity invariant."""
        if self.success:
            if self.data is None or self.error is not None:
                raise ValueError("successful result must carry data and no error")
        else:
            if not self.error or self.data is not None:
                raise ValueError("failed result must carry an error message and no data")
        return self


def _canonical(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return str(value)


def fingerprint_inputs(inputs: Mapping[str, Any]) -> str:
    """
    Deterministic fingerprint of an input mapping.

    Key order does not matter and keys are compared as strings. Used for
    logging/analytics only.
    """
    canonical = {str(key): value for key, value in dict(inputs or {}).items()}
    payload = json.dumps(canonical, sort_keys=True, default=_canonical, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def _metadata(inputs: Mapping[str, Any], version: str, started: Optional[float]) -> ResultMetadata:
    elapsed_ms = 0.0 if started is None else max(0.0, (time.perf_counter() - started) * 1000.0)
    return ResultMetadata(
        timestamp=datetime.now(timezone.utc),
        calculation_time_ms=elapsed_ms,
        version=version,
        input_hash=fingerprint_inputs(inputs)
    )


def create_success_result(
    data: Any,
    inputs: Mapping[str, Any],
    *,
    version: str,
    started: Optional[float] = None
) -> CalculationResult:
    """
    Wrap compute output in a successful envelope.

    Args:
        data: Calculator output
        inputs: Validated inputs the output was computed from
        version: Calculator version
        started: ``time.perf_counter()`` reading taken before computing
    """
    return CalculationResult(success=True, data=data, metadata=_metadata(inputs, version, started))


def create_error_result(
    message: str,
    inputs: Mapping[str, Any],
    *,
    version: str,
    started: Optional[float] = None
) -> CalculationResult:
    """Wrap a failure message in an unsuccessful envelope."""
    return CalculationResult(
        success=False,
        error=message or "Calculation failed",
        metadata=_metadata(inputs, version, started)
    )
