"""
Laser cutting calculators.

Every calculator module exposes one ``CALCULATOR`` instance; the registry
below is the only place that enumerates them.
"""

from typing import List

from ..core.calculator import Calculator
from . import (
    burn_marks,
    cutting_time,
    heat_affected_zone,
    laser_parameters,
    process_optimization,
    tolerance_stack,
    warping_risk,
)

# ============================================================================
# CALCULATOR REGISTRY (Factory Pattern)
# ============================================================================

CALCULATOR_REGISTRY = {
    calculator.id: calculator
    for calculator in (
        laser_parameters.CALCULATOR,
        cutting_time.CALCULATOR,
        burn_marks.CALCULATOR,
        heat_affected_zone.CALCULATOR,
        warping_risk.CALCULATOR,
        tolerance_stack.CALCULATOR,
        process_optimization.CALCULATOR,
    )
}


def get_calculator(calculator_id: str) -> Calculator:
    """
    Factory method to get a calculator.

    Args:
        calculator_id: Calculator identifier (e.g., "laser-parameter-optimizer")

    Returns:
        Calculator instance

    Raises:
        ValueError: If calculator_id not found in registry
    """
    if calculator_id not in CALCULATOR_REGISTRY:
        available = ", ".join(CALCULATOR_REGISTRY.keys())
        raise ValueError(f"Unknown calculator: {calculator_id}. Available: {available}")
    return CALCULATOR_REGISTRY[calculator_id]


def list_calculators() -> List[Calculator]:
    """Registered calculators in display order."""
    return list(CALCULATOR_REGISTRY.values())


__all__ = [
    'CALCULATOR_REGISTRY',
    'get_calculator',
    'list_calculators',
]
