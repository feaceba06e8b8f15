"""
Laser Parameter Optimizer.

Recommends power, speed, gas pressure, focus position and nozzle for a
material/thickness/laser combination at a requested quality level.

Model:
    power ratio   = clamp(0.6 + t^0.8 / 100 * A, 0.4, 0.9)
    cutting speed = 12 * P * A * t^-1.2 * k_material * k_quality   (mm/min)
    gas pressure  = p0 * sqrt(t)   with p0 = 0.8 bar (O2) or 12 bar (N2/Ar)
    focus         = -0.3 * t

where A is the absorptivity of the material at the laser wavelength.
"""

import math
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import AssistGas, LaserType, get_material, laser_options, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue

# speed multiplier, base quality score
QUALITY_FACTORS = {
    "draft": (1.5, 0.60),
    "standard": (1.0, 0.80),
    "precision": (0.7, 0.95),
    "ultra_precision": (0.5, 0.98),
}

REFERENCE_SPEED = 3000.0  # mm/min, speed of best process match


class LaserParameterResults(BaseModel):
    """Recommended laser cutting parameters."""
    optimal_power: float = Field(..., gt=0, description="Recommended laser power (W)")
    cutting_speed: float = Field(..., gt=0, description="Cutting speed (mm/min)")
    gas_pressure: float = Field(..., gt=0, description="Assist gas pressure (bar)")
    focus_position: float = Field(..., le=0, description="Focus below surface (mm)")
    quality_prediction: float = Field(..., ge=0, le=1)
    efficiency: float = Field(..., ge=0, le=100, description="Power/speed efficiency (%)")
    gas_type: AssistGas
    nozzle_diameter: float = Field(..., gt=0, description="Nozzle diameter (mm)")
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(), value="steel",
                 description="Material to be cut"),
    number_field("thickness", "Material Thickness", 0.1, 100, step=0.1, unit="mm", value=5,
                 description="Sheet thickness"),
    select_field("laser_type", "Laser Type", laser_options(), value="fiber"),
    number_field("max_power", "Maximum Laser Power", 100, 50000, step=100, unit="W", value=3000,
                 description="Rated power of the laser source"),
    select_field("quality_requirement", "Quality Requirement", [
        ("draft", "Draft (fast, rough)"),
        ("standard", "Standard"),
        ("precision", "Precision"),
        ("ultra_precision", "Ultra Precision"),
    ], value="standard"),
))


def _absorptivity(inputs: Dict[str, Any]) -> float:
    return get_material(inputs["material_type"]).absorptivity[LaserType(inputs["laser_type"])]


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    """Advisory checks on laser/material/thickness combinations."""
    issues = []
    thickness = inputs["thickness"]

    if _absorptivity(inputs) < 0.1:
        issues.append(FieldIssue(
            field="laser_type",
            message=f"{inputs['laser_type']} laser has low absorptivity for {inputs['material_type']}; "
                    "consider a fiber laser",
            code="LOW_ABSORPTIVITY"
        ))

    if inputs["max_power"] / (thickness * thickness) < 50:
        issues.append(FieldIssue(
            field="max_power",
            message="Low power density may give poor cut quality or fail to cut through",
            code="LOW_POWER_DENSITY"
        ))

    if thickness > 50 and inputs["quality_requirement"] == "ultra_precision":
        issues.append(FieldIssue(
            field="thickness",
            message="Ultra precision cutting may not be achievable at this thickness",
            code="THICKNESS_PRECISION_CONFLICT"
        ))

    return issues


def optimal_power_ratio(thickness: float, absorptivity: float) -> float:
    """Fraction of rated power to use, between 0.4 and 0.9."""
    ratio = 0.6 + (thickness ** 0.8 / 100.0) * absorptivity
    return min(max(ratio, 0.4), 0.9)


def base_cutting_speed(power: float, thickness: float, absorptivity: float, speed_factor: float) -> float:
    """Cutting speed (mm/min) before the quality multiplier."""
    return 12.0 * power * absorptivity * thickness ** -1.2 * speed_factor


def nozzle_diameter(thickness: float) -> float:
    """Nozzle diameter (mm) by thickness band."""
    for limit, diameter in ((3, 1.0), (6, 1.5), (12, 2.0), (20, 2.5)):
        if thickness <= limit:
            return diameter
    return 3.0


def process_match(power: float, max_power: float, speed: float, absorptivity: float) -> float:
    """How well the base process suits the material, 0-1."""
    speed_optimality = max(0.0, 1.0 - abs(speed - REFERENCE_SPEED) / REFERENCE_SPEED)
    return (power / max_power + speed_optimality + absorptivity) / 3.0


def compute(inputs: Dict[str, Any]) -> LaserParameterResults:
    """Compute recommended laser parameters."""
    material = get_material(inputs["material_type"])
    thickness = inputs["thickness"]
    max_power = inputs["max_power"]
    absorptivity = _absorptivity(inputs)
    speed_multiplier, quality_score = QUALITY_FACTORS[inputs["quality_requirement"]]

    power = min(max_power * optimal_power_ratio(thickness, absorptivity), max_power * 0.9)
    base_speed = base_cutting_speed(power, thickness, absorptivity, material.cutting_speed_factor)
    speed = base_speed * speed_multiplier

    base_pressure = 0.8 if material.recommended_gas == AssistGas.OXYGEN else 12.0
    gas_pressure = base_pressure * math.sqrt(thickness)
    focus = -0.3 * thickness

    # Quality requirement scales the score; the process match does not depend on it
    quality = quality_score * (0.5 + 0.5 * process_match(power, max_power, base_speed, absorptivity))
    efficiency = (power / max_power * 100.0 + min(speed / 5000.0, 1.0) * 100.0) / 2.0

    recommendations = []
    if quality < 0.7:
        recommendations.append("Consider reducing cutting speed for better quality")
    if power / max_power > 0.85:
        recommendations.append("High power usage - ensure adequate cooling")
    if material.recommended_gas == AssistGas.NITROGEN and thickness > 10:
        recommendations.append("Consider using high-pressure nitrogen for thick sections")
    if inputs["laser_type"] == LaserType.CO2.value and inputs["material_type"] in ("aluminum", "copper", "brass"):
        recommendations.append("Fiber laser recommended for reflective metals")

    warnings = []
    if speed < 500:
        warnings.append("Very slow cutting speed may cause excessive heat buildup")
    if power >= max_power * 0.9:
        warnings.append("Operating near maximum power - monitor for overheating")
    if thickness > 25 and inputs["quality_requirement"] == "ultra_precision":
        warnings.append("Ultra precision may not be achievable at this thickness")

    return LaserParameterResults(
        optimal_power=min(round(power, 1), max_power * 0.9),
        cutting_speed=round(speed, 2),
        gas_pressure=round(gas_pressure, 1),
        focus_position=round(focus, 2),
        quality_prediction=round(quality, 2),
        efficiency=round(efficiency, 2),
        gas_type=material.recommended_gas,
        nozzle_diameter=nozzle_diameter(thickness),
        recommendations=recommendations,
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="laser-parameter-optimizer",
        title="Laser Parameter Optimizer",
        description="Optimal power, speed, gas pressure and focus for a material and thickness",
        category="Core Engineering"
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "thickness": 5,
        "laser_type": "fiber",
        "max_power": 3000,
        "quality_requirement": "standard",
    }
)
