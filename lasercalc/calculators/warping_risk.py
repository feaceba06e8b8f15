"""
Warping Risk Calculator.

Thermal distortion risk of a rectangular part on a 0-10 scale. The score
adds four capped components:

    thermal    = min(3, 3 * sigma_th / sigma_y)
    geometric  = min(3, 2 * AR / 10 + (1 - support))
    material   = 2 * warping_tendency
    process    = min(2, 2 * P / (L * W) + 0.5 * (passes - 1))

with sigma_th = alpha * dT * E and dT = (P * 60 / v) / t / (rho * c / 1e6).
Residual stress is taken as 70 % of the thermal stress; deformation is the
elastic strain over the part length plus any plastic excess over yield.
"""

from typing import Any, Dict, List, Literal

import numpy as np
from pydantic import BaseModel, Field

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import MaterialProperties, get_material, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue

SUPPORT_FACTORS = {"none": 0.0, "minimal": 0.3, "moderate": 0.7, "extensive": 1.0}
COOLING_FACTORS = {"none": 0.1, "natural": 0.3, "forced": 0.6, "controlled": 1.0}
RESIDUAL_STRESS_RATIO = 0.7

RiskLevel = Literal["low", "medium", "high", "critical"]


class WarpingThermalAnalysis(BaseModel):
    peak_temperature: float = Field(..., description="degC")
    temperature_gradient: float = Field(..., ge=0, description="degC/mm")
    thermal_stress: float = Field(..., ge=0, description="MPa")
    cooling_rate: float = Field(..., ge=0, description="degC/s")
    heat_affected_area: float = Field(..., ge=0, description="mm2")


class MechanicalAnalysis(BaseModel):
    residual_stress: float = Field(..., ge=0, description="MPa")
    elastic_deformation: float = Field(..., ge=0, description="mm")
    plastic_deformation: float = Field(..., ge=0, description="mm")
    total_deformation: float = Field(..., ge=0, description="mm")
    stress_concentration: float = Field(..., ge=1)


class GeometricFactors(BaseModel):
    aspect_ratio: float = Field(..., ge=1, description="Long side / short side")
    thickness_ratio: float = Field(..., ge=0, description="Thickness / long side")
    support_adequacy: float = Field(..., ge=0, le=1)
    shape_complexity: float = Field(..., ge=0, le=1)


class ParameterAdjustments(BaseModel):
    recommended_power: float
    recommended_speed: float
    recommended_passes: int = Field(..., ge=1)


class WarpingPreventionStrategies(BaseModel):
    parameter_adjustments: ParameterAdjustments
    support_recommendations: List[str] = Field(default_factory=list)
    cooling_strategies: List[str] = Field(default_factory=list)
    sequence_optimization: List[str] = Field(default_factory=list)


class WarpingPredictions(BaseModel):
    expected_flatness: float = Field(..., ge=0, description="mm deviation")
    dimensional_accuracy: float = Field(..., ge=0, description="mm")
    warping_direction: str
    critical_areas: List[str] = Field(default_factory=list)


class WarpingRiskResults(BaseModel):
    """Warping risk score with thermal, mechanical and geometric breakdown."""
    overall_risk_score: float = Field(..., ge=0, le=10)
    risk_level: RiskLevel
    thermal_analysis: WarpingThermalAnalysis
    mechanical_analysis: MechanicalAnalysis
    geometric_factors: GeometricFactors
    prevention_strategies: WarpingPreventionStrategies
    predictions: WarpingPredictions
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(), value="steel"),
    number_field("thickness", "Material Thickness", 0.5, 50, step=0.1, unit="mm", value=3),
    number_field("length", "Part Length", 10, 3000, step=1, unit="mm", value=500),
    number_field("width", "Part Width", 10, 3000, step=1, unit="mm", value=200),
    number_field("laser_power", "Laser Power", 500, 20000, step=100, unit="W", value=2000),
    number_field("cutting_speed", "Cutting Speed", 100, 15000, step=10, unit="mm/min", value=2500),
    number_field("number_of_passes", "Number of Passes", 1, 10, step=1, unit="passes", value=1,
                 integer=True, required=False),
    select_field("support_type", "Support Type", [
        ("none", "No Support"),
        ("minimal", "Minimal Support"),
        ("moderate", "Moderate Support"),
        ("extensive", "Extensive Support"),
    ], value="moderate"),
    select_field("cooling_method", "Cooling Method", [
        ("none", "No Cooling"),
        ("natural", "Natural Cooling"),
        ("forced", "Forced Air Cooling"),
        ("controlled", "Controlled Cooling"),
    ], value="natural"),
    number_field("ambient_temperature", "Ambient Temperature", -10, 50, step=1, unit="°C", value=20,
                 required=False),
))


def aspect_ratio(inputs: Dict[str, Any]) -> float:
    return max(inputs["length"], inputs["width"]) / min(inputs["length"], inputs["width"])


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    issues = []
    ratio = aspect_ratio(inputs)

    if ratio > 10:
        issues.append(FieldIssue(
            field="length",
            message="High aspect ratio (>10:1) significantly increases warping risk",
            code="HIGH_ASPECT_RATIO"
        ))
    if inputs["thickness"] / max(inputs["length"], inputs["width"]) < 0.01:
        issues.append(FieldIssue(
            field="thickness",
            message="Very thin material relative to dimensions increases warping risk",
            code="THIN_MATERIAL"
        ))
    if inputs["laser_power"] / (inputs["length"] * inputs["width"]) > 1.0:
        issues.append(FieldIssue(
            field="laser_power",
            message="High power density may cause excessive thermal stress and warping",
            code="HIGH_POWER_DENSITY"
        ))
    if inputs["support_type"] == "none" and ratio > 5:
        issues.append(FieldIssue(
            field="support_type",
            message="Large parts without support are prone to warping. Consider adding support.",
            code="INADEQUATE_SUPPORT"
        ))
    return issues


def thermal_analysis(inputs: Dict[str, Any], material: MaterialProperties) -> WarpingThermalAnalysis:
    """Temperature rise from heat input per unit thickness; capped at the melting point."""
    ambient = inputs.get("ambient_temperature")
    ambient = 20.0 if ambient is None else ambient
    thickness = inputs["thickness"]

    heat_input = inputs["laser_power"] * 60.0 / inputs["cutting_speed"]
    rise = (heat_input / thickness) / (material.density * material.specific_heat / 1e6)
    rise = min(rise, material.melting_point - ambient)

    return WarpingThermalAnalysis(
        peak_temperature=round(ambient + rise),
        temperature_gradient=round(rise / (thickness * 2.0), 2),
        thermal_stress=round(material.thermal_expansion * rise * material.elastic_modulus, 1),
        cooling_rate=round(COOLING_FACTORS[inputs["cooling_method"]] * material.thermal_conductivity / 10.0, 1),
        heat_affected_area=round(float(np.pi * (thickness * 3.0) ** 2))
    )


def mechanical_analysis(inputs: Dict[str, Any], material: MaterialProperties,
                        thermal: WarpingThermalAnalysis) -> MechanicalAnalysis:
    residual = thermal.thermal_stress * RESIDUAL_STRESS_RATIO
    elastic = residual / material.elastic_modulus * inputs["length"]
    plastic = max(0.0, (residual - material.yield_strength) / material.elastic_modulus * inputs["length"])

    return MechanicalAnalysis(
        residual_stress=round(residual, 1),
        elastic_deformation=round(elastic, 3),
        plastic_deformation=round(plastic, 3),
        total_deformation=round(elastic + plastic, 3),
        stress_concentration=round(1.0 + (aspect_ratio(inputs) - 1.0) * 0.1, 2)
    )


def geometric_factors(inputs: Dict[str, Any]) -> GeometricFactors:
    ratio = aspect_ratio(inputs)
    return GeometricFactors(
        aspect_ratio=round(ratio, 2),
        thickness_ratio=round(inputs["thickness"] / max(inputs["length"], inputs["width"]), 4),
        support_adequacy=SUPPORT_FACTORS[inputs["support_type"]],
        shape_complexity=round(min(1.0, ratio / 10.0), 2)
    )


def warping_risk_score(inputs: Dict[str, Any], material: MaterialProperties,
                       thermal: WarpingThermalAnalysis, geometry: GeometricFactors) -> float:
    """Sum of the thermal, geometric, material and process components, 0-10."""
    thermal_risk = min(3.0, thermal.thermal_stress / material.yield_strength * 3.0)
    geometric_risk = min(3.0, geometry.aspect_ratio / 10.0 * 2.0 + (1.0 - geometry.support_adequacy))
    material_risk = material.warping_tendency * 2.0
    power_density = inputs["laser_power"] / (inputs["length"] * inputs["width"])
    process_risk = min(2.0, power_density * 2.0 + (inputs["number_of_passes"] - 1) * 0.5)

    return min(10.0, thermal_risk + geometric_risk + material_risk + process_risk)


def risk_level(score: float) -> RiskLevel:
    if score <= 3:
        return "low"
    if score <= 6:
        return "medium"
    if score <= 8:
        return "high"
    return "critical"


def prevention_strategies(inputs: Dict[str, Any], score: float) -> WarpingPreventionStrategies:
    support = []
    if inputs["support_type"] == "none" and score > 4:
        support.append("Add workpiece support to reduce warping")
    if score > 6:
        support.append("Use extensive support with clamping")
        support.append("Consider fixture design for thermal expansion")

    cooling = []
    if inputs["cooling_method"] == "none" and score > 3:
        cooling.append("Implement forced air cooling")
    if score > 6:
        cooling.append("Use controlled cooling between passes")
        cooling.append("Consider water-cooled fixtures")

    sequence = []
    if score > 5:
        sequence.append("Cut from center outward to balance thermal stress")
        sequence.append("Use skip cutting pattern to distribute heat")
        sequence.append("Allow cooling time between sections")

    return WarpingPreventionStrategies(
        parameter_adjustments=ParameterAdjustments(
            recommended_power=round(inputs["laser_power"] * (0.8 if score > 6 else 0.9)),
            recommended_speed=round(inputs["cutting_speed"] * (1.2 if score > 6 else 1.1)),
            recommended_passes=inputs["number_of_passes"] + (1 if score > 7 else 0)
        ),
        support_recommendations=support,
        cooling_strategies=cooling,
        sequence_optimization=sequence
    )


def predictions(inputs: Dict[str, Any], mechanical: MechanicalAnalysis,
                geometry: GeometricFactors) -> WarpingPredictions:
    critical_areas = []
    if geometry.aspect_ratio > 5:
        critical_areas.append("Ends of long dimension")
    if inputs["support_type"] == "none":
        critical_areas.append("Unsupported areas")
    if geometry.support_adequacy < 0.5:
        critical_areas.append("Center of the part")

    deformation = mechanical.total_deformation
    return WarpingPredictions(
        expected_flatness=round(deformation * (1.0 + geometry.aspect_ratio / 10.0), 3),
        dimensional_accuracy=round(deformation * 0.5, 3),
        warping_direction=("Primarily along the longer dimension" if geometry.aspect_ratio > 2
                           else "Uniform in all directions"),
        critical_areas=critical_areas
    )


def compute(inputs: Dict[str, Any]) -> WarpingRiskResults:
    """Assess warping risk and build a prevention plan."""
    material = get_material(inputs["material_type"])

    thermal = thermal_analysis(inputs, material)
    mechanical = mechanical_analysis(inputs, material, thermal)
    geometry = geometric_factors(inputs)
    score = round(warping_risk_score(inputs, material, thermal, geometry), 1)
    level = risk_level(score)

    recommendations = []
    if level == "critical":
        recommendations.append("Critical warping risk - consider alternative cutting strategy")
    if score > 6:
        recommendations.append("Reduce laser power and increase cutting speed")
        recommendations.append("Implement extensive workpiece support")
        recommendations.append("Use controlled cooling between passes")
    if inputs["support_type"] == "none" and score > 3:
        recommendations.append("Add workpiece support to minimize warping")
    if inputs["cooling_method"] == "none" and score > 4:
        recommendations.append("Implement active cooling to reduce thermal stress")
    if geometry.aspect_ratio > 8:
        recommendations.append("Consider cutting in sections for very long parts")
    if inputs["number_of_passes"] > 3:
        recommendations.append("Allow cooling time between multiple passes")

    warnings = []
    if level == "critical":
        warnings.append("Critical warping risk - parts may not meet dimensional tolerances")
    elif level == "high":
        warnings.append("High warping risk - implement prevention strategies")
    if inputs["support_type"] == "none" and score > 5:
        warnings.append("Unsupported cutting with high risk - expect significant warping")
    if inputs["thickness"] / max(inputs["length"], inputs["width"]) < 0.005:
        warnings.append("Very thin material - extremely prone to warping")
    if inputs["material_type"] == "aluminum" and score > 4:
        warnings.append("Aluminum has high thermal expansion - warping likely")

    return WarpingRiskResults(
        overall_risk_score=score,
        risk_level=level,
        thermal_analysis=thermal,
        mechanical_analysis=mechanical,
        geometric_factors=geometry,
        prevention_strategies=prevention_strategies(inputs, score),
        predictions=predictions(inputs, mechanical, geometry),
        recommendations=recommendations,
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="warping-risk-calculator",
        title="Warping Risk Calculator",
        description="Thermal distortion and warping risk with prevention strategies",
        category="Quality Control"
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "thickness": 3,
        "length": 500,
        "width": 200,
        "laser_power": 2000,
        "cutting_speed": 2500,
        "number_of_passes": 1,
        "support_type": "moderate",
        "cooling_method": "natural",
        "ambient_temperature": 20,
    }
)
