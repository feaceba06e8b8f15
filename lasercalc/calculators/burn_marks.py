"""
Burn Mark Preventer.

Scores the risk of burn marks and discoloration on a 0-10 scale from power
density, assist gas effectiveness, surface condition and material
susceptibility, and proposes parameter, gas and surface countermeasures.
"""

import math
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import GasProperties, MaterialProperties, gas_options, get_gas, get_material, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue

SURFACE_FACTORS = {"clean": 0.2, "oily": 0.8, "oxidized": 0.6, "coated": 0.9}

# Simplified average properties for thermal stress
THERMAL_EXPANSION = 12e-6  # 1/K
ELASTIC_MODULUS = 200000.0  # MPa

# Fixed penalty per unit of gas incompatibility, independent of pressure
GAS_MISMATCH_WEIGHT = 1.0

RiskLevel = Literal["low", "medium", "high", "critical"]


class ThermalDamageAnalysis(BaseModel):
    heat_input: float = Field(..., ge=0, description="Heat input per unit length (J/mm)")
    surface_temperature: float = Field(..., description="Surface temperature (degC)")
    oxidation_risk: float = Field(..., ge=0, le=1)
    thermal_stress: float = Field(..., ge=0, description="MPa")
    cooling_rate: float = Field(..., ge=0, description="degC/s")


class BurnMarkFactors(BaseModel):
    power_density_factor: float = Field(..., ge=0, le=1)
    gas_effectiveness_factor: float = Field(..., ge=0, le=1)
    surface_condition_factor: float = Field(..., ge=0, le=1)
    material_susceptibility: float = Field(..., ge=0, le=1)
    geometry_factor: float = Field(..., ge=0, le=1)


class ParameterOptimization(BaseModel):
    recommended_power: float
    recommended_speed: float
    recommended_pressure: float
    recommended_standoff: float


class GasOptimization(BaseModel):
    optimal_gas_type: str
    flow_rate: float = Field(..., ge=0, description="L/min")
    purity_requirement: str
    cooling_effectiveness: float = Field(..., ge=0, le=1)


class PreventionStrategy(BaseModel):
    parameter_optimization: ParameterOptimization
    gas_optimization: GasOptimization
    surface_preparation: List[str] = Field(default_factory=list)
    process_modifications: List[str] = Field(default_factory=list)


class BurnQualityPrediction(BaseModel):
    expected_surface_quality: int = Field(..., ge=1, le=5)
    discoloration_risk: Literal["none", "minimal", "moderate", "severe"]
    oxidation_depth: float = Field(..., ge=0, description="um")
    heat_affected_zone: float = Field(..., ge=0, description="mm")


class BurnMarkResults(BaseModel):
    """Burn risk assessment and prevention plan."""
    burn_risk_level: RiskLevel
    burn_risk_score: float = Field(..., ge=0, le=10)
    thermal_damage_analysis: ThermalDamageAnalysis
    burn_mark_factors: BurnMarkFactors
    prevention_strategy: PreventionStrategy
    quality_prediction: BurnQualityPrediction
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(), value="steel"),
    number_field("thickness", "Material Thickness", 0.5, 50, step=0.5, unit="mm", value=5),
    number_field("laser_power", "Laser Power", 500, 20000, step=100, unit="W", value=2000),
    number_field("cutting_speed", "Cutting Speed", 100, 15000, step=50, unit="mm/min", value=2500),
    select_field("assist_gas", "Assist Gas", gas_options(), value="oxygen"),
    number_field("gas_pressure", "Gas Pressure", 0.1, 25, step=0.1, unit="bar", value=1.2),
    number_field("nozzle_standoff", "Nozzle Standoff", 0.5, 5, step=0.1, unit="mm", value=1.5,
                 description="Distance between nozzle tip and sheet surface"),
    select_field("surface_condition", "Surface Condition", [
        ("clean", "Clean"),
        ("oily", "Oily"),
        ("oxidized", "Oxidized / Rusty"),
        ("coated", "Coated / Painted"),
    ], value="clean"),
    number_field("ambient_temperature", "Ambient Temperature", -10, 50, step=1, unit="°C", value=20,
                 required=False),
))


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    """Advisory checks for burn-prone setups."""
    issues = []
    material = get_material(inputs["material_type"])

    if inputs["laser_power"] / inputs["thickness"] > 1000:
        issues.append(FieldIssue(
            field="laser_power",
            message="High power density increases burn mark risk; reduce power",
            code="HIGH_POWER_DENSITY"
        ))
    if inputs["assist_gas"] != material.recommended_gas.value:
        issues.append(FieldIssue(
            field="assist_gas",
            message=f"{material.recommended_gas.value} is recommended for {inputs['material_type']} "
                    "to minimize burn marks",
            code="SUBOPTIMAL_GAS"
        ))
    if inputs["surface_condition"] in ("oily", "coated"):
        issues.append(FieldIssue(
            field="surface_condition",
            message="Oily or coated surfaces significantly increase burn mark risk",
            code="CONTAMINATED_SURFACE"
        ))
    if inputs["nozzle_standoff"] > 2.0:
        issues.append(FieldIssue(
            field="nozzle_standoff",
            message="Large nozzle standoff reduces gas effectiveness",
            code="EXCESSIVE_STANDOFF"
        ))
    return issues


def thermal_damage(inputs: Dict[str, Any], material: MaterialProperties, gas: GasProperties) -> ThermalDamageAnalysis:
    """Heat input, surface temperature, oxidation risk, stress and cooling rate."""
    ambient = inputs.get("ambient_temperature")
    ambient = 20.0 if ambient is None else ambient

    heat_input = inputs["laser_power"] * 60.0 / inputs["cutting_speed"]
    power_density = inputs["laser_power"] / inputs["thickness"]
    temperature_rise = power_density / (material.specific_heat * material.thermal_conductivity / 1000.0)
    surface_temperature = ambient + temperature_rise

    threshold = material.oxidation_threshold
    oxidation_risk = min(1.0, max(0.0, (surface_temperature - threshold) / threshold))
    cooling_rate = gas.cooling_effect * material.cooling_efficiency * inputs["gas_pressure"] * 10.0

    return ThermalDamageAnalysis(
        heat_input=round(heat_input, 1),
        surface_temperature=round(surface_temperature, 1),
        oxidation_risk=round(oxidation_risk, 3),
        thermal_stress=round(THERMAL_EXPANSION * temperature_rise * ELASTIC_MODULUS, 1),
        cooling_rate=round(cooling_rate, 1)
    )


def gas_compatibility(assist_gas: str, material: MaterialProperties) -> float:
    """1.0 for the material's recommended gas, 0.7 otherwise."""
    return 1.0 if assist_gas == material.recommended_gas.value else 0.7


def burn_factors(inputs: Dict[str, Any], material: MaterialProperties) -> BurnMarkFactors:
    """Normalized burn mark contributors, each 0-1."""
    compatibility = gas_compatibility(inputs["assist_gas"], material)
    pressure_effect = min(1.0, inputs["gas_pressure"] / 10.0)
    standoff_effect = max(0.3, 1.0 - (inputs["nozzle_standoff"] - 1.0) / 3.0)

    return BurnMarkFactors(
        power_density_factor=min(1.0, inputs["laser_power"] / inputs["thickness"] / 1000.0),
        gas_effectiveness_factor=min(1.0, compatibility * pressure_effect * standoff_effect),
        surface_condition_factor=SURFACE_FACTORS[inputs["surface_condition"]],
        material_susceptibility=material.burn_susceptibility,
        geometry_factor=min(1.0, inputs["thickness"] / 10.0)
    )


def burn_risk_score(factors: BurnMarkFactors, thermal: ThermalDamageAnalysis, gas: GasProperties,
                    compatibility: float = 1.0) -> float:
    """
    Weighted burn risk, 0-10.

    The wrong gas costs a fixed amount on top of its effect on gas
    effectiveness, which fades at low pressure.
    """
    score = (
        factors.power_density_factor * 3.0
        + (1.0 - factors.gas_effectiveness_factor) * 2.0
        + factors.surface_condition_factor * 2.0
        + factors.material_susceptibility * 2.0
        # shielding gases suppress oxidation burn
        + thermal.oxidation_risk * (1.0 - gas.oxidation_prevention)
        + (1.0 - compatibility) * GAS_MISMATCH_WEIGHT
    )
    return min(10.0, max(0.0, score))


def risk_level(score: float) -> RiskLevel:
    if score <= 2.5:
        return "low"
    if score <= 5.0:
        return "medium"
    if score <= 7.5:
        return "high"
    return "critical"


def prevention_strategy(inputs: Dict[str, Any], material: MaterialProperties, score: float) -> PreventionStrategy:
    power_reduction = 0.8 if score > 6 else 0.9 if score > 4 else 1.0
    speed_increase = 1.3 if score > 6 else 1.15 if score > 4 else 1.0
    pressure_increase = 1.2 if score > 5 else 1.0
    optimal_gas = material.recommended_gas

    surface = inputs["surface_condition"]
    surface_preparation = []
    if surface != "clean":
        surface_preparation.append("Clean surface thoroughly before cutting")
    if surface == "oily":
        surface_preparation.append("Degrease with appropriate solvent")
    elif surface == "oxidized":
        surface_preparation.append("Remove rust and scale mechanically or chemically")
    elif surface == "coated":
        surface_preparation.append("Remove coating or adjust parameters for coated material")

    modifications = []
    if score > 6:
        modifications.append("Use multiple passes with reduced power")
        modifications.append("Implement active cooling between passes")
    if score > 4:
        modifications.append("Optimize cutting sequence to minimize heat buildup")
        modifications.append("Use pulsed mode if available")
    if inputs["material_type"] in ("titanium", "aluminum"):
        modifications.append("Maintain inert atmosphere during cutting")

    return PreventionStrategy(
        parameter_optimization=ParameterOptimization(
            recommended_power=round(inputs["laser_power"] * power_reduction),
            recommended_speed=round(inputs["cutting_speed"] * speed_increase),
            recommended_pressure=round(inputs["gas_pressure"] * pressure_increase, 1),
            recommended_standoff=round(min(1.5, inputs["nozzle_standoff"]), 1)
        ),
        gas_optimization=GasOptimization(
            optimal_gas_type=optimal_gas.value,
            flow_rate=round(inputs["gas_pressure"] * 15.0),
            purity_requirement="High (>99.9%)" if material.burn_susceptibility > 0.8 else "Standard (>99.5%)",
            cooling_effectiveness=get_gas(optimal_gas).cooling_effect
        ),
        surface_preparation=surface_preparation,
        process_modifications=modifications
    )


def quality_prediction(material: MaterialProperties, thermal: ThermalDamageAnalysis, score: float) -> BurnQualityPrediction:
    risk = thermal.oxidation_risk
    if risk < 0.2:
        discoloration = "none"
    elif risk < 0.5:
        discoloration = "minimal"
    elif risk < 0.8:
        discoloration = "moderate"
    else:
        discoloration = "severe"

    return BurnQualityPrediction(
        expected_surface_quality=int(round(max(1.0, min(5.0, 6.0 - score)))),
        discoloration_risk=discoloration,
        oxidation_depth=round(risk * 50.0, 1),
        heat_affected_zone=round(math.sqrt(thermal.heat_input / material.thermal_conductivity) * 0.5, 2)
    )


def compute(inputs: Dict[str, Any]) -> BurnMarkResults:
    """Assess burn mark risk and build a prevention plan."""
    material = get_material(inputs["material_type"])
    gas = get_gas(inputs["assist_gas"])
    optimal_gas = material.recommended_gas.value

    thermal = thermal_damage(inputs, material, gas)
    factors = burn_factors(inputs, material)
    compatibility = gas_compatibility(inputs["assist_gas"], material)
    score = round(burn_risk_score(factors, thermal, gas, compatibility), 2)
    level = risk_level(score)

    recommendations = []
    if level == "critical":
        recommendations.append("Critical burn risk - implement all prevention strategies immediately")
    if score > 6:
        recommendations.append("Reduce laser power and increase cutting speed")
        recommendations.append("Implement active cooling strategies")
    if inputs["surface_condition"] != "clean":
        recommendations.append("Clean and prepare surface before cutting")
    if inputs["assist_gas"] != optimal_gas:
        recommendations.append(f"Switch to {optimal_gas} for optimal results")
    if inputs["nozzle_standoff"] > 2.0:
        recommendations.append("Reduce nozzle standoff distance for better gas effectiveness")
    if inputs["material_type"] in ("titanium", "aluminum"):
        recommendations.append("Use high-purity inert gas to prevent oxidation")

    warnings = []
    if level == "critical":
        warnings.append("Critical burn risk - parts may have severe surface damage")
    elif level == "high":
        warnings.append("High burn risk - implement prevention strategies")
    if inputs["surface_condition"] in ("oily", "coated"):
        warnings.append("Surface contamination will significantly increase burn marks")
    if inputs["assist_gas"] == "oxygen" and inputs["material_type"] == "titanium":
        warnings.append("Oxygen with titanium will cause severe oxidation and burning")
    if inputs["assist_gas"] == "oxygen" and inputs["material_type"] == "aluminum":
        warnings.append("Oxygen with aluminum may cause excessive oxidation")
    if inputs["laser_power"] / inputs["thickness"] > 1500:
        warnings.append("Very high power density - expect significant thermal damage")

    return BurnMarkResults(
        burn_risk_level=level,
        burn_risk_score=score,
        thermal_damage_analysis=thermal,
        burn_mark_factors=factors,
        prevention_strategy=prevention_strategy(inputs, material, score),
        quality_prediction=quality_prediction(material, thermal, score),
        recommendations=recommendations,
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="burn-mark-preventer",
        title="Burn Mark Preventer",
        description="Burn mark risk assessment with parameter, gas and surface countermeasures",
        category="Quality Control"
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "thickness": 5,
        "laser_power": 2000,
        "cutting_speed": 2500,
        "assist_gas": "oxygen",
        "gas_pressure": 1.2,
        "nozzle_standoff": 1.5,
        "surface_condition": "clean",
        "ambient_temperature": 20,
    }
)
