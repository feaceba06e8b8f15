"""
Heat Affected Zone Calculator.

Simplified conduction model of the heat affected zone (HAZ) beside a laser
cut. The HAZ width follows the thermal diffusion length during the beam
interaction time:

    tau = d / v                         interaction time (s)
    w   = max(2 * sqrt(alpha * tau), 1.5 * d) * k_material
    dT  = A * E / (rho * c * t)         with E = P / v heat input per length

Pulsed operation narrows the zone by sqrt(duty / 100) with
duty = min(50, f / 1000).
"""

from typing import Any, Dict, List, Literal

import numpy as np
from pydantic import BaseModel, Field

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import LaserType, MaterialProperties, get_material, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue

AMBIENT_TEMPERATURE = 20.0  # degC
MAX_COOLING_RATE = 10000.0  # degC/s
PROFILE_STEPS = 10


class TemperaturePoint(BaseModel):
    distance: float = Field(..., ge=0, description="Distance from cut edge (mm)")
    temperature: float = Field(..., description="degC")


class MicrostructureChanges(BaseModel):
    grain_growth: str
    hardness_change: str
    phase_transformation: str
    severity: Literal["low", "medium", "high"]


class ThermalAnalysis(BaseModel):
    peak_temperature: float = Field(..., description="degC")
    heat_input: float = Field(..., gt=0, description="J/mm")
    thermal_stress: float = Field(..., ge=0, description="MPa")
    energy_density: float = Field(..., gt=0, description="J/mm2")
    interaction_time: float = Field(..., gt=0, description="s")


class HeatAffectedZoneResults(BaseModel):
    """HAZ geometry, thermal history and metallurgical impact."""
    haz_width: float = Field(..., gt=0, description="mm")
    haz_depth: float = Field(..., gt=0, description="mm")
    haz_volume: float = Field(..., ge=0, description="mm3")
    temperature_profile: List[TemperaturePoint]
    cooling_rate: float = Field(..., ge=0, le=MAX_COOLING_RATE, description="degC/s")
    microstructure_changes: MicrostructureChanges
    thermal_analysis: ThermalAnalysis
    control_recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(), value="steel"),
    number_field("thickness", "Material Thickness", 0.5, 50, step=0.1, unit="mm", value=5),
    number_field("laser_power", "Laser Power", 500, 20000, step=100, unit="W", value=3000),
    number_field("cutting_speed", "Cutting Speed", 100, 15000, step=50, unit="mm/min", value=2000),
    number_field("beam_diameter", "Beam Diameter", 0.05, 2.0, step=0.01, unit="mm", value=0.2,
                 required=False, description="Focused spot diameter"),
    number_field("pulse_frequency", "Pulse Frequency", 0, 50000, step=100, unit="Hz", value=0, integer=True,
                 required=False, description="0 for continuous wave"),
))


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    issues = []
    power = inputs["laser_power"]

    if power * 60.0 / inputs["cutting_speed"] > 1000:
        issues.append(FieldIssue(
            field="laser_power",
            message="High heat input may result in a large HAZ; reduce power or increase speed",
            code="HIGH_HEAT_INPUT"
        ))
    if inputs["material_type"] == "aluminum" and power < 2000:
        issues.append(FieldIssue(
            field="laser_power",
            message="Low power for aluminum may give poor cut quality due to high thermal conductivity",
            code="LOW_POWER_ALUMINUM"
        ))
    if inputs["material_type"] == "copper" and power < 3000:
        issues.append(FieldIssue(
            field="laser_power",
            message="Copper requires high power due to high conductivity and low absorptivity",
            code="LOW_POWER_COPPER"
        ))
    if power / inputs["thickness"] < 200:
        issues.append(FieldIssue(
            field="thickness",
            message="Low power-to-thickness ratio may result in incomplete penetration",
            code="LOW_POWER_DENSITY"
        ))
    return issues


def thermal_analysis(inputs: Dict[str, Any], material: MaterialProperties) -> ThermalAnalysis:
    power = inputs["laser_power"]
    speed_mm_s = inputs["cutting_speed"] / 60.0
    beam = inputs["beam_diameter"]

    heat_input = power / speed_mm_s
    rise = heat_input * material.absorptivity[LaserType.FIBER] / (
        material.density * material.specific_heat * inputs["thickness"] / 1000.0)

    return ThermalAnalysis(
        peak_temperature=min(AMBIENT_TEMPERATURE + rise, material.melting_point),
        heat_input=heat_input,
        thermal_stress=material.thermal_expansion * rise * material.elastic_modulus,
        energy_density=power / (speed_mm_s * beam),
        interaction_time=beam / speed_mm_s
    )


def haz_width(inputs: Dict[str, Any], material: MaterialProperties, interaction_time: float) -> float:
    """HAZ width (mm) from the diffusion length during beam interaction."""
    beam = inputs["beam_diameter"]
    diffusion_length = np.sqrt(material.thermal_diffusivity * interaction_time * 1000.0)
    width = max(2.0 * diffusion_length, 1.5 * beam)

    frequency = inputs["pulse_frequency"]
    if frequency > 0:
        duty = min(50.0, frequency / 1000.0)
        width *= np.sqrt(duty / 100.0)

    return float(width * material.haz_factor)


def temperature_profile(width: float, peak: float) -> List[TemperaturePoint]:
    """Gaussian decay of temperature across the HAZ."""
    distances = np.linspace(0.0, width, PROFILE_STEPS + 1)
    temperatures = peak * np.exp(-(distances / (width / 3.0)) ** 2)
    return [
        TemperaturePoint(distance=round(float(d), 3), temperature=round(float(T), 1))
        for d, T in zip(distances, temperatures)
    ]


def microstructure(material_type: str, peak: float, melting_point: float) -> MicrostructureChanges:
    grain_growth = "Minimal"
    hardness_change = "No significant change"
    phase = "None"
    severity = "low"

    if peak > melting_point * 0.8:
        grain_growth = "Significant grain growth"
        hardness_change = "Softening in HAZ"
        severity = "high"
        if material_type == "steel":
            phase = "Austenite formation and transformation"
    elif peak > melting_point * 0.6:
        grain_growth = "Moderate grain growth"
        hardness_change = "Slight softening"
        severity = "medium"
        if material_type == "steel":
            phase = "Partial austenite formation"
    elif peak > melting_point * 0.4:
        grain_growth = "Minor grain growth"
        hardness_change = "Minimal change"

    return MicrostructureChanges(
        grain_growth=grain_growth,
        hardness_change=hardness_change,
        phase_transformation=phase,
        severity=severity
    )


def compute(inputs: Dict[str, Any]) -> HeatAffectedZoneResults:
    """Estimate HAZ dimensions and thermal effects."""
    material = get_material(inputs["material_type"])
    thickness = inputs["thickness"]
    beam = inputs["beam_diameter"]

    thermal = thermal_analysis(inputs, material)
    width = haz_width(inputs, material, thermal.interaction_time)
    depth = min(width * 0.7, thickness)
    peak = thermal.peak_temperature

    length_m = thickness / 1000.0
    cooling_rate = min(peak / (length_m * length_m / material.thermal_diffusivity), MAX_COOLING_RATE)

    recommendations = []
    if width > 0.5:
        recommendations.append("Consider reducing laser power or increasing cutting speed to minimize HAZ")
    if inputs["pulse_frequency"] == 0 and width > 0.3:
        recommendations.append("Use pulsed mode to reduce heat input and HAZ size")
    if peak > material.melting_point * 0.8:
        recommendations.append("High peak temperature detected - consider using assist gas cooling")
    if inputs["material_type"] in ("aluminum", "copper"):
        recommendations.append("Use nitrogen assist gas to prevent oxidation in HAZ")
    if thickness > 10 and width > 0.4:
        recommendations.append("For thick sections, consider multiple pass cutting to reduce HAZ")

    warnings = []
    if width > 1.0:
        warnings.append("Large HAZ detected - may affect material properties significantly")
    if thermal.thermal_stress > material.yield_strength:
        warnings.append("Thermal stress exceeds yield strength - risk of distortion")
    if peak > material.melting_point * 0.9:
        warnings.append("Peak temperature near melting point - risk of excessive melting")

    return HeatAffectedZoneResults(
        haz_width=round(width, 4),
        haz_depth=round(depth, 4),
        haz_volume=round(width * depth * beam, 5),
        temperature_profile=temperature_profile(width, peak),
        cooling_rate=round(cooling_rate, 1),
        microstructure_changes=microstructure(inputs["material_type"], peak, material.melting_point),
        thermal_analysis=ThermalAnalysis(
            peak_temperature=round(peak, 1),
            heat_input=round(thermal.heat_input, 2),
            thermal_stress=round(thermal.thermal_stress, 1),
            energy_density=round(thermal.energy_density, 2),
            interaction_time=thermal.interaction_time
        ),
        control_recommendations=recommendations,
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="heat-affected-zone-calculator",
        title="Heat Affected Zone Calculator",
        description="HAZ width, depth, temperature profile and microstructure impact",
        category="Quality Control"
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "thickness": 5,
        "laser_power": 3000,
        "cutting_speed": 2000,
        "beam_diameter": 0.2,
        "pulse_frequency": 0,
    }
)
