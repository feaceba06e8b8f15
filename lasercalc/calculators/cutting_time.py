"""
Cutting Time Estimator.

Estimates piercing, cutting and rapid-move time for a part from tabulated
cutting speeds and pierce times, scaled to the requested thickness and power:

    v = v_table * (t / t_table)^-0.8 * (P / P_table)^0.6     (>= 100 mm/min)
    t_pierce = t_table_pierce * (t / t_table)^1.2 / min(P / 3000, 2)^0.3
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import Material, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue

# mm/min by material -> thickness (mm) -> power (W)
CUTTING_SPEEDS = {
    "steel": {
        1: {1000: 8000, 2000: 12000, 3000: 15000, 4000: 16000, 6000: 18000},
        2: {1000: 6000, 2000: 9000, 3000: 12000, 4000: 14000, 6000: 16000},
        3: {1000: 4500, 2000: 7000, 3000: 9500, 4000: 11000, 6000: 13000},
        5: {1000: 3000, 2000: 5000, 3000: 7000, 4000: 8500, 6000: 10000},
        8: {1000: 2000, 2000: 3500, 3000: 5000, 4000: 6000, 6000: 7500},
        10: {1000: 1500, 2000: 2800, 3000: 4000, 4000: 5000, 6000: 6200},
        15: {1000: 1000, 2000: 1800, 3000: 2500, 4000: 3200, 6000: 4000},
        20: {1000: 700, 2000: 1200, 3000: 1800, 4000: 2300, 6000: 2800},
        25: {1000: 500, 2000: 900, 3000: 1300, 4000: 1700, 6000: 2100},
    },
    "stainless_steel": {
        1: {1000: 6000, 2000: 9000, 3000: 11000, 4000: 12000, 6000: 13000},
        2: {1000: 4500, 2000: 6500, 3000: 8500, 4000: 9500, 6000: 11000},
        3: {1000: 3500, 2000: 5000, 3000: 6500, 4000: 7500, 6000: 8500},
        5: {1000: 2200, 2000: 3500, 3000: 4500, 4000: 5500, 6000: 6500},
        8: {1000: 1400, 2000: 2200, 3000: 3000, 4000: 3800, 6000: 4500},
        10: {1000: 1000, 2000: 1700, 3000: 2300, 4000: 2900, 6000: 3500},
        15: {1000: 600, 2000: 1000, 3000: 1400, 4000: 1800, 6000: 2200},
        20: {1000: 400, 2000: 700, 3000: 1000, 4000: 1300, 6000: 1600},
    },
    "aluminum": {
        1: {1000: 10000, 2000: 15000, 3000: 18000, 4000: 20000, 6000: 22000},
        2: {1000: 8000, 2000: 12000, 3000: 15000, 4000: 17000, 6000: 19000},
        3: {1000: 6500, 2000: 9500, 3000: 12000, 4000: 14000, 6000: 16000},
        5: {1000: 4500, 2000: 7000, 3000: 9000, 4000: 11000, 6000: 13000},
        8: {1000: 3000, 2000: 4500, 3000: 6000, 4000: 7500, 6000: 9000},
        10: {1000: 2200, 2000: 3500, 3000: 4500, 4000: 5500, 6000: 6500},
        15: {1000: 1500, 2000: 2300, 3000: 3000, 4000: 3700, 6000: 4500},
        20: {1000: 1000, 2000: 1600, 3000: 2100, 4000: 2600, 6000: 3200},
    },
}

# seconds per pierce by material -> thickness (mm)
PIERCE_TIMES = {
    "steel": {1: 0.1, 2: 0.2, 3: 0.3, 5: 0.5, 8: 0.8, 10: 1.2, 15: 2.0, 20: 3.0, 25: 4.5},
    "stainless_steel": {1: 0.15, 2: 0.3, 3: 0.45, 5: 0.7, 8: 1.2, 10: 1.8, 15: 3.0, 20: 4.5},
    "aluminum": {1: 0.08, 2: 0.15, 3: 0.25, 5: 0.4, 8: 0.6, 10: 0.9, 15: 1.5, 20: 2.2},
}

MIN_CUTTING_SPEED = 100.0  # mm/min
MIN_PIERCE_TIME = 0.05  # s
MOVING_TIME_RATIO = 0.1
HOURS_PER_DAY = 8
DAYS_PER_WEEK = 5


class TimeBreakdown(BaseModel):
    cutting: float = Field(..., ge=0, le=100)
    piercing: float = Field(..., ge=0, le=100)
    moving: float = Field(..., ge=0, le=100)


class ProductionMetrics(BaseModel):
    parts_per_hour: float = Field(..., ge=0)
    daily_capacity: int = Field(..., ge=0, description="Parts per 8-hour day")
    weekly_capacity: int = Field(..., ge=0, description="Parts per 5-day week")


class CuttingTimeResults(BaseModel):
    """Time estimate for one part (minutes)."""
    cutting_speed: float = Field(..., ge=MIN_CUTTING_SPEED, description="mm/min")
    piercing_time: float = Field(..., ge=0)
    cutting_time: float = Field(..., ge=0)
    moving_time: float = Field(..., ge=0)
    total_time: float = Field(..., gt=0)
    efficiency: float = Field(..., ge=0, le=100)
    time_breakdown: TimeBreakdown
    production_metrics: ProductionMetrics
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(
        [Material.STEEL, Material.STAINLESS_STEEL, Material.ALUMINUM]), value="steel"),
    number_field("thickness", "Material Thickness", 0.5, 50, step=0.1, unit="mm", value=5),
    number_field("cutting_length", "Total Cutting Length", 1, 100000, step=1, unit="mm", value=2000,
                 description="Total length of all cuts"),
    number_field("pierce_count", "Number of Pierces", 1, 1000, step=1, unit="pieces", value=10,
                 integer=True),
    number_field("laser_power", "Laser Power", 500, 20000, step=100, unit="W", value=3000),
))


def _closest(keys, target: float) -> float:
    return min(sorted(keys), key=lambda k: abs(k - target))


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    issues = []
    thickness = inputs["thickness"]
    max_thickness = max(CUTTING_SPEEDS[inputs["material_type"]])

    if thickness > max_thickness:
        issues.append(FieldIssue(
            field="thickness",
            message=f"Thickness {thickness:g} mm is beyond tabulated data for {inputs['material_type']} "
                    f"(maximum {max_thickness} mm)",
            code="THICKNESS_WARNING"
        ))
    if inputs["laser_power"] / thickness < 200:
        issues.append(FieldIssue(
            field="laser_power",
            message="Low power-to-thickness ratio may result in slow cutting speeds",
            code="LOW_POWER_DENSITY"
        ))
    if inputs["cutting_length"] > 50000:
        issues.append(FieldIssue(
            field="cutting_length",
            message="Very long cutting length; consider splitting into multiple jobs",
            code="LONG_CUTTING_LENGTH"
        ))
    if inputs["pierce_count"] / (inputs["cutting_length"] / 1000.0) > 50:
        issues.append(FieldIssue(
            field="pierce_count",
            message="High pierce density may significantly increase processing time",
            code="HIGH_PIERCE_DENSITY"
        ))
    return issues


def cutting_speed(material: str, thickness: float, power: float) -> float:
    """Cutting speed (mm/min) scaled from the nearest table entry."""
    table = CUTTING_SPEEDS[material]
    table_thickness = _closest(table, thickness)
    row = table[table_thickness]
    table_power = _closest(row, power)

    speed = row[table_power] * (thickness / table_thickness) ** -0.8 * (power / table_power) ** 0.6
    return max(speed, MIN_CUTTING_SPEED)


def pierce_time(material: str, thickness: float, power: float) -> float:
    """Seconds per pierce."""
    table = PIERCE_TIMES[material]
    table_thickness = _closest(table, thickness)

    seconds = table[table_thickness] * (thickness / table_thickness) ** 1.2
    seconds /= min(power / 3000.0, 2.0) ** 0.3
    return max(seconds, MIN_PIERCE_TIME)


def compute(inputs: Dict[str, Any]) -> CuttingTimeResults:
    """Estimate processing time and production capacity."""
    material = inputs["material_type"]
    thickness = inputs["thickness"]
    power = inputs["laser_power"]
    length = inputs["cutting_length"]
    pierces = inputs["pierce_count"]

    speed = cutting_speed(material, thickness, power)
    piercing = pierces * pierce_time(material, thickness, power) / 60.0
    cutting = length / speed
    moving = cutting * MOVING_TIME_RATIO
    total = cutting + piercing + moving

    efficiency = cutting / total * 100.0
    parts_per_hour = 60.0 / total
    pierce_density = pierces / (length / 1000.0)

    recommendations = []
    if speed < 1000:
        recommendations.append("Consider increasing laser power for faster cutting speeds")
    if total > 60:
        recommendations.append("Long processing time - consider optimizing cut path or nesting")
    if pierce_density > 20:
        recommendations.append("High pierce count - consider common line cutting to reduce pierces")
    if thickness > 15 and material == "aluminum":
        recommendations.append("For thick aluminum, consider nitrogen assist gas for better edge quality")

    warnings = []
    if efficiency < 60:
        warnings.append("Low cutting efficiency - high proportion of non-cutting time")
    if speed < 500:
        warnings.append("Very slow cutting speed may cause heat buildup and poor edge quality")
    if pierces > 500:
        warnings.append("Very high pierce count will significantly increase processing time")

    return CuttingTimeResults(
        cutting_speed=round(speed, 1),
        piercing_time=round(piercing, 2),
        cutting_time=round(cutting, 2),
        moving_time=round(moving, 2),
        total_time=round(total, 4),
        efficiency=round(efficiency, 2),
        time_breakdown=TimeBreakdown(
            cutting=round(cutting / total * 100.0, 2),
            piercing=round(piercing / total * 100.0, 2),
            moving=round(moving / total * 100.0, 2)
        ),
        production_metrics=ProductionMetrics(
            parts_per_hour=round(parts_per_hour, 2),
            daily_capacity=int(round(parts_per_hour * HOURS_PER_DAY)),
            weekly_capacity=int(round(parts_per_hour * HOURS_PER_DAY * DAYS_PER_WEEK))
        ),
        recommendations=recommendations,
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="cutting-time-estimator",
        title="Cutting Time Estimator",
        description="Piercing, cutting and moving time with production capacity",
        category="Core Engineering"
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "thickness": 5,
        "cutting_length": 2000,
        "pierce_count": 10,
        "laser_power": 3000,
    }
)
