"""
Tolerance Stack Calculator.

Worst-case and statistical (root-sum-square) stackup of feature tolerances,
accuracy and yield prediction, tolerance allocation and a quality control
plan for laser cut parts.

    worst case  = n * t_f
    RSS         = sqrt(n) * t_f
    yield       = 2 * Phi(3 * Cpk) - 1
"""

import math
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field
from scipy.stats import norm

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import MaterialProperties, get_material, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue

# base accuracy (mm), feature multiplier, process capability Cp
TOLERANCE_CLASSES = {
    "rough": (0.2, 2.0, 1.0),
    "standard": (0.1, 1.5, 1.33),
    "precision": (0.05, 1.0, 1.67),
    "ultra_precision": (0.02, 0.5, 2.0),
}

# clearance (mm), fit tolerance (mm)
ASSEMBLY_FITS = {
    "none": (0.0, 0.1),
    "loose_fit": (0.1, 0.05),
    "standard_fit": (0.05, 0.02),
    "precision_fit": (0.01, 0.01),
    "interference_fit": (-0.01, 0.005),
}

ENVIRONMENT_FACTORS = {"controlled": 1.0, "workshop": 1.1, "field": 1.3, "harsh": 1.5}

MEASUREMENT_UNCERTAINTY = {"manual": 0.05, "cmm": 0.002, "optical": 0.001, "laser_scanning": 0.005}

EXPECTED_FEATURES = {
    "simple": (1, 5),
    "moderate": (3, 15),
    "complex": (10, 30),
    "highly_complex": (20, 50),
}

COMPLEXITY_MULTIPLIER = {"simple": 1.0, "moderate": 1.2, "complex": 1.5, "highly_complex": 2.0}
COMPLEXITY_PENALTY = {"simple": 0.0, "moderate": 0.1, "complex": 0.2, "highly_complex": 0.3}
COMPLEXITY_RISK = {"simple": 1, "moderate": 3, "complex": 6, "highly_complex": 8}

CRITICAL_PATH = ["Primary datum", "Critical feature location", "Assembly interface", "Final dimension"]

SIGMA_LEVEL = 3.0
STATISTICAL_FEATURE_THRESHOLD = 10


class ToleranceAnalysis(BaseModel):
    total_stackup: float = Field(..., ge=0, description="mm")
    worst_case_stackup: float = Field(..., ge=0, description="mm")
    statistical_stackup: float = Field(..., ge=0, description="mm")
    stackup_method: str
    confidence_level: float = Field(..., ge=0, le=100, description="%")


class DimensionalChain(BaseModel):
    chain_length: float
    contributing_dimensions: int = Field(..., ge=1)
    critical_path: List[str]
    weakest_link: str
    chain_efficiency: float = Field(..., ge=0, le=1)


class AccuracyPrediction(BaseModel):
    expected_accuracy: float = Field(..., gt=0, description="mm")
    achievable_accuracy: float = Field(..., gt=0, description="mm")
    accuracy_grade: Literal["excellent", "good", "acceptable", "poor"]
    process_capability: float = Field(..., ge=0, description="Cp")
    yield_prediction: float = Field(..., ge=0, le=100, description="%")


class ToleranceAllocation(BaseModel):
    feature_tolerance: float = Field(..., gt=0, description="mm per feature")
    cumulative_error: float = Field(..., ge=0, description="mm")
    safety_factor: float
    allocation_strategy: str
    optimization_potential: float = Field(..., ge=0, le=100, description="%")


class ControlLimits(BaseModel):
    upper: float
    lower: float


class QualityControl(BaseModel):
    measurement_uncertainty: float = Field(..., ge=0, description="mm")
    inspection_strategy: str
    sampling_plan: str
    control_limits: ControlLimits
    spc_recommendations: List[str]


class RiskAssessment(BaseModel):
    risk_level: Literal["low", "medium", "high", "critical"]
    risk_score: float = Field(..., ge=0, le=10)
    risk_factors: List[str]
    mitigation_strategies: List[str]


class ToleranceStackResults(BaseModel):
    """Tolerance stackup analysis."""
    tolerance_analysis: ToleranceAnalysis
    dimensional_chain: DimensionalChain
    accuracy_prediction: AccuracyPrediction
    tolerance_allocation: ToleranceAllocation
    quality_control: QualityControl
    risk_assessment: RiskAssessment
    recommendations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(), value="steel"),
    select_field("part_complexity", "Part Complexity", [
        ("simple", "Simple (basic shapes)"),
        ("moderate", "Moderate (multiple features)"),
        ("complex", "Complex (intricate geometry)"),
        ("highly_complex", "Highly Complex (precision assembly)"),
    ], value="moderate"),
    number_field("number_of_features", "Number of Features", 1, 50, step=1, unit="features",
                 value=8, integer=True),
    number_field("overall_dimension", "Overall Dimension", 1, 1000, step=0.1, unit="mm", value=100),
    number_field("critical_dimension", "Critical Dimension", 0.1, 500, step=0.01, unit="mm", value=25,
                 description="Most critical dimension for function"),
    select_field("tolerance_class", "Tolerance Class", [
        ("rough", "Rough (±0.2 mm)"),
        ("standard", "Standard (±0.1 mm)"),
        ("precision", "Precision (±0.05 mm)"),
        ("ultra_precision", "Ultra Precision (±0.02 mm)"),
    ], value="precision"),
    select_field("assembly_requirement", "Assembly Requirement", [
        ("none", "No Assembly"),
        ("loose_fit", "Loose Fit"),
        ("standard_fit", "Standard Fit"),
        ("precision_fit", "Precision Fit"),
        ("interference_fit", "Interference Fit"),
    ], value="standard_fit"),
    select_field("measurement_method", "Measurement Method", [
        ("manual", "Manual Measurement"),
        ("cmm", "Coordinate Measuring Machine"),
        ("optical", "Optical Measurement"),
        ("laser_scanning", "Laser Scanning"),
    ], value="cmm"),
    select_field("environmental_conditions", "Environmental Conditions", [
        ("controlled", "Controlled Environment"),
        ("workshop", "Workshop Environment"),
        ("field", "Field Conditions"),
        ("harsh", "Harsh Environment"),
    ], value="workshop", required=False),
))


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    issues = []
    critical = inputs["critical_dimension"]
    overall = inputs["overall_dimension"]
    complexity = inputs["part_complexity"]
    features = inputs["number_of_features"]

    if critical > overall:
        issues.append(FieldIssue(
            field="critical_dimension",
            message="Critical dimension exceeds the overall dimension",
            code="CRITICAL_EXCEEDS_OVERALL"
        ))
    elif critical / overall > 0.8:
        issues.append(FieldIssue(
            field="critical_dimension",
            message="Critical dimension is very large relative to the overall dimension",
            code="LARGE_CRITICAL_DIMENSION"
        ))

    if complexity == "highly_complex" and inputs["tolerance_class"] == "rough":
        issues.append(FieldIssue(
            field="tolerance_class",
            message="Rough tolerance may not be suitable for highly complex parts",
            code="TOLERANCE_COMPLEXITY_MISMATCH"
        ))

    low, high = EXPECTED_FEATURES[complexity]
    if not (low <= features <= high):
        issues.append(FieldIssue(
            field="number_of_features",
            message=f"Number of features ({features}) seems inconsistent with {complexity} complexity",
            code="FEATURES_COMPLEXITY_MISMATCH"
        ))

    if inputs["tolerance_class"] == "ultra_precision" and inputs["measurement_method"] == "manual":
        issues.append(FieldIssue(
            field="measurement_method",
            message="Manual measurement may not be adequate for ultra precision tolerances",
            code="MEASUREMENT_PRECISION_MISMATCH"
        ))
    return issues


def _environment(inputs: Dict[str, Any]) -> str:
    return inputs.get("environmental_conditions") or "workshop"


def stackup(inputs: Dict[str, Any], material: MaterialProperties) -> ToleranceAnalysis:
    base, multiplier, _ = TOLERANCE_CLASSES[inputs["tolerance_class"]]
    n = inputs["number_of_features"]
    feature_tolerance = base * multiplier

    worst_case = n * feature_tolerance
    rss = math.sqrt(n) * feature_tolerance
    material_factor = 1.0 + (1.0 - material.tolerance.dimensional_stability) * 0.5
    total = rss * material_factor * ENVIRONMENT_FACTORS[_environment(inputs)]

    statistical = n > STATISTICAL_FEATURE_THRESHOLD
    # two-sided coverage of +/- 3 sigma for RSS, full coverage for worst case
    confidence = (2.0 * norm.cdf(SIGMA_LEVEL) - 1.0) * 100.0 if statistical else 100.0

    return ToleranceAnalysis(
        total_stackup=round(total, 4),
        worst_case_stackup=round(worst_case, 4),
        statistical_stackup=round(rss, 4),
        stackup_method="Statistical (RSS)" if statistical else "Worst Case",
        confidence_level=round(confidence, 2)
    )


def dimensional_chain(inputs: Dict[str, Any], material: MaterialProperties) -> DimensionalChain:
    length = inputs["overall_dimension"]
    contributing = min(inputs["number_of_features"], math.ceil(length / 10.0))

    if material.tolerance.machining_accuracy < 0.8:
        weakest = "Material machining accuracy"
    elif inputs["part_complexity"] == "highly_complex":
        weakest = "Complex geometry tolerance"
    else:
        weakest = "Standard manufacturing tolerance"

    efficiency = max(
        0.5,
        1.0 - COMPLEXITY_PENALTY[inputs["part_complexity"]]
        - (1.0 - material.tolerance.dimensional_stability) * 0.3
    )
    return DimensionalChain(
        chain_length=round(length, 2),
        contributing_dimensions=contributing,
        critical_path=CRITICAL_PATH[:min(4, contributing)],
        weakest_link=weakest,
        chain_efficiency=round(efficiency, 3)
    )


def accuracy(inputs: Dict[str, Any], material: MaterialProperties) -> AccuracyPrediction:
    base, _, cp = TOLERANCE_CLASSES[inputs["tolerance_class"]]
    expected = max(base, material.tolerance.achievable_accuracy * COMPLEXITY_MULTIPLIER[inputs["part_complexity"]])

    if expected <= base * 0.5:
        grade = "excellent"
    elif expected <= base:
        grade = "good"
    elif expected <= base * 2.0:
        grade = "acceptable"
    else:
        grade = "poor"

    capability = cp * material.tolerance.machining_accuracy
    # capability degrades when the expected spread exceeds the class budget
    cpk = capability * min(1.0, base / expected)
    part_yield = (2.0 * norm.cdf(SIGMA_LEVEL * cpk) - 1.0) * 100.0

    return AccuracyPrediction(
        expected_accuracy=round(expected, 4),
        achievable_accuracy=round(expected * 1.5, 4),
        accuracy_grade=grade,
        process_capability=round(capability, 2),
        yield_prediction=round(min(100.0, max(0.0, part_yield)), 2)
    )


def allocation(inputs: Dict[str, Any]) -> ToleranceAllocation:
    base, _, _ = TOLERANCE_CLASSES[inputs["tolerance_class"]]
    _, fit_tolerance = ASSEMBLY_FITS[inputs["assembly_requirement"]]
    n = inputs["number_of_features"]

    feature_tolerance = base / math.sqrt(n)
    cumulative = feature_tolerance * math.sqrt(n)
    potential = min(50.0, (cumulative / base - 1.0) * 100.0)

    return ToleranceAllocation(
        feature_tolerance=round(feature_tolerance, 4),
        cumulative_error=round(cumulative, 4),
        safety_factor=1.5 if fit_tolerance > 0 else 2.0,
        allocation_strategy="Statistical allocation with equal distribution"
        if n > STATISTICAL_FEATURE_THRESHOLD
        else "Worst-case allocation with critical feature priority",
        optimization_potential=round(max(0.0, potential), 1)
    )


def quality_control(inputs: Dict[str, Any]) -> QualityControl:
    base, _, _ = TOLERANCE_CLASSES[inputs["tolerance_class"]]
    tight = base <= 0.05
    control_range = base * 0.6

    spc = [
        "Implement X-bar and R charts for dimensional control",
        "Monitor process capability indices (Cp, Cpk)",
        "Establish control limits based on process variation",
    ]
    if tight:
        spc.append("Use pre-control charts for tight tolerances")
        spc.append("Implement real-time SPC monitoring")

    return QualityControl(
        measurement_uncertainty=MEASUREMENT_UNCERTAINTY[inputs["measurement_method"]],
        inspection_strategy="100% inspection with statistical process control"
        if tight else "Sampling inspection with periodic verification",
        sampling_plan="AQL 1.0 with reduced inspection"
        if inputs["number_of_features"] > 20 else "Normal inspection with AQL 2.5",
        control_limits=ControlLimits(upper=round(control_range / 2.0, 4), lower=round(-control_range / 2.0, 4)),
        spc_recommendations=spc
    )


def risk(inputs: Dict[str, Any], material: MaterialProperties,
         analysis: ToleranceAnalysis, prediction: AccuracyPrediction) -> RiskAssessment:
    stability = material.tolerance.dimensional_stability
    score = COMPLEXITY_RISK[inputs["part_complexity"]] + (1.0 - stability) * 3.0
    if analysis.total_stackup > prediction.achievable_accuracy * 2.0:
        score += 3.0
    if inputs["assembly_requirement"] in ("interference_fit", "precision_fit"):
        score += 2.0
    score = min(10.0, score)

    if score <= 3:
        level = "low"
    elif score <= 6:
        level = "medium"
    elif score <= 9:
        level = "high"
    else:
        level = "critical"

    factors = []
    if inputs["part_complexity"] == "highly_complex":
        factors.append("High part complexity increases tolerance accumulation")
    if stability < 0.8:
        factors.append("Material has poor dimensional stability")
    if inputs["number_of_features"] > 30:
        factors.append("Large number of features increases stackup risk")
    if inputs["assembly_requirement"] == "interference_fit":
        factors.append("Interference fit requires very tight tolerances")

    mitigation = [
        "Implement statistical process control",
        "Use coordinate measuring machine for verification",
        "Establish process capability studies",
    ]
    if level in ("high", "critical"):
        mitigation.append("Consider design for manufacturability review")
        mitigation.append("Implement 100% inspection for critical dimensions")

    return RiskAssessment(
        risk_level=level,
        risk_score=round(score, 1),
        risk_factors=factors,
        mitigation_strategies=mitigation
    )


def compute(inputs: Dict[str, Any]) -> ToleranceStackResults:
    """Analyze the tolerance stackup of a part."""
    material = get_material(inputs["material_type"])
    tolerance_class = inputs["tolerance_class"]

    analysis = stackup(inputs, material)
    prediction = accuracy(inputs, material)
    assessment = risk(inputs, material, analysis, prediction)

    recommendations = []
    if assessment.risk_level == "critical":
        recommendations.append("Critical tolerance risk - review design and manufacturing approach")
    if prediction.accuracy_grade == "poor":
        recommendations.append("Consider relaxing tolerance requirements or improving process capability")
    if inputs["part_complexity"] == "highly_complex" and tolerance_class == "ultra_precision":
        recommendations.append("Consider staged manufacturing approach for complex precision parts")
    if inputs["measurement_method"] == "manual" and tolerance_class in ("precision", "ultra_precision"):
        recommendations.append("Upgrade to coordinate measuring machine for precision measurement")
    if inputs["number_of_features"] > 20:
        recommendations.append("Implement statistical tolerance analysis for multi-feature parts")
    if inputs["assembly_requirement"] != "none":
        recommendations.append("Coordinate tolerance allocation with mating part requirements")

    warnings = []
    if assessment.risk_level == "critical":
        warnings.append("Critical tolerance stackup risk - parts may not meet assembly requirements")
    elif assessment.risk_level == "high":
        warnings.append("High tolerance risk - implement strict process control")
    if prediction.yield_prediction < 80:
        warnings.append("Low yield prediction - expect significant scrap or rework")
    if _environment(inputs) == "harsh" and tolerance_class == "ultra_precision":
        warnings.append("Harsh environment may compromise ultra-precision tolerances")
    if prediction.process_capability < 1.33:
        warnings.append("Process capability below acceptable level - improve process control")

    return ToleranceStackResults(
        tolerance_analysis=analysis,
        dimensional_chain=dimensional_chain(inputs, material),
        accuracy_prediction=prediction,
        tolerance_allocation=allocation(inputs),
        quality_control=quality_control(inputs),
        risk_assessment=assessment,
        recommendations=recommendations,
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="tolerance-stack-calculator",
        title="Tolerance Stack Calculator",
        description="Tolerance stackup, accuracy prediction and quality control planning",
        category="Quality Control"
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "part_complexity": "moderate",
        "number_of_features": 8,
        "overall_dimension": 100,
        "critical_dimension": 25,
        "tolerance_class": "precision",
        "assembly_requirement": "standard_fit",
        "measurement_method": "cmm",
        "environmental_conditions": "workshop",
    }
)
