"""
Process Optimization Engine.

Searches power, speed, gas pressure and focus height for the best
goal-weighted trade-off between cost, time, quality and energy, subject to
optional user limits. The search is a seeded heuristic (genetic, NSGA-II,
particle swarm or simulated annealing) bounded by the population size and
generation inputs, so a given input always produces the same result.
"""

from typing import Any, Dict, List, Literal, Optional

import numpy as np
from pydantic import BaseModel, Field

from ..core.calculator import Calculator, CalculatorInfo
from ..core.materials import get_material, material_options
from ..core.schema import InputSchema, number_field, select_field
from ..core.validation import FieldIssue
from ..optimization import (
    OptimizationGoal,
    OptimizationStrategy,
    ProcessConstraints,
    ProcessEvaluator,
    ProcessProblem,
    PARAMETER_NAMES,
    alternative_solutions,
    optimize_process,
    parameter_sensitivity,
    pareto_front,
)

MAX_COMPLEXITY = 50000  # population x generations
PARAMETER_LABELS = {
    "power": "Laser power",
    "speed": "Cutting speed",
    "gas_pressure": "Gas pressure",
    "focus_height": "Focus height",
}
CURRENT_FIELDS = {
    "power": "current_power",
    "speed": "current_speed",
    "gas_pressure": "current_gas_pressure",
    "focus_height": "current_focus_height",
}

ImpactLevel = Literal["low", "medium", "high", "critical"]


class ObjectiveValues(BaseModel):
    cost: float = Field(..., ge=0, description="USD")
    time: float = Field(..., ge=0, description="min")
    quality: float = Field(..., ge=0, le=100)
    energy: float = Field(..., ge=0, description="kWh")


class ProcessParameters(BaseModel):
    power: float = Field(..., gt=0, description="W")
    speed: float = Field(..., gt=0, description="mm/min")
    gas_pressure: float = Field(..., ge=0, description="bar")
    focus_height: float = Field(..., description="mm")


class OptimalParameters(ProcessParameters):
    frequency: float = Field(default=0.0, ge=0, description="Hz, 0 for continuous wave")
    passes: int = Field(default=1, ge=1)
    fitness_score: float = Field(..., ge=0, le=1)
    objectives: ObjectiveValues


class OptimizationSummary(BaseModel):
    algorithm: str
    goal: str
    generations: int = Field(..., ge=1)
    convergence_achieved: bool
    final_fitness: float = Field(..., ge=0, le=1)
    improvement_percent: float = Field(..., ge=0)
    total_evaluations: int = Field(..., ge=0)


class ParetoSolution(BaseModel):
    parameters: ProcessParameters
    objectives: ObjectiveValues
    dominance_rank: int = 1
    crowding_distance: Optional[float] = Field(default=None, description="None for boundary solutions")


class ConvergencePoint(BaseModel):
    generation: int = Field(..., ge=0)
    best_fitness: float = Field(..., ge=0, le=1)
    average_fitness: float = Field(..., ge=0, le=1)
    diversity: float = Field(..., ge=0)


class AlternativeSolution(BaseModel):
    name: str
    description: str
    parameters: ProcessParameters
    tradeoffs: List[str]
    suitability: float = Field(..., ge=0, le=10)


class SensitivityEntry(BaseModel):
    parameter: str
    sensitivity: float = Field(..., ge=0, le=1)
    impact: ImpactLevel


class OptimizationInsights(BaseModel):
    critical_parameters: List[str]
    parameter_sensitivity: List[SensitivityEntry]
    recommendations: List[str]
    implementation_guidance: List[str]


class ProcessOptimizationResults(BaseModel):
    """Outcome of the process parameter search."""
    optimization_summary: OptimizationSummary
    optimal_parameters: OptimalParameters
    pareto_front: List[ParetoSolution]
    convergence_history: List[ConvergencePoint]
    alternative_solutions: List[AlternativeSolution]
    optimization_insights: OptimizationInsights
    warnings: List[str] = Field(default_factory=list)


SCHEMA = InputSchema(specs=(
    select_field("material_type", "Material Type", material_options(), value="steel"),
    number_field("thickness", "Material Thickness", 0.1, 50, step=0.1, unit="mm", value=5),
    number_field("laser_power", "Available Laser Power", 100, 20000, step=100, unit="W", value=3000),
    select_field("optimization_goal", "Optimization Goal", [
        ("cost", "Minimize Cost"),
        ("time", "Minimize Time"),
        ("quality", "Maximize Quality"),
        ("energy", "Minimize Energy"),
        ("balanced", "Balanced Optimization"),
    ], value="balanced"),
    select_field("algorithm_type", "Optimization Algorithm", [
        ("genetic", "Genetic Algorithm"),
        ("particle_swarm", "Particle Swarm Optimization"),
        ("simulated_annealing", "Simulated Annealing"),
        ("multi_objective", "Multi-Objective (NSGA-II)"),
    ], value="genetic"),
    number_field("population_size", "Population Size", 10, 200, step=10, value=50, integer=True),
    number_field("generations", "Max Generations", 10, 500, step=10, value=100, integer=True),
    number_field("convergence_tolerance", "Convergence Tolerance", 0.001, 0.1, step=0.001, value=0.01),
    number_field("max_time", "Max Processing Time", 1, 1440, step=1, unit="min", required=False),
    number_field("max_cost", "Max Cost", 0.1, 1000, step=0.1, unit="USD", required=False),
    number_field("min_quality", "Min Quality Score", 60, 100, step=1, required=False),
    number_field("max_energy", "Max Energy", 0.1, 100, step=0.1, unit="kWh", required=False),
    number_field("current_power", "Current Power", 100, 20000, step=100, unit="W", required=False,
                 description="Parameters in use today, for the improvement estimate"),
    number_field("current_speed", "Current Speed", 100, 15000, step=50, unit="mm/min", required=False),
    number_field("current_gas_pressure", "Current Gas Pressure", 0.1, 30, step=0.1, unit="bar",
                 required=False),
    number_field("current_focus_height", "Current Focus Height", -10, 10, step=0.1, unit="mm",
                 required=False),
    number_field("seed", "Random Seed", 0, 2 ** 31 - 1, step=1, value=42, required=False, integer=True,
                 description="Same seed, same result"),
))


def check_plausibility(inputs: Dict[str, Any]) -> List[FieldIssue]:
    issues = []

    if inputs["population_size"] * inputs["generations"] > MAX_COMPLEXITY:
        issues.append(FieldIssue(
            field="population_size",
            message="High optimization complexity may require significant computation time",
            code="HIGH_OPTIMIZATION_COMPLEXITY"
        ))
    if inputs.get("max_time") is not None and inputs["max_time"] < 5:
        issues.append(FieldIssue(
            field="max_time",
            message="Very tight time constraint may limit optimization effectiveness",
            code="TIGHT_TIME_CONSTRAINT"
        ))
    if inputs.get("min_quality") is not None and inputs["min_quality"] > 95:
        issues.append(FieldIssue(
            field="min_quality",
            message="Very high quality requirement may significantly increase cost and time",
            code="HIGH_QUALITY_CONSTRAINT"
        ))
    power_range = get_material(inputs["material_type"]).process.power_range
    if inputs["laser_power"] < power_range[0]:
        issues.append(FieldIssue(
            field="laser_power",
            message="Available laser power may be insufficient for this material",
            code="INSUFFICIENT_POWER"
        ))
    return issues


def build_problem(inputs: Dict[str, Any]) -> ProcessProblem:
    return ProcessProblem(
        material=get_material(inputs["material_type"]),
        thickness=inputs["thickness"],
        laser_power=inputs["laser_power"],
        goal=OptimizationGoal(inputs["optimization_goal"]),
        constraints=ProcessConstraints(
            max_time=inputs.get("max_time"),
            max_cost=inputs.get("max_cost"),
            min_quality=inputs.get("min_quality"),
            max_energy=inputs.get("max_energy")
        )
    )


def current_parameters(inputs: Dict[str, Any], evaluator: ProcessEvaluator) -> Optional[np.ndarray]:
    """
    Current process as a parameter vector, or None if none was given.

    Missing entries take the middle of their search range. Values are not
    clipped to the search bounds.
    """
    values = [inputs.get(CURRENT_FIELDS[name]) for name in PARAMETER_NAMES]
    if all(value is None for value in values):
        return None
    midpoints = (evaluator.min_b + evaluator.max_b) / 2.0
    return np.array([mid if value is None else value for value, mid in zip(values, midpoints)], dtype=float)


def improvement_percent(best_fitness: float, baseline_fitness: float) -> float:
    """Relative fitness gain over the baseline (%), never negative."""
    if baseline_fitness <= 0:
        return 100.0 if best_fitness > 0 else 0.0
    return max(0.0, (best_fitness - baseline_fitness) / baseline_fitness * 100.0)


def _parameters(parameters: Dict[str, float]) -> ProcessParameters:
    return ProcessParameters(
        power=round(parameters["power"], 0),
        speed=round(parameters["speed"], 0),
        gas_pressure=round(parameters["gas_pressure"], 1),
        focus_height=round(parameters["focus_height"], 1)
    )


def _objectives(objectives: Dict[str, float]) -> ObjectiveValues:
    return ObjectiveValues(**{name: round(value, 2) for name, value in objectives.items()})


def describe_solution(objectives: Dict[str, float]) -> str:
    if objectives["cost"] < 5:
        return "Cost-optimized solution with good efficiency"
    if objectives["time"] < 10:
        return "Speed-optimized solution for high throughput"
    if objectives["quality"] > 85:
        return "Quality-focused solution for precision applications"
    return "Balanced solution with good overall performance"


def solution_tradeoffs(objectives: Dict[str, float]) -> List[str]:
    tradeoffs = []
    if objectives["cost"] > 8:
        tradeoffs.append("Higher material and energy costs")
    if objectives["time"] > 15:
        tradeoffs.append("Longer processing time")
    if objectives["quality"] < 75:
        tradeoffs.append("Reduced edge quality")
    if objectives["energy"] > 2:
        tradeoffs.append("Higher energy consumption")
    return tradeoffs or ["Well-balanced with minimal tradeoffs"]


def optimization_insights(sensitivity: Dict[str, Dict[str, Any]]) -> OptimizationInsights:
    ranked = sorted(PARAMETER_NAMES, key=lambda name: -sensitivity[name]['sensitivity'])
    critical = [name for name in ranked if sensitivity[name]['impact'] in ("critical", "high")]

    recommendations = [f"Focus on {PARAMETER_LABELS[ranked[0]].lower()} optimization for maximum impact"]
    for name in ranked:
        impact = sensitivity[name]['impact']
        if name != ranked[0] and impact in ("critical", "high"):
            recommendations.append(f"{PARAMETER_LABELS[name]} shows high sensitivity - implement precise control")
        elif impact == "low":
            recommendations.append(f"{PARAMETER_LABELS[name]} has low impact - standard settings acceptable")

    return OptimizationInsights(
        critical_parameters=critical,
        parameter_sensitivity=[
            SensitivityEntry(
                parameter=name,
                sensitivity=round(sensitivity[name]['sensitivity'], 3),
                impact=sensitivity[name]['impact']
            )
            for name in PARAMETER_NAMES
        ],
        recommendations=recommendations,
        implementation_guidance=[
            "Implement optimized parameters gradually",
            "Monitor quality metrics during transition",
            "Validate results with test cuts before production",
        ]
    )


def compute(inputs: Dict[str, Any]) -> ProcessOptimizationResults:
    """Run the seeded parameter search and summarize it."""
    problem = build_problem(inputs)
    population_size = int(inputs["population_size"])
    run = optimize_process(
        problem,
        strategy=OptimizationStrategy(inputs["algorithm_type"]),
        population_size=population_size,
        generations=int(inputs["generations"]),
        tolerance=inputs["convergence_tolerance"],
        seed=inputs.get("seed")
    )

    # Fresh evaluator for reporting so analysis does not count as search effort
    evaluator = ProcessEvaluator(problem)
    best = run.best_solution
    best_objectives = evaluator.objectives(best)
    best_fitness = evaluator.fitness_from_objectives(best_objectives)

    current = current_parameters(inputs, evaluator)
    if current is not None:
        baseline = evaluator.fitness_from_objectives(evaluator.objectives(current))
    else:
        baseline = run.history[0]['best_fitness']

    front = pareto_front(evaluator, run.final_population + [best])
    alternatives = alternative_solutions(evaluator, best, run.final_population)

    warnings = []
    if not run.converged:
        warnings.append("Optimization did not fully converge - consider increasing generations")
    if evaluator.penalty(best_objectives) > 0:
        warnings.append("Best solution does not satisfy all constraints - consider relaxing them")
    if best_fitness < 0.7:
        warnings.append("Optimization fitness is relatively low - constraints may be too restrictive")
    if population_size < 30:
        warnings.append("Small population size may limit solution diversity")
    if best_objectives["cost"] > 10:
        warnings.append("Optimized solution has high cost - consider relaxing quality constraints")
    if best_objectives["time"] > 20:
        warnings.append("Optimized solution has long processing time - consider speed-focused optimization")

    optimal = _parameters(evaluator.decode_parameters(best))
    return ProcessOptimizationResults(
        optimization_summary=OptimizationSummary(
            algorithm=run.strategy.value,
            goal=problem.goal.value,
            generations=run.generations,
            convergence_achieved=run.converged,
            final_fitness=round(best_fitness, 4),
            improvement_percent=round(improvement_percent(best_fitness, baseline), 1),
            total_evaluations=run.evaluator_stats['total_evaluations']
        ),
        optimal_parameters=OptimalParameters(
            **optimal.model_dump(),
            fitness_score=round(best_fitness, 3),
            objectives=_objectives(best_objectives)
        ),
        pareto_front=[
            ParetoSolution(
                parameters=_parameters(entry['parameters']),
                objectives=_objectives(entry['objectives']),
                crowding_distance=None if entry['crowding_distance'] is None
                else round(entry['crowding_distance'], 4)
            )
            for entry in front
        ],
        convergence_history=[
            ConvergencePoint(
                generation=record['generation'],
                best_fitness=round(record['best_fitness'], 4),
                average_fitness=round(record['average_fitness'], 4),
                diversity=round(record['diversity'], 4)
            )
            for record in run.history
        ],
        alternative_solutions=[
            AlternativeSolution(
                name=f"Alternative {i}",
                description=describe_solution(entry['objectives']),
                parameters=_parameters(entry['parameters']),
                tradeoffs=solution_tradeoffs(entry['objectives']),
                suitability=round(entry['fitness'] * 10.0, 1)
            )
            for i, entry in enumerate(alternatives, start=1)
        ],
        optimization_insights=optimization_insights(parameter_sensitivity(evaluator, best)),
        warnings=warnings
    )


CALCULATOR = Calculator(
    info=CalculatorInfo(
        id="process-optimization-engine",
        title="Process Optimization Engine",
        description="Seeded heuristic search for cost, time, quality and energy trade-offs",
        category="Advanced Optimization",
        latency_budget_ms=5000.0
    ),
    schema=SCHEMA,
    compute=compute,
    custom_validation=check_plausibility,
    example_inputs={
        "material_type": "steel",
        "thickness": 5,
        "laser_power": 3000,
        "optimization_goal": "balanced",
        "algorithm_type": "genetic",
        "population_size": 50,
        "generations": 100,
        "convergence_tolerance": 0.01,
        "max_time": 30,
        "min_quality": 80,
        "seed": 42,
    }
)
