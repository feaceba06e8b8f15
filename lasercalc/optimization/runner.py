"""
Unified Optimization Interface
================================

This module provides a facade for running the process parameter search
with different strategies (GA, NSGA-II, PSO, SA).

Main functions: run_optimization() (generator) and optimize_process().
"""

from typing import Dict, Any, Optional, List, Generator
from dataclasses import dataclass, field
from enum import Enum
import logging
import math

import numpy as np
from deap import tools
from deap.tools.emo import assignCrowdingDist

from .evaluator import ProcessEvaluator, ProcessProblem, PARAMETER_NAMES
from .ga_deap import GeneticAlgorithm, GAParameters, NSGA2Optimizer, multi_objective_individual
from .advanced_algorithms import ParticleSwarm, PSOParameters, SimulatedAnnealing, SAParameters

logger = logging.getLogger(__name__)

STALL_GENERATIONS = 20
TOLERANCE_WINDOW = 10
SENSITIVITY_STEP = 0.05  # Fraction of each parameter range


class OptimizationStrategy(Enum):
    """Available optimization strategies."""
    GENETIC = "genetic"  # Genetic Algorithm (DEAP)
    PARTICLE_SWARM = "particle_swarm"
    SIMULATED_ANNEALING = "simulated_annealing"
    MULTI_OBJECTIVE = "multi_objective"  # NSGA-II (DEAP)


class ConvergenceMonitor:
    """
    Stopping rule over the best-so-far fitness history.

    Stops after STALL_GENERATIONS generations without improvement, or when
    the best fitness moved less than tolerance over the last
    TOLERANCE_WINDOW generations.
    """

    def __init__(self, tolerance: float):
        if tolerance <= 0:
            raise ValueError("tolerance must be positive")
        self.tolerance = tolerance
        self.history: List[float] = []
        self.last_improvement = 0
        self.converged = False

    def update(self, best_fitness: float) -> bool:
        """Record one generation; return True when the search should stop."""
        gen = len(self.history)
        if not self.history or best_fitness > self.history[-1]:
            self.last_improvement = gen
        self.history.append(best_fitness)

        if gen - self.last_improvement >= STALL_GENERATIONS:
            self.converged = True
        elif gen >= TOLERANCE_WINDOW and best_fitness - self.history[gen - TOLERANCE_WINDOW] < self.tolerance:
            self.converged = True
        return self.converged


@dataclass
class OptimizationRun:
    """Outcome of a completed search."""
    strategy: OptimizationStrategy
    history: List[Dict[str, Any]]
    best_solution: np.ndarray
    best_fitness: float
    final_population: List[np.ndarray]
    converged: bool
    evaluator_stats: Dict[str, float] = field(default_factory=dict)

    @property
    def generations(self) -> int:
        return len(self.history)


def create_optimizer(
    evaluator: ProcessEvaluator,
    strategy: OptimizationStrategy,
    population_size: int,
    generations: int,
    seed: Optional[int] = None,
    custom_params: Optional[Dict[str, Any]] = None
) -> Any:
    """
    Build the optimizer for a strategy.

    Raises:
        ValueError: For an unknown strategy or invalid parameters
    """
    strategy = OptimizationStrategy(strategy)
    params = {'population_size': population_size, 'max_generations': generations, 'seed': seed}
    params.update(custom_params or {})

    if strategy == OptimizationStrategy.GENETIC:
        return GeneticAlgorithm(evaluator, GAParameters(**params))
    elif strategy == OptimizationStrategy.MULTI_OBJECTIVE:
        return NSGA2Optimizer(evaluator, GAParameters(**params))
    elif strategy == OptimizationStrategy.PARTICLE_SWARM:
        return ParticleSwarm(evaluator, PSOParameters(**params))
    elif strategy == OptimizationStrategy.SIMULATED_ANNEALING:
        return SimulatedAnnealing(evaluator, SAParameters(**params))

    raise ValueError(f"Unknown strategy: {strategy}")


def run_optimization(
    optimizer: Any,
    tolerance: float = 0.01
) -> Generator[Dict[str, Any], None, None]:
    """
    Run an optimizer until its generation limit or convergence.

    Yields:
        Dictionary with optimization results for each generation:
        - generation: int
        - best_solution: np.ndarray
        - best_fitness: float (non-decreasing)
        - n_evaluations: int
        - converged: bool (True only on the record that triggered the stop)

    Example:
        >>> for result in run_optimization(optimizer, tolerance=0.01):
        ...     print(f"Gen {result['generation']}: Fitness = {result['best_fitness']:.4f}")
    """
    monitor = ConvergenceMonitor(tolerance)
    steps = optimizer.optimize()
    try:
        for result in steps:
            result['converged'] = monitor.update(result['best_fitness'])
            result['evaluator_stats'] = optimizer.evaluator.get_statistics()
            yield result
            if result['converged']:
                break
    finally:
        steps.close()


def optimize_process(
    problem: ProcessProblem,
    strategy: OptimizationStrategy = OptimizationStrategy.GENETIC,
    population_size: int = 50,
    generations: int = 100,
    tolerance: float = 0.01,
    seed: Optional[int] = None,
    custom_params: Optional[Dict[str, Any]] = None
) -> OptimizationRun:
    """
    Run a complete search and collect its outcome.

    The same problem, strategy and seed always produce the same run.
    """
    strategy = OptimizationStrategy(strategy)
    evaluator = ProcessEvaluator(problem)
    optimizer = create_optimizer(evaluator, strategy, population_size, generations, seed, custom_params)

    history = list(run_optimization(optimizer, tolerance))
    final = history[-1]
    stats = evaluator.get_statistics()

    logger.info(
        "%s search finished after %d generations (converged=%s): fitness=%.4f, "
        "evaluations=%d, feasibility=%.0f%%",
        strategy.value, len(history), final['converged'], final['best_fitness'],
        stats['total_evaluations'], stats['feasibility_rate'] * 100.0
    )

    return OptimizationRun(
        strategy=strategy,
        history=history,
        best_solution=final['best_solution'],
        best_fitness=final['best_fitness'],
        final_population=optimizer.final_population(),
        converged=final['converged'],
        evaluator_stats=stats
    )


def _unique(solutions: List[np.ndarray]) -> List[np.ndarray]:
    seen = set()
    unique = []
    for x in solutions:
        key = tuple(np.round(np.asarray(x, dtype=float), 6))
        if key not in seen:
            seen.add(key)
            unique.append(np.asarray(x, dtype=float))
    return unique


def describe_solution(evaluator: ProcessEvaluator, x: np.ndarray) -> Dict[str, Any]:
    """Parameters, objectives and fitness of one candidate (not counted as an evaluation)."""
    objectives = evaluator.objectives(x)
    return {
        'parameters': evaluator.decode_parameters(x),
        'objectives': objectives,
        'fitness': evaluator.fitness_from_objectives(objectives)
    }


def pareto_front(
    evaluator: ProcessEvaluator,
    solutions: List[np.ndarray],
    limit: int = 10
) -> List[Dict[str, Any]]:
    """
    Non-dominated solutions over (cost, time, quality, energy).

    Solutions are ranked by crowding distance (boundary points first) and
    then by fitness. crowding_distance is None for boundary points.
    """
    individual_type = multi_objective_individual()
    individuals = []
    for x in _unique(solutions):
        ind = individual_type(x.tolist())
        ind.fitness.values = evaluator.objective_vector(x)
        individuals.append(ind)

    if not individuals:
        return []

    front = tools.sortNondominated(individuals, len(individuals), first_front_only=True)[0]
    assignCrowdingDist(front)

    described = []
    for ind in front:
        entry = describe_solution(evaluator, np.asarray(ind, dtype=float))
        distance = ind.fitness.crowding_dist
        entry['crowding_distance'] = None if math.isinf(distance) else float(distance)
        described.append((distance, entry))

    described.sort(key=lambda item: (-item[0], -item[1]['fitness']))
    return [entry for _, entry in described[:limit]]


def alternative_solutions(
    evaluator: ProcessEvaluator,
    best: np.ndarray,
    population: List[np.ndarray],
    limit: int = 5
) -> List[Dict[str, Any]]:
    """Best distinct candidates other than the optimum, by fitness."""
    best_key = tuple(np.round(np.asarray(best, dtype=float), 6))
    candidates = [
        describe_solution(evaluator, x)
        for x in _unique(population)
        if tuple(np.round(x, 6)) != best_key
    ]
    candidates.sort(key=lambda entry: -entry['fitness'])
    return candidates[:limit]


def impact_level(normalized: float) -> str:
    if normalized >= 0.75:
        return "critical"
    elif normalized >= 0.5:
        return "high"
    elif normalized >= 0.25:
        return "medium"
    return "low"


def parameter_sensitivity(evaluator: ProcessEvaluator, x: np.ndarray) -> Dict[str, Dict[str, Any]]:
    """
    Central-difference sensitivity of fitness to each parameter.

    Each parameter is moved by +/- SENSITIVITY_STEP of its range (clipped to
    bounds). Sensitivities are normalized so the largest is 1.
    """
    x = np.asarray(x, dtype=float)
    raw = []
    for i in range(len(x)):
        step = np.zeros_like(x)
        step[i] = SENSITIVITY_STEP * evaluator.diff[i]
        up = evaluator.fitness_from_objectives(evaluator.objectives(evaluator.clip(x + step)))
        down = evaluator.fitness_from_objectives(evaluator.objectives(evaluator.clip(x - step)))
        raw.append(abs(up - down))

    scale = max(raw) if max(raw) > 0 else 1.0
    sensitivity = {}
    for name, value in zip(PARAMETER_NAMES, raw):
        normalized = value / scale
        sensitivity[name] = {'sensitivity': normalized, 'impact': impact_level(normalized)}
    return sensitivity
