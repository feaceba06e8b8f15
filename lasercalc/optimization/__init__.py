"""
Process parameter optimization.

Heuristic search over power, speed, gas pressure and focus height with
DEAP (genetic, NSGA-II) and numpy (particle swarm, simulated annealing).
"""

from .evaluator import (
    OptimizationGoal,
    ProcessConstraints,
    ProcessProblem,
    ProcessEvaluator,
    GOAL_WEIGHTS,
    PARAMETER_NAMES,
    OBJECTIVE_NAMES,
)
from .ga_deap import GeneticAlgorithm, GAParameters, NSGA2Optimizer
from .advanced_algorithms import ParticleSwarm, PSOParameters, SimulatedAnnealing, SAParameters
from .runner import (
    OptimizationStrategy,
    OptimizationRun,
    ConvergenceMonitor,
    create_optimizer,
    run_optimization,
    optimize_process,
    pareto_front,
    alternative_solutions,
    parameter_sensitivity,
)

__all__ = [
    'OptimizationGoal',
    'ProcessConstraints',
    'ProcessProblem',
    'ProcessEvaluator',
    'GOAL_WEIGHTS',
    'PARAMETER_NAMES',
    'OBJECTIVE_NAMES',
    'GeneticAlgorithm',
    'GAParameters',
    'NSGA2Optimizer',
    'ParticleSwarm',
    'PSOParameters',
    'SimulatedAnnealing',
    'SAParameters',
    'OptimizationStrategy',
    'OptimizationRun',
    'ConvergenceMonitor',
    'create_optimizer',
    'run_optimization',
    'optimize_process',
    'pareto_front',
    'alternative_solutions',
    'parameter_sensitivity',
]
