"""
Quick Start Guide: Process Optimization
=======================================

This guide shows how to use the optimization module directly and through
the process-optimization-engine calculator.
"""

from lasercalc.calculators import get_calculator
from lasercalc.config import configure_logging
from lasercalc.core import get_material
from lasercalc.optimization import (
    OptimizationGoal,
    OptimizationStrategy,
    ProcessConstraints,
    ProcessEvaluator,
    ProcessProblem,
    create_optimizer,
    optimize_process,
    run_optimization,
)


def example_calculator():
    """Example 1: the calculator envelope."""
    calc = get_calculator("process-optimization-engine")
    result = calc.calculate(calc.get_example_inputs())

    summary = result.data.optimization_summary
    optimal = result.data.optimal_parameters
    print(f"Fitness {summary.final_fitness:.3f} after {summary.generations} generations")
    print(f"Power {optimal.power:.0f} W, speed {optimal.speed:.0f} mm/min, "
          f"gas {optimal.gas_pressure} bar, focus {optimal.focus_height} mm")
    for warning in result.data.warnings:
        print(f"  ! {warning}")


def example_compare_strategies():
    """Example 2: the same problem with every strategy."""
    problem = ProcessProblem(
        material=get_material("stainless_steel"),
        thickness=3.0,
        laser_power=4000.0,
        goal=OptimizationGoal.QUALITY,
        constraints=ProcessConstraints(max_time=20.0)
    )

    print("\n" + "=" * 60)
    print("COMPARISON SUMMARY")
    print("=" * 60)
    for strategy in OptimizationStrategy:
        run = optimize_process(problem, strategy, population_size=40, generations=60, seed=7)
        print(f"{strategy.value:20s}: Fitness = {run.best_fitness:.4f}, "
              f"Generations = {run.generations}, "
              f"Evaluations = {run.evaluator_stats['total_evaluations']}")


def example_streaming():
    """Example 3: per-generation progress."""
    problem = ProcessProblem(material=get_material("aluminum"), thickness=2.0, laser_power=3000.0)
    optimizer = create_optimizer(
        ProcessEvaluator(problem),
        OptimizationStrategy.PARTICLE_SWARM,
        population_size=30,
        generations=50,
        seed=1
    )

    print()
    for result in run_optimization(optimizer, tolerance=0.001):
        if result['generation'] % 10 == 0 or result['converged']:
            print(f"Gen {result['generation']:3d}: Fitness = {result['best_fitness']:.4f} "
                  f"(diversity {result['diversity']:.3f})")


if __name__ == "__main__":
    configure_logging()
    example_calculator()
    example_compare_strategies()
    example_streaming()
