"""
Unit Tests for the Process Optimization Engine
==============================================

Searches here use small populations and generation counts.
"""

import numpy as np
import pytest

from lasercalc.calculators import process_optimization
from lasercalc.calculators.process_optimization import (
    CALCULATOR,
    build_problem,
    check_plausibility,
    current_parameters,
    improvement_percent,
    solution_tradeoffs,
)
from lasercalc.optimization import OptimizationGoal, ProcessEvaluator


def inputs(**overrides):
    values = CALCULATOR.get_example_inputs()
    values.update(population_size=12, generations=15)
    values.update(overrides)
    return CALCULATOR.validate_inputs(values).values


@pytest.fixture(scope="module")
def result():
    return process_optimization.compute(inputs())


class TestHelpers:
    """Test cases for input mapping and reporting helpers."""

    def test_build_problem(self):
        problem = build_problem(inputs(optimization_goal="time", max_cost=12.5))

        assert problem.goal == OptimizationGoal.TIME
        assert problem.constraints.max_time == 30
        assert problem.constraints.max_cost == 12.5
        assert problem.constraints.min_quality == 80
        assert problem.constraints.max_energy is None

    def test_no_current_parameters(self):
        values = inputs()
        assert current_parameters(values, ProcessEvaluator(build_problem(values))) is None

    def test_partial_current_parameters(self):
        values = inputs(current_power=2000, current_focus_height=-1.0)
        evaluator = ProcessEvaluator(build_problem(values))
        current = current_parameters(values, evaluator)

        assert current[0] == 2000
        assert current[1] == pytest.approx((500 + 8000) / 2)
        assert current[2] == pytest.approx((0.5 + 20) / 2)
        assert current[3] == -1.0

    def test_current_parameters_not_clipped(self):
        values = inputs(current_power=5000)
        evaluator = ProcessEvaluator(build_problem(values))

        assert current_parameters(values, evaluator)[0] == 5000

    @pytest.mark.parametrize("best, baseline, expected", [
        (0.6, 0.5, 20.0),
        (0.4, 0.5, 0.0),
        (0.5, 0.0, 100.0),
        (0.0, 0.0, 0.0),
    ])
    def test_improvement_percent(self, best, baseline, expected):
        assert improvement_percent(best, baseline) == pytest.approx(expected)

    def test_tradeoffs(self):
        assert solution_tradeoffs({"cost": 3, "time": 1, "quality": 90, "energy": 0.1}) == [
            "Well-balanced with minimal tradeoffs"
        ]
        assert "Reduced edge quality" in solution_tradeoffs({"cost": 3, "time": 1, "quality": 50, "energy": 0.1})


class TestCompute:
    """Test cases for compute."""

    def test_summary(self, result):
        summary = result.optimization_summary

        assert summary.algorithm == "genetic"
        assert summary.goal == "balanced"
        assert 1 <= summary.generations <= 15
        assert 0 <= summary.final_fitness <= 1
        assert summary.total_evaluations >= 12

    def test_history(self, result):
        history = result.convergence_history
        best = [point.best_fitness for point in history]

        assert len(history) == result.optimization_summary.generations
        assert [point.generation for point in history] == list(range(len(history)))
        assert all(b >= a for a, b in zip(best, best[1:]))

    def test_optimal_within_bounds(self, result):
        optimal = result.optimal_parameters

        assert 500 <= optimal.power <= 3000
        assert 500 <= optimal.speed <= 8000
        assert 0.5 <= optimal.gas_pressure <= 20
        assert -5 <= optimal.focus_height <= 2
        assert optimal.passes == 1
        assert optimal.frequency == 0

    def test_pareto_and_alternatives(self, result):
        assert 1 <= len(result.pareto_front) <= 10
        assert len(result.alternative_solutions) <= 5
        for alternative in result.alternative_solutions:
            assert 0 <= alternative.suitability <= 10
            assert alternative.tradeoffs

    def test_insights(self, result):
        insights = result.optimization_insights

        assert [entry.parameter for entry in insights.parameter_sensitivity] == [
            "power", "speed", "gas_pressure", "focus_height"
        ]
        assert max(entry.sensitivity for entry in insights.parameter_sensitivity) == pytest.approx(1.0)
        assert insights.recommendations[0].startswith("Focus on")

    def test_unreachable_quality_warned(self, result):
        """Steel quality tops out at 64, so min_quality 80 cannot be met."""
        assert any("does not satisfy all constraints" in w for w in result.warnings)
        assert any("Small population" in w for w in result.warnings)

    def test_deterministic(self, result):
        again = process_optimization.compute(inputs())
        assert again.model_dump() == result.model_dump()

    def test_seed_changes_search(self, result):
        other = process_optimization.compute(inputs(seed=7))
        assert other.convergence_history[0].model_dump() != result.convergence_history[0].model_dump()

    @pytest.mark.parametrize("algorithm", ["particle_swarm", "simulated_annealing", "multi_objective"])
    def test_every_algorithm(self, algorithm):
        data = process_optimization.compute(inputs(algorithm_type=algorithm, min_quality=None))

        assert data.optimization_summary.algorithm == algorithm
        assert not any("does not satisfy" in w for w in data.warnings)

    def test_current_parameters_baseline(self):
        data = process_optimization.compute(inputs(
            min_quality=None, current_power=2900, current_speed=600,
            current_gas_pressure=19, current_focus_height=1.5
        ))
        assert data.optimization_summary.improvement_percent > 0


class TestPlausibility:
    """Test cases for advisory warnings."""

    def test_example_is_clean(self):
        assert check_plausibility(inputs()) == []

    def test_complexity(self):
        codes = [issue.code for issue in check_plausibility(inputs(population_size=200, generations=300))]
        assert codes == ["HIGH_OPTIMIZATION_COMPLEXITY"]

    def test_tight_time(self):
        codes = [issue.code for issue in check_plausibility(inputs(max_time=2))]
        assert codes == ["TIGHT_TIME_CONSTRAINT"]

    def test_high_quality(self):
        codes = [issue.code for issue in check_plausibility(inputs(min_quality=98))]
        assert codes == ["HIGH_QUALITY_CONSTRAINT"]

    def test_insufficient_power(self):
        codes = [issue.code for issue in check_plausibility(inputs(laser_power=300))]
        assert codes == ["INSUFFICIENT_POWER"]

    def test_optional_constraints(self):
        values = inputs(max_time=None, min_quality=None)

        assert values["max_time"] is None
        assert check_plausibility(values) == []


def test_sensitivity_entries_are_finite(result):
    values = [entry.sensitivity for entry in result.optimization_insights.parameter_sensitivity]
    assert np.all(np.isfinite(values))
