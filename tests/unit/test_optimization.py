"""
Unit Tests for Optimization Module
===================================

Tests for the process evaluator, GA, NSGA-II, PSO and SA implementations
and the run helpers.
"""

import random

import numpy as np
import pytest
from deap import base

from lasercalc.core import get_material
from lasercalc.optimization import (
    GAParameters,
    GeneticAlgorithm,
    NSGA2Optimizer,
    OBJECTIVE_NAMES,
    PARAMETER_NAMES,
    ConvergenceMonitor,
    OptimizationGoal,
    OptimizationStrategy,
    ParticleSwarm,
    ProcessConstraints,
    ProcessEvaluator,
    ProcessProblem,
    PSOParameters,
    SAParameters,
    SimulatedAnnealing,
    alternative_solutions,
    create_optimizer,
    optimize_process,
    parameter_sensitivity,
    pareto_front,
    run_optimization,
)
from lasercalc.optimization.advanced_algorithms import _PopulationSearch
from lasercalc.optimization.ga_deap import SeededRandom, _register_operators, clip_unit
from lasercalc.optimization.runner import impact_level
from lasercalc.optimization.sampling import latin_hypercube, population_diversity


@pytest.fixture
def problem():
    return ProcessProblem(material=get_material("steel"), thickness=5.0, laser_power=3000.0)


@pytest.fixture
def evaluator(problem):
    return ProcessEvaluator(problem)


def dominates(a, b):
    """True if objective dict a dominates b (min cost/time/energy, max quality)."""
    no_worse = (a["cost"] <= b["cost"] and a["time"] <= b["time"]
                and a["energy"] <= b["energy"] and a["quality"] >= b["quality"])
    better = (a["cost"] < b["cost"] or a["time"] < b["time"]
              or a["energy"] < b["energy"] or a["quality"] > b["quality"])
    return no_worse and better


class TestProblem:
    """Test cases for ProcessProblem and ProcessConstraints."""

    def test_bounds_from_process_window(self, problem):
        bounds = problem.bounds

        assert problem.n_variables == 4
        assert bounds[0] == (500, 3000)
        assert bounds[1] == (500, 8000)
        assert bounds[2] == (0.5, 20)
        assert bounds[3] == (-5, 2)

    def test_power_window_follows_available_power(self):
        problem = ProcessProblem(material=get_material("steel"), thickness=2.0, laser_power=800.0)
        assert problem.bounds[0] == (400.0, 800.0)

    def test_goal_coerced(self):
        problem = ProcessProblem(material=get_material("steel"), thickness=5.0, laser_power=3000.0,
                                 goal="quality")
        assert problem.goal == OptimizationGoal.QUALITY
        assert problem.weights["quality"] == max(problem.weights.values())

    def test_invalid_problem(self):
        with pytest.raises(ValueError):
            ProcessProblem(material=get_material("steel"), thickness=0.0, laser_power=3000.0)
        with pytest.raises(ValueError):
            ProcessProblem(material=get_material("steel"), thickness=5.0, laser_power=-1.0)
        with pytest.raises(ValueError):
            ProcessProblem(material=get_material("steel"), thickness=5.0, laser_power=3000.0, goal="fastest")

    def test_constraint_validation(self):
        assert ProcessConstraints(max_time=30.0, min_quality=80.0).max_time == 30.0

        with pytest.raises(ValueError):
            ProcessConstraints(max_time=0)
        with pytest.raises(ValueError):
            ProcessConstraints(max_cost=-5)
        with pytest.raises(ValueError):
            ProcessConstraints(min_quality=120)
        with pytest.raises(ValueError):
            ProcessConstraints(penalty_weight=-1)


class TestEvaluator:
    """Test cases for ProcessEvaluator."""

    def test_denormalize(self, evaluator):
        np.testing.assert_allclose(evaluator.denormalize(np.zeros(4)), evaluator.min_b)
        np.testing.assert_allclose(evaluator.denormalize(np.ones(4)), evaluator.max_b)
        np.testing.assert_allclose(evaluator.denormalize(np.full(4, 2.0)), evaluator.max_b)

    def test_normalize_inverts_denormalize(self, evaluator):
        unit = np.array([0.1, 0.4, 0.7, 0.9])
        np.testing.assert_allclose(evaluator.normalize(evaluator.denormalize(unit)), unit)

    def test_objectives_at_ideal_point(self, evaluator):
        """Ideal power (200 W/mm), reference speed and focus at -t/3."""
        objectives = evaluator.objectives([1000.0, 3000.0, 1.0, -5.0 / 3.0])

        assert set(objectives) == set(OBJECTIVE_NAMES)
        assert objectives["quality"] == pytest.approx(64.0)
        assert objectives["time"] == pytest.approx(1000.0 / 3000.0 * np.sqrt(2.0))
        assert objectives["cost"] == pytest.approx(2.5 + 0.02 * 0.12 + 0.1)
        assert objectives["energy"] == pytest.approx(objectives["time"] / 60.0 * 0.9)

    def test_quality_clamped(self, evaluator):
        objectives = evaluator.objectives([3000.0, 500.0, 20.0, 2.0])
        assert 0.0 <= objectives["quality"] <= 100.0

    def test_fitness_range(self, evaluator):
        for unit in latin_hypercube(20, 4, seed=0):
            fitness = evaluator.fitness(evaluator.denormalize(unit))
            assert 0.0 <= fitness <= 1.0

    def test_unconstrained_is_feasible(self, evaluator):
        assert evaluator.penalty(evaluator.objectives([1000.0, 3000.0, 1.0, -1.7])) == 0.0

    def test_quality_constraint_penalized(self, problem):
        problem.constraints = ProcessConstraints(min_quality=80.0)
        evaluator = ProcessEvaluator(problem)
        objectives = evaluator.objectives([1000.0, 3000.0, 1.0, -5.0 / 3.0])

        assert evaluator.penalty(objectives) == pytest.approx((80.0 - 64.0) / 80.0 * 0.5)

    def test_statistics(self, problem):
        problem.constraints = ProcessConstraints(min_quality=80.0)
        evaluator = ProcessEvaluator(problem)
        for unit in latin_hypercube(10, 4, seed=1):
            evaluator.evaluate(evaluator.denormalize(unit))

        stats = evaluator.get_statistics()
        assert stats['total_evaluations'] == 10
        assert stats['feasible'] + stats['infeasible'] == 10
        assert stats['infeasible'] == 10  # steel quality tops out at 64

    def test_evaluate_returns_tuple(self, evaluator):
        result = evaluator.evaluate([1000.0, 3000.0, 1.0, -1.7])

        assert isinstance(result, tuple)
        assert len(result) == 1

    def test_decode(self, evaluator):
        assert list(evaluator.decode_parameters([1, 2, 3, 4])) == list(PARAMETER_NAMES)


class TestSampling:
    """Test cases for Latin Hypercube sampling."""

    def test_stratified(self):
        samples = latin_hypercube(10, 4, seed=5)

        assert samples.shape == (10, 4)
        for column in samples.T:
            assert sorted(np.floor(column * 10).astype(int)) == list(range(10))

    def test_seeded(self):
        np.testing.assert_array_equal(latin_hypercube(8, 4, seed=5), latin_hypercube(8, 4, seed=5))

    def test_diversity(self):
        assert population_diversity([[0.5, 0.5]]) == 0.0
        assert population_diversity([[0.0, 0.0], [3.0, 4.0]]) == pytest.approx(5.0)


class TestOperators:
    """Test cases for the clipped DEAP operators and the seeded random state."""

    @pytest.fixture
    def toolbox(self):
        toolbox = base.Toolbox()
        _register_operators(toolbox, GAParameters(blend_alpha=0.5, mutation_sigma=0.5, mutation_indpb=1.0))
        return toolbox

    def test_blend_stays_in_unit_box(self, toolbox):
        random.seed(0)
        for _ in range(50):
            a, b = toolbox.mate([0.0, 1.0, 0.5], [1.0, 0.0, 0.9])
            assert all(0.0 <= g <= 1.0 for g in a + b)

    def test_mutation_stays_in_unit_box(self, toolbox):
        random.seed(0)
        individual = [0.0, 1.0, 0.5, 0.99]
        for _ in range(50):
            individual, = toolbox.mutate(individual)
            assert all(0.0 <= g <= 1.0 for g in individual)

    def test_clip_unit(self):
        clipped = clip_unit(lambda a, b: (a, b))
        assert clipped([-0.5, 0.5], [1.5, 1.0]) == ([0.0, 0.5], [1.0, 1.0])

    def test_seeded_state_repeats(self):
        first, second = SeededRandom(3), SeededRandom(3)
        with first:
            a = [random.random() for _ in range(5)]
        with second:
            b = [random.random() for _ in range(5)]
        assert a == b

    def test_seeded_state_restores_caller_state(self):
        state = SeededRandom(3)
        random.seed(42)
        expected = random.random()

        random.seed(42)
        with state:
            random.random()
        assert random.random() == expected

    def test_seeded_state_continues_between_steps(self):
        state = SeededRandom(3)
        with state:
            a = random.random()
        random.random()
        with state:
            b = random.random()

        rng = random.Random(3)
        assert [a, b] == [rng.random(), rng.random()]


class TestParameters:
    """Test cases for algorithm parameter validation."""

    def test_ga_parameters(self):
        params = GAParameters(population_size=20, max_generations=10, seed=1)
        assert params.crossover_prob == 0.8

        with pytest.raises(ValueError):
            GAParameters(population_size=2)
        with pytest.raises(ValueError):
            GAParameters(crossover_prob=1.5)
        with pytest.raises(ValueError):
            GAParameters(tournament_size=1)
        with pytest.raises(ValueError):
            GAParameters(population_size=10, elite_size=10)
        with pytest.raises(ValueError):
            GAParameters(mutation_indpb=0.0)

    def test_pso_parameters(self):
        with pytest.raises(ValueError):
            PSOParameters(inertia=1.5)
        with pytest.raises(ValueError):
            PSOParameters(cognitive=-1.0)
        with pytest.raises(ValueError):
            PSOParameters(max_velocity=0.0)

    def test_sa_parameters(self):
        with pytest.raises(ValueError):
            SAParameters(initial_temperature=0.0)
        with pytest.raises(ValueError):
            SAParameters(cooling_rate=1.0)
        with pytest.raises(ValueError):
            SAParameters(step_size=0.0)


class TestAlgorithms:
    """Test cases shared by every search strategy."""

    @pytest.mark.parametrize("strategy", list(OptimizationStrategy))
    def test_progress_records(self, problem, strategy):
        optimizer = create_optimizer(ProcessEvaluator(problem), strategy, population_size=12, generations=8, seed=3)
        history = list(optimizer.optimize())

        assert [record['generation'] for record in history] == list(range(8))
        for record in history:
            assert set(record) >= {
                'generation', 'best_solution', 'best_fitness', 'best_parameters',
                'average_fitness', 'diversity', 'n_evaluations'
            }
            assert 0.0 <= record['best_fitness'] <= 1.0
            assert record['average_fitness'] <= record['best_fitness'] + 1e-12
            assert np.all(record['best_solution'] >= optimizer.evaluator.min_b)
            assert np.all(record['best_solution'] <= optimizer.evaluator.max_b)

    @pytest.mark.parametrize("strategy", list(OptimizationStrategy))
    def test_best_fitness_never_decreases(self, problem, strategy):
        optimizer = create_optimizer(ProcessEvaluator(problem), strategy, population_size=12, generations=15, seed=4)
        best = [record['best_fitness'] for record in optimizer.optimize()]

        assert all(b >= a for a, b in zip(best, best[1:]))

    @pytest.mark.parametrize("strategy", list(OptimizationStrategy))
    def test_seed_reproduces_run(self, problem, strategy):
        runs = []
        for _ in range(2):
            optimizer = create_optimizer(ProcessEvaluator(problem), strategy, population_size=12, generations=10,
                                         seed=11)
            runs.append(list(optimizer.optimize()))

        assert [r['best_fitness'] for r in runs[0]] == [r['best_fitness'] for r in runs[1]]
        np.testing.assert_array_equal(runs[0][-1]['best_solution'], runs[1][-1]['best_solution'])

    @pytest.mark.parametrize("strategy", [OptimizationStrategy.GENETIC, OptimizationStrategy.MULTI_OBJECTIVE])
    def test_interleaved_runs_match_solo_run(self, problem, strategy):
        """Two DEAP runs stepped alternately each match a run made alone."""
        def make():
            return create_optimizer(ProcessEvaluator(problem), strategy, population_size=12, generations=8, seed=7)

        solo = [record['best_fitness'] for record in make().optimize()]

        random.seed(0)
        first, second = make().optimize(), make().optimize()
        interleaved = []
        for a, b in zip(first, second):
            random.random()
            interleaved.append((a['best_fitness'], b['best_fitness']))

        assert [a for a, _ in interleaved] == solo
        assert [b for _, b in interleaved] == solo

    @pytest.mark.parametrize("strategy", list(OptimizationStrategy))
    def test_final_population(self, problem, strategy):
        optimizer = create_optimizer(ProcessEvaluator(problem), strategy, population_size=12, generations=5, seed=2)
        list(optimizer.optimize())
        population = optimizer.final_population()

        assert len(population) == 12
        assert all(len(x) == 4 for x in population)

    def test_ga_improves_on_initial_population(self, problem):
        ga = GeneticAlgorithm(ProcessEvaluator(problem), GAParameters(population_size=30, max_generations=30, seed=0))
        history = list(ga.optimize())

        assert history[-1]['best_fitness'] >= history[0]['best_fitness']
        assert len(ga.logbook) == 30

    def test_custom_params(self, problem):
        optimizer = create_optimizer(ProcessEvaluator(problem), OptimizationStrategy.PARTICLE_SWARM,
                                     population_size=10, generations=5, seed=0,
                                     custom_params={'inertia': 0.4})
        assert isinstance(optimizer, ParticleSwarm)
        assert optimizer.params.inertia == 0.4

    def test_strategy_classes(self, problem):
        evaluator = ProcessEvaluator(problem)

        assert isinstance(create_optimizer(evaluator, "genetic", 10, 5), GeneticAlgorithm)
        assert isinstance(create_optimizer(evaluator, "multi_objective", 10, 5), NSGA2Optimizer)
        assert isinstance(create_optimizer(evaluator, "simulated_annealing", 10, 5), SimulatedAnnealing)
        with pytest.raises(ValueError):
            create_optimizer(evaluator, "hill_climbing", 10, 5)

    def test_population_search_base_is_abstract(self, problem):
        with pytest.raises(TypeError):
            _PopulationSearch(ProcessEvaluator(problem), PSOParameters())


class TestConvergence:
    """Test cases for the stopping rule."""

    def test_invalid_tolerance(self):
        with pytest.raises(ValueError):
            ConvergenceMonitor(0.0)

    def test_flat_history_converges(self):
        monitor = ConvergenceMonitor(0.01)
        flags = [monitor.update(0.5) for _ in range(11)]

        assert flags[:10] == [False] * 10
        assert flags[10] is True
        assert monitor.converged

    def test_steady_improvement_continues(self):
        monitor = ConvergenceMonitor(0.01)
        assert not any(monitor.update(0.01 * gen) for gen in range(40))

    def test_run_stops_early(self, problem):
        optimizer = create_optimizer(ProcessEvaluator(problem), OptimizationStrategy.GENETIC,
                                     population_size=20, generations=60, seed=1)
        history = list(run_optimization(optimizer, tolerance=0.1))

        assert len(history) < 60
        assert history[-1]['converged']
        assert not any(record['converged'] for record in history[:-1])
        assert history[-1]['evaluator_stats']['total_evaluations'] == history[-1]['n_evaluations']

    def test_optimize_process(self, problem):
        run = optimize_process(problem, OptimizationStrategy.SIMULATED_ANNEALING,
                               population_size=10, generations=20, seed=5)

        assert run.strategy == OptimizationStrategy.SIMULATED_ANNEALING
        assert run.generations == len(run.history) <= 20
        assert run.best_fitness == run.history[-1]['best_fitness']
        assert len(run.final_population) == 10
        assert run.evaluator_stats['total_evaluations'] > 0


class TestAnalysis:
    """Test cases for Pareto front, alternatives and sensitivity."""

    @pytest.fixture
    def solutions(self, evaluator):
        return [evaluator.denormalize(unit) for unit in latin_hypercube(30, 4, seed=9)]

    def test_pareto_front_is_non_dominated(self, evaluator, solutions):
        front = pareto_front(evaluator, solutions, limit=30)

        assert front
        for a in front:
            assert set(a) == {'parameters', 'objectives', 'fitness', 'crowding_distance'}
            assert not any(dominates(b['objectives'], a['objectives']) for b in front)

    def test_pareto_front_limit_and_duplicates(self, evaluator, solutions):
        front = pareto_front(evaluator, solutions + solutions, limit=3)
        assert len(front) <= 3

        single = pareto_front(evaluator, [solutions[0], solutions[0].copy()])
        assert len(single) == 1
        assert single[0]['crowding_distance'] is None

    def test_pareto_front_empty(self, evaluator):
        assert pareto_front(evaluator, []) == []

    def test_pareto_front_crowding_order(self, evaluator, solutions):
        front = pareto_front(evaluator, solutions, limit=30)
        distances = [entry['crowding_distance'] for entry in front]

        boundary = [d for d in distances if d is None]
        interior = [d for d in distances if d is not None]
        assert boundary
        assert distances[:len(boundary)] == boundary
        assert all(d >= 0 for d in interior)
        assert interior == sorted(interior, reverse=True)

    def test_alternatives_exclude_best(self, evaluator, solutions):
        best = solutions[0]
        alternatives = alternative_solutions(evaluator, best, solutions, limit=5)

        assert len(alternatives) == 5
        assert all(not np.allclose(list(a['parameters'].values()), best) for a in alternatives)
        fitness = [a['fitness'] for a in alternatives]
        assert fitness == sorted(fitness, reverse=True)

    def test_sensitivity(self, evaluator):
        sensitivity = parameter_sensitivity(evaluator, np.array([1500.0, 3000.0, 5.0, -1.0]))

        assert list(sensitivity) == list(PARAMETER_NAMES)
        values = [entry['sensitivity'] for entry in sensitivity.values()]
        assert max(values) == pytest.approx(1.0)
        assert all(0.0 <= value <= 1.0 for value in values)

    def test_sensitivity_does_not_count_evaluations(self, evaluator):
        parameter_sensitivity(evaluator, np.array([1500.0, 3000.0, 5.0, -1.0]))
        assert evaluator.n_evaluations == 0

    @pytest.mark.parametrize("value, level", [
        (1.0, "critical"), (0.75, "critical"), (0.5, "high"), (0.3, "medium"), (0.1, "low"),
    ])
    def test_impact_levels(self, value, level):
        assert impact_level(value) == level
