"""
Genetic Algorithm Optimizer using DEAP
=======================================

This module implements the evolutionary process search using the DEAP library.

Each individual is a list of normalized genes in [0, 1], one per process
parameter (power, speed, gas pressure, focus height). The evaluator maps
genes back to the material process window before scoring.

Selection and variation use DEAP's selTournament, cxBlend and mutGaussian,
clipped back into the unit box. They draw from the random module, so each
optimizer keeps its own seeded state and swaps it in for every step.

References:
- DEAP Documentation: https://deap.readthedocs.io/
- Deb et al. (2002): A Fast and Elitist Multiobjective Genetic Algorithm: NSGA-II
"""

from typing import List, Tuple, Optional, Dict, Any, Generator, Callable
from dataclasses import dataclass
from functools import wraps
from operator import attrgetter
import random

import numpy as np

# DEAP imports
from deap import base, creator, tools

from .evaluator import ProcessEvaluator
from .sampling import latin_hypercube, population_diversity


@dataclass
class GAParameters:
    """Parameters for Genetic Algorithm."""
    population_size: int = 50
    max_generations: int = 100
    crossover_prob: float = 0.8
    mutation_prob: float = 0.2
    tournament_size: int = 3
    elite_size: int = 2  # Number of elites to preserve
    blend_alpha: float = 0.3  # BLX-alpha extension
    mutation_sigma: float = 0.1  # In normalized units
    mutation_indpb: float = 0.5  # Independent probability per gene
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate GA parameters."""
        if self.population_size < 4:
            raise ValueError("population_size must be >= 4")
        if self.max_generations < 1:
            raise ValueError("max_generations must be >= 1")
        if not (0 <= self.crossover_prob <= 1):
            raise ValueError("crossover_prob must be in [0, 1]")
        if not (0 <= self.mutation_prob <= 1):
            raise ValueError("mutation_prob must be in [0, 1]")
        if self.tournament_size < 2:
            raise ValueError("tournament_size must be >= 2")
        if self.elite_size >= self.population_size:
            raise ValueError("elite_size must be < population_size")
        if self.blend_alpha < 0:
            raise ValueError("blend_alpha must be >= 0")
        if self.mutation_sigma <= 0:
            raise ValueError("mutation_sigma must be positive")
        if not (0 < self.mutation_indpb <= 1):
            raise ValueError("mutation_indpb must be in (0, 1]")


def clip_unit(func: Callable) -> Callable:
    """Decorate a DEAP variation operator so every gene ends in [0, 1]."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        offspring = func(*args, **kwargs)
        for child in offspring:
            for i, gene in enumerate(child):
                child[i] = min(1.0, max(0.0, gene))
        return offspring
    return wrapper


class SeededRandom:
    """
    Private module-level random state for one optimizer.

    DEAP operators draw from the random module. Each step runs inside
    ``with state:``, which swaps this optimizer's state in and the caller's
    state back out afterwards, so a fixed seed reproduces a run even when
    other code uses random between generations.
    """

    def __init__(self, seed: Optional[int] = None):
        saved = random.getstate()
        try:
            random.seed(seed)
            self._state = random.getstate()
        finally:
            random.setstate(saved)
        self._saved = None

    def __enter__(self) -> "SeededRandom":
        self._saved = random.getstate()
        random.setstate(self._state)
        return self

    def __exit__(self, *exc_info) -> None:
        self._state = random.getstate()
        random.setstate(self._saved)
        self._saved = None


def multi_objective_individual() -> type:
    """
    DEAP individual type for (cost, time, quality, energy).

    Weights minimize cost, time and energy and maximize quality. The scalar
    attribute holds the goal-weighted fitness.
    """
    if not hasattr(creator, "ProcessFitnessMulti"):
        creator.create("ProcessFitnessMulti", base.Fitness, weights=(-1.0, -1.0, 1.0, -1.0))

    if not hasattr(creator, "ProcessMultiIndividual"):
        creator.create("ProcessMultiIndividual", list, fitness=creator.ProcessFitnessMulti,
                       scalar=float)

    return creator.ProcessMultiIndividual


def _register_operators(toolbox: base.Toolbox, params: GAParameters) -> None:
    toolbox.register("mate", tools.cxBlend, alpha=params.blend_alpha)
    toolbox.register(
        "mutate",
        tools.mutGaussian,
        mu=0.0,
        sigma=params.mutation_sigma,
        indpb=params.mutation_indpb
    )
    toolbox.decorate("mate", clip_unit)
    toolbox.decorate("mutate", clip_unit)


def vary(toolbox: base.Toolbox, offspring: List[Any], params: GAParameters) -> None:
    """Crossover on consecutive pairs, then mutation; invalidates changed fitnesses."""
    for child1, child2 in zip(offspring[::2], offspring[1::2]):
        if random.random() < params.crossover_prob:
            toolbox.mate(child1, child2)
            del child1.fitness.values
            del child2.fitness.values

    for mutant in offspring:
        if random.random() < params.mutation_prob:
            toolbox.mutate(mutant)
            del mutant.fitness.values


class GeneticAlgorithm:
    """
    Genetic Algorithm for continuous process parameter optimization.

    Encoding: Each gene is a normalized parameter value in [0, 1].

    Operators:
    - Selection: Tournament
    - Crossover: Blend (BLX-alpha)
    - Mutation: Bounded Gaussian
    - Elitism: Preserve best individuals

    Attributes:
        evaluator: ProcessEvaluator for fitness calculation
        params: GAParameters configuration
        halloffame: Best individuals seen so far
    """

    def __init__(
        self,
        evaluator: ProcessEvaluator,
        params: Optional[GAParameters] = None
    ):
        self.evaluator = evaluator
        self.params = params or GAParameters()
        self.n_vars = evaluator.problem.n_variables
        self.random_state = SeededRandom(self.params.seed)

        # DEAP setup
        self._setup_deap()

        # Population
        self.population = None
        self.halloffame = tools.HallOfFame(maxsize=10)

        # Statistics
        self.logbook = tools.Logbook()
        self.generation = 0
        self._evals = 0

    def _setup_deap(self) -> None:
        """Configure DEAP framework."""
        # Create fitness class (maximize single objective)
        if not hasattr(creator, "ProcessFitnessMax"):
            creator.create("ProcessFitnessMax", base.Fitness, weights=(1.0,))

        # Create individual class
        if not hasattr(creator, "ProcessIndividual"):
            creator.create("ProcessIndividual", list, fitness=creator.ProcessFitnessMax)

        # Toolbox
        self.toolbox = base.Toolbox()
        self.toolbox.register("evaluate", self._evaluate)
        _register_operators(self.toolbox, self.params)
        self.toolbox.register(
            "select",
            tools.selTournament,
            tournsize=self.params.tournament_size
        )

        # Statistics
        self.stats = tools.Statistics(lambda ind: ind.fitness.values)
        self.stats.register("avg", np.mean)
        self.stats.register("std", np.std)
        self.stats.register("min", np.min)
        self.stats.register("max", np.max)

    def _evaluate(self, individual: List[float]) -> Tuple[float]:
        """Wrapper for evaluator to match DEAP interface."""
        return self.evaluator.evaluate(self.evaluator.denormalize(np.asarray(individual, dtype=float)))

    def _evaluate_invalid(self, individuals: List[Any]) -> int:
        invalid_ind = [ind for ind in individuals if not ind.fitness.valid]
        for ind in invalid_ind:
            ind.fitness.values = self.toolbox.evaluate(ind)
        return len(invalid_ind)

    def initialize_population(self) -> None:
        """Generate initial population by Latin Hypercube Sampling."""
        samples = latin_hypercube(self.params.population_size, self.n_vars, self.params.seed)
        self.population = [creator.ProcessIndividual(row.tolist()) for row in samples]

        self._evals = self._evaluate_invalid(self.population)
        self.halloffame.update(self.population)

    def evolve_generation(self) -> None:
        """Execute one generation of GA."""
        with self.random_state:
            offspring = self.toolbox.select(self.population, len(self.population))
            offspring = list(map(self.toolbox.clone, offspring))
            vary(self.toolbox, offspring, self.params)

        self._evals = self._evaluate_invalid(offspring)

        # Elitism: replace the worst offspring with the best parents
        if self.params.elite_size > 0:
            elites = list(map(self.toolbox.clone, tools.selBest(self.population, self.params.elite_size)))
            offspring.sort(key=lambda ind: ind.fitness.values[0], reverse=True)
            offspring[-self.params.elite_size:] = elites

        self.population[:] = offspring
        self.halloffame.update(self.population)

    def _progress(self, gen: int) -> Dict[str, Any]:
        record = self.stats.compile(self.population)
        self.logbook.record(gen=gen, evals=self._evals, **record)

        best = self.halloffame[0]
        best_array = self.evaluator.denormalize(np.asarray(best, dtype=float))

        return {
            'generation': gen,
            'best_solution': best_array,
            'best_fitness': float(best.fitness.values[0]),
            'best_parameters': self.evaluator.decode_parameters(best_array),
            'average_fitness': float(record['avg']),
            'diversity': population_diversity(self.population),
            'n_evaluations': self.evaluator.n_evaluations,
            'stats': record
        }

    def optimize(self) -> Generator[Dict[str, Any], None, None]:
        """
        Run GA optimization.

        Yields:
            Dictionary with generation results; best_fitness is the best
            seen so far
        """
        self.initialize_population()
        yield self._progress(0)

        for gen in range(1, self.params.max_generations):
            self.generation = gen
            self.evolve_generation()
            yield self._progress(gen)

    def final_population(self) -> List[np.ndarray]:
        """Current population in physical units."""
        return [self.evaluator.denormalize(np.asarray(ind, dtype=float)) for ind in self.population]


class NSGA2Optimizer:
    """
    NSGA-II for the four process objectives.

    Objectives (DEAP weights):
    - Minimize cost
    - Minimize time
    - Maximize quality
    - Minimize energy

    Survivors are chosen from parents plus offspring with tools.selNSGA2.
    The progress record reports the best goal-weighted fitness seen so far,
    so it is directly comparable with the single-objective algorithms.
    """

    def __init__(
        self,
        evaluator: ProcessEvaluator,
        params: Optional[GAParameters] = None
    ):
        self.evaluator = evaluator
        self.params = params or GAParameters()
        self.n_vars = evaluator.problem.n_variables
        self.random_state = SeededRandom(self.params.seed)

        self._setup_deap()

        self.population = None
        self.best = None
        self.logbook = tools.Logbook()
        self.generation = 0
        self._evals = 0

    def _setup_deap(self) -> None:
        """Configure DEAP framework."""
        multi_objective_individual()

        self.toolbox = base.Toolbox()
        self.toolbox.register("evaluate", self._evaluate)
        _register_operators(self.toolbox, self.params)
        self.toolbox.register("select", tools.selNSGA2)

        self.stats = tools.Statistics(attrgetter("scalar"))
        self.stats.register("avg", np.mean)
        self.stats.register("std", np.std)
        self.stats.register("min", np.min)
        self.stats.register("max", np.max)

    def _evaluate(self, individual: Any) -> Tuple[float, float, float, float]:
        x = self.evaluator.denormalize(np.asarray(individual, dtype=float))
        individual.scalar = self.evaluator.fitness(x)
        return self.evaluator.objective_vector(x)

    def _evaluate_invalid(self, individuals: List[Any]) -> int:
        invalid_ind = [ind for ind in individuals if not ind.fitness.valid]
        for ind in invalid_ind:
            ind.fitness.values = self.toolbox.evaluate(ind)
        return len(invalid_ind)

    def _update_best(self) -> None:
        leader = max(self.population, key=attrgetter("scalar"))
        if self.best is None or leader.scalar > self.best.scalar:
            self.best = self.toolbox.clone(leader)

    def initialize_population(self) -> None:
        """Generate initial population by Latin Hypercube Sampling."""
        samples = latin_hypercube(self.params.population_size, self.n_vars, self.params.seed)
        self.population = [creator.ProcessMultiIndividual(row.tolist()) for row in samples]
        self._evals = self._evaluate_invalid(self.population)

        # Assigns crowding distances used by later selections
        self.population = self.toolbox.select(self.population, len(self.population))
        self._update_best()

    def evolve_generation(self) -> None:
        """Execute one generation of NSGA-II ((mu + lambda) survival)."""
        offspring = list(map(self.toolbox.clone, self.population))
        with self.random_state:
            random.shuffle(offspring)
            vary(self.toolbox, offspring, self.params)

        self._evals = self._evaluate_invalid(offspring)
        self.population = self.toolbox.select(self.population + offspring, self.params.population_size)
        self._update_best()

    def _progress(self, gen: int) -> Dict[str, Any]:
        record = self.stats.compile(self.population)
        self.logbook.record(gen=gen, evals=self._evals, **record)

        best_array = self.evaluator.denormalize(np.asarray(self.best, dtype=float))
        return {
            'generation': gen,
            'best_solution': best_array,
            'best_fitness': float(self.best.scalar),
            'best_parameters': self.evaluator.decode_parameters(best_array),
            'average_fitness': float(record['avg']),
            'diversity': population_diversity(self.population),
            'n_evaluations': self.evaluator.n_evaluations,
            'stats': record
        }

    def optimize(self) -> Generator[Dict[str, Any], None, None]:
        """Run NSGA-II."""
        self.initialize_population()
        yield self._progress(0)

        for gen in range(1, self.params.max_generations):
            self.generation = gen
            self.evolve_generation()
            yield self._progress(gen)

    def final_population(self) -> List[np.ndarray]:
        """Current population in physical units."""
        return [self.evaluator.denormalize(np.asarray(ind, dtype=float)) for ind in self.population]
