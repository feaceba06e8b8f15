"""
Advanced Optimization Algorithms
=================================

This module implements population-based alternatives to the genetic search:
1. Particle Swarm Optimization (PSO) - global-best topology
2. Simulated Annealing (SA) - a population of independent Metropolis chains

Both work in the normalized space [0, 1]^n, maximize the evaluator fitness
and draw every random number from a numpy Generator seeded by the caller.

References:
- Kennedy & Eberhart (1995): Particle Swarm Optimization
- Kirkpatrick et al. (1983): Optimization by Simulated Annealing
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Generator, Dict, Any
from dataclasses import dataclass

import numpy as np

from .evaluator import ProcessEvaluator
from .sampling import latin_hypercube, population_diversity


@dataclass
class PSOParameters:
    """Parameters for Particle Swarm Optimization."""
    population_size: int = 50  # Number of particles
    max_generations: int = 100
    inertia: float = 0.7  # w
    cognitive: float = 1.5  # c1: pull towards personal best
    social: float = 1.5  # c2: pull towards global best
    max_velocity: float = 0.2  # In normalized units
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate PSO parameters."""
        if self.population_size < 4:
            raise ValueError("population_size must be >= 4")
        if self.max_generations < 1:
            raise ValueError("max_generations must be >= 1")
        if not (0 <= self.inertia <= 1):
            raise ValueError("inertia must be in [0, 1]")
        if self.cognitive < 0 or self.social < 0:
            raise ValueError("cognitive and social coefficients must be >= 0")
        if not (0 < self.max_velocity <= 1):
            raise ValueError("max_velocity must be in (0, 1]")


@dataclass
class SAParameters:
    """Parameters for Simulated Annealing."""
    population_size: int = 50  # Number of parallel chains
    max_generations: int = 100
    initial_temperature: float = 0.05  # In fitness units
    cooling_rate: float = 0.95  # Geometric cooling factor
    step_size: float = 0.1  # Gaussian proposal sigma (normalized units)
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate SA parameters."""
        if self.population_size < 1:
            raise ValueError("population_size must be >= 1")
        if self.max_generations < 1:
            raise ValueError("max_generations must be >= 1")
        if self.initial_temperature <= 0:
            raise ValueError("initial_temperature must be positive")
        if not (0 < self.cooling_rate < 1):
            raise ValueError("cooling_rate must be in (0, 1)")
        if self.step_size <= 0:
            raise ValueError("step_size must be positive")


class _PopulationSearch(ABC):
    """Bookkeeping shared by the numpy population searches."""

    def __init__(self, evaluator: ProcessEvaluator, params: Any):
        self.evaluator = evaluator
        self.params = params
        self.n_vars = evaluator.problem.n_variables
        self.rng = np.random.default_rng(params.seed)

        # Population (normalized to [0, 1])
        self.population = None
        self.fitness = None
        self.best = None
        self.best_fitness = -np.inf

        self.generation = 0
        self.history = []

    def _evaluate(self, population: np.ndarray) -> np.ndarray:
        return np.array([
            self.evaluator.evaluate(self.evaluator.denormalize(ind))[0]
            for ind in population
        ])

    def _update_best(self) -> None:
        idx = int(np.argmax(self.fitness))
        if self.fitness[idx] > self.best_fitness:
            self.best_fitness = float(self.fitness[idx])
            self.best = self.population[idx].copy()

    def _progress(self, gen: int) -> Dict[str, Any]:
        best_denorm = self.evaluator.denormalize(self.best)
        record = {
            'avg': float(np.mean(self.fitness)),
            'std': float(np.std(self.fitness)),
            'min': float(np.min(self.fitness)),
            'max': float(np.max(self.fitness))
        }
        self.history.append(self.best_fitness)

        return {
            'generation': gen,
            'best_solution': best_denorm,
            'best_fitness': self.best_fitness,
            'best_parameters': self.evaluator.decode_parameters(best_denorm),
            'average_fitness': record['avg'],
            'diversity': population_diversity(self.population),
            'n_evaluations': self.evaluator.n_evaluations,
            'stats': record
        }

    def initialize_population(self) -> None:
        """Initialize population using Latin Hypercube Sampling."""
        self.population = latin_hypercube(self.params.population_size, self.n_vars, self.params.seed)
        self.fitness = self._evaluate(self.population)
        self._update_best()

    @abstractmethod
    def evolve_generation(self) -> None:
        """Advance the population one generation and refresh self.fitness."""
        pass

    def optimize(self) -> Generator[Dict[str, Any], None, None]:
        """
        Run the search.

        Yields:
            Dictionary with generation results; best_fitness is the best
            seen so far
        """
        self.initialize_population()
        yield self._progress(0)

        for gen in range(1, self.params.max_generations):
            self.generation = gen
            self.evolve_generation()
            self._update_best()
            yield self._progress(gen)

    def final_population(self) -> List[np.ndarray]:
        """Current population in physical units."""
        return [self.evaluator.denormalize(ind) for ind in self.population]


class ParticleSwarm(_PopulationSearch):
    """
    Particle Swarm Optimization with global-best topology.

    Velocity update:
        v = w*v + c1*r1*(p_best - x) + c2*r2*(g_best - x)

    Velocities are clamped to +/- max_velocity and positions to [0, 1].
    """

    def __init__(self, evaluator: ProcessEvaluator, params: Optional[PSOParameters] = None):
        super().__init__(evaluator, params or PSOParameters())
        self.velocity = None
        self.personal_best = None
        self.personal_best_fitness = None

    def initialize_population(self) -> None:
        super().initialize_population()
        vmax = self.params.max_velocity
        self.velocity = self.rng.uniform(-vmax, vmax, size=self.population.shape)
        self.personal_best = self.population.copy()
        self.personal_best_fitness = self.fitness.copy()

    def evolve_generation(self) -> None:
        """Move every particle once."""
        p = self.params
        r1 = self.rng.random(self.population.shape)
        r2 = self.rng.random(self.population.shape)

        self.velocity = (
            p.inertia * self.velocity
            + p.cognitive * r1 * (self.personal_best - self.population)
            + p.social * r2 * (self.best - self.population)
        )
        self.velocity = np.clip(self.velocity, -p.max_velocity, p.max_velocity)
        self.population = np.clip(self.population + self.velocity, 0.0, 1.0)

        self.fitness = self._evaluate(self.population)

        improved = self.fitness > self.personal_best_fitness
        self.personal_best[improved] = self.population[improved]
        self.personal_best_fitness[improved] = self.fitness[improved]


class SimulatedAnnealing(_PopulationSearch):
    """
    Simulated Annealing over a population of independent chains.

    Each chain proposes a Gaussian step; worse proposals are accepted with
    probability exp(delta / T). The temperature cools geometrically.
    """

    def __init__(self, evaluator: ProcessEvaluator, params: Optional[SAParameters] = None):
        super().__init__(evaluator, params or SAParameters())
        self.temperature = self.params.initial_temperature

    def evolve_generation(self) -> None:
        """One Metropolis step per chain, then cool."""
        proposal = np.clip(
            self.population + self.rng.normal(0.0, self.params.step_size, size=self.population.shape),
            0.0, 1.0
        )
        proposal_fitness = self._evaluate(proposal)

        delta = proposal_fitness - self.fitness
        accept_prob = np.exp(np.minimum(delta, 0.0) / self.temperature)
        accepted = self.rng.random(len(delta)) < accept_prob

        self.population[accepted] = proposal[accepted]
        self.fitness[accepted] = proposal_fitness[accepted]
        self.temperature *= self.params.cooling_rate
