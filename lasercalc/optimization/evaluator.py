"""
Process Evaluator for Optimization
==================================

This module provides the fitness evaluation for laser process optimization.

A candidate is a vector of four process parameters:

    x = [power (W), speed (mm/min), gas pressure (bar), focus height (mm)]

The evaluator:
1. Computes the cost, time, quality and energy objectives of a candidate
2. Checks the user constraints (max time/cost/energy, min quality)
3. Returns a fitness in [0, 1] (goal-weighted objectives minus penalties)
"""

from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum
import math

import numpy as np

from ..core.materials import MaterialProperties

PARAMETER_NAMES = ("power", "speed", "gas_pressure", "focus_height")
OBJECTIVE_NAMES = ("cost", "time", "quality", "energy")


class OptimizationGoal(Enum):
    """What the search should favour."""
    COST = "cost"
    TIME = "time"
    QUALITY = "quality"
    ENERGY = "energy"
    BALANCED = "balanced"


GOAL_WEIGHTS = {
    OptimizationGoal.COST: {"cost": 1.0, "time": 0.2, "quality": 0.3, "energy": 0.1},
    OptimizationGoal.TIME: {"cost": 0.2, "time": 1.0, "quality": 0.3, "energy": 0.1},
    OptimizationGoal.QUALITY: {"cost": 0.3, "time": 0.2, "quality": 1.0, "energy": 0.1},
    OptimizationGoal.ENERGY: {"cost": 0.2, "time": 0.1, "quality": 0.3, "energy": 1.0},
    OptimizationGoal.BALANCED: {"cost": 0.25, "time": 0.25, "quality": 0.25, "energy": 0.25},
}

# Quality model reference points
REFERENCE_SPEED = 3000.0  # mm/min
POWER_PER_MM = 200.0  # W per mm thickness
ENERGY_PRICE = 0.12  # USD/kWh


@dataclass
class ProcessConstraints:
    """User limits on the objectives (None = unconstrained)."""
    max_time: Optional[float] = None  # min/m
    max_cost: Optional[float] = None  # USD
    min_quality: Optional[float] = None  # 0-100
    max_energy: Optional[float] = None  # kWh
    penalty_weight: float = 0.5  # fitness lost per unit relative violation

    def __post_init__(self):
        """Validate constraint limits."""
        for name in ("max_time", "max_cost", "max_energy"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ValueError(f"{name} must be positive")
        if self.min_quality is not None and not (0 <= self.min_quality <= 100):
            raise ValueError("min_quality must be in [0, 100]")
        if self.penalty_weight < 0:
            raise ValueError("penalty_weight must be >= 0")


@dataclass
class ProcessProblem:
    """Definition of a process optimization problem."""
    material: MaterialProperties
    thickness: float  # mm
    laser_power: float  # W, available power
    goal: OptimizationGoal = OptimizationGoal.BALANCED
    constraints: ProcessConstraints = field(default_factory=ProcessConstraints)

    def __post_init__(self):
        """Validate optimization problem definition."""
        if self.thickness <= 0:
            raise ValueError("thickness must be positive")
        if self.laser_power <= 0:
            raise ValueError("laser_power must be positive")
        self.goal = OptimizationGoal(self.goal)

    @property
    def n_variables(self) -> int:
        return len(PARAMETER_NAMES)

    @property
    def bounds(self) -> List[Tuple[float, float]]:
        """
        Parameter bounds from the material process window.

        The power window is capped by the available laser power.
        """
        window = self.material.process
        low, high = window.power_range
        return [
            (min(low, 0.5 * self.laser_power), min(high, self.laser_power)),
            tuple(window.speed_range),
            tuple(window.gas_pressure_range),
            tuple(window.focus_range),
        ]

    @property
    def weights(self) -> Dict[str, float]:
        return GOAL_WEIGHTS[self.goal]


class ProcessEvaluator:
    """
    Evaluator for process optimization fitness.

    Attributes:
        problem: ProcessProblem definition
        n_evaluations: Number of fitness evaluations so far
    """

    def __init__(self, problem: ProcessProblem):
        self.problem = problem
        self.bounds = np.asarray(problem.bounds, dtype=float)
        self.min_b = self.bounds[:, 0]
        self.max_b = self.bounds[:, 1]
        self.diff = self.max_b - self.min_b

        # Statistics
        self.n_evaluations = 0
        self.n_feasible = 0
        self.n_infeasible = 0

    def denormalize(self, unit: np.ndarray) -> np.ndarray:
        """Map a vector from [0, 1]^n to the parameter bounds."""
        return self.min_b + np.clip(unit, 0.0, 1.0) * self.diff

    def normalize(self, x: np.ndarray) -> np.ndarray:
        return (np.asarray(x, dtype=float) - self.min_b) / self.diff

    def clip(self, x: np.ndarray) -> np.ndarray:
        return np.clip(np.asarray(x, dtype=float), self.min_b, self.max_b)

    @staticmethod
    def decode_parameters(x) -> Dict[str, float]:
        """Parameter vector as a name -> value mapping."""
        return {name: float(value) for name, value in zip(PARAMETER_NAMES, x)}

    def objectives(self, x) -> Dict[str, float]:
        """
        Evaluate the four process objectives.

        Returns:
            cost (USD), time (min/m), quality (0-100), energy (kWh/m)
        """
        power, speed, gas_pressure, focus = (float(v) for v in x)
        thickness = self.problem.thickness
        window = self.problem.material.process

        cost = (thickness * 0.5 * window.cost_weight
                + (power / 1000.0) * (60.0 / speed) * ENERGY_PRICE
                + gas_pressure * 0.1)

        time = 1000.0 / speed * math.sqrt(thickness / 5.0) * math.sqrt(2000.0 / power)

        optimal_power = thickness * POWER_PER_MM
        optimal_focus = -thickness / 3.0
        quality = 80.0 * window.quality_weight
        quality -= abs(power - optimal_power) / optimal_power * 20.0
        quality -= abs(speed - REFERENCE_SPEED) / REFERENCE_SPEED * 15.0
        quality -= abs(focus - optimal_focus) / abs(optimal_focus) * 10.0
        quality = max(0.0, min(100.0, quality))

        energy = power / 1000.0 * time / 60.0 * window.energy_weight

        return {"cost": cost, "time": time, "quality": quality, "energy": energy}

    def penalty(self, objectives: Dict[str, float]) -> float:
        """Penalty for violated constraints (0 if feasible)."""
        limits = self.problem.constraints
        violation = 0.0
        if limits.max_time is not None and objectives["time"] > limits.max_time:
            violation += (objectives["time"] - limits.max_time) / limits.max_time
        if limits.max_cost is not None and objectives["cost"] > limits.max_cost:
            violation += (objectives["cost"] - limits.max_cost) / limits.max_cost
        if limits.max_energy is not None and objectives["energy"] > limits.max_energy:
            violation += (objectives["energy"] - limits.max_energy) / limits.max_energy
        if limits.min_quality is not None and objectives["quality"] < limits.min_quality:
            violation += (limits.min_quality - objectives["quality"]) / max(limits.min_quality, 1.0)
        return violation * limits.penalty_weight

    def fitness_from_objectives(self, objectives: Dict[str, float]) -> float:
        """Goal-weighted fitness in [0, 1]; higher is better."""
        w = self.problem.weights
        score = (
            w["cost"] / (1.0 + objectives["cost"])
            + w["time"] / (1.0 + objectives["time"])
            + w["quality"] * objectives["quality"] / 100.0
            + w["energy"] / (1.0 + objectives["energy"])
        ) / sum(w.values())
        return max(0.0, min(1.0, score - self.penalty(objectives)))

    def fitness(self, x) -> float:
        """Evaluate one candidate."""
        self.n_evaluations += 1
        objectives = self.objectives(x)
        if self.penalty(objectives) > 0:
            self.n_infeasible += 1
        else:
            self.n_feasible += 1
        return self.fitness_from_objectives(objectives)

    def evaluate(self, x) -> Tuple[float]:
        """
        Main evaluation function for optimization.

        Returns:
            Tuple containing the fitness (DEAP requires a tuple)
        """
        return (self.fitness(x),)

    def objective_vector(self, x) -> Tuple[float, float, float, float]:
        """(cost, time, quality, energy) for multi-objective selection."""
        objectives = self.objectives(x)
        return tuple(objectives[name] for name in OBJECTIVE_NAMES)

    def get_statistics(self) -> Dict[str, float]:
        """Evaluation counts."""
        return {
            'total_evaluations': self.n_evaluations,
            'feasible': self.n_feasible,
            'infeasible': self.n_infeasible,
            'feasibility_rate': self.n_feasible / max(self.n_evaluations, 1)
        }
