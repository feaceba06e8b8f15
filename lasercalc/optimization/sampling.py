"""
Sampling helpers shared by the optimizers.

All optimizers search the unit hypercube [0, 1]^n and let the evaluator map
candidates back to physical parameter bounds.
"""

from typing import Optional, Sequence

import numpy as np
from scipy.spatial.distance import pdist
from scipy.stats import qmc


def latin_hypercube(n_samples: int, n_vars: int, seed: Optional[int] = None) -> np.ndarray:
    """
    Latin Hypercube sample of the unit hypercube.

    Args:
        n_samples: Number of points
        n_vars: Number of dimensions
        seed: Seed for the sampler (same seed gives the same design)

    Returns:
        Array of shape (n_samples, n_vars) in [0, 1)
    """
    sampler = qmc.LatinHypercube(d=n_vars, rng=np.random.default_rng(seed))
    return sampler.random(n=n_samples)


def population_diversity(points: Sequence[Sequence[float]]) -> float:
    """Mean pairwise Euclidean distance of normalized points."""
    array = np.asarray(points, dtype=float)
    if len(array) < 2:
        return 0.0
    return float(np.mean(pdist(array)))
