"""
Maximization strategies for the bounded ARMA-GARCH objective.

Both strategies wrap scipy.optimize. The population strategy is derivative
free (differential evolution); the gradient strategy runs L-BFGS-B on
finite-difference gradients.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence
import numpy as np
from scipy.optimize import differential_evolution, minimize

from .config import ModelConfig

logger = logging.getLogger(__name__)

Objective = Callable[[np.ndarray], float]


class OptimizationError(RuntimeError):
    """Raised when a solver fails rather than merely running out of iterations"""


@dataclass
class OptimizationResult:
    """Best point found by a strategy"""
    point: np.ndarray
    value: float
    converged: bool
    iterations: int
    message: str


class PopulationOptimizer:
    """Differential evolution started from a seeded population around a guess"""

    def __init__(self, population_size: int = 9, seed: int = 3141,
                 max_iterations: int = 5000, search_scale: float = 1000.0,
                 tolerance: float = 1e-7):
        self.population_size = population_size
        self.seed = seed
        self.max_iterations = max_iterations
        self.search_scale = search_scale
        self.tolerance = tolerance

    def search_box(self, guess: np.ndarray, steps: np.ndarray,
                   lower: np.ndarray, upper: np.ndarray) -> np.ndarray:
        """
        Finite (n, 2) bounds: configured bounds cut to guess +/- step * search_scale.

        Differential evolution never samples outside this box, so under this
        strategy the configured bounds act as hard limits and the penalty
        terms of the bounded objective never fire. The box also caps how far
        each parameter can move from the guess: with the default steps and
        scale that is 1 for omega, alpha, beta, theta and phi and 0.1 for mu.
        Raise search_scale (or pass a different guess) to search further.
        """
        width = np.abs(steps) * self.search_scale
        box_lower = np.maximum(lower, guess - width)
        box_upper = np.minimum(upper, guess + width)
        # A guess outside the configured bounds still needs a non-empty box
        box_lower = np.minimum(box_lower, box_upper - width)
        return np.column_stack([box_lower, box_upper])

    def initial_population(self, guess: np.ndarray, box: np.ndarray) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        low, high = box[:, 0], box[:, 1]
        population = low + rng.random((self.population_size, len(guess))) * (high - low)
        population[0] = np.clip(guess, low, high)
        return population

    def maximize(self, objective: Objective, guess: Sequence[float], steps: Sequence[float],
                 lower: Sequence[float], upper: Sequence[float]) -> OptimizationResult:
        guess = np.asarray(guess, dtype=float)
        box = self.search_box(guess, np.asarray(steps, dtype=float),
                              np.asarray(lower, dtype=float), np.asarray(upper, dtype=float))
        init = self.initial_population(guess, box)

        def energy(x):
            return -objective(x)

        try:
            with np.errstate(invalid='ignore', over='ignore'):
                result = differential_evolution(
                    energy,
                    bounds=[tuple(b) for b in box],
                    init=init,
                    maxiter=self.max_iterations,
                    tol=self.tolerance,
                    seed=self.seed,
                    polish=False,
                    updating='immediate',
                    workers=1,
                )
        except (ValueError, RuntimeError, FloatingPointError) as e:
            raise OptimizationError(f"Differential evolution failed: {e}") from e

        value = -float(result.fun)
        if not np.isfinite(value):
            raise OptimizationError(f"No finite objective value found: {result.message}")

        converged = bool(result.success)
        if not converged:
            logger.warning(f"Differential evolution stopped early: {result.message}")

        return OptimizationResult(
            point=np.asarray(result.x, dtype=float),
            value=value,
            converged=converged,
            iterations=int(result.nit),
            message=str(result.message),
        )


class GradientOptimizer:
    """L-BFGS-B with finite-difference gradients"""

    # L-BFGS-B status for "iteration or evaluation limit reached"
    LIMIT_REACHED = 1

    def __init__(self, max_iterations: int = 5000):
        self.max_iterations = max_iterations

    def maximize(self, objective: Objective, guess: Sequence[float], steps: Sequence[float],
                 lower: Sequence[float], upper: Sequence[float]) -> OptimizationResult:
        bounds = [
            (None if np.isinf(lo) else lo, None if np.isinf(hi) else hi)
            for lo, hi in zip(lower, upper)
        ]

        def neg_objective(x):
            return -objective(x)

        try:
            with np.errstate(invalid='ignore', over='ignore'):
                result = minimize(
                    neg_objective,
                    x0=np.asarray(guess, dtype=float),
                    method='L-BFGS-B',
                    bounds=bounds,
                    options={'maxiter': self.max_iterations},
                )
        except (ValueError, RuntimeError, FloatingPointError) as e:
            raise OptimizationError(f"L-BFGS-B failed: {e}") from e

        value = -float(result.fun)
        if not np.isfinite(value):
            raise OptimizationError(f"L-BFGS-B ended on a non-finite objective: {result.message}")
        if not result.success and result.status != self.LIMIT_REACHED:
            raise OptimizationError(f"L-BFGS-B did not converge: {result.message}")

        converged = bool(result.success)
        if not converged:
            logger.warning(f"L-BFGS-B stopped early: {result.message}")

        return OptimizationResult(
            point=np.asarray(result.x, dtype=float),
            value=value,
            converged=converged,
            iterations=int(result.nit),
            message=str(result.message),
        )


def make_optimizer(config: ModelConfig):
    """Strategy instance selected by config.optimizer"""
    if config.optimizer == 'population':
        return PopulationOptimizer(
            population_size=config.population_size,
            seed=config.seed,
            max_iterations=config.max_iterations,
            search_scale=config.search_scale,
            tolerance=config.tolerance,
        )
    if config.optimizer == 'gradient':
        return GradientOptimizer(max_iterations=config.max_iterations)
    raise ValueError(f"Unknown optimizer {config.optimizer!r}")
