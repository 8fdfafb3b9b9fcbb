"""
Penalized log-likelihood used as the optimizer's target.
"""

import numpy as np
from typing import List, Sequence
from .likelihood import log_likelihood


class BoundedObjective:
    """
    Log-likelihood with one-sided barrier terms outside the GARCH domain.

    Each violated bound costs violation / epsilon, so a tiny epsilon turns
    the bounds into near-vertical walls without clipping the search.
    """

    def __init__(self, prices: np.ndarray, epsilon: float = 1e-30,
                 initial_innovation: float = 0.0):
        self.prices = np.asarray(prices, dtype=float)
        self.epsilon = epsilon
        self.initial_innovation = initial_innovation

    def penalty_terms(self, parameters: Sequence[float]) -> List[float]:
        """Barrier costs for omega low, alpha low, alpha high, beta low, beta high"""
        omega, alpha, beta = (float(p) for p in parameters[:3])
        eps = self.epsilon
        return [
            max(eps - omega, 0.0) / eps,
            max(eps - alpha, 0.0) / eps,
            max((alpha - 1.0) + eps, 0.0) / eps,
            max(eps - beta, 0.0) / eps,
            max((beta - 1.0) + eps, 0.0) / eps,
        ]

    def penalty(self, parameters: Sequence[float]) -> float:
        return float(sum(self.penalty_terms(parameters)))

    def __call__(self, parameters: Sequence[float]) -> float:
        value = log_likelihood(parameters, self.prices, self.initial_innovation)
        if not np.isfinite(value):
            return -np.inf
        for term in self.penalty_terms(parameters):
            value -= term
        return value
