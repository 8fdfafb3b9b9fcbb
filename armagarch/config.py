"""
Per-model configuration for ARMA(1,1)-GARCH(1,1) estimation.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

PARAMETER_NAMES = ('omega', 'alpha', 'beta', 'theta', 'mu', 'phi')

OPTIMIZERS = ('population', 'gradient')
FAILURE_POLICIES = ('fallback', 'raise')
GUESS_METHODS = ('fixed', 'arch')

# Policy used when failure_policy is left unset
DEFAULT_FAILURE_POLICY = {
    'population': 'fallback',
    'gradient': 'raise',
}

INF = float('inf')


@dataclass(frozen=True)
class ModelConfig:
    """Immutable estimation settings, fixed when a model is constructed"""
    parameter_names: Tuple[str, ...] = PARAMETER_NAMES
    parameter_guess: Tuple[float, ...] = (0.10, 0.30, 0.30, 0.0, 0.0, 0.0)
    parameter_step: Tuple[float, ...] = (0.001, 0.001, 0.001, 0.001, 0.0001, 0.001)
    lower_bound: Tuple[float, ...] = (0.0, 0.0, 0.0, -INF, -INF, -INF)
    upper_bound: Tuple[float, ...] = (INF, 1.0, 1.0, INF, INF, INF)

    optimizer: str = 'population'
    failure_policy: Optional[str] = None
    max_iterations: int = 5000
    population_size: int = field(default=int(4 + 3 * math.log(len(PARAMETER_NAMES))))
    seed: int = 3141
    search_scale: float = 1000.0
    tolerance: float = 1e-7

    penalty_epsilon: float = 1e-30
    initial_innovation: float = 0.0
    guess_method: str = 'fixed'
    quantiles: Tuple[float, ...] = (0.005, 0.01, 0.02, 0.05, 0.5)

    def __post_init__(self):
        n = len(self.parameter_names)
        for name in ('parameter_guess', 'parameter_step', 'lower_bound', 'upper_bound'):
            if len(getattr(self, name)) != n:
                raise ValueError(f"{name} must have {n} entries")
        if self.optimizer not in OPTIMIZERS:
            raise ValueError(f"Unknown optimizer {self.optimizer!r}; expected one of {OPTIMIZERS}")
        if self.failure_policy is not None and self.failure_policy not in FAILURE_POLICIES:
            raise ValueError(
                f"Unknown failure policy {self.failure_policy!r}; expected one of {FAILURE_POLICIES}"
            )
        if self.guess_method not in GUESS_METHODS:
            raise ValueError(f"Unknown guess method {self.guess_method!r}; expected one of {GUESS_METHODS}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        # scipy's differential evolution needs at least five members
        if self.population_size < 5:
            raise ValueError(f"population_size must be at least 5, got {self.population_size}")
        if not self.penalty_epsilon > 0:
            raise ValueError(f"penalty_epsilon must be positive, got {self.penalty_epsilon}")
        for q in self.quantiles:
            if not 0.0 <= q <= 1.0:
                raise ValueError(f"Quantile {q} outside [0, 1]")

    @property
    def effective_failure_policy(self) -> str:
        if self.failure_policy is not None:
            return self.failure_policy
        return DEFAULT_FAILURE_POLICY[self.optimizer]

    def with_overrides(self, **kwargs) -> 'ModelConfig':
        """Copy with some fields replaced; validation runs again"""
        return replace(self, **kwargs)
