"""Result records for ARMA-GARCH fits."""

from dataclasses import dataclass
from typing import Any, Dict, Hashable, Optional
import numpy as np
import pandas as pd

from .scenarios import quantile_label

PARAMETER_KEYS = ('Omega', 'Alpha', 'Beta', 'Theta', 'Mu', 'Phi')


def _frozen_array(values) -> np.ndarray:
    array = np.array(values, dtype=float)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class FitResult:
    """Container for one maximum-likelihood fit"""
    parameters: np.ndarray  # (omega, alpha, beta, theta, mu, phi)
    likelihood: float
    vol: float  # sqrt of the terminal conditional variance
    scenarios: np.ndarray  # Sorted, rescaled to current volatility
    quantiles: Dict[float, float]  # Level -> price forecast
    converged: bool = True
    strategy: str = 'population'

    def __post_init__(self):
        object.__setattr__(self, 'parameters', _frozen_array(self.parameters))
        object.__setattr__(self, 'scenarios', _frozen_array(self.scenarios))
        object.__setattr__(self, 'quantiles', dict(self.quantiles))

    @property
    def omega(self) -> float:
        return float(self.parameters[0])

    @property
    def alpha(self) -> float:
        return float(self.parameters[1])

    @property
    def beta(self) -> float:
        return float(self.parameters[2])

    @property
    def theta(self) -> float:
        return float(self.parameters[3])

    @property
    def mu(self) -> float:
        return float(self.parameters[4])

    @property
    def phi(self) -> float:
        return float(self.parameters[5])

    def as_dict(self) -> Dict[str, Any]:
        """Labeled output with stable keys"""
        results = {'parameters': self.parameters}
        for key, value in zip(PARAMETER_KEYS, self.parameters):
            results[key] = float(value)
        results['Scenarios'] = self.scenarios
        results['Likelihood'] = self.likelihood
        results['Vol'] = self.vol
        for level, value in self.quantiles.items():
            results[quantile_label(level)] = value
        return results

    def __getitem__(self, key: str) -> Any:
        return self.as_dict()[key]

    def keys(self):
        return self.as_dict().keys()

    def to_series(self) -> pd.Series:
        """Scalar fields only, for tabular reports"""
        scalars = {k: v for k, v in self.as_dict().items()
                   if k not in ('parameters', 'Scenarios')}
        return pd.Series(scalars, dtype=float)


@dataclass
class ForecastWindow:
    """One rolling-window fit"""
    start_index: int
    end_index: int
    start_label: Hashable
    end_label: Hashable
    result: FitResult
    next_value: Optional[float] = None  # Observation after the window, if any
