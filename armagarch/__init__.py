"""
ARMA(1,1)-GARCH(1,1) volatility modeling package.
Implements maximum-likelihood estimation and historical-simulation quantiles.
"""

from .config import ModelConfig
from .estimator import ARMAGARCH, fit
from .models import FitResult, ForecastWindow
from .objective import BoundedObjective
from .optimizer import OptimizationError
from .forecaster import RollingForecaster

__all__ = [
    'ARMAGARCH', 'fit', 'ModelConfig', 'FitResult', 'ForecastWindow',
    'BoundedObjective', 'OptimizationError', 'RollingForecaster'
]
