import logging
import math
import numbers
from typing import Any, List, Mapping, Optional, Sequence
import numpy as np

from price_data.series import TimeSeries, as_time_series
from price_data.validator import PriceValidator
from .config import ModelConfig
from .guess import arch_initial_guess
from .likelihood import log_likelihood, standardized_innovations, terminal_variance
from .models import FitResult, PARAMETER_KEYS
from .objective import BoundedObjective
from .optimizer import OptimizationError, make_optimizer
from .scenarios import interpolate_quantiles, sorted_scenarios

logger = logging.getLogger(__name__)


def parse_guess(guess: Mapping[str, Any]) -> np.ndarray:
    """
    Validate a caller-supplied starting guess.

    Args:
        guess: Mapping with keys Omega, Alpha, Beta, Theta, Mu, Phi
            (a FitResult works too)

    Returns:
        Parameter vector in model order
    """
    missing = [key for key in PARAMETER_KEYS if key not in guess.keys()]
    if missing:
        raise ValueError(f"Guess is missing parameters: {missing}")

    values = []
    for key in PARAMETER_KEYS:
        value = guess[key]
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise ValueError(f"Guess value for {key} must be a real number, got {value!r}")
        if not math.isfinite(value):
            raise ValueError(f"Guess value for {key} must be finite, got {value!r}")
        values.append(float(value))
    return np.array(values)


class ARMAGARCH:
    """Lognormal process with ARMA(1,1)-GARCH(1,1) volatility, fitted by maximum likelihood"""

    def __init__(self, time_series, config: Optional[ModelConfig] = None):
        """
        Initialize model

        Args:
            time_series: TimeSeries, array, list or pandas Series of prices
            config: Estimation settings; defaults to ModelConfig()
        """
        self.time_series: TimeSeries = as_time_series(time_series)
        self.config = config or ModelConfig()
        self.validator = PriceValidator()
        self.logger = logging.getLogger('armagarch.estimator')

    @property
    def prices(self) -> np.ndarray:
        return self.time_series.values

    def get_parameter_names(self) -> List[str]:
        return list(self.config.parameter_names)

    def get_log_likelihood_for_parameters(self, parameters: Sequence[float]) -> float:
        return log_likelihood(parameters, self.prices, self.config.initial_innovation)

    def get_last_residual_for_parameters(self, parameters: Sequence[float]) -> float:
        """Terminal conditional variance of the filter"""
        return terminal_variance(parameters, self.prices, self.config.initial_innovation)

    def get_scenario_path(self, parameters: Sequence[float]) -> np.ndarray:
        """Standardized innovations in time order, length N-1"""
        path, _ = standardized_innovations(parameters, self.prices, self.config.initial_innovation)
        return path

    def get_scenarios(self, parameters: Sequence[float]) -> np.ndarray:
        """Sorted scenarios on the current volatility"""
        path, variance = standardized_innovations(
            parameters, self.prices, self.config.initial_innovation
        )
        return sorted_scenarios(path, variance)

    def get_quantile_predictions_for_parameters(self, parameters: Sequence[float],
                                                quantiles: Sequence[float]) -> np.ndarray:
        return interpolate_quantiles(
            self.get_scenarios(parameters), quantiles, self.time_series.last_value
        )

    def get_objective(self) -> BoundedObjective:
        return BoundedObjective(
            self.prices,
            epsilon=self.config.penalty_epsilon,
            initial_innovation=self.config.initial_innovation,
        )

    def _initial_guess(self, guess: Optional[Mapping[str, Any]]) -> np.ndarray:
        if guess is not None:
            return parse_guess(guess)
        if self.config.guess_method == 'arch':
            return parse_guess(arch_initial_guess(self.prices))
        return np.array(self.config.parameter_guess, dtype=float)

    def get_best_parameters(self, guess: Optional[Mapping[str, Any]] = None) -> FitResult:
        """
        Fit the model by maximizing the bounded log-likelihood.

        Args:
            guess: Optional starting values keyed Omega, Alpha, Beta, Theta, Mu, Phi

        Returns:
            FitResult with parameters, likelihood, volatility and quantile forecasts
        """
        self.validator.require_valid(self.time_series)
        guess_parameters = self._initial_guess(guess)
        config = self.config
        policy = config.effective_failure_policy

        self.logger.info(
            f"Fitting ARMA-GARCH on {len(self.time_series)} observations "
            f"with {config.optimizer} optimizer"
        )

        optimizer = make_optimizer(config)
        try:
            outcome = optimizer.maximize(
                self.get_objective(),
                guess_parameters,
                config.parameter_step,
                config.lower_bound,
                config.upper_bound,
            )
            best_parameters = outcome.point
            converged = outcome.converged
        except OptimizationError as e:
            if policy == 'raise':
                self.logger.error(f"Solver failed: {str(e)}")
                raise
            self.logger.warning(f"Solver failed, returning initial guess: {str(e)}")
            best_parameters = guess_parameters.copy()
            converged = False

        return self._assemble(best_parameters, converged)

    def fit(self, guess: Optional[Mapping[str, Any]] = None) -> FitResult:
        return self.get_best_parameters(guess)

    def _assemble(self, parameters: np.ndarray, converged: bool) -> FitResult:
        quantiles = self.config.quantiles
        scenarios = self.get_scenarios(parameters)
        forecasts = interpolate_quantiles(scenarios, quantiles, self.time_series.last_value)
        likelihood = self.get_log_likelihood_for_parameters(parameters)
        with np.errstate(invalid='ignore'):
            vol = float(np.sqrt(self.get_last_residual_for_parameters(parameters)))

        self.logger.info(
            f"Fit finished: likelihood={likelihood:.6f}, vol={vol:.6g}, converged={converged}"
        )

        return FitResult(
            parameters=parameters,
            likelihood=likelihood,
            vol=vol,
            scenarios=scenarios,
            quantiles=dict(zip(quantiles, (float(v) for v in forecasts))),
            converged=converged,
            strategy=self.config.optimizer,
        )

    def get_parameters(self) -> np.ndarray:
        return self.get_best_parameters().parameters

    def clone_calibrated(self, time_series) -> 'ARMAGARCH':
        """Unfitted model with the same settings over another series"""
        return ARMAGARCH(time_series, self.config)

    def clone_with_window(self, start: int, end: int) -> 'ARMAGARCH':
        """Unfitted model over positions start..end (inclusive) of this series"""
        return ARMAGARCH(self.time_series.windowed(start, end), self.config)


def fit(series, guess: Optional[Mapping[str, Any]] = None,
        config: Optional[ModelConfig] = None) -> FitResult:
    """Fit an ARMA-GARCH model to a price series"""
    return ARMAGARCH(series, config).fit(guess)
