"""
Historical-simulation quantiles from standardized innovations.
"""

import numpy as np
from typing import Sequence


def sorted_scenarios(path: np.ndarray, variance: float) -> np.ndarray:
    """Ascending copy of the standardized path, rescaled to the current volatility"""
    with np.errstate(invalid='ignore'):
        scale = np.sqrt(variance)
    return np.sort(np.asarray(path, dtype=float)) * scale


def interpolate_quantiles(scenarios: np.ndarray, quantiles: Sequence[float],
                          last_value: float) -> np.ndarray:
    """
    Price-level quantile forecasts from sorted log-return scenarios.

    For each q the fractional rank (L + 1) * q - 1 is interpolated linearly
    between neighbouring order statistics (indices clamped to the path),
    exponentiated and applied to last_value. With no scenarios every
    forecast equals last_value.

    Args:
        scenarios: Sorted scenario log-returns, length L
        quantiles: Levels in [0, 1]
        last_value: Last observed price

    Returns:
        Array of forecasts, one per quantile
    """
    scenarios = np.asarray(scenarios, dtype=float)
    quantiles = np.asarray(quantiles, dtype=float)
    if np.any(np.isnan(quantiles)) or np.any((quantiles < 0) | (quantiles > 1)):
        raise ValueError(f"Quantiles must lie in [0, 1], got {quantiles.tolist()}")

    length = len(scenarios)
    if length == 0:
        return np.full(quantiles.shape, float(last_value))

    rank = (length + 1) * quantiles - 1
    lower = np.floor(rank)
    weight = rank - lower
    lo_index = np.clip(lower, 0, length - 1).astype(int)
    hi_index = np.clip(lower + 1, 0, length - 1).astype(int)

    log_change = (1.0 - weight) * scenarios[lo_index] + weight * scenarios[hi_index]
    return last_value * np.exp(log_change)


def quantile_label(quantile: float) -> str:
    """Result key for a quantile level, e.g. 0.005 -> 'Quantile=0.5%'"""
    return f"Quantile={round(quantile * 100, 10):g}%"
