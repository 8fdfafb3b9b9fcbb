"""
Recursive ARMA(1,1)-GARCH(1,1) filter for lognormal price processes.

The model treats log-returns r_k = ln(x_k / x_{k-1}) as

    r_k = mu + phi * r_{k-1} + theta * m_{k-1} + m_k
    m_k ~ N(0, h_{k-1}),   h_k = omega + alpha * m_k^2 + beta * h_{k-1}

All functions here are pure: they read the price array, never write to it,
and start every call from the same initial state. Degenerate log-returns
(zero or negative price ratios) are replaced by 0 so gappy data still
produces a likelihood.
"""

import numpy as np
from typing import Sequence, Tuple

LOG_2PI = np.log(2.0 * np.pi)


def log_returns(prices: np.ndarray) -> np.ndarray:
    """Log-returns of consecutive prices, non-finite values set to 0"""
    prices = np.asarray(prices, dtype=float)
    with np.errstate(divide='ignore', invalid='ignore'):
        returns = np.log(prices[1:] / prices[:-1])
    returns[~np.isfinite(returns)] = 0.0
    return returns


def _unpack(parameters: Sequence[float]) -> Tuple[float, ...]:
    params = np.asarray(parameters, dtype=float)
    if params.shape != (6,):
        raise ValueError(f"Expected 6 parameters, got shape {params.shape}")
    return tuple(params)


def _initial_variance(omega: float, alpha: float, beta: float) -> float:
    # np.float64 division gives inf/nan instead of raising when alpha + beta == 1
    return np.float64(omega) / (1.0 - alpha - beta)


def _check_prices(prices) -> np.ndarray:
    prices = np.asarray(prices, dtype=float)
    if len(prices) < 2:
        raise ValueError(f"Need at least 2 prices, got {len(prices)}")
    return prices


def _filter(parameters: Sequence[float], returns: np.ndarray,
            initial_innovation: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run the ARMA-GARCH recursion over every return.

    Returns the innovations m_1..m_{N-1} and the variances h_0..h_{N-1},
    where h_k is updated from m_k and serves as the forecast for m_{k+1}.
    """
    omega, alpha, beta, theta, mu, phi = _unpack(parameters)
    innovations = np.empty(len(returns))
    variances = np.empty(len(returns) + 1)

    h = _initial_variance(omega, alpha, beta)
    variances[0] = h
    m = initial_innovation
    previous = 0.0
    for k, r in enumerate(returns):
        m = -mu - theta * m + r - phi * previous
        h = (omega + alpha * m * m) + beta * h
        innovations[k] = m
        variances[k + 1] = h
        previous = r

    return innovations, variances


def log_likelihood(parameters: Sequence[float], prices: np.ndarray,
                   initial_innovation: float = 0.0) -> float:
    """
    Gaussian log-likelihood of the filtered innovations.

    The first observation contributes the raw return r_1 against the
    stationary variance h_0; every later one contributes m_{k+1} against the
    variance h_k forecast from m_k.

    Args:
        parameters: (omega, alpha, beta, theta, mu, phi)
        prices: Observations x_0..x_{N-1}, N >= 2
        initial_innovation: Pre-sample innovation m_0

    Returns:
        Log-likelihood; NaN or inf when the parameters make the variance
        recursion degenerate
    """
    prices = _check_prices(prices)
    n = len(prices)
    returns = log_returns(prices)

    with np.errstate(all='ignore'):
        innovations, variances = _filter(parameters, returns, initial_innovation)
        # abs() treats -x as lognormal where a negative value shows up
        log_abs_prices = np.log(np.abs(prices[1:]))
        h0 = variances[0]
        total = -np.log(h0) - 2.0 * log_abs_prices[0] - returns[0] * returns[0] / h0

        forecasts = variances[1:n - 1]
        following = innovations[1:]
        terms = -np.log(forecasts) - 2.0 * log_abs_prices[1:] - following * following / forecasts
        total = total + np.sum(terms) - LOG_2PI * (n - 1)

    return float(0.5 * total)


def terminal_variance(parameters: Sequence[float], prices: np.ndarray,
                      initial_innovation: float = 0.0) -> float:
    """Variance forecast for the last observation, h_{N-2}"""
    returns = log_returns(_check_prices(prices))
    with np.errstate(all='ignore'):
        _, variances = _filter(parameters, returns, initial_innovation)
    return float(variances[-2])


def standardized_innovations(parameters: Sequence[float], prices: np.ndarray,
                             initial_innovation: float = 0.0) -> Tuple[np.ndarray, float]:
    """
    Standardized innovation m_k / sqrt(h_{k-1}) for every return.

    Returns:
        Tuple of (path of length N-1 in time order, variance after the last update)
    """
    returns = log_returns(_check_prices(prices))
    with np.errstate(all='ignore'):
        innovations, variances = _filter(parameters, returns, initial_innovation)
        path = innovations / np.sqrt(variances[:-1])

    return path, float(variances[-1])
