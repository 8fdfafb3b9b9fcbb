import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import math
import pytest
import numpy as np
from armagarch.likelihood import (
    log_returns, log_likelihood, terminal_variance, standardized_innovations
)

DEFAULT_PARAMS = [0.10, 0.30, 0.30, 0.0, 0.0, 0.0]
SHORT_SERIES = np.array([100.0, 101.0, 99.0, 102.0])

@pytest.fixture
def sample_prices():
    """Random walk prices with a few hundred observations"""
    rng = np.random.default_rng(7)
    returns = rng.normal(0, 0.01, 300)
    return 100 * np.exp(np.concatenate([[0.0], np.cumsum(returns)]))

def test_log_returns_replace_degenerate_values():
    """Zero prices give infinite log-returns which become 0"""
    returns = log_returns(np.array([100.0, 0.0, 100.0, 101.0]))

    assert returns[0] == 0.0
    assert returns[1] == 0.0
    assert returns[2] == pytest.approx(math.log(101 / 100))

def _reference_likelihood(params, prices):
    """Straight loop over the recursion, one observation at a time"""
    omega, alpha, beta, theta, mu, phi = params
    h = omega / (1 - alpha - beta)
    r = math.log(prices[1] / prices[0])
    total = -math.log(h) - 2 * math.log(abs(prices[1])) - r * r / h

    m = 0.0
    r_prev = 0.0
    for i in range(1, len(prices) - 1):
        # Innovation for this step drives the variance forecast for the next one
        m = -mu - theta * m + r - phi * r_prev
        h = (omega + alpha * m * m) + beta * h
        r_next = math.log(prices[i + 1] / prices[i])
        m_next = -mu - theta * m + r_next - phi * r
        total += -math.log(h) - 2 * math.log(abs(prices[i + 1])) - m_next * m_next / h
        r_prev = r
        r = r_next

    total -= math.log(2 * math.pi) * (len(prices) - 1)
    return 0.5 * total, h

def test_short_series_likelihood_by_hand():
    """Four prices, default parameters: first observation plus two steps"""
    r1 = math.log(101 / 100)
    r2 = math.log(99 / 101)
    r3 = math.log(102 / 99)

    h0 = 0.10 / (1 - 0.30 - 0.30)
    total = -math.log(h0) - 2 * math.log(101) - r1 ** 2 / h0
    h1 = 0.10 + 0.30 * r1 * r1 + 0.30 * h0
    total += -math.log(h1) - 2 * math.log(99) - r2 ** 2 / h1
    h2 = 0.10 + 0.30 * r2 * r2 + 0.30 * h1
    total += -math.log(h2) - 2 * math.log(102) - r3 ** 2 / h2
    expected = 0.5 * (total - math.log(2 * math.pi) * 3)

    assert log_likelihood(DEFAULT_PARAMS, SHORT_SERIES) == pytest.approx(expected, rel=1e-12)
    assert log_likelihood(DEFAULT_PARAMS, SHORT_SERIES) == pytest.approx(-14.091869223905453, rel=1e-12)
    assert terminal_variance(DEFAULT_PARAMS, SHORT_SERIES) == pytest.approx(h2, rel=1e-12)
    assert terminal_variance(DEFAULT_PARAMS, SHORT_SERIES) == pytest.approx(0.15262891881818128, rel=1e-12)

def test_mean_terms_recursion_order():
    """Each step recomputes the innovation before updating the variance"""
    params = [0.1, 0.2, 0.3, 0.5, 0.01, 0.2]
    expected, h = _reference_likelihood(params, SHORT_SERIES)

    assert log_likelihood(params, SHORT_SERIES) == pytest.approx(expected, rel=1e-12)
    assert log_likelihood(params, SHORT_SERIES) == pytest.approx(-13.925232030499313, rel=1e-12)
    assert terminal_variance(params, SHORT_SERIES) == pytest.approx(h, rel=1e-12)

def test_matches_reference_loop(sample_prices):
    params = [0.05, 0.1, 0.8, 0.1, 0.001, -0.2]
    expected, h = _reference_likelihood(params, sample_prices)

    assert log_likelihood(params, sample_prices) == pytest.approx(expected, rel=1e-10)
    assert terminal_variance(params, sample_prices) == pytest.approx(h, rel=1e-10)

def test_terminal_variance_uses_first_return():
    """The first variance update already sees r_1 - mu"""
    r1 = math.log(101 / 100)
    h0 = 0.10 / (1 - 0.30 - 0.30)

    variance = terminal_variance(DEFAULT_PARAMS, SHORT_SERIES[:3])

    assert variance == pytest.approx(0.10 + 0.30 * r1 * r1 + 0.30 * h0, rel=1e-12)

def test_constant_prices_closed_form():
    """Constant prices: every innovation is zero and only omega, beta matter"""
    price = 50.0
    n = 8
    prices = np.full(n, price)

    h = 0.10 / (1 - 0.30 - 0.30)
    total = -math.log(h) - 2 * math.log(price)
    for _ in range(n - 2):
        h = 0.10 + 0.30 * h
        total += -math.log(h) - 2 * math.log(price)
    expected = 0.5 * (total - math.log(2 * math.pi) * (n - 1))

    assert log_likelihood(DEFAULT_PARAMS, prices) == pytest.approx(expected, rel=1e-12)

    # theta and phi have nothing to act on when mu = 0
    other = [0.10, 0.30, 0.30, 0.7, 0.0, -0.4]
    assert log_likelihood(other, prices) == pytest.approx(expected, rel=1e-12)

def test_scenario_path_by_hand():
    """Standardized innovations use the variance forecast before each update"""
    returns = [math.log(101 / 100), math.log(99 / 101), math.log(102 / 99)]

    h = 0.10 / (1 - 0.30 - 0.30)
    expected = []
    for r in returns:
        expected.append(r / math.sqrt(h))
        h = 0.10 + 0.30 * r * r + 0.30 * h

    path, variance = standardized_innovations(DEFAULT_PARAMS, SHORT_SERIES)

    np.testing.assert_allclose(path, expected, rtol=1e-12)
    assert variance == pytest.approx(h, rel=1e-12)

def test_scenario_path_length(sample_prices):
    path, variance = standardized_innovations(DEFAULT_PARAMS, sample_prices)

    assert len(path) == len(sample_prices) - 1
    assert variance > 0

def test_pure_function(sample_prices):
    """Repeated calls agree and never touch the input"""
    original = sample_prices.copy()

    first = log_likelihood([0.05, 0.1, 0.8, 0.1, 0.0, 0.1], sample_prices)
    second = log_likelihood([0.05, 0.1, 0.8, 0.1, 0.0, 0.1], sample_prices)

    assert first == second
    np.testing.assert_array_equal(sample_prices, original)

def test_gappy_prices_stay_finite():
    """A zero first price is absorbed by the log-return substitution"""
    prices = np.array([0.0, 100.0, 100.0, 101.0, 100.5])

    value = log_likelihood(DEFAULT_PARAMS, prices)
    path, variance = standardized_innovations(DEFAULT_PARAMS, prices)

    assert np.isfinite(value)
    assert path[0] == 0.0
    assert np.all(np.isfinite(path))

def test_zero_price_density_is_degenerate():
    """A later zero price puts ln|0| into its density term"""
    prices = np.array([100.0, 0.0, 100.0, 101.0, 100.5])

    assert not np.isfinite(log_likelihood(DEFAULT_PARAMS, prices))
    assert np.isfinite(terminal_variance(DEFAULT_PARAMS, prices))

def test_nonstationary_parameters_do_not_raise(sample_prices):
    """alpha + beta = 1 makes the initial variance infinite"""
    value = log_likelihood([0.1, 0.5, 0.5, 0.0, 0.0, 0.0], sample_prices)

    assert not np.isfinite(value)

def test_wrong_parameter_count(sample_prices):
    with pytest.raises(ValueError):
        log_likelihood([0.1, 0.3, 0.3], sample_prices)

if __name__ == '__main__':
    pytest.main([__file__])
