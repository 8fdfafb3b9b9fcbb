"""
Data-driven starting values from an arch AR(1)-GARCH(1,1) fit.
"""

import logging
import warnings
from typing import Dict
import numpy as np
from arch import arch_model

from .likelihood import log_returns

logger = logging.getLogger(__name__)


def arch_initial_guess(prices: np.ndarray, max_iterations: int = 1000) -> Dict[str, float]:
    """
    Fit an AR(1) mean with GARCH(1,1) variance and map it onto the
    ARMA-GARCH parameters. The MA term has no arch counterpart and starts at 0.

    Args:
        prices: Price observations
        max_iterations: Iteration cap passed to the arch optimizer

    Returns:
        Guess mapping with keys Omega, Alpha, Beta, Theta, Mu, Phi
    """
    returns = log_returns(prices)
    if len(returns) < 3:
        raise ValueError(f"Need at least 3 log-returns for an arch fit, got {len(returns)}")

    # Returns stay in decimal units so omega is on the same scale as the filter
    model = arch_model(
        returns,
        mean='ARX',
        lags=1,
        vol='GARCH',
        p=1,
        q=1,
        dist='normal',
        rescale=False
    )

    with warnings.catch_warnings():
        warnings.simplefilter('ignore')
        result = model.fit(
            disp='off',
            show_warning=False,
            options={'maxiter': max_iterations}
        )

    params = result.params
    guess = {
        'Omega': float(params['omega']),
        'Alpha': float(params['alpha[1]']),
        'Beta': float(params['beta[1]']),
        'Theta': 0.0,
        'Mu': float(params.iloc[0]),   # Const
        'Phi': float(params.iloc[1]),  # AR(1) coefficient
    }

    logger.info(
        "arch starting values: "
        + ", ".join(f"{k}={v:.6g}" for k, v in guess.items())
    )
    return guess
