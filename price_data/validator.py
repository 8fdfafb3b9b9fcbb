"""
Validation of price series before model estimation.
"""

import numpy as np
from typing import List, Tuple
from price_data.series import TimeSeries


class PriceValidator:
    """Validates price series for ARMA-GARCH estimation."""

    def __init__(self, min_observations: int = 3):
        # The filter needs two log-returns to produce one likelihood term
        self.min_observations = min_observations

    def validate_prices(self, series: TimeSeries) -> Tuple[bool, List[str]]:
        """
        Validates the price series.

        Args:
            series: Price series to check

        Returns:
            Tuple of (is_valid, list_of_issues)
        """
        issues = []
        values = series.values

        if len(values) < self.min_observations:
            issues.append(
                f"Insufficient observations: {len(values)} < {self.min_observations}"
            )

        non_finite = np.flatnonzero(~np.isfinite(values))
        if non_finite.size:
            issues.append(
                f"Found {non_finite.size} non-finite prices (first at index {non_finite[0]})"
            )

        with np.errstate(invalid='ignore'):
            non_positive = np.flatnonzero(values <= 0)
        if non_positive.size:
            issues.append(
                f"Found {non_positive.size} non-positive prices (first at index {non_positive[0]})"
            )

        return len(issues) == 0, issues

    def require_valid(self, series: TimeSeries) -> None:
        """Raise ValueError listing every issue found"""
        is_valid, issues = self.validate_prices(series)
        if not is_valid:
            raise ValueError("Invalid price series: " + "; ".join(issues))
