"""
Price data package for ARMA-GARCH estimation.
Handles series containers, loading, and validation.
"""

from .series import TimeSeries, TimeSeriesView, as_time_series
from .loader import PriceLoader
from .validator import PriceValidator

__all__ = ['TimeSeries', 'TimeSeriesView', 'as_time_series', 'PriceLoader', 'PriceValidator']
