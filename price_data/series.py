"""
Read-only price series containers used by the estimation core.
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence, Union


class TimeSeries:
    """Ordered, immutable sequence of observations with optional labels."""

    def __init__(self, values: Union[Sequence[float], np.ndarray, pd.Series],
                 labels: Optional[Sequence] = None):
        """
        Initialize time series

        Args:
            values: Observations in time order
            labels: Optional labels (e.g. dates), one per observation
        """
        if isinstance(values, pd.Series):
            if labels is None:
                labels = values.index
            values = values.to_numpy()

        data = np.array(values, dtype=float)
        if data.ndim != 1:
            raise ValueError(f"Time series must be one-dimensional, got shape {data.shape}")
        data.flags.writeable = False
        self._values = data

        if labels is not None:
            labels = pd.Index(labels)
            if len(labels) != len(data):
                raise ValueError(
                    f"Label count {len(labels)} does not match observation count {len(data)}"
                )
        self._labels = labels

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={len(self)})"

    @property
    def values(self) -> np.ndarray:
        """Read-only numpy view of the observations"""
        return self._values

    @property
    def labels(self) -> Optional[pd.Index]:
        return self._labels

    @property
    def last_value(self) -> float:
        if len(self) == 0:
            raise IndexError("Empty time series has no last value")
        return float(self._values[-1])

    def value_at(self, index: int) -> float:
        """Observation at zero-based position index"""
        return float(self._values[index])

    def label_at(self, index: int):
        if self._labels is None:
            return index
        return self._labels[index]

    def windowed(self, start: int, end: int) -> 'TimeSeriesView':
        """Read-only view over positions start..end (both inclusive)"""
        return TimeSeriesView(self, start, end)

    def to_series(self) -> pd.Series:
        return pd.Series(self._values, index=self._labels)


class TimeSeriesView(TimeSeries):
    """Window over another series, sharing its memory"""

    def __init__(self, parent: TimeSeries, start: int, end: int):
        n = len(parent)
        if not (0 <= start <= end < n):
            raise IndexError(
                f"Window [{start}, {end}] outside series of length {n}"
            )
        self.parent = parent
        self.start = start
        self.end = end
        # Slicing a read-only array yields a read-only view
        self._values = parent.values[start:end + 1]
        self._labels = None if parent.labels is None else parent.labels[start:end + 1]

    def __repr__(self) -> str:
        return f"TimeSeriesView(start={self.start}, end={self.end}, n={len(self)})"


def as_time_series(series) -> TimeSeries:
    """Wrap arrays, lists and pandas Series; pass TimeSeries through"""
    if isinstance(series, TimeSeries):
        return series
    return TimeSeries(series)
