"""
Loading of price series from CSV files and pandas objects.
"""

import logging
from pathlib import Path
from typing import Optional, Union
import pandas as pd
from price_data.series import TimeSeries

logger = logging.getLogger(__name__)


class PriceLoader:
    def __init__(self, date_column: str = 'date'):
        """Initialize loader with the name of the date column"""
        self.date_column = date_column

    def load_csv(self, file_path: Union[str, Path], price_column: str) -> TimeSeries:
        """Load one price column from a CSV file, ordered by date."""
        df = pd.read_csv(file_path)
        if price_column not in df.columns:
            raise ValueError(
                f"Column {price_column!r} not found in {file_path}; "
                f"available: {list(df.columns)}"
            )

        if self.date_column in df.columns:
            df[self.date_column] = pd.to_datetime(df[self.date_column])
            df = df.sort_values(self.date_column).set_index(self.date_column)

        prices = df[price_column]
        n_missing = int(prices.isna().sum())
        if n_missing:
            logger.warning(f"Dropping {n_missing} missing prices from {price_column}")
            prices = prices.dropna()

        logger.info(
            f"Loaded {len(prices)} prices for {price_column} from {Path(file_path).name}"
        )
        return self.from_pandas(prices)

    def from_pandas(self, prices: Union[pd.Series, pd.DataFrame],
                    column: Optional[str] = None) -> TimeSeries:
        """Build a series from a pandas Series or one DataFrame column"""
        if isinstance(prices, pd.DataFrame):
            if column is None:
                if prices.shape[1] != 1:
                    raise ValueError("DataFrame input needs a column name")
                column = prices.columns[0]
            prices = prices[column]
        return TimeSeries(prices.astype(float))
