import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest
import numpy as np
import pandas as pd
from price_data import TimeSeries, TimeSeriesView, PriceLoader, PriceValidator

@pytest.fixture
def sample_series():
    """Ten labeled prices"""
    dates = pd.bdate_range('2024-01-01', periods=10)
    values = np.linspace(100, 109, 10)
    return TimeSeries(values, labels=dates)

def test_basic_access(sample_series):
    assert len(sample_series) == 10
    assert sample_series.value_at(0) == 100.0
    assert sample_series.last_value == 109.0
    assert sample_series.label_at(3) == pd.Timestamp('2024-01-04')

def test_values_read_only(sample_series):
    with pytest.raises(ValueError):
        sample_series.values[0] = 1.0

def test_input_is_copied():
    source = np.array([1.0, 2.0, 3.0])
    series = TimeSeries(source)
    source[0] = 99.0

    assert series.value_at(0) == 1.0

def test_window_is_inclusive_view(sample_series):
    view = sample_series.windowed(2, 5)

    assert isinstance(view, TimeSeriesView)
    assert len(view) == 4
    assert view.value_at(0) == 102.0
    assert view.last_value == 105.0
    assert view.label_at(0) == sample_series.label_at(2)
    assert np.shares_memory(view.values, sample_series.values)

def test_nested_window(sample_series):
    inner = sample_series.windowed(2, 8).windowed(1, 3)

    np.testing.assert_array_equal(inner.values, [103.0, 104.0, 105.0])

@pytest.mark.parametrize('start,end', [(-1, 3), (5, 4), (0, 10)])
def test_window_out_of_range(sample_series, start, end):
    with pytest.raises(IndexError):
        sample_series.windowed(start, end)

def test_label_length_mismatch():
    with pytest.raises(ValueError):
        TimeSeries([1.0, 2.0], labels=['a'])

def test_validator_reports_every_issue():
    validator = PriceValidator()

    is_valid, issues = validator.validate_prices(TimeSeries([100.0, np.nan]))

    assert not is_valid
    assert len(issues) == 2  # too short and non-finite

    is_valid, issues = validator.validate_prices(TimeSeries([100.0, 101.0, 102.0]))
    assert is_valid
    assert issues == []

def test_validator_raises():
    with pytest.raises(ValueError, match="non-positive"):
        PriceValidator().require_valid(TimeSeries([100.0, 0.0, 101.0]))

def test_load_csv(tmp_path):
    csv_file = tmp_path / "prices.csv"
    pd.DataFrame({
        'date': ['2024-01-03', '2024-01-02', '2024-01-04', '2024-01-05'],
        'SPX': [4700.0, 4750.0, None, 4710.0],
    }).to_csv(csv_file, index=False)

    series = PriceLoader().load_csv(csv_file, 'SPX')

    # Sorted by date, missing price dropped
    np.testing.assert_array_equal(series.values, [4750.0, 4700.0, 4710.0])
    assert series.label_at(0) == pd.Timestamp('2024-01-02')

def test_load_csv_missing_column(tmp_path):
    csv_file = tmp_path / "prices.csv"
    pd.DataFrame({'date': ['2024-01-02'], 'SPX': [1.0]}).to_csv(csv_file, index=False)

    with pytest.raises(ValueError):
        PriceLoader().load_csv(csv_file, 'UKX')

def test_from_dataframe():
    df = pd.DataFrame({'SPX': [1.0, 2.0, 3.0], 'UKX': [4.0, 5.0, 6.0]})

    series = PriceLoader().from_pandas(df, column='UKX')

    assert series.last_value == 6.0
    with pytest.raises(ValueError):
        PriceLoader().from_pandas(df)

if __name__ == '__main__':
    pytest.main([__file__])
