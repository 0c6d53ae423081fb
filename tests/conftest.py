"""
Pytest fixtures for forecasting tests.
"""
import matplotlib
matplotlib.use('Agg')

import numpy as np
import pandas as pd
import pytest

from waste_forecast.structures import TimeSeriesPoint


def make_points(values, start: str = '2020-01') -> list:
    """
    Build consecutive monthly TimeSeriesPoints.

    Args:
        values: Monthly values, first one at `start`
        start: First period ('YYYY-MM')

    Returns:
        List of TimeSeriesPoint
    """
    periods = pd.period_range(start=start, periods=len(values), freq='M')
    return [TimeSeriesPoint(period=p, value=float(v)) for p, v in zip(periods, values)]


def make_trend_series(n_months: int = 36, slope: float = 5.0, noise: float = 10.0,
                      seed: int = 7, start: str = '2020-01') -> list:
    """Linear trend plus Gaussian noise, kept non-negative."""
    rng = np.random.default_rng(seed)
    t = np.arange(n_months)
    values = np.maximum(500.0 + slope * t + rng.normal(0.0, noise, n_months), 0.0)
    return make_points(values, start=start)


@pytest.fixture
def flat_two_points():
    """Exactly 2 months with the same value."""
    return make_points([250.0, 250.0])


@pytest.fixture
def alternating_series():
    """24 months alternating 100, 110, 100, ... starting in January."""
    return make_points([100.0 if i % 2 == 0 else 110.0 for i in range(24)], start='2020-01')


@pytest.fixture
def outlier_series():
    """24 months at 100 with a single month at 1000."""
    values = [100.0] * 24
    values[10] = 1000.0
    return make_points(values)


@pytest.fixture
def trend_series():
    """36 months of noisy linear growth."""
    return make_trend_series()


@pytest.fixture
def seasonal_series():
    """48 months of trend with a December peak."""
    t = np.arange(48)
    periods = pd.period_range(start='2019-01', periods=48, freq='M')
    seasonal = np.array([30.0 if p.month == 12 else (-10.0 if p.month == 6 else 0.0) for p in periods])
    return make_points(200.0 + 2.0 * t + seasonal, start='2019-01')


@pytest.fixture
def records_df():
    """Small set of submission records over 4 months."""
    return pd.DataFrame({
        'date': pd.to_datetime([
            '2023-01-05', '2023-01-20', '2023-02-11', '2023-03-02',
            '2023-03-28', '2023-04-15', '2023-04-30',
        ]),
        'title': ['Monthly Report', 'Monthly Report', 'Monthly Report', 'Special Report',
                  'Monthly Report', 'Monthly Report', 'Monthly Report'],
        'region': ['NCR', 'Region IV-A', 'NCR', 'NCR', 'Region IV-A', 'NCR', 'NCR'],
        'province': ['Metro Manila', 'Laguna', 'Metro Manila', 'Metro Manila', 'Cavite',
                     'Metro Manila', 'Metro Manila'],
        'municipality': ['Quezon City', 'Calamba', 'Makati', 'Quezon City', 'Bacoor',
                         'Quezon City', 'Makati'],
        'name': ['Maria Santos', 'Jose Reyes', 'Maria Santos', 'Ana Cruz', 'Jose Reyes',
                 'Maria Santos', 'Ana Cruz'],
        'company_name': ['GreenCorp', 'EcoWaste', 'GreenCorp', 'GreenCorp', 'EcoWaste',
                         'GreenCorp', 'EcoWaste'],
        'waste_amount': [10.0, 20.0, 30.0, 5.0, 15.0, 25.0, 35.0],
    })
