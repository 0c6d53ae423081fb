"""
Forecasting Data Structures

Records passed between the normalizer, decomposer, simulator and aggregator.
All of them are created per forecast call and discarded on return.
"""

import pandas as pd
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from waste_forecast.errors import DataError

ADDITIVE = 'additive'
MULTIPLICATIVE = 'multiplicative'
SEASONAL_MODES = (ADDITIVE, MULTIPLICATIVE)


def as_period(value) -> pd.Period:
    """
    Convert a period-like value to a calendar-month Period

    Args:
        value: 'YYYY-MM' or date string, datetime, Timestamp or Period

    Returns:
        Monthly pandas Period
    """
    if value is None or (not isinstance(value, pd.Period) and pd.isna(value)):
        raise DataError("Missing period in time series point")

    try:
        if isinstance(value, pd.Period):
            return value.asfreq('M')
        return pd.Timestamp(value).to_period('M')
    except (TypeError, ValueError) as e:
        raise DataError(f"Invalid period: {value!r}") from e


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One aggregated month of waste generation"""
    period: pd.Period
    value: float

    @classmethod
    def from_dict(cls, data: Dict) -> 'TimeSeriesPoint':
        if 'period' not in data or 'value' not in data:
            raise DataError(f"Time series point needs 'period' and 'value': {data!r}")
        try:
            value = float(data['value'])
        except (TypeError, ValueError) as e:
            raise DataError(f"Invalid value for period {data['period']!r}: {data['value']!r}") from e
        return cls(period=as_period(data['period']), value=value)

    def to_dict(self) -> Dict:
        return {'period': str(self.period), 'value': float(self.value)}


@dataclass
class NormalizedSeries:
    """
    Gap-free monthly series

    values[i] belongs to periods[i]; observed[i] is False for months
    that were filled in by the normalizer.
    """
    values: np.ndarray
    periods: pd.PeriodIndex
    observed: np.ndarray

    def __len__(self) -> int:
        return len(self.values)

    @property
    def last_period(self) -> pd.Period:
        return self.periods[-1]

    @property
    def n_imputed(self) -> int:
        return int((~self.observed).sum())

    def to_points(self, observed_only: bool = False) -> List[TimeSeriesPoint]:
        points = []
        for period, value, is_observed in zip(self.periods, self.values, self.observed):
            if observed_only and not is_observed:
                continue
            points.append(TimeSeriesPoint(period=period, value=float(value)))
        return points

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'period': self.periods,
            'value': self.values,
            'observed': self.observed,
        })


@dataclass
class Decomposition:
    """
    Trend + seasonal + residual split of a normalized series

    Tagged by seasonal_mode rather than by subclass: 'additive' combines
    trend and seasonal index by addition, 'multiplicative' by product.
    """
    seasonal_mode: str
    trend_slope: float
    trend_intercept: float
    seasonal_index: Dict[int, float]
    residuals: np.ndarray
    last_index: int
    last_period: pd.Period
    time_center: float
    trend_slope_stderr: float = 0.0
    seasonal_estimated: bool = False

    def trend_at(self, t) -> np.ndarray:
        return self.trend_intercept + self.trend_slope * np.asarray(t, dtype=float)

    def seasonal_factors(self, periods) -> np.ndarray:
        return np.array([self.seasonal_index[period.month] for period in periods], dtype=float)

    def combine(self, trend: np.ndarray, factors: np.ndarray) -> np.ndarray:
        if self.seasonal_mode == MULTIPLICATIVE:
            return trend * factors
        return trend + factors

    def apply_seasonal(self, trend: np.ndarray, periods) -> np.ndarray:
        return self.combine(trend, self.seasonal_factors(periods))

    def history_periods(self) -> pd.PeriodIndex:
        return pd.period_range(end=self.last_period, periods=self.last_index + 1, freq='M')

    def future_index(self, horizon: int) -> np.ndarray:
        return self.last_index + 1 + np.arange(horizon, dtype=float)

    def future_periods(self, horizon: int) -> pd.PeriodIndex:
        return pd.period_range(start=self.last_period + 1, periods=horizon, freq='M')

    def fitted_values(self) -> np.ndarray:
        t = np.arange(self.last_index + 1, dtype=float)
        return self.apply_seasonal(self.trend_at(t), self.history_periods())

    def deterministic_component(self, horizon: int) -> np.ndarray:
        """Trend extrapolation adjusted by the seasonal index of each future month"""
        trend = self.trend_at(self.future_index(horizon))
        return self.apply_seasonal(trend, self.future_periods(horizon))

    @property
    def residual_std(self) -> float:
        if len(self.residuals) == 0:
            return 0.0
        return float(np.std(self.residuals))


@dataclass
class ForecastStep:
    """Forecast statistics for one future period"""
    step: int
    mean: float
    upper: float
    lower: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def to_dict(self) -> Dict:
        return {
            'step': int(self.step),
            'mean': float(self.mean),
            'upper': float(self.upper),
            'lower': float(self.lower),
        }


@dataclass
class ForecastResult:
    """Full forecaster output: steps plus the context they were built from"""
    steps: List[ForecastStep]
    periods: pd.PeriodIndex
    history: NormalizedSeries
    decomposition: Decomposition
    samples: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def horizon(self) -> int:
        return len(self.steps)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'step': [s.step for s in self.steps],
            'period': self.periods.astype(str),
            'mean': [s.mean for s in self.steps],
            'lower': [s.lower for s in self.steps],
            'upper': [s.upper for s in self.steps],
        })
