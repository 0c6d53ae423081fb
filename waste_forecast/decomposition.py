"""
Decomposition Module

Splits a normalized monthly series into a linear trend, a per-calendar-month
seasonal index and residuals. The residuals are the empirical noise
distribution the path simulator draws from.
"""

import pandas as pd
import numpy as np
import statsmodels.api as sm
from typing import Dict, Optional, Tuple
import warnings
warnings.filterwarnings('ignore')

from config import DECOMPOSITION_CONFIG
from waste_forecast.errors import ConfigError
from waste_forecast.structures import (
    ADDITIVE, MULTIPLICATIVE, SEASONAL_MODES, Decomposition, NormalizedSeries
)

MONTHS = range(1, 13)


class LinearSeasonalDecomposer:
    """Least-squares trend with a calendar-month seasonal index"""

    def __init__(self,
                 seasonal_mode: Optional[str] = None,
                 min_seasonal_months: Optional[int] = None,
                 verbose: bool = False):
        """
        Initialize decomposer

        Args:
            seasonal_mode: 'additive' or 'multiplicative' (default from config)
            min_seasonal_months: Minimum series length to estimate seasonality;
                shorter series get a neutral index
            verbose: Print fit summary
        """
        self.seasonal_mode = seasonal_mode or DECOMPOSITION_CONFIG['seasonal_mode']
        self.min_seasonal_months = (min_seasonal_months if min_seasonal_months is not None
                                    else DECOMPOSITION_CONFIG['min_seasonal_months'])
        self.verbose = verbose

        if self.seasonal_mode not in SEASONAL_MODES:
            raise ConfigError(
                f"Unknown seasonal mode: {self.seasonal_mode!r} (expected one of {SEASONAL_MODES})"
            )
        if self.min_seasonal_months < 2:
            raise ConfigError(f"min_seasonal_months must be >= 2, got {self.min_seasonal_months}")

    @property
    def neutral(self) -> float:
        return 1.0 if self.seasonal_mode == MULTIPLICATIVE else 0.0

    def fit_trend(self, values: np.ndarray) -> Tuple[float, float]:
        """
        Fit value ~ intercept + slope * t by ordinary least squares

        Args:
            values: Normalized series values (length >= 2)

        Returns:
            slope, intercept
        """
        # A flat series has an exact answer; OLS would leave round-off residuals
        if np.ptp(values) == 0:
            return 0.0, float(values[0])

        t = np.arange(len(values), dtype=float)
        X = sm.add_constant(t, has_constant='add')
        fitted_model = sm.OLS(values, X).fit()
        intercept, slope = fitted_model.params

        return float(slope), float(intercept)

    def estimate_seasonal_index(self,
                                series: NormalizedSeries,
                                trend: np.ndarray) -> Tuple[Dict[int, float], bool]:
        """
        Average deviation from trend per calendar month, re-centred to neutral

        Only observed (not imputed) months contribute. Months without a usable
        observation stay neutral.

        Args:
            series: Normalized series
            trend: Trend line evaluated at each step of the series

        Returns:
            seasonal index by month (1-12), whether it was estimated
        """
        index = {month: self.neutral for month in MONTHS}

        if len(series) < self.min_seasonal_months:
            return index, False

        usable = series.observed.copy()
        if self.seasonal_mode == MULTIPLICATIVE:
            usable &= trend > 0
            deviations = np.divide(series.values, trend,
                                   out=np.full(len(series), np.nan), where=trend > 0)
        else:
            deviations = series.values - trend

        frame = pd.DataFrame({
            'month': np.asarray(series.periods.month),
            'deviation': deviations
        })[usable]

        for month, deviation in frame.groupby('month')['deviation'].mean().items():
            index[int(month)] = float(deviation)

        center = np.mean(list(index.values()))
        if self.seasonal_mode == MULTIPLICATIVE:
            if center <= 0:
                return {month: self.neutral for month in MONTHS}, False
            index = {month: value / center for month, value in index.items()}
        else:
            index = {month: value - center for month, value in index.items()}

        return index, True

    @staticmethod
    def slope_stderr(residuals: np.ndarray) -> float:
        """Standard error of the trend slope implied by the residuals"""
        n = len(residuals)
        if n <= 2:
            return 0.0

        ssr = float(np.sum(residuals ** 2))
        if ssr == 0:
            return 0.0

        t = np.arange(n, dtype=float)
        sxx = float(np.sum((t - t.mean()) ** 2))
        return float(np.sqrt(ssr / (n - 2) / sxx))

    def decompose(self, series: NormalizedSeries) -> Decomposition:
        """
        Decompose a normalized series

        Args:
            series: NormalizedSeries with at least 2 steps

        Returns:
            Decomposition record
        """
        values = series.values
        n = len(values)
        t = np.arange(n, dtype=float)

        slope, intercept = self.fit_trend(values)
        trend = intercept + slope * t

        seasonal_index, estimated = self.estimate_seasonal_index(series, trend)

        decomposition = Decomposition(
            seasonal_mode=self.seasonal_mode,
            trend_slope=slope,
            trend_intercept=intercept,
            seasonal_index=seasonal_index,
            residuals=np.zeros(n),
            last_index=n - 1,
            last_period=series.last_period,
            time_center=float(t.mean()),
            seasonal_estimated=estimated
        )

        fitted_values = decomposition.apply_seasonal(trend, series.periods)
        decomposition.residuals = values - fitted_values
        decomposition.trend_slope_stderr = self.slope_stderr(decomposition.residuals)

        if self.verbose:
            print(f"\n  Decomposing series ({n} months, "
                  f"{series.periods[0]} to {series.periods[-1]})...")
            print(f"    Imputed months: {series.n_imputed}")
            print(f"    Trend: slope={slope:.3f} (se={decomposition.trend_slope_stderr:.3f}), "
                  f"intercept={intercept:.2f}")
            if estimated:
                print(f"    Seasonal index ({self.seasonal_mode}) estimated from {n} months")
            else:
                print(f"    Seasonal index neutral (< {self.min_seasonal_months} months)")
            print(f"    Residual std: {decomposition.residual_std:.2f}")

        return decomposition


def decompose_series(series: NormalizedSeries,
                     seasonal_mode: Optional[str] = None,
                     min_seasonal_months: Optional[int] = None) -> Decomposition:
    """
    Convenience function to decompose a normalized series

    Args:
        series: NormalizedSeries
        seasonal_mode: 'additive' or 'multiplicative'
        min_seasonal_months: Minimum length to estimate seasonality

    Returns:
        Decomposition record
    """
    decomposer = LinearSeasonalDecomposer(
        seasonal_mode=seasonal_mode,
        min_seasonal_months=min_seasonal_months
    )
    return decomposer.decompose(series)
