"""
Forecast Generation Module

Public entry point of the engine. Validates the request, then runs
normalize -> decompose -> simulate -> aggregate and returns one
ForecastStep per future month.
"""

import numpy as np
from typing import List, Optional, Tuple

from config import FORECAST_CONFIG, SIMULATION_CONFIG
from waste_forecast.decomposition import LinearSeasonalDecomposer
from waste_forecast.ensemble import EnsembleAggregator
from waste_forecast.errors import ComputeError, ConfigError
from waste_forecast.normalization import SeriesInput, normalize_series
from waste_forecast.simulation import PathSimulator, RandomState, make_seed_sequence
from waste_forecast.structures import Decomposition, ForecastResult, ForecastStep


def _check_count(name: str, value, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise ConfigError(f"{name} must be >= 1, got {value}")
    if value > maximum:
        raise ConfigError(f"{name} must be <= {maximum}, got {value}")
    return int(value)


def _check_decomposition(decomposition: Decomposition) -> None:
    scalars = [decomposition.trend_slope, decomposition.trend_intercept,
               decomposition.trend_slope_stderr, *decomposition.seasonal_index.values()]
    if not np.isfinite(scalars).all() or not np.isfinite(decomposition.residuals).all():
        raise ComputeError("Decomposition produced non-finite trend, seasonal or residual values")


class HybridForecaster:
    """Hybrid forecasting combining trend/seasonal decomposition and residual simulation"""

    def __init__(self,
                 seasonal_mode: Optional[str] = None,
                 min_seasonal_months: Optional[int] = None,
                 min_resample_size: Optional[int] = None,
                 trend_uncertainty: Optional[bool] = None,
                 band_method: Optional[str] = None,
                 confidence: Optional[float] = None,
                 n_jobs: Optional[int] = None,
                 verbose: bool = False):
        """
        Initialize hybrid forecaster

        Args:
            seasonal_mode: 'additive' or 'multiplicative'
            min_seasonal_months: Minimum history to estimate seasonality
            min_resample_size: Residual count below which noise is Gaussian
            trend_uncertainty: Perturb the slope per trial
            band_method: 'percentile' or 'parametric'
            confidence: Band coverage, e.g. 0.95
            n_jobs: joblib workers for the trials
            verbose: Print progress
        """
        self.decomposer = LinearSeasonalDecomposer(
            seasonal_mode=seasonal_mode,
            min_seasonal_months=min_seasonal_months,
            verbose=verbose
        )
        self.aggregator = EnsembleAggregator(method=band_method, confidence=confidence)
        self.min_resample_size = min_resample_size
        self.trend_uncertainty = trend_uncertainty
        self.n_jobs = n_jobs
        self.verbose = verbose

        self.max_horizon = FORECAST_CONFIG['max_horizon']
        self.max_iterations = FORECAST_CONFIG['max_iterations']

    def validate_request(self, horizon, iterations) -> Tuple[int, int]:
        """
        Returns:
            horizon, iterations as plain ints

        Raises:
            ConfigError: horizon or iterations is not an integer in range
        """
        return (_check_count('horizon', horizon, self.max_horizon),
                _check_count('iterations', iterations, self.max_iterations))

    def run(self,
            series: SeriesInput,
            iterations: Optional[int] = None,
            horizon: Optional[int] = None,
            random_state: RandomState = None,
            keep_samples: bool = False) -> ForecastResult:
        """
        Generate a forecast with its supporting context

        Args:
            series: Historical monthly series
            iterations: Number of simulated paths (default from config)
            horizon: Number of months to forecast (default from config)
            random_state: Master seed; same seed + inputs => identical output
            keep_samples: Attach the raw sample matrix to the result

        Returns:
            ForecastResult

        Raises:
            ConfigError: invalid horizon / iterations / random_state
            DataError: fewer than 2 distinct periods or malformed series
            ComputeError: numeric failure
        """
        iterations = iterations if iterations is not None else SIMULATION_CONFIG['iterations']
        horizon = horizon if horizon is not None else FORECAST_CONFIG['forecast_horizon']
        if random_state is None:
            random_state = SIMULATION_CONFIG['seed']

        horizon, iterations = self.validate_request(horizon, iterations)
        master_seed = make_seed_sequence(random_state)
        history = normalize_series(series)

        if self.verbose:
            print(f"\n  Generating forecast...")
            print(f"    History: {len(history)} months ({history.periods[0]} to {history.last_period})")
            print(f"    Horizon: {horizon} months, iterations: {iterations}")
            if iterations < FORECAST_CONFIG['recommended_min_iterations']:
                print(f"    ⚠ Fewer than {FORECAST_CONFIG['recommended_min_iterations']} iterations: "
                      f"band estimates may be unstable")

        decomposition = self.decomposer.decompose(history)
        _check_decomposition(decomposition)

        simulator = PathSimulator(
            decomposition,
            min_resample_size=self.min_resample_size,
            trend_uncertainty=self.trend_uncertainty,
            n_jobs=self.n_jobs
        )

        try:
            with np.errstate(over='raise', invalid='raise'):
                samples = simulator.simulate(horizon, iterations, master_seed)
                steps = self.aggregator.aggregate(samples)
        except (FloatingPointError, OverflowError) as e:
            raise ComputeError(f"Numeric failure while simulating forecast: {e}") from e

        if self.verbose:
            noise = 'resampled residuals' if simulator.uses_resampling else 'gaussian residuals'
            print(f"    Noise model: {noise}")
            print(f"    Mean forecast: {np.mean([s.mean for s in steps]):.2f}")
            print(f"    ✓ Forecast generated")

        return ForecastResult(
            steps=steps,
            periods=decomposition.future_periods(horizon),
            history=history,
            decomposition=decomposition,
            samples=samples if keep_samples else None
        )

    def forecast(self,
                 series: SeriesInput,
                 iterations: Optional[int] = None,
                 horizon: Optional[int] = None,
                 random_state: RandomState = None) -> List[ForecastStep]:
        """
        Generate forecast steps

        Returns:
            Exactly `horizon` ForecastSteps with step = 0..horizon-1
        """
        return self.run(series, iterations, horizon, random_state).steps


def forecast(series: SeriesInput,
             iterations: Optional[int] = None,
             horizon: Optional[int] = None,
             random_state: RandomState = None,
             **kwargs) -> List[ForecastStep]:
    """
    Convenience function to forecast a monthly series

    Args:
        series: Historical monthly series
        iterations: Number of simulated paths
        horizon: Number of months to forecast
        random_state: Master seed
        **kwargs: HybridForecaster options

    Returns:
        List of ForecastStep
    """
    forecaster = HybridForecaster(**kwargs)
    return forecaster.forecast(series, iterations, horizon, random_state)
