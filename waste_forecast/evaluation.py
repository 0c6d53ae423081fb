"""
Evaluation Module

Backtest metrics for probabilistic monthly forecasts:
- MAPE (Mean Absolute Percentage Error)
- MAE (Mean Absolute Error)
- RMSE
- MASE (Mean Absolute Scaled Error, seasonal naive baseline)
- Bias
- Band coverage and width
"""

import numpy as np
from typing import Dict, List, Optional

from config import DECOMPOSITION_CONFIG, EVALUATION_CONFIG, METRIC_TARGETS
from waste_forecast.errors import DataError
from waste_forecast.forecast import HybridForecaster
from waste_forecast.normalization import SeriesInput, normalize_series
from waste_forecast.structures import ForecastStep


def calculate_mape(actual: np.ndarray, predicted: np.ndarray, epsilon: float = 1e-10) -> float:
    """
    Calculate Mean Absolute Percentage Error

    Args:
        actual: Actual values
        predicted: Predicted values
        epsilon: Small value to avoid division by zero

    Returns:
        MAPE percentage
    """
    # Remove zero actuals to avoid division by zero
    mask = actual > epsilon
    if mask.sum() == 0:
        return np.nan

    return float(np.mean(np.abs((actual[mask] - predicted[mask]) / actual[mask])) * 100)


def calculate_mae(actual: np.ndarray, predicted: np.ndarray) -> float:
    return float(np.mean(np.abs(actual - predicted)))


def calculate_rmse(actual: np.ndarray, predicted: np.ndarray) -> float:
    return float(np.sqrt(np.mean((actual - predicted)**2)))


def calculate_mase(actual: np.ndarray,
                   predicted: np.ndarray,
                   history: np.ndarray,
                   seasonal_period: int = 12) -> float:
    """
    Calculate Mean Absolute Scaled Error

    Scales the forecast MAE by the in-sample MAE of a seasonal naive
    forecast on the training history.

    MASE < 1: Better than naive seasonal forecast
    MASE > 1: Worse than naive seasonal forecast

    Args:
        actual: Actual values
        predicted: Predicted values
        history: Training values the forecast was fitted on
        seasonal_period: Seasonal period for naive forecast

    Returns:
        MASE
    """
    if len(history) <= seasonal_period:
        # Fall back to the one-step naive forecast
        seasonal_period = 1
    if len(history) <= seasonal_period:
        return np.nan

    mae_naive = np.mean(np.abs(history[seasonal_period:] - history[:-seasonal_period]))
    if mae_naive == 0:
        return np.nan

    return float(np.mean(np.abs(actual - predicted)) / mae_naive)


def calculate_bias(actual: np.ndarray, predicted: np.ndarray) -> float:
    """
    Calculate bias (tendency to over/under forecast)

    Positive: Over-forecasting
    Negative: Under-forecasting

    Returns:
        Bias percentage
    """
    total_actual = np.sum(actual)
    if total_actual == 0:
        return np.nan

    return float((np.sum(predicted) - total_actual) / total_actual * 100)


def calculate_coverage(actual: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> float:
    """Percentage of actual values inside [lower, upper]"""
    if len(actual) == 0:
        return np.nan
    inside = (actual >= lower) & (actual <= upper)
    return float(inside.mean() * 100)


def calculate_band_width(lower: np.ndarray, upper: np.ndarray) -> float:
    """Average width of the confidence band"""
    return float(np.mean(upper - lower))


def evaluate_forecast(actual: np.ndarray,
                      steps: List[ForecastStep],
                      label: Optional[str] = None,
                      history: Optional[np.ndarray] = None) -> Dict[str, float]:
    """
    Score forecast steps against actual values

    Args:
        actual: Actual values, one per step
        steps: ForecastSteps
        label: Name for display
        history: Training values (for MASE)

    Returns:
        Dictionary of metrics
    """
    actual = np.asarray(actual, dtype=float)
    if len(actual) != len(steps):
        raise DataError(f"Got {len(actual)} actual values for {len(steps)} forecast steps")

    predicted = np.array([s.mean for s in steps])
    lower = np.array([s.lower for s in steps])
    upper = np.array([s.upper for s in steps])

    mape = calculate_mape(actual, predicted)
    mase = (calculate_mase(actual, predicted, np.asarray(history, dtype=float),
                           seasonal_period=DECOMPOSITION_CONFIG['season_length'])
            if history is not None else np.nan)
    coverage = calculate_coverage(actual, lower, upper)

    metrics = {
        'label': label,
        'n_samples': len(actual),
        'MAPE': round(mape, 2),
        'MAE': round(calculate_mae(actual, predicted), 2),
        'RMSE': round(calculate_rmse(actual, predicted), 2),
        'MASE': round(mase, 3),
        'Bias%': round(calculate_bias(actual, predicted), 2),
        'Coverage%': round(coverage, 1),
        'BandWidth': round(calculate_band_width(lower, upper), 2),
        'mean_actual': round(float(np.mean(actual)), 2),
        'mean_predicted': round(float(np.mean(predicted)), 2),
    }

    mape_target = METRIC_TARGETS['mape_target']
    coverage_target = METRIC_TARGETS['coverage_target']

    if label:
        print(f"\n{'='*60}")
        print(f"Backtest: {label}")
        print(f"{'='*60}")

    print(f"  Samples:   {metrics['n_samples']}")
    print(f"  MAPE:      {metrics['MAPE']:.2f}% {'✓' if mape < mape_target else '✗'}")
    print(f"  MAE:       {metrics['MAE']:.2f}")
    print(f"  RMSE:      {metrics['RMSE']:.2f}")
    print(f"  MASE:      {metrics['MASE']:.3f}")
    print(f"  Bias:      {metrics['Bias%']:.2f}%")
    print(f"  Coverage:  {metrics['Coverage%']:.1f}% {'✓' if coverage >= coverage_target else '✗'}")
    print(f"  Band width: {metrics['BandWidth']:.2f}")

    if label:
        print(f"{'='*60}\n")

    return metrics


def backtest_forecast(series: SeriesInput,
                      holdout_months: Optional[int] = None,
                      iterations: Optional[int] = None,
                      random_state=None,
                      forecaster: Optional[HybridForecaster] = None,
                      label: Optional[str] = None) -> Dict[str, float]:
    """
    Hold out the last months, forecast them from the rest and score

    Only observed months of the training window are passed to the
    forecaster; held-out actuals are the normalized values.

    Args:
        series: Historical monthly series
        holdout_months: Months to hold out (default from config)
        iterations: Simulated paths (default from config)
        random_state: Master seed (default from config)
        forecaster: Configured HybridForecaster
        label: Name for display

    Returns:
        Dictionary of metrics
    """
    holdout_months = holdout_months or EVALUATION_CONFIG['holdout_months']
    iterations = iterations or EVALUATION_CONFIG['iterations']
    if random_state is None:
        random_state = EVALUATION_CONFIG['seed']

    history = normalize_series(series)
    n_train = len(history) - holdout_months

    train_points = [
        point for point in history.to_points(observed_only=True)
        if point.period <= history.periods[n_train - 1]
    ] if n_train > 0 else []

    if len(train_points) < 2:
        raise DataError(
            f"Not enough history to hold out {holdout_months} months "
            f"({len(history)} months available)"
        )

    # Imputed months at the end of the training window are forecast too, then skipped
    gap = (history.periods[n_train - 1] - train_points[-1].period).n

    forecaster = forecaster or HybridForecaster()
    steps = forecaster.forecast(train_points, iterations, holdout_months + gap, random_state)[gap:]

    return evaluate_forecast(
        history.values[n_train:],
        steps,
        label=label,
        history=history.values[:n_train]
    )
