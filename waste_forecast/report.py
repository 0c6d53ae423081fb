"""
Forecast Report Module

Request/response glue for the dashboard's forecast endpoint. Parses the
query parameters, runs the forecaster and wraps the outcome in the JSON
envelope the charting layer consumes:

    success: {success, horizon, simResult, timeSeriesData}
    failure: {success: False, message}
"""

import pandas as pd
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import FORECAST_CONFIG
from waste_forecast.aggregation import aggregate_monthly
from waste_forecast.errors import ConfigError, ForecastError
from waste_forecast.forecast import HybridForecaster
from waste_forecast.normalization import SeriesInput, to_points
from waste_forecast.structures import ForecastStep, TimeSeriesPoint

FILTER_PARAMS = {
    'title': 'title',
    'location': 'location',
    'author': 'author',
    'company': 'company',
    'startDate': 'start_date',
    'endDate': 'end_date',
}


@dataclass
class ForecastRequest:
    """Parsed forecast endpoint parameters"""
    forecast_months: int = FORECAST_CONFIG['forecast_horizon']
    iterations: Optional[int] = None
    seed: Optional[int] = None
    filters: Dict[str, Any] = field(default_factory=dict)


def _parse_int(params: Mapping, key: str, default: Optional[int]) -> Optional[int]:
    raw = params.get(key)
    if raw is None or raw == '':
        return default
    if isinstance(raw, bool):
        raise ConfigError(f"{key} must be an integer, got {raw!r}")
    try:
        return int(str(raw).strip())
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e


def parse_forecast_request(params: Optional[Mapping]) -> ForecastRequest:
    """
    Parse forecast endpoint parameters

    Args:
        params: Query parameters (forecastMonths, iterations, seed, title,
            location, author, company, startDate, endDate)

    Returns:
        ForecastRequest
    """
    params = params or {}
    filters = {
        name: params[key]
        for key, name in FILTER_PARAMS.items()
        if params.get(key) not in (None, '')
    }
    return ForecastRequest(
        forecast_months=_parse_int(params, 'forecastMonths', FORECAST_CONFIG['forecast_horizon']),
        iterations=_parse_int(params, 'iterations', None),
        seed=_parse_int(params, 'seed', None),
        filters=filters
    )


def error_response(error: Exception) -> Tuple[Dict, int]:
    """
    Error envelope and status code for a failed forecast

    Engine errors keep their message; anything else is reported generically.
    """
    if isinstance(error, ForecastError):
        status, message = error.status_code, str(error)
    else:
        status, message = 500, f"Unexpected error while generating forecast: {type(error).__name__}"

    print(f"  ✗ Forecast request failed ({status}): {message}")

    return {'success': False, 'message': message}, status


def success_response(steps: List[ForecastStep],
                     points: List[TimeSeriesPoint]) -> Tuple[Dict, int]:
    """Success envelope for forecast steps and the history they came from"""
    body = {
        'success': True,
        'horizon': len(steps),
        'simResult': [step.to_dict() for step in steps],
        'timeSeriesData': [point.to_dict() for point in points],
    }
    return body, 200


def build_forecast_response(time_series_data: SeriesInput,
                            forecast_months: Optional[int] = None,
                            iterations: Optional[int] = None,
                            random_state=None,
                            forecaster: Optional[HybridForecaster] = None) -> Tuple[Dict, int]:
    """
    Run the forecaster and build the endpoint response

    Never raises and never returns a partial simResult.

    Args:
        time_series_data: Historical monthly series
        forecast_months: Horizon (default from config)
        iterations: Simulated paths (default from config)
        random_state: Master seed
        forecaster: Configured HybridForecaster (default settings if None)

    Returns:
        (response body, HTTP status)
    """
    if forecast_months is None:
        forecast_months = FORECAST_CONFIG['forecast_horizon']

    try:
        points = sorted(to_points(time_series_data), key=lambda point: point.period)
        forecaster = forecaster or HybridForecaster()
        steps = forecaster.forecast(points, iterations, forecast_months, random_state)
    except Exception as e:
        return error_response(e)

    return success_response(steps, points)


def forecast_report(records: pd.DataFrame,
                    params: Optional[Mapping] = None,
                    forecaster: Optional[HybridForecaster] = None) -> Tuple[Dict, int]:
    """
    Full endpoint flow: parse params, aggregate filtered records, forecast

    Args:
        records: Submission records
        params: Query parameters
        forecaster: Configured HybridForecaster

    Returns:
        (response body, HTTP status)
    """
    try:
        request = parse_forecast_request(params)
        points = aggregate_monthly(records, **request.filters)
    except Exception as e:
        return error_response(e)

    return build_forecast_response(
        points,
        forecast_months=request.forecast_months,
        iterations=request.iterations,
        random_state=request.seed,
        forecaster=forecaster
    )
