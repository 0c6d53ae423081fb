"""
Series Normalization Module

Turns a sparse, unordered set of monthly observations into a gap-free
monthly vector. Missing months are carried forward from the last observed
value (carried backward for a leading gap) and flagged as imputed.
"""

import pandas as pd
import numpy as np
from collections import Counter
from typing import Iterable, List, Mapping, Union

from waste_forecast.errors import DataError
from waste_forecast.structures import NormalizedSeries, TimeSeriesPoint, as_period

SeriesInput = Union[Iterable[TimeSeriesPoint], Iterable[Mapping], pd.DataFrame, pd.Series]

MIN_DISTINCT_PERIODS = 2


def to_points(series: SeriesInput) -> List[TimeSeriesPoint]:
    """
    Coerce the supported input shapes to a list of TimeSeriesPoint

    Args:
        series: TimeSeriesPoints, dicts with period/value, a DataFrame with
            'period' and 'value' columns, or a Series indexed by period

    Returns:
        List of points in input order
    """
    if series is None:
        raise DataError("No time series supplied")

    if isinstance(series, pd.DataFrame):
        missing = [col for col in ('period', 'value') if col not in series.columns]
        if missing:
            raise DataError(f"Time series frame is missing columns: {missing}")
        records = series[['period', 'value']].to_dict('records')
        return [TimeSeriesPoint.from_dict(record) for record in records]

    if isinstance(series, pd.Series):
        return [TimeSeriesPoint.from_dict({'period': period, 'value': value})
                for period, value in series.items()]

    points = []
    for item in series:
        if isinstance(item, TimeSeriesPoint):
            points.append(TimeSeriesPoint(period=as_period(item.period), value=float(item.value)))
        elif isinstance(item, Mapping):
            points.append(TimeSeriesPoint.from_dict(item))
        else:
            raise DataError(f"Unsupported time series point: {item!r}")
    return points


def validate_points(points: List[TimeSeriesPoint]) -> None:
    """
    Check the preconditions of normalization

    Raises:
        DataError: fewer than 2 distinct periods, duplicate periods,
            or a negative / non-finite value
    """
    periods = [point.period for point in points]
    distinct = set(periods)

    if len(distinct) < MIN_DISTINCT_PERIODS:
        raise DataError(
            f"Insufficient history: need at least {MIN_DISTINCT_PERIODS} distinct periods, "
            f"got {len(distinct)}"
        )

    if len(distinct) != len(periods):
        counts = Counter(periods)
        duplicates = sorted(str(p) for p, n in counts.items() if n > 1)
        raise DataError(f"Duplicate periods in time series: {duplicates}")

    for point in points:
        if not np.isfinite(point.value):
            raise DataError(f"Non-finite value for period {point.period}: {point.value}")
        if point.value < 0:
            raise DataError(f"Negative value for period {point.period}: {point.value}")


def normalize_series(series: SeriesInput) -> NormalizedSeries:
    """
    Normalize a raw monthly series to a gap-free vector

    For each calendar month between the first and last observation:
    - Observed months keep their value
    - Interior gaps: carry forward the last observed value
    - Leading gaps: carry backward the first observed value

    Args:
        series: Raw time series (see to_points for accepted shapes)

    Returns:
        NormalizedSeries spanning [min(period), max(period)]
    """
    points = to_points(series)
    validate_points(points)

    observed = pd.Series(
        [point.value for point in points],
        index=pd.PeriodIndex([point.period for point in points], freq='M'),
        dtype=float
    ).sort_index()

    full_index = pd.period_range(start=observed.index[0], end=observed.index[-1], freq='M')
    reindexed = observed.reindex(full_index)
    is_observed = reindexed.notna().to_numpy()

    filled = reindexed.ffill().bfill()

    return NormalizedSeries(
        values=filled.to_numpy(dtype=float),
        periods=full_index,
        observed=is_observed
    )
