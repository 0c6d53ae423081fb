"""
Ensemble Aggregation Module

Collapses the iterations x horizon sample matrix into per-step mean and
confidence band. Supported band methods:
- percentile: empirical quantiles of the trial values
- parametric: mean +/- z * stddev
"""

import numpy as np
from scipy.stats import norm
from typing import List, Optional, Tuple

from config import ENSEMBLE_CONFIG
from waste_forecast.errors import ComputeError, ConfigError
from waste_forecast.structures import ForecastStep

BAND_METHODS = ('percentile', 'parametric')


class EnsembleAggregator:
    """Per-step mean and confidence band over simulated paths"""

    def __init__(self,
                 method: Optional[str] = None,
                 confidence: Optional[float] = None):
        """
        Initialize aggregator

        Args:
            method: 'percentile' or 'parametric' (default from config)
            confidence: Band coverage in (0, 1), e.g. 0.95
        """
        self.method = method or ENSEMBLE_CONFIG['band_method']
        self.confidence = confidence if confidence is not None else ENSEMBLE_CONFIG['confidence']

        if self.method not in BAND_METHODS:
            raise ConfigError(f"Unknown band method: {self.method!r} (expected one of {BAND_METHODS})")
        if not 0 < self.confidence < 1:
            raise ConfigError(f"Confidence must be in (0, 1), got {self.confidence}")

    @property
    def quantiles(self) -> Tuple[float, float]:
        tail = (1 - self.confidence) / 2
        return tail, 1 - tail

    @property
    def z_score(self) -> float:
        return float(norm.ppf(self.quantiles[1]))

    def aggregate(self, samples: np.ndarray) -> List[ForecastStep]:
        """
        Aggregate simulated paths into forecast steps

        Args:
            samples: iterations x horizon matrix (already clamped to >= 0)

        Returns:
            One ForecastStep per column, step = 0..horizon-1
        """
        samples = np.asarray(samples, dtype=float)
        if samples.ndim != 2 or samples.shape[0] == 0 or samples.shape[1] == 0:
            raise ComputeError(f"Expected a non-empty iterations x horizon matrix, got shape {samples.shape}")
        if not np.isfinite(samples).all():
            raise ComputeError("Simulated paths contain non-finite values")

        mean = samples.mean(axis=0)

        # Columns where every trial agrees report that value exactly
        flat = np.ptp(samples, axis=0) == 0
        mean[flat] = samples[0, flat]

        if self.method == 'percentile':
            lower, upper = np.quantile(samples, self.quantiles, axis=0)
        else:
            std = samples.std(axis=0)
            std[flat] = 0.0
            lower = mean - self.z_score * std
            upper = mean + self.z_score * std

        # Widen (never narrow) a skewed band so it always contains the mean
        lower = np.minimum(lower, mean)
        upper = np.maximum(upper, mean)

        return [
            ForecastStep(step=h, mean=float(mean[h]), upper=float(upper[h]), lower=float(lower[h]))
            for h in range(samples.shape[1])
        ]


def aggregate_ensemble(samples: np.ndarray,
                       method: Optional[str] = None,
                       confidence: Optional[float] = None) -> List[ForecastStep]:
    """Convenience function to aggregate a sample matrix"""
    return EnsembleAggregator(method=method, confidence=confidence).aggregate(samples)


def band_widths(steps: List[ForecastStep]) -> np.ndarray:
    """upper - lower for each step"""
    return np.array([step.upper - step.lower for step in steps])
