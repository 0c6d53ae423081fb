"""
Path Simulation Module

Monte-Carlo extrapolation of a decomposition. Each trial draws its own
slope offset and residual noise from a generator seeded by a child of the
master SeedSequence, so trials are independent of each other and of how
they are scheduled across joblib workers.
"""

import numpy as np
from joblib import Parallel, cpu_count, delayed
from typing import List, Optional, Tuple, Union

from config import SIMULATION_CONFIG
from waste_forecast.errors import ConfigError
from waste_forecast.structures import Decomposition

RandomState = Union[None, int, np.random.SeedSequence, np.random.Generator]


def make_seed_sequence(random_state: RandomState = None) -> np.random.SeedSequence:
    """
    Build the master SeedSequence for one forecast call

    Args:
        random_state: None (fresh entropy), int seed, SeedSequence, or a
            Generator to draw the master entropy from

    Returns:
        SeedSequence
    """
    if isinstance(random_state, np.random.SeedSequence):
        return random_state
    if isinstance(random_state, np.random.Generator):
        entropy = random_state.integers(0, 2**63 - 1, size=4)
        return np.random.SeedSequence([int(x) for x in entropy])
    if random_state is None or isinstance(random_state, (int, np.integer)):
        if isinstance(random_state, bool):
            raise ConfigError(f"Invalid random_state: {random_state!r}")
        if random_state is not None and random_state < 0:
            raise ConfigError(f"Seed must be non-negative, got {random_state}")
        return np.random.SeedSequence(random_state)
    raise ConfigError(f"Invalid random_state: {random_state!r}")


class PathSimulator:
    """Simulate future paths from trend + seasonal + resampled residuals"""

    def __init__(self,
                 decomposition: Decomposition,
                 min_resample_size: Optional[int] = None,
                 trend_uncertainty: Optional[bool] = None,
                 n_jobs: Optional[int] = None):
        """
        Initialize simulator

        Args:
            decomposition: Fitted Decomposition
            min_resample_size: Residual count below which noise is Gaussian
            trend_uncertainty: Draw one slope offset per trial from the
                slope standard error
            n_jobs: joblib workers (0 or 1 = sequential, -1 = all cores)
        """
        self.decomposition = decomposition
        self.min_resample_size = (min_resample_size if min_resample_size is not None
                                  else SIMULATION_CONFIG['min_resample_size'])
        self.trend_uncertainty = (trend_uncertainty if trend_uncertainty is not None
                                  else SIMULATION_CONFIG['trend_uncertainty'])
        self.n_jobs = n_jobs if n_jobs is not None else SIMULATION_CONFIG['n_jobs']

        self.residuals = np.asarray(decomposition.residuals, dtype=float)
        self.residual_std = float(np.std(self.residuals)) if len(self.residuals) else 0.0

    @property
    def uses_resampling(self) -> bool:
        return len(self.residuals) >= self.min_resample_size

    def draw_noise(self, rng: np.random.Generator, horizon: int) -> np.ndarray:
        """
        One noise sample per future step

        Resamples historical residuals with replacement, or falls back to
        N(0, residual std) when there are too few residuals to resample.
        """
        if self.uses_resampling:
            return self.residuals[rng.integers(0, len(self.residuals), size=horizon)]
        if self.residual_std == 0:
            return np.zeros(horizon)
        return rng.normal(0.0, self.residual_std, size=horizon)

    def future_frame(self, horizon: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Time index, trend and seasonal factors for each future step"""
        d = self.decomposition
        t = d.future_index(horizon)
        return t, d.trend_at(t), d.seasonal_factors(d.future_periods(horizon))

    def simulate_path(self,
                      rng: np.random.Generator,
                      horizon: int,
                      future: Optional[Tuple[np.ndarray, np.ndarray, np.ndarray]] = None) -> np.ndarray:
        """
        Simulate one trajectory

        Args:
            rng: Generator owned by this trial
            horizon: Number of future steps
            future: Precomputed future_frame(horizon)

        Returns:
            Non-negative simulated values, one per step
        """
        d = self.decomposition
        t, trend, factors = future if future is not None else self.future_frame(horizon)

        if self.trend_uncertainty and d.trend_slope_stderr > 0:
            slope_offset = rng.normal(0.0, d.trend_slope_stderr)
            trend = trend + slope_offset * (t - d.time_center)

        path = d.combine(trend, factors) + self.draw_noise(rng, horizon)

        return np.maximum(path, 0.0)

    def _simulate_batch(self,
                        trial_seeds: List[np.random.SeedSequence],
                        horizon: int) -> np.ndarray:
        future = self.future_frame(horizon)
        block = np.empty((len(trial_seeds), horizon))
        for row, seed_seq in enumerate(trial_seeds):
            block[row] = self.simulate_path(np.random.default_rng(seed_seq), horizon, future)
        return block

    def simulate(self,
                 horizon: int,
                 iterations: int,
                 random_state: RandomState = None) -> np.ndarray:
        """
        Run all trials

        Args:
            horizon: Number of future steps
            iterations: Number of trials
            random_state: Master seed (see make_seed_sequence)

        Returns:
            iterations x horizon matrix of simulated values
        """
        trial_seeds = make_seed_sequence(random_state).spawn(iterations)

        n_batches = 1
        if self.n_jobs not in [0, 1]:
            n_workers = self.n_jobs if self.n_jobs > 0 else cpu_count()
            n_batches = max(1, min(iterations, n_workers))

        bounds = np.linspace(0, iterations, n_batches + 1).astype(int)
        batches = [trial_seeds[start:stop] for start, stop in zip(bounds[:-1], bounds[1:])]

        if n_batches == 1:
            blocks = [self._simulate_batch(batch, horizon) for batch in batches]
        else:
            blocks = Parallel(n_jobs=self.n_jobs, prefer='threads')(
                delayed(self._simulate_batch)(batch, horizon)
                for batch in batches
            )

        return np.vstack(blocks)


def simulate_paths(decomposition: Decomposition,
                   horizon: int,
                   iterations: int,
                   random_state: RandomState = None,
                   **kwargs) -> np.ndarray:
    """
    Convenience function to simulate an ensemble

    Args:
        decomposition: Fitted Decomposition
        horizon: Number of future steps
        iterations: Number of trials
        random_state: Master seed
        **kwargs: PathSimulator options

    Returns:
        iterations x horizon matrix of simulated values
    """
    simulator = PathSimulator(decomposition, **kwargs)
    return simulator.simulate(horizon, iterations, random_state)
