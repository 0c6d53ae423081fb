"""
Tests for ensemble aggregation.
"""
import numpy as np
import pytest

from waste_forecast.ensemble import EnsembleAggregator, aggregate_ensemble, band_widths
from waste_forecast.errors import ComputeError, ConfigError


class TestPercentileBand:
    """Test the default percentile method."""

    def test_step_numbering(self):
        steps = aggregate_ensemble(np.ones((10, 4)))
        assert [s.step for s in steps] == [0, 1, 2, 3]

    def test_mean_and_quantiles(self):
        """Uniform 0..100 samples give mean 50 and a 2.5/97.5 band."""
        samples = np.tile(np.arange(101, dtype=float)[:, None], (1, 2))
        steps = aggregate_ensemble(samples)

        assert steps[0].mean == pytest.approx(50.0)
        assert steps[0].lower == pytest.approx(2.5)
        assert steps[0].upper == pytest.approx(97.5)

    def test_confidence_changes_band(self):
        samples = np.tile(np.arange(101, dtype=float)[:, None], (1, 1))
        narrow = aggregate_ensemble(samples, confidence=0.5)[0]

        assert narrow.lower == pytest.approx(25.0)
        assert narrow.upper == pytest.approx(75.0)

    def test_skewed_samples_keep_mean_inside(self):
        """A heavy right tail pulls the mean above the upper percentile; the band widens."""
        samples = np.zeros((100, 1))
        samples[0, 0] = 10000.0
        step = aggregate_ensemble(samples)[0]

        assert step.mean == pytest.approx(100.0)
        assert step.lower <= step.mean <= step.upper
        assert step.upper == step.mean

    def test_flat_column_has_zero_width(self):
        samples = np.full((500, 3), 123.456)
        for step in aggregate_ensemble(samples):
            assert step.mean == step.lower == step.upper == 123.456


class TestParametricBand:
    """Test mean +/- z * std."""

    def test_symmetric_band(self):
        rng = np.random.default_rng(0)
        samples = rng.normal(100.0, 10.0, size=(5000, 2))
        step = aggregate_ensemble(samples, method='parametric')[0]

        assert step.upper - step.mean == pytest.approx(step.mean - step.lower)
        assert (step.upper - step.mean) == pytest.approx(1.96 * samples[:, 0].std(), rel=1e-3)

    def test_z_score(self):
        assert EnsembleAggregator(method='parametric', confidence=0.95).z_score == pytest.approx(1.959964)

    def test_flat_column_has_zero_width(self):
        step = aggregate_ensemble(np.full((50, 1), 0.1), method='parametric')[0]
        assert step.lower == step.mean == step.upper


class TestAggregatorValidation:
    """Test configuration and input checks."""

    def test_unknown_method(self):
        with pytest.raises(ConfigError):
            EnsembleAggregator(method='bootstrap')

    @pytest.mark.parametrize('confidence', [0.0, 1.0, 1.5, -0.1])
    def test_confidence_out_of_range(self, confidence):
        with pytest.raises(ConfigError):
            EnsembleAggregator(confidence=confidence)

    def test_non_finite_samples(self):
        samples = np.ones((5, 2))
        samples[2, 1] = np.inf
        with pytest.raises(ComputeError):
            aggregate_ensemble(samples)

    @pytest.mark.parametrize('shape', [(0, 3), (3, 0), (3,)])
    def test_bad_shape(self, shape):
        with pytest.raises(ComputeError):
            aggregate_ensemble(np.ones(shape))


class TestBandWidths:
    def test_widths(self):
        samples = np.column_stack([np.full(10, 5.0), np.arange(10, dtype=float)])
        widths = band_widths(aggregate_ensemble(samples))

        assert widths[0] == 0.0
        assert widths[1] > 0.0
