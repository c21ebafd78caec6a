import math

import numpy as np
import pytest

from correlated_mc.metrics.outcome_stats import OutcomeStatistics, z_critical


def test_basic_statistics():
    stats = OutcomeStatistics.from_values(np.array([1.0, 2.0, 3.0, 4.0, 5.0]))
    assert stats.count == 5
    assert stats.mean == pytest.approx(3.0)
    assert stats.median == pytest.approx(3.0)
    assert stats.variance == pytest.approx(2.5)
    assert stats.std_dev == pytest.approx(math.sqrt(2.5))
    assert stats.min == 1.0
    assert stats.max == 5.0
    assert stats.skewness == pytest.approx(0.0, abs=1e-12)


def test_skewness_uses_sample_std():
    stats = OutcomeStatistics.from_values(np.array([1.0, 2.0, 3.0, 4.0, 10.0]))
    # mean 4, s = sqrt(12.5); (1/5) * sum(((x - 4) / s) ** 3)
    assert stats.skewness == pytest.approx(0.81459, abs=1e-4)
    assert stats.skewness > 0


def test_single_value_has_zero_spread():
    stats = OutcomeStatistics.from_values(np.array([42.0]))
    assert stats.variance == 0.0
    assert stats.std_dev == 0.0
    assert stats.skewness == 0.0
    assert stats.median == 42.0


def test_constant_sample_skewness_is_zero():
    stats = OutcomeStatistics.from_values(np.full(100, 7.5))
    assert stats.std_dev == 0.0
    assert stats.skewness == 0.0


def test_empty_sample_rejected():
    with pytest.raises(ValueError):
        OutcomeStatistics.from_values(np.array([]))


def test_coefficient_of_variation():
    stats = OutcomeStatistics.from_values(np.array([90.0, 100.0, 110.0]))
    assert stats.coefficient_of_variation == pytest.approx(10.0 / 100.0)
    zero_mean = OutcomeStatistics.from_values(np.array([-1.0, 1.0]))
    assert zero_mean.coefficient_of_variation == math.inf


# ── Confidence interval ──

@pytest.mark.parametrize("level, z", [(0.90, 1.6449), (0.95, 1.9600), (0.99, 2.5758)])
def test_z_critical(level, z):
    assert z_critical(level) == pytest.approx(z, abs=1e-4)


def test_confidence_interval_is_mean_plus_minus_z_std():
    stats = OutcomeStatistics.from_values(np.array([1.0, 2.0, 3.0, 4.0, 5.0]))
    lo, hi = stats.confidence_interval(0.95)
    half = 1.959964 * math.sqrt(2.5)
    assert lo == pytest.approx(3.0 - half, rel=1e-5)
    assert hi == pytest.approx(3.0 + half, rel=1e-5)


def test_confidence_interval_widens_with_level():
    stats = OutcomeStatistics.from_values(np.random.default_rng(1).normal(size=1000))
    widths = [hi - lo for lo, hi in (stats.confidence_interval(l) for l in (0.5, 0.9, 0.99))]
    assert widths == sorted(widths)


@pytest.mark.parametrize("level", [0.0, 1.0, -0.5, 1.5])
def test_confidence_level_must_be_open_unit_interval(level):
    stats = OutcomeStatistics.from_values(np.array([1.0, 2.0]))
    with pytest.raises(ValueError):
        stats.confidence_interval(level)
