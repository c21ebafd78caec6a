import math

import numpy as np
import pandas as pd
import pytest

from correlated_mc.simulation.results import MAX_HISTOGRAM_BINS, HistogramBin, SimulationResults


@pytest.fixture
def one_to_five():
    return SimulationResults([1.0, 2.0, 3.0, 4.0, 5.0])


def test_basic_statistics(one_to_five):
    assert len(one_to_five) == 5
    assert one_to_five.statistics.mean == 3.0
    assert one_to_five.percentiles.p50 == 3.0
    assert one_to_five.percentile(0.5) == 3.0
    assert "n=5" in repr(one_to_five)


def test_empty_rejected():
    with pytest.raises(ValueError):
        SimulationResults([])


def test_values_kept_in_order_and_read_only():
    source = np.array([3.0, 1.0, 2.0])
    results = SimulationResults(source)
    np.testing.assert_array_equal(results.values, [3.0, 1.0, 2.0])
    np.testing.assert_array_equal(results.sorted_values, [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        results.values[0] = 0.0
    assert source.flags.writeable


# ── Probabilities ──

def test_probabilities_are_strict(one_to_five):
    assert one_to_five.probability_above(3.0) == pytest.approx(0.4)
    assert one_to_five.probability_below(3.0) == pytest.approx(0.4)
    assert one_to_five.probability_between(2.0, 4.0) == pytest.approx(0.2)
    assert one_to_five.probability_above(5.0) == 0.0
    assert one_to_five.probability_below(1.0) == 0.0
    assert one_to_five.probability_above(0.0) == 1.0


def test_probability_between_ignores_argument_order(one_to_five):
    assert one_to_five.probability_between(4.5, 1.5) == one_to_five.probability_between(1.5, 4.5)
    assert one_to_five.probability_between(1.5, 4.5) == pytest.approx(0.6)
    assert one_to_five.probability_between(3.0, 3.0) == 0.0


def test_probabilities_bounded(standard_normal_values):
    results = SimulationResults(standard_normal_values)
    for t in (-3.0, -1.0, 0.0, 2.5):
        above, below = results.probability_above(t), results.probability_below(t)
        assert 0.0 <= above <= 1.0
        assert 0.0 <= below <= 1.0
        assert above + below <= 1.0
    assert results.probability_below(0.0) == pytest.approx(0.5, abs=0.02)


# ── Risk ──

def test_risk_metrics_of_standard_normal(standard_normal_values):
    results = SimulationResults(standard_normal_values)
    var = results.value_at_risk(0.95)
    cvar = results.conditional_value_at_risk(0.95)
    assert -1.8 < var < -1.5
    assert -2.3 < cvar < -1.8
    assert cvar <= var
    lo, hi = results.confidence_interval(0.95)
    assert lo < results.statistics.mean < hi


def test_single_value_risk():
    results = SimulationResults([42.0])
    assert results.value_at_risk(0.95) == 42.0
    assert results.conditional_value_at_risk(0.95) == 42.0
    assert results.confidence_interval(0.95) == (42.0, 42.0)


# ── Histogram ──

def test_histogram_counts_every_value():
    values = np.arange(10.0)
    bins = SimulationResults(values).histogram(3)
    assert [b.count for b in bins] == [3, 3, 4]
    assert bins[0].lower == 0.0
    assert bins[1].lower == pytest.approx(3.0)
    assert bins[-1].upper == pytest.approx(9.0 + 1e-4)


def test_histogram_default_bins(standard_normal_values):
    results = SimulationResults(standard_normal_values)
    bins = results.histogram()
    assert len(bins) == results.optimal_bins()
    assert sum(b.count for b in bins) == len(results)
    sturges = math.ceil(math.log2(len(results)) + 1)
    assert sturges <= len(bins) <= MAX_HISTOGRAM_BINS


def test_histogram_bins_are_contiguous(standard_normal_values):
    bins = SimulationResults(standard_normal_values).histogram(25)
    assert all(a.upper == pytest.approx(b.lower) for a, b in zip(bins, bins[1:]))


def test_histogram_counts_max_at_large_magnitude():
    # max + 1e-4 rounds back to max at this scale
    bins = SimulationResults([0.0, 5e12, 1e13]).histogram(4)
    assert sum(b.count for b in bins) == 3
    assert [b.count for b in bins] == [1, 0, 1, 1]


def test_histogram_constant_sample():
    bins = SimulationResults([7.0] * 20).histogram()
    assert bins == [HistogramBin(7.0, 8.0, 20)]


@pytest.mark.parametrize("n_bins", [0, -3])
def test_histogram_non_positive_bins(n_bins):
    assert SimulationResults([1.0, 2.0]).histogram(n_bins) == []


def test_optimal_bins_capped():
    # a huge outlier makes Freedman-Diaconis ask for far too many bins
    values = np.concatenate([np.random.default_rng(0).normal(size=5_000), [1e6]])
    assert SimulationResults(values).optimal_bins() == MAX_HISTOGRAM_BINS


def test_optimal_bins_single_value():
    assert SimulationResults([3.0]).optimal_bins() == 1


def test_histogram_bin_midpoint():
    assert HistogramBin(2.0, 4.0, 1).midpoint == 3.0


# ── Export ──

def test_summary_keys(standard_normal_values):
    summary = SimulationResults(standard_normal_values).summary()
    for key in ["n", "mean", "median", "std_dev", "variance", "skewness", "min", "max",
                "P5", "P50", "P95", "VaR90", "VaR95", "VaR99", "CVaR95", "CI99"]:
        assert key in summary
    assert summary["n"] == 10_000
    assert summary["CVaR95"] <= summary["VaR95"]


def test_summary_custom_levels(one_to_five):
    summary = one_to_five.summary(confidence_levels=(0.8,))
    assert "VaR80" in summary
    assert "VaR95" not in summary


def test_to_frame(one_to_five):
    df = one_to_five.to_frame()
    assert isinstance(df, pd.DataFrame)
    assert list(df.columns) == ["outcome"]
    assert df.index.name == "iteration"
    assert df["outcome"].tolist() == [1.0, 2.0, 3.0, 4.0, 5.0]
