"""
Simulation results: outcome sample plus eagerly computed statistics.

The outcome array is sorted once at construction; percentiles, VaR and CVaR
all read that sorted copy.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List

import numpy as np
import pandas as pd

from correlated_mc.metrics.outcome_stats import OutcomeStatistics
from correlated_mc.metrics.percentiles import PercentileSet, percentile
from correlated_mc.metrics.risk import conditional_value_at_risk, value_at_risk

MAX_HISTOGRAM_BINS = 1000


@dataclass(frozen=True)
class HistogramBin:
    lower: float
    upper: float      # exclusive
    count: int

    @property
    def midpoint(self) -> float:
        return (self.lower + self.upper) / 2.0


class SimulationResults:
    """
    Immutable view over the outcomes of one simulation run.

    Example:
        >>> results = SimulationResults(np.random.default_rng(0).normal(100, 15, 10_000))
        >>> lo, hi = results.confidence_interval(0.95)
        >>> results.probability_below(70.0)
    """

    def __init__(self, values: Iterable[float]):
        values = np.array(values, dtype=float).reshape(-1)
        if values.size == 0:
            raise ValueError("SimulationResults requires at least one value")
        values.setflags(write=False)

        sorted_values = np.sort(values)
        sorted_values.setflags(write=False)

        self._values = values
        self._sorted = sorted_values
        self._statistics = OutcomeStatistics.from_values(values, sorted_values)
        self._percentiles = PercentileSet.from_sorted(sorted_values)

    # ── Views ──

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def sorted_values(self) -> np.ndarray:
        return self._sorted

    @property
    def statistics(self) -> OutcomeStatistics:
        return self._statistics

    @property
    def percentiles(self) -> PercentileSet:
        return self._percentiles

    def __len__(self) -> int:
        return self._values.size

    def __repr__(self) -> str:
        return (f"SimulationResults(n={len(self)}, mean={self.statistics.mean:.6g}, "
                f"std_dev={self.statistics.std_dev:.6g})")

    # ── Probabilities (strict inequalities) ──

    def probability_above(self, threshold: float) -> float:
        above = self._sorted.size - np.searchsorted(self._sorted, threshold, side="right")
        return float(above) / self._sorted.size

    def probability_below(self, threshold: float) -> float:
        below = np.searchsorted(self._sorted, threshold, side="left")
        return float(below) / self._sorted.size

    def probability_between(self, lower: float, upper: float) -> float:
        if lower > upper:
            lower, upper = upper, lower
        lo = np.searchsorted(self._sorted, lower, side="right")
        hi = np.searchsorted(self._sorted, upper, side="left")
        return float(max(hi - lo, 0)) / self._sorted.size

    # ── Intervals and risk ──

    def percentile(self, p: float) -> float:
        return percentile(self._sorted, p)

    def confidence_interval(self, level: float = 0.95) -> tuple[float, float]:
        return self._statistics.confidence_interval(level)

    def value_at_risk(self, confidence_level: float = 0.95) -> float:
        return value_at_risk(self._sorted, confidence_level)

    def conditional_value_at_risk(self, confidence_level: float = 0.95) -> float:
        return conditional_value_at_risk(self._sorted, confidence_level)

    # ── Histogram ──

    def optimal_bins(self) -> int:
        """max(Sturges, Freedman-Diaconis), clamped to [1, 1000]."""
        n = self._sorted.size
        sturges = int(math.ceil(math.log2(n) + 1.0))

        bin_width = 2.0 * self._percentiles.interquartile_range / n ** (1.0 / 3.0)
        if bin_width > 0:
            fd = int(math.ceil((self._statistics.max - self._statistics.min) / bin_width))
        else:
            fd = sturges

        return max(1, min(max(sturges, fd), MAX_HISTOGRAM_BINS))

    def histogram(self, bins: int | None = None) -> List[HistogramBin]:
        """
        Equal-width bins over [min, max]. The last bin's upper edge is nudged
        past max so every value is counted; a constant sample yields a single
        [v, v + 1) bin.
        """
        if bins is None:
            bins = self.optimal_bins()
        if bins <= 0:
            return []

        lo, hi = self._statistics.min, self._statistics.max
        if lo == hi:
            return [HistogramBin(lo, lo + 1.0, self._sorted.size)]

        width = (hi - lo) / bins
        edges = lo + width * np.arange(bins + 1, dtype=float)
        edges[-1] = hi + 1e-4

        # right-open bins: count of values < each edge
        cum = np.searchsorted(self._sorted, edges, side="left")
        # the last bin is closed at max even when max + 1e-4 rounds back to max
        cum[-1] = self._sorted.size
        counts = np.diff(cum)
        return [
            HistogramBin(float(edges[i]), float(edges[i + 1]), int(counts[i]))
            for i in range(bins)
        ]

    # ── Export ──

    def summary(self, confidence_levels: Iterable[float] = (0.90, 0.95, 0.99)) -> dict:
        s = self._statistics
        out = {
            "n": s.count,
            "mean": s.mean,
            "median": s.median,
            "std_dev": s.std_dev,
            "variance": s.variance,
            "skewness": s.skewness,
            "min": s.min,
            "max": s.max,
        }
        out.update(self._percentiles.as_dict())
        for level in confidence_levels:
            tag = f"{level * 100:g}"
            out[f"VaR{tag}"] = self.value_at_risk(level)
            out[f"CVaR{tag}"] = self.conditional_value_at_risk(level)
            lo, hi = self.confidence_interval(level)
            out[f"CI{tag}"] = (lo, hi)
        return out

    def to_frame(self) -> pd.DataFrame:
        """Outcomes in iteration order, one row per iteration."""
        df = pd.DataFrame({"outcome": self._values})
        df.index.name = "iteration"
        return df
