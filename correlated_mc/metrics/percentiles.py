"""
Type-7 (R-7) percentile estimation.

Every quantile in the package (percentile sets, VaR, CVaR) goes through
``percentile`` so the interpolation rule is identical everywhere.
"""

import math
from dataclasses import dataclass, field

import numpy as np

STANDARD_LEVELS = (0.05, 0.10, 0.25, 0.50, 0.75, 0.90, 0.95, 0.99)


def percentile(sorted_values: np.ndarray, p: float) -> float:
    """
    Quantile ``p`` in [0, 1] of an ascending-sorted sample, R-7 method.

    h = (n - 1) * p, then linear interpolation between the values at
    floor(h) and ceil(h). The input MUST already be sorted; use
    ``percentile_of`` for unsorted data.
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("cannot compute a percentile of an empty sample")
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"p must be in [0, 1], got {p}")

    if n == 1:
        return float(sorted_values[0])

    h = (n - 1) * p
    lo = int(math.floor(h))
    hi = min(lo + 1, n - 1)
    frac = h - lo
    lower = float(sorted_values[lo])
    if frac == 0.0:
        return lower
    upper = float(sorted_values[hi])
    return lower + frac * (upper - lower)


def percentile_of(values, p: float) -> float:
    """Same as ``percentile`` but sorts a copy of ``values`` first."""
    return percentile(np.sort(np.asarray(values, dtype=float)), p)


@dataclass(frozen=True)
class PercentileSet:
    """Standard quantiles of a sample plus an arbitrary ``percentile`` query."""
    p5: float
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float
    p95: float
    p99: float
    min: float
    max: float
    _sorted: np.ndarray = field(repr=False, compare=False)

    @classmethod
    def from_sorted(cls, sorted_values: np.ndarray) -> "PercentileSet":
        p5, p10, p25, p50, p75, p90, p95, p99 = (
            percentile(sorted_values, p) for p in STANDARD_LEVELS
        )
        return cls(
            p5=p5, p10=p10, p25=p25, p50=p50,
            p75=p75, p90=p90, p95=p95, p99=p99,
            min=float(sorted_values[0]),
            max=float(sorted_values[-1]),
            _sorted=sorted_values,
        )

    @property
    def interquartile_range(self) -> float:
        return self.p75 - self.p25

    def percentile(self, p: float) -> float:
        return percentile(self._sorted, p)

    def as_dict(self) -> dict:
        return {
            "P5": self.p5, "P10": self.p10, "P25": self.p25, "P50": self.p50,
            "P75": self.p75, "P90": self.p90, "P95": self.p95, "P99": self.p99,
            "min": self.min, "max": self.max,
        }
