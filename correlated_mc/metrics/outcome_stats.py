"""
Summary statistics over a sample of simulation outcomes.

Conventions:
  variance / std_dev   sample (n - 1 denominator), 0.0 when n == 1
  skewness             (1/n) * sum(((x - mean) / s) ** 3), s = sample std_dev
  confidence interval  mean +/- z * std_dev, z two-tailed normal critical value
"""

import math
from dataclasses import dataclass
from statistics import NormalDist

import numpy as np

from correlated_mc.metrics.percentiles import percentile


def z_critical(level: float) -> float:
    """Two-tailed standard normal critical value, e.g. 1.96 for 0.95."""
    if not 0.0 < level < 1.0:
        raise ValueError(f"confidence level must be in (0, 1), got {level}")
    return NormalDist().inv_cdf(0.5 + level / 2.0)


@dataclass(frozen=True)
class OutcomeStatistics:
    count: int
    mean: float
    median: float
    variance: float
    std_dev: float
    min: float
    max: float
    skewness: float

    @classmethod
    def from_values(cls, values: np.ndarray, sorted_values: np.ndarray | None = None) -> "OutcomeStatistics":
        values = np.asarray(values, dtype=float)
        n = len(values)
        if n == 0:
            raise ValueError("cannot compute statistics of an empty sample")
        if sorted_values is None:
            sorted_values = np.sort(values)

        mean = float(np.mean(values))
        variance = float(np.var(values, ddof=1)) if n > 1 else 0.0
        std_dev = math.sqrt(variance)

        if std_dev > 0:
            z = (values - mean) / std_dev
            skewness = float(np.mean(z ** 3))
        else:
            skewness = 0.0

        return cls(
            count=n,
            mean=mean,
            median=percentile(sorted_values, 0.5),
            variance=variance,
            std_dev=std_dev,
            min=float(sorted_values[0]),
            max=float(sorted_values[-1]),
            skewness=skewness,
        )

    @property
    def coefficient_of_variation(self) -> float:
        return self.std_dev / abs(self.mean) if self.mean != 0 else math.inf

    def confidence_interval(self, level: float = 0.95) -> tuple[float, float]:
        """
        Parametric (normal-approximation) interval ``mean +/- z * std_dev``.

        This describes the dispersion of outcomes; empirical tail loss is
        answered by value_at_risk / conditional_value_at_risk instead.
        """
        half_width = z_critical(level) * self.std_dev
        return self.mean - half_width, self.mean + half_width
