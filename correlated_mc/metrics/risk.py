"""
Empirical tail-risk metrics on an ascending-sorted outcome sample.

Outcomes follow the P&L convention: low values are losses, so VaR at 95%
is the 5th percentile and CVaR is the mean of everything at or below it.
"""

import numpy as np

from correlated_mc.metrics.percentiles import percentile


def _check_level(confidence_level: float) -> None:
    if not 0.0 < confidence_level < 1.0:
        raise ValueError(f"confidence_level must be in (0, 1), got {confidence_level}")


def value_at_risk(sorted_values: np.ndarray, confidence_level: float = 0.95) -> float:
    """(1 - confidence_level) percentile of the sorted outcomes."""
    _check_level(confidence_level)
    return percentile(sorted_values, 1.0 - confidence_level)


def conditional_value_at_risk(sorted_values: np.ndarray, confidence_level: float = 0.95) -> float:
    """Mean of outcomes at or below the VaR threshold (expected shortfall)."""
    var = value_at_risk(sorted_values, confidence_level)
    # sorted input: the tail is a prefix
    cutoff = int(np.searchsorted(sorted_values, var, side="right"))
    if cutoff == 0:
        return var
    return float(np.mean(sorted_values[:cutoff]))
