"""Percentiles, summary statistics and tail-risk metrics over outcome samples."""
from .percentiles import percentile, percentile_of, PercentileSet
from .outcome_stats import OutcomeStatistics, z_critical
from .risk import value_at_risk, conditional_value_at_risk
