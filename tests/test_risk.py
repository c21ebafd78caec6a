import numpy as np
import pytest

from correlated_mc.metrics.percentiles import percentile
from correlated_mc.metrics.risk import conditional_value_at_risk, value_at_risk


def test_var_is_lower_tail_percentile(standard_normal_values):
    values = np.sort(standard_normal_values)
    var = value_at_risk(values, 0.95)
    assert var == pytest.approx(percentile(values, 0.05))
    assert -1.8 < var < -1.5


def test_cvar_of_standard_normal(standard_normal_values):
    values = np.sort(standard_normal_values)
    cvar = conditional_value_at_risk(values, 0.95)
    assert -2.3 < cvar < -1.8


def test_cvar_never_exceeds_var(standard_normal_values):
    values = np.sort(standard_normal_values)
    for level in (0.5, 0.9, 0.95, 0.99):
        assert conditional_value_at_risk(values, level) <= value_at_risk(values, level)


def test_cvar_is_mean_of_tail():
    values = np.arange(1.0, 101.0)
    var = value_at_risk(values, 0.90)
    assert var == pytest.approx(10.9)
    # tail is every value <= 10.9
    assert conditional_value_at_risk(values, 0.90) == pytest.approx(5.5)


def test_uniform_var():
    values = np.sort(np.random.default_rng(4).uniform(0, 100, 10_000))
    assert value_at_risk(values, 0.95) == pytest.approx(5.0, abs=1.0)


def test_single_value():
    values = np.array([42.0])
    assert value_at_risk(values, 0.95) == 42.0
    assert conditional_value_at_risk(values, 0.95) == 42.0


@pytest.mark.parametrize("level", [0.0, 1.0, 1.2])
def test_invalid_confidence_level(level):
    with pytest.raises(ValueError):
        value_at_risk(np.array([1.0, 2.0]), level)
    with pytest.raises(ValueError):
        conditional_value_at_risk(np.array([1.0, 2.0]), level)
