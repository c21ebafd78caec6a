import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest


class NormalDistribution:
    def __init__(self, mean, std, rng):
        self.mean = mean
        self.std = std
        self.rng = rng

    def sample(self):
        return float(self.rng.normal(self.mean, self.std))


class UniformDistribution:
    def __init__(self, low, high, rng):
        self.low = low
        self.high = high
        self.rng = rng

    def sample(self):
        return float(self.rng.uniform(self.low, self.high))


class TriangularDistribution:
    def __init__(self, low, mode, high, rng):
        self.low = low
        self.mode = mode
        self.high = high
        self.rng = rng

    def sample(self):
        return float(self.rng.triangular(self.low, self.mode, self.high))


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def normal(rng):
    """Factory for seeded normal distributions sharing one generator."""
    def _make(mean, std):
        return NormalDistribution(mean, std, rng)
    return _make


@pytest.fixture
def uniform(rng):
    def _make(low, high):
        return UniformDistribution(low, high, rng)
    return _make


@pytest.fixture
def triangular(rng):
    def _make(low, mode, high):
        return TriangularDistribution(low, mode, high, rng)
    return _make


@pytest.fixture
def standard_normal_values():
    return np.random.default_rng(98765).standard_normal(10_000)
