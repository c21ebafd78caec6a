"""
Jointly correlated normal draws via Cholesky decomposition.

X = means + L @ Z, with Z i.i.d. standard normal and L the lower Cholesky
factor of the correlation matrix, so Corr(X) = L @ L.T.
"""

import numpy as np

from correlated_mc.correlation.matrix import factorize
from correlated_mc.errors import CorrelationDimensionMismatch


class CorrelatedNormalGenerator:
    """
    Draws vectors of correlated normals with unit variances.

    Example:
        >>> gen = CorrelatedNormalGenerator([0.0, 0.0], [[1.0, 0.7], [0.7, 1.0]], rng=42)
        >>> gen.sample().shape
        (2,)
    """

    def __init__(self, means, correlation_matrix, rng=None):
        """
        Args:
            means: length-n mean vector
            correlation_matrix: n x n correlation matrix, validated here
            rng: numpy Generator, integer seed or None

        Raises:
            CorrelationDimensionMismatch: len(means) differs from the matrix size
            InvalidCorrelationMatrix: the matrix fails validation
        """
        self.means = np.array(means, dtype=float).reshape(-1)
        if len(correlation_matrix) != self.means.shape[0]:
            raise CorrelationDimensionMismatch(
                expected=self.means.shape[0], actual=len(correlation_matrix),
            )
        self.correlation_matrix, self._cholesky = factorize(correlation_matrix)
        self.means.setflags(write=False)
        self.rng = np.random.default_rng(rng)

    @property
    def dimension(self) -> int:
        return self.means.shape[0]

    @property
    def cholesky_factor(self) -> np.ndarray:
        return self._cholesky

    def sample(self) -> np.ndarray:
        """One correlated vector of length n."""
        z = self.rng.standard_normal(self.dimension)
        return self.means + self._cholesky @ z

    def sample_many(self, count: int) -> np.ndarray:
        """``count`` correlated vectors as a (count, n) array."""
        if count < 0:
            raise ValueError(f"count must be non-negative, got {count}")
        z = self.rng.standard_normal((count, self.dimension))
        return self.means + z @ self._cholesky.T
