"""
Iman-Conover rank-correlation imposition.

Given m independent draws of each of k variables, reorder every column so
the rows follow the rank structure of m correlated normal score vectors.
Each column keeps exactly the values it was given (only the row pairing
changes), so arbitrary marginals survive while the target Spearman
correlation is approximately induced.

Steps, per run:
  1. N = m correlated standard-normal vectors from the target matrix
  2. for column j: sort S[:, j] ascending
  3. the r-th smallest value goes to the row holding the r-th smallest N[:, j]
"""

import logging
from concurrent.futures import Executor

import numpy as np

from correlated_mc.correlation.normals import CorrelatedNormalGenerator
from correlated_mc.errors import CorrelationDimensionMismatch

logger = logging.getLogger(__name__)


def impose_rank_correlation(
    samples: np.ndarray,
    correlation_matrix,
    rng=None,
    executor: Executor | None = None,
) -> np.ndarray:
    """
    Reorder the columns of ``samples`` (m x k) to induce ``correlation_matrix``.

    Args:
        samples: independent draws, one column per variable
        correlation_matrix: k x k target rank correlation
        rng: numpy Generator or seed for the normal scores
        executor: optional executor; columns are reordered in parallel on it

    Returns:
        New m x k array; column j is a permutation of samples[:, j].

    Raises:
        ValueError: samples is not two-dimensional
        CorrelationDimensionMismatch: k differs from the matrix size
        InvalidCorrelationMatrix: the matrix fails validation
    """
    samples = np.asarray(samples, dtype=float)
    if samples.ndim != 2:
        raise ValueError(f"samples must be a 2-D (iterations x variables) array, got shape {samples.shape}")

    m, k = samples.shape
    if len(correlation_matrix) != k:
        raise CorrelationDimensionMismatch(expected=k, actual=len(correlation_matrix))

    generator = CorrelatedNormalGenerator(np.zeros(k), correlation_matrix, rng=rng)
    scores = generator.sample_many(m)

    out = np.empty_like(samples)

    def _reorder_column(j: int) -> None:
        order = np.argsort(scores[:, j], kind="stable")
        out[order, j] = np.sort(samples[:, j])

    if executor is not None and k > 1:
        # each task owns one output column
        list(executor.map(_reorder_column, range(k)))
    else:
        for j in range(k):
            _reorder_column(j)

    logger.debug("Imposed rank correlation on %d x %d sample matrix", m, k)
    return out


def rank_columns(a: np.ndarray) -> np.ndarray:
    """Ordinal ranks (0 = smallest) of each column of a 2-D array."""
    a = np.asarray(a, dtype=float)
    ranks = np.empty(a.shape, dtype=float)
    order = np.argsort(a, axis=0, kind="stable")
    rows = np.arange(a.shape[0], dtype=float)
    for j in range(a.shape[1]):
        ranks[order[:, j], j] = rows
    return ranks


def spearman_correlation(a: np.ndarray) -> np.ndarray:
    """k x k Spearman rank-correlation matrix of the columns of ``a``."""
    return np.atleast_2d(np.corrcoef(rank_columns(a), rowvar=False))
