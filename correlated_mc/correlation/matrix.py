"""
Correlation matrix validation and Cholesky factorisation.

Checks run in a fixed order (square, symmetric, unit diagonal, entries in
[-1, 1], positive semi-definite) and the first failure is reported. PSD is
established constructively by attempting the factorisation, so singular but
valid matrices (e.g. perfect correlation) are accepted, which
numpy.linalg.cholesky would reject.
"""

import logging
import math

import numpy as np

from correlated_mc.errors import InvalidCorrelationMatrix, MatrixDefect

logger = logging.getLogger(__name__)

CORRELATION_TOLERANCE = 1e-10


def _as_square_array(matrix) -> np.ndarray:
    try:
        m = np.array(matrix, dtype=float)
    except ValueError as e:
        # ragged nested lists
        raise InvalidCorrelationMatrix(MatrixDefect.NOT_SQUARE, "rows have unequal lengths") from e
    if m.ndim != 2 or m.shape[0] != m.shape[1] or m.shape[0] == 0:
        raise InvalidCorrelationMatrix(MatrixDefect.NOT_SQUARE, f"shape {m.shape}")
    if not np.all(np.isfinite(m)):
        raise InvalidCorrelationMatrix(MatrixDefect.OUT_OF_RANGE, "matrix contains NaN or Inf")
    return m


def cholesky(matrix, tol: float = CORRELATION_TOLERANCE) -> np.ndarray:
    """
    Lower-triangular L with L @ L.T == matrix (Cholesky-Banachiewicz).

    A pivot below -tol means the matrix is not positive semi-definite.
    Pivots within tol of zero are treated as exact zeros and the column
    below them is zeroed; any residual above tol in that column means the
    matrix is not positive semi-definite.
    """
    m = _as_square_array(matrix)
    n = m.shape[0]
    L = np.zeros((n, n))

    for i in range(n):
        for j in range(i + 1):
            s = m[i, j] - float(np.dot(L[i, :j], L[j, :j]))
            if i == j:
                if s < -tol:
                    raise InvalidCorrelationMatrix(
                        MatrixDefect.NOT_POSITIVE_SEMIDEFINITE,
                        f"pivot {i} is {s:.3e}",
                    )
                L[i, i] = math.sqrt(s) if s > tol else 0.0
            elif L[j, j] > 0.0:
                L[i, j] = s / L[j, j]
            elif abs(s) > tol:
                # zero pivot but a non-zero residual: the rows are inconsistent
                raise InvalidCorrelationMatrix(
                    MatrixDefect.NOT_POSITIVE_SEMIDEFINITE,
                    f"entry ({i}, {j}) cannot be reproduced after a zero pivot",
                )

    L.setflags(write=False)
    return L


def _check_structure(matrix, tol: float) -> np.ndarray:
    m = _as_square_array(matrix)
    n = m.shape[0]

    asym = np.abs(m - m.T)
    if np.any(asym > tol):
        i, j = np.unravel_index(int(np.argmax(asym)), asym.shape)
        raise InvalidCorrelationMatrix(
            MatrixDefect.NOT_SYMMETRIC,
            f"m[{i}][{j}]={m[i, j]} but m[{j}][{i}]={m[j, i]}",
        )

    diag = np.diag(m)
    bad = np.flatnonzero(np.abs(diag - 1.0) > tol)
    if bad.size:
        raise InvalidCorrelationMatrix(
            MatrixDefect.BAD_DIAGONAL,
            f"diagonal entries {bad.tolist()} are {diag[bad].tolist()}, expected 1.0",
        )

    off = m[~np.eye(n, dtype=bool)]
    if off.size and np.any(np.abs(off) > 1.0 + tol):
        raise InvalidCorrelationMatrix(
            MatrixDefect.OUT_OF_RANGE,
            f"off-diagonal entries must lie in [-1, 1], found {off[np.abs(off) > 1.0 + tol].tolist()}",
        )
    return m


def validate_correlation_matrix(matrix, tol: float = CORRELATION_TOLERANCE) -> np.ndarray:
    """
    Validate ``matrix`` and return it as a read-only float array.

    Raises:
        InvalidCorrelationMatrix: naming the first invariant that fails.
    """
    m, _ = factorize(matrix, tol=tol)
    return m


def is_valid_correlation_matrix(matrix, tol: float = CORRELATION_TOLERANCE) -> bool:
    try:
        validate_correlation_matrix(matrix, tol=tol)
    except InvalidCorrelationMatrix as e:
        logger.debug("Rejected correlation matrix: %s", e)
        return False
    return True


def factorize(matrix, tol: float = CORRELATION_TOLERANCE) -> tuple[np.ndarray, np.ndarray]:
    """Validate then factorise; returns (read-only matrix, L)."""
    m = _check_structure(matrix, tol)
    L = cholesky(m, tol=tol)
    m.setflags(write=False)
    return m, L
