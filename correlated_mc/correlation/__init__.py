"""Correlation matrix validation, correlated normal draws and Iman-Conover reordering."""
from .matrix import (
    CORRELATION_TOLERANCE,
    cholesky,
    factorize,
    is_valid_correlation_matrix,
    validate_correlation_matrix,
)
from .normals import CorrelatedNormalGenerator
from .iman_conover import impose_rank_correlation, rank_columns, spearman_correlation
