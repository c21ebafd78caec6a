"""Correlated Monte Carlo simulation engine with percentile and tail-risk analysis."""
from .errors import (
    CorrelationDimensionMismatch,
    InsufficientIterations,
    InvalidCorrelationMatrix,
    InvalidModel,
    MatrixDefect,
    NoInputs,
    SimulationCancelled,
    SimulationError,
)
from .correlation import (
    CorrelatedNormalGenerator,
    cholesky,
    impose_rank_correlation,
    is_valid_correlation_matrix,
    validate_correlation_matrix,
)
from .metrics import (
    OutcomeStatistics,
    PercentileSet,
    conditional_value_at_risk,
    percentile,
    value_at_risk,
)
from .simulation import (
    MonteCarloSimulation,
    SimulationConfig,
    SimulationInput,
    SimulationResults,
)

__version__ = "0.1.0"
