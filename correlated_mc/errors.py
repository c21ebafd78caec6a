"""
Error taxonomy for the simulation engine.

Everything except InvalidModel and SimulationCancelled is a pre-run
validation failure raised before any sampling happens.
"""

from enum import Enum
from typing import Sequence


class SimulationError(ValueError):
    """Base class for every error raised by the engine."""


class InsufficientIterations(SimulationError):
    def __init__(self, iterations: int):
        self.iterations = iterations
        super().__init__(f"iterations must be positive, got {iterations}")


class NoInputs(SimulationError):
    def __init__(self):
        super().__init__("simulation has no inputs; add at least one SimulationInput")


class CorrelationDimensionMismatch(SimulationError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"correlation matrix is {actual}x{actual} but {expected} variables were given"
        )


class MatrixDefect(Enum):
    NOT_SQUARE = "not-square"
    NOT_SYMMETRIC = "not-symmetric"
    BAD_DIAGONAL = "bad-diagonal"
    OUT_OF_RANGE = "out-of-range"
    NOT_POSITIVE_SEMIDEFINITE = "not-positive-semidefinite"


class InvalidCorrelationMatrix(SimulationError):
    """The matrix fails one of the correlation-matrix invariants.

    ``defect`` tells malformed input (shape, symmetry, diagonal, range) apart
    from a mathematically inconsistent one (not positive semi-definite).
    """

    def __init__(self, defect: MatrixDefect, detail: str = ""):
        self.defect = defect
        self.detail = detail
        msg = f"invalid correlation matrix ({defect.value})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class InvalidModel(SimulationError):
    """The model returned NaN or +/-Inf. The run is aborted."""

    def __init__(self, iteration: int, inputs: Sequence[float], outcome: float):
        self.iteration = iteration
        self.inputs = tuple(float(x) for x in inputs)
        self.outcome = outcome
        kind = "NaN" if outcome != outcome else "infinite"
        super().__init__(
            f"model produced a {kind} result at iteration {iteration} "
            f"for inputs {list(self.inputs)}"
        )


class SimulationCancelled(SimulationError):
    """Raised instead of returning results when a run is cancelled mid-way."""

    def __init__(self, completed: int, iterations: int):
        self.completed = completed
        self.iterations = iterations
        super().__init__(
            f"simulation cancelled after {completed} of {iterations} iterations; "
            "no results were produced"
        )


# ── Scenario analysis ──

class ScenarioError(SimulationError):
    pass


class NoScenarios(ScenarioError):
    def __init__(self):
        super().__init__("no scenarios have been added to the analysis")


class MissingInputConfiguration(ScenarioError):
    def __init__(self, scenario: str, missing_inputs: Sequence[str]):
        self.scenario = scenario
        self.missing_inputs = sorted(missing_inputs)
        super().__init__(
            f"scenario '{scenario}' is missing configuration for inputs: "
            f"{', '.join(self.missing_inputs)}"
        )


class UnknownInput(ScenarioError):
    def __init__(self, scenario: str, input_name: str):
        self.scenario = scenario
        self.input_name = input_name
        super().__init__(f"scenario '{scenario}' references unknown input: {input_name}")
