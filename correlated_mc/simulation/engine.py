"""
Monte Carlo simulation engine.

Independent mode: every iteration samples each input once, in input order,
and evaluates the model on that vector.

Correlated mode: each input is drawn ``iterations`` times into one column of
an (iterations x inputs) matrix, the columns are reordered once with
Iman-Conover to carry the target rank correlation, and the model is then
evaluated row by row.

Sample and outcome buffers are allocated at full size up front and written
by iteration index. With ``workers > 1`` the model evaluation is split into
contiguous blocks on a thread pool; sampling itself always happens on the
calling thread because sampler closures may share one random generator.
"""

import logging
import math
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from correlated_mc.correlation.iman_conover import impose_rank_correlation
from correlated_mc.correlation.matrix import validate_correlation_matrix
from correlated_mc.errors import (
    CorrelationDimensionMismatch,
    InsufficientIterations,
    InvalidModel,
    NoInputs,
    SimulationCancelled,
)
from correlated_mc.simulation.config import SimulationConfig
from correlated_mc.simulation.inputs import SimulationInput
from correlated_mc.simulation.results import SimulationResults

logger = logging.getLogger(__name__)

Model = Callable[[Sequence[float]], float]

_BLOCKS_PER_WORKER = 4


def make_blocks(n: int, block_size: int) -> List[tuple[int, int]]:
    """Split range(n) into contiguous [start, stop) blocks."""
    return [(i, min(i + block_size, n)) for i in range(0, n, block_size)]


class MonteCarloSimulation:
    """
    Samples inputs, evaluates a scalar model per iteration and summarises
    the outcome distribution.

    Example:
        >>> rng = np.random.default_rng(7)
        >>> sim = MonteCarloSimulation(iterations=10_000, model=lambda x: x[0] - x[1])
        >>> sim.add_input(SimulationInput("revenue", lambda: rng.normal(500_000, 100_000)))
        >>> sim.add_input(SimulationInput("costs", lambda: rng.normal(400_000, 80_000)))
        >>> results = sim.run()
        >>> results.value_at_risk(0.95)
    """

    def __init__(
        self,
        iterations: Optional[int] = None,
        model: Optional[Model] = None,
        inputs: Iterable[SimulationInput] = (),
        correlation_matrix=None,
        config: Optional[SimulationConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Args:
            iterations: number of iterations; defaults to config.iterations
            model: pure function mapping one sampled input vector to a float
            inputs: initial inputs, in model-argument order
            correlation_matrix: optional target rank correlation between inputs
            config: run configuration (seed, workers, reporting). Defaults used if None.
            rng: generator for correlated scores; overrides config.seed
        """
        self.config = config or SimulationConfig()
        self.iterations = self.config.iterations if iterations is None else iterations
        self.model = model
        self.inputs: List[SimulationInput] = list(inputs)
        self.correlation_matrix = correlation_matrix
        self._rng = rng
        self._last_samples: Optional[np.ndarray] = None

    def add_input(self, simulation_input: SimulationInput) -> None:
        self.inputs.append(simulation_input)

    @property
    def input_names(self) -> List[str]:
        return [inp.name for inp in self.inputs]

    @property
    def is_correlated(self) -> bool:
        return self.correlation_matrix is not None

    @property
    def last_samples(self) -> Optional[np.ndarray]:
        """Read-only (iterations x inputs) sample matrix of the last completed run."""
        return self._last_samples

    # ── Validation ──

    def _validate(self) -> Optional[np.ndarray]:
        if self.iterations <= 0:
            raise InsufficientIterations(self.iterations)
        if not self.inputs:
            raise NoInputs()
        if self.model is None or not callable(self.model):
            raise TypeError("model must be a callable taking the sampled input vector")
        if self.correlation_matrix is None:
            return None
        if len(self.correlation_matrix) != len(self.inputs):
            raise CorrelationDimensionMismatch(
                expected=len(self.inputs), actual=len(self.correlation_matrix),
            )
        return validate_correlation_matrix(self.correlation_matrix)

    # ── Execution ──

    def run(self, cancel_event: Optional[threading.Event] = None) -> SimulationResults:
        """
        Run the simulation.

        Args:
            cancel_event: optional event; once set, the run stops between
                iterations and raises SimulationCancelled.

        Raises:
            InsufficientIterations, NoInputs, CorrelationDimensionMismatch,
            InvalidCorrelationMatrix: before any sampling
            InvalidModel: first iteration whose outcome is NaN or infinite
            SimulationCancelled: cancel_event was set before completion
        """
        matrix = self._validate()
        self._last_samples = None

        m, k = self.iterations, len(self.inputs)
        workers = self.config.workers
        mode = "correlated" if matrix is not None else "independent"
        logger.info(
            "Running %s simulation: %d iterations x %d inputs (workers=%d)",
            mode, m, k, workers,
        )
        t0 = time.perf_counter()

        samples = np.empty((m, k), dtype=float)
        outcomes = np.empty(m, dtype=float)

        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                samples = self._prepare_samples(samples, matrix, cancel_event, executor)
                self._evaluate_parallel(samples, outcomes, executor, workers, cancel_event)
        elif matrix is not None:
            samples = self._prepare_samples(samples, matrix, cancel_event, None)
            self._evaluate_rows(samples, outcomes, 0, m, cancel_event)
        else:
            self._sample_and_evaluate(samples, outcomes, cancel_event)

        samples.setflags(write=False)
        self._last_samples = samples

        results = SimulationResults(outcomes)
        logger.info(
            "Simulation finished in %.3fs: mean=%.6g std_dev=%.6g",
            time.perf_counter() - t0, results.statistics.mean, results.statistics.std_dev,
        )
        return results

    def run_correlated(
        self,
        inputs: Sequence[SimulationInput],
        correlation_matrix,
        iterations: int,
        model: Model,
        cancel_event: Optional[threading.Event] = None,
    ) -> SimulationResults:
        """One-shot correlated run with this simulation's config and generator."""
        sim = MonteCarloSimulation(
            iterations=iterations,
            model=model,
            inputs=inputs,
            correlation_matrix=correlation_matrix,
            config=self.config,
            rng=self._rng,
        )
        results = sim.run(cancel_event=cancel_event)
        self._last_samples = sim.last_samples
        return results

    def _make_rng(self) -> np.random.Generator:
        if self._rng is not None:
            return self._rng
        return np.random.default_rng(self.config.seed)

    def _prepare_samples(
        self,
        samples: np.ndarray,
        matrix: Optional[np.ndarray],
        cancel_event: Optional[threading.Event],
        executor: Optional[Executor],
    ) -> np.ndarray:
        """Fill the sample matrix; reorder it when a correlation matrix is set."""
        m = samples.shape[0]
        if matrix is None:
            for i in range(m):
                _check_cancelled(cancel_event, i, m)
                for j, inp in enumerate(self.inputs):
                    samples[i, j] = inp.sample()
            return samples

        for j, inp in enumerate(self.inputs):
            _check_cancelled(cancel_event, 0, m)
            col = samples[:, j]
            for i in range(m):
                col[i] = inp.sample()

        _check_cancelled(cancel_event, 0, m)
        return impose_rank_correlation(samples, matrix, rng=self._make_rng(), executor=executor)

    def _sample_and_evaluate(
        self,
        samples: np.ndarray,
        outcomes: np.ndarray,
        cancel_event: Optional[threading.Event],
    ) -> None:
        view = _read_only_view(samples)
        model = self.model
        m = samples.shape[0]
        for i in range(m):
            _check_cancelled(cancel_event, i, m)
            row = samples[i]
            for j, inp in enumerate(self.inputs):
                row[j] = inp.sample()
            outcome = float(model(view[i]))
            if not math.isfinite(outcome):
                raise InvalidModel(i, samples[i], outcome)
            outcomes[i] = outcome

    def _evaluate_rows(
        self,
        samples: np.ndarray,
        outcomes: np.ndarray,
        start: int,
        stop: int,
        cancel_event: Optional[threading.Event],
    ) -> None:
        view = _read_only_view(samples)
        model = self.model
        m = samples.shape[0]
        for i in range(start, stop):
            _check_cancelled(cancel_event, i, m)
            outcome = float(model(view[i]))
            if not math.isfinite(outcome):
                raise InvalidModel(i, samples[i], outcome)
            outcomes[i] = outcome

    def _evaluate_parallel(
        self,
        samples: np.ndarray,
        outcomes: np.ndarray,
        executor: Executor,
        workers: int,
        cancel_event: Optional[threading.Event],
    ) -> None:
        m = samples.shape[0]
        view = _read_only_view(samples)
        model = self.model
        block_size = max(1, math.ceil(m / (workers * _BLOCKS_PER_WORKER)))
        blocks = make_blocks(m, block_size)
        logger.debug("Evaluating %d blocks of up to %d iterations", len(blocks), block_size)

        lock = threading.Lock()
        # smallest failing iteration seen so far, and its outcome
        failure = [m, math.nan]

        def _work(block: tuple[int, int]) -> int:
            start, stop = block
            done = 0
            for i in range(start, stop):
                if i > failure[0]:
                    break
                if cancel_event is not None and cancel_event.is_set():
                    break
                outcome = float(model(view[i]))
                if not math.isfinite(outcome):
                    with lock:
                        if i < failure[0]:
                            failure[0], failure[1] = i, outcome
                    break
                outcomes[i] = outcome
                done += 1
            return done

        futures = [executor.submit(_work, blk) for blk in blocks]
        # barrier: analysis starts only after every block is done
        completed = sum(f.result() for f in futures)

        if failure[0] < m:
            i = failure[0]
            raise InvalidModel(i, samples[i], failure[1])
        if completed < m:
            raise SimulationCancelled(completed, m)


def _read_only_view(a: np.ndarray) -> np.ndarray:
    view = a.view()
    view.setflags(write=False)
    return view


def _check_cancelled(cancel_event: Optional[threading.Event], completed: int, total: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise SimulationCancelled(completed, total)
