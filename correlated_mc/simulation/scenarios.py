"""
Scenario and sensitivity analysis on top of MonteCarloSimulation.

A scenario pins each model input either to a fixed value or to a
distribution; every scenario runs as its own simulation so their outcome
distributions can be compared side by side.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from correlated_mc.errors import MissingInputConfiguration, NoScenarios, UnknownInput
from correlated_mc.simulation.config import SimulationConfig
from correlated_mc.simulation.engine import Model, MonteCarloSimulation
from correlated_mc.simulation.inputs import Sampleable, SimulationInput
from correlated_mc.simulation.results import SimulationResults

logger = logging.getLogger(__name__)


@dataclass
class Scenario:
    name: str
    values: Dict[str, float] = field(default_factory=dict)
    distributions: Dict[str, Sampleable] = field(default_factory=dict)

    def set_value(self, input_name: str, value: float) -> "Scenario":
        self.values[input_name] = float(value)
        return self

    def set_distribution(self, input_name: str, distribution: Sampleable) -> "Scenario":
        self.distributions[input_name] = distribution
        return self

    @property
    def configured_inputs(self) -> set:
        return set(self.values) | set(self.distributions)

    def to_input(self, input_name: str) -> SimulationInput:
        # fixed values take precedence over distributions
        if input_name in self.values:
            return SimulationInput.constant(input_name, self.values[input_name])
        if input_name in self.distributions:
            return SimulationInput.from_distribution(input_name, self.distributions[input_name])
        raise MissingInputConfiguration(self.name, [input_name])


class ScenarioAnalysis:
    """
    Runs the same model under several named input configurations.

    Example:
        >>> analysis = ScenarioAnalysis(["revenue", "costs"], lambda x: x[0] - x[1], iterations=5_000)
        >>> analysis.add_scenario(Scenario("base", values={"revenue": 1000, "costs": 700}))
        >>> results = analysis.run()
        >>> results["base"].statistics.mean
        300.0
    """

    def __init__(
        self,
        input_names: Sequence[str],
        model: Model,
        iterations: int,
        config: Optional[SimulationConfig] = None,
    ):
        self.input_names = list(input_names)
        self.model = model
        self.iterations = iterations
        self.config = config or SimulationConfig()
        self.scenarios: List[Scenario] = []

    def add_scenario(self, scenario: Scenario) -> None:
        self.scenarios.append(scenario)

    def _check(self, scenario: Scenario) -> None:
        configured = scenario.configured_inputs
        missing = set(self.input_names) - configured
        if missing:
            raise MissingInputConfiguration(scenario.name, list(missing))
        for name in sorted(configured):
            if name not in self.input_names:
                raise UnknownInput(scenario.name, name)

    def run(self) -> Dict[str, SimulationResults]:
        if not self.scenarios:
            raise NoScenarios()

        # validate everything before running anything
        for scenario in self.scenarios:
            self._check(scenario)

        results: Dict[str, SimulationResults] = {}
        for scenario in self.scenarios:
            logger.info("Running scenario '%s'", scenario.name)
            sim = MonteCarloSimulation(
                iterations=self.iterations,
                model=self.model,
                inputs=[scenario.to_input(name) for name in self.input_names],
                config=self.config,
            )
            results[scenario.name] = sim.run()
        return results


class ScenarioMetric(Enum):
    MEAN = "mean"
    MEDIAN = "median"
    STD_DEV = "std_dev"
    P5 = "p5"
    P95 = "p95"
    VAR95 = "var95"
    CVAR95 = "cvar95"

    def evaluate(self, results: SimulationResults) -> float:
        if self is ScenarioMetric.MEAN:
            return results.statistics.mean
        if self is ScenarioMetric.MEDIAN:
            return results.statistics.median
        if self is ScenarioMetric.STD_DEV:
            return results.statistics.std_dev
        if self is ScenarioMetric.P5:
            return results.percentiles.p5
        if self is ScenarioMetric.P95:
            return results.percentiles.p95
        if self is ScenarioMetric.VAR95:
            return results.value_at_risk(0.95)
        return results.conditional_value_at_risk(0.95)


class ScenarioComparison:
    def __init__(self, results: Dict[str, SimulationResults]):
        if not results:
            raise NoScenarios()
        self.results = dict(results)

    @property
    def scenario_names(self) -> List[str]:
        return list(self.results)

    def rank_scenarios(
        self, metric: ScenarioMetric, ascending: bool = False,
    ) -> List[Tuple[str, SimulationResults]]:
        return sorted(
            self.results.items(),
            key=lambda item: metric.evaluate(item[1]),
            reverse=not ascending,
        )

    def best_scenario(self, metric: ScenarioMetric) -> Tuple[str, SimulationResults]:
        return self.rank_scenarios(metric, ascending=False)[0]

    def worst_scenario(self, metric: ScenarioMetric) -> Tuple[str, SimulationResults]:
        return self.rank_scenarios(metric, ascending=True)[0]

    def summary_table(self, metrics: Sequence[ScenarioMetric]) -> pd.DataFrame:
        rows = {
            name: [metric.evaluate(res) for metric in metrics]
            for name, res in self.results.items()
        }
        df = pd.DataFrame.from_dict(rows, orient="index", columns=[m.value for m in metrics])
        df.index.name = "scenario"
        return df


@dataclass(frozen=True)
class InputSensitivity:
    input_name: str
    base_value: float
    scenarios: Tuple[Tuple[float, SimulationResults], ...]   # (multiplier, results)

    def means(self) -> pd.Series:
        return pd.Series(
            {mult: res.statistics.mean for mult, res in self.scenarios},
            name=self.input_name,
        )


@dataclass(frozen=True)
class TornadoBar:
    input_name: str
    low: float
    high: float

    @property
    def impact(self) -> float:
        return self.high - self.low


class SensitivityAnalysis:
    """One-at-a-time sensitivity of the mean outcome to each input."""

    def __init__(
        self,
        input_names: Sequence[str],
        model: Model,
        base_values: Dict[str, float],
        iterations: int,
        config: Optional[SimulationConfig] = None,
    ):
        self.input_names = list(input_names)
        self.model = model
        self.base_values = dict(base_values)
        self.iterations = iterations
        self.config = config or SimulationConfig()

    def analyze_input(
        self, input_name: str, low: float, high: float, steps: int = 5,
    ) -> InputSensitivity:
        """
        Scale ``input_name`` by ``steps`` multipliers evenly spaced in
        [low, high], holding every other input at its base value.
        """
        if input_name not in self.base_values:
            raise UnknownInput("sensitivity analysis", input_name)
        if steps < 2:
            raise ValueError(f"steps must be at least 2, got {steps}")

        base = self.base_values[input_name]
        scenarios = []
        for multiplier in np.linspace(low, high, steps):
            multiplier = float(multiplier)
            values = dict(self.base_values)
            values[input_name] = base * multiplier
            scenario = Scenario(f"{input_name}_{multiplier:g}", values=values)

            analysis = ScenarioAnalysis(self.input_names, self.model, self.iterations, self.config)
            analysis.add_scenario(scenario)
            scenarios.append((multiplier, analysis.run()[scenario.name]))

        return InputSensitivity(input_name, base, tuple(scenarios))

    def tornado_chart(self, low: float, high: float) -> List[TornadoBar]:
        """Mean-outcome swing per input, widest first."""
        bars = []
        for name in self.input_names:
            sens = self.analyze_input(name, low, high, steps=2)
            lo_mean = sens.scenarios[0][1].statistics.mean
            hi_mean = sens.scenarios[-1][1].statistics.mean
            bars.append(TornadoBar(name, min(lo_mean, hi_mean), max(lo_mean, hi_mean)))

        bars.sort(key=lambda b: b.impact, reverse=True)
        return bars
