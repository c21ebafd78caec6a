"""Monte Carlo simulation with independent or rank-correlated inputs."""
from .config import SimulationConfig
from .inputs import Sampleable, SimulationInput
from .engine import MonteCarloSimulation
from .results import HistogramBin, SimulationResults
from .scenarios import (
    InputSensitivity,
    Scenario,
    ScenarioAnalysis,
    ScenarioComparison,
    ScenarioMetric,
    SensitivityAnalysis,
    TornadoBar,
)
