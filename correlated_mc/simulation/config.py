"""Configuration for Monte Carlo simulation runs."""

from dataclasses import dataclass


@dataclass
class SimulationConfig:
    # Sampling
    iterations: int = 10_000
    seed: int | None = 42              # None = fresh OS entropy each run
    workers: int = 1                   # >1 evaluates the model on a thread pool

    # Reporting
    percentiles: tuple[int, ...] = (5, 10, 25, 50, 75, 90, 95, 99)
    confidence_levels: tuple[float, ...] = (0.90, 0.95, 0.99)
    histogram_bins: int | None = None  # None = max(Sturges, Freedman-Diaconis)

    def __post_init__(self):
        if self.iterations < 1:
            raise ValueError(f"iterations must be at least 1, got {self.iterations}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        for level in self.confidence_levels:
            if not 0.0 < level < 1.0:
                raise ValueError(f"confidence levels must be in (0, 1), got {level}")
