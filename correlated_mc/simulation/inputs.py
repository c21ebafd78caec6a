"""
Simulation inputs: any distribution reduced to a zero-argument sampler.

The engine never needs to know a distribution's concrete type, only that
calling the sampler returns one float and successive calls are independent.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Protocol, runtime_checkable


@runtime_checkable
class Sampleable(Protocol):
    """Anything that can produce one random scalar per call."""

    def sample(self) -> float:
        ...


@dataclass(frozen=True)
class SimulationInput:
    name: str
    sampler: Callable[[], float]
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not callable(self.sampler):
            raise TypeError(f"sampler for input '{self.name}' must be callable")

    def sample(self) -> float:
        return float(self.sampler())

    @classmethod
    def from_distribution(cls, name: str, distribution: Sampleable, **metadata: str) -> "SimulationInput":
        """Wrap an object exposing ``sample()``."""
        if not isinstance(distribution, Sampleable):
            raise TypeError(
                f"distribution for input '{name}' must provide a sample() method, "
                f"got {type(distribution).__name__}"
            )
        metadata.setdefault("distribution", type(distribution).__name__)
        return cls(name=name, sampler=distribution.sample, metadata=dict(metadata))

    @classmethod
    def constant(cls, name: str, value: float) -> "SimulationInput":
        """Degenerate input that always returns ``value``."""
        value = float(value)
        return cls(name=name, sampler=lambda: value, metadata={"distribution": "constant"})
