"""
CLI runner: simulate the sum of normally distributed inputs.

Usage:
    python -m correlated_mc.simulation.runner \
        --input revenue 100 10 --input costs 50 5 --iterations 10000

    # Correlated inputs (row-major flattened matrix)
    python -m correlated_mc.simulation.runner \
        --input a 100 10 --input b 50 5 --correlation 1 0.8 0.8 1 \
        --iterations 10000 --workers 4 --no-plot
"""

import argparse
import math

import numpy as np

from correlated_mc.simulation.config import SimulationConfig
from correlated_mc.simulation.engine import MonteCarloSimulation
from correlated_mc.simulation.inputs import SimulationInput


class NormalSampler:
    """numpy-backed normal draws, satisfying the ``sample()`` contract."""

    def __init__(self, mean: float, std: float, rng: np.random.Generator):
        if std < 0:
            raise ValueError(f"std must be non-negative, got {std}")
        self.mean = mean
        self.std = std
        self.rng = rng

    def sample(self) -> float:
        return float(self.rng.normal(self.mean, self.std))


def _parse_correlation(flat):
    if flat is None:
        return None
    size = int(round(math.sqrt(len(flat))))
    if size * size != len(flat):
        raise SystemExit(f"--correlation needs a square number of values, got {len(flat)}")
    return np.array(flat, dtype=float).reshape(size, size)


def run(args=None):
    parser = argparse.ArgumentParser(
        description="Monte Carlo simulation of a sum of normal inputs"
    )
    parser.add_argument("--input", nargs=3, action="append", metavar=("NAME", "MEAN", "STD"),
                        help="Normal input; repeat for each variable")
    parser.add_argument("--correlation", nargs="+", type=float, default=None,
                        help="Row-major flattened correlation matrix")
    parser.add_argument("--iterations", type=int, default=10_000,
                        help="Number of iterations (default: 10000)")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed (default: 42, use -1 for random)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Threads used to evaluate the model (default: 1)")
    parser.add_argument("--no-plot", action="store_true",
                        help="Disable visualization")

    parsed = parser.parse_args(args)
    if parsed.iterations < 1:
        parser.error(f"--iterations must be at least 1, got {parsed.iterations}")
    if parsed.workers < 1:
        parser.error(f"--workers must be at least 1, got {parsed.workers}")
    if not parsed.input:
        parsed.input = [["x1", "100", "10"], ["x2", "50", "5"]]

    seed = parsed.seed if parsed.seed >= 0 else None
    config = SimulationConfig(
        iterations=parsed.iterations,
        seed=seed,
        workers=parsed.workers,
    )

    rng = np.random.default_rng(seed)
    inputs = [
        SimulationInput.from_distribution(name, NormalSampler(float(mean), float(std), rng))
        for name, mean, std in parsed.input
    ]
    matrix = _parse_correlation(parsed.correlation)

    sim = MonteCarloSimulation(
        iterations=parsed.iterations,
        model=lambda x: float(np.sum(x)),
        inputs=inputs,
        correlation_matrix=matrix,
        config=config,
    )

    print(f"\nSimulating {parsed.iterations:,} iterations x {len(inputs)} inputs...")
    results = sim.run()
    summary = results.summary(config.confidence_levels)

    # ── Print summary ──
    print("\n" + "=" * 60)
    print("  MONTE CARLO SIMULATION  (model: sum of inputs)")
    print("=" * 60)
    for inp, (_, mean, std) in zip(inputs, parsed.input):
        print(f"  {inp.name:<14}  N({float(mean):,.2f}, {float(std):,.2f})")
    print(f"  Correlated:     {'yes' if matrix is not None else 'no'}")
    print("  " + "-" * 56)
    print(f"  Mean:           {summary['mean']:>14,.4f}")
    print(f"  Median:         {summary['median']:>14,.4f}")
    print(f"  Std Dev:        {summary['std_dev']:>14,.4f}")
    print(f"  Skewness:       {summary['skewness']:>+14.4f}")
    print(f"  Min / Max:      {summary['min']:,.4f} / {summary['max']:,.4f}")
    print("  " + "-" * 56)
    for p in config.percentiles:
        print(f"  {'P' + str(p):>14}:  {results.percentile(p / 100):>14,.4f}")
    print("  " + "-" * 56)
    for level in config.confidence_levels:
        tag = f"{level * 100:g}"
        lo, hi = summary[f"CI{tag}"]
        print(f"  {tag + '%':>5}  VaR {summary[f'VaR{tag}']:>12,.4f}  "
              f"CVaR {summary[f'CVaR{tag}']:>12,.4f}  CI [{lo:,.2f}, {hi:,.2f}]")
    if sim.last_samples is not None and len(inputs) > 1:
        corr = np.corrcoef(sim.last_samples, rowvar=False)
        print("  " + "-" * 56)
        print("  Sample correlation:")
        for row in corr:
            print("    " + "  ".join(f"{v:+.3f}" for v in row))
    print("=" * 60)

    # ── Plot ──
    if not parsed.no_plot:
        from correlated_mc.simulation.plotting import plot_results
        plot_results(
            results,
            title=f"Sum of {len(inputs)} inputs, {parsed.iterations:,} iterations",
            bins=config.histogram_bins,
        )

    return summary


def main():
    run()


if __name__ == "__main__":
    main()
