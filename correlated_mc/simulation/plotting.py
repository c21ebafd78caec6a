"""Simulation outcome visualization: distribution histogram with tail-risk markers."""

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from correlated_mc.simulation.results import SimulationResults


def plot_results(
    results: SimulationResults,
    title: str = "Monte Carlo Outcome Distribution",
    confidence_level: float = 0.95,
    bins: int | None = None,
    show: bool = True,
):
    """
    Histogram of outcomes with P5 / P50 / P95, VaR and CVaR lines and an
    annotation box summarising the run. Returns the matplotlib Figure.
    """
    plt.close("all")

    fig, ax = plt.subplots(figsize=(12, 6))

    stats = results.statistics
    pct = results.percentiles
    hist = results.histogram(bins)

    ax.bar(
        [b.lower for b in hist],
        [b.count for b in hist],
        width=[b.upper - b.lower for b in hist],
        align="edge", color="#3498db", alpha=0.7,
        edgecolor="white", linewidth=0.3,
    )

    for label, val in (("P5", pct.p5), ("P50", pct.p50), ("P95", pct.p95)):
        ax.axvline(
            x=val, color="navy" if label == "P50" else "gray",
            linestyle="-" if label == "P50" else "--",
            linewidth=1.2 if label == "P50" else 0.8,
            label=f"{label}: {val:,.2f}",
        )

    var = results.value_at_risk(confidence_level)
    cvar = results.conditional_value_at_risk(confidence_level)
    tag = f"{confidence_level:.0%}"
    ax.axvline(x=var, color="#c0392b", linestyle="--", linewidth=1.2,
               label=f"VaR {tag}: {var:,.2f}")
    ax.axvline(x=cvar, color="#8e44ad", linestyle=":", linewidth=1.2,
               label=f"CVaR {tag}: {cvar:,.2f}")

    lo, hi = results.confidence_interval(confidence_level)
    ax.annotate(
        f"n = {stats.count:,}\n"
        f"Mean: {stats.mean:,.2f}  |  Std: {stats.std_dev:,.2f}\n"
        f"Skew: {stats.skewness:+.3f}\n"
        f"{tag} CI: [{lo:,.2f}, {hi:,.2f}]",
        xy=(0.98, 0.92), xycoords="axes fraction",
        ha="right", va="top", fontsize=9,
        bbox=dict(boxstyle="round,pad=0.4", facecolor="wheat", alpha=0.85),
    )

    fig.suptitle(title, fontsize=11, fontweight="bold")
    ax.set_xlabel("Outcome", fontsize=10)
    ax.set_ylabel("Frequency", fontsize=10)
    ax.legend(loc="upper left", fontsize=8, framealpha=0.9)
    ax.grid(True, alpha=0.25, linestyle="--")
    ax.xaxis.set_major_formatter(mticker.FuncFormatter(lambda x, _: f"{x:,.0f}"))
    ax.margins(x=0.02)

    plt.tight_layout()
    if show:
        plt.show(block=True)
    return fig
