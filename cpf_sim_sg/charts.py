"""Chart generation for CPF projection, Monte Carlo and life event results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from cpf_sim_sg.events import SolvencyTimeline
from cpf_sim_sg.monte_carlo import MonteCarloResult
from cpf_sim_sg.simulation import ProjectionResult

# Stack colors for the trajectory chart
ACCOUNT_COLORS = {
    "OA": "#1f77b4",           # blue
    "SA": "#2ca02c",           # green
    "MA": "#9467bd",           # purple
    "RA": "#8c564b",           # brown
    "Cash": "#7f7f7f",         # grey
    "Investments": "#ff7f0e",  # orange
}

FAN_COLOR = "#1f77b4"
COLOR_ALERT = "#d62728"


def _format_money_axis(ax: plt.Axes):
    """Thousands separators on the Y axis plus a secondary axis in millions."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    )
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x / 1e6:.1f}M" if x != 0 else "0")
    )
    ax_right.set_ylabel("")


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_trajectory(
    result: ProjectionResult, output_path: Path, name: str = "",
    retirement_age: float | None = None,
) -> Path:
    """Generate a stacked area chart of CPF accounts, cash and investments by age.

    Args:
        result: project_wealth() output.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "30" → "trajectory-30.png").
        retirement_age: draws a marker line when given.

    Returns:
        Path to the generated PNG file.
    """
    if not result.points:
        raise ValueError("No projection points for trajectory chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = result.ages
    series = {
        "OA": [p.oa for p in result.points],
        "SA": [p.sa for p in result.points],
        "MA": [p.ma for p in result.points],
        "RA": [p.ra for p in result.points],
        "Cash": [p.cash for p in result.points],
        "Investments": [p.investments for p in result.points],
    }
    ax.stackplot(
        ages, *series.values(),
        labels=list(series.keys()),
        colors=[ACCOUNT_COLORS[k] for k in series],
        alpha=0.75,
    )
    ax.plot(ages, result.net_worth, color="black", linewidth=1.5, label="Net worth")

    if retirement_age is not None:
        ax.axvline(retirement_age, color="#888888", linewidth=1, linestyle=":")
    shortfall_age = result.first_shortfall_age
    if shortfall_age is not None:
        ax.axvline(shortfall_age, color=COLOR_ALERT, linewidth=2, linestyle=":")
        ax.annotate(
            f"shortfall from {shortfall_age:.0f}",
            xy=(shortfall_age, ax.get_ylim()[1] * 0.85),
            fontsize=11, fontweight="bold", color=COLOR_ALERT, ha="right",
            bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=COLOR_ALERT, alpha=0.9),
        )

    ax.set_xlabel("Age")
    ax.set_ylabel("Balance")
    ax.set_title("Wealth trajectory (deterministic)")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_money_axis(ax)
    return _save(fig, output_path, "trajectory", name)


def plot_mc_fan(
    mc_result: MonteCarloResult,
    output_path: Path,
    name: str = "",
) -> Path:
    """Generate a fan chart (P10-P90 band around the median) for a Monte Carlo result."""
    if not mc_result.ages:
        raise ValueError("MonteCarloResult has no yearly bands")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = mc_result.ages
    ax.fill_between(ages, mc_result.p10, mc_result.p90, alpha=0.2, color=FAN_COLOR, label="P10–P90")
    ax.plot(ages, mc_result.p50, color=FAN_COLOR, linewidth=2, label="P50 (median)")
    ax.plot(ages, mc_result.p10, color=FAN_COLOR, linewidth=0.8, linestyle="--")
    ax.plot(ages, mc_result.p90, color=FAN_COLOR, linewidth=0.8, linestyle="--")

    ax.set_xlabel("Age")
    ax.set_ylabel("Net worth")
    label = f"N={mc_result.completed:,}"
    if mc_result.cancelled:
        label += f" of {mc_result.n_simulations:,}, cancelled"
    ax.set_title(f"Monte Carlo fan chart ({label})")
    ax.legend(loc="upper left", fontsize=9)
    ax.grid(True, alpha=0.3)
    _format_money_axis(ax)
    return _save(fig, output_path, "mc_fan", name)


def plot_solvency(
    timeline: SolvencyTimeline,
    output_path: Path,
    name: str = "",
) -> Path:
    """Generate a line chart of liquid wealth after a disability / critical illness event."""
    if not timeline.points:
        raise ValueError("No solvency points for chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [p.age for p in timeline.points]
    ax.plot(ages, [p.liquid_wealth for p in timeline.points], color=FAN_COLOR, linewidth=2, label="Liquid wealth")
    ax.plot(ages, [p.cpf for p in timeline.points], color=ACCOUNT_COLORS["OA"], linewidth=1,
            linestyle="--", label="CPF (locked)")
    ax.plot(ages, [p.annual_expense for p in timeline.points], color="#888888", linewidth=1,
            linestyle=":", label="Annual expenses")

    depletion = timeline.depletion_age
    if depletion is not None:
        ax.axvline(depletion, color=COLOR_ALERT, linewidth=2, linestyle=":")
        ax.annotate(
            f"depleted at {depletion:.0f}",
            xy=(depletion, ax.get_ylim()[1] * 0.85),
            fontsize=11, fontweight="bold", color=COLOR_ALERT, ha="right",
            bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=COLOR_ALERT, alpha=0.9),
        )

    title = timeline.event_kind.replace("_", " ")
    ax.set_title(f"Solvency after {title} at {timeline.event_age:.0f}")
    ax.set_xlabel("Age")
    ax.set_ylabel("Balance")
    ax.axhline(0, color="black", linewidth=1.0)
    ax.legend(loc="upper right", fontsize=9)
    ax.grid(True, alpha=0.3)
    _format_money_axis(ax)
    return _save(fig, output_path, f"solvency_{timeline.event_kind}", name)
