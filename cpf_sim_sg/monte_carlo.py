"""Monte Carlo simulation of investment returns over the wealth projection."""

import math
import sys
from dataclasses import dataclass, field
from random import Random
from typing import Callable

from cpf_sim_sg.params import SimulationParams, to_rate
from cpf_sim_sg.simulation import roll_liquid, yearly_ledger_points

MC_PERCENTILES = (10, 50, 90)
DEFAULT_SIMULATIONS = 500
DEFAULT_VOLATILITY = 0.12


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo simulation."""

    n_simulations: int = DEFAULT_SIMULATIONS
    seed: int | None = None
    return_volatility: float = DEFAULT_VOLATILITY


@dataclass
class MonteCarloResult:
    """Per-year net-worth percentile bands across all completed passes."""

    n_simulations: int
    completed: int
    ages: list[float] = field(default_factory=list)
    p10: list[float] = field(default_factory=list)
    p50: list[float] = field(default_factory=list)
    p90: list[float] = field(default_factory=list)
    final_net_worth: list[float] = field(default_factory=list)
    shortfall_count: int = 0
    cancelled: bool = False
    seed: int | None = None

    @property
    def pessimistic(self) -> list[float]:
        return self.p10

    @property
    def median(self) -> list[float]:
        return self.p50

    @property
    def optimistic(self) -> list[float]:
        return self.p90

    @property
    def shortfall_probability(self) -> float:
        """Share of passes in which retirement spending went unmet in some year."""
        return self.shortfall_count / self.completed if self.completed else 0.0


def _box_muller(rng: Random) -> float:
    """Standard normal sample via the Box-Muller transform."""
    u = 0.0
    while u == 0.0:
        u = rng.random()
    v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)


def _sample_normal_returns(
    rng: Random,
    n_years: int,
    mean: float,
    volatility: float,
) -> list[float]:
    """Sample annual returns as mean + volatility * Z."""
    return [mean + volatility * _box_muller(rng) for _ in range(n_years)]


def _percentile_from_sorted(sorted_vals: list[float], p: int) -> float:
    """Value at index floor(n * p / 100) of a pre-sorted list (clamped to the last index)."""
    n = len(sorted_vals)
    idx = max(0, min(int(p / 100 * n), n - 1))
    return sorted_vals[idx]


def run_monte_carlo(
    params: SimulationParams,
    config: MonteCarloConfig | None = None,
    quiet: bool = False,
    should_stop: Callable[[], bool] | None = None,
) -> MonteCarloResult:
    """Run N passes of the wealth projection with randomized yearly investment returns.

    The CPF ledger, cash and expenses are deterministic, so the ledger is
    projected once and only the liquid leg is re-rolled per pass.
    should_stop is checked before each pass; returning True ends the run early
    and the bands are computed from the passes completed so far.
    """
    config = config or MonteCarloConfig()
    n_simulations = max(1, int(to_rate(config.n_simulations, DEFAULT_SIMULATIONS)))
    volatility = to_rate(config.return_volatility, DEFAULT_VOLATILITY)
    rng = Random(config.seed)

    ledger_points = yearly_ledger_points(params)
    n_years = len(ledger_points) - 1
    ages = [lp.age for lp in ledger_points]

    runs: list[list[float]] = []
    shortfall_count = 0
    cancelled = False

    for i in range(n_simulations):
        if should_stop is not None and should_stop():
            cancelled = True
            break

        annual_returns = _sample_normal_returns(rng, n_years, params.investment_return, volatility)
        points = roll_liquid(params, ledger_points, annual_returns)
        runs.append([p.net_worth for p in points])
        if any(p.has_shortfall for p in points):
            shortfall_count += 1

        if not quiet and (i + 1) % 100 == 0:
            print(f"\r  Monte Carlo: {i + 1}/{n_simulations}", end="", file=sys.stderr)

    if not quiet and n_simulations >= 100:
        print(file=sys.stderr)

    completed = len(runs)
    if completed == 0:
        deterministic = [p.net_worth for p in roll_liquid(params, ledger_points)]
        return MonteCarloResult(
            n_simulations=n_simulations, completed=0, ages=ages,
            p10=list(deterministic), p50=list(deterministic), p90=list(deterministic),
            cancelled=cancelled, seed=config.seed,
        )

    bands: dict[int, list[float]] = {p: [] for p in MC_PERCENTILES}
    for year in range(n_years + 1):
        year_values = sorted(run[year] for run in runs)
        for p in MC_PERCENTILES:
            bands[p].append(_percentile_from_sorted(year_values, p))

    return MonteCarloResult(
        n_simulations=n_simulations,
        completed=completed,
        ages=ages,
        p10=bands[10],
        p50=bands[50],
        p90=bands[90],
        final_net_worth=sorted(run[-1] for run in runs),
        shortfall_count=shortfall_count,
        cancelled=cancelled,
        seed=config.seed,
    )
