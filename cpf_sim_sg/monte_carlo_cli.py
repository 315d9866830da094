"""CLI entry point for Monte Carlo simulation."""

from cpf_sim_sg.config import build_params, parse_args
from cpf_sim_sg.monte_carlo import (
    DEFAULT_SIMULATIONS,
    DEFAULT_VOLATILITY,
    MonteCarloConfig,
    MonteCarloResult,
    run_monte_carlo,
)


def _add_mc_args(parser):
    parser.add_argument(
        "--mc-runs", type=int, default=DEFAULT_SIMULATIONS,
        help=f"number of passes (default: {DEFAULT_SIMULATIONS})",
    )
    parser.add_argument(
        "--volatility", type=float, default=DEFAULT_VOLATILITY,
        help=f"investment return volatility σ (default: {DEFAULT_VOLATILITY})",
    )
    parser.add_argument(
        "--seed", type=int, default=42,
        help="random seed (default: 42)",
    )


def _fmt_m(v: float) -> str:
    """Format a value in millions with sign."""
    m = v / 1e6
    if m < 0:
        return f"-{abs(m):.2f}M"
    return f"{m:.2f}M"


def _print_results(result: MonteCarloResult, vol: float, every: int = 5):
    print()
    print(f"[Monte Carlo (N={result.completed:,}, σ={vol:.0%})]")
    print("─" * 60)
    print(f"{'Age':<8}{'P10 (pessimistic)':>18}{'P50 (median)':>16}{'P90 (optimistic)':>18}")
    print("─" * 60)
    last = len(result.ages) - 1
    for i, age in enumerate(result.ages):
        if i % every != 0 and i != last:
            continue
        print(
            f"{age:<8.0f}"
            f"{_fmt_m(result.p10[i]):>18}"
            f"{_fmt_m(result.p50[i]):>16}"
            f"{_fmt_m(result.p90[i]):>18}"
        )
    print("─" * 60)
    print(f"Retirement shortfall probability: {result.shortfall_probability:.1%}")


def main():
    r, args = parse_args("CPF Monte Carlo wealth projection", _add_mc_args)
    params = build_params(r)
    mc_config = MonteCarloConfig(
        n_simulations=args.mc_runs,
        seed=args.seed,
        return_volatility=args.volatility,
    )

    print("=" * 60)
    print(f"CPF Monte Carlo projection (age {params.current_age:.0f}-{params.end_age:.0f})")
    print(f"  N={args.mc_runs:,} / mean return={params.investment_return:.1%} / σ={args.volatility:.0%} / seed={args.seed}")
    print("=" * 60)

    result = run_monte_carlo(params, mc_config)
    _print_results(result, args.volatility)


if __name__ == "__main__":
    main()
