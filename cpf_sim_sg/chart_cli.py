"""CLI entry point for chart generation."""

import sys
from pathlib import Path

from cpf_sim_sg.charts import plot_mc_fan, plot_solvency, plot_trajectory
from cpf_sim_sg.config import build_params, build_profile, parse_args
from cpf_sim_sg.events import CriticalIllnessEvent, DisabilityEvent, solvency_timeline
from cpf_sim_sg.monte_carlo import DEFAULT_SIMULATIONS, MonteCarloConfig, run_monte_carlo
from cpf_sim_sg.simulation import project_wealth


def _add_chart_args(parser):
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--no-mc", action="store_true",
        help="skip the Monte Carlo fan chart (deterministic only, faster)",
    )
    parser.add_argument(
        "--mc-runs", type=int, default=DEFAULT_SIMULATIONS,
        help=f"Monte Carlo passes (default: {DEFAULT_SIMULATIONS})",
    )
    parser.add_argument(
        "--seed", type=int, default=42,
        help="random seed (default: 42)",
    )
    parser.add_argument(
        "--event-age", type=float, default=None,
        help="draw disability / critical illness solvency charts for this age",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="output filename suffix (e.g. 30 → trajectory-30.png)",
    )


def main():
    r, args = parse_args("CPF chart generation", _add_chart_args)
    params = build_params(r)
    output_dir = args.output

    print(f"Deterministic projection (age {params.current_age:.0f}→{params.end_age:.0f})...", file=sys.stderr)
    result = project_wealth(params)
    path = plot_trajectory(result, output_dir, name=args.name, retirement_age=params.retirement_age)
    print(f"  → {path}", file=sys.stderr)

    if not args.no_mc:
        print(f"Monte Carlo (N={args.mc_runs:,})...", file=sys.stderr)
        mc_result = run_monte_carlo(params, MonteCarloConfig(n_simulations=args.mc_runs, seed=args.seed))
        path = plot_mc_fan(mc_result, output_dir, name=args.name)
        print(f"  → {path}", file=sys.stderr)

    if args.event_age is not None:
        profile = build_profile(r, params)
        for event in (DisabilityEvent(age=args.event_age), CriticalIllnessEvent(age=args.event_age)):
            path = plot_solvency(solvency_timeline(profile, event), output_dir, name=args.name)
            print(f"  → {path}", file=sys.stderr)

    print("Done", file=sys.stderr)


if __name__ == "__main__":
    main()
