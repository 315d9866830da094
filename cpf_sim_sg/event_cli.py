"""CLI entry point for life event stress tests (death / disability / critical illness)."""

from cpf_sim_sg.config import build_params, build_profile, parse_args
from cpf_sim_sg.events import (
    CRITICAL_ILLNESS,
    DEATH,
    DISABILITY,
    CapitalNeedsReport,
    CriticalIllnessEvent,
    DeathEvent,
    DisabilityEvent,
    SolvencyTimeline,
    analyze_life_event,
    capital_needs_timeline,
)

EVENT_TYPES = (DEATH, DISABILITY, CRITICAL_ILLNESS)


def _add_event_args(parser):
    parser.add_argument(
        "--event", choices=EVENT_TYPES, default=DEATH,
        help=f"life event to test (default: {DEATH})",
    )
    parser.add_argument(
        "--event-age", type=float, default=None,
        help="age at which the event happens (default: current age)",
    )
    parser.add_argument(
        "--timeline", action="store_true",
        help="death only: print the capital needs gap for every age",
    )


def _build_event(kind: str, age: float):
    if kind == DISABILITY:
        return DisabilityEvent(age=age)
    if kind == CRITICAL_ILLNESS:
        return CriticalIllnessEvent(age=age)
    return DeathEvent(age=age)


def _print_capital_needs(report: CapitalNeedsReport):
    print(f"\n[Capital needs if death occurs at {report.event_age:.0f}]")
    print("─" * 50)
    print("Liabilities")
    print(f"  Outstanding mortgage  {report.mortgage:>16,.0f}")
    print(f"  Education             {report.education:>16,.0f}")
    print(f"  Family support        {report.family_support:>16,.0f}")
    print(f"  Final expenses        {report.final_expenses:>16,.0f}")
    print(f"  Total                 {report.total_liabilities:>16,.0f}")
    print("Assets")
    print(f"  Cash                  {report.cash:>16,.0f}")
    print(f"  Investments           {report.investments:>16,.0f}")
    print(f"  CPF (OA+SA+MA)        {report.cpf:>16,.0f}")
    print(f"  Death cover           {report.insurance:>16,.0f}")
    print(f"  Total                 {report.total_assets:>16,.0f}")
    print("─" * 50)
    label = "Surplus" if report.is_surplus else "Shortfall"
    print(f"{label:<24}{abs(report.gap):>16,.0f}")


def _print_timeline(reports: list[CapitalNeedsReport]):
    print("\n[Capital needs by age at death]")
    print("─" * 60)
    print(f"{'Age':<6}{'Liabilities':>16}{'Assets':>16}{'Gap':>16}")
    print("─" * 60)
    for rep in reports:
        print(f"{rep.event_age:<6.0f}{rep.total_liabilities:>16,.0f}{rep.total_assets:>16,.0f}{rep.gap:>16,.0f}")
    print("─" * 60)


def _print_solvency(timeline: SolvencyTimeline, every: int = 5):
    title = timeline.event_kind.replace("_", " ")
    print(f"\n[Solvency after {title} at {timeline.event_age:.0f}]")
    print(f"  Assets at event: cash {timeline.snapshot.cash:,.0f} / investments {timeline.snapshot.investments:,.0f}"
          f" / CPF {timeline.snapshot.cpf:,.0f} / payout {timeline.payout:,.0f}")
    print("─" * 70)
    print(f"{'Age':<6}{'Income':>14}{'Expenses':>14}{'Cash':>12}{'Invest':>12}{'Liquid':>12}")
    print("─" * 70)
    last = len(timeline.points) - 1
    for i, p in enumerate(timeline.points):
        if i % every != 0 and i != last:
            continue
        print(f"{p.age:<6.0f}{p.income:>14,.0f}{p.annual_expense:>14,.0f}{p.cash:>12,.0f}"
              f"{p.investments:>12,.0f}{p.liquid_wealth:>12,.0f}")
    print("─" * 70)
    if timeline.is_solvent:
        print("Liquid wealth lasts to the end of the horizon.")
    else:
        print(f"! Liquid wealth runs out at age {timeline.depletion_age:.0f}")


def main():
    r, args = parse_args("CPF life event stress test", _add_event_args)
    params = build_params(r)
    profile = build_profile(r, params)
    event_age = args.event_age if args.event_age is not None else profile.current_age
    event = _build_event(args.event, event_age)

    result = analyze_life_event(profile, event)
    if isinstance(result, CapitalNeedsReport):
        _print_capital_needs(result)
        if args.timeline:
            _print_timeline(capital_needs_timeline(profile, event))
    else:
        _print_solvency(result)


if __name__ == "__main__":
    main()
