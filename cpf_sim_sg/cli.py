"""CLI entry point for the deterministic wealth projection."""

from cpf_sim_sg.config import build_params, parse_args
from cpf_sim_sg.contribution import compute_contribution
from cpf_sim_sg.ledger import simulate_ledger
from cpf_sim_sg.params import SimulationParams
from cpf_sim_sg.simulation import ProjectionResult, project_wealth


def _print_header(params: SimulationParams):
    c = compute_contribution(params.monthly_income, params.current_age)
    print("=" * 80)
    print(f"CPF wealth projection (age {params.current_age:.0f}-{params.end_age:.0f}, {params.total_years} years)")
    print(
        f"  Gross salary: {params.monthly_income:,.0f} / take-home: {c.take_home:,.0f}"
        f" / CPF: {c.total:,.0f} (employee {c.employee:,.0f} + employer {c.employer:,.0f})"
    )
    if c.excess_wage > 0:
        print(f"  Wage above ceiling: {c.excess_wage:,.0f}/month (no contributions)")
    b = params.cpf
    print(f"  CPF today: OA {b.oa:,.0f} / SA {b.sa:,.0f} / MA {b.ma:,.0f} / RA {b.ra:,.0f}")
    print(
        f"  Cash: {params.cash:,.0f} / investments: {params.investments:,.0f}"
        f" / savings {params.monthly_savings:,.0f}/month ({params.investment_fraction:.0%} invested)"
    )
    print(
        f"  Retirement at {params.retirement_age:.0f}, expenses {params.monthly_expenses:,.0f}/month"
        f" (today's dollars, {params.inflation_rate:.1%} inflation)"
    )
    for w in params.withdrawals:
        start = f"age {w.start_age:.0f}" if w.start_age is not None else "today"
        end = f" to {w.end_age:.0f}" if w.end_age is not None else ""
        print(f"  Withdrawal: {w.purpose or '-'} {w.amount:,.0f} {w.kind} from {w.account.upper()} ({start}{end})")
    print("=" * 80)
    print()


def _print_yearly_table(result: ProjectionResult, every: int = 5):
    print("[Year-by-year projection]")
    print("-" * 100)
    print(
        f"{'Age':<5} {'OA':>11} {'SA':>11} {'MA':>11} {'RA':>11}"
        f" {'Cash':>11} {'Invest':>12} {'Annuity/yr':>11} {'Net worth':>13}"
    )
    print("-" * 100)
    last = len(result.points) - 1
    for i, p in enumerate(result.points):
        if i % every != 0 and i != last:
            continue
        flag = "  shortfall" if p.has_shortfall else ""
        print(
            f"{p.age:<5.0f} {p.oa:>11,.0f} {p.sa:>11,.0f} {p.ma:>11,.0f} {p.ra:>11,.0f}"
            f" {p.cash:>11,.0f} {p.investments:>12,.0f} {p.annuity_annual:>11,.0f} {p.net_worth:>13,.0f}{flag}"
        )
    print("-" * 100)


def _print_summary(params: SimulationParams, result: ProjectionResult):
    ledger = simulate_ledger(params)
    print("\n[Summary]")
    print(f"  CPF at 55:        {ledger.value_at_55:>14,.0f}")
    annuity = max(p.annuity_monthly for p in ledger.points)
    if annuity > 0:
        print(f"  CPF LIFE payout:  {annuity:>14,.0f}/month")
    print(f"  Net worth at {params.retirement_age:.0f}: {result.value_at(params.retirement_age):>14,.0f}")
    print(f"  Final net worth:  {result.points[-1].net_worth:>14,.0f}")
    print(f"  Total growth:     {result.total_growth:>14,.0f}")
    if result.first_shortfall_age is not None:
        print(f"  ! Retirement spending unmet from age {result.first_shortfall_age:.0f}")


def main():
    """Run the deterministic projection and print the yearly table."""
    r, _ = parse_args("CPF wealth projection")
    params = build_params(r)
    _print_header(params)
    result = project_wealth(params)
    _print_yearly_table(result)
    _print_summary(params, result)


if __name__ == "__main__":
    main()
