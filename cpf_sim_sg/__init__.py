"""CPF Retirement and Wealth Planning Simulation Package."""

from cpf_sim_sg.params import (
    AccountBalances,
    SimulationParams,
    WithdrawalDirective,
    to_num,
    to_age,
    to_rate,
    parse_date,
)
from cpf_sim_sg.rates import (
    AgeRateProfile,
    rate_profile,
    contribution_rates,
    allocation_rates,
    WAGE_CEILING,
    CONTRIBUTION_CUTOFF_AGE,
)
from cpf_sim_sg.contribution import ContributionBreakdown, compute_contribution, estimate_gross_salary
from cpf_sim_sg.loan import PropertyLoan, outstanding_balance
from cpf_sim_sg.education import Dependent, EducationConfig, calc_education_cost, total_education_cost
from cpf_sim_sg.ledger import (
    AccountLedger,
    LedgerPoint,
    LedgerResult,
    simulate_ledger,
    ACCUMULATING,
    PRE_ANNUITY,
    ANNUITIZED,
)
from cpf_sim_sg.simulation import (
    ProjectionPoint,
    ProjectionResult,
    project_wealth,
    project_savings_growth,
    base_retirement_expense,
)
from cpf_sim_sg.monte_carlo import MonteCarloConfig, MonteCarloResult, run_monte_carlo
from cpf_sim_sg.events import (
    InsurancePolicy,
    InsurancePayouts,
    LifeEventProfile,
    DeathEvent,
    DisabilityEvent,
    CriticalIllnessEvent,
    CapitalNeedsReport,
    SolvencyTimeline,
    analyze_life_event,
    capital_needs_timeline,
)

__all__ = [
    "AccountBalances",
    "SimulationParams",
    "WithdrawalDirective",
    "to_num",
    "to_age",
    "to_rate",
    "parse_date",
    "AgeRateProfile",
    "rate_profile",
    "contribution_rates",
    "allocation_rates",
    "WAGE_CEILING",
    "CONTRIBUTION_CUTOFF_AGE",
    "ContributionBreakdown",
    "compute_contribution",
    "estimate_gross_salary",
    "PropertyLoan",
    "outstanding_balance",
    "Dependent",
    "EducationConfig",
    "calc_education_cost",
    "total_education_cost",
    "AccountLedger",
    "LedgerPoint",
    "LedgerResult",
    "simulate_ledger",
    "ACCUMULATING",
    "PRE_ANNUITY",
    "ANNUITIZED",
    "ProjectionPoint",
    "ProjectionResult",
    "project_wealth",
    "project_savings_growth",
    "base_retirement_expense",
    "MonteCarloConfig",
    "MonteCarloResult",
    "run_monte_carlo",
    "InsurancePolicy",
    "InsurancePayouts",
    "LifeEventProfile",
    "DeathEvent",
    "DisabilityEvent",
    "CriticalIllnessEvent",
    "CapitalNeedsReport",
    "SolvencyTimeline",
    "analyze_life_event",
    "capital_needs_timeline",
]
