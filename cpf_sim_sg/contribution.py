"""CPF contribution calculator (wage ceiling + age-banded rates)."""

from dataclasses import dataclass

from cpf_sim_sg.params import to_age, to_rate
from cpf_sim_sg.rates import WAGE_CEILING, rate_profile


@dataclass(frozen=True)
class ContributionBreakdown:
    """One month's CPF contribution for a given gross wage."""

    employee: float
    employer: float
    total: float
    oa: float
    sa: float
    ma: float
    take_home: float
    contributable_wage: float
    excess_wage: float


def compute_contribution(gross_salary, age, wage_ceiling: float = WAGE_CEILING) -> ContributionBreakdown:
    """Split one month's gross pay into employee/employer shares and account credits.

    Only the first ``wage_ceiling`` of pay attracts contributions; the rest is
    reported as ``excess_wage``. Take-home deducts the employee share only.
    """
    gross = to_rate(gross_salary)
    band = rate_profile(to_age(age))
    wage = min(gross, wage_ceiling)

    employee = wage * band.employee_rate
    employer = wage * band.employer_rate
    return ContributionBreakdown(
        employee=employee,
        employer=employer,
        total=employee + employer,
        oa=wage * band.oa_rate,
        sa=wage * band.sa_rate,
        ma=wage * band.ma_rate,
        take_home=gross - employee,
        contributable_wage=wage,
        excess_wage=max(0.0, gross - wage_ceiling),
    )


def estimate_gross_salary(take_home, age, wage_ceiling: float = WAGE_CEILING) -> float:
    """Estimate gross monthly pay from take-home pay (inverse of compute_contribution).

    Below the ceiling the employee deduction is proportional; above it the
    deduction is fixed at ``wage_ceiling * employee_rate``.
    """
    net = to_rate(take_home)
    employee_rate = rate_profile(to_age(age)).employee_rate
    net_ceiling_threshold = wage_ceiling * (1 - employee_rate)
    if net <= net_ceiling_threshold:
        return net / (1 - employee_rate)
    return net + wage_ceiling * employee_rate
