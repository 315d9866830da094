"""Life event stress tests: death (capital needs) and disability / critical illness (solvency)."""

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from typing import ClassVar

from cpf_sim_sg.contribution import compute_contribution
from cpf_sim_sg.education import Dependent, EducationConfig, total_education_cost
from cpf_sim_sg.loan import PropertyLoan
from cpf_sim_sg.params import SimulationParams, to_age, to_num, to_rate

DEATH = "death"
DISABILITY = "disability"
CRITICAL_ILLNESS = "critical_illness"

MAX_PROJECTION_AGE = 95
CAPITAL_NEEDS_TIMELINE_YEARS = 40
CAPITAL_NEEDS_TIMELINE_MAX_AGE = 85

# Scenario defaults
SURVIVOR_EXPENSE_RATIO = 0.7   # family keeps spending 70% of today's expenses
SUPPORT_YEARS = 20
FINAL_EXPENSES = 25000.0       # funeral / probate
RECOVERY_YEARS = 5
EXPENSE_FACTOR = 1.1           # medical and care costs on top of baseline


@dataclass
class InsurancePolicy:
    death_coverage: float = 0.0
    disability_coverage: float = 0.0
    early_ci_coverage: float = 0.0
    late_ci_coverage: float = 0.0

    def __post_init__(self):
        for f in dataclasses.fields(self):
            setattr(self, f.name, to_rate(getattr(self, f.name)))

    @classmethod
    def from_record(cls, record: dict) -> "InsurancePolicy":
        return cls(
            death_coverage=record.get("death_coverage", record.get("deathCoverage")),
            disability_coverage=record.get("disability_coverage", record.get("tpdCoverage")),
            early_ci_coverage=record.get("early_ci_coverage", record.get("earlyCiCoverage")),
            late_ci_coverage=record.get("late_ci_coverage", record.get("lateCiCoverage")),
        )


@dataclass(frozen=True)
class InsurancePayouts:
    death: float = 0.0
    disability: float = 0.0
    critical_illness: float = 0.0

    @classmethod
    def from_policies(cls, policies: list[InsurancePolicy]) -> "InsurancePayouts":
        return cls(
            death=sum(p.death_coverage for p in policies),
            disability=sum(p.disability_coverage for p in policies),
            critical_illness=sum(p.early_ci_coverage + p.late_ci_coverage for p in policies),
        )


@dataclass
class LifeEventProfile:
    """Household snapshot used by the life event models."""

    current_age: float = 30.0
    retirement_age: float = 65.0
    monthly_expenses: float = 0.0
    take_home_income: float = 0.0
    cash: float = 0.0
    investments: float = 0.0
    cpf_liquid: float = 0.0
    monthly_investment: float = 0.0
    monthly_cash_savings: float = 0.0
    payouts: InsurancePayouts = field(default_factory=InsurancePayouts)
    mortgage: PropertyLoan | None = None
    dependents: list[Dependent] = field(default_factory=list)
    education: EducationConfig = field(default_factory=EducationConfig)
    as_of: date | None = None

    # Fixed compounding assumptions
    inflation_rate: float = 0.03
    investment_return: float = 0.05
    cash_rate: float = 0.005
    cpf_growth: float = 0.025
    income_growth: float = 0.02
    max_age: float = MAX_PROJECTION_AGE

    def __post_init__(self):
        self.current_age = to_age(self.current_age, 30.0)
        self.retirement_age = to_age(self.retirement_age, 65.0)
        for name in ("monthly_expenses", "take_home_income", "cash", "investments", "cpf_liquid",
                     "monthly_investment", "monthly_cash_savings", "inflation_rate", "cash_rate",
                     "cpf_growth", "income_growth"):
            setattr(self, name, to_rate(getattr(self, name)))
        self.investment_return = to_num(self.investment_return, 0.05)
        self.max_age = to_age(self.max_age, MAX_PROJECTION_AGE)

    @classmethod
    def from_params(
        cls,
        params: SimulationParams,
        payouts: InsurancePayouts | None = None,
        mortgage: PropertyLoan | None = None,
        dependents: list[Dependent] | None = None,
        education: EducationConfig | None = None,
        as_of: date | None = None,
    ) -> "LifeEventProfile":
        """Derive a profile from projection inputs (take-home from the contribution calculator)."""
        cpf = params.cpf
        return cls(
            current_age=params.current_age,
            retirement_age=params.retirement_age,
            monthly_expenses=params.monthly_expenses,
            take_home_income=compute_contribution(params.monthly_income, params.current_age).take_home,
            cash=params.cash,
            investments=params.investments,
            cpf_liquid=cpf.oa + cpf.sa + cpf.ma,
            monthly_investment=params.monthly_investment,
            monthly_cash_savings=params.monthly_cash_savings,
            payouts=payouts or InsurancePayouts(),
            mortgage=mortgage,
            dependents=list(dependents or []),
            education=education or EducationConfig(),
            as_of=as_of,
            inflation_rate=params.inflation_rate,
            investment_return=params.investment_return,
            cash_rate=params.cash_rate,
        )


# --- Scenarios (closed set of variants) ---

@dataclass(frozen=True)
class DeathEvent:
    age: float
    support_years: float = SUPPORT_YEARS
    final_expenses: float = FINAL_EXPENSES
    survivor_expense_ratio: float = SURVIVOR_EXPENSE_RATIO

    kind: ClassVar[str] = DEATH


@dataclass(frozen=True)
class DisabilityEvent:
    age: float
    expense_factor: float = EXPENSE_FACTOR

    kind: ClassVar[str] = DISABILITY


@dataclass(frozen=True)
class CriticalIllnessEvent:
    age: float
    recovery_years: float = RECOVERY_YEARS
    expense_factor: float = EXPENSE_FACTOR

    kind: ClassVar[str] = CRITICAL_ILLNESS


LifeEventScenario = DeathEvent | DisabilityEvent | CriticalIllnessEvent


# --- Shared asset projection ---

@dataclass(frozen=True)
class ProjectedAssets:
    cash: float
    investments: float
    cpf: float

    @property
    def total(self) -> float:
        return self.cash + self.investments + self.cpf


def _future_value(present: float, annual_contribution: float, rate: float, years: float) -> float:
    """FV = PV(1+r)^n + PMT((1+r)^n - 1)/r."""
    growth = (1 + rate) ** years
    if rate == 0:
        return present + annual_contribution * years
    return present * growth + annual_contribution * (growth - 1) / rate


def project_assets_to_age(profile: LifeEventProfile, target_age: float) -> ProjectedAssets:
    """Roll cash, investments and liquid CPF forward with fixed compounding.

    Savings keep flowing until ``target_age``; withdrawal directives are ignored.
    """
    years = max(0.0, to_num(target_age) - profile.current_age)
    if years == 0:
        return ProjectedAssets(profile.cash, profile.investments, profile.cpf_liquid)
    return ProjectedAssets(
        cash=_future_value(profile.cash, profile.monthly_cash_savings * 12, profile.cash_rate, years),
        investments=_future_value(
            profile.investments, profile.monthly_investment * 12, profile.investment_return, years,
        ),
        cpf=profile.cpf_liquid * (1 + profile.cpf_growth) ** years,
    )


# --- Death: capital needs ---

@dataclass(frozen=True)
class CapitalNeedsReport:
    event_age: float
    mortgage: float
    education: float
    family_support: float
    final_expenses: float
    cash: float
    investments: float
    cpf: float
    insurance: float
    survivor_monthly_need: float

    @property
    def total_liabilities(self) -> float:
        return self.mortgage + self.education + self.family_support + self.final_expenses

    @property
    def total_assets(self) -> float:
        return self.cash + self.investments + self.cpf + self.insurance

    @property
    def gap(self) -> float:
        """Assets minus liabilities: positive = surplus, negative = shortfall."""
        return self.total_assets - self.total_liabilities

    @property
    def is_surplus(self) -> bool:
        return self.gap >= 0


def capital_needs(profile: LifeEventProfile, event: DeathEvent) -> CapitalNeedsReport:
    """Capital needs analysis if the person dies at ``event.age``."""
    event_age = to_age(event.age)
    mortgage = profile.mortgage.balance_at(event_age, profile.current_age) if profile.mortgage else 0.0
    education = total_education_cost(profile.dependents, profile.education, profile.as_of)

    survivor_monthly_need = profile.monthly_expenses * to_rate(event.survivor_expense_ratio)
    family_support = survivor_monthly_need * 12 * to_rate(event.support_years)

    assets = project_assets_to_age(profile, event_age)
    return CapitalNeedsReport(
        event_age=event_age,
        mortgage=mortgage,
        education=education,
        family_support=family_support,
        final_expenses=to_rate(event.final_expenses),
        cash=assets.cash,
        investments=assets.investments,
        cpf=assets.cpf,
        insurance=profile.payouts.death,
        survivor_monthly_need=survivor_monthly_need,
    )


def capital_needs_timeline(
    profile: LifeEventProfile, event: DeathEvent, end_age: float | None = None,
) -> list[CapitalNeedsReport]:
    """Capital needs re-evaluated for every age from today (default to min(age+40, 85))."""
    start = int(profile.current_age)
    if end_age is None:
        end_age = min(start + CAPITAL_NEEDS_TIMELINE_YEARS, CAPITAL_NEEDS_TIMELINE_MAX_AGE)
    return [
        capital_needs(profile, dataclasses.replace(event, age=a))
        for a in range(start, int(end_age) + 1)
    ]


# --- Disability / critical illness: solvency ---

@dataclass(frozen=True)
class SolvencyPoint:
    age: float
    cash: float
    investments: float
    cpf: float
    annual_expense: float
    income: float

    @property
    def liquid_wealth(self) -> float:
        return max(0.0, self.cash + self.investments)


@dataclass(frozen=True)
class SolvencyTimeline:
    event_kind: str
    event_age: float
    payout: float
    snapshot: ProjectedAssets
    points: tuple[SolvencyPoint, ...]

    @property
    def depletion_age(self) -> float | None:
        """First age at which liquid wealth is exhausted, None if solvent to the horizon."""
        for p in self.points:
            if p.liquid_wealth <= 0:
                return p.age
        return None

    @property
    def is_solvent(self) -> bool:
        return self.depletion_age is None


def _liquidate(cash: float, investments: float) -> tuple[float, float]:
    """Cover negative cash from investments; leftover deficit stays as negative cash."""
    if cash >= 0:
        return cash, investments
    needed = -cash
    if investments >= needed:
        return 0.0, investments - needed
    return -(needed - investments), 0.0


def solvency_timeline(
    profile: LifeEventProfile, event: DisabilityEvent | CriticalIllnessEvent,
) -> SolvencyTimeline:
    """Year-by-year liquid wealth after a disability or critical illness at ``event.age``."""
    event_age = to_age(event.age)
    is_disability = event.kind == DISABILITY
    payout = profile.payouts.disability if is_disability else profile.payouts.critical_illness
    snapshot = project_assets_to_age(profile, event_age)

    cash = snapshot.cash + payout
    investments = snapshot.investments
    cpf = snapshot.cpf
    # Total disability releases CPF savings
    if is_disability:
        cash += cpf
        cpf = 0.0

    expense_factor = to_rate(event.expense_factor)
    recovery_years = 0.0 if is_disability else to_rate(event.recovery_years)
    annual_base_expense = profile.monthly_expenses * 12

    points = []
    sim_age = event_age
    while sim_age <= profile.max_age + 1e-9:
        income_active = (
            not is_disability
            and sim_age >= event_age + recovery_years
            and sim_age < profile.retirement_age
        )
        factor = 1.0 if income_active else expense_factor
        years_from_now = sim_age - profile.current_age
        annual_expense = annual_base_expense * (1 + profile.inflation_rate) ** years_from_now * factor

        income = 0.0
        if income_active:
            income = profile.take_home_income * 12 * (1 + profile.income_growth) ** years_from_now
            cash += income
        cash -= annual_expense

        investments *= 1 + profile.investment_return
        if not is_disability:
            cpf *= 1 + profile.cpf_growth

        cash, investments = _liquidate(cash, investments)
        points.append(SolvencyPoint(
            age=sim_age, cash=cash, investments=investments, cpf=cpf,
            annual_expense=annual_expense, income=income,
        ))
        sim_age += 1

    return SolvencyTimeline(
        event_kind=event.kind,
        event_age=event_age,
        payout=payout,
        snapshot=snapshot,
        points=tuple(points),
    )


def analyze_life_event(
    profile: LifeEventProfile, event: LifeEventScenario,
) -> CapitalNeedsReport | SolvencyTimeline:
    """Single entry point: death -> capital needs, disability / illness -> solvency."""
    if isinstance(event, DeathEvent):
        return capital_needs(profile, event)
    if isinstance(event, (DisabilityEvent, CriticalIllnessEvent)):
        return solvency_timeline(profile, event)
    raise TypeError(f"unsupported life event: {type(event).__name__}")
