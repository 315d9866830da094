"""Wealth projection: CPF ledger + cash + investments, with retirement drawdown."""

from dataclasses import dataclass

from cpf_sim_sg.ledger import LedgerPoint, simulate_ledger
from cpf_sim_sg.params import SimulationParams, to_num, to_rate


@dataclass(frozen=True)
class ProjectionPoint:
    """One simulated year (year 0 = opening balances)."""

    year: int
    age: float
    oa: float
    sa: float
    ma: float
    ra: float
    cash: float
    investments: float
    annual_expense: float = 0.0
    annuity_annual: float = 0.0
    shortfall: float = 0.0
    is_retired: bool = False

    @property
    def cpf_liquid(self) -> float:
        return self.oa + self.sa

    @property
    def cpf_total(self) -> float:
        return self.oa + self.sa + self.ma + self.ra

    @property
    def liquid_wealth(self) -> float:
        return self.cpf_liquid + self.cash + self.investments

    @property
    def net_worth(self) -> float:
        return self.cpf_total + self.cash + self.investments

    @property
    def has_shortfall(self) -> bool:
        return self.shortfall > 0


@dataclass
class ProjectionResult:
    points: list[ProjectionPoint]

    @property
    def ages(self) -> list[float]:
        return [p.age for p in self.points]

    @property
    def net_worth(self) -> list[float]:
        return [p.net_worth for p in self.points]

    def value_at(self, age: float) -> float:
        """Net worth at the first point at or after ``age`` (last point if beyond horizon)."""
        for p in self.points:
            if p.age >= age - 1e-9:
                return p.net_worth
        return self.points[-1].net_worth

    @property
    def total_growth(self) -> float:
        return self.points[-1].net_worth - self.points[0].net_worth

    @property
    def first_shortfall_age(self) -> float | None:
        for p in self.points:
            if p.has_shortfall:
                return p.age
        return None


def _cover_expenses(need: float, cash: float, investments: float) -> tuple[float, float, float]:
    """Draw ``need`` from cash, then investments. Returns (cash, investments, unmet)."""
    if cash >= need:
        return cash - need, investments, 0.0
    need -= cash
    cash = 0.0
    if investments >= need:
        return cash, investments - need, 0.0
    need -= investments
    return cash, 0.0, need


def roll_liquid(
    params: SimulationParams,
    ledger_points: list[LedgerPoint],
    investment_returns: list[float] | None = None,
) -> list[ProjectionPoint]:
    """Compound cash and investments alongside yearly ledger points.

    investment_returns: per-year return for years 1..N (None = params' returns).
    """
    cash = params.cash
    investments = params.investments
    opening = ledger_points[0]
    points = [
        ProjectionPoint(
            year=0, age=opening.age,
            oa=opening.oa, sa=opening.sa, ma=opening.ma, ra=opening.ra,
            cash=cash, investments=investments,
            is_retired=opening.age >= params.retirement_age,
        )
    ]

    for year, lp in enumerate(ledger_points[1:], start=1):
        if investment_returns is not None:
            annual_return = investment_returns[year - 1]
        else:
            annual_return = params.get_investment_return(year - 1)
        is_retired = lp.age >= params.retirement_age

        # 1. Growth on opening balances
        cash *= 1 + params.cash_rate
        investments *= max(0.0, 1 + annual_return)

        # 2. Savings while working
        if not is_retired:
            cash += params.monthly_cash_savings * 12
            investments += params.monthly_investment * 12

        # 3. Decumulation: annuity, then cash, then investments
        expense = 0.0
        shortfall = 0.0
        annuity_annual = lp.annuity_monthly * 12
        if is_retired:
            expense = params.monthly_expenses * 12 * params.inflation_factor(year)
            need = max(0.0, expense - annuity_annual)
            cash, investments, shortfall = _cover_expenses(need, cash, investments)

        points.append(
            ProjectionPoint(
                year=year, age=lp.age,
                oa=lp.oa, sa=lp.sa, ma=lp.ma, ra=lp.ra,
                cash=cash, investments=investments,
                annual_expense=expense,
                annuity_annual=annuity_annual,
                shortfall=shortfall,
                is_retired=is_retired,
            )
        )
    return points


def yearly_ledger_points(params: SimulationParams) -> list[LedgerPoint]:
    """CPF ledger stepped once per year over the params horizon."""
    return simulate_ledger(params, periods_per_year=1).points


def project_wealth(params: SimulationParams) -> ProjectionResult:
    """Deterministic year-by-year net-worth projection to ``params.end_age``."""
    ledger_points = yearly_ledger_points(params)
    return ProjectionResult(points=roll_liquid(params, ledger_points))


def project_savings_growth(
    initial_amount, monthly_contribution, annual_return, years,
) -> list[dict]:
    """Monthly-compounded savings projection, one row per year.

    Each row: {year, balance, contributions, gains} (rounded to whole dollars).
    """
    balance = to_rate(initial_amount)
    contribution = to_rate(monthly_contribution)
    monthly_rate = to_num(annual_return) / 12
    months = int(to_rate(years)) * 12

    total_contributions = balance
    rows = []
    for m in range(months + 1):
        if m > 0:
            balance = balance * (1 + monthly_rate) + contribution
            total_contributions += contribution
        if m % 12 == 0:
            rows.append({
                "year": m // 12,
                "balance": round(balance),
                "contributions": round(total_contributions),
                "gains": round(balance - total_contributions),
            })
    return rows


# Share of pre-retirement spending assumed to continue in retirement
RETIREMENT_EXPENSE_RATIO = 0.7


def base_retirement_expense(
    custom_expense=0,
    total_monthly_expenses=0,
    cashflow_expenses=0,
    take_home=0,
) -> float:
    """Pick the monthly retirement spending baseline from whatever the profile has.

    Priority: explicit custom figure > itemised monthly expenses >
    70% of cash-flow expenses > 70% of take-home pay > 0.
    """
    custom = to_rate(custom_expense)
    if custom > 0:
        return custom
    itemised = to_rate(total_monthly_expenses)
    if itemised > 0:
        return itemised
    cashflow = to_rate(cashflow_expenses)
    if cashflow > 0:
        return cashflow * RETIREMENT_EXPENSE_RATIO
    return to_rate(take_home) * RETIREMENT_EXPENSE_RATIO
