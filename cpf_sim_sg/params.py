"""Simulation inputs and numeric coercion helpers."""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime

from cpf_sim_sg.rates import CONTRIBUTION_CUTOFF_AGE, OA_INTEREST_RATE, SMRA_INTEREST_RATE

MAX_AGE = 120
DEFAULT_END_AGE = 95

_NUMBER_PREFIX = re.compile(r"-?(\d+\.?\d*|\.\d+)")


def to_num(value, default: float | None = 0.0) -> float | None:
    """Coerce a client-record field to float; unparseable input gives ``default``.

    Strings are stripped of everything except digits, '.' and '-' first, so
    "SGD 1,200.50" parses as 1200.5.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    cleaned = re.sub(r"[^0-9.\-]", "", str(value))
    m = _NUMBER_PREFIX.match(cleaned)
    if m is None:
        return default
    number = float(m.group(0))
    return number if math.isfinite(number) else default


def to_age(value, default: float = 0.0) -> float:
    """Coerce an age, clamped to [0, MAX_AGE]."""
    return min(max(to_num(value, default), 0.0), MAX_AGE)


def to_rate(value, default: float = 0.0) -> float:
    """Coerce a rate or amount that must not be negative."""
    return max(0.0, to_num(value, default))


def parse_date(value) -> date | None:
    """Parse a date/datetime/ISO string. Returns None when invalid."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


ACCOUNTS = ("oa", "sa", "ma", "ra")

_ACCOUNT_ALIASES = {
    "oa": "oa", "ordinary": "oa",
    "sa": "sa", "special": "sa",
    "ma": "ma", "medisave": "ma",
    "ra": "ra", "retirement": "ra",
}

ONE_TIME = "one_time"
MONTHLY = "monthly"
YEARLY = "yearly"

_KIND_ALIASES = {
    "one_time": ONE_TIME, "onetime": ONE_TIME, "one-time": ONE_TIME, "once": ONE_TIME,
    "monthly": MONTHLY,
    "yearly": YEARLY, "annual": YEARLY, "annually": YEARLY,
}


@dataclass
class AccountBalances:
    """Four CPF account balances. Negative input is clamped to 0."""

    oa: float = 0.0
    sa: float = 0.0
    ma: float = 0.0
    ra: float = 0.0

    def __post_init__(self):
        for name in ACCOUNTS:
            setattr(self, name, to_rate(getattr(self, name)))

    @property
    def liquid(self) -> float:
        """Ordinary + special: the balances counted as CPF-liquid in net worth."""
        return self.oa + self.sa

    @property
    def total(self) -> float:
        return self.oa + self.sa + self.ma + self.ra

    @classmethod
    def from_record(cls, record: dict | None) -> "AccountBalances":
        record = record or {}
        return cls(**{name: to_rate(record.get(name)) for name in ACCOUNTS})


@dataclass(frozen=True)
class WithdrawalDirective:
    """A scheduled deduction from one CPF account.

    start_age=None means "from the simulation's current age".
    end_age=None on a recurring directive runs it to the simulation horizon;
    one-time directives ignore end_age.
    """

    purpose: str
    account: str
    amount: float
    kind: str = ONE_TIME
    start_age: float | None = None
    end_age: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "account", _ACCOUNT_ALIASES.get(str(self.account).strip().lower(), "oa"))
        object.__setattr__(self, "kind", _KIND_ALIASES.get(str(self.kind).strip().lower(), ONE_TIME))
        object.__setattr__(self, "amount", to_rate(self.amount))
        start = to_num(self.start_age, None)
        end = to_num(self.end_age, None)
        object.__setattr__(self, "start_age", None if start is None else to_age(start))
        object.__setattr__(self, "end_age", None if end is None else to_age(end))

    @classmethod
    def from_record(cls, record: dict) -> "WithdrawalDirective":
        return cls(
            purpose=str(record.get("purpose") or record.get("name") or ""),
            account=record.get("account", "oa"),
            amount=record.get("amount"),
            kind=record.get("kind") or record.get("type") or ONE_TIME,
            start_age=record.get("start_age") or record.get("startAge"),
            end_age=record.get("end_age") or record.get("endAge"),
        )

    def resolved_start(self, current_age: float) -> float:
        """Start age, defaulting to and never earlier than the current age."""
        if self.start_age is None:
            return current_age
        return max(self.start_age, current_age)

    def amount_due(self, month_index: int, current_age: float) -> float:
        """Amount due in month ``month_index`` (1-based, months since the run began)."""
        start = self.resolved_start(current_age)
        if self.kind == ONE_TIME:
            target = max(1, round((start - current_age) * 12))
            return self.amount if month_index == target else 0.0
        month_age = current_age + month_index / 12
        if month_age < start - 1e-9:
            return 0.0
        if self.end_age is not None and month_age > self.end_age + 1e-9:
            return 0.0
        if self.kind == MONTHLY:
            return self.amount
        # yearly: on each anniversary of the start age
        return self.amount if round((month_age - start) * 12) % 12 == 0 else 0.0


@dataclass
class SimulationParams:
    """Inputs for one projection run. Engine code never mutates an instance."""

    current_age: float = 30.0
    retirement_age: float = 65.0

    # Opening balances
    cpf: AccountBalances = field(default_factory=AccountBalances)
    cash: float = 0.0
    investments: float = 0.0

    # Monthly flows
    monthly_income: float = 0.0       # gross, for CPF contributions
    monthly_savings: float = 0.0      # total savings capacity
    investment_fraction: float = 0.0  # share of savings routed to investments
    monthly_expenses: float = 0.0     # today's dollars, drawn down in retirement

    # Rate assumptions
    oa_rate: float = OA_INTEREST_RATE
    smra_rate: float = SMRA_INTEREST_RATE
    cash_rate: float = 0.005
    investment_return: float = 0.05
    inflation_rate: float = 0.03

    withdrawals: tuple[WithdrawalDirective, ...] = ()
    contribution_cutoff_age: float = CONTRIBUTION_CUTOFF_AGE
    end_age: float = DEFAULT_END_AGE

    # Monte Carlo: per-year investment returns (None=use fixed investment_return)
    annual_investment_returns: list[float] | None = None

    def __post_init__(self):
        self.current_age = to_age(self.current_age, 30.0)
        self.retirement_age = to_age(self.retirement_age, 65.0)
        if not isinstance(self.cpf, AccountBalances):
            self.cpf = AccountBalances.from_record(self.cpf)
        for name in ("cash", "investments", "monthly_income", "monthly_savings",
                     "monthly_expenses", "oa_rate", "smra_rate", "cash_rate", "inflation_rate"):
            setattr(self, name, to_rate(getattr(self, name)))
        self.investment_fraction = min(1.0, to_rate(self.investment_fraction))
        # investment return may be negative (stress scenarios), but not below -100%
        self.investment_return = max(-1.0, to_num(self.investment_return, 0.05))
        self.contribution_cutoff_age = to_age(self.contribution_cutoff_age, CONTRIBUTION_CUTOFF_AGE)
        self.end_age = max(to_age(self.end_age, DEFAULT_END_AGE), self.current_age)
        self.withdrawals = tuple(
            w if isinstance(w, WithdrawalDirective) else WithdrawalDirective.from_record(w)
            for w in self.withdrawals or ()
        )

    @property
    def monthly_investment(self) -> float:
        return self.monthly_savings * self.investment_fraction

    @property
    def monthly_cash_savings(self) -> float:
        return max(0.0, self.monthly_savings - self.monthly_investment)

    @property
    def total_years(self) -> int:
        return int(round(self.end_age - self.current_age))

    def inflation_factor(self, years: float) -> float:
        """Cumulative price level after ``years`` from today."""
        return (1 + self.inflation_rate) ** years

    def get_investment_return(self, year_idx: int) -> float:
        """Investment return for simulated year ``year_idx`` (0-based)."""
        if self.annual_investment_returns is not None and year_idx < len(self.annual_investment_returns):
            return self.annual_investment_returns[year_idx]
        return self.investment_return

    @classmethod
    def from_record(cls, record: dict) -> "SimulationParams":
        """Build params from a loosely-typed client record (missing keys use defaults)."""
        defaults = cls()
        kwargs = {}
        for name in ("current_age", "retirement_age", "cash", "investments", "monthly_income",
                     "monthly_savings", "investment_fraction", "monthly_expenses", "oa_rate",
                     "smra_rate", "cash_rate", "investment_return", "inflation_rate",
                     "contribution_cutoff_age", "end_age"):
            if name in record:
                kwargs[name] = to_num(record[name], getattr(defaults, name))
        kwargs["cpf"] = AccountBalances.from_record(record.get("cpf"))
        kwargs["withdrawals"] = tuple(
            WithdrawalDirective.from_record(w) for w in record.get("withdrawals") or ()
            if isinstance(w, dict)
        )
        return cls(**kwargs)
