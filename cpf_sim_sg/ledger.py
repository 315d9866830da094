"""CPF account ledger: period-by-period balance simulation.

Life-stage state machine (one-way, age-triggered, each transition fires once):

  ACCUMULATING  (age < 55)   contributions to OA / SA / MA
  PRE_ANNUITY   (55 <= age < 65)  SA closed; SA-share contributions and MA overflow go to RA
  ANNUITIZED    (age >= 65)  RA converted to a CPF LIFE monthly payout and kept at 0;
                             SA-share contributions and MA overflow go to OA

Every month runs the same ordered pipeline (see ``PIPELINE``):
interest -> contributions -> age events -> withdrawals -> medisave cap.
"""

import dataclasses
from dataclasses import dataclass

from cpf_sim_sg.contribution import compute_contribution
from cpf_sim_sg.params import SimulationParams, to_rate
from cpf_sim_sg.rates import (
    ANNUITY_AGE,
    BASIC_HEALTHCARE_SUM,
    BHS_GROWTH_RATE,
    CPF_LIFE_PAYOUT_RATIO,
    FRS_GROWTH_RATE,
    FULL_RETIREMENT_SUM,
    SA_CLOSURE_AGE,
)

ACCUMULATING = "accumulating"
PRE_ANNUITY = "pre_annuity"
ANNUITIZED = "annuitized"

SUPPORTED_PERIODS_PER_YEAR = (1, 2, 3, 4, 6, 12)
_AGE_EPS = 1e-9


@dataclass(frozen=True)
class LedgerPoint:
    """Account balances at the end of one period (period 0 = opening balances)."""

    period: int
    age: float
    state: str
    oa: float
    sa: float
    ma: float
    ra: float
    medisave_cap: float
    annuity_monthly: float = 0.0
    contributed: float = 0.0
    withdrawn: float = 0.0

    @property
    def liquid(self) -> float:
        return self.oa + self.sa

    @property
    def total(self) -> float:
        return self.oa + self.sa + self.ma + self.ra


def retirement_sum_target(current_age: float) -> float:
    """Full retirement sum projected from today to age 55."""
    years_to_55 = max(0.0, SA_CLOSURE_AGE - current_age)
    return FULL_RETIREMENT_SUM * (1 + FRS_GROWTH_RATE) ** years_to_55


def medisave_cap(age: float, current_age: float) -> float:
    """Medisave ceiling at ``age``: grows yearly until 65, then fixed for the cohort."""
    years = max(0, int(min(age, ANNUITY_AGE) - current_age + _AGE_EPS))
    return BASIC_HEALTHCARE_SUM * (1 + BHS_GROWTH_RATE) ** years


class AccountLedger:
    """Stateful CPF simulator for one run. Owns its own copy of the balances.

    A period of any length is processed as consecutive months, each month
    running the full ``PIPELINE``, so year-end balances do not depend on
    ``periods_per_year``.
    """

    PIPELINE = (
        "_credit_interest",
        "_add_contributions",
        "_fire_age_events",
        "_apply_withdrawals",
        "_enforce_medisave_cap",
    )

    def __init__(
        self,
        params: SimulationParams,
        periods_per_year: int = 12,
        oa_to_sa_transfer: float = 0.0,
        cash_top_up: float = 0.0,
    ):
        if periods_per_year not in SUPPORTED_PERIODS_PER_YEAR:
            periods_per_year = 12
        self.params = params
        self.periods_per_year = periods_per_year
        self.months_per_period = 12 // periods_per_year
        self.balances = dataclasses.replace(params.cpf)
        self.period = 0
        self.month = 0
        self.annuity_monthly = 0.0
        self.sa_closed = False
        self.annuitized = False

        # Optimisation injections at the start of the run
        transfer = min(to_rate(oa_to_sa_transfer), self.balances.oa)
        self.balances.oa -= transfer
        self.balances.sa += transfer + to_rate(cash_top_up)
        # Opening medisave above today's cap spills over like any other month
        self._enforce_medisave_cap()

        self._contributed = 0.0
        self._withdrawn = 0.0

    @property
    def age(self) -> float:
        """Age at the end of the current month."""
        return self.params.current_age + self.month / 12

    @property
    def month_start_age(self) -> float:
        return self.params.current_age + (self.month - 1) / 12

    @property
    def state(self) -> str:
        if self.annuitized:
            return ANNUITIZED
        if self.sa_closed:
            return PRE_ANNUITY
        return ACCUMULATING

    def snapshot(self) -> LedgerPoint:
        b = self.balances
        return LedgerPoint(
            period=self.period,
            age=self.age,
            state=self.state,
            oa=b.oa,
            sa=b.sa,
            ma=b.ma,
            ra=b.ra,
            medisave_cap=medisave_cap(self.age, self.params.current_age),
            annuity_monthly=self.annuity_monthly,
            contributed=self._contributed,
            withdrawn=self._withdrawn,
        )

    def step(self) -> LedgerPoint:
        """Advance one period through the pipeline and return the closing balances."""
        self.period += 1
        self._contributed = 0.0
        self._withdrawn = 0.0
        for _ in range(self.months_per_period):
            self.month += 1
            for name in self.PIPELINE:
                getattr(self, name)()
        return self.snapshot()

    # --- pipeline steps (one month each) ---

    def _credit_interest(self):
        """Apply a year's interest on each account's pre-month balance, once a year."""
        if self.month % 12 != 0:
            return
        b = self.balances
        b.oa *= 1 + self.params.oa_rate
        b.sa *= 1 + self.params.smra_rate
        b.ma *= 1 + self.params.smra_rate
        b.ra *= 1 + self.params.smra_rate

    def _add_contributions(self):
        # rate band and cutoff follow the age the month starts at
        age = self.month_start_age
        if age >= self.params.contribution_cutoff_age - _AGE_EPS:
            return
        c = compute_contribution(self.params.monthly_income, age)
        b = self.balances
        b.oa += c.oa
        b.ma += c.ma
        self._sa_inflow(c.sa)
        self._contributed += c.oa + c.sa + c.ma

    def _sa_inflow(self, amount: float):
        """Route money bound for SA: SA, then RA from 55, then OA once annuitized."""
        b = self.balances
        if self.annuitized:
            b.oa += amount
        elif self.sa_closed:
            b.ra += amount
        else:
            b.sa += amount

    def _fire_age_events(self):
        if not self.sa_closed and self.age >= SA_CLOSURE_AGE - _AGE_EPS:
            self._close_special_account()
        if not self.annuitized and self.age >= ANNUITY_AGE - _AGE_EPS:
            self._start_annuity()

    def _close_special_account(self):
        """Age 55: SA -> RA up to the retirement sum, rest of SA -> OA, top up RA from OA."""
        b = self.balances
        target = retirement_sum_target(self.params.current_age)

        to_ra = min(b.sa, max(0.0, target - b.ra))
        b.ra += to_ra
        b.sa -= to_ra
        if b.sa > 0:
            b.oa += b.sa
        b.sa = 0.0

        if b.ra < target:
            from_oa = min(b.oa, target - b.ra)
            b.oa -= from_oa
            b.ra += from_oa
        self.sa_closed = True

    def _start_annuity(self):
        """Age 65: RA balance buys the CPF LIFE payout."""
        b = self.balances
        self.annuity_monthly = b.ra * CPF_LIFE_PAYOUT_RATIO
        b.ra = 0.0
        self.annuitized = True

    def _apply_withdrawals(self):
        b = self.balances
        for w in self.params.withdrawals:
            due = w.amount_due(self.month, self.params.current_age)
            if due <= 0:
                continue
            available = getattr(b, w.account)
            taken = min(due, available)
            setattr(b, w.account, available - taken)
            self._withdrawn += taken

    def _enforce_medisave_cap(self):
        b = self.balances
        cap = medisave_cap(self.age, self.params.current_age)
        if b.ma <= cap:
            return
        overflow = b.ma - cap
        b.ma = cap
        self._sa_inflow(overflow)


@dataclass
class LedgerResult:
    points: list[LedgerPoint]
    periods_per_year: int

    def point_at(self, age: float) -> LedgerPoint:
        """First point at or after ``age``; the last point if the horizon ends earlier."""
        for p in self.points:
            if p.age >= age - _AGE_EPS:
                return p
        return self.points[-1]

    @property
    def value_at_55(self) -> float:
        return self.point_at(SA_CLOSURE_AGE).total

    def yearly(self) -> list[LedgerPoint]:
        """Opening point plus one point per simulated year."""
        return self.points[::self.periods_per_year]


def simulate_ledger(
    params: SimulationParams,
    periods_per_year: int = 12,
    end_age: float | None = None,
    oa_to_sa_transfer: float = 0.0,
    cash_top_up: float = 0.0,
) -> LedgerResult:
    """Project CPF balances from ``params.current_age`` to ``end_age`` (default params.end_age)."""
    ledger = AccountLedger(
        params, periods_per_year,
        oa_to_sa_transfer=oa_to_sa_transfer, cash_top_up=cash_top_up,
    )
    horizon = params.end_age if end_age is None else max(params.current_age, to_rate(end_age))
    n_periods = int(round((horizon - params.current_age) * ledger.periods_per_year))
    points = [ledger.snapshot()]
    for _ in range(n_periods):
        points.append(ledger.step())
    return LedgerResult(points=points, periods_per_year=ledger.periods_per_year)
