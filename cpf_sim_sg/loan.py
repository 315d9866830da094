"""Mortgage amortization helpers."""

from dataclasses import dataclass

from cpf_sim_sg.params import to_age, to_num, to_rate


def _calc_equal_payment(principal: float, monthly_rate: float, months: int) -> float:
    """Calculate level monthly instalment for a fully-amortizing loan."""
    if months <= 0:
        return 0.0
    if monthly_rate == 0:
        return principal / months
    r = monthly_rate
    n = months
    return principal * r * (1 + r) ** n / ((1 + r) ** n - 1)


def outstanding_balance(
    loan_amount: float, annual_rate: float, tenure_years: float, elapsed_years: float,
) -> float:
    """Remaining principal after ``elapsed_years`` of a declining-balance loan.

    balance(p) = L * ((1+r)^n - (1+r)^p) / ((1+r)^n - 1), r monthly, n and p in months.
    Elapsed < 0 means the loan has not started amortizing yet.
    """
    loan_amount = to_rate(loan_amount)
    annual_rate = to_rate(annual_rate)
    tenure_years = to_rate(tenure_years)
    elapsed_years = to_num(elapsed_years)

    if elapsed_years < 0:
        return loan_amount
    if elapsed_years >= tenure_years:
        return 0.0

    r = annual_rate / 12
    n = tenure_years * 12
    p = elapsed_years * 12
    if r == 0:
        return loan_amount * (1 - p / n)
    growth_n = (1 + r) ** n
    balance = loan_amount * (growth_n - (1 + r) ** p) / (growth_n - 1)
    return max(0.0, balance)


@dataclass
class PropertyLoan:
    """A mortgage: price, down payment share, rate and tenure.

    start_age is the borrower's age at origination (None = today).
    """

    price: float = 0.0
    down_payment_fraction: float = 0.25
    annual_rate: float = 0.035
    tenure_years: float = 25
    start_age: float | None = None

    def __post_init__(self):
        self.price = to_rate(self.price)
        self.down_payment_fraction = min(1.0, to_rate(self.down_payment_fraction))
        self.annual_rate = to_rate(self.annual_rate)
        self.tenure_years = to_rate(self.tenure_years)
        start = to_num(self.start_age, None)
        self.start_age = None if start is None else to_age(start)

    @property
    def loan_amount(self) -> float:
        return self.price * (1 - self.down_payment_fraction)

    @property
    def monthly_payment(self) -> float:
        return _calc_equal_payment(
            self.loan_amount, self.annual_rate / 12, int(round(self.tenure_years * 12)),
        )

    def balance_at(self, age: float, current_age: float) -> float:
        """Outstanding balance when the borrower is ``age``."""
        origin = current_age if self.start_age is None else self.start_age
        return outstanding_balance(
            self.loan_amount, self.annual_rate, self.tenure_years, to_num(age) - origin,
        )

    @classmethod
    def from_record(cls, record: dict | None) -> "PropertyLoan | None":
        """Build from a property record using percentage fields (e.g. rate 3.5 = 3.5%)."""
        if not record:
            return None
        return cls(
            price=to_rate(record.get("property_price", record.get("price"))),
            down_payment_fraction=to_rate(record.get("down_payment_percent"), 25) / 100,
            annual_rate=to_rate(record.get("interest_rate"), 3.5) / 100,
            tenure_years=to_rate(record.get("loan_tenure"), 25),
            start_age=record.get("start_age"),
        )
