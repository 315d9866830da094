"""CPF contribution rate and allocation tables (2025 rates)."""

from dataclasses import dataclass

# Ordinary wage ceiling (SGD/month). 2023 Sep-Dec: 6,300 / 2024: 6,800 / 2025: 7,400 / 2026+: 8,000
WAGE_CEILING = 7400.0

# Life-stage age thresholds
SA_CLOSURE_AGE = 55       # special account closes, retirement account opens
ANNUITY_AGE = 65          # CPF LIFE payouts start
CONTRIBUTION_CUTOFF_AGE = 65

# Interest rates (p.a.)
OA_INTEREST_RATE = 0.025
SMRA_INTEREST_RATE = 0.0408  # special / medisave / retirement

# Retirement sum and medisave cap baselines
FULL_RETIREMENT_SUM = 205800.0
FRS_GROWTH_RATE = 0.035
BASIC_HEALTHCARE_SUM = 75500.0
BHS_GROWTH_RATE = 0.045

# CPF LIFE standard plan: ~1,700/month for an FRS-sized premium
CPF_LIFE_PAYOUT_RATIO = 1700 / 205800


@dataclass(frozen=True)
class AgeRateProfile:
    """Contribution rates for one age band, as fractions of the contributable wage."""

    max_age: float
    employee_rate: float
    employer_rate: float
    oa_rate: float
    sa_rate: float
    ma_rate: float

    @property
    def total_rate(self) -> float:
        return self.employee_rate + self.employer_rate


# Bands are (previous max_age, max_age]; the last band is open-ended.
# Account shares are wage percentages, so oa + sa + ma == employee + employer.
_RATE_BANDS: tuple[AgeRateProfile, ...] = (
    AgeRateProfile(35, 0.20, 0.17, 0.23, 0.06, 0.08),
    AgeRateProfile(45, 0.20, 0.17, 0.21, 0.07, 0.09),
    AgeRateProfile(50, 0.20, 0.17, 0.19, 0.08, 0.10),
    AgeRateProfile(55, 0.20, 0.17, 0.16, 0.10, 0.11),
    AgeRateProfile(60, 0.17, 0.155, 0.097, 0.114, 0.114),
    AgeRateProfile(65, 0.115, 0.12, 0.032, 0.092, 0.111),
    AgeRateProfile(70, 0.075, 0.09, 0.020, 0.050, 0.095),
    AgeRateProfile(float("inf"), 0.05, 0.075, 0.010, 0.033, 0.082),
)


def rate_profile(age: float) -> AgeRateProfile:
    """Return the rate band covering ``age`` (negative ages use the first band)."""
    for band in _RATE_BANDS:
        if age <= band.max_age:
            return band
    return _RATE_BANDS[-1]  # pragma: no cover


def contribution_rates(age: float) -> tuple[float, float]:
    """Return (employee_rate, employer_rate) for an age."""
    band = rate_profile(age)
    return band.employee_rate, band.employer_rate


def allocation_rates(age: float) -> tuple[float, float, float]:
    """Return (oa_rate, sa_rate, ma_rate) for an age, as wage percentages."""
    band = rate_profile(age)
    return band.oa_rate, band.sa_rate, band.ma_rate


def rate_bands() -> tuple[AgeRateProfile, ...]:
    """All rate bands in ascending age order."""
    return _RATE_BANDS
