"""Education cost projection for dependents."""

from dataclasses import dataclass
from datetime import date

from cpf_sim_sg.params import parse_date, to_num, to_rate

# University start age by gender (males enter after national service)
UNIVERSITY_START_AGE_MALE = 21
UNIVERSITY_START_AGE_DEFAULT = 19


@dataclass(frozen=True)
class EducationConfig:
    """Schooling and university cost assumptions (today's dollars)."""

    monthly_cost: float = 800.0        # schooling, per month
    inflation_rate: float = 0.03
    start_age: int = 7
    duration: int = 10
    university_cost: float = 8750.0    # per year
    university_duration: int = 4

    @classmethod
    def from_record(cls, record: dict | None) -> "EducationConfig":
        """Build from a settings record; inflation is given in percent (3 = 3%)."""
        if not record:
            return cls()
        return cls(
            monthly_cost=to_rate(record.get("monthly_education_cost"), 800),
            inflation_rate=to_rate(record.get("inflation_rate"), 3) / 100,
            start_age=int(to_rate(record.get("education_start_age"), 7)),
            duration=int(to_rate(record.get("education_duration"), 10)),
            university_cost=to_rate(record.get("university_cost"), 8750),
            university_duration=int(to_rate(record.get("university_duration"), 4)),
        )


@dataclass
class Dependent:
    name: str = ""
    birth_date: date | str | None = None
    gender: str = ""

    @property
    def university_start_age(self) -> int:
        if str(self.gender).strip().lower() == "male":
            return UNIVERSITY_START_AGE_MALE
        return UNIVERSITY_START_AGE_DEFAULT

    @classmethod
    def from_record(cls, record: dict) -> "Dependent":
        return cls(
            name=str(record.get("name") or ""),
            birth_date=record.get("birth_date") or record.get("dob"),
            gender=str(record.get("gender") or ""),
        )


def months_since(birth: date, as_of: date) -> int:
    """Whole calendar months between birth month and ``as_of`` month (day ignored)."""
    return (as_of.year - birth.year) * 12 + (as_of.month - birth.month)


def age_on(birth_date, as_of: date | None = None) -> int | None:
    """Completed years of age on ``as_of`` (default today). None for invalid dates."""
    birth = parse_date(birth_date)
    if birth is None:
        return None
    as_of = as_of or date.today()
    return months_since(birth, as_of) // 12


def education_stages(dependent: Dependent, config: EducationConfig) -> list[tuple[int, int, float]]:
    """Return [(start_age, end_age, yearly_cost), ...] inclusive, schooling then university."""
    edu_end = config.start_age + config.duration - 1
    uni_start = dependent.university_start_age
    uni_end = uni_start + config.university_duration - 1
    return [
        (config.start_age, edu_end, config.monthly_cost * 12),
        (uni_start, uni_end, config.university_cost),
    ]


def calc_education_cost(
    dependent: Dependent,
    config: EducationConfig | None = None,
    as_of: date | None = None,
) -> float:
    """Total remaining education cost for one dependent, inflated to each year it falls due.

    Every not-yet-passed year of a stage costs yearly_cost * (1+inflation)^(years from now).
    Returns 0 for a missing/invalid birth date or once both stages are over.
    """
    config = config or EducationConfig()
    current_age = age_on(dependent.birth_date, as_of)
    if current_age is None:
        return 0.0

    inflation = to_num(config.inflation_rate)
    total = 0.0
    for start, end, yearly_cost in education_stages(dependent, config):
        if current_age > end:
            continue
        years_until_start = max(0, start - current_age)
        duration = end - max(start, current_age) + 1
        for year in range(duration):
            total += yearly_cost * (1 + inflation) ** (years_until_start + year)
    return total


def total_education_cost(
    dependents: list[Dependent],
    config: EducationConfig | None = None,
    as_of: date | None = None,
) -> float:
    return sum(calc_education_cost(d, config, as_of) for d in dependents)
