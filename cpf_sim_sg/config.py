"""TOML config loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from pathlib import Path
from typing import Callable

from cpf_sim_sg.education import Dependent, EducationConfig
from cpf_sim_sg.events import InsurancePayouts, LifeEventProfile
from cpf_sim_sg.loan import PropertyLoan
from cpf_sim_sg.params import AccountBalances, SimulationParams, WithdrawalDirective, to_num

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "current_age": 30,
    "retirement_age": 65,
    "end_age": 95,
    "oa": 0.0,
    "sa": 0.0,
    "ma": 0.0,
    "ra": 0.0,
    "cash": 0.0,
    "investments": 0.0,
    "monthly_income": 5000.0,
    "monthly_savings": 1000.0,
    "investment_fraction": 0.5,
    "monthly_expenses": 3000.0,
    "investment_return": 0.05,
    "inflation_rate": 0.03,
    "withdrawals": "",
    "dependents": "",
    "property_price": 0.0,
    "down_payment": 0.25,
    "mortgage_rate": 0.035,
    "loan_tenure": 25,
    "death_coverage": 0.0,
    "disability_coverage": 0.0,
    "ci_coverage": 0.0,
}

# Keys that stay strings after resolution
_STRING_KEYS = ("withdrawals", "dependents")


def _withdrawal_to_item(record: dict) -> str:
    parts = [
        str(record.get("purpose", "")).replace(":", " ").replace(",", " "),
        str(record.get("account", "oa")),
        str(record.get("amount", 0)),
        str(record.get("kind", "one_time")),
        str(record.get("start_age", "")),
    ]
    if record.get("end_age") is not None:
        parts.append(str(record["end_age"]))
    return ":".join(parts)


def _dependent_to_item(record: dict) -> str:
    parts = [str(record.get("birth_date", "")), str(record.get("gender", ""))]
    if record.get("name"):
        parts.append(str(record["name"]).replace(":", " ").replace(",", " "))
    return ":".join(parts)


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Normalize [[withdrawals]] tables → "purpose:account:amount:kind:start[:end],..."
    if "withdrawals" in raw:
        v = raw["withdrawals"]
        if isinstance(v, list):
            raw["withdrawals"] = ",".join(_withdrawal_to_item(w) for w in v if isinstance(w, dict))
        elif v is False:
            raw["withdrawals"] = ""
    # Normalize [[dependents]] tables → "birth_date[:gender[:name]],..."
    if "dependents" in raw:
        v = raw["dependents"]
        if isinstance(v, list):
            items = []
            for d in v:
                if isinstance(d, dict):
                    items.append(_dependent_to_item(d))
                else:
                    items.append(str(d))
            raw["dependents"] = ",".join(items)
        elif v is False:
            raw["dependents"] = ""
    # Nested [cpf] table → flat account keys
    if isinstance(raw.get("cpf"), dict):
        for account, balance in raw.pop("cpf").items():
            raw.setdefault(account, balance)
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="config file path (default: config.toml)")
    parser.add_argument("--current-age", type=float, default=None, help=f"age today (default: {d['current_age']})")
    parser.add_argument("--retirement-age", type=float, default=None, help=f"age at which savings stop and drawdown starts (default: {d['retirement_age']})")
    parser.add_argument("--end-age", type=float, default=None, help=f"projection horizon age (default: {d['end_age']})")
    parser.add_argument("--oa", type=float, default=None, help="ordinary account balance")
    parser.add_argument("--sa", type=float, default=None, help="special account balance")
    parser.add_argument("--ma", type=float, default=None, help="medisave account balance")
    parser.add_argument("--ra", type=float, default=None, help="retirement account balance")
    parser.add_argument("--cash", type=float, default=None, help="cash savings")
    parser.add_argument("--investments", type=float, default=None, help="investment portfolio value")
    parser.add_argument("--monthly-income", type=float, default=None, help=f"gross monthly salary (default: {d['monthly_income']:.0f})")
    parser.add_argument("--monthly-savings", type=float, default=None, help=f"monthly savings capacity (default: {d['monthly_savings']:.0f})")
    parser.add_argument("--investment-fraction", type=float, default=None, help=f"share of savings invested, 0-1 (default: {d['investment_fraction']})")
    parser.add_argument("--monthly-expenses", type=float, default=None, help=f"monthly expenses in today's dollars (default: {d['monthly_expenses']:.0f})")
    parser.add_argument("--investment-return", type=float, default=None, help=f"expected annual investment return (default: {d['investment_return']})")
    parser.add_argument("--inflation-rate", type=float, default=None, help=f"annual inflation (default: {d['inflation_rate']})")
    parser.add_argument("--withdrawals", type=str, default=None, help="CPF withdrawals, comma-separated purpose:account:amount:kind:start[:end] (e.g. housing:oa:1500:monthly:35:60)")
    parser.add_argument("--dependents", type=str, default=None, help="dependents, comma-separated birth_date[:gender] (e.g. 2020-05-01:male)")
    parser.add_argument("--property-price", type=float, default=None, help="property price (0 = no mortgage)")
    parser.add_argument("--down-payment", type=float, default=None, help=f"down payment share, 0-1 (default: {d['down_payment']})")
    parser.add_argument("--mortgage-rate", type=float, default=None, help=f"mortgage annual rate (default: {d['mortgage_rate']})")
    parser.add_argument("--loan-tenure", type=float, default=None, help=f"mortgage tenure in years (default: {d['loan_tenure']})")
    parser.add_argument("--death-coverage", type=float, default=None, help="total death cover across policies")
    parser.add_argument("--disability-coverage", type=float, default=None, help="total disability cover across policies")
    parser.add_argument("--ci-coverage", type=float, default=None, help="total critical illness cover (early + late)")
    return parser


def parse_withdrawals(s: str) -> tuple[WithdrawalDirective, ...]:
    """Parse "purpose:account:amount:kind:start[:end],..." → withdrawal directives.

    Missing fields fall back to the directive's own defaults (account oa, one-time, today).
    """
    if not s or not str(s).strip():
        return ()
    directives = []
    for item in str(s).split(","):
        item = item.strip()
        if not item:
            continue
        parts = [p.strip() for p in item.split(":")]
        parts += [""] * (6 - len(parts))
        purpose, account, amount, kind, start, end = parts[:6]
        directives.append(WithdrawalDirective(
            purpose=purpose,
            account=account or "oa",
            amount=amount,
            kind=kind or "one_time",
            start_age=start or None,
            end_age=end or None,
        ))
    return tuple(directives)


def parse_dependents(s: str) -> list[Dependent]:
    """Parse "birth_date[:gender[:name]],..." → dependents. Empty/none → []."""
    s = str(s or "").strip()
    if not s or s.lower() == "none":
        return []
    dependents = []
    for i, item in enumerate(s.split(","), start=1):
        item = item.strip()
        if not item:
            continue
        parts = [p.strip() for p in item.split(":")]
        gender = parts[1] if len(parts) >= 2 else ""
        name = parts[2] if len(parts) >= 3 else f"dependent {i}"
        dependents.append(Dependent(name=name, birth_date=parts[0], gender=gender))
    return dependents


def build_params(r: dict) -> SimulationParams:
    """Build SimulationParams from resolved config dict."""
    return SimulationParams(
        current_age=r["current_age"],
        retirement_age=r["retirement_age"],
        end_age=r["end_age"],
        cpf=AccountBalances(oa=r["oa"], sa=r["sa"], ma=r["ma"], ra=r["ra"]),
        cash=r["cash"],
        investments=r["investments"],
        monthly_income=r["monthly_income"],
        monthly_savings=r["monthly_savings"],
        investment_fraction=r["investment_fraction"],
        monthly_expenses=r["monthly_expenses"],
        investment_return=r["investment_return"],
        inflation_rate=r["inflation_rate"],
        withdrawals=parse_withdrawals(r["withdrawals"]),
    )


def build_mortgage(r: dict) -> PropertyLoan | None:
    if r["property_price"] <= 0:
        return None
    return PropertyLoan(
        price=r["property_price"],
        down_payment_fraction=r["down_payment"],
        annual_rate=r["mortgage_rate"],
        tenure_years=r["loan_tenure"],
    )


def build_profile(r: dict, params: SimulationParams | None = None) -> LifeEventProfile:
    """Build the life event profile (household, cover, mortgage, dependents) from resolved config."""
    params = params or build_params(r)
    payouts = InsurancePayouts(
        death=r["death_coverage"],
        disability=r["disability_coverage"],
        critical_illness=r["ci_coverage"],
    )
    return LifeEventProfile.from_params(
        params,
        payouts=payouts,
        mortgage=build_mortgage(r),
        dependents=parse_dependents(r["dependents"]),
        education=EducationConfig(inflation_rate=params.inflation_rate),
    )


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[dict, argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (resolved_dict, namespace); the namespace carries any extra
    CLI args added via add_args_fn.
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    config = load_config(args.config)
    return resolve(args, config), args


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default.

    Numeric values are coerced so malformed config entries fall back to 0.
    """
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        value = cli_val if cli_val is not None else config.get(key, default)
        resolved[key] = str(value) if key in _STRING_KEYS else to_num(value)
    return resolved
