"""TOML plan loader with CLI > config > default resolution."""

import argparse
import dataclasses
import sys
import tomllib
from pathlib import Path

from fi_runway.params import (
    SCHEMA_VERSION,
    Account,
    Assumptions,
    EmploymentIncome,
    Expense,
    Expenses,
    HomeExpense,
    Income,
    LifeEvent,
    MortgageDetails,
    Pension,
    PenaltySettings,
    PlanConfig,
    Profile,
    RetirementIncome,
    SocialSecurity,
    SpouseSocialSecurity,
    WhatIf,
)

DEFAULT_CONFIG_PATH = Path("plan.toml")

# Top-level run options. None = use the value from the plan tables.
DEFAULTS = {
    "current_year": None,
    "target_fi_age": None,
    "life_expectancy": None,
    "investment_return": None,
    "inflation_rate": None,
    "spending_adjustment": 0.0,
    "return_override": None,
    "ss_claiming_age": None,
    "spouse_ss_claiming_age": None,
}


def load_config(path: Path | None = None) -> dict:
    """Load TOML plan file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read plan file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared run flags."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help=f"Plan file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--current-year", type=int, default=None, help="Calendar year treated as year zero (default: this year)")
    parser.add_argument("--target-fi-age", type=int, default=None, help="Override the plan's target FI age")
    parser.add_argument("--life-expectancy", type=int, default=None, help="Override the plan's life expectancy")
    parser.add_argument("--investment-return", type=float, default=None, help="Override the plan's investment return (e.g. 0.06)")
    parser.add_argument("--inflation-rate", type=float, default=None, help="Override the plan's inflation rate (e.g. 0.03)")
    parser.add_argument("--spending-adjustment", type=float, default=None, help=f"What-if spending change, 0.1 = +10%% (default: {DEFAULTS['spending_adjustment']})")
    parser.add_argument("--return-override", type=float, default=None, help="What-if return used in every year")
    parser.add_argument("--ss-claiming-age", type=int, choices=(62, 67, 70), default=None, help="What-if Social Security claiming age")
    parser.add_argument("--spouse-ss-claiming-age", type=int, choices=(62, 67, 70), default=None, help="What-if spouse Social Security claiming age")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > plan file > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def _make(cls, table: dict, where: str, **converted):
    """Instantiate a config dataclass from a TOML table, rejecting unknown keys."""
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ValueError(f"[{where}] unknown keys: {', '.join(unknown)}")
    values = {**table, **converted}
    try:
        return cls(**values)
    except TypeError as e:
        raise ValueError(f"[{where}] {e}") from e


def _build_income(raw: dict) -> Income:
    table = dict(raw.get("income", {}))
    employment = table.pop("employment", None)
    spouse_employment = table.pop("spouse_employment", None)
    streams = table.pop("retirement", [])
    return _make(
        Income, table, "income",
        employment=_make(EmploymentIncome, employment, "income.employment") if employment else None,
        spouse_employment=(
            _make(EmploymentIncome, spouse_employment, "income.spouse_employment")
            if spouse_employment else None
        ),
        retirement_incomes=tuple(_make(RetirementIncome, s, "income.retirement") for s in streams),
    )


def _build_social_security(raw: dict) -> SocialSecurity:
    table = dict(raw.get("social_security", {}))
    spouse = table.pop("spouse", None)
    return _make(
        SocialSecurity, table, "social_security",
        spouse=_make(SpouseSocialSecurity, spouse, "social_security.spouse") if spouse else None,
    )


def _build_expenses(raw: dict) -> Expenses:
    categories = tuple(_make(Expense, e, "expenses") for e in raw.get("expenses", []))
    home = None
    if "home" in raw:
        table = dict(raw["home"])
        mortgage = table.pop("mortgage", None)
        home = _make(
            HomeExpense, table, "home",
            mortgage=_make(MortgageDetails, mortgage, "home.mortgage") if mortgage else None,
        )
    return Expenses(categories=categories, home=home)


def _build_assumptions(raw: dict) -> Assumptions:
    table = dict(raw.get("assumptions", {}))
    penalties = table.pop("penalties", {})
    converted = {"penalty_settings": _make(PenaltySettings, penalties, "assumptions.penalties")}
    if "withdrawal_order" in table:
        converted["withdrawal_order"] = tuple(table.pop("withdrawal_order"))
    return _make(Assumptions, table, "assumptions", **converted)


def build_plan(raw: dict, resolved: dict | None = None) -> PlanConfig:
    """Build PlanConfig from a parsed plan file, applying resolved overrides.

    Raises ValueError for a missing [profile] table, unknown keys or an
    unsupported schema_version.
    """
    version = raw.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported schema_version {version} (expected {SCHEMA_VERSION}); "
            "migrate the plan file first"
        )
    if "profile" not in raw:
        raise ValueError("Plan file has no [profile] table")

    profile = _make(Profile, raw["profile"], "profile")
    assumptions = _build_assumptions(raw)
    pension = _make(Pension, raw["pension"], "pension") if "pension" in raw else None

    if resolved:
        profile_overrides = {
            k: resolved[k] for k in ("target_fi_age", "life_expectancy") if resolved.get(k) is not None
        }
        profile = dataclasses.replace(profile, **profile_overrides)
        assumption_overrides = {
            k: resolved[k] for k in ("investment_return", "inflation_rate") if resolved.get(k) is not None
        }
        assumptions = dataclasses.replace(assumptions, **assumption_overrides)

    return PlanConfig(
        profile=profile,
        accounts=tuple(_make(Account, a, "accounts") for a in raw.get("accounts", [])),
        income=_build_income(raw),
        social_security=_build_social_security(raw),
        expenses=_build_expenses(raw),
        life_events=tuple(_make(LifeEvent, e, "life_events") for e in raw.get("life_events", [])),
        assumptions=assumptions,
        pension=pension,
        schema_version=version,
    )


def build_what_if(r: dict) -> WhatIf:
    """Build WhatIf from resolved config dict."""
    return WhatIf(
        spending_adjustment=r["spending_adjustment"],
        return_override=r["return_override"],
        ss_claiming_age=r["ss_claiming_age"],
        spouse_ss_claiming_age=r["spouse_ss_claiming_age"],
    )


def parse_args(
    description: str,
    add_args_fn=None,
) -> tuple[dict, dict, argparse.Namespace]:
    """Parse CLI args, load the plan file, resolve values.

    Returns (resolved_dict, raw_plan, namespace).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    raw = load_config(args.config)
    return resolve(args, raw), raw, args
