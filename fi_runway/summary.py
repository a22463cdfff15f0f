"""Headline numbers derived from one projection."""

from dataclasses import dataclass

from fi_runway.income import FI, base_annual_spending
from fi_runway.mortgage import balance_for_year, home_equity
from fi_runway.params import PlanConfig, WhatIf
from fi_runway.simulation import YearProjection, resolve_current_year


@dataclass(frozen=True)
class ProjectionSummary:
    fi_number: float
    current_net_worth: float
    gap: float  # current_net_worth - fi_number
    runway_age: int
    has_shortfall: bool
    shortfall_age: int | None
    buffer_years: int
    surplus_at_le: float  # net worth in the life-expectancy year
    bottleneck_age: int | None = None  # lowest net worth during the FI phase
    bottleneck_balance: float | None = None
    home_equity: float | None = None  # home value less the current mortgage balance


def calculate_fi_number(annual_spending: float, safe_withdrawal_rate: float) -> float:
    """Portfolio size whose safe withdrawal covers annual_spending."""
    return annual_spending / safe_withdrawal_rate


def calculate_summary(
    plan: PlanConfig,
    projection: list[YearProjection],
    what_if: WhatIf | None = None,
    current_year: int | None = None,
) -> ProjectionSummary:
    if what_if is None:
        what_if = WhatIf()
    current_year = resolve_current_year(current_year)
    life_expectancy = plan.profile.life_expectancy

    spending = base_annual_spending(plan.expenses, current_year) * what_if.spending_multiplier
    fi_number = calculate_fi_number(spending, plan.assumptions.safe_withdrawal_rate)
    current_net_worth = sum(a.balance for a in plan.accounts)

    shortfall = next((p for p in projection if p.is_shortfall), None)
    if shortfall is not None:
        runway_age = shortfall.age - 1
    else:
        last_positive = next(
            (p for p in reversed(projection) if p.total_net_worth > 0), None,
        )
        runway_age = last_positive.age if last_positive else life_expectancy

    equity = None
    home = plan.expenses.home
    if home is not None and home.mortgage is not None:
        m = home.mortgage
        equity = home_equity(m.home_value, balance_for_year(m, current_year, current_year))

    fi_years = [p for p in projection if p.phase == FI]
    bottleneck = min(fi_years, key=lambda p: p.total_net_worth) if fi_years else None

    return ProjectionSummary(
        fi_number=fi_number,
        current_net_worth=current_net_worth,
        gap=current_net_worth - fi_number,
        runway_age=runway_age,
        has_shortfall=shortfall is not None,
        shortfall_age=shortfall.age if shortfall else None,
        buffer_years=runway_age - life_expectancy,
        surplus_at_le=projection[-1].total_net_worth if projection else 0.0,
        bottleneck_age=bottleneck.age if bottleneck else None,
        bottleneck_balance=bottleneck.total_net_worth if bottleneck else None,
        home_equity=equity,
    )
