"""Year-by-year projection engine and plan validation."""

from dataclasses import dataclass
from datetime import date

from fi_runway.balances import AccountBalances
from fi_runway.income import (
    FI,
    determine_phase,
    employment_income,
    retirement_income_streams,
    year_expenses,
)
from fi_runway.params import (
    ACCOUNT_OWNERS,
    ACCOUNT_TYPES,
    FILING_STATUSES,
    SURPLUS_POLICIES,
    WITHDRAWAL_SOURCES,
    PlanConfig,
    WhatIf,
)
from fi_runway.social_security import SS_ADJUSTMENT_FACTORS, annual_benefit
from fi_runway.tax import STATE_TAX_DATA, state_tax_info
from fi_runway.withdrawals import NO_SOURCE, withdraw_from_accounts

MIN_AGE = 18
MAX_AGE = 120
MAX_EXPENSE_AMOUNT = 10_000_000  # per year; larger values are almost certainly typos
MAX_MORTGAGE_RATE = 0.25
PAYOFF_LABEL = "Mortgage Payoff"


@dataclass(frozen=True)
class YearProjection:
    age: int
    year: int
    phase: str
    expenses: float
    income: float  # passive income + life-event inflows
    employment_income: float  # net
    gross_employment_income: float
    contributions: float  # payroll + scheduled account contributions
    retirement_income: float
    social_security_income: float
    pension_income: float
    gap: float
    withdrawal: float
    withdrawal_penalty: float
    federal_tax: float
    state_tax: float
    withdrawal_source: str
    unmet_need: float
    taxable_balance: float
    traditional_balance: float
    roth_balance: float
    hsa_balance: float
    cash_balance: float
    total_net_worth: float
    is_shortfall: bool
    mortgage_balance: float | None = None


def resolve_current_year(current_year: int | None) -> int:
    """The calendar year treated as year zero. Defaults to today's year."""
    return current_year if current_year is not None else date.today().year


def effective_return(plan: PlanConfig, what_if: WhatIf, phase: str) -> float:
    if what_if.return_override is not None:
        return what_if.return_override
    fi_return = plan.assumptions.fi_phase_return
    if phase == FI and fi_return is not None:
        return fi_return
    return plan.assumptions.investment_return


def _social_security_income(
    plan: PlanConfig, what_if: WhatIf, age: int, spouse_age: int | None,
) -> float:
    ss = plan.social_security
    total = 0.0
    if ss.include:
        claiming_age = what_if.ss_claiming_age or ss.claiming_age
        total += annual_benefit(ss.monthly_benefit, claiming_age, age, ss.cola_rate)
    spouse = ss.spouse
    if plan.profile.is_married and spouse is not None and spouse.include and spouse_age is not None:
        claiming_age = what_if.spouse_ss_claiming_age or spouse.claiming_age
        total += annual_benefit(spouse.monthly_benefit, claiming_age, spouse_age, ss.cola_rate)
    return total


def _pension_income(plan: PlanConfig, age: int) -> float:
    pension = plan.pension
    if pension is None or age < pension.start_age:
        return 0.0
    return pension.annual_benefit * (1 + pension.cola_rate) ** (age - pension.start_age)


def calculate_projection(
    plan: PlanConfig,
    what_if: WhatIf | None = None,
    current_year: int | None = None,
) -> list[YearProjection]:
    """Simulate every age from current age to life expectancy.

    Each year depends only on the previous year's ending balances. A year in
    which the accounts cannot cover the deficit is flagged is_shortfall and
    skips growth.
    """
    if what_if is None:
        what_if = WhatIf()
    current_year = resolve_current_year(current_year)
    profile = plan.profile
    assumptions = plan.assumptions
    income = plan.income
    fi_age = profile.target_fi_age
    jurisdiction = state_tax_info(profile.jurisdiction)
    balances = AccountBalances.from_accounts(plan.accounts, assumptions.default_cost_basis_ratio)
    route_surplus = (
        assumptions.surplus_handling == "route_to_account"
        and assumptions.surplus_account_id in balances
    )

    projections: list[YearProjection] = []
    for age in range(profile.current_age, profile.life_expectancy + 1):
        years_elapsed = age - profile.current_age
        year = current_year + years_elapsed
        spouse_age = profile.spouse_age_at(age)
        phase = determine_phase(age, fi_age)

        employment = employment_income(
            age,
            spouse_age,
            income.employment,
            income.spouse_employment,
            profile.filing_status,
            fi_age,
            income.spouse_additional_work_years,
            years_elapsed,
        )
        expense = year_expenses(
            plan.expenses, year, current_year, assumptions.inflation_rate,
            what_if.spending_multiplier,
        )
        life_event_total = sum(e.amount for e in plan.life_events if e.year == year)
        retirement = retirement_income_streams(
            income.retirement_incomes, age, assumptions.inflation_rate,
        )
        social_security = _social_security_income(plan, what_if, age, spouse_age)
        pension = _pension_income(plan, age)

        scheduled = balances.apply_scheduled_contributions(year, current_year)

        expenses_total = expense.total + max(0.0, life_event_total)
        other_income = retirement + social_security + pension + max(0.0, -life_event_total)
        deficit = expenses_total - (employment.net + other_income)

        gap = 0.0
        withdrawal = penalty = federal_tax = state_tax = unmet = 0.0
        source = NO_SOURCE
        if deficit > 0:
            gap = deficit
            result = withdraw_from_accounts(
                deficit, balances, assumptions, jurisdiction, age, spouse_age,
            )
            withdrawal = result.amount
            penalty = result.penalty
            federal_tax = result.federal_tax
            state_tax = result.state_tax
            source = result.source
            unmet = result.uncovered
        elif deficit < 0 and route_surplus:
            balances.deposit(assumptions.surplus_account_id, -deficit)

        if expense.payoff_amount > 0:
            source = PAYOFF_LABEL if source == NO_SOURCE else f"{source} (+ {PAYOFF_LABEL})"

        is_shortfall = unmet > 0
        totals = balances.totals()
        projections.append(YearProjection(
            age=age,
            year=year,
            phase=phase,
            expenses=expenses_total,
            income=other_income,
            employment_income=employment.net,
            gross_employment_income=employment.gross,
            contributions=employment.contributions + scheduled,
            retirement_income=retirement,
            social_security_income=social_security,
            pension_income=pension,
            gap=gap,
            withdrawal=withdrawal,
            withdrawal_penalty=penalty,
            federal_tax=federal_tax,
            state_tax=state_tax,
            withdrawal_source=source,
            unmet_need=unmet,
            taxable_balance=totals.taxable,
            traditional_balance=totals.traditional,
            roth_balance=totals.roth,
            hsa_balance=totals.hsa,
            cash_balance=totals.cash,
            total_net_worth=totals.total,
            is_shortfall=is_shortfall,
            mortgage_balance=expense.mortgage_balance,
        ))

        if not is_shortfall:
            balances.grow(effective_return(plan, what_if, phase))

    return projections


def _validate_profile(plan: PlanConfig) -> list[str]:
    errors = []
    p = plan.profile
    if not MIN_AGE <= p.current_age <= MAX_AGE:
        errors.append(f"current_age: must be between {MIN_AGE} and {MAX_AGE} (got {p.current_age})")
    if p.target_fi_age < p.current_age:
        errors.append("target_fi_age: must not be before current_age")
    if p.life_expectancy <= p.target_fi_age:
        errors.append("life_expectancy: must be greater than target_fi_age")
    if p.life_expectancy > MAX_AGE:
        errors.append(f"life_expectancy: cannot exceed {MAX_AGE}")
    if p.filing_status not in FILING_STATUSES:
        errors.append(f"filing_status: unknown value {p.filing_status!r}")
    if p.filing_status == "married" and p.spouse_age is None:
        errors.append("spouse_age: required when filing_status is married")
    if p.jurisdiction.upper() not in STATE_TAX_DATA:
        errors.append(f"jurisdiction: unknown state code {p.jurisdiction!r}")
    return errors


def _validate_accounts(plan: PlanConfig) -> list[str]:
    errors = []
    seen: set[str] = set()
    for a in plan.accounts:
        if a.id in seen:
            errors.append(f"account {a.id}: duplicate id")
        seen.add(a.id)
        if a.type not in ACCOUNT_TYPES:
            errors.append(f"account {a.id}: unknown type {a.type!r}")
        if a.owner not in ACCOUNT_OWNERS:
            errors.append(f"account {a.id}: unknown owner {a.owner!r}")
        if a.balance < 0:
            errors.append(f"account {a.id}: {a.name} balance cannot be negative")
        if a.cost_basis is not None:
            if a.cost_basis < 0:
                errors.append(f"account {a.id}: {a.name} cost basis cannot be negative")
            if a.cost_basis > a.balance:
                errors.append(f"account {a.id}: {a.name} cost basis cannot exceed balance")
        if a.annual_contribution < 0:
            errors.append(f"account {a.id}: {a.name} contribution cannot be negative")
        start, end = a.contribution_start_year, a.contribution_end_year
        if start is not None and end is not None and start > end:
            errors.append(f"account {a.id}: contribution end year must not precede start year")
    pension = plan.pension
    if pension is not None:
        if pension.annual_benefit < 0:
            errors.append("pension.annual_benefit: cannot be negative")
        if not 50 <= pension.start_age <= 100:
            errors.append("pension.start_age: must be between 50 and 100")
    return errors


def _validate_income(plan: PlanConfig) -> list[str]:
    errors = []
    ss = plan.social_security
    if ss.include and ss.claiming_age not in SS_ADJUSTMENT_FACTORS:
        errors.append(f"social_security.claiming_age: must be 62, 67 or 70 (got {ss.claiming_age})")
    if ss.spouse is not None and ss.spouse.include and ss.spouse.claiming_age not in SS_ADJUSTMENT_FACTORS:
        errors.append(f"social_security.spouse.claiming_age: must be 62, 67 or 70 (got {ss.spouse.claiming_age})")
    for label, emp in (("employment", plan.income.employment),
                       ("spouse_employment", plan.income.spouse_employment)):
        if emp is None:
            continue
        if emp.annual_gross_income < 0:
            errors.append(f"income.{label}: gross income cannot be negative")
        if not 0 <= emp.effective_tax_rate < 1:
            errors.append(f"income.{label}: effective tax rate must be between 0% and 100%")
    if plan.income.spouse_additional_work_years < 0:
        errors.append("income.spouse_additional_work_years: cannot be negative")
    for stream in plan.income.retirement_incomes:
        if stream.end_age is not None and stream.end_age < stream.start_age:
            errors.append(f"retirement income {stream.name}: end age must not precede start age")
    return errors


def _validate_expenses(plan: PlanConfig) -> list[str]:
    errors = []
    for e in plan.expenses.categories:
        if e.annual_amount < 0:
            errors.append(f"expense {e.name}: amount cannot be negative")
        if e.annual_amount > MAX_EXPENSE_AMOUNT:
            errors.append(f"expense {e.name}: amount seems unrealistically high")
        if e.start_year is not None and e.end_year is not None and e.start_year > e.end_year:
            errors.append(f"expense {e.name}: end year must be after start year")
    home = plan.expenses.home
    if home is None:
        return errors
    m = home.mortgage
    if m is not None:
        if m.monthly_payment is not None and m.monthly_payment < 0:
            errors.append("home.mortgage.monthly_payment: cannot be negative")
        if m.home_value < 0:
            errors.append("home.mortgage.home_value: cannot be negative")
        if m.loan_balance < 0:
            errors.append("home.mortgage.loan_balance: cannot be negative")
        if not 0 <= m.interest_rate <= MAX_MORTGAGE_RATE:
            errors.append("home.mortgage.interest_rate: should be between 0% and 25%")
        if m.early_payoff_year is not None and m.early_payoff_year > m.end_year:
            errors.append("home.mortgage.early_payoff_year: must be before the natural payoff year")
    if home.property_tax < 0:
        errors.append("home.property_tax: cannot be negative")
    if home.insurance < 0:
        errors.append("home.insurance: cannot be negative")
    return errors


def _validate_assumptions(plan: PlanConfig) -> list[str]:
    errors = []
    a = plan.assumptions
    if not -0.5 <= a.investment_return <= 0.5:
        errors.append("assumptions.investment_return: should be between -50% and 50%")
    if a.fi_phase_return is not None and not -0.5 <= a.fi_phase_return <= 0.5:
        errors.append("assumptions.fi_phase_return: should be between -50% and 50%")
    if not 0 <= a.inflation_rate <= 0.2:
        errors.append("assumptions.inflation_rate: should be between 0% and 20%")
    if not 0 <= a.traditional_tax_rate <= 0.5:
        errors.append("assumptions.traditional_tax_rate: should be between 0% and 50%")
    if not 0 <= a.capital_gains_tax_rate <= 0.4:
        errors.append("assumptions.capital_gains_tax_rate: should be between 0% and 40%")
    if not 0 < a.safe_withdrawal_rate <= 0.2:
        errors.append("assumptions.safe_withdrawal_rate: should be between 0% and 20%")
    if a.terminal_balance_target < 0:
        errors.append("assumptions.terminal_balance_target: cannot be negative")
    if not 0 <= a.default_cost_basis_ratio <= 1:
        errors.append("assumptions.default_cost_basis_ratio: must be between 0 and 1")
    unknown = [s for s in a.withdrawal_order if s not in WITHDRAWAL_SOURCES]
    if unknown:
        errors.append(f"assumptions.withdrawal_order: unknown sources {unknown}")
    missing = [s for s in WITHDRAWAL_SOURCES if s not in a.withdrawal_order]
    if missing:
        errors.append(f"assumptions.withdrawal_order: missing sources {missing}")
    if len(set(a.withdrawal_order)) != len(a.withdrawal_order):
        errors.append("assumptions.withdrawal_order: each source may appear only once")
    if a.surplus_handling not in SURPLUS_POLICIES:
        errors.append(f"assumptions.surplus_handling: unknown policy {a.surplus_handling!r}")
    if a.surplus_handling == "route_to_account":
        ids = {acc.id for acc in plan.accounts}
        if a.surplus_account_id not in ids:
            errors.append("assumptions.surplus_account_id: must name an existing account")
    ps = a.penalty_settings
    if not 0 <= ps.early_withdrawal_penalty_rate <= 0.25:
        errors.append("penalty_settings.early_withdrawal_penalty_rate: should be between 0% and 25%")
    if not 0 <= ps.hsa_early_penalty_rate <= 0.3:
        errors.append("penalty_settings.hsa_early_penalty_rate: should be between 0% and 30%")
    return errors


def validate_plan(plan: PlanConfig) -> list[str]:
    """Return a list of problems with the plan. Empty list = valid."""
    return (
        _validate_profile(plan)
        + _validate_accounts(plan)
        + _validate_income(plan)
        + _validate_expenses(plan)
        + _validate_assumptions(plan)
    )
