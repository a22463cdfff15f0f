"""Per-year income, phase and expense calculations."""

from dataclasses import dataclass

from fi_runway.mortgage import balance_for_year, scheduled_payment
from fi_runway.params import EmploymentIncome, Expense, Expenses, RetirementIncome

ACCUMULATING = "accumulating"
FI = "fi"


@dataclass(frozen=True)
class EmploymentIncomeResult:
    gross: float
    net: float
    tax: float
    contributions: float


@dataclass(frozen=True)
class YearExpenseResult:
    total: float  # includes payoff_amount
    mortgage_balance: float | None
    payoff_amount: float


def determine_phase(age: int, fi_age: int) -> str:
    """'fi' from fi_age onward, 'accumulating' before."""
    return FI if age >= fi_age else ACCUMULATING


def _grown_gross(employment: EmploymentIncome, years_elapsed: int) -> float:
    return employment.annual_gross_income * (1 + employment.annual_growth_rate) ** years_elapsed


def employment_income(
    self_age: int,
    spouse_age: int | None,
    self_employment: EmploymentIncome | None,
    spouse_employment: EmploymentIncome | None,
    filing_status: str,
    fi_age: int,
    spouse_additional_work_years: int = 0,
    years_elapsed: int = 0,
) -> EmploymentIncomeResult:
    """Employment income for one year.

    Primary income stops at fi_age. Spouse income (married only) stops at
    fi_age + spouse_additional_work_years, both measured on the primary's age.
    Net = gross - tax - payroll contributions.
    """
    gross = 0.0
    tax = 0.0
    contributions = 0.0

    if self_employment is not None and self_age < fi_age:
        amount = _grown_gross(self_employment, years_elapsed)
        gross += amount
        tax += amount * self_employment.effective_tax_rate
        contributions += self_employment.annual_contributions

    spouse_stop_age = fi_age + spouse_additional_work_years
    if (
        filing_status == "married"
        and spouse_employment is not None
        and spouse_age is not None
        and self_age < spouse_stop_age
    ):
        amount = _grown_gross(spouse_employment, years_elapsed)
        gross += amount
        tax += amount * spouse_employment.effective_tax_rate
        contributions += spouse_employment.annual_contributions

    return EmploymentIncomeResult(
        gross=gross,
        net=gross - tax - contributions,
        tax=tax,
        contributions=contributions,
    )


def retirement_income_streams(
    streams: tuple[RetirementIncome, ...], age: int, inflation_rate: float,
) -> float:
    """Sum of streams active at `age`; indexed streams inflate from their own start age."""
    total = 0.0
    for stream in streams:
        if age < stream.start_age:
            continue
        if stream.end_age is not None and age > stream.end_age:
            continue
        amount = stream.annual_amount
        if stream.inflation_adjusted:
            amount *= (1 + inflation_rate) ** (age - stream.start_age)
        total += amount
    return total


def _is_active(expense: Expense, year: int, current_year: int) -> bool:
    start = expense.start_year if expense.start_year is not None else current_year
    if year < start:
        return False
    return expense.end_year is None or year <= expense.end_year


def _expense_rate(expense: Expense, global_inflation_rate: float) -> float:
    if not expense.inflation_adjusted:
        return 0.0
    if expense.inflation_rate is not None:
        return expense.inflation_rate
    return global_inflation_rate


def year_expenses(
    expenses: Expenses,
    year: int,
    current_year: int,
    global_inflation_rate: float,
    spending_multiplier: float = 1.0,
) -> YearExpenseResult:
    """Total spending for `year`.

    Categories and home costs inflate from current_year. The mortgage adds its
    level payment, or on the early-payoff year a lump sum equal to the balance
    due. spending_multiplier scales everything except that lump sum.
    """
    years_from_now = max(0, year - current_year)
    recurring = 0.0

    for expense in expenses.categories:
        if not _is_active(expense, year, current_year):
            continue
        rate = _expense_rate(expense, global_inflation_rate)
        recurring += expense.annual_amount * (1 + rate) ** years_from_now

    mortgage_balance = None
    payoff_amount = 0.0
    home = expenses.home
    if home is not None:
        home_rate = home.inflation_rate if home.inflation_rate is not None else global_inflation_rate
        mortgage = home.mortgage
        if mortgage is not None:
            mortgage_balance = balance_for_year(mortgage, year, current_year)
            payoff_year = mortgage.early_payoff_year
            if payoff_year is not None and year == payoff_year:
                payoff_amount = mortgage_balance
                mortgage_balance = 0.0
            # No payment in the natural end year: the balance is already 0 there.
            elif mortgage_balance > 0:
                recurring += scheduled_payment(mortgage, current_year) * 12
        home_costs = home.property_tax + home.insurance
        recurring += home_costs * (1 + home_rate) ** years_from_now

    return YearExpenseResult(
        total=recurring * spending_multiplier + payoff_amount,
        mortgage_balance=mortgage_balance,
        payoff_amount=payoff_amount,
    )


def base_annual_spending(expenses: Expenses, current_year: int) -> float:
    """Spending in the current year before inflation, used for the FI number."""
    total = sum(
        e.annual_amount for e in expenses.categories if _is_active(e, current_year, current_year)
    )
    home = expenses.home
    if home is not None:
        mortgage = home.mortgage
        if mortgage is not None and balance_for_year(mortgage, current_year, current_year) > 0:
            if mortgage.early_payoff_year is None or current_year < mortgage.early_payoff_year:
                total += scheduled_payment(mortgage, current_year) * 12
        total += home.property_tax + home.insurance
    return total
