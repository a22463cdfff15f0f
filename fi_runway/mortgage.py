"""Mortgage amortization helpers."""

from fi_runway.params import MortgageDetails

MONTHS_PER_YEAR = 12


def monthly_payment(principal: float, annual_rate: float, term_years: float) -> float:
    """Level monthly P&I payment, rounded to cents.

    M = P * r(1+r)^n / ((1+r)^n - 1) with r the monthly rate and n the number
    of payments. Returns 0 if any input is non-positive.
    """
    if principal <= 0 or annual_rate <= 0 or term_years <= 0:
        return 0.0
    r = annual_rate / MONTHS_PER_YEAR
    n = term_years * MONTHS_PER_YEAR
    factor = (1 + r) ** n
    return round(principal * r * factor / (factor - 1), 2)


def remaining_balance(
    original_principal: float,
    annual_rate: float,
    term_years: float,
    years_elapsed: float,
) -> float:
    """Outstanding principal after `years_elapsed` years of level payments.

    B = P * ((1+r)^n - (1+r)^p) / ((1+r)^n - 1). A zero rate reduces the
    balance linearly. Floored at 0 and rounded to cents.
    """
    if original_principal <= 0 or years_elapsed >= term_years:
        return 0.0
    n = term_years * MONTHS_PER_YEAR
    p = years_elapsed * MONTHS_PER_YEAR
    if annual_rate <= 0:
        balance = original_principal * (1 - p / n)
    else:
        r = annual_rate / MONTHS_PER_YEAR
        total_factor = (1 + r) ** n
        elapsed_factor = (1 + r) ** p
        balance = original_principal * (total_factor - elapsed_factor) / (total_factor - 1)
    return max(0.0, round(balance, 2))


def mortgage_end_year(origination_year: int, term_years: int) -> int:
    return origination_year + term_years


def remaining_term_years(mortgage: MortgageDetails, current_year: int) -> int:
    return mortgage.loan_term_years - (current_year - mortgage.origination_year)


def balance_for_year(mortgage: MortgageDetails, target_year: int, current_year: int) -> float:
    """Outstanding balance in `target_year`.

    mortgage.loan_balance is taken as the balance as of `current_year` and is
    returned unchanged for the current and past years. Future years amortize
    forward from it over the remaining term. The balance is 0 once the natural
    term ends or after the early-payoff year; on the payoff year itself the
    balance due is returned.
    """
    remaining_term = remaining_term_years(mortgage, current_year)
    if target_year >= mortgage.end_year or remaining_term <= 0:
        return 0.0
    if mortgage.early_payoff_year is not None and target_year > mortgage.early_payoff_year:
        return 0.0
    years_from_now = target_year - current_year
    if years_from_now <= 0:
        return mortgage.loan_balance
    return remaining_balance(
        mortgage.loan_balance, mortgage.interest_rate, remaining_term, years_from_now,
    )


def scheduled_payment(mortgage: MortgageDetails, current_year: int) -> float:
    """Monthly payment: the stored amount, or derived from the current balance."""
    if mortgage.monthly_payment is not None:
        return mortgage.monthly_payment
    return monthly_payment(
        mortgage.loan_balance,
        mortgage.interest_rate,
        remaining_term_years(mortgage, current_year),
    )


def home_equity(home_value: float, loan_balance: float) -> float:
    return max(0.0, home_value - loan_balance)
