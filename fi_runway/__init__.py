"""Financial independence runway projection package."""

from fi_runway.params import (
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
    SCHEMA_VERSION,
)
from fi_runway.tax import STATE_TAX_DATA, PENALTY_FREE_AGES, state_tax_info, format_state_tax_hint
from fi_runway.mortgage import (
    monthly_payment,
    remaining_balance,
    balance_for_year,
    mortgage_end_year,
    home_equity,
)
from fi_runway.social_security import SS_ADJUSTMENT_FACTORS, adjusted_benefit, annual_benefit
from fi_runway.income import (
    determine_phase,
    employment_income,
    retirement_income_streams,
    year_expenses,
    base_annual_spending,
)
from fi_runway.balances import AccountBalances
from fi_runway.withdrawals import WithdrawalResult, is_penalty_free, calc_penalty, withdraw_from_accounts
from fi_runway.simulation import YearProjection, calculate_projection, validate_plan
from fi_runway.summary import ProjectionSummary, calculate_summary, calculate_fi_number
from fi_runway.fi_search import (
    AchievableFIResult,
    Evaluation,
    ShortfallGuidance,
    evaluate,
    is_viable,
    calculate_achievable_fi_age,
    calculate_shortfall_guidance,
)
from fi_runway.scenarios import SCENARIOS, ScenarioResult, run_scenarios

__all__ = [
    "Account",
    "Assumptions",
    "EmploymentIncome",
    "Expense",
    "Expenses",
    "HomeExpense",
    "Income",
    "LifeEvent",
    "MortgageDetails",
    "Pension",
    "PenaltySettings",
    "PlanConfig",
    "Profile",
    "RetirementIncome",
    "SocialSecurity",
    "SpouseSocialSecurity",
    "WhatIf",
    "SCHEMA_VERSION",
    "STATE_TAX_DATA",
    "PENALTY_FREE_AGES",
    "state_tax_info",
    "format_state_tax_hint",
    "monthly_payment",
    "remaining_balance",
    "balance_for_year",
    "mortgage_end_year",
    "home_equity",
    "SS_ADJUSTMENT_FACTORS",
    "adjusted_benefit",
    "annual_benefit",
    "determine_phase",
    "employment_income",
    "retirement_income_streams",
    "year_expenses",
    "base_annual_spending",
    "AccountBalances",
    "WithdrawalResult",
    "is_penalty_free",
    "calc_penalty",
    "withdraw_from_accounts",
    "YearProjection",
    "calculate_projection",
    "validate_plan",
    "ProjectionSummary",
    "calculate_summary",
    "calculate_fi_number",
    "AchievableFIResult",
    "Evaluation",
    "ShortfallGuidance",
    "evaluate",
    "is_viable",
    "calculate_achievable_fi_age",
    "calculate_shortfall_guidance",
    "SCENARIOS",
    "ScenarioResult",
    "run_scenarios",
]
