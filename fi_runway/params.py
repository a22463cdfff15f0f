"""Plan configuration types.

Every type here is a frozen dataclass and collections are tuples, so a
PlanConfig can be shared by any number of projection runs. Overrides are made
with dataclasses.replace().
"""

from dataclasses import dataclass, field

from fi_runway.tax import PENALTY_FREE_AGES, RULE_OF_55_AGE

SCHEMA_VERSION = 3

ACCOUNT_TYPES = ("cash", "taxable", "traditional", "roth", "hsa", "529", "other")
ACCOUNT_OWNERS = ("self", "spouse", "joint")
FILING_STATUSES = ("single", "married")
WITHDRAWAL_SOURCES = ("taxable", "traditional", "roth")
SURPLUS_POLICIES = ("ignore", "route_to_account")

# Accounts drawn and taxed like a brokerage account
TAXABLE_LIKE_TYPES = frozenset({"taxable", "529", "other"})

# Assumed share of a taxable balance that is principal when no cost basis is entered
DEFAULT_COST_BASIS_RATIO = 0.6


@dataclass(frozen=True)
class Profile:
    current_age: int
    life_expectancy: int
    target_fi_age: int
    jurisdiction: str = "CA"
    filing_status: str = "single"
    spouse_age: int | None = None

    @property
    def is_married(self) -> bool:
        return self.filing_status == "married" and self.spouse_age is not None

    def spouse_age_at(self, age: int) -> int | None:
        """Spouse's age in the year the primary is `age` (fixed offset)."""
        if not self.is_married:
            return None
        return age - (self.current_age - self.spouse_age)


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str
    balance: float
    owner: str = "self"
    cost_basis: float | None = None  # taxable-like accounts only
    is_401k: bool = False
    separated_from_service: bool = False
    annual_contribution: float = 0.0
    contribution_start_year: int | None = None  # None = current year
    contribution_end_year: int | None = None  # None = no end

    @property
    def is_taxable_like(self) -> bool:
        return self.type in TAXABLE_LIKE_TYPES


@dataclass(frozen=True)
class EmploymentIncome:
    annual_gross_income: float
    effective_tax_rate: float
    annual_contributions: float = 0.0  # payroll deductions, not spendable
    annual_growth_rate: float = 0.0


@dataclass(frozen=True)
class RetirementIncome:
    name: str
    annual_amount: float
    start_age: int
    end_age: int | None = None  # inclusive
    inflation_adjusted: bool = False


@dataclass(frozen=True)
class Income:
    employment: EmploymentIncome | None = None
    spouse_employment: EmploymentIncome | None = None
    retirement_incomes: tuple[RetirementIncome, ...] = ()
    spouse_additional_work_years: int = 0


@dataclass(frozen=True)
class SpouseSocialSecurity:
    include: bool = False
    monthly_benefit: float = 0.0
    claiming_age: int = 67


@dataclass(frozen=True)
class SocialSecurity:
    include: bool = False
    monthly_benefit: float = 0.0  # amount at full retirement age
    claiming_age: int = 67
    cola_rate: float = 0.0
    spouse: SpouseSocialSecurity | None = None


@dataclass(frozen=True)
class Pension:
    annual_benefit: float
    start_age: int
    cola_rate: float = 0.0


@dataclass(frozen=True)
class Expense:
    name: str
    annual_amount: float
    inflation_rate: float | None = None  # None = global inflation rate
    inflation_adjusted: bool = True
    start_year: int | None = None  # None = current year
    end_year: int | None = None  # inclusive
    category: str = "other"


@dataclass(frozen=True)
class MortgageDetails:
    home_value: float
    loan_balance: float  # outstanding principal as of the current year
    interest_rate: float
    loan_term_years: int
    origination_year: int
    monthly_payment: float | None = None  # None = derived from loan_balance
    early_payoff_year: int | None = None

    @property
    def end_year(self) -> int:
        return self.origination_year + self.loan_term_years


@dataclass(frozen=True)
class HomeExpense:
    mortgage: MortgageDetails | None = None
    property_tax: float = 0.0
    insurance: float = 0.0
    inflation_rate: float | None = None  # None = global inflation rate


@dataclass(frozen=True)
class Expenses:
    categories: tuple[Expense, ...] = ()
    home: HomeExpense | None = None


@dataclass(frozen=True)
class LifeEvent:
    name: str
    year: int
    amount: float  # positive = expense, negative = inflow


@dataclass(frozen=True)
class PenaltySettings:
    early_withdrawal_penalty_rate: float = 0.10
    hsa_early_penalty_rate: float = 0.20
    enable_rule_55: bool = False
    penalty_free_age: float = PENALTY_FREE_AGES["traditional"]
    hsa_penalty_free_age: float = PENALTY_FREE_AGES["hsa"]
    rule_55_age: float = RULE_OF_55_AGE


@dataclass(frozen=True)
class Assumptions:
    investment_return: float = 0.06
    inflation_rate: float = 0.03
    traditional_tax_rate: float = 0.22
    capital_gains_tax_rate: float = 0.15
    withdrawal_order: tuple[str, ...] = WITHDRAWAL_SOURCES
    safe_withdrawal_rate: float = 0.04
    penalty_settings: PenaltySettings = field(default_factory=PenaltySettings)
    terminal_balance_target: float = 0.0
    surplus_handling: str = "ignore"
    surplus_account_id: str | None = None
    default_cost_basis_ratio: float = DEFAULT_COST_BASIS_RATIO
    fi_phase_return: float | None = None  # None = investment_return after FI too


@dataclass(frozen=True)
class PlanConfig:
    profile: Profile
    accounts: tuple[Account, ...] = ()
    income: Income = field(default_factory=Income)
    social_security: SocialSecurity = field(default_factory=SocialSecurity)
    expenses: Expenses = field(default_factory=Expenses)
    life_events: tuple[LifeEvent, ...] = ()
    assumptions: Assumptions = field(default_factory=Assumptions)
    pension: Pension | None = None
    schema_version: int = SCHEMA_VERSION


@dataclass(frozen=True)
class WhatIf:
    """Exploration deltas applied on top of a plan without editing it."""

    spending_adjustment: float = 0.0  # 0.1 = spend 10% more
    return_override: float | None = None
    ss_claiming_age: int | None = None
    spouse_ss_claiming_age: int | None = None

    @property
    def spending_multiplier(self) -> float:
        return 1 + self.spending_adjustment
