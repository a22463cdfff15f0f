"""Deficit withdrawals with tax and penalty gross-up."""

from dataclasses import dataclass, field

from fi_runway.balances import AccountBalances, AccountState
from fi_runway.params import WITHDRAWAL_SOURCES, Account, Assumptions, PenaltySettings
from fi_runway.tax import StateTaxInfo

SOURCE_LABELS = {
    "cash": "Cash",
    "taxable": "Taxable",
    "traditional": "Traditional",
    "roth": "Roth",
    "hsa": "HSA",
}
NO_SOURCE = "None"
COVERED_TOLERANCE = 0.01  # net need below a cent counts as covered


@dataclass
class WithdrawalResult:
    amount: float = 0.0  # gross removed from accounts
    penalty: float = 0.0
    federal_tax: float = 0.0
    state_tax: float = 0.0
    sources: list[str] = field(default_factory=list)
    uncovered: float = 0.0  # net need left after every account was tried

    @property
    def source(self) -> str:
        return ", ".join(self.sources) if self.sources else NO_SOURCE

    def add_source(self, kind: str) -> None:
        label = SOURCE_LABELS[kind]
        if label not in self.sources:
            self.sources.append(label)


def owner_age(owner: str, self_age: int, spouse_age: int | None) -> int:
    """Age used for penalty rules. Joint accounts use the older spouse."""
    if owner == "spouse":
        return spouse_age if spouse_age is not None else self_age
    if owner == "joint":
        return max(self_age, spouse_age if spouse_age is not None else self_age)
    return self_age


def is_penalty_free(
    account: Account,
    self_age: int,
    spouse_age: int | None,
    penalty_settings: PenaltySettings,
) -> bool:
    if account.is_taxable_like or account.type == "cash":
        return True
    age = owner_age(account.owner, self_age, spouse_age)
    if account.type == "hsa":
        return age >= penalty_settings.hsa_penalty_free_age
    if (
        penalty_settings.enable_rule_55
        and account.is_401k
        and account.separated_from_service
        and age >= penalty_settings.rule_55_age
    ):
        return True
    return age >= penalty_settings.penalty_free_age


def penalty_rate(
    account: Account,
    self_age: int,
    spouse_age: int | None,
    penalty_settings: PenaltySettings,
) -> float:
    if is_penalty_free(account, self_age, spouse_age, penalty_settings):
        return 0.0
    if account.type == "hsa":
        return penalty_settings.hsa_early_penalty_rate
    if account.type in ("traditional", "roth"):
        return penalty_settings.early_withdrawal_penalty_rate
    return 0.0


def calc_penalty(
    account: Account,
    amount: float,
    self_age: int,
    spouse_age: int | None,
    penalty_settings: PenaltySettings,
) -> float:
    return amount * penalty_rate(account, self_age, spouse_age, penalty_settings)


def _withdrawal_sort(
    states: list[AccountState],
    self_age: int,
    spouse_age: int | None,
    penalty_settings: PenaltySettings,
) -> list[AccountState]:
    """Penalty-free accounts first, then larger balances first."""
    return sorted(
        states,
        key=lambda s: (
            not is_penalty_free(s.account, self_age, spouse_age, penalty_settings),
            -s.balance,
        ),
    )


def _source_order(withdrawal_order: tuple[str, ...]) -> list[str]:
    """Configured order, then any source it leaves out, so every account is reachable."""
    order = list(dict.fromkeys(withdrawal_order))
    return order + [s for s in WITHDRAWAL_SOURCES if s not in order]


def _matches_source(account: Account, source: str) -> bool:
    if source == "taxable":
        return account.is_taxable_like
    return account.type == source


def withdraw_from_accounts(
    needed: float,
    balances: AccountBalances,
    assumptions: Assumptions,
    state_tax: StateTaxInfo,
    self_age: int,
    spouse_age: int | None,
) -> WithdrawalResult:
    """Cover a net deficit of `needed` from the accounts, updating `balances`.

    Order: cash, then assumptions.withdrawal_order (omitted sources after it),
    then HSA. Each draw is
    grossed up so the proceeds after tax and penalty cover what remains.
    Exhausting every account is not an error; the remainder is returned in
    `uncovered`.
    """
    result = WithdrawalResult()
    penalties = assumptions.penalty_settings
    remaining = needed

    def candidates(match) -> list[AccountState]:
        pool = [s for s in balances.states() if match(s.account) and s.balance > 0]
        return _withdrawal_sort(pool, self_age, spouse_age, penalties)

    for state in candidates(lambda a: a.type == "cash"):
        if remaining <= COVERED_TOLERANCE:
            break
        amount = min(remaining, state.balance)
        state.balance -= amount
        remaining -= amount
        result.amount += amount
        result.add_source("cash")

    for source in _source_order(assumptions.withdrawal_order):
        for state in candidates(lambda a, src=source: _matches_source(a, src)):
            if remaining <= COVERED_TOLERANCE:
                break
            remaining -= _draw(state, source, remaining, result, assumptions, state_tax,
                               self_age, spouse_age)

    for state in candidates(lambda a: a.type == "hsa"):
        if remaining <= COVERED_TOLERANCE:
            break
        remaining -= _draw(state, "hsa", remaining, result, assumptions, state_tax,
                           self_age, spouse_age)

    result.uncovered = remaining if remaining > COVERED_TOLERANCE else 0.0
    return result


def _draw(
    state: AccountState,
    source: str,
    remaining: float,
    result: WithdrawalResult,
    assumptions: Assumptions,
    state_tax: StateTaxInfo,
    self_age: int,
    spouse_age: int | None,
) -> float:
    """Withdraw from one account. Returns the net proceeds."""
    available = state.balance
    p = penalty_rate(state.account, self_age, spouse_age, assumptions.penalty_settings)

    if source in ("roth", "hsa"):
        fed_rate = state_rate = tax_rate = 0.0
    elif source == "traditional":
        fed_rate = assumptions.traditional_tax_rate
        state_rate = state_tax.income_rate
        tax_rate = fed_rate + state_rate
    else:
        ratio = state.cost_basis_ratio
        if ratio is None:
            ratio = assumptions.default_cost_basis_ratio
        gain_ratio = 1 - min(1.0, ratio)
        fed_rate = gain_ratio * assumptions.capital_gains_tax_rate
        state_rate = gain_ratio * state_tax.capital_gains_rate
        tax_rate = fed_rate + state_rate

    gross = min(remaining / (1 - tax_rate - p), available)
    federal = gross * fed_rate
    state_amount = gross * state_rate
    penalty = gross * p

    if state.account.is_taxable_like and state.cost_basis is not None and available > 0:
        state.cost_basis *= 1 - gross / available
    state.balance = available - gross

    result.amount += gross
    result.federal_tax += federal
    result.state_tax += state_amount
    result.penalty += penalty
    if gross > 0:
        result.add_source(source)
    return max(0.0, gross - federal - state_amount - penalty)
