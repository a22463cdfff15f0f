"""Per-run account balance snapshot."""

from dataclasses import dataclass

from fi_runway.params import DEFAULT_COST_BASIS_RATIO, Account


@dataclass
class AccountState:
    account: Account
    balance: float
    cost_basis: float | None

    @property
    def cost_basis_ratio(self) -> float | None:
        if self.cost_basis is None or self.balance <= 0:
            return None
        return self.cost_basis / self.balance


@dataclass
class BalanceTotals:
    taxable: float = 0.0  # includes 529 and other
    taxable_cost_basis: float = 0.0
    traditional: float = 0.0
    roth: float = 0.0
    hsa: float = 0.0
    cash: float = 0.0

    @property
    def total(self) -> float:
        return self.taxable + self.traditional + self.roth + self.hsa + self.cash


class AccountBalances:
    """Mutable balances for one projection run, keyed by account id.

    Created fresh from the plan's accounts for every run; never shared.
    """

    def __init__(
        self,
        states: dict[str, AccountState],
        default_cost_basis_ratio: float = DEFAULT_COST_BASIS_RATIO,
    ):
        self._states = states
        self.default_cost_basis_ratio = default_cost_basis_ratio

    @classmethod
    def from_accounts(
        cls,
        accounts: tuple[Account, ...],
        default_cost_basis_ratio: float = DEFAULT_COST_BASIS_RATIO,
    ) -> "AccountBalances":
        return cls({
            a.id: AccountState(account=a, balance=a.balance, cost_basis=a.cost_basis)
            for a in accounts
        }, default_cost_basis_ratio)

    def __getitem__(self, account_id: str) -> AccountState:
        return self._states[account_id]

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._states

    def states(self) -> list[AccountState]:
        return list(self._states.values())

    def balance(self, account_id: str) -> float:
        return self._states[account_id].balance

    def deposit(self, account_id: str, amount: float) -> None:
        """Add new money; taxable-like accounts record it as cost basis.

        An unknown basis is first fixed at the default ratio of the existing
        balance so the new principal does not mask it.
        """
        state = self._states[account_id]
        if state.account.is_taxable_like:
            if state.cost_basis is None:
                state.cost_basis = state.balance * self.default_cost_basis_ratio
            state.cost_basis += amount
        state.balance += amount

    def apply_scheduled_contributions(self, year: int, current_year: int) -> float:
        """Add every account contribution scheduled for `year`. Returns the total added.

        Contributions follow each account's own [start, end] window and do not
        depend on the accumulating/FI phase.
        """
        total = 0.0
        for state in self._states.values():
            account = state.account
            if account.annual_contribution <= 0:
                continue
            start = account.contribution_start_year
            if start is None:
                start = current_year
            end = account.contribution_end_year
            if year < start or (end is not None and year > end):
                continue
            self.deposit(account.id, account.annual_contribution)
            total += account.annual_contribution
        return total

    def grow(self, rate: float) -> None:
        """Apply one year of return. Cash does not grow; cost basis never grows."""
        factor = 1 + rate
        for state in self._states.values():
            if state.account.type == "cash":
                continue
            state.balance *= factor

    def totals(self) -> BalanceTotals:
        t = BalanceTotals()
        for state in self._states.values():
            kind = state.account.type
            if state.account.is_taxable_like:
                t.taxable += state.balance
                t.taxable_cost_basis += state.cost_basis or 0.0
            elif kind == "traditional":
                t.traditional += state.balance
            elif kind == "roth":
                t.roth += state.balance
            elif kind == "hsa":
                t.hsa += state.balance
            elif kind == "cash":
                t.cash += state.balance
        return t

    def total(self) -> float:
        return sum(state.balance for state in self._states.values())
