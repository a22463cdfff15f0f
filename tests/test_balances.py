"""Tests for the per-run balance snapshot."""

import pytest
from fi_runway import Account, AccountBalances


def _accounts():
    return (
        Account("cash", "Checking", "cash", 10_000),
        Account("brokerage", "Brokerage", "taxable", 100_000, cost_basis=60_000,
                annual_contribution=5_000, contribution_start_year=2026, contribution_end_year=2028),
        Account("401k", "401(k)", "traditional", 200_000, annual_contribution=20_000),
        Account("roth", "Roth IRA", "roth", 50_000),
        Account("hsa", "HSA", "hsa", 20_000),
        Account("college", "529 plan", "529", 15_000, cost_basis=10_000),
    )


class TestGrow:
    def setup_method(self):
        self.balances = AccountBalances.from_accounts(_accounts())

    def test_cash_does_not_grow(self):
        self.balances.grow(0.05)
        assert self.balances.balance("cash") == 10_000

    def test_investments_grow(self):
        self.balances.grow(0.05)
        assert self.balances.balance("401k") == pytest.approx(210_000)
        assert self.balances.balance("hsa") == pytest.approx(21_000)

    def test_cost_basis_does_not_grow(self):
        self.balances.grow(0.05)
        assert self.balances["brokerage"].balance == pytest.approx(105_000)
        assert self.balances["brokerage"].cost_basis == 60_000

    def test_negative_return(self):
        self.balances.grow(-0.1)
        assert self.balances.balance("roth") == pytest.approx(45_000)


class TestScheduledContributions:
    def setup_method(self):
        self.balances = AccountBalances.from_accounts(_accounts())

    def test_default_window_starts_current_year(self):
        added = self.balances.apply_scheduled_contributions(2025, 2025)
        assert added == 20_000
        assert self.balances.balance("401k") == 220_000

    def test_not_before_start_year(self):
        self.balances.apply_scheduled_contributions(2025, 2025)
        assert self.balances.balance("brokerage") == 100_000

    def test_inside_window(self):
        added = self.balances.apply_scheduled_contributions(2027, 2025)
        assert added == 25_000
        assert self.balances.balance("brokerage") == 105_000

    def test_end_year_inclusive(self):
        assert self.balances.apply_scheduled_contributions(2028, 2025) == 25_000
        assert self.balances.apply_scheduled_contributions(2029, 2025) == 20_000

    def test_taxable_contribution_adds_cost_basis(self):
        self.balances.apply_scheduled_contributions(2026, 2025)
        assert self.balances["brokerage"].cost_basis == 65_000

    def test_traditional_has_no_cost_basis(self):
        self.balances.apply_scheduled_contributions(2025, 2025)
        assert self.balances["401k"].cost_basis is None


class TestDepositAndTotals:
    def test_deposit_into_taxable_without_basis(self):
        balances = AccountBalances.from_accounts((Account("b", "Brokerage", "taxable", 0),))
        balances.deposit("b", 1_000)
        assert balances["b"].balance == 1_000
        assert balances["b"].cost_basis == 1_000

    def test_totals_group_529_with_taxable(self):
        t = AccountBalances.from_accounts(_accounts()).totals()
        assert t.taxable == 115_000
        assert t.taxable_cost_basis == 70_000
        assert t.traditional == 200_000
        assert t.roth == 50_000
        assert t.hsa == 20_000
        assert t.cash == 10_000
        assert t.total == 395_000

    def test_total(self):
        assert AccountBalances.from_accounts(_accounts()).total() == 395_000

    def test_runs_do_not_share_state(self):
        accounts = _accounts()
        first = AccountBalances.from_accounts(accounts)
        first.grow(0.5)
        second = AccountBalances.from_accounts(accounts)
        assert second.balance("401k") == 200_000
        assert accounts[2].balance == 200_000

    def test_deposit_keeps_default_basis_of_existing_balance(self):
        balances = AccountBalances.from_accounts((Account("b", "Brokerage", "taxable", 100_000),))
        balances.deposit("b", 1_000)
        assert balances["b"].balance == 101_000
        assert balances["b"].cost_basis == pytest.approx(61_000)

    def test_deposit_uses_configured_default_ratio(self):
        balances = AccountBalances.from_accounts((Account("b", "Brokerage", "taxable", 100_000),), 0.25)
        balances.deposit("b", 1_000)
        assert balances["b"].cost_basis == pytest.approx(26_000)
