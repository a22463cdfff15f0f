"""Tests for deficit withdrawals, gross-up and penalty rules."""

import pytest
from fi_runway import Account, AccountBalances, Assumptions, PenaltySettings, is_penalty_free, calc_penalty, withdraw_from_accounts
from fi_runway.tax import PENALTY_FREE_AGES, RULE_OF_55_AGE, state_tax_info
from fi_runway.withdrawals import owner_age

NO_STATE_TAX = state_tax_info("TX")
CALIFORNIA = state_tax_info("CA")


def _withdraw(accounts, needed, age=65, spouse_age=None, state=NO_STATE_TAX, **assumption_kw):
    balances = AccountBalances.from_accounts(tuple(accounts))
    result = withdraw_from_accounts(needed, balances, Assumptions(**assumption_kw), state, age, spouse_age)
    return result, balances


class TestPenaltyFree:
    def setup_method(self):
        self.settings = PenaltySettings()

    @pytest.mark.parametrize("kind", ["cash", "taxable", "529", "other"])
    def test_always_penalty_free(self, kind):
        assert is_penalty_free(Account("a", "A", kind, 1), 30, None, self.settings)

    def test_traditional_before_59_5(self):
        assert not is_penalty_free(Account("a", "A", "traditional", 1), 59, None, self.settings)

    def test_traditional_at_60(self):
        assert is_penalty_free(Account("a", "A", "traditional", 1), 60, None, self.settings)

    @pytest.mark.parametrize("age", range(60, 95, 5))
    def test_stays_penalty_free(self, age):
        assert is_penalty_free(Account("a", "A", "roth", 1), age, None, self.settings)

    def test_hsa_at_65(self):
        hsa = Account("h", "HSA", "hsa", 1)
        assert not is_penalty_free(hsa, 64, None, self.settings)
        assert is_penalty_free(hsa, 65, None, self.settings)

    def test_rule_of_55(self):
        k = Account("k", "401(k)", "traditional", 1, is_401k=True, separated_from_service=True)
        enabled = PenaltySettings(enable_rule_55=True)
        assert is_penalty_free(k, 56, None, enabled)
        assert not is_penalty_free(k, 54, None, enabled)
        assert not is_penalty_free(k, 56, None, self.settings)

    def test_rule_of_55_requires_separation(self):
        k = Account("k", "401(k)", "traditional", 1, is_401k=True)
        assert not is_penalty_free(k, 56, None, PenaltySettings(enable_rule_55=True))

    def test_spouse_owned_uses_spouse_age(self):
        ira = Account("s", "Spouse IRA", "traditional", 1, owner="spouse")
        assert not is_penalty_free(ira, 62, 55, self.settings)

    def test_joint_uses_older_spouse(self):
        assert owner_age("joint", 50, 61) == 61
        assert owner_age("joint", 61, 50) == 61
        joint = Account("j", "Joint", "traditional", 1, owner="joint")
        assert is_penalty_free(joint, 50, 61, self.settings)

    def test_default_ages_follow_tax_table(self):
        assert self.settings.penalty_free_age == PENALTY_FREE_AGES["traditional"]
        assert self.settings.hsa_penalty_free_age == PENALTY_FREE_AGES["hsa"]
        assert self.settings.rule_55_age == RULE_OF_55_AGE

    def test_calc_penalty(self):
        ira = Account("a", "IRA", "traditional", 1)
        assert calc_penalty(ira, 10_000, 50, None, self.settings) == pytest.approx(1_000)
        assert calc_penalty(ira, 10_000, 60, None, self.settings) == 0
        hsa = Account("h", "HSA", "hsa", 1)
        assert calc_penalty(hsa, 10_000, 50, None, self.settings) == pytest.approx(2_000)


class TestWithdrawalOrder:
    def test_cash_first(self):
        result, balances = _withdraw([
            Account("b", "Brokerage", "taxable", 100_000, cost_basis=100_000),
            Account("c", "Checking", "cash", 10_000),
        ], 5_000)
        assert result.source == "Cash"
        assert result.amount == 5_000
        assert balances.balance("c") == 5_000
        assert balances.balance("b") == 100_000

    def test_cash_then_taxable(self):
        result, balances = _withdraw([
            Account("c", "Checking", "cash", 10_000),
            Account("b", "Brokerage", "taxable", 100_000, cost_basis=100_000),
        ], 15_000)
        assert result.source == "Cash, Taxable"
        assert result.amount == pytest.approx(15_000)
        assert balances.balance("b") == pytest.approx(95_000)
        assert result.uncovered == 0

    def test_follows_configured_order(self):
        result, balances = _withdraw([
            Account("b", "Brokerage", "taxable", 100_000, cost_basis=100_000),
            Account("r", "Roth", "roth", 100_000),
        ], 10_000, withdrawal_order=("roth", "taxable", "traditional"))
        assert result.source == "Roth"
        assert balances.balance("b") == 100_000

    def test_hsa_last_regardless_of_order(self):
        result, balances = _withdraw([
            Account("h", "HSA", "hsa", 100_000),
            Account("r", "Roth", "roth", 100_000),
        ], 10_000, age=70)
        assert result.source == "Roth"
        assert balances.balance("h") == 100_000

    def test_hsa_used_when_others_exhausted(self):
        result, balances = _withdraw([
            Account("r", "Roth", "roth", 4_000),
            Account("h", "HSA", "hsa", 100_000),
        ], 10_000, age=70)
        assert result.source == "Roth, HSA"
        assert balances.balance("h") == pytest.approx(94_000)

    def test_penalty_free_account_first(self):
        result, balances = _withdraw([
            Account("spouse", "Spouse IRA", "traditional", 500_000, owner="spouse"),
            Account("self", "My IRA", "traditional", 100_000),
        ], 10_000, age=60, spouse_age=50)
        assert balances.balance("spouse") == 500_000
        assert balances.balance("self") < 100_000
        assert result.penalty == 0

    def test_larger_balance_first(self):
        _, balances = _withdraw([
            Account("small", "Small", "taxable", 20_000, cost_basis=20_000),
            Account("large", "Large", "taxable", 80_000, cost_basis=80_000),
        ], 10_000)
        assert balances.balance("small") == 20_000
        assert balances.balance("large") == pytest.approx(70_000)

    def test_529_drawn_as_taxable(self):
        result, balances = _withdraw([Account("e", "529", "529", 30_000, cost_basis=30_000)], 10_000)
        assert result.source == "Taxable"
        assert balances.balance("e") == pytest.approx(20_000)


class TestGrossUp:
    def test_traditional_early_withdrawal(self):
        result, _ = _withdraw(
            [Account("t", "IRA", "traditional", 1_000_000)], 50_000, age=58, state=CALIFORNIA,
        )
        gross = 50_000 / (1 - 0.22 - 0.093 - 0.10)
        assert result.amount == pytest.approx(gross)
        assert result.penalty == pytest.approx(gross * 0.10)
        assert result.federal_tax == pytest.approx(gross * 0.22)
        assert result.state_tax == pytest.approx(gross * 0.093)
        assert result.source == "Traditional"

    def test_roth_penalty_only(self):
        result, _ = _withdraw([Account("r", "Roth", "roth", 100_000)], 10_000, age=50)
        assert result.amount * (1 - 0.10) == pytest.approx(10_000)
        assert result.federal_tax == 0
        assert result.state_tax == 0

    def test_roth_after_59_5_is_free(self):
        result, _ = _withdraw([Account("r", "Roth", "roth", 100_000)], 10_000, age=60)
        assert result.amount == pytest.approx(10_000)
        assert result.penalty == 0

    def test_taxable_uses_cost_basis_ratio(self):
        result, _ = _withdraw(
            [Account("b", "Brokerage", "taxable", 100_000, cost_basis=50_000)], 10_000,
        )
        assert result.amount == pytest.approx(10_000 / (1 - 0.5 * 0.15))

    def test_taxable_falls_back_to_default_ratio(self):
        result, _ = _withdraw([Account("b", "Brokerage", "taxable", 100_000)], 9_400)
        gross = 9_400 / (1 - 0.4 * 0.15)
        assert result.amount == pytest.approx(gross)
        assert result.federal_tax == pytest.approx(gross * 0.06)

    def test_default_ratio_is_configurable(self):
        result, _ = _withdraw(
            [Account("b", "Brokerage", "taxable", 100_000)], 10_000, default_cost_basis_ratio=1.0,
        )
        assert result.amount == pytest.approx(10_000)

    def test_taxable_state_capital_gains(self):
        result, _ = _withdraw(
            [Account("b", "Brokerage", "taxable", 100_000, cost_basis=0)], 10_000, state=CALIFORNIA,
        )
        gross = 10_000 / (1 - 0.15 - 0.093)
        assert result.amount == pytest.approx(gross)
        assert result.state_tax == pytest.approx(gross * 0.093)

    def test_cost_basis_reduced_proportionally(self):
        _, balances = _withdraw(
            [Account("b", "Brokerage", "taxable", 100_000, cost_basis=100_000)], 25_000,
        )
        assert balances["b"].cost_basis == pytest.approx(75_000)

    def test_hsa_early_penalty(self):
        result, _ = _withdraw([Account("h", "HSA", "hsa", 100_000)], 8_000, age=50)
        assert result.amount == pytest.approx(10_000)
        assert result.penalty == pytest.approx(2_000)


class TestExhaustion:
    def test_partial_cover_reports_uncovered(self):
        result, balances = _withdraw([Account("c", "Checking", "cash", 1_000)], 5_000)
        assert result.amount == 1_000
        assert result.uncovered == pytest.approx(4_000)
        assert balances.balance("c") == 0

    def test_no_accounts(self):
        result, _ = _withdraw([], 5_000)
        assert result.source == "None"
        assert result.amount == 0
        assert result.uncovered == 5_000

    def test_empty_accounts_skipped(self):
        result, _ = _withdraw([
            Account("c", "Checking", "cash", 0),
            Account("r", "Roth", "roth", 50_000),
        ], 5_000)
        assert result.source == "Roth"


class TestUnknownCostBasis:
    def test_contribution_does_not_replace_default_ratio(self):
        balances = AccountBalances.from_accounts((
            Account("b", "Brokerage", "taxable", 1_000_000, annual_contribution=1_000),
        ))
        balances.apply_scheduled_contributions(2025, 2025)
        result = withdraw_from_accounts(40_000, balances, Assumptions(), NO_STATE_TAX, 45, None)
        gain_ratio = 1 - 601_000 / 1_001_000
        gross = 40_000 / (1 - gain_ratio * 0.15)
        assert result.amount == pytest.approx(gross)
        assert result.federal_tax == pytest.approx(gross * gain_ratio * 0.15)


class TestOmittedSources:
    def test_source_left_out_of_order_is_still_drawn(self):
        result, balances = _withdraw(
            [Account("r", "Roth", "roth", 2_000_000)], 40_000,
            withdrawal_order=("taxable", "traditional"),
        )
        assert result.source == "Roth"
        assert result.uncovered == 0
        assert balances.balance("r") == pytest.approx(1_960_000)

    def test_configured_sources_come_first(self):
        result, balances = _withdraw([
            Account("r", "Roth", "roth", 100_000),
            Account("t", "IRA", "traditional", 100_000),
        ], 10_000, withdrawal_order=("traditional",))
        assert result.source == "Traditional"
        assert balances.balance("r") == 100_000
