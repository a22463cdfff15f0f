"""Tests for the achievable FI age search and shortfall guidance."""

import pytest
from fi_runway import (
    Account,
    Assumptions,
    EmploymentIncome,
    Expense,
    Expenses,
    Income,
    PlanConfig,
    Profile,
    calculate_achievable_fi_age,
    calculate_shortfall_guidance,
    evaluate,
    is_viable,
)
from fi_runway.fi_search import classify_confidence, latest_fi_age

YEAR = 2025


def make_plan(
    accounts=(),
    annual_spending=40_000,
    current_age=40,
    life_expectancy=90,
    jurisdiction="TX",
    income=None,
    **assumption_kw,
):
    assumption_kw.setdefault("investment_return", 0.05)
    return PlanConfig(
        profile=Profile(current_age, life_expectancy, current_age, jurisdiction=jurisdiction),
        accounts=tuple(accounts),
        income=income or Income(),
        expenses=Expenses(categories=(Expense("Living", annual_spending, inflation_adjusted=False),)),
        assumptions=Assumptions(**assumption_kw),
    )


def saver_plan(target=0):
    """Saves 20k/yr into cash until FI, then spends 30k/yr; viable from 57."""
    return make_plan(
        [Account("c", "Savings", "cash", 0)],
        annual_spending=30_000,
        current_age=50,
        life_expectancy=60,
        income=Income(employment=EmploymentIncome(50_000, 0.0)),
        surplus_handling="route_to_account",
        surplus_account_id="c",
        terminal_balance_target=target,
    )


class TestClassifyConfidence:
    @pytest.mark.parametrize("buffer,level", [
        (30, "high"), (10, "high"), (9, "moderate"), (5, "moderate"), (4, "tight"), (0, "tight"), (-3, "tight"),
    ])
    def test_thresholds(self, buffer, level):
        assert classify_confidence(buffer) == level


class TestEvaluate:
    def test_overrides_fi_age(self):
        result = evaluate(saver_plan(), 57, current_year=YEAR)
        assert result.fi_age == 57
        assert result.projection[6].phase == "accumulating"
        assert result.projection[7].phase == "fi"

    def test_terminal_balance(self):
        assert evaluate(saver_plan(), 57, current_year=YEAR).terminal_balance == pytest.approx(20_000)
        assert evaluate(saver_plan(), 59, current_year=YEAR).terminal_balance == pytest.approx(120_000)

    def test_life_expectancy_override(self):
        result = evaluate(saver_plan(), 57, current_year=YEAR, life_expectancy=120)
        assert result.projection[-1].age == 120
        assert result.shortfall_year.age == 61

    def test_viability_boundary(self):
        assert not is_viable(saver_plan(), 56, current_year=YEAR)
        assert is_viable(saver_plan(), 57, current_year=YEAR)

    def test_latest_fi_age(self):
        assert latest_fi_age(saver_plan()) == 59
        assert latest_fi_age(make_plan(current_age=70, life_expectancy=70)) == 70


class TestAchievableFIAge:
    def test_funded_now(self):
        plan = make_plan([Account("b", "Brokerage", "taxable", 1_000_000)], jurisdiction="CA")
        r = calculate_achievable_fi_age(plan, current_year=YEAR)
        assert r.achievable_fi_age == 40
        assert r.fi_at_current_age
        assert r.years_until_fi == 0
        assert r.confidence_level == "high"
        assert r.buffer_years == 30
        assert r.shortfall_guidance is None

    def test_earliest_viable_with_zero_target(self):
        r = calculate_achievable_fi_age(saver_plan(), current_year=YEAR)
        assert r.achievable_fi_age == 57
        assert r.years_until_fi == 7
        assert not r.fi_at_current_age
        assert r.terminal_balance == pytest.approx(20_000)

    def test_closest_to_target(self):
        assert calculate_achievable_fi_age(saver_plan(70_000), current_year=YEAR).achievable_fi_age == 58

    def test_tie_prefers_younger_age(self):
        assert calculate_achievable_fi_age(saver_plan(45_000), current_year=YEAR).achievable_fi_age == 57

    def test_target_above_every_terminal(self):
        assert calculate_achievable_fi_age(saver_plan(200_000), current_year=YEAR).achievable_fi_age == 59

    def test_tight_when_money_ends_at_life_expectancy(self):
        r = calculate_achievable_fi_age(saver_plan(), current_year=YEAR)
        assert r.buffer_years == 0
        assert r.confidence_level == "tight"

    def test_not_achievable(self):
        plan = make_plan(annual_spending=60_000, current_age=50)
        r = calculate_achievable_fi_age(plan, current_year=YEAR)
        assert r.achievable_fi_age is None
        assert r.confidence_level == "not_achievable"
        assert r.years_until_fi is None
        assert r.buffer_years == 0
        assert r.shortfall_guidance is not None


class TestShortfallGuidance:
    def test_no_assets(self):
        plan = make_plan(annual_spending=60_000, current_age=50)
        g = calculate_shortfall_guidance(plan, current_year=YEAR)
        assert g.runs_out_at_age == 50
        assert g.spending_reduction_needed is None
        assert g.spending_reduction_ratio is None
        assert g.additional_savings_needed == 61_500

    def test_spending_cut_found(self):
        plan = make_plan([Account("c", "Checking", "cash", 100_000)], annual_spending=12_000,
                         current_age=60, life_expectancy=70)
        g = calculate_shortfall_guidance(plan, current_year=YEAR)
        assert g.runs_out_at_age == 68
        assert g.spending_reduction_ratio == pytest.approx(0.25)
        assert g.spending_reduction_needed == 3_000
        assert g.additional_savings_needed == 3_200

    def test_search_is_idempotent(self):
        plan = saver_plan(70_000)
        assert calculate_achievable_fi_age(plan, current_year=YEAR) == calculate_achievable_fi_age(plan, current_year=YEAR)
