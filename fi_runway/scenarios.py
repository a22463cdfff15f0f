"""Assumption scenarios and multi-scenario execution."""

import dataclasses
from dataclasses import dataclass

from fi_runway.fi_search import AchievableFIResult, calculate_achievable_fi_age
from fi_runway.params import PlanConfig, WhatIf
from fi_runway.simulation import YearProjection, calculate_projection, resolve_current_year
from fi_runway.summary import ProjectionSummary, calculate_summary

# Overrides applied to the plan's Assumptions. "baseline" keeps the plan as entered.
SCENARIOS: dict[str, dict] = {
    "pessimistic": {
        "investment_return": 0.04,
        "inflation_rate": 0.035,
    },
    "baseline": {},
    "optimistic": {
        "investment_return": 0.08,
        "inflation_rate": 0.025,
    },
}


@dataclass(frozen=True)
class ScenarioResult:
    plan: PlanConfig
    projection: list[YearProjection]
    summary: ProjectionSummary
    achievable: AchievableFIResult


def apply_scenario(plan: PlanConfig, overrides: dict) -> PlanConfig:
    return dataclasses.replace(
        plan, assumptions=dataclasses.replace(plan.assumptions, **overrides),
    )


def run_scenarios(
    plan: PlanConfig,
    what_if: WhatIf | None = None,
    current_year: int | None = None,
    scenarios: dict[str, dict] | None = None,
) -> dict[str, ScenarioResult]:
    """Project, summarize and search the FI age under each scenario."""
    current_year = resolve_current_year(current_year)
    if scenarios is None:
        scenarios = SCENARIOS

    all_results = {}
    for name, overrides in scenarios.items():
        scenario_plan = apply_scenario(plan, overrides)
        projection = calculate_projection(scenario_plan, what_if, current_year)
        all_results[name] = ScenarioResult(
            plan=scenario_plan,
            projection=projection,
            summary=calculate_summary(scenario_plan, projection, what_if, current_year),
            achievable=calculate_achievable_fi_age(scenario_plan, what_if, current_year),
        )
    return all_results
