"""Achievable FI age search, confidence and shortfall guidance."""

import dataclasses
from dataclasses import dataclass

from fi_runway.income import base_annual_spending
from fi_runway.params import PlanConfig, WhatIf
from fi_runway.simulation import YearProjection, calculate_projection, resolve_current_year

PROBE_MAX_AGE = 120  # horizon used to find when money actually runs out
HIGH_CONFIDENCE_BUFFER = 10
MODERATE_CONFIDENCE_BUFFER = 5
SPENDING_CUT_STEP = 0.05
MAX_SPENDING_CUT = 0.80

HIGH = "high"
MODERATE = "moderate"
TIGHT = "tight"
NOT_ACHIEVABLE = "not_achievable"


@dataclass(frozen=True)
class Evaluation:
    fi_age: int
    projection: list[YearProjection]
    shortfall_year: YearProjection | None
    terminal_balance: float

    @property
    def is_viable(self) -> bool:
        return self.shortfall_year is None


@dataclass(frozen=True)
class ShortfallGuidance:
    runs_out_at_age: int
    spending_reduction_needed: float | None  # $/yr; None = even the largest cut fails
    spending_reduction_ratio: float | None
    additional_savings_needed: float  # $/yr, linear estimate


@dataclass(frozen=True)
class AchievableFIResult:
    achievable_fi_age: int | None
    confidence_level: str
    buffer_years: int
    years_until_fi: int | None
    fi_at_current_age: bool
    terminal_balance: float | None = None
    shortfall_guidance: ShortfallGuidance | None = None


def _with_profile(plan: PlanConfig, **changes) -> PlanConfig:
    return dataclasses.replace(plan, profile=dataclasses.replace(plan.profile, **changes))


def evaluate(
    plan: PlanConfig,
    fi_age: int,
    what_if: WhatIf | None = None,
    current_year: int | None = None,
    life_expectancy: int | None = None,
) -> Evaluation:
    """Run the projection with the FI age (and optionally the horizon) overridden."""
    changes = {"target_fi_age": fi_age}
    if life_expectancy is not None:
        changes["life_expectancy"] = life_expectancy
    projection = calculate_projection(_with_profile(plan, **changes), what_if, current_year)
    shortfall = next((p for p in projection if p.is_shortfall), None)
    terminal = projection[-1].total_net_worth if projection else 0.0
    return Evaluation(fi_age, projection, shortfall, terminal)


def is_viable(
    plan: PlanConfig,
    fi_age: int,
    what_if: WhatIf | None = None,
    current_year: int | None = None,
) -> bool:
    return evaluate(plan, fi_age, what_if, current_year).is_viable


def classify_confidence(buffer_years: int) -> str:
    if buffer_years >= HIGH_CONFIDENCE_BUFFER:
        return HIGH
    if buffer_years >= MODERATE_CONFIDENCE_BUFFER:
        return MODERATE
    return TIGHT


def _depletion_buffer(
    plan: PlanConfig, fi_age: int, what_if: WhatIf | None, current_year: int,
) -> int:
    """Years past life expectancy the money lasts, probing out to PROBE_MAX_AGE."""
    probe = evaluate(plan, fi_age, what_if, current_year, life_expectancy=PROBE_MAX_AGE)
    depletion_age = probe.shortfall_year.age if probe.shortfall_year else PROBE_MAX_AGE + 1
    return (depletion_age - 1) - plan.profile.life_expectancy


def latest_fi_age(plan: PlanConfig) -> int:
    return max(plan.profile.current_age, plan.profile.life_expectancy - 1)


def calculate_shortfall_guidance(
    plan: PlanConfig,
    what_if: WhatIf | None = None,
    current_year: int | None = None,
) -> ShortfallGuidance:
    """Actionable numbers for a plan with no viable FI age."""
    if what_if is None:
        what_if = WhatIf()
    current_year = resolve_current_year(current_year)
    profile = plan.profile
    fi_age = latest_fi_age(plan)

    probe = evaluate(plan, fi_age, what_if, current_year, life_expectancy=PROBE_MAX_AGE)
    runs_out_at_age = probe.shortfall_year.age if probe.shortfall_year else profile.life_expectancy

    multiplier = what_if.spending_multiplier
    reduction_needed = None
    reduction_ratio = None
    steps = round(MAX_SPENDING_CUT / SPENDING_CUT_STEP)
    for step in range(1, steps + 1):
        cut = step * SPENDING_CUT_STEP
        trial = dataclasses.replace(what_if, spending_adjustment=multiplier * (1 - cut) - 1)
        if is_viable(plan, fi_age, trial, current_year):
            base = base_annual_spending(plan.expenses, current_year)
            reduction_needed = round(base * multiplier * cut)
            reduction_ratio = cut
            break

    at_latest = evaluate(plan, fi_age, what_if, current_year)
    unmet_total = sum(p.unmet_need for p in at_latest.projection if p.is_shortfall)
    years_to_le = profile.life_expectancy - profile.current_age
    additional_savings = round(unmet_total / years_to_le) if years_to_le > 0 else 0

    return ShortfallGuidance(
        runs_out_at_age=runs_out_at_age,
        spending_reduction_needed=reduction_needed,
        spending_reduction_ratio=reduction_ratio,
        additional_savings_needed=additional_savings,
    )


def calculate_achievable_fi_age(
    plan: PlanConfig,
    what_if: WhatIf | None = None,
    current_year: int | None = None,
) -> AchievableFIResult:
    """Scan every candidate FI age and pick the best viable one.

    Among viable ages the winner's terminal balance is closest to
    assumptions.terminal_balance_target; ties go to the younger age. Every age
    is evaluated because distance to the target is not monotone in FI age.
    """
    current_year = resolve_current_year(current_year)
    current_age = plan.profile.current_age
    target = plan.assumptions.terminal_balance_target

    best: Evaluation | None = None
    best_distance = 0.0
    for fi_age in range(current_age, latest_fi_age(plan) + 1):
        result = evaluate(plan, fi_age, what_if, current_year)
        if not result.is_viable:
            continue
        distance = abs(result.terminal_balance - target)
        if best is None or distance < best_distance:
            best = result
            best_distance = distance

    if best is None:
        return AchievableFIResult(
            achievable_fi_age=None,
            confidence_level=NOT_ACHIEVABLE,
            buffer_years=0,
            years_until_fi=None,
            fi_at_current_age=False,
            shortfall_guidance=calculate_shortfall_guidance(plan, what_if, current_year),
        )

    buffer = _depletion_buffer(plan, best.fi_age, what_if, current_year)
    return AchievableFIResult(
        achievable_fi_age=best.fi_age,
        confidence_level=classify_confidence(buffer),
        buffer_years=buffer,
        years_until_fi=best.fi_age - current_age,
        fi_at_current_age=best.fi_age == current_age,
        terminal_balance=best.terminal_balance,
    )
