"""CLI entry point for a single plan report."""

import sys

from fi_runway.config import build_plan, build_what_if, parse_args
from fi_runway.fi_search import AchievableFIResult, calculate_achievable_fi_age
from fi_runway.params import PlanConfig, WhatIf
from fi_runway.scenarios import run_scenarios
from fi_runway.simulation import YearProjection, calculate_projection, resolve_current_year, validate_plan
from fi_runway.summary import ProjectionSummary, calculate_summary
from fi_runway.tax import format_state_tax_hint


def _print_header(plan: PlanConfig, what_if: WhatIf, current_year: int):
    p = plan.profile
    a = plan.assumptions
    years = p.life_expectancy - p.current_age
    print("=" * 80)
    print(f"FI runway projection (age {p.current_age}-{p.life_expectancy}, {years} years from {current_year})")
    household = "single" if not p.is_married else f"married, spouse age {p.spouse_age}"
    print(f"  Household: {household} / {format_state_tax_hint(p.jurisdiction)}")
    print(f"  Target FI age: {p.target_fi_age}")
    print(f"  Return {a.investment_return * 100:.1f}% / inflation {a.inflation_rate * 100:.1f}% / SWR {a.safe_withdrawal_rate * 100:.1f}%")
    if a.fi_phase_return is not None:
        print(f"  Return after FI: {a.fi_phase_return * 100:.1f}%")
    print(f"  Withdrawal order: cash -> {' -> '.join(a.withdrawal_order)} -> hsa")
    if what_if.spending_adjustment:
        print(f"  What-if spending: {what_if.spending_adjustment * 100:+.0f}%")
    if what_if.return_override is not None:
        print(f"  What-if return: {what_if.return_override * 100:.1f}%")
    if what_if.ss_claiming_age is not None:
        print(f"  What-if SS claiming age: {what_if.ss_claiming_age}")
    print("=" * 80)
    print()


def _print_achievable(result: AchievableFIResult):
    print("[Achievable FI age]")
    if result.achievable_fi_age is None:
        g = result.shortfall_guidance
        print("  Not achievable before life expectancy")
        print(f"  Money runs out at age {g.runs_out_at_age}")
        if g.spending_reduction_needed is None:
            print("  Spending cut needed: more than 80%")
        else:
            print(f"  Spending cut needed: ${g.spending_reduction_needed:,.0f}/yr ({g.spending_reduction_ratio * 100:.0f}%)")
        print(f"  Or save about ${g.additional_savings_needed:,.0f}/yr more")
        return
    if result.fi_at_current_age:
        print(f"  Already financially independent at {result.achievable_fi_age}")
    else:
        print(f"  Age {result.achievable_fi_age} ({result.years_until_fi} years from now)")
    print(f"  Confidence: {result.confidence_level} (money lasts {result.buffer_years} years past life expectancy)")
    print(f"  Balance at life expectancy: ${result.terminal_balance:,.0f}")


def _print_summary(summary: ProjectionSummary):
    print("\n[Summary at target FI age]")
    print(f"  FI number:         ${summary.fi_number:>14,.0f}")
    print(f"  Current net worth: ${summary.current_net_worth:>14,.0f}")
    print(f"  Gap:               ${summary.gap:>14,.0f}")
    print(f"  Runway age:        {summary.runway_age} ({summary.buffer_years:+d} years vs life expectancy)")
    print(f"  Balance at LE:     ${summary.surplus_at_le:>14,.0f}")
    if summary.home_equity is not None:
        print(f"  Home equity:       ${summary.home_equity:>14,.0f} (not counted in net worth)")
    if summary.bottleneck_age is not None:
        print(f"  Lowest FI balance: ${summary.bottleneck_balance:>14,.0f} at age {summary.bottleneck_age}")
    if summary.has_shortfall:
        print(f"  Shortfall from age {summary.shortfall_age}")


def _print_yearly_log(projection: list[YearProjection]):
    print("\n[Yearly log (every 5 years)]")
    print("-" * 100)
    print(f"{'Age':<5} {'Year':<6} {'Phase':<13} {'Expenses':>12} {'Income':>12} {'Withdrawal':>12} {'Net worth':>14}  Source")
    print("-" * 100)
    for i, row in enumerate(projection):
        if i % 5 == 0 or i == len(projection) - 1 or (row.is_shortfall and not projection[i - 1].is_shortfall):
            income = row.employment_income + row.income
            flag = " !" if row.is_shortfall else ""
            print(
                f"{row.age:<5} {row.year:<6} {row.phase:<13} "
                f"{row.expenses:>12,.0f} {income:>12,.0f} {row.withdrawal:>12,.0f} "
                f"{row.total_net_worth:>14,.0f}  {row.withdrawal_source}{flag}"
            )
    print("-" * 100)


def _print_scenarios(plan: PlanConfig, what_if: WhatIf, current_year: int):
    print("\n[Scenarios]")
    results = run_scenarios(plan, what_if, current_year)
    print(f"{'Scenario':<14} {'FI age':>7} {'Confidence':>15} {'Balance at LE':>16}")
    for name, result in results.items():
        age = result.achievable.achievable_fi_age
        print(
            f"{name:<14} {age if age is not None else '-':>7} "
            f"{result.achievable.confidence_level:>15} {result.summary.surplus_at_le:>16,.0f}"
        )


def _add_cli_args(parser):
    parser.add_argument("--scenarios", action="store_true", help="Also compare pessimistic/baseline/optimistic assumptions")


def main():
    """Print the FI runway report for one plan file."""
    r, raw, args = parse_args("FI runway projection", _add_cli_args)
    try:
        plan = build_plan(raw, r)
    except ValueError as e:
        print(f"\n{e}\n", file=sys.stderr)
        raise SystemExit(1)
    what_if = build_what_if(r)
    current_year = resolve_current_year(r["current_year"])

    errors = validate_plan(plan)
    if errors:
        print("Plan has problems:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        raise SystemExit(1)

    _print_header(plan, what_if, current_year)
    print("Searching FI ages...", file=sys.stderr)
    _print_achievable(calculate_achievable_fi_age(plan, what_if, current_year))

    projection = calculate_projection(plan, what_if, current_year)
    _print_summary(calculate_summary(plan, projection, what_if, current_year))
    _print_yearly_log(projection)

    if args.scenarios:
        print("Running scenarios...", file=sys.stderr)
        _print_scenarios(plan, what_if, current_year)


if __name__ == "__main__":
    main()
