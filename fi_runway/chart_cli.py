"""CLI entry point for chart generation."""

import sys
from pathlib import Path

from fi_runway.charts import plot_balances, plot_cashflow, plot_scenarios
from fi_runway.config import build_plan, build_what_if, create_parser, load_config, resolve
from fi_runway.fi_search import calculate_achievable_fi_age, evaluate
from fi_runway.scenarios import run_scenarios
from fi_runway.simulation import calculate_projection, resolve_current_year, validate_plan


def _build_parser():
    parser = create_parser("FI runway chart generation")
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="Output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--no-scenarios", action="store_true",
        help="Skip the scenario comparison chart (faster)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="Output filename suffix (e.g. base -> balances-base.png)",
    )
    return parser


def main():
    parser = _build_parser()
    args = parser.parse_args()
    raw = load_config(args.config)
    r = resolve(args, raw)
    try:
        plan = build_plan(raw, r)
    except ValueError as e:
        print(f"\n{e}\n", file=sys.stderr)
        raise SystemExit(1)
    errors = validate_plan(plan)
    if errors:
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        raise SystemExit(1)

    what_if = build_what_if(r)
    current_year = resolve_current_year(r["current_year"])
    output_dir = args.output

    print(f"Projecting age {plan.profile.current_age} to {plan.profile.life_expectancy}...", file=sys.stderr)
    projection = calculate_projection(plan, what_if, current_year)
    achievable = calculate_achievable_fi_age(plan, what_if, current_year)

    path = plot_balances(
        projection, output_dir, args.name,
        fi_age=plan.profile.target_fi_age, life_events=plan.life_events,
    )
    print(f"  {path}", file=sys.stderr)
    path = plot_cashflow(projection, output_dir, args.name)
    print(f"  {path}", file=sys.stderr)

    if achievable.achievable_fi_age is not None and achievable.achievable_fi_age != plan.profile.target_fi_age:
        best = evaluate(plan, achievable.achievable_fi_age, what_if, current_year).projection
        suffix = f"{args.name}-achievable" if args.name else "achievable"
        path = plot_balances(
            best, output_dir, suffix,
            fi_age=achievable.achievable_fi_age, life_events=plan.life_events,
        )
        print(f"  {path}", file=sys.stderr)

    if not args.no_scenarios:
        print("Running scenarios...", file=sys.stderr)
        path = plot_scenarios(run_scenarios(plan, what_if, current_year), output_dir, args.name)
        print(f"  {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
