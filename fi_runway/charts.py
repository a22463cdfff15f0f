"""Chart generation for projection results."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from fi_runway.params import LifeEvent
from fi_runway.scenarios import ScenarioResult
from fi_runway.simulation import YearProjection

# Account type color mapping
BALANCE_COLORS = {
    "cash": "#8c8c8c",
    "taxable": "#1f77b4",
    "traditional": "#ff7f0e",
    "roth": "#2ca02c",
    "hsa": "#9467bd",
}

SCENARIO_COLORS = {
    "pessimistic": "#d62728",
    "baseline": "#1f77b4",
    "optimistic": "#2ca02c",
}

DEFAULT_COLOR = "#7f7f7f"
SHORTFALL_COLOR = "#d62728"


def _format_dollar_axis(ax: plt.Axes):
    """Thousands separators on the left axis, $M labels on the right."""
    ax.yaxis.set_major_formatter(ticker.FuncFormatter(lambda x, _: f"${x:,.0f}"))
    ax_right = ax.secondary_yaxis("right")
    ax_right.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"${x / 1_000_000:.1f}M" if x != 0 else "0")
    )


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return filepath


def _mark_events(ax: plt.Axes, projection: list[YearProjection], life_events: tuple[LifeEvent, ...]):
    """Dotted line and label at the age of each life event."""
    age_by_year = {p.year: p.age for p in projection}
    y_lo, y_hi = ax.get_ylim()
    for i, event in enumerate(sorted(life_events, key=lambda e: e.year)):
        age = age_by_year.get(event.year)
        if age is None:
            continue
        color = SHORTFALL_COLOR if event.amount > 0 else "#27ae60"
        sign = "-" if event.amount > 0 else "+"
        ax.axvline(age, color="#888888", linewidth=0.7, linestyle=":", alpha=0.5, zorder=3)
        ax.annotate(
            f"{event.name} {sign}${abs(event.amount):,.0f}",
            xy=(age, y_lo + (y_hi - y_lo) * (0.90 - 0.06 * (i % 5))),
            fontsize=9, color=color, ha="center",
            bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=color, alpha=0.9, linewidth=0.8),
            zorder=10,
        )


def plot_balances(
    projection: list[YearProjection],
    output_path: Path,
    name: str = "",
    fi_age: int | None = None,
    life_events: tuple[LifeEvent, ...] = (),
) -> Path:
    """Stacked ending balances by account type.

    Args:
        projection: calculate_projection() output.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "base" -> balances-base.png).
        fi_age: draws a marker at the FI age when given.
        life_events: one-time events to annotate.

    Returns:
        Path to the generated PNG file.
    """
    if not projection:
        raise ValueError("No projection rows for balance chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [p.age for p in projection]
    series = {
        "cash": [p.cash_balance for p in projection],
        "taxable": [p.taxable_balance for p in projection],
        "traditional": [p.traditional_balance for p in projection],
        "roth": [p.roth_balance for p in projection],
        "hsa": [p.hsa_balance for p in projection],
    }
    ax.stackplot(
        ages,
        *series.values(),
        labels=[k.capitalize() if k != "hsa" else "HSA" for k in series],
        colors=[BALANCE_COLORS[k] for k in series],
        alpha=0.8,
    )

    if fi_age is not None:
        ax.axvline(fi_age, color="black", linewidth=1.5, linestyle="--")
        ax.annotate(f"FI at {fi_age}", xy=(fi_age, ax.get_ylim()[1] * 0.95), fontsize=11, ha="left")

    shortfall = next((p for p in projection if p.is_shortfall), None)
    if shortfall is not None:
        ax.axvline(shortfall.age, color=SHORTFALL_COLOR, linewidth=2, linestyle=":")
        ax.annotate(
            f"Runs out at {shortfall.age}",
            xy=(shortfall.age, ax.get_ylim()[1] * 0.85),
            fontsize=11, fontweight="bold", color=SHORTFALL_COLOR, ha="right",
            bbox=dict(boxstyle="round,pad=0.3", fc="white", ec=SHORTFALL_COLOR, alpha=0.9),
        )

    if life_events:
        _mark_events(ax, projection, life_events)

    ax.set_xlabel("Age")
    ax.set_ylabel("Ending balance")
    ax.set_title("Balances by account type")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)
    return _save(fig, output_path, "balances", name)


def plot_cashflow(
    projection: list[YearProjection],
    output_path: Path,
    name: str = "",
) -> Path:
    """Income sources stacked against total expenses, with withdrawals on top."""
    if not projection:
        raise ValueError("No projection rows for cashflow chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    ages = [p.age for p in projection]
    other = [
        max(0.0, p.income - p.social_security_income - p.pension_income - p.retirement_income)
        for p in projection
    ]
    ax.stackplot(
        ages,
        [p.employment_income for p in projection],
        [p.social_security_income for p in projection],
        [p.pension_income for p in projection],
        [p.retirement_income for p in projection],
        other,
        [p.withdrawal - p.withdrawal_penalty - p.federal_tax - p.state_tax for p in projection],
        labels=["Employment (net)", "Social Security", "Pension", "Retirement income", "Other inflows", "Withdrawals (net)"],
        colors=["#66c2a5", "#8da0cb", "#e78ac3", "#a6d854", "#ffd92f", "#fc8d62"],
        alpha=0.75,
    )
    ax.plot(ages, [p.expenses for p in projection], color="black", linewidth=2, label="Expenses")

    shortfall_ages = [p.age for p in projection if p.is_shortfall]
    if shortfall_ages:
        ax.axvspan(shortfall_ages[0], shortfall_ages[-1], color=SHORTFALL_COLOR, alpha=0.08, label="Shortfall")

    ax.set_xlabel("Age")
    ax.set_ylabel("Annual cash flow")
    ax.set_title("Cash flow (nominal)")
    ax.axhline(0, color="black", linewidth=1.0)
    ax.legend(loc="upper left", fontsize=9)
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)
    return _save(fig, output_path, "cashflow", name)


def plot_scenarios(
    results: dict[str, ScenarioResult],
    output_path: Path,
    name: str = "",
) -> Path:
    """Net worth trajectory per assumption scenario."""
    if not results:
        raise ValueError("No scenario results for chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    for scenario, result in results.items():
        ages = [p.age for p in result.projection]
        net_worth = [p.total_net_worth for p in result.projection]
        fi_age = result.achievable.achievable_fi_age
        label = f"{scenario} (FI {fi_age})" if fi_age is not None else f"{scenario} (not achievable)"
        ax.plot(ages, net_worth, label=label, color=SCENARIO_COLORS.get(scenario, DEFAULT_COLOR), linewidth=2)

    ax.set_xlabel("Age")
    ax.set_ylabel("Total net worth")
    ax.set_title("Net worth by scenario (target FI age)")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_dollar_axis(ax)
    return _save(fig, output_path, "scenarios", name)
