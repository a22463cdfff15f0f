"""State tax table and penalty-free withdrawal ages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StateTaxInfo:
    code: str
    name: str
    has_income_tax: bool
    income_rate: float  # simplified effective rate for retirement withdrawals
    capital_gains_rate: float


# Simplified effective rates for all 50 states + DC
# (code, name, has_income_tax, income_rate, capital_gains_rate)
_STATE_TAX_ROWS: tuple[tuple[str, str, bool, float, float], ...] = (
    # No income tax (NH taxes only interest/dividends)
    ("AK", "Alaska", False, 0.0, 0.0),
    ("FL", "Florida", False, 0.0, 0.0),
    ("NV", "Nevada", False, 0.0, 0.0),
    ("NH", "New Hampshire", False, 0.0, 0.0),
    ("SD", "South Dakota", False, 0.0, 0.0),
    ("TN", "Tennessee", False, 0.0, 0.0),
    ("TX", "Texas", False, 0.0, 0.0),
    ("WA", "Washington", False, 0.0, 0.07),  # capital gains only
    ("WY", "Wyoming", False, 0.0, 0.0),
    # Flat-rate states
    ("AZ", "Arizona", True, 0.025, 0.025),
    ("CO", "Colorado", True, 0.044, 0.044),
    ("ID", "Idaho", True, 0.058, 0.058),
    ("IL", "Illinois", True, 0.0495, 0.0495),
    ("IN", "Indiana", True, 0.0305, 0.0305),
    ("KY", "Kentucky", True, 0.04, 0.04),
    ("MA", "Massachusetts", True, 0.05, 0.09),
    ("MI", "Michigan", True, 0.0425, 0.0425),
    ("NC", "North Carolina", True, 0.0475, 0.0475),
    ("ND", "North Dakota", True, 0.0195, 0.0195),
    ("PA", "Pennsylvania", True, 0.0307, 0.0307),
    ("UT", "Utah", True, 0.0465, 0.0465),
    # Progressive states, approximated at the $80-150k income range
    ("AL", "Alabama", True, 0.05, 0.05),
    ("AR", "Arkansas", True, 0.044, 0.044),
    ("CA", "California", True, 0.093, 0.093),
    ("CT", "Connecticut", True, 0.055, 0.07),
    ("DE", "Delaware", True, 0.066, 0.066),
    ("DC", "District of Columbia", True, 0.085, 0.085),
    ("GA", "Georgia", True, 0.0549, 0.0549),
    ("HI", "Hawaii", True, 0.0825, 0.075),
    ("IA", "Iowa", True, 0.057, 0.057),
    ("KS", "Kansas", True, 0.057, 0.057),
    ("LA", "Louisiana", True, 0.0425, 0.0425),
    ("ME", "Maine", True, 0.0715, 0.0715),
    ("MD", "Maryland", True, 0.0575, 0.0575),
    ("MN", "Minnesota", True, 0.0785, 0.0785),
    ("MS", "Mississippi", True, 0.05, 0.05),
    ("MO", "Missouri", True, 0.048, 0.048),
    ("MT", "Montana", True, 0.059, 0.046),
    ("NE", "Nebraska", True, 0.0584, 0.0584),
    ("NJ", "New Jersey", True, 0.0637, 0.0637),
    ("NM", "New Mexico", True, 0.049, 0.049),
    ("NY", "New York", True, 0.0685, 0.0685),
    ("OH", "Ohio", True, 0.035, 0.035),
    ("OK", "Oklahoma", True, 0.0475, 0.0475),
    ("OR", "Oregon", True, 0.09, 0.09),
    ("RI", "Rhode Island", True, 0.0599, 0.0599),
    ("SC", "South Carolina", True, 0.064, 0.064),
    ("VT", "Vermont", True, 0.0675, 0.0675),
    ("VA", "Virginia", True, 0.0575, 0.0575),
    ("WV", "West Virginia", True, 0.055, 0.055),
    ("WI", "Wisconsin", True, 0.0627, 0.0627),
)

STATE_TAX_DATA: dict[str, StateTaxInfo] = {
    row[0]: StateTaxInfo(*row) for row in _STATE_TAX_ROWS
}

# Age at which each account type can be withdrawn without penalty
PENALTY_FREE_AGES: dict[str, float] = {
    "cash": 0,
    "taxable": 0,
    "529": 0,
    "other": 0,
    "traditional": 59.5,
    "roth": 59.5,
    "hsa": 65,
}

RULE_OF_55_AGE = 55  # 401(k) separation-from-service exception


def state_tax_info(code: str) -> StateTaxInfo:
    """Return the tax rates for a two-letter state code.

    Raises ValueError for codes outside the table.
    """
    info = STATE_TAX_DATA.get(code.upper())
    if info is None:
        raise ValueError(f"Unknown state code: {code}")
    return info


def format_state_tax_hint(code: str) -> str:
    """One-line description of a state's rates, e.g. "California: 9.3% income / 9.3% cap gains"."""
    info = state_tax_info(code)
    if not info.has_income_tax and info.capital_gains_rate == 0:
        return f"{info.name}: no state income tax"
    return (
        f"{info.name}: {info.income_rate * 100:.1f}% income"
        f" / {info.capital_gains_rate * 100:.1f}% cap gains"
    )
