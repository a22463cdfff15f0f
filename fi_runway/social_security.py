"""Social Security claiming-age adjustment and COLA."""

FULL_RETIREMENT_AGE = 67

# Claiming age -> multiplier on the full-retirement-age benefit
SS_ADJUSTMENT_FACTORS: dict[int, float] = {
    62: 0.70,
    67: 1.00,
    70: 1.24,
}


def validate_claiming_age(claiming_age: int) -> None:
    """Raise ValueError if claiming_age is not one of 62, 67 or 70."""
    if claiming_age not in SS_ADJUSTMENT_FACTORS:
        allowed = ", ".join(str(a) for a in SS_ADJUSTMENT_FACTORS)
        raise ValueError(f"Unsupported claiming age {claiming_age} (allowed: {allowed})")


def adjusted_benefit(fra_monthly_benefit: float, claiming_age: int) -> float:
    """Monthly benefit after the early/delayed claiming adjustment."""
    validate_claiming_age(claiming_age)
    return fra_monthly_benefit * SS_ADJUSTMENT_FACTORS[claiming_age]


def annual_benefit(
    fra_monthly_benefit: float, claiming_age: int, age: int, cola_rate: float,
) -> float:
    """Benefit received in the year the claimant is `age`.

    COLA compounds from the claiming year: adjusted * 12 * (1+cola)^(age - claiming_age).
    """
    if age < claiming_age:
        return 0.0
    monthly = adjusted_benefit(fra_monthly_benefit, claiming_age)
    return monthly * 12 * (1 + cola_rate) ** (age - claiming_age)
