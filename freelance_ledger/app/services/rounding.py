"""Billable-minute rounding policies."""

from decimal import Decimal, ROUND_HALF_UP

from freelance_ledger.app.core.errors import ValidationError

ROUNDING_STEPS = {
    "NONE": None,
    "NEAREST_5": 5,
    "NEAREST_15": 15,
}


def round_minutes(minutes: int, policy: str | None) -> int:
    """Round a raw duration to the policy's step; halves round up.

    Only summaries apply this. Stored durations keep the raw value.
    """
    if policy is None:
        policy = "NONE"
    if policy not in ROUNDING_STEPS:
        raise ValidationError(f"Unknown rounding policy: {policy}")
    step = ROUNDING_STEPS[policy]
    if step is None:
        return minutes
    steps = (Decimal(minutes) / Decimal(step)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(steps) * step
