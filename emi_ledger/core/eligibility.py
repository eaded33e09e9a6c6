"""Credit score to loan ceiling and rate tier."""

from decimal import Decimal

from emi_ledger.exceptions import InvalidArgumentError
from emi_ledger.models.schedule import EligibilityResult

# (minimum score, maximum loan amount, annual rate percent), best tier first
CREDIT_TIERS: tuple[tuple[int, Decimal, Decimal], ...] = (
    (750, Decimal("500000.00"), Decimal("10.5")),
    (700, Decimal("300000.00"), Decimal("12.0")),
    (650, Decimal("150000.00"), Decimal("14.0")),
    (600, Decimal("75000.00"), Decimal("16.0")),
)


def evaluate(credit_score: int) -> EligibilityResult:
    """Map a credit score to its loan ceiling and interest rate.

    Tiers are checked top-down and the first match wins. Scores below the
    lowest tier return a result with zero amount and zero rate; check
    ``result.eligible`` rather than catching an error.

    Raises
    ------
    InvalidArgumentError
        If ``credit_score`` is not an integer.
    """
    if isinstance(credit_score, bool) or not isinstance(credit_score, int):
        raise InvalidArgumentError(f"credit score must be an integer, got {credit_score!r}")

    for min_score, max_amount, rate in CREDIT_TIERS:
        if credit_score >= min_score:
            return EligibilityResult(
                credit_score=credit_score,
                max_eligible_amount=max_amount,
                annual_interest_rate_percent=rate,
            )

    return EligibilityResult(
        credit_score=credit_score,
        max_eligible_amount=Decimal("0.00"),
        annual_interest_rate_percent=Decimal("0.0"),
    )
