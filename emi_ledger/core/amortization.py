"""Fixed-payment amortization calculator."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from emi_ledger.dates import due_date
from emi_ledger.exceptions import InvalidArgumentError
from emi_ledger.models.enums import DueDatePolicy
from emi_ledger.models.schedule import AmortizationSchedule, PeriodEntry
from emi_ledger.money import ZERO, monthly_rate, to_money

logger = logging.getLogger(__name__)


def validate_terms(
    principal: Decimal | int | str,
    annual_rate_percent: Decimal | int | str,
    term_months: int,
) -> tuple[Decimal, Decimal, int]:
    """Coerce and validate loan terms.

    Returns
    -------
    tuple[Decimal, Decimal, int]
        Principal quantized to currency precision, the annual rate and the
        term.

    Raises
    ------
    InvalidArgumentError
        If the principal or term is not positive, or the rate is negative.
    """
    try:
        amount = to_money(principal)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"principal is not a valid amount: {principal!r}") from exc
    if amount <= 0:
        raise InvalidArgumentError(f"principal must be positive, got {amount}")

    if isinstance(annual_rate_percent, float):
        raise InvalidArgumentError("annual rate must be Decimal, int or str, not float")
    try:
        rate = Decimal(annual_rate_percent)
    except (TypeError, ArithmeticError) as exc:
        raise InvalidArgumentError(f"annual rate is not a number: {annual_rate_percent!r}") from exc
    if not rate.is_finite() or rate < 0:
        raise InvalidArgumentError(f"annual rate must be non-negative, got {annual_rate_percent}")

    if isinstance(term_months, bool) or not isinstance(term_months, int):
        raise InvalidArgumentError(f"term must be an integer number of months, got {term_months!r}")
    if term_months <= 0:
        raise InvalidArgumentError(f"term must be positive, got {term_months}")

    return amount, rate, term_months


def monthly_payment(
    principal: Decimal | int | str,
    annual_rate_percent: Decimal | int | str,
    term_months: int,
) -> Decimal:
    """Fixed monthly payment (EMI) for a loan.

    ``P * r * (1+r)^n / ((1+r)^n - 1)``, or ``P / n`` when the rate is zero.
    The result is rounded half-up to currency precision.
    """
    amount, rate, n = validate_terms(principal, annual_rate_percent, term_months)
    r = monthly_rate(rate)
    if r == 0:
        return to_money(amount / n)
    growth = (1 + r) ** n
    if growth == 1:
        # Rate too small to register at context precision
        return to_money(amount / n)
    return to_money(amount * r * growth / (growth - 1))


def compute_schedule(
    principal: Decimal | int | str,
    annual_rate_percent: Decimal | int | str,
    term_months: int,
    start_date: date | None = None,
    due_date_policy: DueDatePolicy = DueDatePolicy.CALENDAR_MONTH,
) -> AmortizationSchedule:
    """Compute the monthly payment and the full per-period schedule.

    Interest for each period is charged on the opening balance and rounded
    to the cent; the rest of the payment reduces principal. The last period,
    or the first period whose principal share would clear the balance, pays
    off exactly the remaining balance, so principal components always sum to
    the principal.

    Parameters
    ----------
    principal : Decimal | int | str
        Amount borrowed. Must be positive.
    annual_rate_percent : Decimal | int | str
        Annual rate in percent (``12`` for 12%). Zero is allowed.
    term_months : int
        Number of monthly installments. Must be positive.
    start_date : date | None
        Approval date. When given, each entry carries its due date.
    due_date_policy : DueDatePolicy
        How due dates advance from ``start_date``.

    Returns
    -------
    AmortizationSchedule
        Payment and entries in installment order.
    """
    amount, rate, n = validate_terms(principal, annual_rate_percent, term_months)
    r = monthly_rate(rate)
    payment = monthly_payment(amount, rate, n)

    entries: list[PeriodEntry] = []
    balance = amount
    for i in range(1, n + 1):
        interest = to_money(balance * r)
        principal_part = payment - interest
        if i == n or principal_part >= balance:
            principal_part = balance
        balance = max(ZERO, balance - principal_part)

        entries.append(
            PeriodEntry(
                installment_number=i,
                payment=principal_part + interest,
                principal_component=principal_part,
                interest_component=interest,
                balance_after=balance,
                due_date=due_date(start_date, i, due_date_policy) if start_date else None,
            )
        )
        if balance == 0:
            break

    logger.debug(
        "Schedule for %s at %s%% over %d months: payment=%s, periods=%d",
        amount,
        rate,
        n,
        payment,
        len(entries),
    )

    return AmortizationSchedule(
        principal=amount,
        annual_interest_rate_percent=rate,
        term_months=n,
        monthly_payment=payment,
        entries=entries,
    )
