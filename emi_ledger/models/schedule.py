"""Amortization schedule and eligibility result models."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from emi_ledger.models.enums import ScheduleEntryStatus
from emi_ledger.money import ZERO


@dataclass(frozen=True)
class PeriodEntry:
    """One period of a computed amortization schedule."""

    installment_number: int  # 1, 2, 3, ...
    payment: Decimal
    principal_component: Decimal
    interest_component: Decimal
    balance_after: Decimal
    due_date: date | None = None


@dataclass
class AmortizationSchedule:
    """Fixed-payment schedule for a principal, rate and term."""

    principal: Decimal
    annual_interest_rate_percent: Decimal
    term_months: int
    monthly_payment: Decimal
    entries: list[PeriodEntry] = field(default_factory=list)

    @property
    def total_interest(self) -> Decimal:
        return sum((e.interest_component for e in self.entries), ZERO)

    @property
    def total_payment(self) -> Decimal:
        return sum((e.payment for e in self.entries), ZERO)


@dataclass(frozen=True)
class ScheduleEntry:
    """Schedule row for display, overlaid with the actual payment if any."""

    installment_number: int
    due_date: date
    emi_amount: Decimal
    principal_component: Decimal
    interest_component: Decimal
    balance_after_payment: Decimal
    status: ScheduleEntryStatus
    paid_date: date | None = None
    transaction_id: str | None = None


@dataclass(frozen=True)
class EligibilityResult:
    """Loan ceiling and rate tier for a credit score."""

    credit_score: int
    max_eligible_amount: Decimal
    annual_interest_rate_percent: Decimal

    @property
    def eligible(self) -> bool:
        return self.max_eligible_amount > 0
