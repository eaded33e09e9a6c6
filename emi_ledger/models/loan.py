"""Loan and EMI payment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from emi_ledger.models.enums import EmiPaymentStatus, LoanStatus, PaymentMethod
from emi_ledger.money import ZERO


@dataclass(frozen=True)
class EmiPayment:
    """A single applied EMI payment. Append-only, never edited."""

    transaction_id: str
    loan_id: str
    payment_date: date
    amount_paid: Decimal  # principal_component + interest_component
    principal_component: Decimal
    interest_component: Decimal
    balance_after: Decimal
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    status: EmiPaymentStatus = EmiPaymentStatus.COMPLETED
    excess_amount: Decimal = ZERO  # Tendered beyond what settled the loan
    created_at: datetime | None = None


@dataclass
class Loan:
    """Medical loan aggregate.

    ``principal``, ``annual_interest_rate_percent`` and ``term_months`` are
    written only by approval. ``remaining_balance``, ``next_due_date`` and
    ``payment_history`` are written only by the EMI ledger.
    """

    loan_id: str
    owner_id: str
    uhid: str  # Health identity handle issued after KYC
    application_number: str  # ML{year}{seq:06d}
    status: LoanStatus
    requested_amount: Decimal
    created_at: datetime
    principal: Decimal = ZERO
    annual_interest_rate_percent: Decimal = ZERO
    term_months: int = 0
    monthly_payment: Decimal = ZERO
    remaining_balance: Decimal = ZERO
    interest_arrears: Decimal = ZERO  # Unpaid interest carried forward
    next_due_date: date | None = None
    payment_history: list[EmiPayment] = field(default_factory=list)
    disbursed_to_wallet: bool = False
    credit_score: int | None = None
    max_eligible_amount: Decimal | None = None
    rejection_reason: str | None = None
    submission_date: date | None = None
    approval_date: date | None = None
    completion_date: date | None = None
    updated_at: datetime | None = None
    version: int = 0  # Optimistic concurrency revision, owned by the store

    @property
    def periods_paid(self) -> int:
        """Number of completed payments applied so far."""
        return sum(1 for p in self.payment_history if p.status == EmiPaymentStatus.COMPLETED)

    @property
    def total_principal_paid(self) -> Decimal:
        return sum((p.principal_component for p in self.payment_history), ZERO)

    @property
    def total_interest_paid(self) -> Decimal:
        return sum((p.interest_component for p in self.payment_history), ZERO)
