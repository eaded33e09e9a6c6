"""Ledger domain models."""

from emi_ledger.models.base import Event
from emi_ledger.models.borrower import Borrower
from emi_ledger.models.enums import (
    ACTIVE_LOAN_STATUSES,
    REVIEWABLE_LOAN_STATUSES,
    CardType,
    DueDatePolicy,
    EmiPaymentStatus,
    KycStatus,
    LoanStatus,
    PaymentMethod,
    ScheduleEntryStatus,
    ShortfallPolicy,
    WalletStatus,
)
from emi_ledger.models.loan import EmiPayment, Loan
from emi_ledger.models.schedule import (
    AmortizationSchedule,
    EligibilityResult,
    PeriodEntry,
    ScheduleEntry,
)
from emi_ledger.models.wallet import Disbursement, HealthCardWallet, TopUp

__all__ = [
    "ACTIVE_LOAN_STATUSES",
    "REVIEWABLE_LOAN_STATUSES",
    "AmortizationSchedule",
    "Borrower",
    "CardType",
    "Disbursement",
    "DueDatePolicy",
    "EligibilityResult",
    "EmiPayment",
    "EmiPaymentStatus",
    "Event",
    "HealthCardWallet",
    "KycStatus",
    "Loan",
    "LoanStatus",
    "PaymentMethod",
    "PeriodEntry",
    "ScheduleEntry",
    "ScheduleEntryStatus",
    "ShortfallPolicy",
    "TopUp",
    "WalletStatus",
]
