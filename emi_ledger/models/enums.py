"""Enumeration types for ledger entities and policies."""

from enum import Enum


class LoanStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    DISBURSED = "disbursed"
    COMPLETED = "completed"
    REJECTED = "rejected"


# Statuses in which the ledger accepts EMI payments
ACTIVE_LOAN_STATUSES = frozenset({LoanStatus.APPROVED, LoanStatus.DISBURSED})

# Statuses from which an approval decision can still be taken
REVIEWABLE_LOAN_STATUSES = frozenset({LoanStatus.SUBMITTED, LoanStatus.UNDER_REVIEW})


class KycStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHEQUE = "cheque"


class EmiPaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ScheduleEntryStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class WalletStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"
    SUSPENDED = "suspended"
    REJECTED = "rejected"


class CardType(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    RICARE_DISCOUNT = "ricare_discount"


class ShortfallPolicy(str, Enum):
    """What to do with a payment smaller than the accrued interest."""

    REJECT = "reject"
    CARRY_INTEREST = "carry_interest"


class DueDatePolicy(str, Enum):
    """How installment due dates advance from the approval date."""

    CALENDAR_MONTH = "calendar_month"
    FIXED_30_DAY = "fixed_30_day"
