"""Amortization, eligibility, EMI ledger and disbursement."""

from emi_ledger.core.amortization import compute_schedule, monthly_payment
from emi_ledger.core.disbursement import disburse_to_wallet, top_up
from emi_ledger.core.eligibility import CREDIT_TIERS, evaluate
from emi_ledger.core.events import EventPublisher
from emi_ledger.core.ledger import EmiLedger
from emi_ledger.core.service import LedgerService

__all__ = [
    "CREDIT_TIERS",
    "EmiLedger",
    "EventPublisher",
    "LedgerService",
    "compute_schedule",
    "disburse_to_wallet",
    "evaluate",
    "monthly_payment",
    "top_up",
]
