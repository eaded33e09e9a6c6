"""Loan amortization and EMI ledger for medical financing."""

from emi_ledger.core import (
    EmiLedger,
    EventPublisher,
    LedgerService,
    compute_schedule,
    disburse_to_wallet,
    evaluate,
)

__version__ = "0.1.0"

__all__ = [
    "EmiLedger",
    "EventPublisher",
    "LedgerService",
    "__version__",
    "compute_schedule",
    "disburse_to_wallet",
    "evaluate",
]
