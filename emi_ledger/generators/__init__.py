"""Sample data generators."""

from emi_ledger.generators.borrower import BorrowerGenerator, WalletGenerator
from emi_ledger.generators.loan import LoanApplicationGenerator, LoanRequest

__all__ = [
    "BorrowerGenerator",
    "LoanApplicationGenerator",
    "LoanRequest",
    "WalletGenerator",
]
