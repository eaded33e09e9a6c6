"""Loan application generator."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from emi_ledger.generators.base import BaseGenerator
from emi_ledger.models import Borrower


@dataclass(frozen=True)
class LoanRequest:
    """What a borrower asks for when applying."""

    owner_id: str
    requested_amount: Decimal
    term_months: int
    treatment: str


class LoanApplicationGenerator(BaseGenerator):
    """Generate medical loan requests sized to the borrower's income."""

    TERMS = [6, 12, 18, 24, 36, 48, 60]
    TREATMENTS = [
        "Cardiac surgery",
        "Knee replacement",
        "Chemotherapy",
        "Maternity care",
        "Cataract surgery",
        "Dental implants",
        "Kidney dialysis",
    ]

    def generate(self, borrower: Borrower) -> LoanRequest:
        """Generate a loan request for a borrower.

        The requested amount is 2-10x monthly income, rounded to the
        nearest thousand.
        """
        multiplier = Decimal(self.rng.randint(20, 100)) / 10
        amount = (borrower.monthly_income * multiplier / 1000).quantize(Decimal("1")) * 1000
        return LoanRequest(
            owner_id=borrower.owner_id,
            requested_amount=max(Decimal("10000"), amount).quantize(Decimal("0.01")),
            term_months=self.rng.choice(self.TERMS),
            treatment=self.rng.choice(self.TREATMENTS),
        )
