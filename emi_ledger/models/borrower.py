"""Borrower model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from emi_ledger.models.enums import KycStatus


@dataclass
class Borrower:
    """Loan applicant as seen by the ledger.

    Identity verification happens elsewhere; the ledger only reads the
    resulting ``kyc_status`` and ``uhid``.
    """

    owner_id: str
    name: str
    email: str
    phone: str
    uhid: str  # UH + 11 digits, issued after KYC
    kyc_status: KycStatus
    credit_score: int  # 300-900
    monthly_income: Decimal
    created_at: datetime
