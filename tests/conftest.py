"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from emi_ledger.core import lifecycle
from emi_ledger.core.service import LedgerService
from emi_ledger.models import (
    Borrower,
    HealthCardWallet,
    KycStatus,
    Loan,
    WalletStatus,
)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def approval_date() -> date:
    return date(2024, 1, 15)


@pytest.fixture
def sample_borrower() -> Borrower:
    """KYC-verified borrower."""
    return Borrower(
        owner_id="owner-001",
        name="Asha Rao",
        email="asha@example.com",
        phone="+919800000001",
        uhid="UH12345678001",
        kyc_status=KycStatus.VERIFIED,
        credit_score=720,
        monthly_income=Decimal("60000"),
        created_at=datetime(2023, 6, 1),
    )


@pytest.fixture
def sample_wallet(sample_borrower: Borrower) -> HealthCardWallet:
    """Active wallet owned by the sample borrower."""
    return HealthCardWallet(
        wallet_id="wallet-001",
        card_number="HC0000000001",
        owner_id=sample_borrower.owner_id,
        uhid=sample_borrower.uhid,
        status=WalletStatus.ACTIVE,
        available_balance=Decimal("25000.00"),
        created_at=datetime(2023, 6, 2),
    )


@pytest.fixture
def draft_loan(sample_borrower: Borrower) -> Loan:
    return lifecycle.create_draft(
        owner_id=sample_borrower.owner_id,
        uhid=sample_borrower.uhid,
        kyc_status=KycStatus.VERIFIED,
        requested_amount=Decimal("120000"),
        application_number="ML2024000001",
        loan_id="loan-001",
    )


@pytest.fixture
def approved_loan(draft_loan: Loan, approval_date: date) -> Loan:
    """120000 at 12% over 12 months, approved 2024-01-15."""
    lifecycle.submit(draft_loan, submitted_on=date(2024, 1, 10))
    return lifecycle.approve(draft_loan, Decimal("120000"), Decimal("12"), 12, approval_date=approval_date)


@pytest.fixture
def service(sample_borrower: Borrower, sample_wallet: HealthCardWallet) -> LedgerService:
    """Service with the sample borrower and wallet registered."""
    svc = LedgerService()
    svc.register_borrower(sample_borrower)
    svc.register_wallet(sample_wallet)
    return svc
