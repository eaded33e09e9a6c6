"""Borrower and health-card wallet generators."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterator

from dateutil.relativedelta import relativedelta

from emi_ledger.generators.base import BaseGenerator
from emi_ledger.models import Borrower, CardType, HealthCardWallet, KycStatus, WalletStatus


class BorrowerGenerator(BaseGenerator):
    """Generate synthetic KYC-checked borrowers."""

    KYC_STATUSES = list(KycStatus)
    KYC_WEIGHTS = [0.05, 0.92, 0.03]

    def generate(self) -> Borrower:
        """Generate a single borrower.

        Returns
        -------
        Borrower
            Generated borrower.
        """
        kyc_status = self.rng.choices(self.KYC_STATUSES, weights=self.KYC_WEIGHTS, k=1)[0]
        # Scores cluster around 700 with a long tail below the lending floor
        credit_score = int(max(300, min(900, self.rng.gauss(700, 70))))
        income = Decimal(self.rng.randint(15, 250) * 1000)

        return Borrower(
            owner_id=self.fake.uuid4(),
            name=self.fake.name(),
            email=self.fake.email(),
            phone=self.fake.phone_number(),
            uhid=f"UH{self.rng.randint(0, 10**11 - 1):011d}",
            kyc_status=kyc_status,
            credit_score=credit_score,
            monthly_income=income,
            created_at=datetime.now() - timedelta(days=self.rng.randint(30, 720)),
        )

    def generate_batch(self, count: int) -> Iterator[Borrower]:
        """Generate multiple borrowers.

        Parameters
        ----------
        count : int
            Number of borrowers to generate.

        Yields
        ------
        Borrower
            Generated borrowers.
        """
        for _ in range(count):
            yield self.generate()


class WalletGenerator(BaseGenerator):
    """Generate health-card wallets for borrowers."""

    CARD_TYPES = list(CardType)
    CARD_TYPE_WEIGHTS = [0.70, 0.20, 0.10]

    def generate(self, borrower: Borrower, status: WalletStatus = WalletStatus.ACTIVE) -> HealthCardWallet:
        issue_date = date.today() - timedelta(days=self.rng.randint(0, 365))
        return HealthCardWallet(
            wallet_id=self.fake.uuid4(),
            card_number=f"HC{self.rng.randint(0, 10**10 - 1):010d}",
            owner_id=borrower.owner_id,
            uhid=borrower.uhid,
            status=status,
            available_balance=Decimal("25000.00"),
            card_type=self.rng.choices(self.CARD_TYPES, weights=self.CARD_TYPE_WEIGHTS, k=1)[0],
            issue_date=issue_date,
            expiry_date=issue_date + relativedelta(years=3),
            created_at=datetime.combine(issue_date, datetime.min.time()),
        )
