"""Health-card wallet models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from emi_ledger.models.enums import CardType, PaymentMethod, WalletStatus
from emi_ledger.money import ZERO


@dataclass
class HealthCardWallet:
    """Health card holding a spendable balance for hospital bills."""

    wallet_id: str
    card_number: str
    owner_id: str
    uhid: str
    status: WalletStatus
    available_balance: Decimal
    created_at: datetime
    used_balance: Decimal = ZERO
    card_type: CardType = CardType.BASIC
    issue_date: date | None = None
    expiry_date: date | None = None
    updated_at: datetime | None = None
    version: int = 0


@dataclass(frozen=True)
class Disbursement:
    """Record of a loan principal moved into a wallet."""

    transaction_id: str
    loan_id: str
    wallet_id: str
    transfer_amount: Decimal
    disbursed_at: datetime


@dataclass(frozen=True)
class TopUp:
    """Record of a direct wallet top-up."""

    transaction_id: str
    wallet_id: str
    amount: Decimal
    payment_method: PaymentMethod
    new_balance: Decimal
    created_at: datetime
