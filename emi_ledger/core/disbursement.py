"""Moving approved loan funds into a health-card wallet."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from emi_ledger.core.ledger import new_transaction_id
from emi_ledger.exceptions import (
    AlreadyDisbursedError,
    InvalidArgumentError,
    InvalidStateError,
    OwnershipMismatchError,
    WalletInactiveError,
)
from emi_ledger.logging import log_context
from emi_ledger.models.enums import LoanStatus, PaymentMethod, WalletStatus
from emi_ledger.models.loan import Loan
from emi_ledger.models.wallet import Disbursement, HealthCardWallet, TopUp
from emi_ledger.money import to_money

logger = logging.getLogger(__name__)


def disburse_to_wallet(loan: Loan, wallet: HealthCardWallet) -> Disbursement:
    """Credit the loan principal to the borrower's wallet, once.

    All checks run before either entity is touched. Persisting both
    entities together is the caller's job (see ``LedgerService``).

    Raises
    ------
    AlreadyDisbursedError
        If the loan was already moved into a wallet.
    InvalidStateError
        If the loan is not approved.
    OwnershipMismatchError
        If the wallet belongs to someone else.
    WalletInactiveError
        If the wallet is not active.
    """
    if loan.disbursed_to_wallet:
        raise AlreadyDisbursedError(
            f"Loan {loan.loan_id} was already disbursed",
            loan_id=loan.loan_id,
            wallet_id=wallet.wallet_id,
        )
    if loan.status != LoanStatus.APPROVED:
        raise InvalidStateError(
            f"Loan {loan.loan_id} must be approved to disburse, is {loan.status.value}",
            loan_id=loan.loan_id,
            status=loan.status.value,
        )
    if wallet.owner_id != loan.owner_id:
        raise OwnershipMismatchError(
            f"Wallet {wallet.wallet_id} does not belong to owner of loan {loan.loan_id}",
            loan_id=loan.loan_id,
            wallet_id=wallet.wallet_id,
        )
    if wallet.status != WalletStatus.ACTIVE:
        raise WalletInactiveError(
            f"Wallet {wallet.wallet_id} is {wallet.status.value}",
            loan_id=loan.loan_id,
            wallet_id=wallet.wallet_id,
        )

    now = datetime.now()
    wallet.available_balance += loan.principal
    wallet.updated_at = now
    loan.disbursed_to_wallet = True
    loan.status = LoanStatus.DISBURSED
    loan.updated_at = now

    transaction_id = new_transaction_id("DSB", now)
    logger.info(
        "Disbursed %s from loan %s to wallet %s",
        loan.principal,
        loan.loan_id,
        wallet.wallet_id,
        extra=log_context(loan_id=loan.loan_id, wallet_id=wallet.wallet_id, transaction_id=transaction_id),
    )
    return Disbursement(
        transaction_id=transaction_id,
        loan_id=loan.loan_id,
        wallet_id=wallet.wallet_id,
        transfer_amount=loan.principal,
        disbursed_at=now,
    )


def top_up(
    wallet: HealthCardWallet,
    amount: Decimal | int | str,
    payment_method: PaymentMethod | str = PaymentMethod.ONLINE,
) -> TopUp:
    """Add funds to an active wallet.

    Raises
    ------
    WalletInactiveError
        If the wallet is not active.
    InvalidArgumentError
        If the amount is not positive or the method is unknown.
    """
    if wallet.status != WalletStatus.ACTIVE:
        raise WalletInactiveError(f"Wallet {wallet.wallet_id} is {wallet.status.value}", wallet_id=wallet.wallet_id)
    try:
        credit = to_money(amount)
        method = PaymentMethod(payment_method)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid top-up: {amount!r} via {payment_method!r}", wallet_id=wallet.wallet_id) from exc
    if credit <= 0:
        raise InvalidArgumentError(f"Top-up must be positive, got {credit}", wallet_id=wallet.wallet_id)

    now = datetime.now()
    wallet.available_balance += credit
    wallet.updated_at = now
    return TopUp(
        transaction_id=new_transaction_id("TOP", now),
        wallet_id=wallet.wallet_id,
        amount=credit,
        payment_method=method,
        new_balance=wallet.available_balance,
        created_at=now,
    )
