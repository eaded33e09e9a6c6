"""Store-backed entry point for ledger operations."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Iterator

from emi_ledger.config import LedgerConfig
from emi_ledger.core import disbursement, lifecycle
from emi_ledger.core.eligibility import evaluate
from emi_ledger.core.events import EventPublisher
from emi_ledger.core.ledger import EmiLedger
from emi_ledger.exceptions import ConcurrencyConflictError, LedgerError
from emi_ledger.logging import log_context
from emi_ledger.models import (
    Borrower,
    Disbursement,
    EligibilityResult,
    EmiPayment,
    HealthCardWallet,
    Loan,
    LoanStatus,
    PaymentMethod,
    ScheduleEntry,
    TopUp,
)
from emi_ledger.money import ZERO
from emi_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)


class LedgerService:
    """Loan lifecycle, EMI payments and disbursement over a ``LedgerStore``.

    Every mutating call reads private copies, applies the core operation,
    and commits through the store's version check. Events are published
    only after the commit succeeds. Nothing is retried here: on
    ``ConcurrencyConflictError`` the caller re-reads and tries again.

    Parameters
    ----------
    store : LedgerStore | None
        Backing store (a fresh one by default).
    config : LedgerConfig | None
        Policies and output settings.
    publisher : EventPublisher | None
        Event destination (an in-memory publisher by default).
    """

    def __init__(
        self,
        store: LedgerStore | None = None,
        config: LedgerConfig | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.store = store if store is not None else LedgerStore()
        self.publisher = publisher or EventPublisher(topic=self.config.output.event_topic)
        self.ledger = EmiLedger(self.config.policy)

    # Borrowers and wallets
    def register_borrower(self, borrower: Borrower) -> None:
        self.store.add_borrower(borrower)

    def register_wallet(self, wallet: HealthCardWallet) -> HealthCardWallet:
        self.store.add_wallet(wallet)
        self.publisher.publish("wallet.registered", wallet.wallet_id, wallet)
        return wallet

    def top_up(
        self,
        wallet_id: str,
        amount: Decimal | int | str,
        payment_method: PaymentMethod | str = PaymentMethod.ONLINE,
    ) -> TopUp:
        with self._rejections("top_up", wallet_id):
            wallet = self.store.get_wallet(wallet_id)
            record = disbursement.top_up(wallet, amount, payment_method)
            self.store.commit(wallets=[wallet])
        self.publisher.publish("wallet.topped_up", wallet_id, record)
        return record

    # Loan lifecycle
    def check_eligibility(self, credit_score: int) -> EligibilityResult:
        return evaluate(credit_score)

    def open_application(self, owner_id: str, requested_amount: Decimal | int | str) -> Loan:
        """Create and store a draft loan for a registered borrower."""
        with self._rejections("open_application", owner_id):
            borrower = self.store.get_borrower(owner_id)
            loan = lifecycle.create_draft(
                owner_id=owner_id,
                uhid=borrower.uhid,
                kyc_status=borrower.kyc_status,
                requested_amount=requested_amount,
                application_number=self.store.next_application_number(),
            )
            self.store.add_loan(loan)
        self.publisher.publish("loan.drafted", loan.loan_id, loan)
        return loan

    def submit(self, loan_id: str, submitted_on: date | None = None) -> Loan:
        return self._transition(loan_id, "loan.submitted", lifecycle.submit, submitted_on)

    def start_review(self, loan_id: str) -> Loan:
        return self._transition(loan_id, "loan.under_review", lifecycle.start_review)

    def approve(
        self,
        loan_id: str,
        principal: Decimal | int | str,
        annual_rate_percent: Decimal | int | str,
        term_months: int,
        approval_date: date | None = None,
    ) -> Loan:
        return self._transition(
            loan_id,
            "loan.approved",
            lifecycle.approve,
            principal,
            annual_rate_percent,
            term_months,
            approval_date,
            self.config.policy.due_dates,
        )

    def approve_with_credit_score(
        self,
        loan_id: str,
        credit_score: int,
        term_months: int,
        approval_date: date | None = None,
    ) -> Loan:
        return self._transition(
            loan_id,
            "loan.approved",
            lifecycle.approve_with_credit_score,
            credit_score,
            term_months,
            approval_date,
            self.config.policy.due_dates,
        )

    def reject(self, loan_id: str, reason: str) -> Loan:
        return self._transition(loan_id, "loan.rejected", lifecycle.reject, reason)

    # Ledger
    def apply_payment(
        self,
        loan_id: str,
        amount_paid: Decimal | int | str,
        payment_method: PaymentMethod | str = PaymentMethod.ONLINE,
        payment_date: date | None = None,
        expected_version: int | None = None,
    ) -> EmiPayment:
        """Apply an EMI payment and commit it.

        Parameters
        ----------
        expected_version : int | None
            Version of the loan the caller based the payment on. When given
            and stale, the payment is refused with
            ``ConcurrencyConflictError``.
        """
        with self._rejections("apply_payment", loan_id):
            loan = self._load(loan_id, expected_version)
            payment = self.ledger.apply_payment(loan, amount_paid, payment_method, payment_date)
            self.store.commit(loans=[loan])

        self.publisher.publish("loan.payment_applied", loan_id, payment)
        if loan.status == LoanStatus.COMPLETED:
            self.publisher.publish("loan.completed", loan_id, loan)
        return payment

    def build_schedule(self, loan_id: str, today: date | None = None) -> list[ScheduleEntry]:
        """Read-only schedule projection. May see a slightly stale balance."""
        return self.ledger.build_schedule(self.store.get_loan(loan_id), today)

    def disburse_to_wallet(
        self,
        loan_id: str,
        wallet_id: str,
        expected_version: int | None = None,
    ) -> Disbursement:
        """Move a loan's principal into a wallet, committing both together."""
        with self._rejections("disburse_to_wallet", loan_id):
            loan = self._load(loan_id, expected_version)
            wallet = self.store.get_wallet(wallet_id)
            record = disbursement.disburse_to_wallet(loan, wallet)
            self.store.commit(loans=[loan], wallets=[wallet])

        self.publisher.publish("loan.disbursed", loan_id, record, wallet_id=wallet_id)
        return record

    def portfolio_summary(self) -> dict[str, Any]:
        """Summary statistics across all stored loans."""
        loans = self.store.all_loans()

        status_counts: dict[str, int] = {}
        for loan in loans:
            status_counts[loan.status.value] = status_counts.get(loan.status.value, 0) + 1

        return {
            "total_loans": len(loans),
            "total_principal": sum((loan.principal for loan in loans), ZERO),
            "total_outstanding": sum((loan.remaining_balance for loan in loans), ZERO),
            "total_interest_collected": sum((loan.total_interest_paid for loan in loans), ZERO),
            "total_payments": sum(len(loan.payment_history) for loan in loans),
            "disbursed_loans": sum(1 for loan in loans if loan.disbursed_to_wallet),
            "loan_status_distribution": status_counts,
        }

    def _load(self, loan_id: str, expected_version: int | None) -> Loan:
        loan = self.store.get_loan(loan_id)
        if expected_version is not None and loan.version != expected_version:
            raise ConcurrencyConflictError(
                f"Loan {loan_id} is at version {loan.version}, caller expected {expected_version}",
                loan_id=loan_id,
                stored_version=loan.version,
                version=expected_version,
            )
        return loan

    def _transition(self, loan_id: str, event_type: str, operation: Any, *args: Any) -> Loan:
        with self._rejections(event_type, loan_id):
            loan = self.store.get_loan(loan_id)
            operation(loan, *args)
            self.store.commit(loans=[loan])
        self.publisher.publish(event_type, loan_id, loan)
        return loan

    @contextmanager
    def _rejections(self, action: str, subject: str) -> Iterator[None]:
        try:
            yield
        except LedgerError as exc:
            logger.warning(
                "%s rejected for %s: %s",
                action,
                subject,
                exc,
                extra=log_context(code=exc.code, subject=subject, loan_id=exc.loan_id, wallet_id=exc.wallet_id),
            )
            raise
