"""Loan portfolio scenario: borrowers, approvals, disbursements and EMI history."""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from emi_ledger.config import LedgerConfig
from emi_ledger.core.events import EventPublisher
from emi_ledger.core.service import LedgerService
from emi_ledger.dates import due_date
from emi_ledger.exceptions import (
    IneligibleError,
    InsufficientPaymentError,
    InvalidStateError,
    WalletInactiveError,
)
from emi_ledger.generators import BorrowerGenerator, LoanApplicationGenerator, WalletGenerator
from emi_ledger.models import LoanStatus, PaymentMethod, WalletStatus
from emi_ledger.money import to_money

logger = logging.getLogger(__name__)


class LoanPortfolioScenario:
    """Run a synthetic medical loan book through the real ledger.

    This scenario creates:
    - Borrowers with health-card wallets (a few suspended)
    - Loan applications approved or rejected by credit tier
    - Disbursements of approved loans into wallets
    - Monthly EMI payments up to ``as_of``:
        - On time (paid on the due date)
        - Late (paid 1-20 days after the due date)
        - Missed (left overdue)
        - Short (less than the accrued interest)
    """

    def __init__(
        self,
        num_borrowers: int = 100,
        disbursement_rate: float = 0.60,
        on_time_rate: float = 0.85,
        late_rate: float = 0.08,
        short_rate: float = 0.02,
        suspended_wallet_rate: float = 0.05,
        seed: int | None = None,
        as_of: date | None = None,
        *,
        config: LedgerConfig | None = None,
    ) -> None:
        """Initialize loan portfolio scenario.

        Parameters
        ----------
        num_borrowers : int
            Number of borrowers to generate.
        disbursement_rate : float
            Share of approved loans moved into a wallet (0.0 to 1.0).
        on_time_rate : float
            Share of installments paid on the due date.
        late_rate : float
            Share of installments paid late. The remainder after on-time,
            late and short payments is missed.
        short_rate : float
            Share of installments paid below accrued interest.
        suspended_wallet_rate : float
            Share of wallets generated in suspended status.
        seed : int | None
            Random seed for reproducibility.
        as_of : date | None
            Simulation date (default: today).
        config : LedgerConfig | None
            Ledger configuration (policies, event topic).
        """
        self.num_borrowers = num_borrowers
        self.disbursement_rate = disbursement_rate
        self.on_time_rate = on_time_rate
        self.late_rate = late_rate
        self.short_rate = short_rate
        self.suspended_wallet_rate = suspended_wallet_rate
        self.seed = seed
        self.as_of = as_of or date.today()
        self.config = config or LedgerConfig(seed=seed)

        self._rng = random.Random(seed)
        self.service = LedgerService(
            config=self.config,
            publisher=EventPublisher(topic=self.config.output.event_topic, history=None),
        )
        self._borrower_gen = BorrowerGenerator(seed=seed)
        self._wallet_gen = WalletGenerator(seed=seed)
        self._loan_gen = LoanApplicationGenerator(seed=seed)
        self.outcomes: dict[str, int] = {
            "kyc_blocked": 0,
            "rejected": 0,
            "approved": 0,
            "disbursed": 0,
            "disbursement_refused": 0,
            "payments": 0,
            "short_payments_refused": 0,
            "missed_installments": 0,
        }

    def generate(self) -> LedgerService:
        """Generate the portfolio.

        Returns
        -------
        LedgerService
            Service whose store holds every generated entity.
        """
        logger.info("Starting loan portfolio scenario: %d borrowers as of %s", self.num_borrowers, self.as_of)

        for borrower in self._borrower_gen.generate_batch(self.num_borrowers):
            self.service.register_borrower(borrower)
            status = WalletStatus.SUSPENDED if self._rng.random() < self.suspended_wallet_rate else WalletStatus.ACTIVE
            wallet = self.service.register_wallet(self._wallet_gen.generate(borrower, status=status))

            request = self._loan_gen.generate(borrower)
            try:
                loan = self.service.open_application(borrower.owner_id, request.requested_amount)
            except InvalidStateError:
                self.outcomes["kyc_blocked"] += 1
                continue

            months_ago = self._rng.randint(1, 24)
            approval_date = self.as_of - relativedelta(months=months_ago)
            self.service.submit(loan.loan_id, submitted_on=approval_date - timedelta(days=3))
            self.service.start_review(loan.loan_id)
            try:
                loan = self.service.approve_with_credit_score(
                    loan.loan_id,
                    borrower.credit_score,
                    request.term_months,
                    approval_date=approval_date,
                )
            except IneligibleError:
                self.service.reject(loan.loan_id, f"Credit score {borrower.credit_score} below lending floor")
                self.outcomes["rejected"] += 1
                continue
            self.outcomes["approved"] += 1

            if self._rng.random() < self.disbursement_rate:
                try:
                    self.service.disburse_to_wallet(loan.loan_id, wallet.wallet_id)
                    self.outcomes["disbursed"] += 1
                except WalletInactiveError:
                    self.outcomes["disbursement_refused"] += 1

            self._replay_payments(loan.loan_id)

        logger.info("Loan portfolio generated: %s", self.outcomes)
        return self.service

    def _replay_payments(self, loan_id: str) -> None:
        """Pay installments due up to ``as_of`` with the configured behavior."""
        loan = self.service.store.get_loan(loan_id)
        for k in range(1, loan.term_months + 1):
            due = due_date(loan.approval_date, k, self.config.policy.due_dates)
            if due > self.as_of:
                break

            roll = self._rng.random()
            if roll < self.on_time_rate:
                paid_on = due
            elif roll < self.on_time_rate + self.late_rate:
                paid_on = due + timedelta(days=self._rng.randint(1, 20))
            elif roll < self.on_time_rate + self.late_rate + self.short_rate:
                paid_on = due
            else:
                self.outcomes["missed_installments"] += 1
                continue
            if paid_on > self.as_of:
                continue

            loan = self.service.store.get_loan(loan_id)
            if roll >= self.on_time_rate + self.late_rate:
                accrued = self.service.ledger.accrued_interest(loan)
                amount = max(to_money(accrued / 2), to_money("0.01"))
            else:
                amount = self.service.ledger.amount_due(loan)

            method = self._rng.choice(list(PaymentMethod))
            try:
                self.service.apply_payment(loan_id, amount, method, payment_date=paid_on)
                self.outcomes["payments"] += 1
            except InsufficientPaymentError:
                self.outcomes["short_payments_refused"] += 1

            if self.service.store.get_loan(loan_id).status == LoanStatus.COMPLETED:
                break

    def export(self, sinks: list[Any]) -> None:
        """Export generated data to sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (ConsoleSink, JsonFileSink, KafkaSink).
        """
        store = self.service.store
        loans = store.all_loans()
        payments = [p for loan in loans for p in loan.payment_history]
        wallets = [store.get_wallet(wid) for wid in store.wallets]
        events = list(self.service.publisher.published)

        for sink in sinks:
            sink.write_batch("borrowers", list(store.borrowers.values()))
            sink.write_batch("wallets", wallets)
            sink.write_batch("loans", loans)
            sink.write_batch("emi-payments", payments)
            sink.write_batch(self.service.publisher.topic, events)

        logger.info("Exported loan portfolio to %d sinks", len(sinks))

    def get_portfolio_summary(self) -> dict[str, Any]:
        """Get summary statistics for the loan portfolio.

        Returns
        -------
        dict[str, Any]
            Ledger summary plus scenario outcome counts.
        """
        summary = self.service.portfolio_summary()
        summary["outcomes"] = dict(self.outcomes)
        return summary
