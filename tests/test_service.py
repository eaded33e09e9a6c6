"""Tests for the store-backed ledger service."""

import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from emi_ledger.config import LedgerConfig, PolicyConfig
from emi_ledger.core import disbursement
from emi_ledger.core.events import EventPublisher
from emi_ledger.core.service import LedgerService
from emi_ledger.exceptions import (
    AlreadyDisbursedError,
    ConcurrencyConflictError,
    IneligibleError,
    InsufficientPaymentError,
    InvalidStateError,
    WalletInactiveError,
)
from emi_ledger.models import (
    Borrower,
    HealthCardWallet,
    KycStatus,
    LoanStatus,
    ScheduleEntryStatus,
    ShortfallPolicy,
    WalletStatus,
)


def approved_loan_id(service: LedgerService, amount: str = "120000") -> str:
    loan = service.open_application("owner-001", amount)
    service.submit(loan.loan_id, submitted_on=date(2024, 1, 10))
    service.approve(loan.loan_id, amount, "12", 12, approval_date=date(2024, 1, 15))
    return loan.loan_id


def event_types(service: LedgerService) -> list[str]:
    return [event.event_type for event in service.publisher.published]


class TestLifecycle:
    def test_full_lifecycle_events(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        service.disburse_to_wallet(loan_id, "wallet-001")
        service.apply_payment(loan_id, "10661.85", payment_date=date(2024, 2, 15))

        assert event_types(service) == [
            "wallet.registered",
            "loan.drafted",
            "loan.submitted",
            "loan.approved",
            "loan.disbursed",
            "loan.payment_applied",
        ]
        disbursed = service.publisher.published[4]
        assert disbursed.subject == loan_id
        assert disbursed.metadata == {"wallet_id": "wallet-001"}
        assert disbursed.data["transfer_amount"] == "120000.00"

    def test_application_number_assigned(self, service: LedgerService) -> None:
        loan = service.open_application("owner-001", "5000")

        assert loan.application_number == f"ML{date.today().year}000001"
        assert service.store.get_loan(loan.loan_id).version == 1

    def test_unverified_borrower_blocked(self, service: LedgerService, sample_borrower: Borrower) -> None:
        service.register_borrower(replace(sample_borrower, owner_id="owner-002", kyc_status=KycStatus.PENDING))

        with pytest.raises(InvalidStateError):
            service.open_application("owner-002", "5000")
        assert service.store.summary()["loans"] == 0

    def test_credit_score_approval(self, service: LedgerService) -> None:
        loan = service.open_application("owner-001", "400000")
        service.submit(loan.loan_id)
        service.start_review(loan.loan_id)

        approved = service.approve_with_credit_score(loan.loan_id, 720, 24, approval_date=date(2024, 1, 15))

        assert approved.principal == Decimal("300000.00")
        assert service.store.get_loan(loan.loan_id).status == LoanStatus.APPROVED

    def test_ineligible_then_rejected(self, service: LedgerService) -> None:
        loan = service.open_application("owner-001", "5000")
        service.submit(loan.loan_id)

        with pytest.raises(IneligibleError):
            service.approve_with_credit_score(loan.loan_id, 550, 12)
        service.reject(loan.loan_id, "Credit score below floor")

        assert service.store.get_loan(loan.loan_id).status == LoanStatus.REJECTED
        assert event_types(service)[-1] == "loan.rejected"

    def test_check_eligibility(self, service: LedgerService) -> None:
        assert service.check_eligibility(690).max_eligible_amount == Decimal("150000.00")


class TestPayments:
    def test_payment_persisted(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)

        service.apply_payment(loan_id, "10661.85", payment_date=date(2024, 2, 15))

        stored = service.store.get_loan(loan_id)
        assert stored.remaining_balance == Decimal("110538.15")
        assert stored.version == 4
        assert len(stored.payment_history) == 1

    def test_completion_event(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service, "1000")

        service.apply_payment(loan_id, "2000")

        assert event_types(service)[-2:] == ["loan.payment_applied", "loan.completed"]

    def test_scheduled_installments_complete_loan(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)

        for _ in range(12):
            loan = service.store.get_loan(loan_id)
            service.apply_payment(loan_id, service.ledger.amount_due(loan), payment_date=loan.next_due_date)

        stored = service.store.get_loan(loan_id)
        assert stored.status == LoanStatus.COMPLETED
        assert stored.remaining_balance == Decimal("0.00")
        assert stored.completion_date == date(2025, 1, 15)
        assert event_types(service)[-1] == "loan.completed"

    def test_long_running_publisher_stays_bounded(self, sample_borrower: Borrower) -> None:
        service = LedgerService(publisher=EventPublisher(history=5))
        service.register_borrower(sample_borrower)

        for _ in range(10):
            loan_id = approved_loan_id(service, "1000")
            service.apply_payment(loan_id, "2000")

        assert len(service.publisher.published) == 5
        assert service.publisher.published[-1].event_type == "loan.completed"
        assert service.publisher._pending == []

    def test_rejected_payment_leaves_no_trace(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        published = len(service.publisher.published)

        with pytest.raises(InsufficientPaymentError):
            service.apply_payment(loan_id, "100")

        stored = service.store.get_loan(loan_id)
        assert stored.payment_history == []
        assert stored.version == 3
        assert len(service.publisher.published) == published

    def test_carry_interest_policy_from_config(
        self, sample_borrower: Borrower, sample_wallet: HealthCardWallet
    ) -> None:
        config = LedgerConfig(policy=PolicyConfig(shortfall=ShortfallPolicy.CARRY_INTEREST))
        service = LedgerService(config=config)
        service.register_borrower(sample_borrower)
        loan_id = approved_loan_id(service)

        service.apply_payment(loan_id, "100")

        assert service.store.get_loan(loan_id).interest_arrears == Decimal("1100.00")

    def test_stale_expected_version(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        version = service.store.get_loan(loan_id).version
        service.apply_payment(loan_id, "10661.85", expected_version=version)

        with pytest.raises(ConcurrencyConflictError):
            service.apply_payment(loan_id, "10661.85", expected_version=version)
        assert len(service.store.get_loan(loan_id).payment_history) == 1

    def test_concurrent_payments_serialize(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        errors: list[Exception] = []

        def pay() -> None:
            while True:
                try:
                    service.apply_payment(loan_id, "10661.85")
                    return
                except ConcurrencyConflictError:
                    continue
                except Exception as exc:
                    errors.append(exc)
                    return

        threads = [threading.Thread(target=pay) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = service.store.get_loan(loan_id)
        assert errors == []
        assert len(stored.payment_history) == 8
        assert stored.remaining_balance == Decimal("120000.00") - stored.total_principal_paid
        balances = [p.balance_after for p in stored.payment_history]
        assert balances == sorted(balances, reverse=True)

    def test_schedule_projection(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        service.apply_payment(loan_id, "10661.85", payment_date=date(2024, 2, 15))

        rows = service.build_schedule(loan_id, today=date(2024, 4, 1))

        assert [r.status for r in rows[:3]] == [
            ScheduleEntryStatus.PAID,
            ScheduleEntryStatus.OVERDUE,
            ScheduleEntryStatus.PENDING,
        ]


class TestDisbursement:
    def test_commits_both_entities(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)

        service.disburse_to_wallet(loan_id, "wallet-001")

        assert service.store.get_wallet("wallet-001").available_balance == Decimal("145000.00")
        assert service.store.get_loan(loan_id).disbursed_to_wallet is True

    def test_second_disbursement_refused(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        service.disburse_to_wallet(loan_id, "wallet-001")

        with pytest.raises(AlreadyDisbursedError):
            service.disburse_to_wallet(loan_id, "wallet-001")
        assert service.store.get_wallet("wallet-001").available_balance == Decimal("145000.00")

    def test_inactive_wallet_changes_nothing(
        self, sample_borrower: Borrower, sample_wallet: HealthCardWallet
    ) -> None:
        service = LedgerService()
        service.register_borrower(sample_borrower)
        sample_wallet.status = WalletStatus.SUSPENDED
        service.register_wallet(sample_wallet)
        loan_id = approved_loan_id(service)

        with pytest.raises(WalletInactiveError):
            service.disburse_to_wallet(loan_id, "wallet-001")

        loan = service.store.get_loan(loan_id)
        assert loan.status == LoanStatus.APPROVED
        assert loan.disbursed_to_wallet is False
        assert service.store.get_wallet("wallet-001").available_balance == Decimal("25000.00")

    def test_conflicting_top_up_aborts_disbursement(
        self, service: LedgerService, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        loan_id = approved_loan_id(service)
        real_disburse = disbursement.disburse_to_wallet

        def disburse_after_top_up(loan, wallet):  # type: ignore[no-untyped-def]
            service.top_up("wallet-001", "10")
            return real_disburse(loan, wallet)

        monkeypatch.setattr(disbursement, "disburse_to_wallet", disburse_after_top_up)

        with pytest.raises(ConcurrencyConflictError):
            service.disburse_to_wallet(loan_id, "wallet-001")

        loan = service.store.get_loan(loan_id)
        assert loan.status == LoanStatus.APPROVED
        assert loan.disbursed_to_wallet is False
        assert service.store.get_wallet("wallet-001").available_balance == Decimal("25010.00")
        assert "loan.disbursed" not in event_types(service)

    def test_top_up_event(self, service: LedgerService) -> None:
        service.top_up("wallet-001", "500")

        assert event_types(service)[-1] == "wallet.topped_up"
        assert service.store.get_wallet("wallet-001").version == 2


class TestPortfolioSummary:
    def test_summary(self, service: LedgerService) -> None:
        loan_id = approved_loan_id(service)
        service.disburse_to_wallet(loan_id, "wallet-001")
        service.apply_payment(loan_id, "10661.85")
        draft = service.open_application("owner-001", "5000")

        summary = service.portfolio_summary()

        assert summary["total_loans"] == 2
        assert summary["total_principal"] == Decimal("120000.00")
        assert summary["total_outstanding"] == Decimal("110538.15")
        assert summary["total_interest_collected"] == Decimal("1200.00")
        assert summary["total_payments"] == 1
        assert summary["disbursed_loans"] == 1
        assert summary["loan_status_distribution"] == {"disbursed": 1, "draft": 1}
        assert draft.status == LoanStatus.DRAFT

    def test_empty(self) -> None:
        summary = LedgerService().portfolio_summary()

        assert summary["total_loans"] == 0
        assert summary["total_principal"] == 0
