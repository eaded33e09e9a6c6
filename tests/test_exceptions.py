"""Tests for custom exception hierarchy."""

import pytest

from emi_ledger.exceptions import (
    AlreadyDisbursedError,
    AlreadySettledError,
    ConcurrencyConflictError,
    ConfigurationError,
    EntityNotFoundError,
    IneligibleError,
    InsufficientPaymentError,
    InvalidArgumentError,
    InvalidStateError,
    LedgerError,
    OwnershipMismatchError,
    ReferentialIntegrityError,
    SinkError,
    WalletInactiveError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    @pytest.mark.parametrize(
        "exc_class",
        [
            InvalidArgumentError,
            InvalidStateError,
            AlreadySettledError,
            AlreadyDisbursedError,
            OwnershipMismatchError,
            WalletInactiveError,
            ConcurrencyConflictError,
            EntityNotFoundError,
            ConfigurationError,
            SinkError,
        ],
    )
    def test_is_ledger_error(self, exc_class: type) -> None:
        assert isinstance(exc_class("test"), LedgerError)

    def test_insufficient_payment_is_invalid_argument(self) -> None:
        err = InsufficientPaymentError("test")
        assert isinstance(err, InvalidArgumentError)
        assert isinstance(err, ValueError)

    def test_ineligible_is_invalid_state(self) -> None:
        assert isinstance(IneligibleError("test"), InvalidStateError)

    def test_referential_integrity_is_entity_not_found(self) -> None:
        err = ReferentialIntegrityError("test")
        assert isinstance(err, EntityNotFoundError)
        assert isinstance(err, LedgerError)


class TestExceptionContext:
    """Test structured error data."""

    def test_codes_are_distinct(self) -> None:
        classes = [
            InvalidArgumentError,
            InsufficientPaymentError,
            InvalidStateError,
            IneligibleError,
            AlreadySettledError,
            AlreadyDisbursedError,
            OwnershipMismatchError,
            WalletInactiveError,
            ConcurrencyConflictError,
        ]
        codes = [c.code for c in classes]
        assert len(set(codes)) == len(codes)

    def test_context_ids(self) -> None:
        err = AlreadyDisbursedError("Loan loan-1 was already disbursed", loan_id="loan-1", wallet_id="w-1")
        assert err.loan_id == "loan-1"
        assert err.wallet_id == "w-1"
        assert err.code == "already_disbursed"

    def test_missing_context_is_none(self) -> None:
        assert AlreadySettledError("x").wallet_id is None

    def test_exception_message(self) -> None:
        err = ReferentialIntegrityError("Borrower owner-001 not found")
        assert str(err) == "Borrower owner-001 not found"
