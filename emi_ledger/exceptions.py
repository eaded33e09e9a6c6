"""Custom exception hierarchy for emi-ledger."""


class LedgerError(Exception):
    """Base exception for all emi-ledger errors.

    Every subclass carries a stable ``code`` so callers can map errors to
    their own messages without parsing text.
    """

    code = "ledger_error"

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.context = context

    @property
    def loan_id(self) -> str | None:
        return self.context.get("loan_id")  # type: ignore[return-value]

    @property
    def wallet_id(self) -> str | None:
        return self.context.get("wallet_id")  # type: ignore[return-value]


class InvalidArgumentError(LedgerError, ValueError):
    """Raised when a numeric input is out of range."""

    code = "invalid_argument"


class InsufficientPaymentError(InvalidArgumentError):
    """Raised when a payment does not cover accrued interest."""

    code = "insufficient_payment"


class InvalidStateError(LedgerError):
    """Raised when a loan or wallet is in the wrong status for the operation."""

    code = "invalid_state"


class IneligibleError(InvalidStateError):
    """Raised when a credit score does not qualify for any loan tier."""

    code = "ineligible"


class AlreadySettledError(LedgerError):
    """Raised when paying against a loan whose balance is already zero."""

    code = "already_settled"


class AlreadyDisbursedError(LedgerError):
    """Raised when a loan has already been moved into a wallet."""

    code = "already_disbursed"


class OwnershipMismatchError(LedgerError):
    """Raised when a wallet does not belong to the loan's owner."""

    code = "ownership_mismatch"


class WalletInactiveError(LedgerError):
    """Raised when a wallet is not active."""

    code = "wallet_inactive"


class ConcurrencyConflictError(LedgerError):
    """Raised when an entity was modified since it was read."""

    code = "concurrency_conflict"


class EntityNotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""

    code = "not_found"


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""

    code = "referential_integrity"


class ConfigurationError(LedgerError):
    """Raised when configuration is invalid or missing."""

    code = "configuration"


class SinkError(LedgerError):
    """Raised when a sink operation fails."""

    code = "sink"
