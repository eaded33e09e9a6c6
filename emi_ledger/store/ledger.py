"""Ledger data store with referential integrity and optimistic versioning."""

import copy
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from emi_ledger.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    InvalidStateError,
    ReferentialIntegrityError,
)
from emi_ledger.models import Borrower, HealthCardWallet, Loan, LoanStatus
from emi_ledger.money import ZERO


@dataclass
class LedgerStore:
    """In-memory store for borrowers, loans and wallets.

    Loans and wallets are versioned. Reads hand out deep copies; changes
    become visible only through ``commit``, which checks every entity's
    version under one lock and writes all of them or none.
    """

    borrowers: dict[str, Borrower] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    wallets: dict[str, HealthCardWallet] = field(default_factory=dict)

    # Relationship indexes
    _owner_loans: dict[str, list[str]] = field(default_factory=dict)
    _owner_wallets: dict[str, list[str]] = field(default_factory=dict)

    # Application number sequence per year
    _sequences: dict[int, int] = field(default_factory=dict)

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def add_borrower(self, borrower: Borrower) -> None:
        """Add a borrower to the store."""
        with self._lock:
            self.borrowers[borrower.owner_id] = borrower
            self._owner_loans.setdefault(borrower.owner_id, [])
            self._owner_wallets.setdefault(borrower.owner_id, [])

    def add_loan(self, loan: Loan) -> None:
        """Add a new loan. Sets ``loan.version`` to 1."""
        with self._lock:
            if loan.owner_id not in self.borrowers:
                raise ReferentialIntegrityError(f"Borrower {loan.owner_id} not found", loan_id=loan.loan_id)
            if loan.loan_id in self.loans:
                raise InvalidStateError(f"Loan {loan.loan_id} already exists", loan_id=loan.loan_id)

            loan.version = 1
            self.loans[loan.loan_id] = copy.deepcopy(loan)
            self._owner_loans[loan.owner_id].append(loan.loan_id)

    def add_wallet(self, wallet: HealthCardWallet) -> None:
        """Add a new wallet. Sets ``wallet.version`` to 1."""
        with self._lock:
            if wallet.owner_id not in self.borrowers:
                raise ReferentialIntegrityError(f"Borrower {wallet.owner_id} not found", wallet_id=wallet.wallet_id)
            if wallet.wallet_id in self.wallets:
                raise InvalidStateError(f"Wallet {wallet.wallet_id} already exists", wallet_id=wallet.wallet_id)

            wallet.version = 1
            self.wallets[wallet.wallet_id] = copy.deepcopy(wallet)
            self._owner_wallets[wallet.owner_id].append(wallet.wallet_id)

    def get_borrower(self, owner_id: str) -> Borrower:
        with self._lock:
            borrower = self.borrowers.get(owner_id)
            if borrower is None:
                raise EntityNotFoundError(f"Borrower {owner_id} not found")
            return copy.deepcopy(borrower)

    def get_loan(self, loan_id: str) -> Loan:
        """Return a private copy of a loan."""
        with self._lock:
            loan = self.loans.get(loan_id)
            if loan is None:
                raise EntityNotFoundError(f"Loan {loan_id} not found", loan_id=loan_id)
            return copy.deepcopy(loan)

    def get_wallet(self, wallet_id: str) -> HealthCardWallet:
        """Return a private copy of a wallet."""
        with self._lock:
            wallet = self.wallets.get(wallet_id)
            if wallet is None:
                raise EntityNotFoundError(f"Wallet {wallet_id} not found", wallet_id=wallet_id)
            return copy.deepcopy(wallet)

    def commit(
        self,
        loans: Iterable[Loan] = (),
        wallets: Iterable[HealthCardWallet] = (),
    ) -> None:
        """Write modified copies back, all together or not at all.

        Each entity must carry the version it was read at. On success every
        written entity, and the caller's copy, moves to the next version.

        Raises
        ------
        ConcurrencyConflictError
            If any entity was committed by someone else since it was read.
        EntityNotFoundError
            If any entity was never added.
        """
        loans = list(loans)
        wallets = list(wallets)
        with self._lock:
            for loan in loans:
                self._check_version(self.loans.get(loan.loan_id), loan.version, loan_id=loan.loan_id)
            for wallet in wallets:
                self._check_version(self.wallets.get(wallet.wallet_id), wallet.version, wallet_id=wallet.wallet_id)

            for loan in loans:
                loan.version += 1
                self.loans[loan.loan_id] = copy.deepcopy(loan)
            for wallet in wallets:
                wallet.version += 1
                self.wallets[wallet.wallet_id] = copy.deepcopy(wallet)

    def next_application_number(self, year: int | None = None) -> str:
        """Return the next ``ML{year}{seq:06d}`` application number."""
        year = year or date.today().year
        with self._lock:
            seq = self._sequences.get(year, 0) + 1
            self._sequences[year] = seq
        return f"ML{year}{seq:06d}"

    # Query methods
    def get_owner_loans(self, owner_id: str) -> list[Loan]:
        """Get copies of all loans for a borrower."""
        with self._lock:
            loan_ids = self._owner_loans.get(owner_id, [])
            return [copy.deepcopy(self.loans[lid]) for lid in loan_ids]

    def get_owner_wallets(self, owner_id: str) -> list[HealthCardWallet]:
        """Get copies of all wallets for a borrower."""
        with self._lock:
            wallet_ids = self._owner_wallets.get(owner_id, [])
            return [copy.deepcopy(self.wallets[wid]) for wid in wallet_ids]

    def all_loans(self) -> list[Loan]:
        with self._lock:
            return [copy.deepcopy(loan) for loan in self.loans.values()]

    def loans_by_status(self, status: LoanStatus) -> list[Loan]:
        with self._lock:
            return [copy.deepcopy(loan) for loan in self.loans.values() if loan.status == status]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        with self._lock:
            return {
                "borrowers": len(self.borrowers),
                "loans": len(self.loans),
                "wallets": len(self.wallets),
                "emi_payments": sum(len(loan.payment_history) for loan in self.loans.values()),
                "loans_outstanding": sum(1 for loan in self.loans.values() if loan.remaining_balance > ZERO),
            }

    @staticmethod
    def _check_version(stored: Loan | HealthCardWallet | None, version: int, **context: str) -> None:
        if stored is None:
            raise EntityNotFoundError(f"Cannot commit unknown entity {context}", **context)
        if stored.version != version:
            raise ConcurrencyConflictError(
                f"Entity {context} is at version {stored.version}, update was based on {version}",
                stored_version=stored.version,
                version=version,
                **context,
            )
