"""In-memory data store for ledger entities."""

from emi_ledger.store.ledger import LedgerStore

__all__ = ["LedgerStore"]
