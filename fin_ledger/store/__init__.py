"""In-memory ledger store."""

from fin_ledger.store.ledger import LedgerStore

__all__ = ["LedgerStore"]
