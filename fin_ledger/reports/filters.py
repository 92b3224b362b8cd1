"""Read-side filtering and pagination over ledger transactions."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Generic, TypeVar

from fin_ledger.exceptions import ValidationError
from fin_ledger.models.financial import Transaction, TransactionType

T = TypeVar("T")

ITEMS_PER_PAGE = 20


@dataclass
class TransactionFilter:
    """Criteria for narrowing the transaction list.

    ``None`` means "all" for every criterion. ``search_term`` matches the
    description case-insensitively; ``period_days`` keeps transactions dated
    within the last N days, counting ``today``.
    """

    search_term: str | None = None
    transaction_type: TransactionType | None = None
    category: str | None = None
    period_days: int | None = None

    def matches(self, transaction: Transaction, today: date | None = None) -> bool:
        if self.search_term and self.search_term.lower() not in transaction.description.lower():
            return False
        if self.transaction_type is not None and transaction.transaction_type != self.transaction_type:
            return False
        if self.category is not None and transaction.category != self.category:
            return False
        if self.period_days is not None:
            today = today or date.today()
            if transaction.date < today - timedelta(days=self.period_days):
                return False
        return True

    def apply(self, transactions: Sequence[Transaction], today: date | None = None) -> list[Transaction]:
        """Return matching transactions, preserving order."""
        today = today or date.today()
        return [t for t in transactions if self.matches(t, today)]


@dataclass
class Page(Generic[T]):
    """One page of results."""

    items: list[T] = field(default_factory=list)
    page: int = 1
    per_page: int = ITEMS_PER_PAGE
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.per_page) if self.total_items else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def paginate(items: Sequence[T], page: int = 1, per_page: int = ITEMS_PER_PAGE) -> Page[T]:
    """Slice ``items`` into 1-indexed pages.

    Pages past the end are empty rather than an error.
    """
    if page < 1:
        raise ValidationError(f"Page must be >= 1, got {page}")
    if per_page < 1:
        raise ValidationError(f"per_page must be >= 1, got {per_page}")
    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        per_page=per_page,
        total_items=len(items),
    )
