"""Transaction model for financial domain."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from fin_ledger.models.financial.enums import TransactionType


@dataclass
class Transaction:
    """Ledger transaction.

    DEBIT and RECEIVE move an account balance, CREDIT consumes card limit.
    An installment purchase is stored as ``total_installments`` records that
    share a ``purchase_group_id``.
    """

    transaction_id: str
    transaction_type: TransactionType
    date: date
    description: str
    amount: Decimal  # always positive
    category: str

    # Exactly one of these is set, depending on transaction_type
    account_id: str | None = None
    card_id: str | None = None

    # Installment fields (optional)
    installment_number: int | None = None
    total_installments: int | None = None
    purchase_group_id: str | None = None

    # Goal that received a savings contribution
    goal_id: str | None = None

    is_paid: bool = False
    user_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_installment(self) -> bool:
        return self.total_installments is not None and self.total_installments > 1
