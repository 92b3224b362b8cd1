"""Financial domain models."""

from fin_ledger.models.financial.account import Account
from fin_ledger.models.financial.credit_card import CreditCard, derive_closing_day
from fin_ledger.models.financial.enums import (
    AccountType,
    CardBrand,
    HealthStatus,
    RoundingPolicy,
    TransactionType,
)
from fin_ledger.models.financial.goal import Goal
from fin_ledger.models.financial.transaction import Transaction

__all__ = [
    "Account",
    "AccountType",
    "CardBrand",
    "CreditCard",
    "Goal",
    "HealthStatus",
    "RoundingPolicy",
    "Transaction",
    "TransactionType",
    "derive_closing_day",
]
