"""Ledger bookkeeping: balance effects, installments and transaction lifecycle."""

from fin_ledger.ledger.effects import BalanceEffectEngine
from fin_ledger.ledger.installments import InstallmentExpander, InstallmentPlan, add_months, split_amount
from fin_ledger.ledger.lifecycle import EventPublisher, TransactionService

__all__ = [
    "BalanceEffectEngine",
    "EventPublisher",
    "InstallmentExpander",
    "InstallmentPlan",
    "TransactionService",
    "add_months",
    "split_amount",
]
