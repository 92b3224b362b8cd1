"""Balance effects of transactions on accounts, cards and goals.

Every transaction moves exactly one balance:

- DEBIT   -> account balance decreases
- RECEIVE -> account balance increases (and a goal may be credited)
- CREDIT  -> card available limit decreases

Reversal is the exact inverse. Goal contributions are recorded on the
transaction as ``goal_id`` when applied, so reversing one always hits the
goal that received it.
"""

import logging
from datetime import datetime
from decimal import Decimal

from fin_ledger.config import RulesConfig
from fin_ledger.models.financial import Goal, Transaction, TransactionType
from fin_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class BalanceEffectEngine:
    """Apply and reverse the side effects of ledger transactions.

    Parameters
    ----------
    store : LedgerStore
        Ledger whose accounts, cards and goals are mutated.
    rules : RulesConfig | None
        Bookkeeping rules (goal category markers).
    """

    def __init__(self, store: LedgerStore, rules: RulesConfig | None = None) -> None:
        self.store = store
        self.rules = rules or RulesConfig()

    def qualifies_for_goal(self, transaction: Transaction) -> bool:
        """Whether a transaction contributes to savings goals."""
        return (
            transaction.transaction_type == TransactionType.RECEIVE
            and self.rules.is_goal_category(transaction.category)
        )

    def pick_goal(self) -> Goal | None:
        """First goal, in container order, that has not reached its target."""
        for goal in self.store.goals.values():
            if goal.current_amount < goal.target_amount:
                return goal
        return None

    def apply(self, transaction: Transaction) -> None:
        """Apply a transaction's effect.

        Raises ``EntityNotFoundError`` when the referenced account, card or
        explicit goal does not exist. A goal-category RECEIVE without a goal
        is routed to the first incomplete goal and the choice is written to
        ``transaction.goal_id``; when every goal is complete nothing is
        credited.
        """
        tx_type = transaction.transaction_type

        if tx_type == TransactionType.DEBIT:
            self._move_account(transaction.account_id, -transaction.amount)
        elif tx_type == TransactionType.RECEIVE:
            self._move_account(transaction.account_id, transaction.amount)
            if self.qualifies_for_goal(transaction):
                self._contribute_to_goal(transaction)
        elif tx_type == TransactionType.CREDIT:
            self.charge_card(transaction.card_id, transaction.amount)

    def reverse(self, transaction: Transaction) -> None:
        """Undo a transaction's effect.

        Entities removed since the transaction was applied are skipped with a
        warning so the transaction itself can still be deleted.
        """
        tx_type = transaction.transaction_type

        if tx_type == TransactionType.DEBIT:
            self._restore_account(transaction, transaction.amount)
        elif tx_type == TransactionType.RECEIVE:
            self._restore_account(transaction, -transaction.amount)
            if transaction.goal_id is not None:
                self._withdraw_from_goal(transaction)
        elif tx_type == TransactionType.CREDIT:
            if transaction.card_id in self.store.credit_cards:
                self.charge_card(transaction.card_id, -transaction.amount)
            else:
                logger.warning(
                    "Card %s no longer exists; limit not restored for %s",
                    transaction.card_id,
                    transaction.transaction_id,
                )

    def charge_card(self, card_id: str | None, amount: Decimal) -> None:
        """Consume (positive amount) or release (negative) card limit."""
        card = self.store.get_credit_card(card_id)
        card.available_limit -= amount
        card.updated_at = datetime.now()
        logger.debug("Card %s limit %+.2f -> %s", card_id, -amount, card.available_limit)

    def _move_account(self, account_id: str | None, delta: Decimal) -> None:
        account = self.store.get_account(account_id)
        account.balance += delta
        account.updated_at = datetime.now()
        logger.debug("Account %s balance %+.2f -> %s", account_id, delta, account.balance)

    def _restore_account(self, transaction: Transaction, delta: Decimal) -> None:
        if transaction.account_id not in self.store.accounts:
            logger.warning(
                "Account %s no longer exists; balance not restored for %s",
                transaction.account_id,
                transaction.transaction_id,
            )
            return
        self._move_account(transaction.account_id, delta)

    def _contribute_to_goal(self, transaction: Transaction) -> None:
        if transaction.goal_id is not None:
            goal = self.store.get_goal(transaction.goal_id)
        else:
            goal = self.pick_goal()
            if goal is None:
                logger.info(
                    "No incomplete goal for %s; contribution of %s not routed",
                    transaction.transaction_id,
                    transaction.amount,
                )
                return
            transaction.goal_id = goal.goal_id

        goal.current_amount += transaction.amount
        goal.updated_at = datetime.now()
        logger.debug("Goal %s progress -> %s", goal.goal_id, goal.current_amount)

    def _withdraw_from_goal(self, transaction: Transaction) -> None:
        goal = self.store.goals.get(transaction.goal_id)
        if goal is None:
            logger.warning(
                "Goal %s no longer exists; contribution not withdrawn for %s",
                transaction.goal_id,
                transaction.transaction_id,
            )
            return
        goal.current_amount = max(ZERO, goal.current_amount - transaction.amount)
        goal.updated_at = datetime.now()
        logger.debug("Goal %s progress -> %s", goal.goal_id, goal.current_amount)
