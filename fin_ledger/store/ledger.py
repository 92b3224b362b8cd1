"""In-memory ledger store for one user's accounts, cards, goals and transactions."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

from fin_ledger.exceptions import EntityNotFoundError, InvalidEntityStateError, ValidationError
from fin_ledger.models.financial import Account, CreditCard, Goal, Transaction
from fin_ledger.models.financial.credit_card import derive_closing_day

logger = logging.getLogger(__name__)

# Fields owned by the balance engine; direct edits would desync the ledger.
_DERIVED_FIELDS = {
    "accounts": {"account_id", "balance"},
    "credit_cards": {"card_id", "available_limit", "closing_day"},
    "goals": {"goal_id", "current_amount"},
}


@dataclass
class LedgerStore:
    """In-memory store for ledger entities.

    Accounts, cards and goals are keyed by id and keep insertion order.
    Transactions are kept most-recent-first.
    """

    accounts: dict[str, Account] = field(default_factory=dict)
    credit_cards: dict[str, CreditCard] = field(default_factory=dict)
    goals: dict[str, Goal] = field(default_factory=dict)
    transactions: list[Transaction] = field(default_factory=list)

    # Accounts
    def add_account(self, account: Account) -> None:
        """Add an account to the store."""
        if account.account_id in self.accounts:
            raise InvalidEntityStateError(f"Account {account.account_id} already exists")
        if account.updated_at is None:
            account.updated_at = account.created_at
        self.accounts[account.account_id] = account

    def get_account(self, account_id: str) -> Account:
        """Get an account or raise ``EntityNotFoundError``."""
        try:
            return self.accounts[account_id]
        except KeyError:
            raise EntityNotFoundError(f"Account {account_id} not found") from None

    def update_account(self, account_id: str, **changes: Any) -> Account:
        """Edit descriptive account fields (not the balance)."""
        account = self.get_account(account_id)
        self._apply_changes("accounts", account, changes)
        account.updated_at = datetime.now()
        return account

    def remove_account(self, account_id: str) -> Account:
        """Remove an account; transactions that reference it are kept."""
        account = self.get_account(account_id)
        del self.accounts[account_id]
        return account

    # Credit cards
    def add_credit_card(self, card: CreditCard) -> None:
        """Add a credit card to the store."""
        if card.card_id in self.credit_cards:
            raise InvalidEntityStateError(f"Credit card {card.card_id} already exists")
        self.credit_cards[card.card_id] = card

    def get_credit_card(self, card_id: str) -> CreditCard:
        """Get a credit card or raise ``EntityNotFoundError``."""
        try:
            return self.credit_cards[card_id]
        except KeyError:
            raise EntityNotFoundError(f"Credit card {card_id} not found") from None

    def update_credit_card(self, card_id: str, **changes: Any) -> CreditCard:
        """Edit card details; the closing day is re-derived."""
        card = self.get_credit_card(card_id)
        due_day = changes.get("due_day", card.due_day)
        closing_offset = changes.get("closing_offset", card.closing_offset)
        if not 1 <= due_day <= 31:
            raise InvalidEntityStateError(f"Card {card_id}: due day {due_day} outside 1-31")
        if not 0 <= closing_offset < 30:
            raise InvalidEntityStateError(f"Card {card_id}: closing offset {closing_offset} outside 0-29")
        self._apply_changes("credit_cards", card, changes)
        card.closing_day = derive_closing_day(due_day, closing_offset)
        card.updated_at = datetime.now()
        return card

    def remove_credit_card(self, card_id: str) -> CreditCard:
        """Remove a credit card; transactions that reference it are kept."""
        card = self.get_credit_card(card_id)
        del self.credit_cards[card_id]
        return card

    # Goals
    def add_goal(self, goal: Goal) -> None:
        """Add a savings goal to the store."""
        if goal.goal_id in self.goals:
            raise InvalidEntityStateError(f"Goal {goal.goal_id} already exists")
        self.goals[goal.goal_id] = goal

    def get_goal(self, goal_id: str) -> Goal:
        """Get a goal or raise ``EntityNotFoundError``."""
        try:
            return self.goals[goal_id]
        except KeyError:
            raise EntityNotFoundError(f"Goal {goal_id} not found") from None

    def update_goal(self, goal_id: str, **changes: Any) -> Goal:
        """Edit goal details (name, target, deadline, icon)."""
        goal = self.get_goal(goal_id)
        self._apply_changes("goals", goal, changes)
        goal.updated_at = datetime.now()
        return goal

    def remove_goal(self, goal_id: str) -> Goal:
        """Remove a goal."""
        goal = self.get_goal(goal_id)
        del self.goals[goal_id]
        return goal

    # Transactions
    def prepend_transactions(self, transactions: list[Transaction]) -> None:
        """Insert records at the head of the ledger, last element ending up first."""
        for transaction in transactions:
            if transaction.created_at is None:
                transaction.created_at = datetime.now()
            self.transactions.insert(0, transaction)

    def find_transaction(self, transaction_id: str) -> Transaction | None:
        """Find a transaction by id."""
        for transaction in self.transactions:
            if transaction.transaction_id == transaction_id:
                return transaction
        return None

    def get_transaction(self, transaction_id: str) -> Transaction:
        """Get a transaction or raise ``EntityNotFoundError``."""
        transaction = self.find_transaction(transaction_id)
        if transaction is None:
            raise EntityNotFoundError(f"Transaction {transaction_id} not found")
        return transaction

    def has_transaction(self, transaction_id: str) -> bool:
        return self.find_transaction(transaction_id) is not None

    def discard_transaction(self, transaction_id: str) -> Transaction:
        """Remove a transaction record without touching balances."""
        transaction = self.get_transaction(transaction_id)
        self.transactions.remove(transaction)
        return transaction

    def get_purchase_transactions(self, purchase_group_id: str) -> list[Transaction]:
        """Get all installments of one purchase, in ledger order."""
        return [t for t in self.transactions if t.purchase_group_id == purchase_group_id]

    def get_account_transactions(self, account_id: str) -> list[Transaction]:
        """Get all transactions for an account."""
        return [t for t in self.transactions if t.account_id == account_id]

    def get_card_transactions(self, card_id: str) -> list[Transaction]:
        """Get all transactions for a credit card."""
        return [t for t in self.transactions if t.card_id == card_id]

    # Unit of work
    def snapshot(self) -> dict[str, Any]:
        """Capture every entity together with a copy of its fields.

        Entity fields hold immutable values (``Decimal``, ``str``, dates,
        enums), so a shallow copy of each field dict is enough. The cost is
        one dict copy per entity, linear in the ledger size.
        """
        return {
            "accounts": [(e, dict(vars(e))) for e in self.accounts.values()],
            "credit_cards": [(e, dict(vars(e))) for e in self.credit_cards.values()],
            "goals": [(e, dict(vars(e))) for e in self.goals.values()],
            "transactions": [(t, dict(vars(t))) for t in self.transactions],
        }

    def restore(self, state: dict[str, Any]) -> None:
        """Bring all containers back to a snapshot.

        Entities are reset in place, so references held by callers stay valid.
        """
        for name, key in (("accounts", "account_id"), ("credit_cards", "card_id"), ("goals", "goal_id")):
            container: dict[str, Any] = getattr(self, name)
            container.clear()
            for entity, saved in state[name]:
                vars(entity).clear()
                vars(entity).update(saved)
                container[getattr(entity, key)] = entity

        for transaction, saved in state["transactions"]:
            vars(transaction).clear()
            vars(transaction).update(saved)
        self.transactions[:] = [t for t, _ in state["transactions"]]

    @contextmanager
    def atomic(self) -> Iterator["LedgerStore"]:
        """Run a block as one unit: on any exception every container is rolled back.

        Each call snapshots the whole ledger, so bulk loads should build
        entities directly in the containers rather than one ``atomic`` block
        per record.
        """
        state = self.snapshot()
        try:
            yield self
        except BaseException:
            self.restore(state)
            logger.debug("Ledger rolled back to pre-operation snapshot")
            raise

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "accounts": len(self.accounts),
            "credit_cards": len(self.credit_cards),
            "goals": len(self.goals),
            "transactions": len(self.transactions),
        }

    def _apply_changes(self, container: str, entity: Any, changes: dict[str, Any]) -> None:
        allowed = {f.name for f in fields(entity)} - _DERIVED_FIELDS[container]
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(
                f"Cannot change {', '.join(sorted(unknown))} on {type(entity).__name__}"
            )
        for name, value in changes.items():
            setattr(entity, name, value)
