"""Transaction lifecycle: create, update and delete with balance bookkeeping.

Each operation runs inside ``LedgerStore.atomic()``. Either the record and
all of its side effects land, or the ledger is left exactly as it was.
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import fields, replace
from datetime import date, datetime
from typing import Any, Protocol

from fin_ledger.config import LedgerConfig
from fin_ledger.exceptions import (
    EntityNotFoundError,
    InvalidAmountError,
    InvalidEntityStateError,
    InvalidInstallmentPlanError,
    InvalidReferenceError,
    ValidationError,
)
from fin_ledger.ledger.effects import BalanceEffectEngine
from fin_ledger.ledger.installments import InstallmentExpander
from fin_ledger.models.base import Event, to_money
from fin_ledger.models.financial import Account, CreditCard, Goal, Transaction, TransactionType
from fin_ledger.sinks.serialization import to_dict_fast
from fin_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

TRANSACTION_FIELDS = frozenset(f.name for f in fields(Transaction))
MIN_DESCRIPTION_LENGTH = 3


class EventPublisher(Protocol):
    """Anything that can receive ledger events (Kafka, console, tests)."""

    def publish(self, event: Event) -> None: ...


class TransactionService:
    """Create, update and delete ledger transactions.

    Parameters
    ----------
    store : LedgerStore
        Ledger the service operates on.
    engine : BalanceEffectEngine | None
        Balance effect engine (built from ``store`` when omitted).
    expander : InstallmentExpander | None
        Installment expander (built from the config rules when omitted).
    publisher : EventPublisher | None
        Receives one event per successful operation.
    config : LedgerConfig | None
        Ledger configuration.
    """

    SOURCE = "fin-ledger"

    def __init__(
        self,
        store: LedgerStore,
        engine: BalanceEffectEngine | None = None,
        expander: InstallmentExpander | None = None,
        publisher: EventPublisher | None = None,
        config: LedgerConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or LedgerConfig()
        self.engine = engine or BalanceEffectEngine(store, self.config.rules)
        self.expander = expander or InstallmentExpander(self.config.rules)
        self.publisher = publisher

    # Queries
    def get_accounts(self) -> list[Account]:
        return list(self.store.accounts.values())

    def get_cards(self) -> list[CreditCard]:
        return list(self.store.credit_cards.values())

    def get_goals(self) -> list[Goal]:
        return list(self.store.goals.values())

    def get_transactions(self) -> list[Transaction]:
        """Transactions, most recently created first."""
        return list(self.store.transactions)

    # Commands
    def create(self, transaction: Transaction, installments: int = 1) -> list[Transaction]:
        """Record a transaction and apply its effect.

        With ``installments > 1`` a CREDIT purchase is split into monthly
        records and its full amount is reserved on the card once.

        Returns
        -------
        list[Transaction]
            The stored records, in installment order.
        """
        if isinstance(installments, bool) or not isinstance(installments, int) or installments < 1:
            raise InvalidInstallmentPlanError(f"Installment count must be positive, got {installments!r}")
        if not transaction.transaction_id:
            transaction.transaction_id = uuid.uuid4().hex
        self.validate(transaction)

        with self.store.atomic():
            if installments > 1:
                plan = self.expander.expand(transaction, installments)
                self._ensure_new_ids(plan.transactions)
                self.engine.charge_card(plan.card_id, plan.total_amount)
                records = plan.transactions
            else:
                self._ensure_new_ids([transaction])
                self.engine.apply(transaction)
                records = [transaction]
            self.store.prepend_transactions(records)
            self._publish("transaction.created", records[0].transaction_id, records)

        logger.info(
            "Created %s %s of %s (%d record%s)",
            transaction.transaction_type.value,
            transaction.transaction_id,
            transaction.amount,
            len(records),
            "" if len(records) == 1 else "s",
            extra={
                "transaction_id": transaction.transaction_id,
                "purchase_group_id": records[0].purchase_group_id,
            },
        )
        return records

    def update(self, transaction_id: str, patch: Mapping[str, Any]) -> Transaction:
        """Replace a transaction with ``old + patch``, reversing then reapplying.

        The final ledger state equals ``delete(transaction_id)`` followed by
        ``create(merged)``; the record keeps its id and moves to the head of
        the ledger. A goal contribution stays with the goal that received it
        unless ``goal_id`` is patched or the record no longer qualifies.
        """
        unknown = set(patch) - TRANSACTION_FIELDS
        if unknown:
            raise ValidationError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")
        if patch.get("transaction_id", transaction_id) != transaction_id:
            raise ValidationError("Transaction id cannot be changed")

        with self.store.atomic():
            old = self.store.get_transaction(transaction_id)
            self.engine.reverse(old)
            self.store.discard_transaction(transaction_id)

            merged = replace(old, **{**patch, "transaction_id": transaction_id, "updated_at": datetime.now()})
            if "goal_id" not in patch and (
                not self.engine.qualifies_for_goal(merged) or merged.goal_id not in self.store.goals
            ):
                merged.goal_id = None

            self.validate(merged, accepted_date=old.date)
            self.engine.apply(merged)
            self.store.prepend_transactions([merged])
            self._publish("transaction.updated", transaction_id, [merged])

        logger.info(
            "Updated transaction %s (%s)",
            transaction_id,
            ", ".join(sorted(patch)) or "no changes",
            extra={"transaction_id": transaction_id, "purchase_group_id": merged.purchase_group_id},
        )
        return merged

    def delete(self, transaction_id: str) -> Transaction:
        """Reverse a transaction's effect and remove it.

        Deleting a single installment restores only that installment's amount
        to the card.
        """
        with self.store.atomic():
            transaction = self.store.get_transaction(transaction_id)
            self.engine.reverse(transaction)
            self.store.discard_transaction(transaction_id)
            self._publish("transaction.deleted", transaction_id, [transaction])

        logger.info(
            "Deleted transaction %s",
            transaction_id,
            extra={"transaction_id": transaction_id, "purchase_group_id": transaction.purchase_group_id},
        )
        return transaction

    def delete_purchase(self, purchase_group_id: str) -> list[Transaction]:
        """Delete every remaining installment of one purchase."""
        with self.store.atomic():
            records = self.store.get_purchase_transactions(purchase_group_id)
            if not records:
                raise EntityNotFoundError(f"Purchase {purchase_group_id} not found")
            for record in records:
                self.engine.reverse(record)
                self.store.discard_transaction(record.transaction_id)
            self._publish("purchase.deleted", purchase_group_id, records)

        logger.info(
            "Deleted purchase %s (%d installments)",
            purchase_group_id,
            len(records),
            extra={"purchase_group_id": purchase_group_id},
        )
        return records

    # Validation
    def validate(
        self,
        transaction: Transaction,
        today: date | None = None,
        accepted_date: date | None = None,
    ) -> None:
        """Normalize and check a transaction before it touches the ledger.

        Coerces string types, ISO dates and numeric amounts in place.

        Parameters
        ----------
        transaction : Transaction
            Record to check.
        today : date | None
            Reference day for the future-date rule (default: today).
        accepted_date : date | None
            Date the stored record already carries. Keeping it is allowed even
            when it lies in the future, as with later installments of a plan.
        """
        try:
            transaction.transaction_type = TransactionType(transaction.transaction_type)
        except ValueError:
            raise ValidationError(f"Unknown transaction type: {transaction.transaction_type!r}") from None

        amount = to_money(transaction.amount)
        if amount <= 0:
            raise InvalidAmountError(f"Amount must be positive, got {transaction.amount}")
        transaction.amount = amount

        if isinstance(transaction.date, str):
            try:
                transaction.date = date.fromisoformat(transaction.date[:10])
            except ValueError:
                raise ValidationError(f"Invalid date: {transaction.date!r}") from None
        elif isinstance(transaction.date, datetime):
            transaction.date = transaction.date.date()
        elif not isinstance(transaction.date, date):
            raise ValidationError(f"Invalid date: {transaction.date!r}")

        today = today or date.today()
        if (
            transaction.date > today
            and transaction.date != accepted_date
            and not self.config.rules.allow_future_dates
        ):
            raise ValidationError(f"Future date not allowed: {transaction.date.isoformat()}")

        if len((transaction.description or "").strip()) < MIN_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description must have at least {MIN_DESCRIPTION_LENGTH} characters"
            )
        if not (transaction.category or "").strip():
            raise ValidationError("Category is required")

        self._validate_references(transaction)

    def _validate_references(self, transaction: Transaction) -> None:
        if transaction.transaction_type == TransactionType.CREDIT:
            if not transaction.card_id:
                raise InvalidReferenceError("Credit transactions require a credit card")
            if transaction.account_id:
                raise InvalidReferenceError("Credit transactions cannot reference an account")
        else:
            if not transaction.account_id:
                raise InvalidReferenceError(
                    f"{transaction.transaction_type.value.capitalize()} transactions require an account"
                )
            if transaction.card_id:
                raise InvalidReferenceError(
                    f"{transaction.transaction_type.value.capitalize()} transactions cannot reference a card"
                )

        if transaction.goal_id is not None and not self.engine.qualifies_for_goal(transaction):
            raise InvalidReferenceError(
                "Only goal-category receive transactions can reference a goal"
            )

    def _ensure_new_ids(self, records: list[Transaction]) -> None:
        for record in records:
            if self.store.has_transaction(record.transaction_id):
                raise InvalidEntityStateError(f"Transaction {record.transaction_id} already exists")

    def _publish(self, event_type: str, subject: str, records: list[Transaction]) -> None:
        if self.publisher is None:
            return
        self.publisher.publish(
            Event(
                event_id=uuid.uuid4().hex,
                event_type=event_type,
                event_time=datetime.now(),
                source=self.SOURCE,
                subject=subject,
                data={"transactions": [to_dict_fast(record) for record in records]},
            )
        )
