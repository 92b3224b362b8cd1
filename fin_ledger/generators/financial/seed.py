"""Populate a ledger with demo data through the transaction service."""

import logging
import random
from datetime import date

from fin_ledger.exceptions import ValidationError
from fin_ledger.generators.financial.account import AccountGenerator
from fin_ledger.generators.financial.credit_card import CreditCardGenerator
from fin_ledger.generators.financial.goal import GoalGenerator
from fin_ledger.generators.financial.transaction import TransactionGenerator
from fin_ledger.ledger.lifecycle import TransactionService

logger = logging.getLogger(__name__)


def seed_ledger(
    service: TransactionService,
    user_id: str,
    accounts: int = 2,
    cards: int = 1,
    goals: int = 2,
    transactions: int = 50,
    seed: int | None = None,
    today: date | None = None,
) -> dict[str, int]:
    """Add accounts, cards and goals, then record random transactions.

    Every transaction goes through ``service.create`` so balances, limits
    and goal progress stay consistent with the ledger. Draws the service
    rejects, such as a date after the real current day, are skipped.

    ``seed`` is offset by the number of records already in the ledger, so
    seeding the same ledger twice adds new entities instead of repeating
    the first run's ids.

    Returns
    -------
    dict[str, int]
        Number of entities and transaction records added.
    """
    store = service.store
    if seed is not None:
        seed += sum(store.summary().values())

    account_gen = AccountGenerator(seed=seed)
    card_gen = CreditCardGenerator(seed=seed)
    goal_gen = GoalGenerator(seed=seed)
    tx_gen = TransactionGenerator(seed=seed)

    account_ids = []
    for _ in range(accounts):
        account = account_gen.generate(user_id)
        while account.account_id in store.accounts:
            account.account_id = account_gen.new_id()
        store.add_account(account)
        account_ids.append(account.account_id)

    card_ids = []
    for _ in range(cards):
        card = card_gen.generate(user_id)
        while card.card_id in store.credit_cards:
            card.card_id = card_gen.new_id()
        store.add_credit_card(card)
        card_ids.append(card.card_id)

    for _ in range(goals):
        goal = goal_gen.generate(user_id)
        while goal.goal_id in store.goals:
            goal.goal_id = goal_gen.new_id()
        store.add_goal(goal)

    records = 0
    if account_ids:
        for _ in range(transactions):
            transaction = tx_gen.generate(
                random.choice(account_ids),
                random.choice(card_ids) if card_ids else None,
                today=today,
            )
            transaction.transaction_id = tx_gen.new_id()
            while store.has_transaction(transaction.transaction_id):
                transaction.transaction_id = tx_gen.new_id()
            transaction.user_id = user_id
            try:
                records += len(service.create(transaction, tx_gen.installment_count(transaction)))
            except ValidationError as exc:
                logger.debug("Skipped generated transaction: %s", exc)

    counts = {
        "accounts": len(account_ids),
        "credit_cards": len(card_ids),
        "goals": goals,
        "transactions": records,
    }
    logger.info("Seeded ledger for %s: %s", user_id, counts)
    return counts
