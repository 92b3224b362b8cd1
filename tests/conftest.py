"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fin_ledger.ledger.lifecycle import TransactionService
from fin_ledger.models.financial import (
    Account,
    AccountType,
    CardBrand,
    CreditCard,
    Goal,
    Transaction,
    TransactionType,
)
from fin_ledger.store.ledger import LedgerStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_user_id() -> str:
    """Sample user ID."""
    return "user-test-001"


@pytest.fixture
def purchase_date() -> date:
    """A past date, so future-date validation never interferes."""
    return date(2024, 1, 31)


@pytest.fixture
def account(sample_user_id: str) -> Account:
    """Checking account with 1000.00."""
    return Account(
        account_id="acct-001",
        user_id=sample_user_id,
        account_type=AccountType.CHECKING,
        institution_name="Nubank",
        balance=Decimal("1000.00"),
        created_at=datetime(2024, 1, 1, 9, 0),
    )


@pytest.fixture
def card(sample_user_id: str) -> CreditCard:
    """Card with 5000.00 available, due on the 10th, closing 7 days before."""
    return CreditCard(
        card_id="card-001",
        user_id=sample_user_id,
        issuer_bank="Itaú",
        card_brand=CardBrand.VISA,
        last_four_digits="1234",
        available_limit=Decimal("5000.00"),
        due_day=10,
        closing_offset=7,
        created_at=datetime(2024, 1, 1, 9, 0),
    )


@pytest.fixture
def goal(sample_user_id: str) -> Goal:
    """House goal with a 5000.00 target."""
    return Goal(
        goal_id="goal-001",
        user_id=sample_user_id,
        name="Casa própria",
        target_amount=Decimal("5000.00"),
        created_at=datetime(2024, 1, 1, 9, 0),
        icon="🏡",
    )


@pytest.fixture
def store(account: Account, card: CreditCard, goal: Goal) -> LedgerStore:
    """Store holding one account, one card and one goal."""
    store = LedgerStore()
    store.add_account(account)
    store.add_credit_card(card)
    store.add_goal(goal)
    return store


@pytest.fixture
def service(store: LedgerStore) -> TransactionService:
    """Transaction service over the populated store."""
    return TransactionService(store)


@pytest.fixture
def make_transaction(purchase_date: date):
    """Factory for transactions with sensible defaults per type."""

    def _make(
        transaction_type: TransactionType = TransactionType.DEBIT,
        amount: str = "100.00",
        transaction_id: str = "tx-001",
        category: str = "Restaurantes",
        **overrides,
    ) -> Transaction:
        if transaction_type == TransactionType.CREDIT:
            references = {"card_id": "card-001"}
        else:
            references = {"account_id": "acct-001"}
        fields = {
            "transaction_id": transaction_id,
            "transaction_type": transaction_type,
            "date": purchase_date,
            "description": "Test transaction",
            "amount": Decimal(amount),
            "category": category,
            **references,
            **overrides,
        }
        return Transaction(**fields)

    return _make
