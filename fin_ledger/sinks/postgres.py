"""PostgreSQL repository for hosted ledgers."""

import logging
from dataclasses import fields
from enum import Enum
from typing import Any

import psycopg
from psycopg.rows import dict_row

from fin_ledger.exceptions import SinkError
from fin_ledger.models.financial import Account, CreditCard, Goal, Transaction
from fin_ledger.sinks.serialization import from_dict
from fin_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

# No foreign keys: references between containers are kept by convention.
# ``position`` preserves container order.
DDL = """
CREATE TABLE IF NOT EXISTS ledger_schema (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS accounts (
    ledger_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    account_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    account_type VARCHAR(10) NOT NULL,
    institution_name TEXT NOT NULL,
    balance NUMERIC(15,2) NOT NULL,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP,
    balance_date TIMESTAMP,
    institution_logo TEXT,
    PRIMARY KEY (ledger_id, account_id)
);

CREATE TABLE IF NOT EXISTS credit_cards (
    ledger_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    card_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    issuer_bank TEXT NOT NULL,
    card_brand VARCHAR(12) NOT NULL,
    last_four_digits CHAR(4) NOT NULL,
    available_limit NUMERIC(15,2) NOT NULL,
    due_day SMALLINT NOT NULL CHECK (due_day BETWEEN 1 AND 31),
    closing_offset SMALLINT NOT NULL,
    closing_day SMALLINT NOT NULL,
    created_at TIMESTAMP NOT NULL,
    limit_date TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY (ledger_id, card_id)
);

CREATE TABLE IF NOT EXISTS goals (
    ledger_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    goal_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    target_amount NUMERIC(15,2) NOT NULL,
    created_at TIMESTAMP NOT NULL,
    current_amount NUMERIC(15,2) NOT NULL DEFAULT 0,
    deadline DATE,
    icon TEXT,
    updated_at TIMESTAMP,
    PRIMARY KEY (ledger_id, goal_id)
);

CREATE TABLE IF NOT EXISTS transactions (
    ledger_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    transaction_id TEXT NOT NULL,
    transaction_type VARCHAR(10) NOT NULL,
    date DATE NOT NULL,
    description TEXT NOT NULL,
    amount NUMERIC(15,2) NOT NULL CHECK (amount > 0),
    category TEXT NOT NULL,
    account_id TEXT,
    card_id TEXT,
    installment_number SMALLINT,
    total_installments SMALLINT,
    purchase_group_id TEXT,
    goal_id TEXT,
    is_paid BOOLEAN NOT NULL DEFAULT FALSE,
    user_id TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY (ledger_id, transaction_id)
);

CREATE INDEX IF NOT EXISTS idx_transactions_purchase ON transactions(ledger_id, purchase_group_id);
"""

SCHEMA_VERSION = 1

TABLES: dict[str, type] = {
    "accounts": Account,
    "credit_cards": CreditCard,
    "goals": Goal,
    "transactions": Transaction,
}


def _columns(entity_cls: type) -> list[str]:
    return [f.name for f in fields(entity_cls)]


def _row(record: Any) -> list[Any]:
    """Column values for a record; enums are stored by value."""
    values = []
    for name in _columns(type(record)):
        value = getattr(record, name)
        values.append(value.value if isinstance(value, Enum) else value)
    return values


class PostgresLedgerRepository:
    """Save and load ledgers in PostgreSQL, one ``ledger_id`` per user.

    ``save`` replaces a ledger's rows in a single database transaction, so
    concurrent readers never observe a half-written ledger.
    """

    def __init__(self, connection_string: str) -> None:
        """Initialize PostgreSQL repository.

        Parameters
        ----------
        connection_string : str
            PostgreSQL connection string.
        """
        self.connection_string = connection_string
        try:
            self.conn = psycopg.connect(connection_string)
        except psycopg.Error as exc:
            raise SinkError(f"Cannot connect to PostgreSQL: {exc}") from exc

    def create_tables(self) -> None:
        """Create tables if they don't exist and stamp the schema version."""
        with self.conn.cursor() as cur:
            cur.execute(DDL)
            cur.execute("SELECT version FROM ledger_schema")
            row = cur.fetchone()
            if row is None:
                cur.execute("INSERT INTO ledger_schema (version) VALUES (%s)", (SCHEMA_VERSION,))
            elif row[0] != SCHEMA_VERSION:
                self.conn.rollback()
                raise SinkError(f"Database schema version {row[0]}, expected {SCHEMA_VERSION}")
        self.conn.commit()
        logger.info("Tables created successfully")

    def save(self, ledger_id: str, store: LedgerStore) -> dict[str, int]:
        """Replace the stored ledger with the contents of ``store``."""
        counts: dict[str, int] = {}
        try:
            with self.conn.transaction():
                with self.conn.cursor() as cur:
                    for table in TABLES:
                        cur.execute(f"DELETE FROM {table} WHERE ledger_id = %s", (ledger_id,))  # noqa: S608

                    counts["accounts"] = self._insert(cur, ledger_id, "accounts", list(store.accounts.values()))
                    counts["credit_cards"] = self._insert(
                        cur, ledger_id, "credit_cards", list(store.credit_cards.values())
                    )
                    counts["goals"] = self._insert(cur, ledger_id, "goals", list(store.goals.values()))
                    counts["transactions"] = self._insert(cur, ledger_id, "transactions", store.transactions)
        except psycopg.Error as exc:
            raise SinkError(f"Cannot save ledger {ledger_id}: {exc}") from exc

        logger.info("Ledger %s saved to PostgreSQL: %s", ledger_id, counts, extra={"ledger_id": ledger_id})
        return counts

    def load(self, ledger_id: str) -> LedgerStore:
        """Load a ledger; an unknown ``ledger_id`` yields an empty store."""
        store = LedgerStore()
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                for account in self._select(cur, ledger_id, "accounts"):
                    store.accounts[account.account_id] = account
                for card in self._select(cur, ledger_id, "credit_cards"):
                    store.credit_cards[card.card_id] = card
                for goal in self._select(cur, ledger_id, "goals"):
                    store.goals[goal.goal_id] = goal
                store.transactions = self._select(cur, ledger_id, "transactions")
        except psycopg.Error as exc:
            raise SinkError(f"Cannot load ledger {ledger_id}: {exc}") from exc

        logger.info(
            "Ledger %s loaded from PostgreSQL: %s", ledger_id, store.summary(), extra={"ledger_id": ledger_id}
        )
        return store

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()

    def _insert(self, cur: Any, ledger_id: str, table: str, records: list[Any]) -> int:
        """Insert records with their container position."""
        if not records:
            return 0
        columns = _columns(TABLES[table])
        placeholders = ", ".join(["%s"] * (len(columns) + 2))
        sql = (
            f"INSERT INTO {table} (ledger_id, position, {', '.join(columns)}) "  # noqa: S608
            f"VALUES ({placeholders})"
        )
        cur.executemany(
            sql,
            [[ledger_id, position, *_row(record)] for position, record in enumerate(records)],
        )
        return len(records)

    def _select(self, cur: Any, ledger_id: str, table: str) -> list[Any]:
        cur.execute(
            f"SELECT * FROM {table} WHERE ledger_id = %s ORDER BY position",  # noqa: S608
            (ledger_id,),
        )
        return [from_dict(TABLES[table], row) for row in cur.fetchall()]
