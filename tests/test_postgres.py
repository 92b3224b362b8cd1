"""Tests for PostgresLedgerRepository with a mocked psycopg connection."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from fin_ledger.exceptions import SinkError
from fin_ledger.ledger.lifecycle import TransactionService
from fin_ledger.models.financial import Goal, Transaction, TransactionType
from fin_ledger.sinks.postgres import SCHEMA_VERSION, TABLES, PostgresLedgerRepository, _columns, _row
from fin_ledger.sinks.serialization import to_dict_fast
from fin_ledger.store.ledger import LedgerStore


@pytest.fixture
def mock_conn():
    with patch("fin_ledger.sinks.postgres.psycopg.connect") as connect:
        conn = MagicMock()
        connect.return_value = conn
        yield conn


def _cursor(conn: MagicMock) -> MagicMock:
    return conn.cursor.return_value.__enter__.return_value


class TestRows:
    """Column and row mapping."""

    def test_columns_include_derived(self) -> None:
        assert "closing_day" in _columns(TABLES["credit_cards"])

    def test_row_stores_enum_values(self, make_transaction) -> None:
        row = _row(make_transaction(TransactionType.CREDIT))

        assert row[_columns(Transaction).index("transaction_type")] == "credit"
        assert len(row) == len(_columns(Transaction))


class TestPostgresLedgerRepository:
    """Tests for PostgresLedgerRepository."""

    def test_connect_failure(self) -> None:
        with patch("fin_ledger.sinks.postgres.psycopg.connect", side_effect=psycopg.OperationalError("refused")):
            with pytest.raises(SinkError, match="Cannot connect"):
                PostgresLedgerRepository("postgresql://localhost/finledger")

    def test_create_tables_stamps_version(self, mock_conn: MagicMock) -> None:
        cur = _cursor(mock_conn)
        cur.fetchone.return_value = None

        PostgresLedgerRepository("dsn").create_tables()

        cur.execute.assert_any_call("INSERT INTO ledger_schema (version) VALUES (%s)", (SCHEMA_VERSION,))
        mock_conn.commit.assert_called_once()

    def test_create_tables_version_mismatch(self, mock_conn: MagicMock) -> None:
        _cursor(mock_conn).fetchone.return_value = (SCHEMA_VERSION + 1,)

        with pytest.raises(SinkError, match="schema version"):
            PostgresLedgerRepository("dsn").create_tables()

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()

    def test_save(self, mock_conn: MagicMock, service: TransactionService, make_transaction) -> None:
        service.create(make_transaction(TransactionType.CREDIT, "300.00", transaction_id="p"), installments=3)
        cur = _cursor(mock_conn)

        counts = PostgresLedgerRepository("dsn").save("user-1", service.store)

        assert counts == {"accounts": 1, "credit_cards": 1, "goals": 1, "transactions": 3}
        mock_conn.transaction.assert_called_once()
        deletes = [c.args for c in cur.execute.call_args_list]
        assert ("DELETE FROM transactions WHERE ledger_id = %s", ("user-1",)) in deletes
        tx_sql, tx_rows = cur.executemany.call_args_list[-1].args
        assert tx_sql.startswith("INSERT INTO transactions (ledger_id, position,")
        assert [row[:3] for row in tx_rows] == [["user-1", 0, "p-3"], ["user-1", 1, "p-2"], ["user-1", 2, "p"]]

    def test_save_empty_store(self, mock_conn: MagicMock) -> None:
        counts = PostgresLedgerRepository("dsn").save("user-1", LedgerStore())

        assert counts == {"accounts": 0, "credit_cards": 0, "goals": 0, "transactions": 0}
        _cursor(mock_conn).executemany.assert_not_called()

    def test_save_failure(self, mock_conn: MagicMock) -> None:
        _cursor(mock_conn).execute.side_effect = psycopg.DatabaseError("disk full")

        with pytest.raises(SinkError, match="Cannot save"):
            PostgresLedgerRepository("dsn").save("user-1", LedgerStore())

    def test_load(self, mock_conn: MagicMock, store: LedgerStore, make_transaction) -> None:
        account = to_dict_fast(store.get_account("acct-001"))
        card = to_dict_fast(store.get_credit_card("card-001"))
        goal = to_dict_fast(store.get_goal("goal-001"))
        tx = to_dict_fast(make_transaction())
        _cursor(mock_conn).fetchall.side_effect = [
            [{"ledger_id": "user-1", **account}],
            [{"ledger_id": "user-1", **card}],
            [{"ledger_id": "user-1", **goal}],
            [{"ledger_id": "user-1", "position": 0, **tx}],
        ]

        loaded = PostgresLedgerRepository("dsn").load("user-1")

        assert loaded.get_account("acct-001").balance == Decimal("1000.00")
        assert loaded.get_credit_card("card-001").closing_day == 3
        assert loaded.get_goal("goal-001").name == "Casa própria"
        assert [t.transaction_id for t in loaded.transactions] == ["tx-001"]

    def test_save_records_container_positions(self, mock_conn: MagicMock, store: LedgerStore, goal: Goal) -> None:
        older = Goal(
            goal_id="goal-002",
            user_id=goal.user_id,
            name="Viagem",
            target_amount=Decimal("3000.00"),
            created_at=datetime(2023, 6, 1, 9, 0),
        )
        store.add_goal(older)
        cur = _cursor(mock_conn)

        PostgresLedgerRepository("dsn").save("user-1", store)

        inserts = {args[0].split()[2]: args for args in (c.args for c in cur.executemany.call_args_list)}
        goal_sql, goal_rows = inserts["goals"]
        assert goal_sql.startswith("INSERT INTO goals (ledger_id, position,")
        assert [row[:3] for row in goal_rows] == [["user-1", 0, "goal-001"], ["user-1", 1, "goal-002"]]
        assert [row[1] for row in inserts["accounts"][1]] == [0]
        assert [row[1] for row in inserts["credit_cards"][1]] == [0]

    def test_load_orders_by_position(self, mock_conn: MagicMock, goal: Goal) -> None:
        older = Goal(
            goal_id="goal-002",
            user_id=goal.user_id,
            name="Viagem",
            target_amount=Decimal("3000.00"),
            created_at=datetime(2023, 6, 1, 9, 0),
        )
        cur = _cursor(mock_conn)
        cur.fetchall.side_effect = [
            [],
            [],
            [
                {"ledger_id": "user-1", "position": 0, **to_dict_fast(goal)},
                {"ledger_id": "user-1", "position": 1, **to_dict_fast(older)},
            ],
            [],
        ]

        loaded = PostgresLedgerRepository("dsn").load("user-1")

        for call in cur.execute.call_args_list:
            assert call.args[0].endswith("ORDER BY position")
        assert list(loaded.goals) == ["goal-001", "goal-002"]
        assert TransactionService(loaded).engine.pick_goal().goal_id == "goal-001"

    def test_load_failure(self, mock_conn: MagicMock) -> None:
        _cursor(mock_conn).execute.side_effect = psycopg.OperationalError("gone")

        with pytest.raises(SinkError, match="Cannot load"):
            PostgresLedgerRepository("dsn").load("user-1")

    def test_close(self, mock_conn: MagicMock) -> None:
        PostgresLedgerRepository("dsn").close()

        mock_conn.close.assert_called_once()
