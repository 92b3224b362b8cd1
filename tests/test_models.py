"""Tests for ledger models."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fin_ledger.exceptions import InvalidAmountError, InvalidEntityStateError
from fin_ledger.models import CENTS, Event, to_money
from fin_ledger.models.financial import (
    AccountType,
    CardBrand,
    CreditCard,
    Goal,
    Transaction,
    TransactionType,
    derive_closing_day,
)


class TestToMoney:
    """Tests for currency coercion."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (Decimal("10"), Decimal("10.00")),
            (10, Decimal("10.00")),
            (0.1, Decimal("0.10")),
            ("99.999", Decimal("100.00")),
            ("0.005", Decimal("0.01")),
        ],
    )
    def test_quantizes_to_cents(self, raw, expected: Decimal) -> None:
        result = to_money(raw)

        assert result == expected
        assert result.as_tuple().exponent == CENTS.as_tuple().exponent

    @pytest.mark.parametrize("raw", ["abc", None, True, float("nan"), "Infinity"])
    def test_rejects_non_numbers(self, raw) -> None:
        with pytest.raises(InvalidAmountError):
            to_money(raw)


class TestEnums:
    """Enums serialize by value and accept their string form."""

    def test_transaction_type_from_string(self) -> None:
        assert TransactionType("credit") is TransactionType.CREDIT

    def test_str_enum(self) -> None:
        assert AccountType.SAVINGS == "savings"
        assert CardBrand.MASTERCARD.value == "mastercard"


class TestCreditCard:
    """Tests for CreditCard closing day derivation."""

    def _card(self, due_day: int, closing_offset: int) -> CreditCard:
        return CreditCard(
            card_id="card-x",
            user_id="user-x",
            issuer_bank="Inter",
            card_brand=CardBrand.ELO,
            last_four_digits="0000",
            available_limit=Decimal("1000.00"),
            due_day=due_day,
            closing_offset=closing_offset,
            created_at=datetime(2024, 1, 1),
        )

    def test_closing_day_same_month(self) -> None:
        assert self._card(10, 7).closing_day == 3

    def test_closing_day_wraps(self) -> None:
        assert self._card(5, 10).closing_day == 25

    def test_closing_day_zero_wraps(self) -> None:
        assert derive_closing_day(7, 7) == 30

    @pytest.mark.parametrize("due_day", [0, 32])
    def test_invalid_due_day(self, due_day: int) -> None:
        with pytest.raises(InvalidEntityStateError, match="due day"):
            self._card(due_day, 5)

    @pytest.mark.parametrize("offset", [-1, 30])
    def test_invalid_offset(self, offset: int) -> None:
        with pytest.raises(InvalidEntityStateError, match="closing offset"):
            self._card(10, offset)


class TestGoal:
    """Tests for Goal progress helpers."""

    def _goal(self, current: str, target: str = "1000.00") -> Goal:
        return Goal(
            goal_id="g",
            user_id="u",
            name="Viagem",
            target_amount=Decimal(target),
            created_at=datetime(2024, 1, 1),
            current_amount=Decimal(current),
        )

    def test_defaults(self) -> None:
        goal = Goal(goal_id="g", user_id="u", name="Viagem", target_amount=Decimal("10"), created_at=datetime.now())

        assert goal.current_amount == Decimal("0.00")
        assert goal.icon == "🎯"
        assert goal.is_complete is False

    def test_progress(self) -> None:
        assert self._goal("250.00").progress_percent == 25

    def test_progress_capped(self) -> None:
        goal = self._goal("1500.00")

        assert goal.progress_percent == 100
        assert goal.is_complete is True


class TestTransaction:
    """Tests for the Transaction model."""

    def test_single_is_not_installment(self) -> None:
        tx = Transaction(
            transaction_id="t",
            transaction_type=TransactionType.DEBIT,
            date=date(2024, 1, 1),
            description="Mercado",
            amount=Decimal("10.00"),
            category="Outros",
            account_id="a",
        )

        assert tx.is_installment is False
        assert tx.goal_id is None
        assert tx.is_paid is False

    def test_installment(self) -> None:
        tx = Transaction(
            transaction_id="t",
            transaction_type=TransactionType.CREDIT,
            date=date(2024, 1, 1),
            description="TV (1/3)",
            amount=Decimal("10.00"),
            category="Compras online",
            card_id="c",
            installment_number=1,
            total_installments=3,
            purchase_group_id="grp",
        )

        assert tx.is_installment is True


class TestEvent:
    """Tests for the Event envelope."""

    def test_metadata_default(self) -> None:
        event = Event(
            event_id="e",
            event_type="transaction.created",
            event_time=datetime.now(),
            source="fin-ledger",
            subject="tx-001",
            data={},
        )

        assert event.metadata == {}
