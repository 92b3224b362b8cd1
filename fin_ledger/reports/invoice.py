"""Credit card statement periods and open-statement totals."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from fin_ledger.models.financial import CreditCard, Transaction, TransactionType
from fin_ledger.store.ledger import LedgerStore


@dataclass
class Statement:
    """The open statement of a card."""

    card_id: str
    start: date
    closing: date
    due: date
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((t.amount for t in self.transactions), Decimal("0.00"))


def _closing_date(card: CreditCard, year: int, month: int) -> date:
    # Day offsets roll over month boundaries: day 0 is the previous month's last day.
    month_index = year * 12 + month - 1
    year, month = divmod(month_index, 12)
    return date(year, month + 1, 1) + timedelta(days=card.due_day - card.closing_offset - 1)


def statement_period(card: CreditCard, today: date | None = None) -> tuple[date, date]:
    """Start and closing date of the statement that is open on ``today``.

    The statement closes ``closing_offset`` days before the due day. Once this
    month's closing date has passed, the open statement is next month's.
    """
    today = today or date.today()
    closing_this_month = _closing_date(card, today.year, today.month)

    if today > closing_this_month:
        closing = _closing_date(card, today.year, today.month + 1)
        previous_closing = closing_this_month
    else:
        closing = closing_this_month
        previous_closing = _closing_date(card, today.year, today.month - 1)

    return previous_closing + timedelta(days=1), closing


def open_statement(store: LedgerStore, card_id: str, today: date | None = None) -> Statement:
    """Credit transactions of a card that fall in its open statement."""
    card = store.get_credit_card(card_id)
    start, closing = statement_period(card, today)
    transactions = [
        t
        for t in store.get_card_transactions(card_id)
        if t.transaction_type == TransactionType.CREDIT and start <= t.date <= closing
    ]
    return Statement(
        card_id=card_id,
        start=start,
        closing=closing,
        due=closing + timedelta(days=card.closing_offset),
        transactions=transactions,
    )
