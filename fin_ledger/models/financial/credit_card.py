"""Credit card model for financial domain."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from fin_ledger.exceptions import InvalidEntityStateError
from fin_ledger.models.financial.enums import CardBrand

DAYS_PER_STATEMENT = 30


def derive_closing_day(due_day: int, closing_offset: int) -> int:
    """Day of month the statement closes, ``closing_offset`` days before due."""
    closing_day = due_day - closing_offset
    if closing_day <= 0:
        closing_day += DAYS_PER_STATEMENT
    return closing_day


@dataclass
class CreditCard:
    """Credit card entity.

    ``available_limit`` is the remaining credit, not the total line: spending
    decrements it and reversals add it back.
    """

    card_id: str
    user_id: str
    issuer_bank: str
    card_brand: CardBrand
    last_four_digits: str
    available_limit: Decimal
    due_day: int  # 1-31
    closing_offset: int  # days before due_day
    created_at: datetime
    closing_day: int = field(init=False)
    limit_date: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not 1 <= self.due_day <= 31:
            raise InvalidEntityStateError(f"Card {self.card_id}: due day {self.due_day} outside 1-31")
        if not 0 <= self.closing_offset < DAYS_PER_STATEMENT:
            raise InvalidEntityStateError(
                f"Card {self.card_id}: closing offset {self.closing_offset} outside 0-29"
            )
        self.closing_day = derive_closing_day(self.due_day, self.closing_offset)
