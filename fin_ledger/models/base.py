"""Base models shared across domains."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from fin_ledger.exceptions import InvalidAmountError

CENTS = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Coerce a value to a two-place currency amount.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.10")`` and not
    its binary expansion.

    Raises
    ------
    InvalidAmountError
        If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}") from exc
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class Event:
    """Standard event envelope for ledger changes."""

    event_id: str
    event_type: str  # entity.action (e.g., transaction.created)
    event_time: datetime
    source: str  # Service/system that generated
    subject: str  # Entity ID affected
    data: dict
    metadata: dict = field(default_factory=dict)
