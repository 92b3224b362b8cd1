"""Savings goal model for financial domain."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass
class Goal:
    """Savings goal fed by goal-category RECEIVE transactions."""

    goal_id: str
    user_id: str
    name: str
    target_amount: Decimal
    created_at: datetime
    current_amount: Decimal = Decimal("0.00")
    deadline: date | None = None
    icon: str = "🎯"
    updated_at: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def progress_percent(self) -> int:
        """Progress towards the target, capped at 100."""
        if self.target_amount <= 0:
            return 100
        return min(100, round(self.current_amount / self.target_amount * 100))
