"""Savings goal generator for demo ledgers."""

import random
from datetime import date, datetime, timedelta
from decimal import Decimal

from fin_ledger.generators.base import BaseGenerator
from fin_ledger.models.financial import Goal


class GoalGenerator(BaseGenerator):
    """Generate savings goals with no progress yet."""

    # (name, icon, target range)
    GOALS = [
        ("Casa própria", "🏡", (20000, 80000)),
        ("Reserva de emergência", "🆘", (5000, 30000)),
        ("Viagem", "🌴", (3000, 15000)),
        ("Carro novo", "🚗", (15000, 60000)),
        ("Curso", "📚", (1000, 8000)),
        ("Notebook", "💻", (3000, 10000)),
    ]

    def generate(self, user_id: str) -> Goal:
        """Generate a single goal with an optional deadline 3-36 months out."""
        name, icon, target_range = random.choice(self.GOALS)
        target = Decimal(str(round(random.uniform(*target_range), -2)))
        deadline = (
            date.today() + timedelta(days=30 * random.randint(3, 36))
            if random.random() < 0.7
            else None
        )
        return Goal(
            goal_id=self.new_id(),
            user_id=user_id,
            name=name,
            target_amount=target.quantize(Decimal("0.01")),
            created_at=datetime.now() - timedelta(days=random.randint(0, 180)),
            deadline=deadline,
            icon=icon,
        )
