"""Credit card generator for demo ledgers."""

import random
from datetime import datetime, timedelta
from decimal import Decimal

from fin_ledger.generators.base import BaseGenerator
from fin_ledger.models.financial import CardBrand, CreditCard


class CreditCardGenerator(BaseGenerator):
    """Generate credit cards with a full available limit."""

    BRANDS = list(CardBrand)
    BRAND_WEIGHTS = [0.40, 0.40, 0.10, 0.08, 0.02]

    ISSUERS = ["Nubank", "Itaú", "Bradesco", "Santander", "Inter", "C6 Bank", "XP"]

    def generate(self, user_id: str, limit: Decimal | None = None) -> CreditCard:
        """Generate a single card.

        The limit is rounded to the nearest 100 (1000-20000 when omitted).
        Due day 1-28, statement closing 5-10 days before it.
        """
        if limit is None:
            limit = Decimal(str(round(random.uniform(1000, 20000), -2)))

        return CreditCard(
            card_id=self.new_id(),
            user_id=user_id,
            issuer_bank=random.choice(self.ISSUERS),
            card_brand=random.choices(self.BRANDS, weights=self.BRAND_WEIGHTS, k=1)[0],
            last_four_digits=f"{random.randint(0, 9999):04d}",
            available_limit=limit.quantize(Decimal("0.01")),
            due_day=random.randint(1, 28),
            closing_offset=random.randint(5, 10),
            created_at=datetime.now() - timedelta(days=random.randint(30, 720)),
        )
