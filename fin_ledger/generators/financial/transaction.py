"""Transaction generator for demo ledgers."""

import random
from datetime import date, timedelta
from decimal import Decimal

from fin_ledger.generators.base import BaseGenerator
from fin_ledger.models.financial import Transaction, TransactionType

# Category name -> icon, as shown in the transaction form.
CATEGORIES: dict[str, str] = {
    "Água": "💧",
    "Aluguel": "🍽️",
    "Assinaturas": "🧾",
    "Compras online": "🛒",
    "Condomínio": "🏢",
    "Delivery": "🍔",
    "Educação": "📚",
    "Energia elétrica": "💡",
    "Emergências": "🆘",
    "Fatura cartão": "💳",
    "Jogos / Entret.": "🎮",
    "Internet / Tel": "📶",
    "Metas": "🎯",
    "Música": "🎵",
    "Outros créditos": "💸",
    "Pets": "🐾",
    "Presentes": "🎉",
    "Restaurantes": "🍽️",
    "Roupas": "👕",
    "Salário": "💰",
    "Saúde": "💊",
    "Streaming": "🎬",
    "Transporte": "🚗",
    "Trabalho / Cursos": "💼",
    "Viagem / Lazer": "🌴",
}

INCOME_CATEGORIES = ["Salário", "Outros créditos", "Metas"]
INCOME_WEIGHTS = [0.55, 0.30, 0.15]
EXPENSE_CATEGORIES = [c for c in CATEGORIES if c not in INCOME_CATEGORIES]

# (min, max) amount per expense category; anything else uses DEFAULT_RANGE.
AMOUNT_RANGES: dict[str, tuple[int, int]] = {
    "Aluguel": (900, 3500),
    "Condomínio": (300, 1200),
    "Compras online": (40, 2500),
    "Educação": (150, 1500),
    "Roupas": (60, 900),
    "Streaming": (20, 60),
    "Assinaturas": (10, 120),
    "Viagem / Lazer": (300, 6000),
}
DEFAULT_RANGE = (15, 400)


class TransactionGenerator(BaseGenerator):
    """Generate past-dated ledger transactions.

    Roughly 45% account debits, 35% card purchases and 20% income. Card
    purchases above 300 are often split; ``installment_count`` suggests how.
    """

    TRANSACTION_TYPES = list(TransactionType)
    TRANSACTION_WEIGHTS = [0.45, 0.35, 0.20]

    def generate(
        self,
        account_id: str,
        card_id: str | None = None,
        today: date | None = None,
        max_days_ago: int = 90,
    ) -> Transaction:
        """Generate a single transaction.

        Parameters
        ----------
        account_id : str
            Account debited or credited by non-card transactions.
        card_id : str | None
            Card charged by CREDIT transactions. Without one, no CREDIT is drawn.
        today : date | None
            Reference date; transactions are dated up to ``max_days_ago`` before it.
        max_days_ago : int
            Oldest transaction age in days.

        Returns
        -------
        Transaction
            Generated transaction with an empty ``transaction_id``.
        """
        today = today or date.today()
        weights = list(self.TRANSACTION_WEIGHTS)
        if card_id is None:
            weights[1] = 0
        tx_type = random.choices(self.TRANSACTION_TYPES, weights=weights, k=1)[0]

        if tx_type == TransactionType.RECEIVE:
            category = random.choices(INCOME_CATEGORIES, weights=INCOME_WEIGHTS, k=1)[0]
            low, high = (2500, 12000) if category == "Salário" else (50, 1500)
        else:
            category = random.choice(EXPENSE_CATEGORIES)
            low, high = AMOUNT_RANGES.get(category, DEFAULT_RANGE)

        amount = Decimal(str(round(random.uniform(low, high), 2)))
        is_card = tx_type == TransactionType.CREDIT

        return Transaction(
            transaction_id="",
            transaction_type=tx_type,
            date=today - timedelta(days=random.randint(0, max_days_ago)),
            description=self._description(category),
            amount=amount,
            category=category,
            account_id=None if is_card else account_id,
            card_id=card_id if is_card else None,
            is_paid=not is_card,
        )

    def installment_count(self, transaction: Transaction) -> int:
        """Pick how many installments a card purchase is split into (1 = none)."""
        if transaction.transaction_type != TransactionType.CREDIT or transaction.amount < 300:
            return 1
        if random.random() < 0.5:
            return 1
        return random.choice([2, 3, 4, 6, 10, 12])

    def _description(self, category: str) -> str:
        if category == "Salário":
            return f"Salário {self.fake.company()}"
        if category == "Metas":
            return "Aporte para meta"
        if category in ("Restaurantes", "Delivery", "Compras online", "Roupas"):
            return self.fake.company()
        return f"{category} {self.fake.month_name()}"
