"""Financial domain generators."""

from fin_ledger.generators.financial.account import AccountGenerator
from fin_ledger.generators.financial.credit_card import CreditCardGenerator
from fin_ledger.generators.financial.goal import GoalGenerator
from fin_ledger.generators.financial.seed import seed_ledger
from fin_ledger.generators.financial.transaction import CATEGORIES, TransactionGenerator

__all__ = [
    "AccountGenerator",
    "CATEGORIES",
    "CreditCardGenerator",
    "GoalGenerator",
    "TransactionGenerator",
    "seed_ledger",
]
