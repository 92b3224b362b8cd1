"""Account generator for demo ledgers."""

import random
from datetime import datetime, timedelta
from decimal import Decimal

from fin_ledger.generators.base import BaseGenerator
from fin_ledger.models.financial import Account, AccountType


class AccountGenerator(BaseGenerator):
    """Generate bank accounts.

    Account kinds are weighted towards checking accounts (~60%), then
    savings (~25%), payment wallets (~10%) and business accounts (~5%).
    """

    ACCOUNT_TYPES = list(AccountType)
    ACCOUNT_TYPE_WEIGHTS = [0.60, 0.25, 0.10, 0.05]

    INSTITUTIONS = [
        "Banco do Brasil",
        "Bradesco",
        "Caixa Econômica Federal",
        "C6 Bank",
        "Inter",
        "Itaú",
        "Mercado Pago",
        "Nubank",
        "Santander",
    ]

    def generate(self, user_id: str, balance: Decimal | None = None) -> Account:
        """Generate a single account for a user.

        Parameters
        ----------
        user_id : str
            Owner of the account.
        balance : Decimal | None
            Opening balance (random 500-15000 when omitted).

        Returns
        -------
        Account
            Generated account.
        """
        account_type = random.choices(self.ACCOUNT_TYPES, weights=self.ACCOUNT_TYPE_WEIGHTS, k=1)[0]
        if balance is None:
            balance = Decimal(str(round(random.uniform(500, 15000), 2)))

        created_at = datetime.now() - timedelta(days=random.randint(30, 720))
        return Account(
            account_id=self.new_id(),
            user_id=user_id,
            account_type=account_type,
            institution_name=random.choice(self.INSTITUTIONS),
            balance=balance.quantize(Decimal("0.01")),
            created_at=created_at,
            balance_date=created_at,
        )
