"""Account model for financial domain."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fin_ledger.models.financial.enums import AccountType


@dataclass
class Account:
    """Bank account entity.

    Account kinds:
    - CHECKING: everyday account (most common)
    - SAVINGS: savings account
    - PAYMENT: payment institution wallet
    - PJ: business account
    """

    account_id: str
    user_id: str
    account_type: AccountType
    institution_name: str
    balance: Decimal  # signed, mutated only through transactions
    created_at: datetime
    updated_at: datetime | None = None
    balance_date: datetime | None = None
    institution_logo: str | None = None
