"""Split a credit purchase into monthly installment transactions."""

import calendar
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from fin_ledger.config import RulesConfig
from fin_ledger.exceptions import InvalidInstallmentPlanError
from fin_ledger.models.base import CENTS
from fin_ledger.models.financial import RoundingPolicy, Transaction, TransactionType

logger = logging.getLogger(__name__)


def add_months(start: date, months: int) -> date:
    """Shift a date by calendar months, clamping to the last day of the month.

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def split_amount(total: Decimal, count: int, policy: RoundingPolicy) -> list[Decimal]:
    """Divide ``total`` into ``count`` currency amounts.

    With ``LAST_ABSORBS`` the final share takes the rounding remainder and the
    shares sum to ``total`` exactly. With ``INDEPENDENT`` every share is the
    rounded quotient and the sum may be off by less than ``count`` cents.
    """
    share = (total / count).quantize(CENTS, rounding=ROUND_HALF_UP)
    shares = [share] * count
    if policy == RoundingPolicy.LAST_ABSORBS:
        shares[-1] = total - share * (count - 1)
    return shares


@dataclass
class InstallmentPlan:
    """Installment records for one purchase plus the limit to reserve."""

    purchase_group_id: str
    card_id: str
    total_amount: Decimal
    transactions: list[Transaction]


class InstallmentExpander:
    """Expand a CREDIT purchase into one transaction per monthly installment.

    Parameters
    ----------
    rules : RulesConfig | None
        Installment bounds and rounding policy.
    """

    def __init__(self, rules: RulesConfig | None = None) -> None:
        self.rules = rules or RulesConfig()

    def validate_count(self, count: int) -> None:
        """Reject installment counts outside the configured bounds."""
        low, high = self.rules.min_installments, self.rules.max_installments
        if isinstance(count, bool) or not isinstance(count, int) or not low <= count <= high:
            raise InvalidInstallmentPlanError(
                f"Installment count must be between {low} and {high}, got {count!r}"
            )

    def expand(self, purchase: Transaction, count: int) -> InstallmentPlan:
        """Build the installment records for a purchase.

        The first installment keeps the purchase's own id; the rest get
        ``<id>-<n>``. Record ``i`` (0-based) is dated ``i`` months after the
        purchase and its description ends with ``(i+1/count)``.

        Parameters
        ----------
        purchase : Transaction
            CREDIT transaction carrying the total amount and purchase date.
        count : int
            Number of monthly installments.

        Returns
        -------
        InstallmentPlan
            Records in installment order and the total to deduct from the card.
        """
        if purchase.transaction_type != TransactionType.CREDIT:
            raise InvalidInstallmentPlanError(
                f"Installments apply to credit purchases only, got {purchase.transaction_type.value}"
            )
        self.validate_count(count)

        group_id = purchase.purchase_group_id or uuid.uuid4().hex
        shares = split_amount(purchase.amount, count, self.rules.rounding_policy)
        if min(shares) <= 0:
            raise InvalidInstallmentPlanError(
                f"{purchase.amount} is too small to split into {count} installments"
            )

        transactions = []
        for i, share in enumerate(shares):
            transactions.append(
                replace(
                    purchase,
                    transaction_id=purchase.transaction_id if i == 0 else f"{purchase.transaction_id}-{i + 1}",
                    date=add_months(purchase.date, i),
                    description=f"{purchase.description} ({i + 1}/{count})",
                    amount=share,
                    installment_number=i + 1,
                    total_installments=count,
                    purchase_group_id=group_id,
                )
            )

        logger.debug(
            "Expanded %s into %d installments of ~%s (group %s)",
            purchase.transaction_id,
            count,
            shares[0],
            group_id,
        )
        return InstallmentPlan(
            purchase_group_id=group_id,
            card_id=purchase.card_id,
            total_amount=purchase.amount,
            transactions=transactions,
        )
