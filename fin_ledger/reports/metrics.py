"""Dashboard metrics and financial health score computed from a ledger."""

import calendar
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from fin_ledger.models.base import CENTS
from fin_ledger.models.financial import HealthStatus, Transaction, TransactionType
from fin_ledger.store.ledger import LedgerStore

ZERO = Decimal("0.00")
HUNDRED = Decimal(100)

EXPENSE_TYPES = (TransactionType.DEBIT, TransactionType.CREDIT)


@dataclass
class FinancialMetrics:
    """Headline numbers for one calendar month."""

    total_balance: Decimal
    total_credit_limit: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    net_cash_flow: Decimal
    credit_usage: Decimal
    credit_utilization: Decimal  # percent
    savings_rate: Decimal  # percent


@dataclass
class ComparisonMetric:
    current: Decimal
    previous: Decimal
    change: Decimal
    change_percent: Decimal


@dataclass
class MonthlyComparison:
    income: ComparisonMetric
    expenses: ComparisonMetric


@dataclass
class FinancialHealth:
    status: HealthStatus
    score: int
    metrics: FinancialMetrics
    recommendations: list[str] = field(default_factory=list)


def month_bounds(today: date, months_ago: int = 0) -> tuple[date, date]:
    """First and last day of the month ``months_ago`` months before ``today``."""
    month_index = today.year * 12 + today.month - 1 - months_ago
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return ZERO
    return (part / whole * HUNDRED).quantize(CENTS, rounding=ROUND_HALF_UP)


def _sum(transactions: list[Transaction], types: tuple[TransactionType, ...], start: date, end: date) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.transaction_type in types and start <= t.date <= end),
        ZERO,
    )


def dashboard_metrics(store: LedgerStore, today: date | None = None) -> FinancialMetrics:
    """Balances, limits and the current month's cash flow."""
    today = today or date.today()
    start, end = month_bounds(today)
    transactions = store.transactions

    total_balance = sum((a.balance for a in store.accounts.values()), ZERO)
    total_credit_limit = sum((c.available_limit for c in store.credit_cards.values()), ZERO)
    monthly_income = _sum(transactions, (TransactionType.RECEIVE,), start, end)
    monthly_expenses = _sum(transactions, EXPENSE_TYPES, start, end)
    credit_usage = _sum(transactions, (TransactionType.CREDIT,), start, end)

    return FinancialMetrics(
        total_balance=total_balance,
        total_credit_limit=total_credit_limit,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        net_cash_flow=monthly_income - monthly_expenses,
        credit_usage=credit_usage,
        credit_utilization=_percent(credit_usage, total_credit_limit) if total_credit_limit > 0 else ZERO,
        savings_rate=_percent(monthly_income - monthly_expenses, monthly_income),
    )


def _compare(current: Decimal, previous: Decimal) -> ComparisonMetric:
    return ComparisonMetric(
        current=current,
        previous=previous,
        change=current - previous,
        change_percent=_percent(current - previous, previous),
    )


def monthly_comparison(store: LedgerStore, today: date | None = None) -> MonthlyComparison:
    """Income and expenses of this month against the previous one."""
    today = today or date.today()
    current = month_bounds(today)
    previous = month_bounds(today, months_ago=1)
    transactions = store.transactions

    return MonthlyComparison(
        income=_compare(
            _sum(transactions, (TransactionType.RECEIVE,), *current),
            _sum(transactions, (TransactionType.RECEIVE,), *previous),
        ),
        expenses=_compare(
            _sum(transactions, EXPENSE_TYPES, *current),
            _sum(transactions, EXPENSE_TYPES, *previous),
        ),
    )


def financial_health(store: LedgerStore, today: date | None = None) -> FinancialHealth:
    """Score the month's finances from 0 to 100 with recommendations.

    Penalties: savings rate below 10% (-30) or 20% (-10), credit utilization
    above 70% (-40) or 30% (-15), negative cash flow (-20). Below 50 is
    critical, below 80 a warning.
    """
    metrics = dashboard_metrics(store, today)
    score = 100
    recommendations: list[str] = []

    if metrics.savings_rate < 10:
        score -= 30
        recommendations.append("Raise your savings rate to at least 10% of income.")
    elif metrics.savings_rate < 20:
        score -= 10
        recommendations.append("Good start! Aim for a 20% monthly reserve.")

    if metrics.credit_utilization > 70:
        score -= 40
        recommendations.append("High credit usage. Try to keep it under 30% of the limit.")
    elif metrics.credit_utilization > 30:
        score -= 15
        recommendations.append("Credit utilization is moderate but could improve.")

    if metrics.net_cash_flow < 0:
        score -= 20
        recommendations.append("You spent more than you received this month.")

    score = max(0, min(100, score))

    if score < 50:
        status = HealthStatus.CRITICAL
    elif score < 80:
        status = HealthStatus.WARNING
    else:
        status = HealthStatus.HEALTHY

    return FinancialHealth(status=status, score=score, metrics=metrics, recommendations=recommendations)
