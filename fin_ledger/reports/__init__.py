"""Read-side reports: filtering, dashboard metrics and card statements."""

from fin_ledger.reports.filters import Page, TransactionFilter, paginate
from fin_ledger.reports.invoice import Statement, open_statement, statement_period
from fin_ledger.reports.metrics import (
    FinancialHealth,
    FinancialMetrics,
    MonthlyComparison,
    dashboard_metrics,
    financial_health,
    monthly_comparison,
)

__all__ = [
    "FinancialHealth",
    "FinancialMetrics",
    "MonthlyComparison",
    "Page",
    "Statement",
    "TransactionFilter",
    "dashboard_metrics",
    "financial_health",
    "monthly_comparison",
    "open_statement",
    "paginate",
    "statement_period",
]
