"""Enumeration types for financial domain entities."""

from enum import Enum


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    PAYMENT = "payment"
    PJ = "pj"  # business account


class CardBrand(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    ELO = "elo"
    AMEX = "amex"
    OTHER = "other"


class TransactionType(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"
    RECEIVE = "receive"


class RoundingPolicy(str, Enum):
    """How an installment split handles the cent remainder."""

    LAST_ABSORBS = "last_absorbs"
    INDEPENDENT = "independent"


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
