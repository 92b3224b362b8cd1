"""Domain models for the personal-finance ledger."""

from fin_ledger.models.base import CENTS, Event, to_money

__all__ = ["CENTS", "Event", "to_money"]
