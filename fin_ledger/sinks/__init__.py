"""Persistence repositories and event sinks for the ledger."""

from fin_ledger.sinks.console import ConsoleSink
from fin_ledger.sinks.json_file import JsonLedgerRepository
from fin_ledger.sinks.kafka import KafkaSink
from fin_ledger.sinks.postgres import PostgresLedgerRepository

__all__ = ["ConsoleSink", "JsonLedgerRepository", "KafkaSink", "PostgresLedgerRepository"]
