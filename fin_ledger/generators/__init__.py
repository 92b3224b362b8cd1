"""Generators for demo ledger data."""
