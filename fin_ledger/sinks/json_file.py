"""JSON file repository: one versioned file per ledger container."""

import json
import logging
from pathlib import Path
from typing import Any

from fin_ledger.exceptions import SchemaVersionError, SinkError
from fin_ledger.models.financial import Account, CreditCard, Goal, Transaction
from fin_ledger.sinks.serialization import from_dict, to_dict_fast
from fin_ledger.store.ledger import LedgerStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

CONTAINERS: dict[str, type] = {
    "accounts": Account,
    "credit_cards": CreditCard,
    "goals": Goal,
    "transactions": Transaction,
}


class JsonLedgerRepository:
    """Persist a ``LedgerStore`` as JSON files in a directory.

    Each container is written to ``<container>.json`` as::

        {"schema_version": 1, "container": "accounts", "records": [...]}

    Transactions keep their ledger order (most recent first).
    """

    def __init__(self, data_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON repository.

        Parameters
        ----------
        data_dir : str | Path
            Directory holding the container files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.data_dir = Path(data_dir)
        self.pretty = pretty

    def path_for(self, container: str) -> Path:
        return self.data_dir / f"{container}.json"

    def save(self, store: LedgerStore) -> dict[str, int]:
        """Write every container; returns record counts per container."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        records_by_container: dict[str, list[Any]] = {
            "accounts": list(store.accounts.values()),
            "credit_cards": list(store.credit_cards.values()),
            "goals": list(store.goals.values()),
            "transactions": list(store.transactions),
        }

        counts = {}
        for container, records in records_by_container.items():
            self.write_container(container, records)
            counts[container] = len(records)

        logger.info("Ledger saved to %s: %s", self.data_dir, counts)
        return counts

    def write_container(self, container: str, records: list[Any]) -> None:
        """Write a single container file, replacing it atomically."""
        payload = {
            "schema_version": SCHEMA_VERSION,
            "container": container,
            "records": [to_dict_fast(record) for record in records],
        }
        file_path = self.path_for(container)
        tmp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(payload, f, ensure_ascii=False)
            tmp_path.replace(file_path)
        except OSError as exc:
            raise SinkError(f"Cannot write {file_path}: {exc}") from exc

    def load(self) -> LedgerStore:
        """Read all containers into a new store. Missing files are empty containers."""
        store = LedgerStore()
        for account in self.read_container("accounts"):
            store.accounts[account.account_id] = account
        for card in self.read_container("credit_cards"):
            store.credit_cards[card.card_id] = card
        for goal in self.read_container("goals"):
            store.goals[goal.goal_id] = goal
        store.transactions = self.read_container("transactions")

        logger.info("Ledger loaded from %s: %s", self.data_dir, store.summary())
        return store

    def read_container(self, container: str) -> list[Any]:
        """Read and decode one container file."""
        entity_cls = CONTAINERS[container]
        file_path = self.path_for(container)
        if not file_path.exists():
            return []

        try:
            with open(file_path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise SinkError(f"Cannot read {file_path}: {exc}") from exc

        if not isinstance(payload, dict):
            raise SchemaVersionError(f"{file_path} has no schema header")
        version = payload.get("schema_version")
        if version != SCHEMA_VERSION:
            raise SchemaVersionError(
                f"{file_path} has schema version {version!r}, expected {SCHEMA_VERSION}"
            )
        if payload.get("container") != container:
            raise SinkError(f"{file_path} holds {payload.get('container')!r}, expected {container!r}")

        return [from_dict(entity_cls, record) for record in payload.get("records", [])]
