"""Tests for config and logging."""

import json
import logging
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from fin_ledger.config import (
    KafkaConfig,
    LedgerConfig,
    PostgresConfig,
    RulesConfig,
    StorageConfig,
)
from fin_ledger.exceptions import ConfigurationError
from fin_ledger.logging import JsonFormatter, get_logger, setup_logging
from fin_ledger.models.financial import RoundingPolicy, TransactionType


class TestRulesConfig:
    """Tests for RulesConfig."""

    def test_default_values(self) -> None:
        rules = RulesConfig()

        assert rules.goal_category_markers == ("Meta", "🎯")
        assert rules.min_installments == 2
        assert rules.max_installments == 12
        assert rules.rounding_policy == RoundingPolicy.LAST_ABSORBS
        assert rules.allow_future_dates is False

    @pytest.mark.parametrize(
        "category,expected",
        [
            ("Metas", True),
            ("Meta viagem", True),
            ("🎯 Reserva", True),
            ("Salário", False),
            ("metas", False),
        ],
    )
    def test_is_goal_category(self, category: str, expected: bool) -> None:
        assert RulesConfig().is_goal_category(category) is expected

    def test_min_installments_below_two(self) -> None:
        with pytest.raises(ConfigurationError, match="min_installments"):
            RulesConfig(min_installments=1)

    def test_max_below_min(self) -> None:
        with pytest.raises(ConfigurationError, match="max_installments"):
            RulesConfig(min_installments=6, max_installments=3)

    def test_empty_markers(self) -> None:
        with pytest.raises(ConfigurationError):
            RulesConfig(goal_category_markers=())


class TestKafkaConfig:
    """Tests for KafkaConfig."""

    def test_default_values(self) -> None:
        config = KafkaConfig()

        assert config.bootstrap_servers == "localhost:9092"
        assert config.acks == "all"
        assert config.topic == "finance.ledger-events"

    def test_to_dict(self) -> None:
        config = KafkaConfig(bootstrap_servers="kafka:9092", compression="gzip")

        assert config.to_dict() == {
            "bootstrap.servers": "kafka:9092",
            "acks": "all",
            "batch.size": 16384,
            "linger.ms": 5,
            "compression.type": "gzip",
            "retries": 3,
        }


class TestPostgresConfig:
    """Tests for PostgresConfig."""

    def test_connection_string(self) -> None:
        config = PostgresConfig(host="db", port=5433, database="ledger", user="u", password="p")

        assert config.connection_string == "postgresql://u:p@db:5433/ledger"

    def test_default_database(self) -> None:
        assert PostgresConfig().database == "finledger"


class TestStorageConfig:
    """Tests for StorageConfig."""

    def test_default_values(self) -> None:
        config = StorageConfig()

        assert config.data_dir == Path("ledger-data")
        assert config.pretty_json is False


class TestLedgerConfig:
    """Tests for LedgerConfig."""

    def test_default_values(self) -> None:
        config = LedgerConfig()

        assert isinstance(config.rules, RulesConfig)
        assert config.seed is None
        assert config.log_level == "INFO"
        assert config.log_format == "standard"

    def test_from_env_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = LedgerConfig.from_env()

        assert config.rules == RulesConfig()
        assert config.storage.data_dir == Path("ledger-data")
        assert config.kafka.bootstrap_servers == "localhost:9092"
        assert config.postgres.host == "localhost"
        assert config.seed is None

    def test_from_env_custom(self) -> None:
        env = {
            "LEDGER_GOAL_MARKERS": "Poupança, 💰",
            "LEDGER_ROUNDING_POLICY": "INDEPENDENT",
            "LEDGER_MIN_INSTALLMENTS": "3",
            "LEDGER_MAX_INSTALLMENTS": "24",
            "LEDGER_ALLOW_FUTURE_DATES": "true",
            "LEDGER_DATA_DIR": "/tmp/ledger",
            "PRETTY_JSON": "true",
            "KAFKA_BOOTSTRAP_SERVERS": "kafka:29092",
            "LEDGER_EVENTS_TOPIC": "ledger.events",
            "POSTGRES_HOST": "db.example.com",
            "POSTGRES_PORT": "6543",
            "SEED": "42",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = LedgerConfig.from_env()

        assert config.rules.goal_category_markers == ("Poupança", "💰")
        assert config.rules.rounding_policy == RoundingPolicy.INDEPENDENT
        assert config.rules.min_installments == 3
        assert config.rules.max_installments == 24
        assert config.rules.allow_future_dates is True
        assert config.storage.data_dir == Path("/tmp/ledger")
        assert config.storage.pretty_json is True
        assert config.kafka.bootstrap_servers == "kafka:29092"
        assert config.kafka.topic == "ledger.events"
        assert config.postgres.host == "db.example.com"
        assert config.postgres.port == 6543
        assert config.seed == 42
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_from_env_unknown_policy(self) -> None:
        with patch.dict(os.environ, {"LEDGER_ROUNDING_POLICY": "banker"}, clear=True):
            with pytest.raises(ConfigurationError, match="rounding policy"):
                LedgerConfig.from_env()

    def test_from_env_bad_number(self) -> None:
        with patch.dict(os.environ, {"LEDGER_MAX_INSTALLMENTS": "twelve"}, clear=True):
            with pytest.raises(ConfigurationError):
                LedgerConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        setup_logging()

        assert logging.getLogger("fin_ledger").level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        setup_logging(format_type="json")

        root = logging.getLogger()
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)

    def test_setup_logging_replaces_handlers(self) -> None:
        root = logging.getLogger()
        root.addHandler(logging.StreamHandler())
        root.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(root.handlers) == 1

    def test_external_loggers_quieted(self) -> None:
        setup_logging(level="DEBUG")

        assert logging.getLogger("confluent_kafka").level == logging.WARNING
        assert logging.getLogger("psycopg").level == logging.WARNING
        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def _record(self, **kwargs) -> logging.LogRecord:
        defaults = {
            "name": "fin_ledger.ledger.lifecycle",
            "level": logging.INFO,
            "pathname": __file__,
            "lineno": 1,
            "msg": "Created %s",
            "args": ("tx-001",),
            "exc_info": None,
        }
        defaults.update(kwargs)
        return logging.LogRecord(**defaults)

    def test_format_basic(self) -> None:
        data = json.loads(JsonFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "fin_ledger.ledger.lifecycle"
        assert data["message"] == "Created tx-001"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(self._record(level=logging.ERROR, exc_info=exc_info)))

        assert data["level"] == "ERROR"
        assert "ValueError" in data["exception"]

    def test_format_with_ledger_fields(self) -> None:
        record = self._record()
        record.transaction_id = "tx-001"
        record.purchase_group_id = "grp-1"

        data = json.loads(JsonFormatter().format(record))

        assert data["transaction_id"] == "tx-001"
        assert data["purchase_group_id"] == "grp-1"
        assert "ledger_id" not in data

    def test_service_logs_carry_transaction_id(
        self, caplog: pytest.LogCaptureFixture, service, make_transaction
    ) -> None:
        with caplog.at_level(logging.INFO, logger="fin_ledger.ledger.lifecycle"):
            service.create(make_transaction(TransactionType.CREDIT, "300.00", transaction_id="p"), installments=3)
            service.delete("p")

        created, deleted = [
            r for r in caplog.records if r.name == "fin_ledger.ledger.lifecycle" and r.levelno == logging.INFO
        ]
        data = json.loads(JsonFormatter().format(created))
        assert data["transaction_id"] == "p"
        assert data["purchase_group_id"] is not None
        assert deleted.transaction_id == "p"

    def test_format_keeps_unicode(self) -> None:
        output = JsonFormatter().format(self._record(msg="Meta 🎯", args=()))

        assert "🎯" in output


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger(self) -> None:
        logger = get_logger("fin_ledger.test")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "fin_ledger.test"

    def test_get_logger_same_instance(self) -> None:
        assert get_logger("fin_ledger.same") is get_logger("fin_ledger.same")
