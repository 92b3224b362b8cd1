"""Configuration management for fin-ledger."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fin_ledger.exceptions import ConfigurationError
from fin_ledger.models.financial.enums import RoundingPolicy


@dataclass
class RulesConfig:
    """Bookkeeping rules applied by the ledger engine."""

    goal_category_markers: tuple[str, ...] = ("Meta", "🎯")
    min_installments: int = 2
    max_installments: int = 12
    rounding_policy: RoundingPolicy = RoundingPolicy.LAST_ABSORBS
    allow_future_dates: bool = False

    def __post_init__(self) -> None:
        if self.min_installments < 2:
            raise ConfigurationError("min_installments must be at least 2")
        if self.max_installments < self.min_installments:
            raise ConfigurationError(
                f"max_installments ({self.max_installments}) is lower than "
                f"min_installments ({self.min_installments})"
            )
        if not self.goal_category_markers:
            raise ConfigurationError("At least one goal category marker is required")

    def is_goal_category(self, category: str) -> bool:
        """Check whether a category routes money to savings goals."""
        return any(marker in category for marker in self.goal_category_markers)


@dataclass
class StorageConfig:
    """Local JSON storage configuration."""

    data_dir: Path = field(default_factory=lambda: Path("ledger-data"))
    pretty_json: bool = False


@dataclass
class KafkaConfig:
    """Kafka producer configuration for ledger events."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic: str = "finance.ledger-events"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "batch.size": self.batch_size,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "finledger"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class LedgerConfig:
    """Main configuration for fin-ledger."""

    rules: RulesConfig = field(default_factory=RulesConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        markers_str = os.getenv("LEDGER_GOAL_MARKERS")
        markers = (
            tuple(m.strip() for m in markers_str.split(",") if m.strip())
            if markers_str
            else RulesConfig.goal_category_markers
        )

        policy_str = os.getenv("LEDGER_ROUNDING_POLICY", RoundingPolicy.LAST_ABSORBS.value)
        try:
            rounding_policy = RoundingPolicy(policy_str.lower())
        except ValueError as exc:
            raise ConfigurationError(f"Unknown rounding policy: {policy_str}") from exc

        try:
            rules = RulesConfig(
                goal_category_markers=markers,
                min_installments=int(os.getenv("LEDGER_MIN_INSTALLMENTS", "2")),
                max_installments=int(os.getenv("LEDGER_MAX_INSTALLMENTS", "12")),
                rounding_policy=rounding_policy,
                allow_future_dates=os.getenv("LEDGER_ALLOW_FUTURE_DATES", "false").lower() == "true",
            )

            storage = StorageConfig(
                data_dir=Path(os.getenv("LEDGER_DATA_DIR", "ledger-data")),
                pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
            )

            kafka = KafkaConfig(
                bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
                acks=os.getenv("KAFKA_ACKS", "all"),
                topic=os.getenv("LEDGER_EVENTS_TOPIC", "finance.ledger-events"),
            )

            postgres = PostgresConfig(
                host=os.getenv("POSTGRES_HOST", "localhost"),
                port=int(os.getenv("POSTGRES_PORT", "5432")),
                database=os.getenv("POSTGRES_DB", "finledger"),
                user=os.getenv("POSTGRES_USER", "postgres"),
                password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            )

            seed = int(os.getenv("SEED")) if os.getenv("SEED") else None
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc

        return cls(
            rules=rules,
            storage=storage,
            kafka=kafka,
            postgres=postgres,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
