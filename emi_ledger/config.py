"""Configuration management for emi-ledger."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from emi_ledger.exceptions import ConfigurationError
from emi_ledger.models.enums import DueDatePolicy, ShortfallPolicy


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    acks: str = "all"
    batch_size: int = 16384
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

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
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False
    event_topic: str = "medloan.ledger-events"


@dataclass
class PolicyConfig:
    """Ledger policies for the cases the payment rules leave open."""

    shortfall: ShortfallPolicy = ShortfallPolicy.REJECT
    due_dates: DueDatePolicy = DueDatePolicy.CALENDAR_MONTH

    @classmethod
    def from_names(cls, shortfall: str, due_dates: str) -> "PolicyConfig":
        """Build policies from their string names.

        Raises
        ------
        ConfigurationError
            If either name is not a known policy.
        """
        try:
            shortfall_policy = ShortfallPolicy(shortfall.strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown shortfall policy: {shortfall!r}") from None
        try:
            due_date_policy = DueDatePolicy(due_dates.strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown due date policy: {due_dates!r}") from None
        return cls(shortfall=shortfall_policy, due_dates=due_date_policy)


@dataclass
class LedgerConfig:
    """Main configuration for emi-ledger."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables."""
        import os

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
            event_topic=os.getenv("EVENT_TOPIC", "medloan.ledger-events"),
        )

        policy = PolicyConfig.from_names(
            shortfall=os.getenv("SHORTFALL_POLICY", ShortfallPolicy.REJECT.value),
            due_dates=os.getenv("DUE_DATE_POLICY", DueDatePolicy.CALENDAR_MONTH.value),
        )

        seed_str = os.getenv("SEED")
        try:
            seed = int(seed_str) if seed_str else None
        except ValueError:
            raise ConfigurationError(f"SEED must be an integer, got {seed_str!r}") from None

        return cls(
            kafka=kafka,
            output=output,
            policy=policy,
            seed=seed,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
