"""Configuration management for bank-ledger."""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path

from bank_ledger.exceptions import ConfigurationError


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "bank"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class ReportingConfig:
    """Default parameters for the aggregation reports."""

    dormant_window_days: int = 180
    activity_window_days: int = 30
    large_transaction_threshold: Decimal = Decimal("50000")
    multi_account_min: int = 3
    top_n: int = 5

    @property
    def dormant_window(self) -> timedelta:
        """Trailing window used by the dormant account report."""
        return timedelta(days=self.dormant_window_days)

    @property
    def activity_window(self) -> timedelta:
        """Trailing window used by the account activity report."""
        return timedelta(days=self.activity_window_days)


@dataclass
class LedgerConfig:
    """Main configuration for bank-ledger."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables.

        Raises
        ------
        ConfigurationError
            If a numeric variable cannot be parsed.
        """
        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_env_int("POSTGRES_PORT", 5432),
            database=os.getenv("POSTGRES_DB", "bank"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        reporting = ReportingConfig(
            dormant_window_days=_env_int("DORMANT_WINDOW_DAYS", 180),
            activity_window_days=_env_int("ACTIVITY_WINDOW_DAYS", 30),
            large_transaction_threshold=_env_decimal("LARGE_TRANSACTION_THRESHOLD", "50000"),
            multi_account_min=_env_int("MULTI_ACCOUNT_MIN", 3),
            top_n=_env_int("TOP_N", 5),
        )

        return cls(
            postgres=postgres,
            output=output,
            reporting=reporting,
            seed=_env_int("SEED", None),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name) or default
    try:
        return Decimal(raw)
    except InvalidOperation as e:
        raise ConfigurationError(f"{name} must be a decimal, got {raw!r}") from e
