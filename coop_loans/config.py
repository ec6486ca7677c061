"""Configuration management for coop-loans."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from coop_loans.exceptions import ConfigurationError


@dataclass
class BackendConfig:
    """Hosted PostgreSQL backend connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: str = "postgres"
    connect_timeout: int = 10

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class ScheduleConfig:
    """Presentation and tolerance settings used by the reports."""

    currency_symbol: str = "₦"
    missed_repayment_tolerance: int = 1
    warning_threshold: int = 100
    page_size: int = 10


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class CoopLoansConfig:
    """Main configuration for coop-loans."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "CoopLoansConfig":
        """Create config from environment variables."""
        backend = BackendConfig(
            host=os.getenv("COOP_DB_HOST", "localhost"),
            port=_int_env("COOP_DB_PORT", "5432"),
            database=os.getenv("COOP_DB_NAME", "postgres"),
            user=os.getenv("COOP_DB_USER", "postgres"),
            password=os.getenv("COOP_DB_PASSWORD", "postgres"),
        )

        page_size = _int_env("PAGE_SIZE", "10")
        if page_size <= 0:
            raise ConfigurationError(f"PAGE_SIZE must be positive, got {page_size}")
        schedule = ScheduleConfig(page_size=page_size)

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            backend=backend,
            schedule=schedule,
            output=output,
            seed=_int_env("SEED", "") if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
