"""Configuration Pydantic models: WaitConfig, PollingConfig, RaceConfig, LoggingConfig."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PollingConfig(BaseModel):
    """Defaults for occurrences built by polling a condition."""

    model_config = ConfigDict(extra="forbid")

    interval: float = Field(
        default=1.0, gt=0, description="Seconds to sleep between condition evaluations"
    )


class RaceConfig(BaseModel):
    """Settings for the race combinator's branch threads."""

    model_config = ConfigDict(extra="forbid")

    join_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Real seconds to wait for a cancelled branch thread to exit",
    )


class LoggingConfig(BaseModel):
    """Logging defaults used by :func:`waitfor.log_config.setup_logging`."""

    model_config = ConfigDict(extra="forbid")

    log_level: str = Field(default="WARNING", description="Root log level")
    log_dir: str | None = Field(
        default=None, description="Directory for rotating log files (console only when unset)"
    )


class WaitConfig(BaseModel):
    """Top-level configuration, optionally loaded from a JSON file."""

    model_config = ConfigDict(extra="forbid")

    polling: PollingConfig = Field(default_factory=PollingConfig)
    race: RaceConfig = Field(default_factory=RaceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
