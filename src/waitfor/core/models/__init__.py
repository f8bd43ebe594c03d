"""Pydantic models for configuration."""

from waitfor.core.models.config import LoggingConfig, PollingConfig, RaceConfig, WaitConfig

__all__ = [
    "LoggingConfig",
    "PollingConfig",
    "RaceConfig",
    "WaitConfig",
]
