"""Configuration: loading, env overrides, and the active config."""

from waitfor.config.config_manager import get_config, load_config, reset_config, set_config

__all__ = [
    "get_config",
    "load_config",
    "reset_config",
    "set_config",
]
