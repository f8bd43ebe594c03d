"""Config manager — load JSON → apply env overrides → validate → WaitConfig.

Also holds the process-wide *active* config that supplies defaults (polling
interval, branch join timeout) to occurrences built without explicit values.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from waitfor.core.models.config import WaitConfig

_log = logging.getLogger(__name__)

# Environment variable → config field mapping.
# Keys are env-var names; values are ``(section, field, type)`` tuples.
_ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "WAITFOR_POLLING_INTERVAL": ("polling", "interval", float),
    "WAITFOR_JOIN_TIMEOUT": ("race", "join_timeout", float),
    "WAITFOR_LOG_LEVEL": ("logging", "log_level", str),
    "WAITFOR_LOG_DIR": ("logging", "log_dir", str),
}

_active_lock = threading.Lock()
_active: WaitConfig | None = None


def load_config(config_path: Path | str | None = None) -> WaitConfig:
    """Load, override, and validate the configuration.

    Args:
        config_path: Path to a JSON config file.  When *None*, falls back to
            the ``WAITFOR_CONFIG_FILE`` env-var, and then to built-in defaults.

    Returns:
        A fully-validated :class:`WaitConfig` instance.

    Raises:
        FileNotFoundError: If an explicitly named config file does not exist.
    """
    path = _resolve_config_path(config_path)
    raw: dict = {}
    if path is not None:
        _log.info("Loading config from %s", path)
        raw = json.loads(path.read_text(encoding="utf-8"))

    # Apply env overrides ------------------------------------------------
    for env_key, (section, field, typ) in _ENV_OVERRIDES.items():
        env_val = os.environ.get(env_key)
        if env_val is not None:
            raw.setdefault(section, {})[field] = typ(env_val)
            _log.debug("Env override: %s → %s.%s = %r", env_key, section, field, env_val)

    return WaitConfig(**raw)


def get_config() -> WaitConfig:
    """Return the active config, loading it on first use."""
    global _active
    with _active_lock:
        if _active is None:
            _active = load_config()
        return _active


def set_config(config: WaitConfig) -> None:
    """Replace the active config."""
    global _active
    with _active_lock:
        _active = config


def reset_config() -> None:
    """Forget the active config; the next :func:`get_config` reloads it."""
    global _active
    with _active_lock:
        _active = None


def _resolve_config_path(config_path: Path | str | None) -> Path | None:
    if config_path is not None:
        p = Path(config_path)
    else:
        env = os.environ.get("WAITFOR_CONFIG_FILE")
        if not env:
            return None
        p = Path(env)
    if not p.is_file():
        raise FileNotFoundError(
            f"Config file not found: {p}\n"
            "Pass a valid path or unset WAITFOR_CONFIG_FILE to use the defaults."
        )
    return p
