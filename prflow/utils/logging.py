"""Root logger setup for the command line and tests.

Precedence, highest first:
    1. ``PRFLOW_LOG_LEVEL`` (name such as ``info`` or a number)
    2. ``PRFLOW_DEBUG`` / ``PRFLOW_DEBUG_LOGGING`` set to a truthy value
    3. the saved ``debug_logging`` setting
    4. WARNING
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

LEVEL_ENV = "PRFLOW_LOG_LEVEL"
DEBUG_ENVS = ("PRFLOW_DEBUG", "PRFLOW_DEBUG_LOGGING")
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Transport loggers that flood DEBUG output with connection-pool chatter.
_NOISY_LOGGERS = ("urllib3", "requests")
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def parse_level(text: Optional[str], default: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"DEBUG"`` or ``"10"`` into a level number."""
    value = (text or "").strip()
    if not value:
        return default
    if value.isdigit():
        return int(value)
    resolved = logging.getLevelName(value.upper())
    return resolved if isinstance(resolved, int) else default


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when nothing is set."""
    env = os.environ if environ is None else environ
    if env.get(LEVEL_ENV, "").strip():
        return parse_level(env[LEVEL_ENV])
    if any(env.get(name, "").strip().lower() in _TRUTHY for name in DEBUG_ENVS):
        return logging.DEBUG
    return None


def _set_level(level: int) -> int:
    logging.getLogger().setLevel(level)
    quiet = logging.INFO if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, quiet))
    return level


def configure_root(default_level: int = logging.WARNING) -> int:
    """Install a stderr handler once and apply the effective level."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)
    forced = env_level()
    return _set_level(default_level if forced is None else forced)


def apply_preferences(debug_enabled: bool) -> int:
    """Apply the saved debug toggle unless the environment forces a level."""
    forced = env_level()
    if forced is not None:
        return _set_level(forced)
    return _set_level(logging.DEBUG if debug_enabled else logging.WARNING)


def level_name(level: int) -> str:
    return logging.getLevelName(level)


def env_debug_enabled() -> bool:
    forced = env_level()
    return forced is not None and forced <= logging.DEBUG


__all__ = [
    "apply_preferences",
    "configure_root",
    "env_debug_enabled",
    "env_level",
    "level_name",
    "parse_level",
]
