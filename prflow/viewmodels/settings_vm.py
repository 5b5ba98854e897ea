"""Settings state for the command line: GitHub endpoint, token, transport limits.

Persistence is delegated to the ``on_save`` callback (``StorageLocal`` in the
app); this module only validates and coerces values.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..utils.logging import env_debug_enabled

DEFAULT_API_URL = "https://api.github.com"
TOKEN_ENV_VARS = ("PRFLOW_TOKEN", "GITHUB_TOKEN")
_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    api_base_url: str = DEFAULT_API_URL
    """REST root, e.g. ``https://ghe.example.com/api/v3`` for Enterprise."""
    request_timeout_s: int = 10
    retries: int = 2
    remote_name: str = "origin"
    """Git remote whose URL identifies the GitHub repository."""
    per_page: int = 100


def env_token() -> str:
    """First non-empty token from ``PRFLOW_TOKEN`` then ``GITHUB_TOKEN``."""
    return next((value for value in (os.getenv(var, "").strip() for var in TOKEN_ENV_VARS) if value), "")


def _to_url(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("api_base_url must be a string URL.")
    return value.strip().rstrip("/") or DEFAULT_API_URL


def _to_count(name: str) -> Callable[[Any], int]:
    def _coerce(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(f"{name} must be an integer.")
        try:
            number = int(value.strip()) if isinstance(value, str) else int(value)
        except ValueError as exc:
            raise ValueError(f"{name} must be an integer.") from exc
        if number < 0:
            raise ValueError(f"{name} must be non-negative.")
        return number

    return _coerce


def _to_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _to_remote(value: Any) -> str:
    return _to_text(value) or "origin"


def _to_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_WORDS
    return bool(value)


_CONFIG_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "api_base_url": _to_url,
    "request_timeout_s": _to_count("request_timeout_s"),
    "retries": _to_count("retries"),
    "remote_name": _to_remote,
    "per_page": _to_count("per_page"),
}
SETTINGS_KEYS = frozenset({*_CONFIG_COERCERS, "token", "debug_logging"})


class SettingsVM:
    """Keeps app settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save

        self.token: str = ""
        self.debug_logging: bool = env_debug_enabled()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def api_base_url(self) -> str:
        return self.config.api_base_url

    @api_base_url.setter
    def api_base_url(self, value: str) -> None:
        self._set_config("api_base_url", value)

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        self._set_config("request_timeout_s", value)

    @property
    def retries(self) -> int:
        return self.config.retries

    @retries.setter
    def retries(self, value: int) -> None:
        self._set_config("retries", value)

    @property
    def remote_name(self) -> str:
        return self.config.remote_name

    @remote_name.setter
    def remote_name(self, value: str) -> None:
        self._set_config("remote_name", value)

    @property
    def per_page(self) -> int:
        return self.config.per_page

    @per_page.setter
    def per_page(self, value: int) -> None:
        self._set_config("per_page", value)

    def effective_token(self) -> str:
        """Saved token, else one from ``PRFLOW_TOKEN``/``GITHUB_TOKEN``."""
        return self.token or env_token()

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        return (
            self.api_base_url.startswith(("http://", "https://"))
            and self.request_timeout_s > 0
            and 1 <= self.per_page <= 100
        )

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply a flat settings mapping; nothing changes if any key is bad.

        Raises:
            ValueError: On unknown keys or values that cannot be coerced.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")
        unknown = set(payload) - SETTINGS_KEYS
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(map(str, unknown)))}")

        updates = {key: coerce(payload[key]) for key, coerce in _CONFIG_COERCERS.items() if key in payload}
        token = _to_text(payload["token"]) if "token" in payload else self.token
        debug = _to_flag(payload["debug_logging"]) if "debug_logging" in payload else self.debug_logging

        if updates:
            self.config = replace(self.config, **updates)
        self.token = token
        self.debug_logging = debug

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["token"] = self.token
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def set_value(self, key: str, raw: Any) -> None:
        """Set one flat key from text input (used by ``prflow settings set``)."""
        self.apply_dict({key: raw})

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    def _set_config(self, key: str, value: Any) -> None:
        self.config = replace(self.config, **{key: _CONFIG_COERCERS[key](value)})


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()


__all__ = ["SettingsConfig", "SettingsVM", "default_settings_payload", "env_token"]
