from __future__ import annotations
import json, os
from typing import Any, Dict, Optional

CONFIG_DIR_ENV = "PRFLOW_CONFIG_DIR"
SETTINGS_FILE = "settings.json"


def default_config_dir() -> str:
    configured = os.getenv(CONFIG_DIR_ENV, "").strip()
    if configured:
        return os.path.expanduser(configured)
    return os.path.join(os.path.expanduser("~"), ".prflow")


class StorageLocal:
    """Local filesystem storage for user settings (JSON)."""

    def __init__(self, root_dir: Optional[str] = None) -> None:
        self.root = root_dir or default_config_dir()

    @property
    def settings_path(self) -> str:
        return os.path.join(self.root, SETTINGS_FILE)

    def save_user_settings(self, payload: Dict[str, Any]) -> None:
        os.makedirs(self.root, exist_ok=True)
        tmp_path = self.settings_path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
        os.replace(tmp_path, self.settings_path)

    def load_user_settings(self) -> Dict[str, Any]:
        path = self.settings_path
        if not os.path.exists(path):
            return {}
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object.")
        return data


__all__ = ["StorageLocal", "default_config_dir"]
