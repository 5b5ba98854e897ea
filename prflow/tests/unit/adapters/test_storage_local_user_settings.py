import json

import pytest

from prflow.adapters.storage_local import StorageLocal, default_config_dir


def test_user_settings_roundtrip(tmp_path):
    storage = StorageLocal(str(tmp_path / "cfg"))
    payload = {"api_base_url": "https://ghe.example.com/api/v3", "retries": 3}

    storage.save_user_settings(payload)

    assert storage.load_user_settings() == payload
    assert not (tmp_path / "cfg" / "settings.json.tmp").exists()


def test_missing_settings_file_is_empty(tmp_path):
    assert StorageLocal(str(tmp_path)).load_user_settings() == {}


def test_non_object_settings_file_rejected(tmp_path):
    (tmp_path / "settings.json").write_text(json.dumps([1, 2]), encoding="utf-8")

    with pytest.raises(ValueError):
        StorageLocal(str(tmp_path)).load_user_settings()


def test_config_dir_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("PRFLOW_CONFIG_DIR", str(tmp_path))

    assert default_config_dir() == str(tmp_path)
    assert StorageLocal().settings_path == str(tmp_path / "settings.json")
