import pytest

from prflow.adapters.storage_local import StorageLocal
from prflow.viewmodels.settings_vm import SettingsConfig, SettingsVM, default_settings_payload


def test_settings_vm_apply_and_persist(tmp_path):
    storage = StorageLocal(str(tmp_path))
    vm = SettingsVM(on_save=storage.save_user_settings)

    vm.apply_dict(
        {
            "api_base_url": "https://ghe.example.com/api/v3/",
            "request_timeout_s": "30",
            "retries": 1,
            "remote_name": " upstream ",
            "per_page": 50,
            "token": " abc ",
            "debug_logging": "yes",
        }
    )
    vm.cmd_save()

    reloaded = SettingsVM()
    reloaded.apply_dict(storage.load_user_settings())
    assert reloaded.config == SettingsConfig(
        api_base_url="https://ghe.example.com/api/v3",
        request_timeout_s=30,
        retries=1,
        remote_name="upstream",
        per_page=50,
    )
    assert reloaded.token == "abc"
    assert reloaded.debug_logging is True


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="Unsupported settings keys: nope"):
        SettingsVM().apply_dict({"nope": 1})


@pytest.mark.parametrize("key, raw", [("retries", "many"), ("per_page", -1), ("request_timeout_s", True)])
def test_bad_integers_rejected(key, raw):
    with pytest.raises(ValueError):
        SettingsVM().set_value(key, raw)


def test_invalid_settings_are_not_saved():
    saved = []
    vm = SettingsVM(on_save=saved.append)
    vm.per_page = 500

    assert not vm.is_valid()
    with pytest.raises(ValueError):
        vm.cmd_save()
    assert saved == []


def test_effective_token_falls_back_to_environment(monkeypatch):
    monkeypatch.delenv("PRFLOW_TOKEN", raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    vm = SettingsVM()

    assert vm.effective_token() == "from-env"
    vm.token = "saved"
    assert vm.effective_token() == "saved"


def test_default_payload_keys(monkeypatch):
    monkeypatch.delenv("PRFLOW_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PRFLOW_DEBUG", raising=False)
    monkeypatch.delenv("PRFLOW_DEBUG_LOGGING", raising=False)

    payload = default_settings_payload()

    assert payload["api_base_url"] == "https://api.github.com"
    assert payload["remote_name"] == "origin"
    assert payload["token"] == ""
    assert payload["debug_logging"] is False
