import json

import pytest
from click.testing import CliRunner

from prflow.adapters.local_git import LocalGitRepository
from prflow.app.main import cli
from prflow.domain import messages
from prflow.domain.entities import LocalRepository


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("PRFLOW_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PRFLOW_DEBUG", raising=False)
    path = tmp_path / "cfg"
    path.mkdir()
    return path


@pytest.fixture
def working_copy(monkeypatch, tmp_path):
    state = {"branch": "feature", "template": None}

    def _active_repository(self):
        return LocalRepository(
            "octo", "demo", "git@github.com:octo/demo.git", state["branch"], path=str(tmp_path)
        )

    def _template(self, repository):
        return state["template"]

    monkeypatch.setattr(LocalGitRepository, "active_repository", _active_repository)
    monkeypatch.setattr(LocalGitRepository, "get_pull_request_template", _template)
    return tmp_path, state


def _invoke(config_dir, *args):
    return CliRunner().invoke(cli, ["--config-dir", str(config_dir), *args])


def test_settings_set_and_show(config_dir):
    result = _invoke(config_dir, "settings", "set", "retries", "5")
    assert result.exit_code == 0, result.output
    assert "Saved retries." in result.output

    _invoke(config_dir, "settings", "set", "token", "supersecret")
    saved = json.loads((config_dir / "settings.json").read_text(encoding="utf-8"))
    assert saved["retries"] == 5

    shown = _invoke(config_dir, "settings", "show")
    assert shown.exit_code == 0
    assert "retries = 5" in shown.output
    assert "token = ********" in shown.output
    assert "supersecret" not in shown.output


def test_settings_set_rejects_unknown_key(config_dir):
    result = _invoke(config_dir, "settings", "set", "colour", "blue")

    assert result.exit_code != 0
    assert "Unsupported settings keys: colour" in result.output
    assert not (config_dir / "settings.json").exists()


def test_create_offline_opens_pull_request(config_dir, working_copy):
    repo_path, _ = working_copy

    result = _invoke(config_dir, "create", "--offline", "--repo", str(repo_path), "-t", "Add feature")

    assert result.exit_code == 0, result.output
    assert "octo:feature opened against octo/demo#1 at https://github.com/octo/demo/pull/1" in result.output


def test_create_rejects_same_source_and_target(config_dir, working_copy):
    repo_path, state = working_copy
    state["branch"] = "main"

    result = _invoke(config_dir, "create", "--offline", "--repo", str(repo_path), "-t", "Fix")

    assert result.exit_code == 1
    assert messages.SOURCE_AND_TARGET_SAME in result.output


def test_create_unknown_target_branch(config_dir, working_copy):
    repo_path, _ = working_copy

    result = _invoke(
        config_dir, "create", "--offline", "--repo", str(repo_path), "-t", "Fix", "--target", "nope"
    )

    assert result.exit_code == 1
    assert "Target branch 'nope' was not found." in result.output


def test_create_with_empty_title_reports_title_error(config_dir, working_copy):
    repo_path, _ = working_copy

    result = _invoke(config_dir, "create", "--offline", "--repo", str(repo_path), "-t", "")

    assert result.exit_code == 1
    assert messages.TITLE_EMPTY in result.output


def test_invalid_saved_settings_fail_create(config_dir, working_copy):
    repo_path, _ = working_copy
    (config_dir / "settings.json").write_text(json.dumps({"per_page": 0}), encoding="utf-8")

    result = _invoke(config_dir, "create", "--offline", "--repo", str(repo_path), "-t", "x")

    assert result.exit_code == 2
    assert "Settings are invalid" in result.output
