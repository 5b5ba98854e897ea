from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import pytest
from requests import exceptions as req_exc

from prflow.adapters.api_errors import (
    ApiClientError,
    ApiNotFoundError,
    ApiServerError,
    ApiTimeoutError,
    ApiValidationError,
    TwoFactorRequiredError,
)
from prflow.adapters.github_rest import GitHubRestAdapter
from prflow.domain.entities import Branch, LocalRepository, RepositoryRef


class _ResponseStub:
    def __init__(
        self,
        payload: Any,
        status_code: int = 200,
        *,
        headers: Optional[Dict[str, str]] = None,
        next_url: Optional[str] = None,
    ) -> None:
        self._payload = payload
        self.status_code = status_code
        self.headers = headers or {}
        self.links = {"next": {"url": next_url}} if next_url else {}
        self.text = json.dumps(payload)

    def json(self) -> Any:
        return self._payload


class _SessionStub:
    def __init__(self, responses: Sequence[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs: Any) -> _ResponseStub:
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, **kwargs: Any) -> _ResponseStub:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> _ResponseStub:
        return self._next("POST", url, **kwargs)


def _adapter(responses: Sequence[Any], **kwargs: Any) -> tuple:
    adapter = GitHubRestAdapter("https://api.example.test/", token="secret", **kwargs)
    stub = _SessionStub(responses)
    adapter.session.session = stub
    return adapter, stub


def _local() -> LocalRepository:
    return LocalRepository("octo", "demo", "https://github.com/octo/demo.git", "feature")


def _repo_payload(owner: str, name: str, **extra: Any) -> Dict[str, Any]:
    payload = {
        "name": name,
        "owner": {"login": owner},
        "clone_url": f"https://github.com/{owner}/{name}.git",
        "default_branch": "main",
        "fork": False,
    }
    payload.update(extra)
    return payload


def test_get_repository_parses_fork_with_parent():
    parent = _repo_payload("upstream", "demo", default_branch="develop")
    adapter, stub = _adapter([_ResponseStub(_repo_payload("octo", "demo", fork=True, parent=parent))])

    repo = adapter.get_repository("octo", "demo")

    assert stub.calls[0]["url"] == "https://api.example.test/repos/octo/demo"
    headers = stub.calls[0]["headers"]
    assert headers["Authorization"] == "token secret"
    assert headers["Accept"] == "application/vnd.github+json"
    assert repo.is_fork
    assert repo.parent is not None
    assert repo.parent.full_name == "upstream/demo"
    assert repo.default_target_branch() == Branch("develop", RepositoryRef("upstream", "demo"))


def test_get_repository_missing_default_branch_falls_back_to_master():
    payload = {"full_name": "octo/demo", "html_url": "https://github.com/octo/demo"}
    adapter, _ = _adapter([_ResponseStub(payload)])

    repo = adapter.get_repository("octo", "demo")

    assert repo.owner == "octo"
    assert repo.default_branch_name == "master"
    assert repo.clone_url == "https://github.com/octo/demo"


def test_get_repository_maps_404():
    adapter, _ = _adapter([_ResponseStub({"message": "Not Found"}, status_code=404)])

    with pytest.raises(ApiNotFoundError) as excinfo:
        adapter.get_repository("octo", "missing")

    assert "Not Found" in str(excinfo.value)


def test_get_branches_follows_pagination_links():
    adapter, stub = _adapter(
        [
            _ResponseStub(
                [{"name": "main"}, {"name": "feature"}],
                next_url="https://api.example.test/repos/octo/demo/branches?page=2",
            ),
            _ResponseStub([{"name": "release"}, {"name": ""}]),
        ],
        per_page=2,
    )
    repo = adapter._parse_repository(_repo_payload("octo", "demo"))

    branches = adapter.get_branches(repo)

    assert [b.name for b in branches] == ["main", "feature", "release"]
    assert all(b.repository == RepositoryRef("octo", "demo") for b in branches)
    assert stub.calls[0]["params"] == {"per_page": 2}
    assert stub.calls[1]["params"] is None
    assert stub.calls[1]["url"].endswith("page=2")


def test_create_pull_request_posts_cross_fork_head_label():
    adapter, stub = _adapter(
        [_ResponseStub({"number": 7, "html_url": "https://github.com/upstream/demo/pull/7"}, 201)]
    )
    target_repo = RepositoryRef("upstream", "demo", "https://github.com/upstream/demo.git")

    pr = adapter.create_pull_request(
        active_repository=_local(),
        target_repository=target_repo,
        source=Branch("feature", RepositoryRef("octo", "demo")),
        target=Branch("main", target_repo),
        title="Add feature",
        body="",
    )

    call = stub.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.example.test/repos/upstream/demo/pulls"
    assert json.loads(call["data"]) == {
        "title": "Add feature",
        "body": "",
        "head": "octo:feature",
        "base": "main",
    }
    assert pr.number == 7
    assert pr.url == "https://github.com/upstream/demo/pull/7"
    assert pr.title == "Add feature"


def test_head_label_same_repository_is_bare_branch():
    ref = RepositoryRef("octo", "demo")
    assert GitHubRestAdapter.head_label(Branch("feature", ref), ref) == "feature"


def test_create_pull_request_maps_422_field_errors():
    payload = {
        "message": "Validation Failed",
        "errors": [
            {"resource": "PullRequest", "code": "custom", "message": "A pull request already exists for octo:feature."}
        ],
    }
    adapter, _ = _adapter([_ResponseStub(payload, status_code=422)])
    ref = RepositoryRef("octo", "demo")

    with pytest.raises(ApiValidationError) as excinfo:
        adapter.create_pull_request(
            active_repository=_local(),
            target_repository=ref,
            source=Branch("feature", ref),
            target=Branch("main", ref),
            title="t",
            body="",
        )

    assert excinfo.value.first_message() == "A pull request already exists for octo:feature."
    assert str(excinfo.value) == "Validation Failed"


def test_two_factor_challenge_resends_with_code():
    challenged = _ResponseStub(
        {"message": "Must specify two-factor authentication OTP code."},
        status_code=401,
        headers={"X-GitHub-OTP": "required; app"},
    )
    seen: List[Exception] = []

    def _challenge(exc: Exception) -> str:
        seen.append(exc)
        return " 123456 "

    adapter, stub = _adapter(
        [challenged, _ResponseStub(_repo_payload("octo", "demo"))],
        two_factor_challenge=_challenge,
    )

    repo = adapter.get_repository("octo", "demo")

    assert repo.full_name == "octo/demo"
    assert isinstance(seen[0], TwoFactorRequiredError)
    assert seen[0].otp_type == "app"
    assert "X-GitHub-OTP" not in stub.calls[0]["headers"]
    assert stub.calls[1]["headers"]["X-GitHub-OTP"] == "123456"


def test_two_factor_challenge_on_branch_page_resends_with_code():
    challenged = _ResponseStub({}, status_code=401, headers={"X-GitHub-OTP": "required; sms"})
    seen: List[Exception] = []

    def _challenge(exc: Exception) -> str:
        seen.append(exc)
        return "654321"

    adapter, stub = _adapter(
        [challenged, _ResponseStub([{"name": "main"}])],
        two_factor_challenge=_challenge,
    )
    repo = adapter._parse_repository(_repo_payload("octo", "demo"))

    branches = adapter.get_branches(repo)

    assert [b.name for b in branches] == ["main"]
    assert len(seen) == 1
    assert stub.calls[1]["params"] == {"per_page": 100}
    assert stub.calls[1]["headers"]["X-GitHub-OTP"] == "654321"


def test_two_factor_without_challenge_raises():
    challenged = _ResponseStub({}, status_code=401, headers={"X-GitHub-OTP": "required; sms"})
    adapter, _ = _adapter([challenged])

    with pytest.raises(TwoFactorRequiredError):
        adapter.get_repository("octo", "demo")


def test_plain_401_is_client_error():
    adapter, _ = _adapter([_ResponseStub({"message": "Bad credentials"}, status_code=401)])

    with pytest.raises(ApiClientError) as excinfo:
        adapter.get_repository("octo", "demo")

    assert excinfo.value.status == 401
    assert not isinstance(excinfo.value, TwoFactorRequiredError)


def test_server_error_is_mapped():
    adapter, _ = _adapter([_ResponseStub({"message": "oops"}, status_code=502)])

    with pytest.raises(ApiServerError):
        adapter.get_repository("octo", "demo")


def test_transport_errors_retry_then_raise_timeout():
    adapter, stub = _adapter(
        [req_exc.Timeout(), req_exc.ConnectionError(), req_exc.Timeout()],
        retries=2,
    )

    with pytest.raises(ApiTimeoutError):
        adapter.get_repository("octo", "demo")

    assert len(stub.calls) == 3


def test_transport_retry_recovers():
    adapter, stub = _adapter([req_exc.Timeout(), _ResponseStub(_repo_payload("octo", "demo"))], retries=1)

    assert adapter.get_repository("octo", "demo").name == "demo"
    assert len(stub.calls) == 2


def test_blank_base_url_rejected():
    with pytest.raises(ValueError):
        GitHubRestAdapter("  ")
