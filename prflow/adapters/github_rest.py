from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from prflow.domain.entities import (
    Branch,
    LocalRepository,
    PullRequestRef,
    RemoteRepository,
    RepositoryRef,
)
from prflow.domain.ports import GitHubApiPort, TwoFactorChallenge

from .api_errors import (
    ApiClientError,
    ApiError,
    ApiNotFoundError,
    ApiServerError,
    ApiValidationError,
    TwoFactorRequiredError,
    build_error_message,
    extract_error_hint,
    extract_field_errors,
    first_string,
    parse_error_payload,
)
from .http_client import HttpConfig, RetryingSession

DEFAULT_API_URL = "https://api.github.com"
OTP_HEADER = "X-GitHub-OTP"

log = logging.getLogger(__name__)


class GitHubRestAdapter(GitHubApiPort):
    """REST adapter for the repository, branch, and pull request endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        token: Optional[str] = None,
        request_timeout_s: int = 10,
        retries: int = 2,
        per_page: int = 100,
        two_factor_challenge: Optional[TwoFactorChallenge] = None,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("GitHubRestAdapter requires an API base URL")

        self.base_url = base_url.strip().rstrip("/")
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(token, self.cfg)
        self.per_page = max(1, min(100, int(per_page)))
        self.two_factor_challenge = two_factor_challenge

    # ---------- GitHubApiPort ----------

    def get_repository(self, owner: str, name: str) -> RemoteRepository:
        url = self._make_url(f"/repos/{owner}/{name}")
        ctx = f"repository[{owner}/{name}]"
        resp = self._with_two_factor(lambda otp: self.session.get(url, otp=otp), ctx)
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp)
        if not isinstance(data, dict):
            raise ApiError(f"{ctx}: expected object response", context=ctx)
        return self._parse_repository(data)

    def get_branches(self, repository: RemoteRepository) -> List[Branch]:
        url = self._make_url(f"/repos/{repository.owner}/{repository.name}/branches")
        ctx = f"branches[{repository.full_name}]"
        ref = repository.ref
        branches: List[Branch] = []

        def fetch_page(page_url: str, params: Optional[Dict[str, Any]]) -> requests.Response:
            return self._with_two_factor(
                lambda otp: self.session.get(page_url, params=params, otp=otp), ctx
            )

        pages = self.session.iter_pages(url, params={"per_page": self.per_page}, fetch=fetch_page)
        for resp in pages:
            self._ensure_ok(resp, ctx)
            data = self._json_any(resp)
            if not isinstance(data, list):
                raise ApiError(f"{ctx}: expected list response", context=ctx)
            for item in data:
                if not isinstance(item, dict):
                    continue
                branch_name = str(item.get("name") or "").strip()
                if branch_name:
                    branches.append(Branch(name=branch_name, repository=ref))
        log.debug("Loaded %d branches for %s", len(branches), repository.full_name)
        return branches

    def create_pull_request(
        self,
        *,
        active_repository: LocalRepository,
        target_repository: RepositoryRef,
        source: Branch,
        target: Branch,
        title: str,
        body: str,
    ) -> PullRequestRef:
        url = self._make_url(f"/repos/{target_repository.owner}/{target_repository.name}/pulls")
        ctx = f"create_pull_request[{target_repository.full_name}]"
        payload = {
            "title": title,
            "body": body,
            "head": self.head_label(source, target_repository),
            "base": target.name,
        }
        log.info(
            "Creating pull request %s -> %s on %s (from %s)",
            payload["head"],
            payload["base"],
            target_repository.full_name,
            active_repository.path,
        )
        resp = self._with_two_factor(
            lambda otp: self.session.post(url, json_body=payload, otp=otp), ctx
        )
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp)
        if not isinstance(data, dict) or "number" not in data:
            raise ApiError(f"{ctx}: response is missing the pull request number", context=ctx)
        return PullRequestRef(
            number=int(data["number"]),
            url=str(data.get("html_url") or ""),
            title=str(data.get("title") or title),
        )

    # ---------- Helpers ----------

    @staticmethod
    def head_label(source: Branch, target_repository: RepositoryRef) -> str:
        """Return ``branch`` for same-repository PRs, ``owner:branch`` across forks."""
        if source.repository == target_repository:
            return source.name
        return f"{source.repository.owner}:{source.name}"

    def _make_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _with_two_factor(
        self,
        send: Callable[[Optional[str]], requests.Response],
        ctx: str,
    ) -> requests.Response:
        """Send once; on a two-factor challenge ask for a code and resend once."""
        resp = send(None)
        challenge = self._two_factor_error(resp, ctx)
        if challenge is None:
            return resp
        if self.two_factor_challenge is None:
            raise challenge
        code = self.two_factor_challenge(challenge)
        if not code:
            raise challenge
        log.debug("%s: retrying with two-factor code", ctx)
        return send(code.strip())

    @staticmethod
    def _two_factor_error(resp: requests.Response, ctx: str) -> Optional[TwoFactorRequiredError]:
        if resp.status_code != 401:
            return None
        headers = getattr(resp, "headers", None) or {}
        otp = str(headers.get(OTP_HEADER) or "")
        if not otp.lower().startswith("required"):
            return None
        otp_type = otp.split(";", 1)[1].strip() if ";" in otp else ""
        return TwoFactorRequiredError(f"{ctx}: two-factor code required", otp_type=otp_type, context=ctx)

    @classmethod
    def _parse_repository(cls, data: Dict[str, Any]) -> RemoteRepository:
        owner_info = data.get("owner") or {}
        owner = str(owner_info.get("login") or "").strip() if isinstance(owner_info, dict) else ""
        name = str(data.get("name") or "").strip()
        if not owner or not name:
            full_name = str(data.get("full_name") or "")
            if "/" in full_name:
                owner, name = full_name.split("/", 1)
        if not owner or not name:
            raise ApiError("repository: response is missing owner/name")
        parent_data = data.get("parent")
        parent = cls._parse_repository(parent_data) if isinstance(parent_data, dict) else None
        return RemoteRepository(
            owner=owner,
            name=name,
            clone_url=str(data.get("clone_url") or data.get("html_url") or ""),
            default_branch_name=str(data.get("default_branch") or "master"),
            is_fork=bool(data.get("fork", False)),
            parent=parent,
        )

    @staticmethod
    def _json_any(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON in response") from exc

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        status = resp.status_code
        if 200 <= status < 300:
            return
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        if status == 404:
            raise ApiNotFoundError(message, payload=payload, context=ctx)
        if status == 422:
            errors = extract_field_errors(payload)
            raise ApiValidationError(
                first_string(payload) or message,
                errors=errors,
                payload=payload,
                context=ctx,
            )
        if 400 <= status < 500:
            raise ApiClientError(
                message,
                status=status,
                hint=extract_error_hint(payload),
                payload=payload,
                context=ctx,
            )
        if status >= 500:
            raise ApiServerError(message, status=status, payload=payload, context=ctx)
        raise ApiError(message, status=status, payload=payload, context=ctx)


__all__ = ["DEFAULT_API_URL", "GitHubRestAdapter"]
