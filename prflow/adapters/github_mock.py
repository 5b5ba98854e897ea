from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from prflow.domain.entities import (
    Branch,
    LocalRepository,
    PullRequestRef,
    RemoteRepository,
    RepositoryRef,
)
from prflow.domain.ports import GitHubApiPort
from prflow.domain.urls import pull_request_url

from .api_errors import ApiFieldError, ApiNotFoundError, ApiValidationError

RepoKey = Tuple[str, str]


def _key(owner: str, name: str) -> RepoKey:
    # GitHub resolves owner and name case-insensitively.
    return owner.casefold(), name.casefold()


@dataclass
class GitHubApiMock(GitHubApiPort):
    """Offline substitute for ``GitHubRestAdapter`` with deterministic responses."""

    next_number: int = 1
    reject_with: Optional[str] = None
    """When set, ``create_pull_request`` fails with this 422 field message."""

    def __post_init__(self) -> None:
        self._repositories: Dict[RepoKey, RemoteRepository] = {}
        self._branches: Dict[RepoKey, List[str]] = {}
        self.created: List[Dict[str, object]] = []
        self.calls: List[Tuple[str, str]] = []

    # ---------- Seeding ----------

    def add_repository(
        self,
        repository: RemoteRepository,
        branches: Sequence[str] = (),
    ) -> RemoteRepository:
        key = _key(repository.owner, repository.name)
        self._repositories[key] = repository
        self._branches[key] = list(branches) or [repository.default_branch_name]
        if repository.parent is not None:
            parent_key = _key(repository.parent.owner, repository.parent.name)
            self._repositories.setdefault(parent_key, repository.parent)
            self._branches.setdefault(parent_key, [repository.parent.default_branch_name])
        return repository

    def set_branches(self, owner: str, name: str, branches: Sequence[str]) -> None:
        self._branches[_key(owner, name)] = list(branches)

    # ---------- GitHubApiPort ----------

    def get_repository(self, owner: str, name: str) -> RemoteRepository:
        self.calls.append(("get_repository", f"{owner}/{name}"))
        repository = self._repositories.get(_key(owner, name))
        if repository is None:
            raise ApiNotFoundError(f"repository[{owner}/{name}]: Not Found (HTTP 404)")
        return repository

    def get_branches(self, repository: RemoteRepository) -> List[Branch]:
        self.calls.append(("get_branches", repository.full_name))
        key = _key(repository.owner, repository.name)
        if key not in self._branches:
            raise ApiNotFoundError(f"branches[{repository.full_name}]: Not Found (HTTP 404)")
        ref = repository.ref
        return [Branch(name=name, repository=ref) for name in self._branches[key]]

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
        self.calls.append(("create_pull_request", target_repository.full_name))
        if self.reject_with:
            raise ApiValidationError(
                "Validation Failed",
                errors=[ApiFieldError(resource="PullRequest", code="custom", message=self.reject_with)],
            )
        number = self.next_number
        self.next_number += 1
        self.created.append(
            {
                "number": number,
                "repository": target_repository.full_name,
                "head": source.display_name,
                "base": target.name,
                "title": title,
                "body": body,
            }
        )
        url = pull_request_url(target_repository.clone_url, number) if target_repository.clone_url else ""
        return PullRequestRef(number=number, url=url, title=title)


def demo_api(local: LocalRepository) -> GitHubApiMock:
    """Build a mock seeded with the local repository and its current branch."""
    api = GitHubApiMock()
    clone_url = local.clone_url or f"https://github.com/{local.owner}/{local.name}.git"
    repository = RemoteRepository(
        owner=local.owner,
        name=local.name,
        clone_url=clone_url,
        default_branch_name="main",
    )
    branches = ["main"]
    if local.current_branch and local.current_branch not in branches:
        branches.append(local.current_branch)
    api.add_repository(repository, branches)
    return api


__all__ = ["GitHubApiMock", "demo_api"]
