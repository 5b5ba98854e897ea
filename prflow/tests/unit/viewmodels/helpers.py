from __future__ import annotations

import threading
from typing import List, Optional, Sequence

from prflow.adapters.github_mock import GitHubApiMock
from prflow.domain.entities import Branch, LocalRepository, RemoteRepository
from prflow.utils.main_context import MainContext
from prflow.viewmodels.pr_creation_vm import PullRequestCreationVM


class RecordingNotifications:
    def __init__(self) -> None:
        self.errors: List[str] = []
        self.messages: List[str] = []

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def show_message(self, message: str) -> None:
        self.messages.append(message)


class StaticTemplates:
    def __init__(self, template: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.template = template
        self.error = error
        self.calls = 0

    def get_pull_request_template(self, repository: LocalRepository) -> Optional[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.template


class GatedApi(GitHubApiMock):
    """Mock whose ``create_pull_request`` blocks until ``release`` is set."""

    def __post_init__(self) -> None:
        super().__post_init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def create_pull_request(self, **kwargs):
        self.entered.set()
        self.release.wait(timeout=5)
        return super().create_pull_request(**kwargs)


def make_repository(
    owner: str = "octo",
    name: str = "demo",
    default: str = "main",
    *,
    parent: Optional[RemoteRepository] = None,
) -> RemoteRepository:
    return RemoteRepository(
        owner=owner,
        name=name,
        clone_url=f"https://github.com/{owner}/{name}.git",
        default_branch_name=default,
        is_fork=parent is not None,
        parent=parent,
    )


def make_local(
    owner: str = "octo",
    name: str = "demo",
    branch: Optional[str] = "feature",
) -> LocalRepository:
    return LocalRepository(
        owner=owner,
        name=name,
        clone_url=f"https://github.com/{owner}/{name}.git",
        current_branch=branch,
        path="/work/demo",
    )


def make_api(
    repository: RemoteRepository,
    branches: Sequence[str] = ("main", "feature"),
    parent_branches: Sequence[str] = (),
    api: Optional[GitHubApiMock] = None,
) -> GitHubApiMock:
    api = api if api is not None else GitHubApiMock()
    api.add_repository(repository, branches)
    if repository.parent is not None and parent_branches:
        api.set_branches(repository.parent.owner, repository.parent.name, parent_branches)
    return api


def make_vm(
    api: GitHubApiMock,
    local: LocalRepository,
    *,
    template: Optional[str] = None,
    notifications: Optional[RecordingNotifications] = None,
    context: Optional[MainContext] = None,
) -> PullRequestCreationVM:
    return PullRequestCreationVM(
        api=api,
        active_repository=local,
        template_port=StaticTemplates(template),
        notifications=notifications or RecordingNotifications(),
        context=context or MainContext(max_workers=2),
    )


def branch(name: str, owner: str = "octo", repo: str = "demo") -> Branch:
    return Branch(name=name, repository=make_repository(owner, repo).ref)


__all__ = [
    "GatedApi",
    "RecordingNotifications",
    "StaticTemplates",
    "branch",
    "make_api",
    "make_local",
    "make_repository",
    "make_vm",
]
