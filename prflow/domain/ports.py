from __future__ import annotations
from typing import Callable, List, Optional, Protocol

from .entities import Branch, LocalRepository, PullRequestRef, RemoteRepository, RepositoryRef


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class GitHubApiPort(Protocol):
    """Repository, branch, and pull request operations against the host API.

    Implementations block; callers run them on a background executor.
    """

    def get_repository(self, owner: str, name: str) -> RemoteRepository: ...
    def get_branches(self, repository: RemoteRepository) -> List[Branch]: ...  # host order
    def create_pull_request(
        self,
        *,
        active_repository: LocalRepository,
        target_repository: RepositoryRef,
        source: Branch,
        target: Branch,
        title: str,
        body: str,
    ) -> PullRequestRef: ...


class TemplatePort(Protocol):
    """Pull request template lookup for the active working copy."""

    def get_pull_request_template(self, repository: LocalRepository) -> Optional[str]: ...


class WorkingCopyPort(Protocol):
    """Accessor for the active local repository (branch, owner, name)."""

    def active_repository(self) -> LocalRepository: ...


class NotificationPort(Protocol):
    """User-facing notification sink."""

    def show_error(self, message: str) -> None: ...
    def show_message(self, message: str) -> None: ...


# Receives the adapter's two-factor error and returns a code, or None to abort.
TwoFactorChallenge = Callable[[Exception], Optional[str]]
