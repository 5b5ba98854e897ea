from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from prflow.domain.entities import Branch, LocalRepository, PullRequestRef
from prflow.domain.ports import GitHubApiPort, UseCaseError


@dataclass(frozen=True)
class SubmissionRequest:
    """Everything needed to open one pull request."""

    active_repository: LocalRepository
    source: Branch
    target: Branch
    title: str
    description: Optional[str] = None


@dataclass
class CreatePullRequest:
    """Open a pull request from ``source`` into ``target`` on the target's repository.

    Adapter errors propagate unchanged so the caller can classify them.
    """

    api: GitHubApiPort

    def __call__(self, request: SubmissionRequest) -> PullRequestRef:
        title = request.title or ""
        if not title:
            raise UseCaseError("TITLE_EMPTY", "Pull request title is empty.")
        return self.api.create_pull_request(
            active_repository=request.active_repository,
            target_repository=request.target.repository,
            source=request.source,
            target=request.target,
            title=title,
            body=request.description or "",
        )


__all__ = ["CreatePullRequest", "SubmissionRequest"]
