"""Domain package exports for value objects and ports."""

from .entities import (
    Branch,
    Draft,
    FailureKind,
    LocalRepository,
    PullRequestRef,
    RemoteRepository,
    RepositoryRef,
    SubmissionFailed,
    SubmissionOutcome,
    SubmissionSucceeded,
    ValidationResult,
)
from .errors import BranchLoadError, RepositoryLoadError
from .ports import UseCaseError

__all__ = [
    "Branch",
    "BranchLoadError",
    "Draft",
    "FailureKind",
    "LocalRepository",
    "PullRequestRef",
    "RemoteRepository",
    "RepositoryLoadError",
    "RepositoryRef",
    "SubmissionFailed",
    "SubmissionOutcome",
    "SubmissionSucceeded",
    "UseCaseError",
    "ValidationResult",
]
