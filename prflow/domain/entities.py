"""Domain value objects shared across adapters, use-cases, and view models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


@dataclass(frozen=True, eq=False)
class RepositoryRef:
    """Identity of a hosted repository.

    Two references are equal when owner and name match ignoring case, as the
    host resolves them; ``clone_url`` travels along for URL construction only.
    """

    owner: str
    """Account or organization login owning the repository."""
    name: str
    """Repository name without the ``.git`` suffix."""
    clone_url: str = ""
    """Clone URL as reported by the host; not part of the identity."""

    def __post_init__(self) -> None:
        if not isinstance(self.owner, str) or not self.owner.strip():
            raise ValueError("RepositoryRef owner must be a non-empty string.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("RepositoryRef name must be a non-empty string.")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name

    def _identity(self) -> Tuple[str, str]:
        return self.owner.casefold(), self.name.casefold()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RepositoryRef):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())


@dataclass(frozen=True)
class Branch:
    """Branch of a specific repository; identity is ``(name, repository)``."""

    name: str
    """Branch name as known to the host, e.g. ``main``."""
    repository: RepositoryRef
    """Repository owning the branch."""

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Branch name must be a non-empty string.")

    @property
    def display_name(self) -> str:
        return f"{self.repository.owner}:{self.name}"

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True)
class RemoteRepository:
    """Repository record fetched from the host, immutable once loaded."""

    owner: str
    name: str
    clone_url: str
    default_branch_name: str
    is_fork: bool = False
    parent: Optional["RemoteRepository"] = None
    """Upstream repository record for forks; ``None`` otherwise."""

    @property
    def ref(self) -> RepositoryRef:
        return RepositoryRef(owner=self.owner, name=self.name, clone_url=self.clone_url)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def default_branch(self) -> Branch:
        return Branch(name=self.default_branch_name, repository=self.ref)

    def default_target_branch(self) -> Branch:
        """Return the branch a new pull request targets unless the user picks one.

        Forks target their parent's default branch. A fork without a parent
        record falls back to its own default.
        """
        if self.is_fork and self.parent is not None:
            return self.parent.default_branch
        return self.default_branch


@dataclass(frozen=True)
class LocalRepository:
    """Active working copy the pull request is created from."""

    owner: str
    name: str
    clone_url: str
    current_branch: Optional[str]
    """Checked-out branch name, ``None`` on a detached HEAD."""
    path: str = "."

    @property
    def ref(self) -> RepositoryRef:
        return RepositoryRef(owner=self.owner, name=self.name, clone_url=self.clone_url)

    def current_branch_ref(self) -> Optional[Branch]:
        if not self.current_branch:
            return None
        return Branch(name=self.current_branch, repository=self.ref)


@dataclass(frozen=True)
class Draft:
    """In-progress pull request fields before submission."""

    title: Optional[str] = None
    description: Optional[str] = None
    source_branch: Optional[Branch] = None
    target_branch: Optional[Branch] = None


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validator evaluation."""

    is_valid: bool
    message: str = ""
    display_error: bool = False
    """Whether the result should be surfaced as a one-shot notification."""

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def unvalidated(cls) -> "ValidationResult":
        return cls(is_valid=True, message="", display_error=False)

    @classmethod
    def failure(cls, message: str, *, display_error: bool = True) -> "ValidationResult":
        return cls(is_valid=False, message=message, display_error=display_error)


@dataclass(frozen=True)
class PullRequestRef:
    """Pull request created on the host."""

    number: int
    url: str = ""
    title: str = ""


class FailureKind(str, Enum):
    """Classification of a submission that produced no pull request."""

    API_VALIDATION = "api_validation"
    API = "api"
    NETWORK = "network"
    UNEXPECTED = "unexpected"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SubmissionSucceeded:
    pull_request: PullRequestRef
    message: str = ""


@dataclass(frozen=True)
class SubmissionFailed:
    kind: FailureKind
    message: str = ""

    @property
    def pull_request(self) -> None:
        return None


SubmissionOutcome = Union[SubmissionSucceeded, SubmissionFailed]


__all__ = [
    "Branch",
    "Draft",
    "FailureKind",
    "LocalRepository",
    "PullRequestRef",
    "RemoteRepository",
    "RepositoryRef",
    "SubmissionFailed",
    "SubmissionOutcome",
    "SubmissionSucceeded",
    "ValidationResult",
]
