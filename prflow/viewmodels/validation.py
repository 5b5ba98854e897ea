"""Title and branch-pair validators for the pull request draft.

Both validators are pure functions of the current draft snapshot. The
``ValidationEngine`` keeps the latest results and reports when the branch
result newly becomes a displayable error, so the notification fires once per
transition rather than on every recomputation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from prflow.domain import messages
from prflow.domain.entities import Branch, Draft, ValidationResult


def validate_title(title: Optional[str]) -> ValidationResult:
    if not title:
        return ValidationResult.failure(messages.TITLE_EMPTY)
    return ValidationResult.success()


def validate_branches(
    initialized: bool,
    source: Optional[Branch],
    target: Optional[Branch],
) -> ValidationResult:
    # Inert while loading so the form shows no errors before branches arrive.
    if not initialized:
        return ValidationResult.unvalidated()
    if source is None:
        return ValidationResult.failure(messages.SOURCE_BRANCH_MISSING)
    if source == target:
        return ValidationResult.failure(messages.SOURCE_AND_TARGET_SAME)
    return ValidationResult.success()


@dataclass(frozen=True)
class ValidationSnapshot:
    title: ValidationResult
    branch: ValidationResult

    @property
    def is_valid(self) -> bool:
        return self.title.is_valid and self.branch.is_valid


class ValidationEngine:
    """Recompute both validators and report branch-error transitions."""

    def __init__(self, on_branch_error: Optional[Callable[[str], None]] = None) -> None:
        self.on_branch_error = on_branch_error
        self._current = ValidationSnapshot(
            title=validate_title(None),
            branch=ValidationResult.unvalidated(),
        )

    @property
    def current(self) -> ValidationSnapshot:
        return self._current

    @property
    def title(self) -> ValidationResult:
        return self._current.title

    @property
    def branch(self) -> ValidationResult:
        return self._current.branch

    def recompute(self, draft: Draft, *, initialized: bool) -> ValidationSnapshot:
        previous_branch = self._current.branch
        snapshot = ValidationSnapshot(
            title=validate_title(draft.title),
            branch=validate_branches(initialized, draft.source_branch, draft.target_branch),
        )
        self._current = snapshot

        branch = snapshot.branch
        if (
            not branch.is_valid
            and branch.display_error
            and branch != previous_branch
            and self.on_branch_error is not None
        ):
            self.on_branch_error(branch.message)
        return snapshot

    def can_submit(self, *, busy: bool) -> bool:
        return self._current.title.is_valid and self._current.branch.is_valid and not busy


__all__ = ["ValidationEngine", "ValidationSnapshot", "validate_branches", "validate_title"]
