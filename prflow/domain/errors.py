"""Domain-level error types for use-case and adapter mapping.

Load failures cross layer boundaries as these ``UseCaseError`` subclasses so
view models never see transport-specific exceptions.
"""

from __future__ import annotations

from .ports import UseCaseError


class RepositoryLoadError(UseCaseError):
    """Remote repository record could not be fetched; terminal for a snapshot."""

    def __init__(self, message: str):
        super().__init__("REPOSITORY_LOAD_FAILED", message)


class BranchLoadError(UseCaseError):
    """Branch list for a repository could not be fetched."""

    def __init__(self, message: str):
        super().__init__("BRANCH_LOAD_FAILED", message)


__all__ = ["BranchLoadError", "RepositoryLoadError"]
