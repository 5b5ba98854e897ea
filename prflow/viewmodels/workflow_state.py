from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkflowState:
    """Derived lifecycle flags of one pull request creation workflow.

    None of these are set by user input; the view model replaces the
    snapshot as data arrives and the submission command starts or ends.
    """

    initialized: bool = False
    """Branch list delivered; flips to True once and never resets."""
    repository_loaded: bool = False
    description_loaded: bool = False
    executing: bool = False

    @property
    def busy(self) -> bool:
        return not (
            self.initialized
            and self.repository_loaded
            and self.description_loaded
            and not self.executing
        )


__all__ = ["WorkflowState"]
