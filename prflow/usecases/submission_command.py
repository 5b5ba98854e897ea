"""Exclusive, gated command that submits a pull request draft.

The command never raises for collaborator failures: every call resolves to a
``SubmissionSucceeded`` or a classified ``SubmissionFailed`` so the workflow
stays usable for a retry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from prflow.domain import messages
from prflow.domain.entities import (
    FailureKind,
    PullRequestRef,
    SubmissionFailed,
    SubmissionOutcome,
    SubmissionSucceeded,
)
from prflow.domain.ports import NotificationPort
from prflow.domain.urls import pull_request_url
from prflow.usecases.create_pull_request import CreatePullRequest, SubmissionRequest
from prflow.usecases.error_mapping import classify_submission_error
from prflow.utils.main_context import MainContext

log = logging.getLogger(__name__)

ALREADY_EXECUTING = "A pull request is already being created."
GATE_CLOSED = "The pull request is not ready to be created."


def _always() -> bool:
    return True


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback used for hooks."""


def format_success_message(request: SubmissionRequest, pull_request: PullRequestRef) -> str:
    """Build "<source> opened against <owner>/<name>#<n> at <browse-url>/pull/<n>"."""
    target_repo = request.target.repository
    url = pull_request.url
    if target_repo.clone_url:
        try:
            url = pull_request_url(target_repo.clone_url, pull_request.number)
        except ValueError:
            log.debug("Cannot derive a browse URL from %r", target_repo.clone_url)
    return messages.format_pr_created(
        source=request.source.display_name,
        target=f"{target_repo.owner}/{target_repo.name}#{pull_request.number}",
        url=url,
    )


class SubmissionCommand:
    """Run at most one pull request creation at a time, only while the gate is open."""

    def __init__(
        self,
        create_pr: CreatePullRequest,
        context: MainContext,
        notifications: NotificationPort,
        *,
        can_execute: Callable[[], bool] = _always,
        on_executing_changed: Callable[[bool], None] = _noop,
    ) -> None:
        """Bind the use case, coordination context, and notification sink.

        Args:
            create_pr: Blocking use case run on the background executor.
            context: Coordination context used to leave and re-enter the loop.
            notifications: Sink receiving success and error messages.
            can_execute: Gate evaluated before every execution.
            on_executing_changed: Called on the loop when ``executing`` flips.
        """
        self.create_pr = create_pr
        self.context = context
        self.notifications = notifications
        self._gate = can_execute
        self._on_executing_changed = on_executing_changed or _noop
        self._executing = False

    @property
    def executing(self) -> bool:
        return self._executing

    def can_execute(self) -> bool:
        return not self._executing and bool(self._gate())

    async def execute(self, request: SubmissionRequest) -> SubmissionOutcome:
        if self._executing:
            log.debug("Submission rejected: another submission is in flight")
            return SubmissionFailed(FailureKind.REJECTED, ALREADY_EXECUTING)
        if not self._gate():
            log.debug("Submission rejected: gate closed")
            return SubmissionFailed(FailureKind.REJECTED, GATE_CLOSED)

        self._set_executing(True)
        try:
            pull_request = await self.context.run_in_background(self.create_pr, request)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error("Error creating pull request", exc_info=exc)
            failure = classify_submission_error(exc)
            self.notifications.show_error(failure.message)
            return failure
        finally:
            self._set_executing(False)

        message = format_success_message(request, pull_request)
        log.info("Created pull request #%s on %s", pull_request.number, request.target.repository)
        self.notifications.show_message(message)
        return SubmissionSucceeded(pull_request=pull_request, message=message)

    def _set_executing(self, value: bool) -> None:
        if self._executing == value:
            return
        self._executing = value
        self._on_executing_changed(value)


__all__ = ["SubmissionCommand", "format_success_message"]
