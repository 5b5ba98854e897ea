"""View model for creating a pull request from the active working copy.

Call context:
    ``prflow.app.controller.AppController.build_creation_vm`` wires one
    instance per dialog/command run. Views bind to ``subscribe`` and the
    ``title``/``description``/``target_branch`` setters, then await
    ``initialize()`` and ``create_pull_request()`` on the coordination loop.

State model:
    ``Draft`` and ``WorkflowState`` are immutable snapshots. Every write goes
    through ``_update``, which recomputes validation and busy as pure
    functions of the new snapshot and publishes a ``CreationSnapshot``.
    Writes only happen on the loop; background results are dropped once the
    workflow has been disposed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from prflow.domain.entities import (
    Branch,
    Draft,
    FailureKind,
    LocalRepository,
    RemoteRepository,
    SubmissionFailed,
    SubmissionOutcome,
    ValidationResult,
)
from prflow.domain.ports import GitHubApiPort, NotificationPort, TemplatePort, UseCaseError
from prflow.usecases.branch_catalog import BranchCatalog, reconcile_target
from prflow.usecases.create_pull_request import CreatePullRequest, SubmissionRequest
from prflow.usecases.load_pr_template import LoadPullRequestTemplate
from prflow.usecases.remote_repository_snapshot import RemoteRepositorySnapshot
from prflow.usecases.submission_command import GATE_CLOSED, SubmissionCommand
from prflow.utils.main_context import MainContext, WorkflowScope
from .validation import ValidationEngine, ValidationSnapshot
from .workflow_state import WorkflowState

StateListener = Callable[["CreationSnapshot"], None]
_UNSET = object()


@dataclass(frozen=True)
class CreationSnapshot:
    """Everything a view needs to render the creation form at one instant."""

    draft: Draft
    workflow: WorkflowState
    repository: Optional[RemoteRepository]
    branches: Tuple[Branch, ...]
    validation: ValidationSnapshot
    can_submit: bool

    @property
    def busy(self) -> bool:
        return self.workflow.busy


class PullRequestCreationVM:
    """Reconcile repository, branches, and template into one validated draft."""

    def __init__(
        self,
        *,
        api: GitHubApiPort,
        active_repository: LocalRepository,
        template_port: TemplatePort,
        notifications: NotificationPort,
        context: MainContext,
        on_state_changed: Optional[StateListener] = None,
        repository_snapshot: Optional[RemoteRepositorySnapshot] = None,
        branch_catalog: Optional[BranchCatalog] = None,
    ) -> None:
        """Create the workflow; no I/O happens until ``initialize()``.

        Args:
            api: Host API used for repository, branches, and PR creation.
            active_repository: Working copy providing owner/name and source branch.
            template_port: PR template lookup for the working copy.
            notifications: Sink for branch errors and submission outcomes.
            context: Coordination context (loop + background executor).
            on_state_changed: Optional listener receiving every new snapshot.
            repository_snapshot: Override for the memoized repository loader.
            branch_catalog: Override for the branch loader.
        """
        self._log = logging.getLogger(__name__)
        self.active_repository = active_repository
        self.notifications = notifications
        self.context = context
        self._scope = WorkflowScope("pr-creation")
        self._listeners: List[StateListener] = []
        if on_state_changed is not None:
            self._listeners.append(on_state_changed)

        self.repository_snapshot = repository_snapshot or RemoteRepositorySnapshot(
            api, context, active_repository.owner, active_repository.name
        )
        self.branch_catalog = branch_catalog or BranchCatalog(api, context)
        self._load_template = LoadPullRequestTemplate(template_port)
        self._validation = ValidationEngine(on_branch_error=self.notifications.show_error)
        self.command = SubmissionCommand(
            CreatePullRequest(api),
            context,
            notifications,
            can_execute=lambda: self.can_submit,
            on_executing_changed=self._on_executing_changed,
        )

        self._draft = Draft(source_branch=active_repository.current_branch_ref())
        self._workflow = WorkflowState()
        self._repository: Optional[RemoteRepository] = None
        self._branches: Tuple[Branch, ...] = ()
        self._initialize_task: Optional[asyncio.Future] = None
        self.load_error: Optional[UseCaseError] = None
        self._validation.recompute(self._draft, initialized=False)

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------
    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` for snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> CreationSnapshot:
        return CreationSnapshot(
            draft=self._draft,
            workflow=self._workflow,
            repository=self._repository,
            branches=self._branches,
            validation=self._validation.current,
            can_submit=self.can_submit,
        )

    @property
    def alive(self) -> bool:
        return self._scope.alive

    @property
    def draft(self) -> Draft:
        return self._draft

    @property
    def workflow(self) -> WorkflowState:
        return self._workflow

    @property
    def repository(self) -> Optional[RemoteRepository]:
        return self._repository

    @property
    def branches(self) -> Tuple[Branch, ...]:
        return self._branches

    @property
    def source_branch(self) -> Optional[Branch]:
        return self._draft.source_branch

    @property
    def title(self) -> Optional[str]:
        return self._draft.title

    @title.setter
    def title(self, value: Optional[str]) -> None:
        self._update(draft=replace(self._draft, title=value))

    @property
    def description(self) -> Optional[str]:
        return self._draft.description

    @description.setter
    def description(self, value: Optional[str]) -> None:
        self._update(draft=replace(self._draft, description=value))

    @property
    def target_branch(self) -> Optional[Branch]:
        return self._draft.target_branch

    @target_branch.setter
    def target_branch(self, value: Optional[Branch]) -> None:
        self._update(draft=replace(self._draft, target_branch=value))

    @property
    def initialized(self) -> bool:
        return self._workflow.initialized

    @property
    def busy(self) -> bool:
        return self._workflow.busy

    @property
    def executing(self) -> bool:
        return self._workflow.executing

    @property
    def title_validation(self) -> ValidationResult:
        return self._validation.title

    @property
    def branch_validation(self) -> ValidationResult:
        return self._validation.branch

    @property
    def can_submit(self) -> bool:
        return self._validation.can_submit(busy=self._workflow.busy)

    def find_branch(self, name: str) -> Optional[Branch]:
        """Return the first loaded branch called ``name`` (parent branches win for forks)."""
        for branch in self._branches:
            if branch.name == name:
                return branch
        return None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def initialize(self) -> bool:
        """Load repository, template, and branches; True once initialized.

        A repository or branch load failure is reported through the error
        channel, kept in ``load_error``, and leaves the workflow busy.
        Every call shares the first run and resolves to its result.
        """
        if self._initialize_task is None:
            self._initialize_task = asyncio.ensure_future(self._scope.run(self._initialize()))
        result = await asyncio.shield(self._initialize_task)
        return bool(result)

    async def create_pull_request(self) -> Optional[SubmissionOutcome]:
        """Submit the current draft; ``None`` if the workflow was disposed meanwhile."""
        draft = self._draft
        if draft.source_branch is None or draft.target_branch is None:
            return SubmissionFailed(FailureKind.REJECTED, GATE_CLOSED)
        request = SubmissionRequest(
            active_repository=self.active_repository,
            source=draft.source_branch,
            target=draft.target_branch,
            title=draft.title or "",
            description=draft.description,
        )
        return await self._scope.run(self.command.execute(request))

    def dispose(self) -> None:
        """Stop observing in-flight work; later results are discarded."""
        if not self._scope.alive:
            return
        self._scope.dispose()
        self.repository_snapshot.cancel()
        self._listeners.clear()
        self._log.debug("Disposed pull request workflow for %s", self.active_repository.path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _initialize(self) -> bool:
        template_task = self._scope.spawn(self._load_description())
        try:
            repository = await self.repository_snapshot.load()
        except UseCaseError as exc:
            self._report_load_error(exc)
            return False
        self._apply_repository(repository)

        try:
            branches = await self.branch_catalog.load(repository)
        except UseCaseError as exc:
            self._report_load_error(exc)
            return False
        self._apply_branches(repository, branches)

        await template_task
        return self._workflow.initialized

    async def _load_description(self) -> None:
        template = await self.context.run_in_background(self._load_template, self.active_repository)
        if not self._scope.alive:
            return
        # Text typed while the template loaded wins over the template.
        if self._draft.description is None:
            self._update(draft=replace(self._draft, description=template or ""))

    def _apply_repository(self, repository: RemoteRepository) -> None:
        if not self._scope.alive:
            return
        self._update(
            repository=repository,
            draft=replace(self._draft, target_branch=repository.default_target_branch()),
        )

    def _apply_branches(self, repository: RemoteRepository, branches: Sequence[Branch]) -> None:
        if not self._scope.alive:
            return
        loaded = tuple(branches)
        current = self._draft.target_branch
        target = reconcile_target(loaded, current, repository)
        if target != current:
            self._log.info(
                "Target branch %s not found on %s, using %s",
                current,
                repository.full_name,
                target,
            )
        # Branches, reconciled target, and initialized land as one snapshot so
        # validators never see the stale target against the new list.
        self._update(
            branches=loaded,
            draft=replace(self._draft, target_branch=target),
            workflow=replace(self._workflow, initialized=True),
        )

    def _report_load_error(self, exc: UseCaseError) -> None:
        if not self._scope.alive:
            return
        self.load_error = exc
        self._log.warning("Pull request workflow cannot initialize: %s", exc.message)
        self.notifications.show_error(exc.message)

    def _on_executing_changed(self, executing: bool) -> None:
        self._update(workflow=replace(self._workflow, executing=executing))

    def _update(
        self,
        *,
        draft: Optional[Draft] = None,
        workflow: Optional[WorkflowState] = None,
        branches: Optional[Tuple[Branch, ...]] = None,
        repository: object = _UNSET,
    ) -> None:
        if not self._scope.alive:
            return
        if draft is not None:
            self._draft = draft
        if branches is not None:
            self._branches = branches
        if repository is not _UNSET:
            self._repository = repository  # type: ignore[assignment]
        base = workflow or self._workflow
        self._workflow = replace(
            base,
            repository_loaded=self._repository is not None,
            description_loaded=self._draft.description is not None,
        )
        self._validation.recompute(self._draft, initialized=self._workflow.initialized)
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)


__all__ = ["CreationSnapshot", "PullRequestCreationVM"]
