"""Adapter and use-case wiring for the command line runtime.

This module owns lazy construction of the GitHub adapter and the working-copy
accessor from values in :class:`prflow.viewmodels.settings_vm.SettingsVM`.
It is invoked by ``prflow.app.main`` before any network action.
"""

from __future__ import annotations

from typing import Optional

from ..adapters.github_mock import demo_api
from ..adapters.github_rest import GitHubRestAdapter
from ..adapters.local_git import LocalGitRepository
from ..domain.entities import LocalRepository
from ..domain.ports import GitHubApiPort, NotificationPort, TwoFactorChallenge
from ..utils.main_context import MainContext
from ..viewmodels.pr_creation_vm import PullRequestCreationVM, StateListener
from ..viewmodels.settings_vm import SettingsVM


class AppController:
    """Create and cache runtime adapters from settings state.

    Call chain:
        ``prflow.app.main`` creates one instance per command, calls
        ``ensure_ready`` and then ``build_creation_vm``.
    """

    def __init__(
        self,
        settings_vm: SettingsVM,
        *,
        repo_path: str = ".",
        offline: bool = False,
    ) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings state containing API URL, token, and timeouts.
            repo_path: Working copy the pull request is created from.
            offline: Use the in-memory GitHub mock instead of the REST API.
        """
        self.settings_vm = settings_vm
        self.repo_path = repo_path
        self.offline = offline
        self._github_adapter: Optional[GitHubApiPort] = None
        self._working_copy: Optional[LocalGitRepository] = None
        self._active_repository: Optional[LocalRepository] = None

    @property
    def github_adapter(self) -> Optional[GitHubApiPort]:
        """Return the cached adapter used for repository/branch/PR requests."""
        return self._github_adapter

    @property
    def working_copy(self) -> Optional[LocalGitRepository]:
        return self._working_copy

    def reset(self) -> None:
        """Drop all cached adapters so the next ``ensure_ready`` rebuilds them."""
        self._github_adapter = None
        self._working_copy = None
        self._active_repository = None

    def ensure_ready(self, two_factor_challenge: Optional[TwoFactorChallenge] = None) -> bool:
        """Ensure adapters are available for network operations.

        Returns:
            ``True`` when dependencies are available, ``False`` when settings
            are invalid.

        Raises:
            GitCommandError: If the working copy has no usable remote.
        """
        if self._github_adapter and self._working_copy:
            return True
        if not self.settings_vm.is_valid():
            return False

        if self._working_copy is None:
            self._working_copy = LocalGitRepository(
                self.repo_path, remote=self.settings_vm.remote_name
            )
        if self._github_adapter is None:
            if self.offline:
                self._github_adapter = demo_api(self.active_repository())
            else:
                self._github_adapter = GitHubRestAdapter(
                    self.settings_vm.api_base_url,
                    token=self.settings_vm.effective_token() or None,
                    request_timeout_s=self.settings_vm.request_timeout_s,
                    retries=self.settings_vm.retries,
                    per_page=self.settings_vm.per_page,
                    two_factor_challenge=two_factor_challenge,
                )
        return True

    def active_repository(self) -> LocalRepository:
        if self._working_copy is None:
            raise RuntimeError("AppController.ensure_ready() must be called first.")
        if self._active_repository is None:
            self._active_repository = self._working_copy.active_repository()
        return self._active_repository

    def build_creation_vm(
        self,
        *,
        context: MainContext,
        notifications: NotificationPort,
        on_state_changed: Optional[StateListener] = None,
    ) -> PullRequestCreationVM:
        """Wire a pull request creation view model for the working copy."""
        if self._github_adapter is None or self._working_copy is None:
            raise RuntimeError("AppController.ensure_ready() must be called first.")
        return PullRequestCreationVM(
            api=self._github_adapter,
            active_repository=self.active_repository(),
            template_port=self._working_copy,
            notifications=notifications,
            context=context,
            on_state_changed=on_state_changed,
        )


__all__ = ["AppController"]
