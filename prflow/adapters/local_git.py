"""Working-copy accessor and PR template lookup backed by the ``git`` CLI.

Only the branch name and remote URL are read; no object-model access.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from prflow.domain.entities import LocalRepository
from prflow.domain.ports import TemplatePort, WorkingCopyPort
from prflow.domain.urls import parse_remote_url

log = logging.getLogger(__name__)

TEMPLATE_DIRS: Sequence[str] = (".github", "", "docs")
TEMPLATE_NAMES: Sequence[str] = ("pull_request_template.md", "pull_request_template")


class GitCommandError(RuntimeError):
    """A ``git`` invocation failed or the working copy is unusable."""


class LocalGitRepository(WorkingCopyPort, TemplatePort):
    """Reads branch and remote information from a local clone."""

    def __init__(self, path: str | Path = ".", *, remote: str = "origin") -> None:
        self.path = Path(path)
        self.remote = remote

    def active_repository(self) -> LocalRepository:
        """Return owner/name (from the remote URL) and the checked-out branch.

        Raises:
            GitCommandError: If the remote is missing or its URL is not ``owner/name``.
        """
        remote_url = self._remote_url()
        try:
            owner, name = parse_remote_url(remote_url)
        except ValueError as exc:
            raise GitCommandError(str(exc)) from exc
        return LocalRepository(
            owner=owner,
            name=name,
            clone_url=remote_url,
            current_branch=self._current_branch(),
            path=str(self.path),
        )

    def get_pull_request_template(self, repository: LocalRepository) -> Optional[str]:
        root = Path(repository.path or self.path)
        for candidate in self._template_candidates(root):
            try:
                text = candidate.read_text(encoding="utf-8")
            except OSError as exc:
                log.warning("Could not read PR template %s: %s", candidate, exc)
                continue
            log.debug("Using PR template %s", candidate)
            return text
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _run_git(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise GitCommandError(f"Could not run git: {exc}") from exc

    def _current_branch(self) -> Optional[str]:
        result = self._run_git("rev-parse", "--abbrev-ref", "HEAD")
        if result.returncode != 0:
            return None
        branch = result.stdout.strip()
        if branch == "HEAD":
            return None
        return branch or None

    def _remote_url(self) -> str:
        result = self._run_git("remote", "get-url", self.remote)
        if result.returncode != 0:
            raise GitCommandError(f"Remote '{self.remote}' not found in repository {self.path}")
        url = result.stdout.strip()
        if not url:
            raise GitCommandError(f"Remote '{self.remote}' has no URL configured")
        return url

    @staticmethod
    def _template_candidates(root: Path) -> List[Path]:
        found: List[Path] = []
        for directory in TEMPLATE_DIRS:
            folder = root / directory if directory else root
            if not folder.is_dir():
                continue
            by_lower = {entry.name.lower(): entry for entry in folder.iterdir() if entry.is_file()}
            for name in TEMPLATE_NAMES:
                entry = by_lower.get(name)
                if entry is not None:
                    found.append(entry)
        return found


__all__ = ["GitCommandError", "LocalGitRepository"]
