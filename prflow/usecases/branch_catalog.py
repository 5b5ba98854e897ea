from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from prflow.domain import messages
from prflow.domain.entities import Branch, RemoteRepository
from prflow.domain.errors import BranchLoadError
from prflow.domain.ports import GitHubApiPort
from prflow.usecases.error_mapping import map_api_error
from prflow.utils.main_context import MainContext

log = logging.getLogger(__name__)


class BranchCatalog:
    """Load the branches a pull request can target as one ordered batch.

    For forks the parent's branches come first, then the fork's own, each in
    host order. Nothing is delivered until both lists are complete.
    """

    def __init__(self, api: GitHubApiPort, context: MainContext) -> None:
        self.api = api
        self.context = context

    async def load(self, repository: RemoteRepository) -> List[Branch]:
        sources: List[RemoteRepository] = []
        if repository.is_fork and repository.parent is not None:
            sources.append(repository.parent)
        sources.append(repository)

        fetches = [self._fetch(source) for source in sources]
        batches = await asyncio.gather(*fetches)

        branches: List[Branch] = []
        for batch in batches:
            branches.extend(batch)
        log.debug("Branch catalog for %s: %d branches", repository.full_name, len(branches))
        return branches

    async def _fetch(self, repository: RemoteRepository) -> List[Branch]:
        try:
            return list(await self.context.run_in_background(self.api.get_branches, repository))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error("Failed to load branches for %s", repository.full_name, exc_info=exc)
            reason = map_api_error(exc, default_code="BRANCH_LOAD_FAILED").message
            raise BranchLoadError(
                messages.BRANCH_LOAD_FAILED.format(repository=repository.full_name, reason=reason)
            ) from exc


def reconcile_target(
    branches: Sequence[Branch],
    current: Optional[Branch],
    repository: RemoteRepository,
) -> Optional[Branch]:
    """Return the target branch to keep after a fresh branch list arrives.

    ``current`` survives when it is in ``branches``. Otherwise the fork-aware
    default is used; when that default is absent too, the repository's own
    default is preferred over a branch the host did not report.
    """
    if current is None:
        return None
    if current in branches:
        return current
    preferred = repository.default_target_branch()
    if preferred in branches:
        return preferred
    own_default = repository.default_branch
    if own_default in branches:
        return own_default
    return preferred


__all__ = ["BranchCatalog", "reconcile_target"]
