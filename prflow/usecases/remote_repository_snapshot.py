from __future__ import annotations

import asyncio
import logging
from typing import Optional

from prflow.domain import messages
from prflow.domain.entities import Branch, RemoteRepository
from prflow.domain.errors import RepositoryLoadError
from prflow.domain.ports import GitHubApiPort
from prflow.usecases.error_mapping import map_api_error
from prflow.utils.main_context import MainContext

log = logging.getLogger(__name__)


class RemoteRepositorySnapshot:
    """Fetch the remote repository record once and share it with every consumer.

    The fetch starts on the first ``load()`` and is memoized as one future.
    A failure is terminal: it is logged once and every current and later
    ``load()`` raises the same ``RepositoryLoadError``.
    """

    def __init__(
        self,
        api: GitHubApiPort,
        context: MainContext,
        owner: str,
        name: str,
    ) -> None:
        self.api = api
        self.context = context
        self.owner = owner
        self.name = name
        self._future: Optional[asyncio.Future] = None
        self._value: Optional[RemoteRepository] = None

    @property
    def value(self) -> Optional[RemoteRepository]:
        """Resolved repository, or ``None`` before a successful load."""
        return self._value

    async def load(self) -> RemoteRepository:
        if self._future is None:
            self._future = asyncio.ensure_future(self._fetch())
        # A cancelled consumer must not cancel the shared fetch.
        return await asyncio.shield(self._future)

    def default_target_branch(self) -> Optional[Branch]:
        if self._value is None:
            return None
        return self._value.default_target_branch()

    def cancel(self) -> None:
        if self._future is not None and not self._future.done():
            self._future.cancel()

    async def _fetch(self) -> RemoteRepository:
        full_name = f"{self.owner}/{self.name}"
        try:
            repository = await self.context.run_in_background(
                self.api.get_repository, self.owner, self.name
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.error("Failed to load repository %s", full_name, exc_info=exc)
            reason = map_api_error(exc, default_code="REPOSITORY_LOAD_FAILED").message
            raise RepositoryLoadError(
                messages.REPOSITORY_LOAD_FAILED.format(repository=full_name, reason=reason)
            ) from exc
        self._value = repository
        log.debug(
            "Loaded repository %s (fork=%s, default=%s)",
            repository.full_name,
            repository.is_fork,
            repository.default_branch_name,
        )
        return repository


__all__ = ["RemoteRepositorySnapshot"]
