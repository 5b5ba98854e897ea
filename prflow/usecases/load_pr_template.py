from __future__ import annotations

import logging
from dataclasses import dataclass

from prflow.domain.entities import LocalRepository
from prflow.domain.ports import TemplatePort

log = logging.getLogger(__name__)


@dataclass
class LoadPullRequestTemplate:
    """Return the working copy's PR template text, or ``""`` when there is none.

    A failing lookup is logged and treated as "no template" so the draft
    description always ends up non-null.
    """

    template_port: TemplatePort

    def __call__(self, repository: LocalRepository) -> str:
        try:
            template = self.template_port.get_pull_request_template(repository)
        except Exception:
            log.warning("Could not load pull request template for %s", repository.path, exc_info=True)
            return ""
        return template or ""
