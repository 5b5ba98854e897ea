"""User-facing message templates.

Wording lives here so use cases and view models only fill placeholders.
"""

TITLE_EMPTY = "Please enter a title for the Pull Request"
SOURCE_BRANCH_MISSING = "Source branch doesn't exist remotely, have you pushed it?"
SOURCE_AND_TARGET_SAME = "Source and target branch cannot be the same"
PR_CREATED = "{source} opened against {target} at {url}"
REPOSITORY_LOAD_FAILED = "Could not load repository {repository}: {reason}"
BRANCH_LOAD_FAILED = "Could not load branches for {repository}: {reason}"
UNEXPECTED_ERROR = "Unexpected error."


def format_pr_created(source: str, target: str, url: str) -> str:
    return PR_CREATED.format(source=source, target=target, url=url)


__all__ = [
    "BRANCH_LOAD_FAILED",
    "PR_CREATED",
    "REPOSITORY_LOAD_FAILED",
    "SOURCE_AND_TARGET_SAME",
    "SOURCE_BRANCH_MISSING",
    "TITLE_EMPTY",
    "UNEXPECTED_ERROR",
    "format_pr_created",
]
