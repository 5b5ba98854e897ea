"""Helpers for turning git remote URLs into repository identities and browse URLs."""

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

# git@github.com:owner/name.git
_SCP_LIKE = re.compile(r"^(?:[\w.\-]+@)?(?P<host>[\w.\-]+):(?P<path>[^/].*)$")


def _strip_git_suffix(path: str) -> str:
    path = path.strip().strip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path


def _split_remote(url: str) -> Optional[Tuple[str, str]]:
    """Return ``(host, path)`` for http(s), ssh:// and scp-like remotes."""
    text = (url or "").strip()
    if not text:
        return None
    if "://" in text:
        parsed = urlparse(text)
        if not parsed.hostname:
            return None
        return parsed.hostname, _strip_git_suffix(parsed.path)
    match = _SCP_LIKE.match(text)
    if match:
        return match.group("host"), _strip_git_suffix(match.group("path"))
    return None


def parse_remote_url(url: str) -> Tuple[str, str]:
    """Extract ``(owner, name)`` from a git remote URL.

    Raises:
        ValueError: If the URL does not contain an ``owner/name`` path.
    """
    parts = _split_remote(url)
    if parts is None:
        raise ValueError(f"Unsupported remote URL: {url!r}")
    _, path = parts
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        raise ValueError(f"Remote URL has no owner/name path: {url!r}")
    return segments[-2], segments[-1]


def repository_browse_url(clone_url: str) -> str:
    """Return the ``https://host/owner/name`` page for a clone URL."""
    parts = _split_remote(clone_url)
    if parts is None:
        raise ValueError(f"Unsupported clone URL: {clone_url!r}")
    host, path = parts
    return f"https://{host}/{path}"


def append_path(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def pull_request_url(clone_url: str, number: int) -> str:
    return append_path(repository_browse_url(clone_url), f"pull/{number}")


__all__ = ["append_path", "parse_remote_url", "pull_request_url", "repository_browse_url"]
