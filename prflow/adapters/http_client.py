"""``requests`` transport shared by the GitHub REST adapter.

Owns the things every GitHub call needs: auth and media-type headers, the
optional two-factor header, retry of transport failures, and ``Link``-header
pagination. Status handling stays with the adapter.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

import requests
from requests import exceptions as req_exc

from prflow.adapters.api_errors import ApiTimeoutError

GITHUB_JSON = "application/vnd.github+json"
USER_AGENT = "prflow"

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout (seconds) per request and retries after the first attempt."""

    request_timeout_s: int = 10
    retries: int = 2


class RetryingSession:
    """``requests.Session`` wrapper that adds GitHub headers and retries.

    Only timeouts and connection errors are retried; any HTTP response,
    including 5xx, is returned to the caller as is.
    """

    def __init__(self, token: Optional[str], cfg: HttpConfig) -> None:
        self.session = requests.Session()
        self.token = token
        self.cfg = cfg

    def headers(self, *, accept: str = GITHUB_JSON, otp: Optional[str] = None) -> Dict[str, str]:
        headers = {"Accept": accept, "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        if otp:
            headers["X-GitHub-OTP"] = otp
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        accept: str = GITHUB_JSON,
        timeout: Optional[int] = None,
        otp: Optional[str] = None,
    ) -> requests.Response:
        return self._send(
            "get",
            url,
            params=params,
            headers=self.headers(accept=accept, otp=otp),
            timeout=timeout or self.cfg.request_timeout_s,
        )

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
        otp: Optional[str] = None,
    ) -> requests.Response:
        headers = self.headers(otp=otp)
        data = None
        if json_body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(json_body)
        return self._send(
            "post",
            url,
            data=data,
            headers=headers,
            timeout=timeout or self.cfg.request_timeout_s,
        )

    def iter_pages(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        max_pages: int = 50,
        fetch: Optional[Callable[[str, Optional[Dict[str, Any]]], requests.Response]] = None,
    ) -> Iterator[requests.Response]:
        """Yield one response per page, following ``Link: rel="next"``.

        ``params`` go on the first request only; next-page URLs embed them.
        ``fetch(url, params)`` replaces the plain ``get`` for callers that wrap
        each request, e.g. to answer a two-factor challenge.
        """
        fetch = fetch or (lambda page_url, page_params: self.get(page_url, params=page_params))
        next_url: Optional[str] = url
        page_params = params
        for _ in range(max_pages):
            if not next_url:
                return
            resp = fetch(next_url, page_params)
            yield resp
            links = getattr(resp, "links", None) or {}
            next_url = (links.get("next") or {}).get("url")
            page_params = None
        log.warning("Stopped paginating %s after %d pages", url, max_pages)

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Issue one request, retrying transport failures ``cfg.retries`` times.

        Raises:
            ApiTimeoutError: If every attempt timed out or failed to connect.
        """
        send = getattr(self.session, method)
        attempts = max(0, self.cfg.retries) + 1
        last_exc: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return send(url, **kwargs)
            except (req_exc.Timeout, req_exc.ConnectionError) as exc:
                last_exc = exc
                log.debug("%s %s failed (attempt %d/%d): %s", method.upper(), url, attempt, attempts, exc)
        raise ApiTimeoutError(
            f"Timeout contacting {url}", context=f"{method.upper()} {url}"
        ) from last_exc


__all__ = ["GITHUB_JSON", "HttpConfig", "RetryingSession"]
