"""Typed failures raised by the GitHub adapters.

GitHub error bodies look like::

    {"message": "Validation Failed",
     "errors": [{"resource": "PullRequest", "code": "custom", "message": "..."}],
     "documentation_url": "https://docs.github.com/..."}

The helpers below read that shape without ever raising themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

_MESSAGE_KEYS = ("message", "detail", "error", "title")
_PAYLOAD_TEXT_LIMIT = 400


class ApiError(RuntimeError):
    """Base class for GitHub API failures; ``status`` is ``None`` for transport errors."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx."""


class ApiServerError(ApiError):
    """HTTP 5xx."""


class ApiTimeoutError(ApiError):
    """No response: timeout or connection failure after all retries."""


class ApiNotFoundError(ApiClientError):
    """HTTP 404; GitHub also answers 404 for private resources without access."""

    def __init__(self, message: str, *, payload: Any = None, context: Optional[str] = None) -> None:
        super().__init__(message, status=404, payload=payload, context=context)


@dataclass(frozen=True)
class ApiFieldError:
    """One entry of the ``errors`` array in a 422 response."""

    resource: str = ""
    field: str = ""
    code: str = ""
    message: str = ""


class ApiValidationError(ApiClientError):
    """HTTP 422 carrying field-level validation errors."""

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[Iterable[ApiFieldError]] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message, status=422, payload=payload, context=context)
        self.errors: List[ApiFieldError] = list(errors or ())

    def first_message(self) -> Optional[str]:
        return next((error.message for error in self.errors if error.message), None)


class TwoFactorRequiredError(ApiClientError):
    """HTTP 401 with ``X-GitHub-OTP: required``; a one-time code is needed."""

    def __init__(self, message: str, *, otp_type: str = "", context: Optional[str] = None) -> None:
        super().__init__(message, status=401, context=context)
        self.otp_type = otp_type


def parse_error_payload(resp: Any) -> Any:
    """Return the decoded JSON body, else a clipped text body, else ``None``."""
    try:
        return resp.json()
    except Exception:
        text = getattr(resp, "text", "") or ""
        return text[:_PAYLOAD_TEXT_LIMIT] or None


def first_string(payload: Any) -> Optional[str]:
    """First non-blank text under a message-like key, searching nested values."""
    if isinstance(payload, str):
        return payload.strip() or None
    if isinstance(payload, list):
        return next(filter(None, (first_string(item) for item in payload)), None)
    if isinstance(payload, dict):
        for key in _MESSAGE_KEYS:
            found = first_string(payload.get(key))
            if found:
                return found
    return None


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    return f"{ctx}: {detail} (HTTP {status})" if detail else f"{ctx}: HTTP {status}"


def extract_field_errors(payload: Any) -> List[ApiFieldError]:
    """Read GitHub's ``errors`` array into typed entries.

    Entries may be objects or bare strings; objects without ``message`` get
    one composed from ``field`` and ``code`` so every entry is presentable.
    """
    raw_errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(raw_errors, list):
        return []
    parsed: List[ApiFieldError] = []
    for item in raw_errors:
        if isinstance(item, str):
            if item.strip():
                parsed.append(ApiFieldError(message=item.strip()))
        elif isinstance(item, dict):
            entry = ApiFieldError(
                resource=str(item.get("resource") or ""),
                field=str(item.get("field") or ""),
                code=str(item.get("code") or ""),
                message=str(item.get("message") or "").strip(),
            )
            if not entry.message and (entry.field or entry.code):
                composed = " ".join(part for part in (entry.field, entry.code) if part)
                entry = ApiFieldError(entry.resource, entry.field, entry.code, composed)
            parsed.append(entry)
    return parsed


def extract_error_hint(payload: Any) -> Optional[str]:
    """Short extra detail for a 4xx: field messages, else the documentation link."""
    messages = [error.message for error in extract_field_errors(payload) if error.message]
    if messages:
        return "; ".join(messages[:3])
    if isinstance(payload, dict):
        link = payload.get("documentation_url")
        if isinstance(link, str) and link.strip():
            return link.strip()
    return None


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiFieldError",
    "ApiNotFoundError",
    "ApiServerError",
    "ApiTimeoutError",
    "ApiValidationError",
    "TwoFactorRequiredError",
    "build_error_message",
    "extract_error_hint",
    "extract_field_errors",
    "first_string",
    "parse_error_payload",
]
