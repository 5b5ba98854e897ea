"""Translate adapter errors into user-facing errors and submission failures."""

from __future__ import annotations

from typing import Optional

from prflow.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiNotFoundError,
    ApiServerError,
    ApiTimeoutError,
    ApiValidationError,
    TwoFactorRequiredError,
    extract_error_hint,
)
from prflow.domain import messages
from prflow.domain.entities import FailureKind, SubmissionFailed
from prflow.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by an adapter call.
        default_code: Code used when the exception is not an API error.
        default_message: Message used instead of ``str(exc)`` for unknown errors.

    Returns:
        UseCaseError carrying a presentable message.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, TwoFactorRequiredError):
        return UseCaseError("TWO_FACTOR_REQUIRED", "Two-factor authentication code required.")
    if isinstance(exc, ApiNotFoundError):
        return UseCaseError("NOT_FOUND", "Not found (or no access).")
    if isinstance(exc, ApiValidationError):
        return UseCaseError("INVALID_REQUEST", exc.first_message() or str(exc))
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        if status in (401, 403):
            return UseCaseError("AUTH_FAILED", "Authentication failed / token invalid.")
        hint = exc.hint or extract_error_hint(getattr(exc, "payload", None))
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, hint))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "GitHub error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))

    message = default_message or str(exc) or messages.UNEXPECTED_ERROR
    return UseCaseError(default_code, message)


def classify_submission_error(exc: BaseException) -> SubmissionFailed:
    """Turn a create-PR failure into a classified outcome.

    Structured validation errors surface their first field-level message;
    everything else surfaces its own message.
    """
    if isinstance(exc, ApiValidationError):
        first = exc.first_message()
        return SubmissionFailed(FailureKind.API_VALIDATION, first or str(exc) or messages.UNEXPECTED_ERROR)
    message = str(exc) or exc.__class__.__name__
    if isinstance(exc, ApiTimeoutError):
        return SubmissionFailed(FailureKind.NETWORK, message)
    if isinstance(exc, ApiError):
        return SubmissionFailed(FailureKind.API, message)
    return SubmissionFailed(FailureKind.UNEXPECTED, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["classify_submission_error", "map_api_error"]
