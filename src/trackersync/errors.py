"""Error taxonomy & redaction.

Exporters never surface raw exceptions for per-entity failures; they turn
them into human-readable strings on ``ExportResult.errors``. This module is
the single place that decides how those strings look:

- classify_error(exc) -> ErrorInfo
- redact(text) -> str
- describe_failure(action, exc) -> str
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_SENSITIVE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"ghp_[A-Za-z0-9]{20,40}"),  # GitHub classic tokens
    re.compile(r"github_pat_\w{20,}"),  # GitHub fine-grained tokens
    re.compile(r"lin_api_[A-Za-z0-9]{20,}"),  # Linear personal API keys
    re.compile(r"ATATT[A-Za-z0-9_\-=]{20,}"),  # Atlassian API tokens
    re.compile(r"(?i)(authorization:\s*(?:basic|bearer)\s+)[A-Za-z0-9+/=._\-]+"),
]

_REDACTION_PLACEHOLDER = "<redacted>"

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422
HTTP_RATE_LIMITED = 429


class TrackerAPIError(RuntimeError):
    """Raised when a tracker REST/GraphQL API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


class VerificationError(RuntimeError):
    """Connection or authentication check failed before any write."""


class NoPhasesFoundError(LookupError):
    pass


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    transient: bool = False
    details: dict[str, Any] | None = None


def redact(text: str) -> str:
    if not text:
        return text
    redacted = text
    for pat in _SENSITIVE_PATTERNS:
        if pat.groups:
            redacted = pat.sub(lambda m: m.group(1) + _REDACTION_PLACEHOLDER, redacted)
        else:
            redacted = pat.sub(_REDACTION_PLACEHOLDER, redacted)
    return redacted


def classify_error(exc: BaseException) -> ErrorInfo:
    """Best-effort classification of an exception.

    HTTP status codes carried by ``TrackerAPIError`` take precedence over
    message keywords.
    """
    msg = str(exc) if exc else ""
    low = msg.lower()
    name = exc.__class__.__name__
    status = getattr(exc, "status", None)
    details = {"status": status} if status is not None else None

    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN) or isinstance(exc, VerificationError):
        return ErrorInfo("auth", redact(msg), name, details=details)
    if status == HTTP_RATE_LIMITED or "rate limit" in low or "secondary rate" in low:
        return ErrorInfo("rate_limit", redact(msg), name, transient=True, details=details)
    if status == HTTP_NOT_FOUND:
        return ErrorInfo("not_found", redact(msg), name, details=details)
    if status == HTTP_UNPROCESSABLE or "validation failed" in low:
        return ErrorInfo("validation", redact(msg), name, details=details)
    if any(k in low for k in ("timeout", "timed out", "connection reset", "temporarily unavailable")):
        return ErrorInfo("network", redact(msg), name, transient=True, details=details)
    return ErrorInfo("generic", redact(msg), name, details=details)


def describe_failure(action: str, exc: BaseException) -> str:
    info = classify_error(exc)
    return f"Failed to {action}: {info.message or info.original_type}"


__all__ = [
    "ErrorInfo",
    "NoPhasesFoundError",
    "TrackerAPIError",
    "VerificationError",
    "classify_error",
    "describe_failure",
    "redact",
]
