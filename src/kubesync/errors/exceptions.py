"""Exception hierarchy and Kubernetes API error mapping for kubesync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class KubeSyncError(Exception):
    """
    Base exception for kubesync.

    Attributes:
        details: Optional structured information (e.g., HTTP status, resource id).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class SyncError(KubeSyncError):
    """Base for errors that abort a reconciliation pass."""


class ExportError(SyncError):
    """Raised when the cluster could not produce a live-state snapshot."""


class ParseError(SyncError):
    """Raised when exported live-state bytes could not be parsed."""


class ApplyError(SyncError):
    """
    Raised by the cluster when applying a SyncDef failed.

    details["failures"] maps resource id -> error message.
    """


class ManifestError(KubeSyncError):
    """Raised when manifests are malformed or define a resource twice."""


class ConfigError(KubeSyncError):
    """Raised for invalid configuration values."""


class AuthError(KubeSyncError):
    """Raised when cluster credentials cannot be loaded or are rejected (HTTP 401)."""


class PermissionError(KubeSyncError):
    """Raised when access is denied (HTTP 403)."""


class InvalidArgumentError(KubeSyncError):
    """Raised when the API rejects a request body (HTTP 400/422)."""


class NotFoundError(KubeSyncError):
    """Raised when a resource is not found (HTTP 404)."""


class ConflictError(KubeSyncError):
    """Raised when a conflict occurs (HTTP 409)."""


class RateLimitError(KubeSyncError):
    """Raised when rate-limited (HTTP 429)."""


class NetworkError(KubeSyncError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(KubeSyncError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class ApiErrorInfo:
    """Lightweight API error information for mapping to kubesync exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_api_error(
    info: ApiErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> KubeSyncError:
    """
    Map a Kubernetes API error to a kubesync exception.

    Policy:
        - 400/422 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError
        - 404 -> NotFoundError
        - 409 -> ConflictError
        - 429 -> RateLimitError
        - otherwise (including 5xx) -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code in (400, 422):
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 409:
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
