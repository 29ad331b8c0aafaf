"""Public error exports for kubesync."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    ApiErrorInfo,
    ApplyError,
    AuthError,
    ConfigError,
    ConflictError,
    ExportError,
    InvalidArgumentError,
    KubeSyncError,
    ManifestError,
    NetworkError,
    NotFoundError,
    ParseError,
    PermissionError,
    RateLimitError,
    SyncError,
    map_api_error,
)

__all__ = [
    "KubeSyncError",
    "SyncError",
    "ExportError",
    "ParseError",
    "ApplyError",
    "ManifestError",
    "ConfigError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "ApiErrorInfo",
    "map_api_error",
]
