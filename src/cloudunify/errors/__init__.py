"""Public error exports for cloudunify."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    CloudUnifyError,
    ConflictError,
    DestinationProviderNotFoundError,
    FileNotFoundError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidStateError,
    NetworkError,
    NotConnectedError,
    NotFoundError,
    PartialFailureError,
    PathNotFoundError,
    PermissionError,
    ProviderNotFoundError,
    QuotaExceededError,
    RateLimitError,
    SourceFileNotFoundError,
    SourceProviderNotFoundError,
    map_http_error,
)

__all__ = [
    "CloudUnifyError",
    "InvalidStateError",
    "NotConnectedError",
    "ProviderNotFoundError",
    "SourceProviderNotFoundError",
    "DestinationProviderNotFoundError",
    "NotFoundError",
    "PathNotFoundError",
    "FileNotFoundError",
    "SourceFileNotFoundError",
    "PartialFailureError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "HttpErrorInfo",
    "map_http_error",
]
