"""Exception hierarchy and HTTP error mapping for cloudunify."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence


class CloudUnifyError(Exception):
    """
    Base exception for cloudunify.

    Attributes:
        details: Optional structured information (e.g., HTTP status, provider id).
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


class InvalidStateError(CloudUnifyError):
    """Raised when the library is used in an invalid state (e.g., after close)."""


class NotConnectedError(CloudUnifyError):
    """Raised when an operation is attempted on a disconnected provider."""


class ProviderNotFoundError(CloudUnifyError):
    """Raised when a provider id is not present in the registry."""


class SourceProviderNotFoundError(ProviderNotFoundError):
    """Raised when the source provider of a cross-provider copy is unknown."""


class DestinationProviderNotFoundError(ProviderNotFoundError):
    """Raised when the destination provider of a cross-provider copy is unknown."""


class NotFoundError(CloudUnifyError):
    """Raised when a backend resource is not found (HTTP 404)."""


class PathNotFoundError(NotFoundError):
    """Raised when an adapter cannot resolve a '/'-separated path."""


class FileNotFoundError(NotFoundError):
    """Raised when an adapter cannot resolve a file id."""


class SourceFileNotFoundError(FileNotFoundError):
    """Raised when the source file of a cross-provider copy does not exist."""


class PartialFailureError(CloudUnifyError):
    """
    Raised on request when a fan-out operation had failing providers.

    Fan-out operations never raise this on their own; callers opt in via
    FanOutResult.raise_for_failures().
    """

    def __init__(
        self,
        message: str,
        *,
        failures: Sequence[Any] = (),
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause)
        self.failures = list(failures)


class AuthError(CloudUnifyError):
    """Raised when authentication/refresh fails (HTTP 401)."""


class PermissionError(CloudUnifyError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(CloudUnifyError):
    """Raised when request arguments are invalid (HTTP 400, etc.)."""


class ConflictError(CloudUnifyError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(CloudUnifyError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(CloudUnifyError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason, 507)."""


class NetworkError(CloudUnifyError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(CloudUnifyError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to cloudunify exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
    "insufficientStorage",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> CloudUnifyError:
    """
    Map an HTTP error from any backend to a cloudunify exception.

    Policy:
        - 400 -> InvalidArgumentError
        - 401 -> AuthError
        - 403 -> PermissionError (default), but QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 507 -> QuotaExceededError
        - 5xx -> ApiError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)
    if info.status_code == 507:
        return QuotaExceededError(message, details=details, cause=cause)
    if 500 <= info.status_code <= 599:
        return ApiError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
