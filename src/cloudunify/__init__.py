"""cloudunify public API."""

from __future__ import annotations

import logging

from cloudunify.aggregator import CloudUnify
from cloudunify.auth import (
    AuthInfo,
    Authenticator,
    GoogleAuthenticator,
    OAuthClient,
    OneDriveAuthenticator,
)
from cloudunify.cache import CachedFileSystem, FolderKey
from cloudunify.config import CloudUnifyConfig
from cloudunify.errors import (
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
from cloudunify.manager import CloudUnifyManager
from cloudunify.models import (
    AccountInfo,
    ConnectionState,
    FanOutResult,
    ProviderHandle,
    ProviderOutcome,
    ProviderType,
    StorageInfo,
    UnifiedFile,
)
from cloudunify.providers import (
    CloudProvider,
    GoogleDriveProvider,
    OneDriveProvider,
    RetryPolicy,
    create_provider,
)
from cloudunify.search import SearchOptions, SortDirection

logging.getLogger("cloudunify").addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "CloudUnifyManager",
    "CloudUnify",
    "CachedFileSystem",
    "CloudUnifyConfig",
    "FolderKey",
    # Providers
    "CloudProvider",
    "GoogleDriveProvider",
    "OneDriveProvider",
    "RetryPolicy",
    "create_provider",
    # Auth
    "Authenticator",
    "GoogleAuthenticator",
    "OneDriveAuthenticator",
    "AuthInfo",
    "OAuthClient",
    # Models
    "UnifiedFile",
    "StorageInfo",
    "AccountInfo",
    "ProviderHandle",
    "ProviderType",
    "ConnectionState",
    "ProviderOutcome",
    "FanOutResult",
    # Search
    "SearchOptions",
    "SortDirection",
    # Errors
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
