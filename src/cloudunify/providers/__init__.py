"""Backend adapters and the CloudProvider contract."""

from __future__ import annotations

from .base import CloudProvider
from .factory import DEFAULT_FACTORIES, ProviderFactory, create_provider
from .google_drive import GoogleDriveProvider
from .onedrive import OneDriveProvider
from .retry import RetryPolicy, call_with_retry

__all__ = [
    "CloudProvider",
    "GoogleDriveProvider",
    "OneDriveProvider",
    "ProviderFactory",
    "DEFAULT_FACTORIES",
    "create_provider",
    "RetryPolicy",
    "call_with_retry",
]
