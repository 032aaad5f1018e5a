"""Public model exports for cloudunify."""

from __future__ import annotations

from .provider import AccountInfo, ConnectionState, ProviderHandle, ProviderType
from .results import FanOutResult, ProviderOutcome
from .storage_info import StorageInfo
from .unified_file import UnifiedFile

__all__ = [
    "UnifiedFile",
    "AccountInfo",
    "ConnectionState",
    "ProviderHandle",
    "ProviderType",
    "StorageInfo",
    "ProviderOutcome",
    "FanOutResult",
]
