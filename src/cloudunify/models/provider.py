"""Provider registration models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ProviderType(str, Enum):
    """Backend type tag stored alongside each provider handle."""

    GOOGLE_DRIVE = "google_drive"
    ONEDRIVE = "onedrive"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """Account details reported by a backend."""

    display_name: Optional[str] = None
    email: Optional[str] = None


@dataclass(slots=True)
class ProviderHandle:
    """
    A registered provider account.

    Lifecycle:
        - created on first successful authentication
        - kept (DISCONNECTED) across disconnects so it can be reconnected
          with the same id
        - destroyed only on explicit removal
    """

    id: str
    display_name: str
    type_tag: ProviderType
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    account_email: Optional[str] = None

    user_id: Optional[str] = None
    added_at: Optional[datetime] = None
    last_connected_at: Optional[datetime] = None

    @property
    def is_connected(self) -> bool:
        return self.connection_state is ConnectionState.CONNECTED
