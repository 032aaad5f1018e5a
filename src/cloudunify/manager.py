"""CloudUnifyManager: provider account lifecycle over the aggregator and cache."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from cloudunify.aggregator import CloudUnify
from cloudunify.auth import Authenticator
from cloudunify.cache import CachedFileSystem
from cloudunify.config import CloudUnifyConfig
from cloudunify.errors import CloudUnifyError, ProviderNotFoundError
from cloudunify.models import ConnectionState, ProviderHandle, ProviderType
from cloudunify.providers import CloudProvider, ProviderFactory, create_provider
from cloudunify.util.ids import new_provider_id
from cloudunify.util.time import now_utc

logger = logging.getLogger(__name__)


class CloudUnifyManager:
    """
    High-level entry point: connect accounts, then use file_system.

    Handles live in memory for the lifetime of the manager. A disconnected
    handle is kept so it can be reconnected under the same provider id;
    remove_provider() destroys it and revokes the stored tokens.
    """

    def __init__(
        self,
        config: Optional[CloudUnifyConfig] = None,
        *,
        factories: Optional[dict[ProviderType, ProviderFactory]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or CloudUnifyConfig()
        self._factories = factories
        self._aggregator = CloudUnify(max_workers=self._config.fanout_max_workers)
        self._file_system = CachedFileSystem(self._aggregator, self._config, clock=clock)

        self._handles: dict[str, ProviderHandle] = {}
        self._authenticators: dict[str, Authenticator] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> CloudUnifyConfig:
        return self._config

    @property
    def aggregator(self) -> CloudUnify:
        return self._aggregator

    @property
    def file_system(self) -> CachedFileSystem:
        return self._file_system

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def start(self) -> None:
        """Start background warming of the well-known paths."""
        self._file_system.start()

    def close(self) -> None:
        """Stop background preloading. Connected providers stay registered."""
        self._file_system.close()

    def __enter__(self) -> "CloudUnifyManager":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----------------------------
    # Handles
    # ----------------------------
    def get_handle(self, provider_id: str) -> ProviderHandle:
        with self._lock:
            handle = self._handles.get(provider_id)
        if handle is None:
            raise ProviderNotFoundError(
                f"Provider with ID {provider_id} not found",
                details={"provider_id": provider_id},
            )
        return handle

    def list_handles(self) -> list[ProviderHandle]:
        with self._lock:
            return list(self._handles.values())

    def connected_handles(self) -> list[ProviderHandle]:
        return [h for h in self.list_handles() if h.is_connected]

    # ----------------------------
    # Provider lifecycle
    # ----------------------------
    def connect(
        self,
        provider_type: ProviderType,
        authenticator: Authenticator,
        user_id: str,
        *,
        display_name: Optional[str] = None,
    ) -> tuple[str, bool]:
        """
        Authenticate user_id and register a new provider account.

        Returns:
            (provider_id, success). On failure no handle is created and the
            id is not registered anywhere.
        """
        provider_id = new_provider_id()
        provider = create_provider(
            provider_type,
            provider_id,
            name=display_name,
            application_name=self._config.application_name,
            factories=self._factories,
        )
        if not self._connect_provider(provider, authenticator, user_id):
            return provider_id, False

        account = None
        try:
            account = provider.get_account_info()
        except CloudUnifyError as exc:
            logger.warning("Failed to fetch account info for %s: %s", provider_id, exc)

        now = now_utc()
        handle = ProviderHandle(
            id=provider_id,
            display_name=display_name or (account.display_name if account else None) or provider.name,
            type_tag=provider_type,
            connection_state=ConnectionState.CONNECTED,
            account_email=account.email if account else None,
            user_id=user_id,
            added_at=now,
            last_connected_at=now,
        )
        with self._lock:
            self._handles[provider_id] = handle
            self._authenticators[provider_id] = authenticator
        self._aggregator.register_provider(provider)

        logger.info("Connected %s account %s (id=%s)", provider_type.value, handle.display_name, provider_id)
        return provider_id, True

    def disconnect(self, provider_id: str) -> None:
        """Disconnect and unregister provider_id; its handle is kept."""
        handle = self.get_handle(provider_id)

        if self._aggregator.has_provider(provider_id):
            provider = self._aggregator.get_provider(provider_id)
            provider.disconnect()
            self._aggregator.unregister_provider(provider_id)
        self._file_system.invalidate_cache(provider_id=provider_id)

        handle.connection_state = ConnectionState.DISCONNECTED
        logger.info("Disconnected provider %s (id=%s)", handle.display_name, provider_id)

    def reconnect(self, provider_id: str) -> bool:
        """Connect a fresh adapter for an existing handle, keeping its id."""
        handle = self.get_handle(provider_id)
        if handle.is_connected:
            return True

        with self._lock:
            authenticator = self._authenticators[provider_id]

        provider = create_provider(
            handle.type_tag,
            provider_id,
            name=handle.display_name,
            application_name=self._config.application_name,
            factories=self._factories,
        )
        if not self._connect_provider(provider, authenticator, handle.user_id or ""):
            return False

        handle.connection_state = ConnectionState.CONNECTED
        handle.last_connected_at = now_utc()
        self._aggregator.register_provider(provider)
        logger.info("Reconnected provider %s (id=%s)", handle.display_name, provider_id)
        return True

    def remove_provider(self, provider_id: str) -> None:
        """Disconnect if needed, destroy the handle, and revoke stored tokens."""
        handle = self.get_handle(provider_id)
        if handle.is_connected or self._aggregator.has_provider(provider_id):
            self.disconnect(provider_id)

        with self._lock:
            self._handles.pop(provider_id, None)
            authenticator = self._authenticators.pop(provider_id, None)

        if authenticator is not None and handle.user_id:
            authenticator.revoke(handle.user_id)
        logger.info("Removed provider %s (id=%s)", handle.display_name, provider_id)

    # ----------------------------
    # Internals
    # ----------------------------
    def _connect_provider(
        self,
        provider: CloudProvider,
        authenticator: Authenticator,
        user_id: str,
    ) -> bool:
        try:
            token = authenticator.authenticate(user_id)
        except CloudUnifyError as exc:
            logger.warning("Authentication failed for %s (user=%s): %s", provider.name, user_id, exc)
            return False

        if not provider.connect(token):
            logger.warning("Failed to connect %s (id=%s)", provider.name, provider.id)
            return False
        return True
