"""CloudUnify: provider registry, concurrent fan-out, and single-provider dispatch."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from cloudunify.errors import (
    DestinationProviderNotFoundError,
    ProviderNotFoundError,
    SourceFileNotFoundError,
    SourceProviderNotFoundError,
)
from cloudunify.models import FanOutResult, ProviderOutcome, StorageInfo, UnifiedFile
from cloudunify.providers import CloudProvider
from cloudunify.search import SearchOptions, search_files
from cloudunify.util.paths import normalize_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CloudUnify:
    """
    Aggregates registered providers behind one set of file operations.

    Policy:
        - Fan-out operations (list_all_files, get_storage_info) call providers
          concurrently, wait for all of them, and drop failures from the
          merged result after logging them. They never raise for a single
          provider.
        - Single-provider operations raise ProviderNotFoundError for unknown
          ids and propagate adapter errors unchanged.
    """

    def __init__(self, *, max_workers: int = 8) -> None:
        self._providers: dict[str, CloudProvider] = {}
        self._lock = threading.Lock()
        self._max_workers = max_workers

    # ----------------------------
    # Registry
    # ----------------------------
    def register_provider(self, provider: CloudProvider) -> None:
        """Add provider to the registry. Callers must keep ids unique."""
        with self._lock:
            if provider.id in self._providers:
                logger.warning("Replacing already registered provider %s", provider.id)
            self._providers[provider.id] = provider
        logger.info("Registered provider %s (id=%s)", provider.name, provider.id)

    def unregister_provider(self, provider_id: str) -> bool:
        """Remove provider_id. Returns False (and logs) if it was not registered."""
        with self._lock:
            provider = self._providers.pop(provider_id, None)
        if provider is None:
            logger.info("Provider %s not found for unregistering", provider_id)
            return False
        logger.info("Unregistered provider %s (id=%s)", provider.name, provider_id)
        return True

    def has_provider(self, provider_id: str) -> bool:
        with self._lock:
            return provider_id in self._providers

    def provider_ids(self) -> list[str]:
        with self._lock:
            return list(self._providers)

    def get_providers(self) -> list[CloudProvider]:
        """Snapshot of the registered providers."""
        with self._lock:
            return list(self._providers.values())

    def get_provider(self, provider_id: str) -> CloudProvider:
        with self._lock:
            provider = self._providers.get(provider_id)
        if provider is None:
            raise ProviderNotFoundError(
                f"Provider with ID {provider_id} not found",
                details={"provider_id": provider_id},
            )
        return provider

    # ----------------------------
    # Fan-out
    # ----------------------------
    def list_all_files(self, path: str = "/") -> list[UnifiedFile]:
        """Merged listing of path across all connected providers."""
        merged: list[UnifiedFile] = []
        for files in self.list_all_files_detailed(path).successes:
            merged.extend(files)
        return merged

    def list_all_files_detailed(self, path: str = "/") -> FanOutResult[list[UnifiedFile]]:
        folder_path = normalize_path(path)
        providers = [p for p in self.get_providers() if p.is_connected]
        logger.debug("Listing %s from %d connected providers", folder_path, len(providers))

        result = self._fan_out(providers, lambda p: p.list_files(folder_path), "list files")
        for outcome in result.outcomes:
            if outcome.ok:
                logger.debug(
                    "Found %d files from provider %s",
                    len(outcome.value or []),
                    outcome.provider_name,
                )
        return result

    def get_storage_info(self) -> list[StorageInfo]:
        """Storage info of every registered provider that answered."""
        return self.get_storage_info_detailed().successes

    def get_storage_info_detailed(self) -> FanOutResult[StorageInfo]:
        return self._fan_out(
            self.get_providers(),
            lambda p: p.get_storage_info(),
            "get storage info",
        )

    def _fan_out(
        self,
        providers: list[CloudProvider],
        call: Callable[[CloudProvider], T],
        action: str,
    ) -> FanOutResult[T]:
        """Run call on every provider concurrently; gather all settled outcomes."""
        if not providers:
            return FanOutResult()

        workers = min(self._max_workers, len(providers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cloudunify-fanout") as executor:
            futures = [(p, executor.submit(call, p)) for p in providers]

            outcomes: list[ProviderOutcome[T]] = []
            for provider, future in futures:
                try:
                    value = future.result()
                except Exception as exc:
                    logger.warning(
                        "Failed to %s from %s (id=%s): %s",
                        action,
                        provider.name,
                        provider.id,
                        exc,
                    )
                    outcomes.append(
                        ProviderOutcome(provider_id=provider.id, provider_name=provider.name, error=exc)
                    )
                    continue
                outcomes.append(
                    ProviderOutcome(provider_id=provider.id, provider_name=provider.name, value=value)
                )

        return FanOutResult(outcomes=outcomes)

    # ----------------------------
    # Single-provider dispatch
    # ----------------------------
    def get_file(self, file_id: str, provider_id: str) -> Optional[UnifiedFile]:
        return self.get_provider(provider_id).get_file(file_id)

    def download_file(self, file_id: str, provider_id: str) -> bytes:
        return self.get_provider(provider_id).download_file(file_id)

    def upload_file(self, content: bytes, name: str, path: str, provider_id: str) -> UnifiedFile:
        return self.get_provider(provider_id).upload_file(content, name, normalize_path(path))

    def delete_file(self, file_id: str, provider_id: str) -> None:
        self.get_provider(provider_id).delete_file(file_id)

    def move_file(self, file_id: str, new_path: str, provider_id: str) -> UnifiedFile:
        return self.get_provider(provider_id).move_file(file_id, normalize_path(new_path))

    def copy_file(self, file_id: str, new_path: str, provider_id: str) -> UnifiedFile:
        return self.get_provider(provider_id).copy_file(file_id, normalize_path(new_path))

    def rename_file(self, file_id: str, new_name: str, provider_id: str) -> UnifiedFile:
        return self.get_provider(provider_id).rename_file(file_id, new_name)

    def copy_file_between_providers(
        self,
        source_file_id: str,
        source_provider_id: str,
        destination_path: str,
        destination_provider_id: str,
    ) -> UnifiedFile:
        """
        Download from the source provider and upload to the destination.

        Both providers are resolved before any transfer starts. There is no
        rollback: nothing is written on the destination until the upload
        call, and an upload failure propagates as-is.
        """
        try:
            source = self.get_provider(source_provider_id)
        except ProviderNotFoundError as exc:
            raise SourceProviderNotFoundError(
                f"Source provider with ID {source_provider_id} not found",
                details={"provider_id": source_provider_id},
                cause=exc,
            ) from exc
        try:
            destination = self.get_provider(destination_provider_id)
        except ProviderNotFoundError as exc:
            raise DestinationProviderNotFoundError(
                f"Destination provider with ID {destination_provider_id} not found",
                details={"provider_id": destination_provider_id},
                cause=exc,
            ) from exc

        content = source.download_file(source_file_id)
        source_file = source.get_file(source_file_id)
        if source_file is None:
            raise SourceFileNotFoundError(
                f"Source file with ID {source_file_id} not found",
                details={"file_id": source_file_id, "provider_id": source_provider_id},
            )

        logger.info(
            "Copying %s from %s to %s:%s",
            source_file.name,
            source.name,
            destination.name,
            destination_path,
        )
        return destination.upload_file(content, source_file.name, normalize_path(destination_path))

    # ----------------------------
    # Search
    # ----------------------------
    def search(self, search_term: str, options: Optional[SearchOptions] = None) -> list[UnifiedFile]:
        """Filter and sort the merged listing of options.path."""
        return search_files(self.list_all_files, search_term, options)
