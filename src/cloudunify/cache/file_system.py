"""CachedFileSystem: TTL-bounded folder/file cache in front of CloudUnify."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from cloudunify.aggregator import CloudUnify
from cloudunify.config import CloudUnifyConfig
from cloudunify.errors import InvalidStateError, ProviderNotFoundError
from cloudunify.models import StorageInfo, UnifiedFile
from cloudunify.search import SearchOptions, search_files
from cloudunify.util.paths import is_under, normalize_path, parent_path

from .entries import FileEntry, FolderEntry, FolderKey
from .preloader import FolderPreloader

logger = logging.getLogger(__name__)


class CachedFileSystem:
    """
    Caches folder listings and file metadata served by a CloudUnify aggregator.

    Policy:
        - A listing older than config.cache_ttl_sec is treated as absent.
        - Warm reads never take the refresh lock. Misses are refreshed under
          one lock per instance, re-checking the cache after acquiring it, so
          concurrent misses on the same key cause a single provider round-trip.
        - Refresh failures propagate to the caller of that list_files().
        - After a refresh, up to config.preload_max_subfolders subfolders are
          warmed in the background; preload failures are only logged.
        - Writes go straight to the aggregator, then update the file cache and
          evict the folder listings they change.
        - A refresh that overlaps an invalidation or eviction returns its files
          but does not store them.
    """

    def __init__(
        self,
        aggregator: CloudUnify,
        config: Optional[CloudUnifyConfig] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._aggregator = aggregator
        self._config = config or CloudUnifyConfig()
        self._clock = clock

        self._folders: dict[FolderKey, FolderEntry] = {}
        self._files: dict[tuple[str, str], FileEntry] = {}
        self._entries_lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        # Bumped by every invalidation; a refresh that spans one is not stored.
        self._generation = 0

        self._preloader = FolderPreloader(
            self._preload_folder,
            max_subfolders=self._config.preload_max_subfolders,
            delay_sec=self._config.preload_delay_sec,
            workers=self._config.preload_workers,
        )
        self._started = False

    @property
    def aggregator(self) -> CloudUnify:
        return self._aggregator

    @property
    def config(self) -> CloudUnifyConfig:
        return self._config

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def start(self) -> bool:
        """
        Preload the well-known root paths once.

        Returns True if the startup preload was queued by this call.
        """
        if self._preloader.closed:
            raise InvalidStateError("CachedFileSystem is closed")
        if self._started:
            return False
        self._started = True
        if not self._config.preload_enabled:
            return False
        return self._preloader.schedule_paths(self._config.well_known_paths)

    def close(self) -> None:
        """Cancel pending background preloads. Cached entries stay readable."""
        self._preloader.close()

    def wait_for_preload(self, timeout: Optional[float] = None) -> bool:
        return self._preloader.wait_idle(timeout)

    def __enter__(self) -> "CachedFileSystem":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ----------------------------
    # Reads
    # ----------------------------
    def list_files(self, path: str = "/", provider_id: Optional[str] = None) -> list[UnifiedFile]:
        """
        Listing of path across all providers, or only provider_id's part of it.

        Raises:
            ProviderNotFoundError: provider_id is given but not registered.
        """
        key = FolderKey(normalize_path(path), provider_id)
        files, refreshed = self._load_folder(key)
        if refreshed:
            self._schedule_subfolder_preload(key, files)
        return list(files)

    def get_file(self, file_id: str, provider_id: str) -> Optional[UnifiedFile]:
        now = self._clock()
        with self._entries_lock:
            entry = self._files.get((file_id, provider_id))
        if entry is not None and entry.is_live(now, self._config.cache_ttl_sec):
            return entry.file

        file = self._aggregator.get_file(file_id, provider_id)
        if file is not None:
            self._remember_file(file)
        return file

    def download_file(self, file_id: str, provider_id: str) -> bytes:
        return self._aggregator.download_file(file_id, provider_id)

    def get_storage_info(self) -> list[StorageInfo]:
        return self._aggregator.get_storage_info()

    def search(self, search_term: str, options: Optional[SearchOptions] = None) -> list[UnifiedFile]:
        """Filter and sort the cached listing of options.path."""
        return search_files(self.list_files, search_term, options)

    # ----------------------------
    # Writes
    # ----------------------------
    def upload_file(self, content: bytes, name: str, path: str, provider_id: str) -> UnifiedFile:
        file = self._aggregator.upload_file(content, name, path, provider_id)
        self._remember_file(file)
        self._evict_folder(normalize_path(path))
        return file

    def delete_file(self, file_id: str, provider_id: str) -> None:
        known = self._peek_file(file_id, provider_id)
        self._aggregator.delete_file(file_id, provider_id)
        with self._entries_lock:
            self._files.pop((file_id, provider_id), None)
        if known is not None:
            self._evict_origin(known)

    def move_file(self, file_id: str, new_path: str, provider_id: str) -> UnifiedFile:
        known = self._peek_file(file_id, provider_id)
        file = self._aggregator.move_file(file_id, new_path, provider_id)
        self._remember_file(file)
        self._evict_folder(normalize_path(new_path))
        if known is not None:
            self._evict_origin(known)
        return file

    def copy_file(self, file_id: str, new_path: str, provider_id: str) -> UnifiedFile:
        file = self._aggregator.copy_file(file_id, new_path, provider_id)
        self._remember_file(file)
        self._evict_folder(normalize_path(new_path))
        return file

    def rename_file(self, file_id: str, new_name: str, provider_id: str) -> UnifiedFile:
        known = self._peek_file(file_id, provider_id)
        file = self._aggregator.rename_file(file_id, new_name, provider_id)
        self._remember_file(file)
        self._evict_folder(parent_path(file.path))
        if known is not None:
            self._evict_origin(known)
        return file

    def copy_file_between_providers(
        self,
        source_file_id: str,
        source_provider_id: str,
        destination_path: str,
        destination_provider_id: str,
    ) -> UnifiedFile:
        file = self._aggregator.copy_file_between_providers(
            source_file_id,
            source_provider_id,
            destination_path,
            destination_provider_id,
        )
        self._remember_file(file)
        self._evict_folder(normalize_path(destination_path))
        return file

    # ----------------------------
    # Invalidation
    # ----------------------------
    def invalidate_cache(self, path: Optional[str] = None, provider_id: Optional[str] = None) -> None:
        """
        Drop cached entries.

        - No arguments: clear folder and file caches.
        - path: entries at or below the path prefix.
        - provider_id: that provider's entries, plus all-provider listings
          (they contain that provider's files).
        - Both: entries matching both filters.
        """
        with self._entries_lock:
            self._generation += 1
            if path is None and provider_id is None:
                self._folders.clear()
                self._files.clear()
                logger.debug("Cleared folder and file caches")
                return

            prefix = normalize_path(path) if path is not None else None

            def folder_matches(key: FolderKey) -> bool:
                if prefix is not None and not is_under(key.path, prefix):
                    return False
                if provider_id is None or key.is_all_providers:
                    return True
                return key.provider_id == provider_id

            def file_matches(file: UnifiedFile) -> bool:
                if prefix is not None and not is_under(file.path, prefix):
                    return False
                if provider_id is not None and file.provider_id != provider_id:
                    return False
                return True

            for key in [k for k in self._folders if folder_matches(k)]:
                del self._folders[key]
            for file_key in [k for k, e in self._files.items() if file_matches(e.file)]:
                del self._files[file_key]

        logger.debug("Invalidated cache (path=%s, provider_id=%s)", path, provider_id)

    # ----------------------------
    # Internals
    # ----------------------------
    def _load_folder(self, key: FolderKey) -> tuple[tuple[UnifiedFile, ...], bool]:
        """Return (files, refreshed). refreshed is True only for the caller that fetched."""
        cached = self._live_folder(key)
        if cached is not None:
            logger.debug("Cache hit for %s (provider=%s)", key.path, key.provider_id)
            return cached, False

        with self._refresh_lock:
            cached = self._live_folder(key)
            if cached is not None:
                return cached, False

            logger.debug("Cache miss for %s (provider=%s); refreshing", key.path, key.provider_id)
            with self._entries_lock:
                generation = self._generation
            files = tuple(self._fetch(key))
            if not self._store_folder(key, files, generation):
                logger.debug("Discarding listing of %s invalidated during refresh", key.path)
        return files, True

    def _fetch(self, key: FolderKey) -> list[UnifiedFile]:
        if key.provider_id is None:
            return self._aggregator.list_all_files(key.path)

        if not self._aggregator.has_provider(key.provider_id):
            raise ProviderNotFoundError(
                f"Provider with ID {key.provider_id} not found",
                details={"provider_id": key.provider_id},
            )
        files = self._aggregator.list_all_files(key.path)
        return [f for f in files if f.provider_id == key.provider_id]

    def _live_folder(self, key: FolderKey) -> Optional[tuple[UnifiedFile, ...]]:
        now = self._clock()
        with self._entries_lock:
            entry = self._folders.get(key)
        if entry is None or not entry.is_live(now, self._config.cache_ttl_sec):
            return None
        return entry.files

    def _store_folder(self, key: FolderKey, files: tuple[UnifiedFile, ...], generation: int) -> bool:
        now = self._clock()
        with self._entries_lock:
            if generation != self._generation:
                return False
            self._folders[key] = FolderEntry(key=key, files=files, cached_at=now)
            for file in files:
                self._files[file.key] = FileEntry(file=file, cached_at=now)
        return True

    def _remember_file(self, file: UnifiedFile) -> None:
        now = self._clock()
        with self._entries_lock:
            self._files[file.key] = FileEntry(file=file, cached_at=now)

    def _peek_file(self, file_id: str, provider_id: str) -> Optional[UnifiedFile]:
        """Last known metadata regardless of age (used to find source folders)."""
        with self._entries_lock:
            entry = self._files.get((file_id, provider_id))
        return entry.file if entry is not None else None

    def _evict_folder(self, path: str) -> None:
        with self._entries_lock:
            self._generation += 1
            for key in [k for k in self._folders if k.path == path]:
                del self._folders[key]

    def _evict_origin(self, known: UnifiedFile) -> None:
        """Evict the listing that contained known, and its subtree if it is a folder."""
        self._evict_folder(parent_path(known.path))
        if known.is_folder:
            with self._entries_lock:
                self._generation += 1
                for key in [k for k in self._folders if is_under(k.path, known.path)]:
                    del self._folders[key]

    def _schedule_subfolder_preload(self, key: FolderKey, files: tuple[UnifiedFile, ...]) -> None:
        if not self._config.preload_enabled:
            return
        candidates = [
            f.path
            for f in files
            if f.is_folder and self._live_folder(FolderKey(f.path, key.provider_id)) is None
        ]
        self._preloader.schedule_subfolders(candidates, key.provider_id)

    def _preload_folder(self, path: str, provider_id: Optional[str]) -> None:
        self._load_folder(FolderKey(normalize_path(path), provider_id))
