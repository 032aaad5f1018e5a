"""Cache keys and entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from cloudunify.models import UnifiedFile


@dataclass(frozen=True, slots=True)
class FolderKey:
    """
    Folder listing key.

    provider_id None means "all providers"; it never collides with a real
    provider whose id happens to be the string "all".
    """

    path: str
    provider_id: Optional[str] = None

    @property
    def is_all_providers(self) -> bool:
        return self.provider_id is None


@dataclass(frozen=True, slots=True)
class FolderEntry:
    key: FolderKey
    files: tuple[UnifiedFile, ...]
    cached_at: float

    def is_live(self, now: float, ttl_sec: float) -> bool:
        return now - self.cached_at < ttl_sec


@dataclass(frozen=True, slots=True)
class FileEntry:
    file: UnifiedFile
    cached_at: float

    def is_live(self, now: float, ttl_sec: float) -> bool:
        return now - self.cached_at < ttl_sec
