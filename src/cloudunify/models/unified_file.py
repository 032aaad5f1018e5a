"""Provider-independent file/folder model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class UnifiedFile:
    """
    Represents a file or folder on any connected backend.

    Notes:
        - `id` is provider-scoped; only (id, provider_id) is globally unique.
        - `path` is the item's own normalized path and always starts with "/".
    """

    id: str
    name: str
    path: str
    size: int
    created_at: datetime
    modified_at: datetime
    mime_type: str
    is_folder: bool
    provider_id: str
    provider_name: str

    web_view_link: Optional[str] = None
    thumbnail_url: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        """Stable global identity: (id, provider_id)."""
        return (self.id, self.provider_id)
