"""CloudProvider: capability contract every storage backend implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from cloudunify.errors import NotConnectedError
from cloudunify.models import AccountInfo, ProviderType, StorageInfo, UnifiedFile


class CloudProvider(ABC):
    """
    Base class for backend adapters.

    Paths are '/'-separated with '/' meaning root. Adapters either resolve
    the whole path or raise PathNotFoundError.

    Every operation except connect()/disconnect() must call
    _require_connected() first, so a disconnected adapter raises
    NotConnectedError instead of touching the network.
    """

    TYPE_TAG: ProviderType
    DISPLAY_NAME: str = "cloud"

    def __init__(self, provider_id: str, *, name: Optional[str] = None) -> None:
        self._id = provider_id
        self._name = name or self.DISPLAY_NAME

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def type_tag(self) -> ProviderType:
        return self.TYPE_TAG

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True once connect() succeeded and until disconnect()."""

    @abstractmethod
    def connect(self, credential: str) -> bool:
        """Connect with an opaque bearer credential. Returns False on failure."""

    @abstractmethod
    def disconnect(self) -> None:
        """Drop the backend session. Safe to call when already disconnected."""

    @abstractmethod
    def list_files(self, path: str = "/") -> list[UnifiedFile]:
        """List the immediate children of the folder at path."""

    @abstractmethod
    def get_file(self, file_id: str) -> Optional[UnifiedFile]:
        """Return metadata for file_id, or None if it does not exist."""

    @abstractmethod
    def download_file(self, file_id: str) -> bytes:
        pass

    @abstractmethod
    def upload_file(self, content: bytes, name: str, path: str) -> UnifiedFile:
        """Upload content as `name` into the folder at path."""

    @abstractmethod
    def delete_file(self, file_id: str) -> None:
        pass

    @abstractmethod
    def move_file(self, file_id: str, new_path: str) -> UnifiedFile:
        """Move file_id into the folder at new_path."""

    @abstractmethod
    def copy_file(self, file_id: str, new_path: str) -> UnifiedFile:
        """Copy file_id into the folder at new_path."""

    @abstractmethod
    def rename_file(self, file_id: str, new_name: str) -> UnifiedFile:
        pass

    @abstractmethod
    def get_storage_info(self) -> StorageInfo:
        pass

    @abstractmethod
    def get_account_info(self) -> Optional[AccountInfo]:
        pass

    def _require_connected(self) -> None:
        if not self.is_connected:
            raise NotConnectedError(
                f"Provider {self.name} is not connected",
                details={"provider_id": self.id},
            )

    def __repr__(self) -> str:
        state = "connected" if self.is_connected else "disconnected"
        return f"<{self.__class__.__name__} id={self.id!r} name={self.name!r} {state}>"
