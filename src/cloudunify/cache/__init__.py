from .entries import FileEntry, FolderEntry, FolderKey
from .file_system import CachedFileSystem
from .preloader import FolderPreloader

__all__ = [
    "CachedFileSystem",
    "FileEntry",
    "FolderEntry",
    "FolderKey",
    "FolderPreloader",
]
