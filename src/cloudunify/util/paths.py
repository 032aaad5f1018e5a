"""'/'-separated path helpers shared by adapters, the cache, and search."""

from __future__ import annotations

ROOT: str = "/"


def normalize_path(path: str | None) -> str:
    """
    Normalize a cloud path.

    - None/empty -> "/"
    - backslashes become "/"
    - duplicate and trailing separators are dropped
    - the result always starts with "/"
    """
    if not path:
        return ROOT
    parts = split_path(path)
    if not parts:
        return ROOT
    return ROOT + "/".join(parts)


def split_path(path: str) -> list[str]:
    """Split a path into its non-empty segments ("/" -> [])."""
    cleaned = path.replace("\\", "/")
    return [p for p in cleaned.split("/") if p and p != "."]


def join_path(parent: str, name: str) -> str:
    """Join a folder path and a child name into a normalized path."""
    return normalize_path(f"{normalize_path(parent)}/{name}")


def parent_path(path: str) -> str:
    """Return the parent folder of a path ("/" is its own parent)."""
    parts = split_path(path)
    if len(parts) <= 1:
        return ROOT
    return ROOT + "/".join(parts[:-1])


def is_under(path: str, prefix: str) -> bool:
    """True if path equals prefix or lies below it (segment aware)."""
    p = normalize_path(path)
    pre = normalize_path(prefix)
    if pre == ROOT:
        return True
    return p == pre or p.startswith(pre + "/")
