"""Predicate filtering and field sorting over merged listings."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from cloudunify.models import UnifiedFile

from .options import SearchOptions, SortDirection

SORT_FIELDS: dict[str, Callable[[UnifiedFile], Any]] = {
    "name": lambda f: f.name.casefold(),
    "size": lambda f: f.size,
    "created_at": lambda f: f.created_at,
    "createdat": lambda f: f.created_at,
    "modified_at": lambda f: f.modified_at,
    "modifiedat": lambda f: f.modified_at,
}


def search_files(
    list_files: Callable[[str], list[UnifiedFile]],
    search_term: str,
    options: Optional[SearchOptions] = None,
) -> list[UnifiedFile]:
    """
    List options.path with list_files, then filter and sort.

    Returns a new list; the listing passed in is never modified.
    """
    options = options or SearchOptions()
    files = list_files(options.path)
    matched = filter_files(files, search_term, options)
    if options.sort_by:
        return sort_files(matched, options.sort_by, options.sort_direction)
    return matched


def filter_files(
    files: Iterable[UnifiedFile],
    search_term: str,
    options: SearchOptions,
) -> list[UnifiedFile]:
    term = (search_term or "").casefold()
    file_types = [t.casefold() for t in options.file_types if t]

    def matches(f: UnifiedFile) -> bool:
        if term and term not in f.name.casefold():
            return False
        if file_types:
            mime = f.mime_type.casefold()
            if not any(t in mime for t in file_types):
                return False
        if options.start_date is not None and f.modified_at < options.start_date:
            return False
        if options.end_date is not None and f.modified_at > options.end_date:
            return False
        if options.folders_only and not f.is_folder:
            return False
        if options.files_only and f.is_folder:
            return False
        return True

    return [f for f in files if matches(f)]


def sort_files(
    files: Iterable[UnifiedFile],
    sort_by: str,
    direction: SortDirection = SortDirection.ASCENDING,
) -> list[UnifiedFile]:
    """Stable sort by a named field; unknown field names sort by name."""
    key = SORT_FIELDS.get(sort_by.lower(), SORT_FIELDS["name"])
    return sorted(files, key=key, reverse=direction is SortDirection.DESCENDING)
