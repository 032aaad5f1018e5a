"""Search, filter and sort over aggregated listings."""

from __future__ import annotations

from .options import SearchOptions, SortDirection
from .search import SORT_FIELDS, filter_files, search_files, sort_files

__all__ = [
    "SearchOptions",
    "SortDirection",
    "SORT_FIELDS",
    "search_files",
    "filter_files",
    "sort_files",
]
